from __future__ import annotations

import logging
from pathlib import Path


def setup_logger(
    name: str = "stratplan",
    log_file: Path | None = None,
    level: int = logging.INFO,
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger  # avoid duplicate handlers in repeated runs

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def plan_logger(component: str, log_file: Path | None = None) -> logging.Logger:
    """Logger for one stratplan component, e.g. ``plan_logger("loader")``."""
    return setup_logger(f"stratplan.{component}", log_file=log_file)
