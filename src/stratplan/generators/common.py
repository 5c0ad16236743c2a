from __future__ import annotations

import random
from typing import Any

import numpy as np
from faker import Faker


def generation_settings(settings: dict[str, Any]) -> dict[str, Any]:
    return settings.get("data_generation", {}) or {}


def seed_everything(seed: int) -> None:
    random.seed(seed)
    np.random.seed(seed)
    Faker.seed(seed)


def get_faker() -> Faker:
    return Faker()


def int_range(value: Any, default: tuple[int, int]) -> tuple[int, int]:
    """Read a ``[low, high]`` setting (a bare int means a fixed count)."""
    if value is None:
        return default
    if isinstance(value, int):
        return value, value
    low, high = int(value[0]), int(value[1])
    if low < 0 or high < low:
        raise ValueError(f"Invalid range setting: {value!r}")
    return low, high

