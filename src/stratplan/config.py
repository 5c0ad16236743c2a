from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .paths import path_from_root
from .rollup import DEFAULT_THRESHOLDS, StatusThresholds

SETTINGS_FILE = "config/settings.yaml"


@dataclass
class AppConfig:
    raw: dict[str, Any]

    @property
    def thresholds(self) -> StatusThresholds:
        return thresholds_from_settings(self.raw)

    @property
    def percent_decimals(self) -> int:
        return int((self.raw.get("display") or {}).get("percent_decimals", 0))

    def data_path(self, key: str) -> Path:
        defaults = {
            "objectives_path": "data/objectives.json",
            "kpis_path": "data/kpis.json",
        }
        return path_from_root((self.raw.get("data") or {}).get(key, defaults[key]))

    @property
    def report_dir(self) -> Path:
        return path_from_root((self.raw.get("reports") or {}).get("out_dir", "output/reports/rollup"))

    @property
    def log_file(self) -> Path | None:
        rel = (self.raw.get("reports") or {}).get("log_file")
        return path_from_root(rel) if rel else None


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data


def load_settings(path: Path | None = None) -> dict[str, Any]:
    return _load_yaml(path or path_from_root(SETTINGS_FILE))


def load_config(path: Path | None = None) -> AppConfig:
    return AppConfig(raw=load_settings(path))


def thresholds_from_settings(settings: dict[str, Any]) -> StatusThresholds:
    """Build status thresholds from a settings mapping.

    Missing keys fall back to the defaults. Values must lie in [0, 1] and the
    at-risk floor may not sit above the on-track floor.
    """
    raw = (settings.get("rollup") or {}).get("status_thresholds") or {}
    on_track = float(raw.get("on_track", DEFAULT_THRESHOLDS.on_track))
    at_risk = float(raw.get("at_risk", DEFAULT_THRESHOLDS.at_risk))

    for key, value in (("on_track", on_track), ("at_risk", at_risk)):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Threshold {key} must be within [0, 1], got {value}")
    if at_risk > on_track:
        raise ValueError(f"at_risk threshold ({at_risk}) cannot exceed on_track threshold ({on_track})")

    return StatusThresholds(on_track=on_track, at_risk=at_risk)


def load_thresholds(path: Path | None = None) -> StatusThresholds:
    return thresholds_from_settings(load_settings(path))
