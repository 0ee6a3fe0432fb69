"""wavpwl/config.py — Defaults from config.yaml.

Lookup order for the file: explicit path (CLI --config), WAVPWL_CONFIG env
var, then config.yaml at the project root. A missing file means built-in
defaults; CLI flags override whatever is loaded here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from wavpwl.errors import ConfigurationError

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DEFAULT_CFG_PATH = _PROJECT_ROOT / "config.yaml"


@dataclass
class WatchTiming:
    poll_interval_ms: int = 100
    stability_interval_ms: int = 200
    stability_attempts: int = 20
    stable_reads_required: int = 3
    grace_delay_ms: int = 500


@dataclass
class Config:
    sample_rate: int = 44100
    voltage_scale: float = 1.0
    decimate: int = 1
    column: Optional[str] = None
    watch: WatchTiming = field(default_factory=WatchTiming)
    source: Optional[Path] = None


def _resolve_path(path=None) -> Path:
    if path:
        return Path(path)
    env_path = os.environ.get("WAVPWL_CONFIG", "").strip()
    if env_path:
        return Path(env_path)
    return _DEFAULT_CFG_PATH


def _positive_int(cfg: dict, key: str, default: int) -> int:
    value = cfg.get(key, default)
    try:
        value = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Config '{key}' must be an integer, got {value!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"Config '{key}' must be positive, got {value}")
    return value


def load_config(path=None) -> Config:
    cfg_path = _resolve_path(path)
    if not cfg_path.exists():
        if path:
            raise ConfigurationError(f"Config file not found: {cfg_path}")
        return Config()

    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not load config {cfg_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config {cfg_path} must be a mapping")

    defaults = Config()
    watch_raw = raw.get("watch") or {}
    if not isinstance(watch_raw, dict):
        raise ConfigurationError("Config 'watch' must be a mapping")
    wd = WatchTiming()
    watch = WatchTiming(
        poll_interval_ms=_positive_int(watch_raw, "poll_interval_ms", wd.poll_interval_ms),
        stability_interval_ms=_positive_int(watch_raw, "stability_interval_ms", wd.stability_interval_ms),
        stability_attempts=_positive_int(watch_raw, "stability_attempts", wd.stability_attempts),
        stable_reads_required=_positive_int(watch_raw, "stable_reads_required", wd.stable_reads_required),
        grace_delay_ms=_positive_int(watch_raw, "grace_delay_ms", wd.grace_delay_ms),
    )

    try:
        voltage_scale = float(raw.get("voltage_scale", defaults.voltage_scale))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Config 'voltage_scale' must be a number: {exc}") from exc
    if voltage_scale == 0:
        raise ConfigurationError("Config 'voltage_scale' must be nonzero")

    column = raw.get("column", defaults.column)
    return Config(
        sample_rate=_positive_int(raw, "sample_rate", defaults.sample_rate),
        voltage_scale=voltage_scale,
        decimate=_positive_int(raw, "decimate", defaults.decimate),
        column=None if column is None else str(column),
        watch=watch,
        source=cfg_path,
    )
