"""
scanradar.config
================

Tiny helper that loads / saves *scanradar_config.json* and injects sensible
defaults for any missing keys.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path

from scanradar.constants import CFG_PATH, MAX_DISTANCE_CM, WINDOW_SIZE
from scanradar.exceptions import ConfigError
from scanradar.logging_config import resolve_level

log = logging.getLogger(__name__)

_DEFAULT = {
    # display
    "window": list(WINDOW_SIZE),
    "fps": 60,                        # idle sweep moves 0.25° per frame
    "pixel_ratio": 1.0,               # >1 renders supersampled, then scales down
    "max_distance_cm": MAX_DISTANCE_CM,
    "animate_when_idle": True,

    # input selection
    "input_mode": "mqtt",             # "mqtt"  or  "serial"
    "serial_port": "/dev/ttyUSB0",
    "serial_baud": 115200,

    # MQTT (used by the GUI when input_mode == "mqtt", and by the simulator)
    "broker": "127.0.0.1",
    "port": 1883,
    "topic_prefix": "rover",

    # logging
    "log_level": "INFO",
    "log_file": None,                 # optional path, appended to
}

INPUT_MODES = ("mqtt", "serial")


def _positive(cfg: dict, key: str, kind=float):
    try:
        value = kind(cfg[key])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {cfg[key]!r}") from exc
    if not value > 0:
        raise ConfigError(f"{key} must be > 0, got {cfg[key]!r}")
    return value


def validate(cfg: dict) -> dict:
    """Raise ConfigError for values the radar cannot run with."""
    if cfg["input_mode"] not in INPUT_MODES:
        raise ConfigError(f"input_mode must be one of {INPUT_MODES}, got {cfg['input_mode']!r}")
    try:
        w, h = (int(v) for v in cfg["window"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"window must be [width, height], got {cfg['window']!r}") from exc
    if w <= 0 or h <= 0:
        raise ConfigError(f"window must be positive, got {cfg['window']!r}")
    for key in ("max_distance_cm", "pixel_ratio"):
        _positive(cfg, key)
    for key in ("fps", "port", "serial_baud"):
        _positive(cfg, key, int)
    resolve_level(cfg["log_level"])
    return cfg


def load(path: Path = CFG_PATH) -> dict:
    try:
        with open(path) as fh:
            cfg = {**_DEFAULT, **json.load(fh)}
    except FileNotFoundError:
        log.info("No config at %s, writing defaults", path)
        save(_DEFAULT, path)
        cfg = dict(_DEFAULT)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path} is not valid JSON: {exc}") from exc
    return validate(cfg)


def save(cfg: dict, path: Path = CFG_PATH) -> None:
    Path(path).write_text(json.dumps(cfg, indent=2))
