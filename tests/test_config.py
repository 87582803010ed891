from __future__ import annotations

import json
import logging

import pytest

from scanradar import config
from scanradar.exceptions import ConfigError
from scanradar.logging_config import resolve_level, setup_logging


def test_missing_file_writes_defaults(tmp_path) -> None:
    path = tmp_path / "scanradar_config.json"
    cfg = config.load(path)
    assert cfg["max_distance_cm"] == 250
    assert cfg["animate_when_idle"] is True
    assert json.loads(path.read_text())["topic_prefix"] == "rover"


def test_partial_file_is_merged_with_defaults(tmp_path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"max_distance_cm": 400, "input_mode": "serial"}))
    cfg = config.load(path)
    assert cfg["max_distance_cm"] == 400
    assert cfg["input_mode"] == "serial"
    assert cfg["broker"] == "127.0.0.1"


def test_save_round_trips(tmp_path) -> None:
    path = tmp_path / "cfg.json"
    cfg = config.load(path)
    cfg["animate_when_idle"] = False
    config.save(cfg, path)
    assert config.load(path)["animate_when_idle"] is False


@pytest.mark.parametrize("override", [
    {"input_mode": "bluetooth"},
    {"window": [800]},
    {"window": [0, 600]},
    {"max_distance_cm": 0},
    {"pixel_ratio": "retina"},
    {"fps": -1},
    {"log_level": "CHATTY"},
])
def test_invalid_values_raise(tmp_path, override) -> None:
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps(override))
    with pytest.raises(ConfigError):
        config.load(path)


def test_broken_json_raises(tmp_path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text("{oops")
    with pytest.raises(ConfigError):
        config.load(path)


def test_setup_logging_replaces_handlers() -> None:
    setup_logging("DEBUG")
    setup_logging(logging.WARNING)
    logger = logging.getLogger("scanradar")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1


def test_setup_logging_appends_to_log_file(tmp_path) -> None:
    log_file = tmp_path / "radar.log"
    logger = setup_logging("info", str(log_file))
    logging.getLogger("scanradar.mqtt_client").info("broker up")
    for handler in logger.handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "scanradar.mqtt_client - INFO - broker up" in text
    assert "MainThread" in text
    setup_logging(logging.WARNING)     # closes the file handler again


def test_resolve_level() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ConfigError):
        resolve_level("CHATTY")
