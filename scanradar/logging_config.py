"""
scanradar.logging_config
========================

One-shot setup for the ``scanradar`` logger tree.  Every module logs through
``logging.getLogger(__name__)``; the paho client is attached to the
``scanradar.mqtt_client`` logger, so broker chatter lands here too.

Feed decoding happens on the MQTT worker / serial reader threads, hence the
thread name in every record.
"""
import logging
import sys
from typing import Optional, Union

from scanradar.exceptions import ConfigError

LOGGER = "scanradar"
FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
DATEFMT = "%H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """``"debug"`` / ``"DEBUG"`` / ``10`` → ``10``; unknown names raise ConfigError."""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ConfigError(f"unknown log_level {level!r}")
    return value


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Point the ``scanradar`` logger at stdout (and *log_file*, appended, if set).

    Safe to call again: handlers from a previous call are replaced, so the
    GUI and the simulator can share a process in tests.
    """
    level = resolve_level(level)
    logger = logging.getLogger(LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(FORMAT, datefmt=DATEFMT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging at %s%s", logging.getLevelName(level),
                 f", also to {log_file}" if log_file else "")
    return logger
