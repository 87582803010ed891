"""Exception hierarchy for scanradar."""

from __future__ import annotations


class ScanRadarError(Exception):
    """Base exception for all scanradar errors."""


class ConfigError(ScanRadarError):
    """Invalid value in radar_config.json."""


class FeedError(ScanRadarError):
    """A feed payload (MQTT message or serial line) could not be decoded."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)
