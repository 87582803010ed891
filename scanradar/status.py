"""
scanradar.status
================

Rover status record shown in the telemetry strip, plus the partial-update
merge used by the feed.  Only ``angle`` reaches the scope renderer.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import Mapping, Optional

# wire key → dataclass field
WIRE_FIELDS = {
    "angle": "angle",
    "temperature": "temperature",
    "flame": "flame",
    "buzzer": "buzzer",
    "updatedAt": "updated_at",
}


@dataclass(frozen=True)
class Status:
    angle: Optional[float] = None
    temperature: Optional[float] = None
    flame: str = "SAFE"
    buzzer: str = "OFF"
    updated_at: Optional[str] = None

    @property
    def on_fire(self) -> bool:
        return self.flame == "FIRE"

    @property
    def buzzing(self) -> bool:
        return self.buzzer == "ON"


def merge_status(prev: Status, patch: Mapping) -> Status:
    """
    Overlay the wire keys present in *patch* onto *prev*.

    Absent keys keep their previous value; unknown keys are ignored.
    """
    changes = {WIRE_FIELDS[k]: v for k, v in patch.items() if k in WIRE_FIELDS}
    return replace(prev, **changes) if changes else prev


def temperature_label(status: Status) -> str:
    t = status.temperature
    if isinstance(t, (int, float)) and not isinstance(t, bool):
        return f"{t:.1f} °C"
    return "--"


def updated_label(updated_at) -> str:
    """``"Updated HH:MM:SS"`` in local time, or ``""`` when missing/unparseable."""
    if not updated_at:
        return ""
    try:
        text = str(updated_at)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        stamp = dt.datetime.fromisoformat(text)
        if stamp.tzinfo is not None:
            stamp = stamp.astimezone()
    except (TypeError, ValueError, OverflowError, OSError):
        return ""
    return f"Updated {stamp.strftime('%H:%M:%S')}"
