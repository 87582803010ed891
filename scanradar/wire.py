"""
scanradar.wire
==============

Feed payload formats.

Scan record (one per integer-rounded angle)::

    {"distance": 40, "timestamp": 1718000000000}      # cm, epoch ms

Status record (full or partial)::

    {"angle": 90, "temperature": 26.5, "flame": "SAFE",
     "buzzer": "OFF", "updatedAt": "2024-06-10T08:00:00.000Z"}

Serial line from the rover firmware::

    angle,distance[,temperature,flame,buzzer]

Decoders raise ``FeedError``; callers log and drop the payload.  A bad
status ``angle`` alone is not fatal: it decodes to ``None``.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import math
import time
from typing import Dict, Optional, Tuple

from scanradar.exceptions import FeedError

log = logging.getLogger(__name__)


def angle_key(angle) -> int:
    """Round half up like the firmware does (``89.5 → 90``)."""
    try:
        value = float(angle)
    except (TypeError, ValueError) as exc:
        raise FeedError(f"angle {angle!r} is not a number") from exc
    if not math.isfinite(value):
        raise FeedError(f"angle {angle!r} is not finite")
    return math.floor(value + 0.5)


def now_ms() -> int:
    return int(time.time() * 1000)


def now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _load(payload: bytes, source: str):
    try:
        return json.loads(payload.decode())
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FeedError(f"bad JSON: {exc}", source=source) from exc


# ────────── scan ──────────
def decode_scan_record(payload: bytes, source: str = "") -> Optional[Dict]:
    """One reading, or None for an empty / ``null`` payload (reading cleared)."""
    if not payload.strip():
        return None
    data = _load(payload, source)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise FeedError(f"scan record must be an object, got {type(data).__name__}", source=source)
    return data


def decode_scan_set(payload: bytes, source: str = "") -> Dict[int, Dict]:
    """A whole angle → reading mapping; empty / ``null`` clears the scan."""
    if not payload.strip():
        return {}
    data = _load(payload, source)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FeedError(f"scan set must be an object, got {type(data).__name__}", source=source)
    out: Dict[int, Dict] = {}
    for key, reading in data.items():
        if isinstance(reading, dict):
            try:
                out[angle_key(key)] = reading
            except FeedError:
                continue            # renderer skips these anyway
    return out


def encode_scan_record(distance: float, timestamp: Optional[int] = None) -> bytes:
    return json.dumps({"distance": distance,
                       "timestamp": now_ms() if timestamp is None else timestamp}).encode()


# ────────── status ──────────
def decode_status(payload: bytes, source: str = "") -> Dict:
    data = _load(payload, source)
    if not isinstance(data, dict):
        raise FeedError(f"status must be an object, got {type(data).__name__}", source=source)
    if data.get("angle") is not None:
        try:
            data["angle"] = angle_key(data["angle"])
        except FeedError:
            # the rest of the record is still good; the scope falls back to idle
            log.debug("Ignoring bad status angle %r from %s", data["angle"], source)
            data["angle"] = None
    return data


def encode_status(angle: Optional[float], temperature: Optional[float],
                  flame: str = "SAFE", buzzer: str = "OFF",
                  updated_at: Optional[str] = None) -> bytes:
    return json.dumps({
        "angle": None if angle is None else angle_key(angle),
        "temperature": temperature,
        "flame": flame,
        "buzzer": buzzer,
        "updatedAt": updated_at or now_iso(),
    }).encode()


# ────────── serial ──────────
def parse_serial_line(line: str) -> Tuple[int, Dict, Dict]:
    """
    ``"90,40"`` or ``"90,40,26.5,SAFE,OFF"`` →
    ``(angle_key, scan_record, status_patch)``.
    """
    parts = [p.strip() for p in line.strip().split(",")]
    if len(parts) not in (2, 5):
        raise FeedError(f"expected 2 or 5 fields, got {len(parts)}: {line!r}", source="serial")
    angle = angle_key(parts[0])
    try:
        distance = float(parts[1])
    except ValueError as exc:
        raise FeedError(f"distance {parts[1]!r} is not a number", source="serial") from exc

    record = {"distance": distance, "timestamp": now_ms()}
    patch: Dict = {"angle": angle, "updatedAt": now_iso()}
    if len(parts) == 5:
        temp, flame, buzzer = parts[2:]
        try:
            patch["temperature"] = float(temp)
        except ValueError:
            patch["temperature"] = None
        patch["flame"] = "FIRE" if flame.upper() == "FIRE" else "SAFE"
        patch["buzzer"] = "ON" if buzzer.upper() == "ON" else "OFF"
    return angle, record, patch
