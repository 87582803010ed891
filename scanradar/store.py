"""
scanradar.store
===============

Thread-safe holder for the latest scan readings and rover status.

Feed threads (MQTT worker, serial reader) write; the GUI thread takes a
``Snapshot`` once per frame.  Snapshots are read-only views over a private
copy, so a render pass never sees a half-applied update.
"""
from __future__ import annotations

import threading
import time
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Optional

from scanradar.status import Status, merge_status


class Snapshot(NamedTuple):
    readings: Mapping[Any, Mapping]
    status: Status
    version: int


class ScanStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._readings: Dict[Any, Dict] = {}
        self._status = Status()
        self._version = 0
        self._snap: Optional[Snapshot] = None
        self.t_last_update: Optional[float] = None

    # ───────────────────────── writers
    def put_reading(self, angle: int, reading: Mapping) -> None:
        with self._lock:
            self._readings[angle] = dict(reading)
            self._touch()

    def remove_reading(self, angle: int) -> None:
        with self._lock:
            if self._readings.pop(angle, None) is not None:
                self._touch()

    def replace_readings(self, readings: Mapping) -> None:
        with self._lock:
            self._readings = {k: dict(v) for k, v in readings.items()}
            self._touch()

    def apply_status(self, patch: Mapping) -> None:
        with self._lock:
            merged = merge_status(self._status, patch)
            if merged != self._status:
                self._status = merged
                self._touch()

    def _touch(self) -> None:
        self._version += 1
        self._snap = None
        self.t_last_update = time.monotonic()

    # ───────────────────────── reader
    def snapshot(self) -> Snapshot:
        with self._lock:
            if self._snap is None:
                self._snap = Snapshot(MappingProxyType(dict(self._readings)),
                                      self._status, self._version)
            return self._snap
