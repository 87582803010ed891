"""
scanradar.serial_reader
=======================

Non-blocking line reader for a rover wired straight to a local serial port.

Each line is ``angle,distance[,temperature,flame,buzzer]`` (see
``scanradar.wire.parse_serial_line``).  A good line becomes one scan record
plus a status patch carrying the servo angle.

Usage
-----
    reader = ScanSerial("/dev/ttyUSB0", 115200, store)
    reader.start()     # spawns a background thread
    reader.stop()      # clean shutdown
"""
from __future__ import annotations

import logging
import threading

import serial

from scanradar.exceptions import FeedError
from scanradar.store import ScanStore
from scanradar.wire import parse_serial_line

log = logging.getLogger(__name__)


class ScanSerial:
    def __init__(self, port: str, baud: int, store: ScanStore):
        self.port, self.baud = port, baud
        self.store    = store
        self._stop    = threading.Event()
        self._thread  = threading.Thread(target=self._loop, daemon=True)

    # ───────────────────────── public API
    def start(self) -> None:
        log.info("Reading scan lines from %s @ %d baud", self.port, self.baud)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout=1)

    # ───────────────────────── helpers
    def handle_line(self, raw: bytes) -> bool:
        """Decode one raw line into the store; False when it was dropped."""
        line = raw.decode("ascii", errors="replace").strip()
        if not line or line.startswith("#"):        # firmware banner / comments
            return False
        try:
            angle, record, patch = parse_serial_line(line)
        except FeedError:
            log.debug("Dropping serial line %r", line, exc_info=True)
            return False
        self.store.put_reading(angle, record)
        self.store.apply_status(patch)
        return True

    # ───────────────────────── background reader thread
    def _loop(self):
        try:
            with serial.Serial(self.port, self.baud, timeout=0.1) as ser:
                while not self._stop.is_set():
                    raw = ser.readline()
                    if raw:
                        self.handle_line(raw)
        except serial.SerialException as exc:
            # GUI keeps drawing (idle sweep) until the port comes back
            log.warning("Serial port %s unavailable: %s", self.port, exc)
