"""
scanradar.mqtt_client
=====================

Subscribes to the rover's MQTT topics and feeds decoded payloads into a
``ScanStore`` from a background worker thread.

Topics (``<prefix>`` defaults to ``rover``)::

    <prefix>/scan/<angle>   one scan record; empty payload removes the angle
    <prefix>/scan           whole scan set; replaces every held reading
    <prefix>/status         full or partial status record
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from queue import Empty, Queue
from typing import Optional, Tuple

import paho.mqtt.client as mqtt

from scanradar import wire
from scanradar.exceptions import FeedError
from scanradar.store import ScanStore

log = logging.getLogger(__name__)

SCAN, SCAN_SET, STATUS = "scan", "scan_set", "status"


def route(topic: str, prefix: str) -> Tuple[Optional[str], Optional[str]]:
    """Map a topic to ``(kind, angle_segment)``; kind is None for foreign topics."""
    parts = topic.split("/")
    base = prefix.strip("/").split("/")
    if parts[:len(base)] != base:
        return None, None
    rest = parts[len(base):]
    if rest == ["scan"]:
        return SCAN_SET, None
    if len(rest) == 2 and rest[0] == "scan":
        return SCAN, rest[1]
    if rest == ["status"]:
        return STATUS, None
    return None, None


class ScanMQTT:
    """
    Connects to the broker, decodes scan / status payloads on the paho
    network thread and applies them to *store* from a worker thread.
    """

    def __init__(self, host: str, port: int, prefix: str, store: ScanStore):
        self.host, self.port, self.prefix = host, port, prefix.strip("/")
        self.store = store
        self.last_pkt = time.monotonic()

        random_id = f"scanradar-{uuid.uuid4().hex[:8]}"
        self.cli = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=random_id)
        self.cli.enable_logger(log)
        self.cli.on_connect = self._on_connect
        self.cli.on_disconnect = self._on_disconnect
        self.cli.on_message = self._on_msg

        self.q: Queue = Queue()
        self._stop = threading.Event()
        self.worker = threading.Thread(target=self._worker_loop, daemon=True)
        self.worker.start()

    @property
    def topics(self):
        return [(f"{self.prefix}/scan", 0),
                (f"{self.prefix}/scan/+", 0),
                (f"{self.prefix}/status", 0)]

    # ───────────────────────── public API
    def connect(self) -> None:
        log.info("Connecting to MQTT broker %s:%s (prefix %s)", self.host, self.port, self.prefix)
        try:
            self.cli.connect(self.host, self.port, 60)
        except OSError as exc:
            # paho keeps retrying from loop_start(); the scope idles meanwhile
            log.warning("MQTT connect to %s:%s failed: %s", self.host, self.port, exc)
            self.cli.connect_async(self.host, self.port, 60)
        self.cli.loop_start()

    def stop(self) -> None:
        self._stop.set()
        self.cli.disconnect()
        self.cli.loop_stop()
        if self.worker.is_alive():
            self.worker.join(timeout=1)

    # ───────────────────────── paho callbacks
    def _on_connect(self, client, _userdata, _flags, reason_code, _properties):
        if reason_code.is_failure:
            log.warning("MQTT connect refused: %s", reason_code)
            return
        log.info("MQTT connected, subscribing to %s/{scan,scan/+,status}", self.prefix)
        client.subscribe(self.topics)

    def _on_disconnect(self, _client, _userdata, _flags, reason_code, _properties):
        if not self._stop.is_set():
            log.warning("MQTT disconnected: %s", reason_code)

    def _on_msg(self, _cli, _userdata, msg):
        try:
            item = self.decode(msg.topic, msg.payload)
        except FeedError:
            log.debug("Dropping malformed payload on %s", msg.topic, exc_info=True)
            return
        if item is not None:
            self.q.put_nowait(item)
            self.last_pkt = time.monotonic()

    # ───────────────────────── decoding / applying
    def decode(self, topic: str, payload: bytes):
        """Return ``(kind, angle, data)`` for our topics, None otherwise."""
        kind, segment = route(topic, self.prefix)
        if kind == SCAN:
            return kind, wire.angle_key(segment), wire.decode_scan_record(payload, topic)
        if kind == SCAN_SET:
            return kind, None, wire.decode_scan_set(payload, topic)
        if kind == STATUS:
            return kind, None, wire.decode_status(payload, topic)
        return None

    def apply(self, item) -> None:
        kind, angle, data = item
        if kind == SCAN:
            if data is None:
                self.store.remove_reading(angle)
            else:
                self.store.put_reading(angle, data)
        elif kind == SCAN_SET:
            self.store.replace_readings(data)
        else:
            self.store.apply_status(data)

    def _worker_loop(self):
        while not self._stop.is_set():
            try:
                item = self.q.get(timeout=1)
            except Empty:
                continue
            self.apply(item)
