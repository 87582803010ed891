from __future__ import annotations

from types import SimpleNamespace

import pytest

from scanradar.mqtt_client import SCAN, SCAN_SET, STATUS, ScanMQTT, route
from scanradar.serial_reader import ScanSerial
from scanradar.store import ScanStore


@pytest.fixture
def feed():
    f = ScanMQTT("127.0.0.1", 1883, "rover", ScanStore())
    yield f
    f._stop.set()
    f.worker.join(timeout=2)


@pytest.mark.parametrize("topic,expected", [
    ("rover/scan", (SCAN_SET, None)),
    ("rover/scan/90", (SCAN, "90")),
    ("rover/status", (STATUS, None)),
    ("rover/other", (None, None)),
    ("drone/scan/90", (None, None)),
    ("rover/scan/90/extra", (None, None)),
])
def test_route(topic, expected) -> None:
    assert route(topic, "rover") == expected


def test_route_nested_prefix() -> None:
    assert route("lab/rover1/scan/7", "lab/rover1/") == (SCAN, "7")


def test_subscribed_topics(feed) -> None:
    assert [t for t, _ in feed.topics] == ["rover/scan", "rover/scan/+", "rover/status"]


def test_scan_messages_update_store(feed) -> None:
    feed.apply(feed.decode("rover/scan/45", b'{"distance": 80, "timestamp": 10}'))
    feed.apply(feed.decode("rover/scan/46", b'{"distance": 90, "timestamp": 11}'))
    feed.apply(feed.decode("rover/scan/45", b""))
    assert dict(feed.store.snapshot().readings) == {46: {"distance": 90, "timestamp": 11}}

    feed.apply(feed.decode("rover/scan", b'{"3": {"distance": 5}}'))
    assert dict(feed.store.snapshot().readings) == {3: {"distance": 5}}


def test_status_messages_merge(feed) -> None:
    feed.apply(feed.decode("rover/status", b'{"angle": 10, "temperature": 20.0}'))
    feed.apply(feed.decode("rover/status", b'{"buzzer": "ON"}'))
    status = feed.store.snapshot().status
    assert (status.angle, status.temperature, status.buzzer) == (10, 20.0, "ON")


def test_status_with_bad_angle_still_raises_fire(feed) -> None:
    feed.apply(feed.decode("rover/status", b'{"angle": 10}'))
    feed.apply(feed.decode("rover/status", b'{"angle": "n/a", "flame": "FIRE", "buzzer": "ON"}'))
    status = feed.store.snapshot().status
    assert status.on_fire and status.buzzing
    assert status.angle is None


def test_foreign_topics_are_ignored(feed) -> None:
    assert feed.decode("rover/lidar", b"{}") is None


def test_on_msg_queues_good_payloads_and_drops_bad_ones() -> None:
    f = ScanMQTT("127.0.0.1", 1883, "rover", ScanStore())
    f._stop.set()
    f.worker.join(timeout=2)

    f._on_msg(None, None, SimpleNamespace(topic="rover/scan/9", payload=b"{broken"))
    f._on_msg(None, None, SimpleNamespace(topic="rover/nothing", payload=b"{}"))
    assert f.q.empty()

    f._on_msg(None, None, SimpleNamespace(topic="rover/scan/9", payload=b'{"distance": 3}'))
    assert f.q.get_nowait() == (SCAN, 9, {"distance": 3})


def test_serial_lines_feed_store() -> None:
    store = ScanStore()
    reader = ScanSerial("/dev/null-port", 115200, store)
    assert reader.handle_line(b"90,40,26.5,SAFE,ON\r\n")
    assert not reader.handle_line(b"# rover firmware v2\r\n")
    assert not reader.handle_line(b"garbage\r\n")
    assert not reader.handle_line(b"\r\n")

    snap = store.snapshot()
    assert snap.readings[90]["distance"] == 40.0
    assert (snap.status.angle, snap.status.temperature, snap.status.buzzer) == (90, 26.5, "ON")


def test_serial_reader_survives_missing_port() -> None:
    reader = ScanSerial("/dev/definitely-not-a-port", 115200, ScanStore())
    reader.start()
    reader._thread.join(timeout=2)
    assert not reader._thread.is_alive()
    reader.stop()
