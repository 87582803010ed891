from __future__ import annotations

import datetime as dt

import pytest

from scanradar.status import Status, merge_status, temperature_label, updated_label
from scanradar.store import ScanStore


def test_partial_status_patch_keeps_absent_fields() -> None:
    prev = Status(angle=30, temperature=26.5, flame="FIRE", buzzer="ON", updated_at="x")
    merged = merge_status(prev, {"angle": 32})
    assert merged == Status(angle=32, temperature=26.5, flame="FIRE", buzzer="ON", updated_at="x")


def test_status_patch_maps_wire_keys_and_ignores_unknown_ones() -> None:
    merged = merge_status(Status(), {"updatedAt": "2024-06-10T08:00:00Z", "rssi": -40})
    assert merged.updated_at == "2024-06-10T08:00:00Z"
    assert merge_status(merged, {"rssi": -41}) is merged


def test_explicit_null_clears_angle() -> None:
    assert merge_status(Status(angle=90), {"angle": None}).angle is None


def test_flame_and_buzzer_flags() -> None:
    assert Status(flame="FIRE").on_fire
    assert not Status(flame="fire?").on_fire
    assert Status(buzzer="ON").buzzing


def test_temperature_label() -> None:
    assert temperature_label(Status(temperature=26.54)) == "26.5 °C"
    assert temperature_label(Status()) == "--"
    assert temperature_label(Status(temperature="hot")) == "--"


def test_updated_label_parses_iso_timestamps() -> None:
    stamp = dt.datetime(2024, 6, 10, 8, 0, 5, tzinfo=dt.timezone.utc)
    expected = stamp.astimezone().strftime("%H:%M:%S")
    assert updated_label("2024-06-10T08:00:05.000Z") == f"Updated {expected}"
    assert updated_label("2024-06-10T08:00:05") == "Updated 08:00:05"


@pytest.mark.parametrize("value", [None, "", "yesterday-ish", "not-a-date", "2024-13-40T99:00:00Z",
                                   "0001-01-01T00:00:00+14:00", "9999-12-31T23:59:59-14:00"])
def test_updated_label_degrades_to_empty(value) -> None:
    assert updated_label(value) == ""


def test_store_snapshot_is_read_only_and_stable() -> None:
    store = ScanStore()
    store.put_reading(90, {"distance": 40, "timestamp": 1})
    snap = store.snapshot()
    assert snap is store.snapshot()
    with pytest.raises(TypeError):
        snap.readings[10] = {"distance": 5}

    store.put_reading(10, {"distance": 5})
    assert 10 not in snap.readings
    assert store.snapshot().version == snap.version + 1


def test_store_copies_incoming_readings() -> None:
    store = ScanStore()
    reading = {"distance": 40}
    store.put_reading(90, reading)
    reading["distance"] = -1
    assert store.snapshot().readings[90]["distance"] == 40


def test_store_replace_remove_and_status() -> None:
    store = ScanStore()
    store.replace_readings({0: {"distance": 1}, 2: {"distance": 2}})
    store.remove_reading(2)
    store.remove_reading(99)
    assert list(store.snapshot().readings) == [0]

    v = store.snapshot().version
    store.apply_status({"angle": 12})
    store.apply_status({"angle": 12})
    snap = store.snapshot()
    assert snap.status.angle == 12
    assert snap.version == v + 1
