from __future__ import annotations

import pytest

from scanradar import config, constants as C
from scanradar.gui import RadarGUI
from scanradar.sweep import RUNNING, STOPPED


@pytest.fixture
def app(tmp_path):
    cfg = config.load(tmp_path / "cfg.json")
    cfg.update(input_mode="serial", serial_port="/dev/definitely-not-a-port", window=[800, 550])
    gui = RadarGUI(cfg)
    yield gui
    # pygame stays up for the other test modules; only stop what the GUI started
    gui.sweep.stop()
    gui._close_input()


def test_canvas_fills_space_between_title_and_strip(app) -> None:
    assert app.canvas.size == (800, 550 - C.TITLE_H - C.STRIP_H)


def test_idle_frames_sweep_and_redraw(app) -> None:
    assert app.frame()                   # first frame schedules the sweep
    assert app.sweep.state == RUNNING
    draws = app.canvas.draws
    for _ in range(4):
        assert app.frame()
    assert app.sweep.angle == 1.25
    assert app.canvas.draws == draws + 4


def test_live_angle_stops_idle_sweep_and_skips_redundant_draws(app) -> None:
    app.frame()
    app.store.apply_status({"angle": 90})
    assert app.frame()
    assert app.sweep.state == STOPPED
    assert not app.frame()               # nothing changed, nothing redrawn


def test_readings_freeze_the_sweep(app) -> None:
    for _ in range(10):
        app.frame()
    frozen = app.sweep.angle
    app.store.put_reading(90, {"distance": 40, "timestamp": 1})
    app.frame()
    app.frame()
    assert app.sweep.state == STOPPED
    assert app.sweep.angle == frozen


def test_resize_rebuilds_canvas(app) -> None:
    app._on_resize((400, 325))
    assert app.canvas.size == (400, 325 - C.TITLE_H - C.STRIP_H)
    assert app.frame()


def test_resize_mid_sweep_keeps_a_single_tick(app) -> None:
    app.frame()
    assert app.sweep.angle == 0.25
    app._on_resize((640, 480))
    assert app.frame()
    assert len(app.scheduler) == 1
    assert app.sweep.angle == 0.5         # one step, no restart and no double tick


def test_disabled_idle_animation_draws_once(app) -> None:
    app.animate_when_idle = False
    assert app.frame()
    assert not app.frame()
    assert app.sweep.angle == 0.0
