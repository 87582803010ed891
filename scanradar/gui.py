"""
scanradar.gui
=============

Rover Radar window – MQTT / Serial input, live scope, telemetry strip

Key features
------------
• Half-disc scope with range rings, dashed bearings & danger-coloured readings
• Idle search sweep whenever no telemetry is flowing
• Redraws the scope only when readings, sweep angle or window size change
• Telemetry strip: temperature, flame, buzzer, range, last update time
• Hot-keys: Q/Esc quit · F full screen · I toggle idle sweep
"""

from __future__ import annotations
import logging
from typing import Optional, Tuple, Union

import pygame

from scanradar import config
from scanradar import constants as C
from scanradar.canvas import RadarCanvas
from scanradar.logging_config import setup_logging
from scanradar.mqtt_client import ScanMQTT
from scanradar.serial_reader import ScanSerial
from scanradar.status import Status, temperature_label, updated_label
from scanradar.store import ScanStore
from scanradar.sweep import FrameScheduler, IdleSweep, effective_angle

log = logging.getLogger(__name__)


class RadarGUI:
    # ────────────────────────────────────────────────── INIT
    def __init__(self, cfg: dict) -> None:
        self.cfg = cfg

        # ―― Pygame window
        self.screen = pygame.display.set_mode(tuple(cfg["window"]), pygame.RESIZABLE)
        pygame.display.set_caption(C.TITLE)
        self.clock = pygame.time.Clock()
        self.fps = int(cfg["fps"])
        self.full_screen = False

        # ―― Scope & idle sweep
        self.max_distance = float(cfg["max_distance_cm"])
        self.animate_when_idle = bool(cfg["animate_when_idle"])
        self.scheduler = FrameScheduler()
        self.sweep = IdleSweep(self.scheduler)
        self.canvas = RadarCanvas(self._canvas_size(), cfg["pixel_ratio"], self.max_distance)
        self._sweep_deps: Optional[Tuple] = None
        self._drawn_key: Optional[Tuple] = None

        # ―― Input mode & reader
        self.store = ScanStore()
        self.input_mode = cfg["input_mode"]
        self.reader: Optional[Union[ScanMQTT, ScanSerial]] = None
        self._open_input()

    # ───────────────────────────────────────── helper – open data source
    def _open_input(self):
        self._close_input()
        if self.input_mode == "mqtt":
            self.reader = ScanMQTT(self.cfg["broker"], int(self.cfg["port"]),
                                   self.cfg["topic_prefix"], self.store)
            self.reader.connect()
        else:
            self.reader = ScanSerial(self.cfg["serial_port"], int(self.cfg["serial_baud"]),
                                     self.store)
            self.reader.start()

    def _close_input(self):
        if self.reader is not None:
            self.reader.stop()
            self.reader = None

    # ───────────────────────────────────────── layout
    def _canvas_size(self) -> Tuple[int, int]:
        w, h = self.screen.get_size()
        return w, max(0, h - C.TITLE_H - C.STRIP_H)

    def _on_resize(self, size) -> None:
        if not self.full_screen:
            self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)
        self.canvas.resize(self._canvas_size())

    # ───────────────────────────────────────── per-frame update
    def _sync_sweep(self, snap) -> None:
        """Re-evaluate the idle sweep whenever one of its inputs changed."""
        deps = (self.animate_when_idle, snap.version, self.canvas.size)
        if deps != self._sweep_deps:
            self._sweep_deps = deps
            self.sweep.update(self.animate_when_idle, snap.status.angle, snap.readings)

    def frame(self) -> bool:
        """Advance one frame: sweep tick + scope redraw if needed. True when redrawn."""
        snap = self.store.snapshot()
        self._sync_sweep(snap)
        self.scheduler.run_pending()

        angle = effective_angle(snap.status.angle, self.sweep.angle)
        key = (snap.version, angle, self.canvas.size)
        if key == self._drawn_key:
            return False
        self._drawn_key = key
        return self.canvas.draw(snap.readings, angle)

    # ───────────────────────────────────────── chrome
    def _draw_title(self):
        title = C.TITLE_FONT.render(C.TITLE, True, C.GREEN)
        self.screen.blit(title, title.get_rect(center=(self.screen.get_width() // 2,
                                                       C.TITLE_H // 2)))

    def _draw_strip(self, status: Status):
        items = [
            (f"Temp: {temperature_label(status)}", C.GREEN),
            (f"Flame: {'FIRE' if status.on_fire else 'SAFE'}", C.RED if status.on_fire else C.GREEN),
            (f"Buzzer: {'ON' if status.buzzing else 'OFF'}", C.GREEN),
            (f"Range: {self.max_distance:g} cm", C.GREEN),
        ]
        stamp = updated_label(status.updated_at)
        if stamp:
            items.append((stamp, C.DIM))

        y = self.screen.get_height() - C.STRIP_H // 2
        x = 20
        for text, col in items:
            surf = C.STRIP_FONT.render(text, True, col)
            rect = surf.get_rect(midleft=(x, y))
            self.screen.blit(surf, rect)
            x = rect.right + 28

    # ───────────────────────────────────────── MAIN LOOP
    def run(self):
        running = True
        while running:
            self.clock.tick(self.fps)

            # ――― EVENTS ―――――――――――――――――――――――――――――――――――――――――――
            for e in pygame.event.get():
                if e.type == pygame.QUIT:
                    running = False
                elif e.type == pygame.VIDEORESIZE:
                    self._on_resize(e.size)
                elif e.type == pygame.KEYDOWN:
                    if e.key in (pygame.K_q, pygame.K_ESCAPE):
                        running = False
                    elif e.key == pygame.K_f:
                        pygame.display.toggle_fullscreen()
                        self.full_screen = not self.full_screen
                        self.canvas.resize(self._canvas_size())
                    elif e.key == pygame.K_i:
                        self.animate_when_idle = not self.animate_when_idle
                        self.cfg["animate_when_idle"] = self.animate_when_idle
                        log.info("Idle sweep %s", "enabled" if self.animate_when_idle else "disabled")

            # ――― SCOPE ――――――――――――――――――――――――――――――――――――――――――――
            self.frame()

            # ――― DRAWING ――――――――――――――――――――――――――――――――――――――――――
            self.screen.fill(C.BLACK)
            self._draw_title()
            self.canvas.blit_to(self.screen, (0, C.TITLE_H))
            self._draw_strip(self.store.snapshot().status)
            pygame.display.flip()

        self.close()

    def close(self):
        """Teardown: stop the sweep, the reader and pygame."""
        self.sweep.stop()
        self._close_input()
        pygame.quit()


def main():
    cfg = config.load()
    setup_logging(cfg["log_level"], cfg["log_file"])
    pygame.init()
    app = RadarGUI(cfg)
    app.run()
    config.save(cfg)
