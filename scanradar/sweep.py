"""
scanradar.sweep
===============

Idle-sweep animation driven by a refresh-synced frame scheduler.

The GUI loop calls ``FrameScheduler.run_pending()`` once per displayed frame;
anything requested during that run fires on the *next* frame, so a callback
that re-requests itself ticks exactly once per frame.

``IdleSweep`` is a two-state machine:

    STOPPED ──(animate_when_idle ∧ no live angle ∧ no readings)──▶ RUNNING
    RUNNING ──(condition fails | stop())──────────────────────────▶ STOPPED

Every ``update()`` cancels the pending tick first, then decides whether to
schedule a new one, so there is never more than one tick in flight.
"""
from __future__ import annotations

import logging
import math
from itertools import count
from typing import Callable, Dict, Mapping, Optional

log = logging.getLogger(__name__)

STOPPED, RUNNING = "STOPPED", "RUNNING"


def has_live_angle(sweep_angle) -> bool:
    """True for a finite real number (bools, None and NaN don't count)."""
    return (isinstance(sweep_angle, (int, float))
            and not isinstance(sweep_angle, bool)
            and math.isfinite(sweep_angle))


def effective_angle(sweep_angle, idle_angle: float) -> float:
    """Live telemetry wins; otherwise the idle (or last idle) angle."""
    return float(sweep_angle) if has_live_angle(sweep_angle) else idle_angle


class FrameScheduler:
    """requestAnimationFrame-style one-shot callbacks, run once per frame."""

    def __init__(self) -> None:
        self._pending: Dict[int, Callable[[], None]] = {}
        self._ids = count(1)

    def __len__(self) -> int:
        return len(self._pending)

    def request(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._pending.pop(handle, None)

    def run_pending(self) -> int:
        """Fire everything requested before this call; return how many ran."""
        batch, self._pending = self._pending, {}
        for callback in batch.values():
            callback()
        return len(batch)


class IdleSweep:
    STEP_DEG = 0.25          # per frame
    MIN_DEG, MAX_DEG = 0.0, 180.0

    def __init__(self, scheduler: FrameScheduler, step: float = STEP_DEG) -> None:
        self.scheduler = scheduler
        self.step = step
        self.state = STOPPED
        self.angle = 0.0
        self.direction = 1
        self.ticks = 0
        self._handle: Optional[int] = None

    # ───────────────────────── public API
    def update(self, animate_when_idle: bool, sweep_angle, readings: Mapping) -> str:
        """Re-evaluate after any input change; returns the new state."""
        self._cancel()
        should_run = bool(animate_when_idle) and not has_live_angle(sweep_angle) and not readings
        if not should_run:
            if self.state == RUNNING:
                log.debug("Idle sweep stopped at %.2f°", self.angle)
            self.state = STOPPED
            return self.state

        if self.state == STOPPED:
            self.angle, self.direction, self.ticks = self.MIN_DEG, 1, 0
            self.state = RUNNING
            log.debug("Idle sweep started")
        self._handle = self.scheduler.request(self._tick)
        return self.state

    def stop(self) -> None:
        """Teardown: cancel the pending tick, keep the last angle on screen."""
        self._cancel()
        self.state = STOPPED

    @property
    def pending(self) -> bool:
        return self._handle is not None

    # ───────────────────────── helpers
    def _cancel(self) -> None:
        self.scheduler.cancel(self._handle)
        self._handle = None

    def _tick(self) -> None:
        self._handle = None
        self.angle += self.direction * self.step
        if self.angle >= self.MAX_DEG:
            self.angle, self.direction = self.MAX_DEG, -1
        elif self.angle <= self.MIN_DEG:
            self.angle, self.direction = self.MIN_DEG, 1
        self.ticks += 1
        self._handle = self.scheduler.request(self._tick)


def triangle_wave(ticks: int, step: float = IdleSweep.STEP_DEG,
                  lo: float = IdleSweep.MIN_DEG, hi: float = IdleSweep.MAX_DEG) -> float:
    """Closed form of the idle sweep angle after *ticks* frames from a fresh start."""
    half = round((hi - lo) / step)
    m = ticks % (2 * half)
    return lo + step * (m if m <= half else 2 * half - m)
