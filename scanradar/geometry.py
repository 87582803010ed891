"""
scanradar.geometry
==================

Pure polar → pixel and distance → colour helpers.

Bearings follow the servo: 0° points right, 90° straight up, 180° left,
measured counter-clockwise from the baseline.  The hub sits at the bottom
centre of the surface, so screen *y* is flipped (``cy - sin θ · r``).

Nothing here touches pygame surfaces; every function is deterministic.
"""
from __future__ import annotations

import math
from typing import NamedTuple, Tuple

from scanradar.constants import MAX_DISTANCE_CM, RING_COUNT

HUB_Y_FRAC   = 0.92        # hub height as a fraction of surface height
MARGIN_X     = 40          # horizontal breathing room on each side
MARGIN_TOP   = 20
MIN_RADIUS   = 120         # floor so tiny surfaces never get a degenerate scope

Point = Tuple[float, float]


def usable_radius(width: float, height: float) -> float:
    """Largest ring radius that fits the surface, never below MIN_RADIUS."""
    cy = height * HUB_Y_FRAC
    return max(min(width / 2 - MARGIN_X, cy - MARGIN_TOP), MIN_RADIUS)


class Geometry(NamedTuple):
    """Logical size of the drawing surface plus the derived scope layout."""
    width: float
    height: float

    @property
    def center(self) -> Point:
        return self.width / 2, self.height * HUB_Y_FRAC

    @property
    def radius(self) -> float:
        return usable_radius(self.width, self.height)

    @property
    def empty(self) -> bool:
        return not self.width or not self.height


def range_ratio(distance_cm: float, max_distance: float = MAX_DISTANCE_CM) -> float:
    """Distance as a fraction of full range; anything beyond range sits on the rim."""
    return min(distance_cm, max_distance) / max_distance


def polar_to_pixel(angle_deg: float, distance_cm: float, geom: Geometry,
                   max_distance: float = MAX_DISTANCE_CM) -> Point:
    """
    Parameters
    ----------
    angle_deg : bearing in [0, 180]
    distance_cm : range in cm (> 0); clamped to *max_distance*
    geom : surface geometry supplying hub and usable radius

    Returns
    -------
    (x, y) in logical pixels
    """
    return ray_point(angle_deg, geom, range_ratio(distance_cm, max_distance))


def ray_point(angle_deg: float, geom: Geometry, ratio: float = 1.0) -> Point:
    """Point at *ratio* of the usable radius along bearing *angle_deg*."""
    cx, cy = geom.center
    r = geom.radius * ratio
    th = math.radians(angle_deg)
    return cx + math.cos(th) * r, cy - math.sin(th) * r


def danger_color(ratio: float) -> Tuple[int, int, float]:
    """
    Map a range ratio to ``(red, green, alpha)``.

    Closer objects (small ratio) get more red and more opacity; even the
    farthest reading keeps a warm red bias of 0.35.
    """
    danger = 1 - ratio
    alpha = 0.3 + danger * 0.6
    r = math.floor(255 * min(1, danger + 0.35))
    g = math.floor(255 * (0.25 + ratio * 0.5))
    return r, g, alpha


def ring_label(k: int, max_distance: float = MAX_DISTANCE_CM) -> str:
    """Real-world distance of ring *k* (1-based), e.g. ``"100 cm"``."""
    return f"{math.floor(max_distance / RING_COUNT * k + 0.5)} cm"
