"""
scanradar.canvas
================

The radar scope renderer.

``RadarCanvas`` owns a backing surface sized ``logical size × pixel_ratio``
and redraws the whole scope from a readings snapshot plus the sweep angle:

1.  opaque black background
2.  additive overlay: range rings, dashed bearings, ring labels
3.  one coloured ray + dot per valid reading (sorted by angle)
4.  gradient sweep wedge and bright sweep line
5.  hub glow

Additive ("lighter") blending
-----------------------------
pygame's ``BLEND_RGB_ADD`` ignores source alpha, so every primitive is
painted in *pre-multiplied* colour onto a black scratch layer, then the
dirty rect of that layer is added onto the frame and wiped again.  The
frame itself never carries blend state between passes.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Mapping, Sequence, Tuple

import pygame

from scanradar import constants as C
from scanradar.geometry import (Geometry, danger_color, polar_to_pixel,
                                range_ratio, ray_point, ring_label)

log = logging.getLogger(__name__)

WEDGE_BANDS = 24                      # gradient steps along the sweep wedge

Reading = Tuple[float, float, Any]    # (angle_deg, distance_cm, timestamp)


# ────────── colour helpers ──────────
def premul(rgb: Sequence[float], alpha: float) -> Tuple[int, int, int]:
    """Pre-multiply *rgb* by *alpha* (what an additive blit of rgba adds)."""
    a = min(1.0, max(0.0, alpha))
    return tuple(int(c * a + 0.5) for c in rgb[:3])


def lerp_rgba(c0: Sequence[float], c1: Sequence[float], t: float) -> Tuple[int, int, int]:
    """Linear gradient stop interpolation, returned pre-multiplied."""
    mix = [a + (b - a) * t for a, b in zip(c0, c1)]
    return premul(mix[:3], mix[3])


def valid_readings(readings: Mapping) -> List[Reading]:
    """
    Finite angle keys with a positive numeric distance, sorted by angle.
    Anything else is skipped silently; *readings* is never modified.
    """
    out: List[Reading] = []
    for key, value in readings.items():
        try:
            angle = float(key)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(angle) or not isinstance(value, Mapping):
            continue
        distance = value.get("distance")
        # NaN fails the comparison too; huge ints must not go through float()
        if (not isinstance(distance, (int, float)) or isinstance(distance, bool)
                or not distance > 0):
            continue
        out.append((angle, distance, value.get("timestamp")))
    out.sort(key=lambda r: r[0])
    return out


def angle_label(angle: float) -> str:
    """Whole-degree reading label, halves rounded up (``44.5 → "45°"``)."""
    return f"{math.floor(angle + 0.5)}°"


def dashed_line(surf: pygame.Surface, color, start, end,
                dash: float, gap: float, width: int = 1) -> pygame.Rect:
    """Draw a dashed segment; returns the union of the dash rects."""
    x0, y0 = start
    x1, y1 = end
    dirty = pygame.Rect(int(x0), int(y0), 0, 0)
    length = math.hypot(x1 - x0, y1 - y0)
    if not length:
        return dirty
    ux, uy = (x1 - x0) / length, (y1 - y0) / length
    pos = 0.0
    while pos < length:
        stop = min(pos + dash, length)
        dirty.union_ip(pygame.draw.line(surf, color,
                                        (x0 + ux * pos, y0 + uy * pos),
                                        (x0 + ux * stop, y0 + uy * stop), width))
        pos += dash + gap
    return dirty


class RadarCanvas:
    """Resize-aware radar scope drawn onto ``self.surface``."""

    def __init__(self, size: Tuple[int, int], pixel_ratio: float = 1.0,
                 max_distance: float = C.MAX_DISTANCE_CM) -> None:
        self.pixel_ratio = float(pixel_ratio)
        self.max_distance = max_distance
        self.geometry = Geometry(-1, -1)        # forces the first resize
        self.draws = 0
        self.resize(size)

    # ───────────────────────── sizing
    @property
    def size(self) -> Tuple[int, int]:
        return int(self.geometry.width), int(self.geometry.height)

    def resize(self, size: Tuple[int, int]) -> bool:
        """
        Adopt a new logical size: rebuild the backing + scratch surfaces at
        ``size × pixel_ratio`` and re-derive the scale.  Returns False when
        the size did not change.
        """
        w, h = (max(0, int(v)) for v in size)
        geom = Geometry(w, h)
        if geom == self.geometry:
            return False
        self.geometry = geom

        pr = self.pixel_ratio
        backing = (round(w * pr), round(h * pr))
        self.surface  = pygame.Surface(backing, 0, 32)
        self._scratch = pygame.Surface(backing, 0, 32)
        self._ring_font  = C.font(round(14 * pr))
        self._point_font = C.font(round(11 * pr))
        log.debug("Canvas resized to %dx%d (backing %dx%d, radius %.1f)",
                  w, h, backing[0], backing[1], geom.radius)
        return True

    def _px(self, pt: Tuple[float, float]) -> Tuple[float, float]:
        return pt[0] * self.pixel_ratio, pt[1] * self.pixel_ratio

    def _w(self, width: float) -> int:
        return max(1, round(width * self.pixel_ratio))

    # ───────────────────────── compositing
    def _lighter(self, paint: Callable[[pygame.Surface], pygame.Rect]) -> None:
        """Run *paint* on the black scratch layer, add its dirty rect onto the frame."""
        scratch = self._scratch
        dirty = paint(scratch).clip(scratch.get_rect())
        if dirty.width and dirty.height:
            self.surface.blit(scratch, dirty.topleft, dirty,
                              special_flags=pygame.BLEND_RGB_ADD)
            scratch.fill(C.BLACK, dirty)

    # ───────────────────────── draw pass
    def draw(self, readings: Mapping, sweep_angle: float) -> bool:
        """
        Redraw the scope.  *sweep_angle* is the effective angle (live or idle).
        A zero-area surface is a silent no-op and returns False.
        """
        geom = self.geometry
        if geom.empty:
            return False

        self.surface.fill(C.BLACK)
        self._scratch.fill(C.BLACK)

        self._draw_grid(geom)
        for reading in valid_readings(readings):
            self._draw_reading(geom, *reading)
        self._draw_sweep(geom, sweep_angle)
        self._draw_hub(geom)

        self.draws += 1
        return True

    def _draw_grid(self, geom: Geometry) -> None:
        cx, cy = self._px(geom.center)
        radius = geom.radius * self.pixel_ratio
        ring_col = premul(C.RING_RGBA[:3], C.RING_RGBA[3])
        ring_w = self._w(C.RING_WIDTH)

        def rings(surf):
            dirty = pygame.Rect(int(cx), int(cy), 0, 0)
            for k in range(1, C.RING_COUNT + 1):
                r = radius / C.RING_COUNT * k + ring_w / 2
                box = pygame.Rect(0, 0, round(2 * r), round(2 * r))
                box.center = (round(cx), round(cy))
                dirty.union_ip(pygame.draw.arc(surf, ring_col, box, 0, math.pi, ring_w))
            return dirty
        self._lighter(rings)

        for deg in range(0, 181, C.BEARING_STEP):
            end = self._px(ray_point(deg, geom))
            self._lighter(lambda surf, end=end: dashed_line(
                surf, ring_col, (cx, cy), end,
                C.DASH * self.pixel_ratio, C.GAP * self.pixel_ratio, self._w(1)))

        label_col = premul(C.RING_LABEL[:3], C.RING_LABEL[3])

        def labels(surf):
            dirty = pygame.Rect(int(cx), int(cy), 0, 0)
            for k in range(1, C.RING_COUNT):
                r = radius / C.RING_COUNT * k
                text = self._ring_font.render(ring_label(k, self.max_distance), True, label_col)
                rect = text.get_rect(midright=(round(cx - r - 6 * self.pixel_ratio),
                                               round(cy - 6 * self.pixel_ratio)))
                dirty.union_ip(surf.blit(text, rect))
            return dirty
        self._lighter(labels)

    def _draw_reading(self, geom: Geometry, angle: float, distance: float, timestamp) -> None:
        center = self._px(geom.center)
        point = self._px(polar_to_pixel(angle, distance, geom, self.max_distance))
        red, green, alpha = danger_color(range_ratio(distance, self.max_distance))

        ray_col = premul((red, green, 0), alpha)
        self._lighter(lambda surf: pygame.draw.line(
            surf, ray_col, center, point, self._w(C.READING_WIDTH)))

        dot_col = premul((red, green, 40), min(0.92, alpha + 0.25))
        self._lighter(lambda surf: pygame.draw.circle(
            surf, dot_col, point, C.DOT_RADIUS * self.pixel_ratio))

        if timestamp:
            text = self._point_font.render(angle_label(angle), True,
                                           premul(C.POINT_LABEL[:3], C.POINT_LABEL[3]))
            off = 10 * self.pixel_ratio
            lift = round(point[1] - 8 * self.pixel_ratio)
            # keep labels on the outside of the sweep near either edge
            if angle < 90:
                rect = text.get_rect(bottomleft=(round(point[0] + off), lift))
            else:
                rect = text.get_rect(bottomright=(round(point[0] - off), lift))
            self._lighter(lambda surf: surf.blit(text, rect))

    def _draw_sweep(self, geom: Geometry, angle: float) -> None:
        cx, cy = self._px(geom.center)
        sx, sy = self._px(ray_point(angle, geom))
        ax, ay = self._px(ray_point(angle - C.WEDGE_DEG, geom))

        def wedge(surf):
            dirty = pygame.Rect(int(cx), int(cy), 0, 0)
            for i in range(WEDGE_BANDS):
                f0, f1 = i / WEDGE_BANDS, (i + 1) / WEDGE_BANDS
                quad = [(cx + (ax - cx) * f0, cy + (ay - cy) * f0),
                        (cx + (sx - cx) * f0, cy + (sy - cy) * f0),
                        (cx + (sx - cx) * f1, cy + (sy - cy) * f1),
                        (cx + (ax - cx) * f1, cy + (ay - cy) * f1)]
                col = lerp_rgba(C.SWEEP_NEAR, C.SWEEP_FAR, (f0 + f1) / 2)
                dirty.union_ip(pygame.draw.polygon(surf, col, quad))
            return dirty
        self._lighter(wedge)

        line_col = premul(C.SWEEP_LINE[:3], C.SWEEP_LINE[3])
        self._lighter(lambda surf: pygame.draw.line(
            surf, line_col, (cx, cy), (sx, sy), self._w(C.SWEEP_WIDTH)))

    def _draw_hub(self, geom: Geometry) -> None:
        center = self._px(geom.center)
        outer = max(1, round(C.HUB_RADIUS * self.pixel_ratio))

        def glow(surf):
            dirty = pygame.Rect(int(center[0]), int(center[1]), 0, 0)
            for r in range(outer, 0, -1):
                col = lerp_rgba(C.HUB_INNER, C.HUB_OUTER, r / outer)
                dirty.union_ip(pygame.draw.circle(surf, col, center, r))
            return dirty
        self._lighter(glow)

    # ───────────────────────── presentation
    def blit_to(self, target: pygame.Surface, topleft: Tuple[int, int]) -> pygame.Rect:
        """Blit the backing surface at logical size (downscaled when pixel_ratio > 1)."""
        if self.pixel_ratio == 1.0 or self.geometry.empty:
            return target.blit(self.surface, topleft)
        return target.blit(pygame.transform.smoothscale(self.surface, self.size), topleft)
