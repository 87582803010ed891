"""
Hard-coded colours, layout numbers & fonts so every module can import them
without circular dependencies.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import pygame

# -------- range --------
MAX_DISTANCE_CM = 250                   # outer ring, real-world cm
RING_COUNT      = 5
BEARING_STEP    = 30                    # degrees between dashed bearings

# -------- colours (RGB, alpha kept separate for additive drawing) --------
BLACK = (0, 0, 0)
GREEN, DIM, RED = (0, 255, 100), (0, 120, 60), (255, 60, 40)

RING_RGBA      = (0, 255, 100, 0.35)
RING_LABEL     = (0, 255, 140, 0.45)
POINT_LABEL    = (225, 255, 245, 0.7)
SWEEP_NEAR     = (0, 255, 180, 0.2)     # wedge gradient at the hub
SWEEP_FAR      = (0, 255, 120, 0.02)    # ... and at the rim
SWEEP_LINE     = (120, 255, 160, 0.95)
HUB_INNER      = (0, 255, 160, 0.8)
HUB_OUTER      = (0, 140, 90, 0.0)

# -------- drawing sizes (logical px) --------
RING_WIDTH     = 2
READING_WIDTH  = 4
DOT_RADIUS     = 7
SWEEP_WIDTH    = 2
WEDGE_DEG      = 3.0
HUB_RADIUS     = 40
DASH, GAP      = 6, 12

# -------- host window chrome --------
WINDOW_SIZE  = (1100, 750)
TITLE        = "Rover Radar"
TITLE_H      = 56
STRIP_H      = 44

# -------- fonts --------
FONT_NAMES = "segoeui,dejavusans,arial,freesans"

pygame.font.init()


@lru_cache(maxsize=None)
def font(px: int) -> pygame.font.Font:
    """Shared SysFont at *px* pixels (cached, fonts are immutable)."""
    return pygame.font.SysFont(FONT_NAMES, max(1, int(px)))


TITLE_FONT = font(30)
STRIP_FONT = font(18)

# -------- dirs --------
ROOT     = Path(__file__).resolve().parent.parent
CFG_PATH = ROOT / "scanradar_config.json"
