from __future__ import annotations

from typing import Sequence

import numpy as np

from chanplot.raster.canvas import RGBA, draw_pixel


# On/off run lengths in pixels, indexed by line key. Key 0 is solid.
DASH_PATTERNS: tuple[tuple[int, ...], ...] = (
    (),
    (6, 4),
    (2, 3),
    (8, 3, 2, 3),
    (12, 6),
    (4, 2, 4, 6),
)


def dash_pattern_for_key(key: int) -> tuple[int, ...]:
    if key <= 0:
        return DASH_PATTERNS[0]
    return DASH_PATTERNS[1 + (key - 1) % (len(DASH_PATTERNS) - 1)]


def draw_segment(
    dst: np.ndarray,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    *,
    color: RGBA,
    width: int = 1,
    dash: Sequence[int] = (),
    phase: int = 0,
) -> int:
    """Bresenham segment; returns the dash phase so polylines keep a continuous pattern."""
    period = sum(dash)
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        if period == 0 or _dash_on(dash, phase % period):
            _draw_square_brush(dst, x0, y0, color=color, width=width)
        phase += 1
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
    return phase


def _dash_on(dash: Sequence[int], offset: int) -> bool:
    on = True
    for run in dash:
        if offset < run:
            return on
        offset -= run
        on = not on
    return on


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color)
