from __future__ import annotations

import numpy as np

from chanplot.raster.canvas import RGBA, draw_hline, draw_pixel, draw_vline
from chanplot.raster.draw_lines import draw_segment


MARK_SHAPES = ("square", "cross", "x", "diamond", "triangle", "circle", "hourglass", "star")


def mark_shape(mark_num: int) -> str:
    return MARK_SHAPES[mark_num % len(MARK_SHAPES)]


def draw_markers(dst: np.ndarray, xs: np.ndarray, ys: np.ndarray, color: RGBA, size: int = 1) -> None:
    radius = max(0, size // 2)
    for x, y in zip(xs.tolist(), ys.tolist(), strict=False):
        for yy in range(int(y) - radius, int(y) + radius + 1):
            for xx in range(int(x) - radius, int(x) + radius + 1):
                draw_pixel(dst, xx, yy, color)


def draw_mark(dst: np.ndarray, x: int, y: int, mark_num: int, color: RGBA, size: int = 7) -> None:
    """Draw the glyph selected by ``mark_num`` centred on a pixel."""
    r = max(2, size // 2)
    shape = mark_shape(mark_num)
    if shape == "square":
        draw_hline(dst, x - r, x + r, y - r, color)
        draw_hline(dst, x - r, x + r, y + r, color)
        draw_vline(dst, x - r, y - r, y + r, color)
        draw_vline(dst, x + r, y - r, y + r, color)
    elif shape == "cross":
        draw_hline(dst, x - r, x + r, y, color)
        draw_vline(dst, x, y - r, y + r, color)
    elif shape == "x":
        draw_segment(dst, x - r, y - r, x + r, y + r, color=color)
        draw_segment(dst, x - r, y + r, x + r, y - r, color=color)
    elif shape == "diamond":
        _outline(dst, [(x, y - r), (x + r, y), (x, y + r), (x - r, y)], color)
    elif shape == "triangle":
        _outline(dst, [(x, y - r), (x + r, y + r), (x - r, y + r)], color)
    elif shape == "circle":
        _ring(dst, x, y, r, color)
    elif shape == "hourglass":
        _outline(dst, [(x - r, y - r), (x + r, y - r), (x - r, y + r), (x + r, y + r)], color)
    else:
        draw_hline(dst, x - r, x + r, y, color)
        draw_vline(dst, x, y - r, y + r, color)
        draw_segment(dst, x - r, y - r, x + r, y + r, color=color)
        draw_segment(dst, x - r, y + r, x + r, y - r, color=color)


def _outline(dst: np.ndarray, corners: list[tuple[int, int]], color: RGBA) -> None:
    for (xa, ya), (xb, yb) in zip(corners, corners[1:] + corners[:1], strict=True):
        draw_segment(dst, xa, ya, xb, yb, color=color)


def _ring(dst: np.ndarray, cx: int, cy: int, r: int, color: RGBA) -> None:
    steps = max(12, 8 * r)
    angles = np.linspace(0.0, 2.0 * np.pi, steps, endpoint=False)
    for a in angles.tolist():
        draw_pixel(dst, int(round(cx + r * np.cos(a))), int(round(cy + r * np.sin(a))), color)
