from __future__ import annotations

import numpy as np


RGBA = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0] or x < 0 or x >= dst.shape[1]:
        return
    a = color[3] / 255.0
    if a >= 1.0:
        dst[y, x] = color
        return
    current = dst[y, x, :3].astype(np.float32)
    dst[y, x, 0:3] = (np.asarray(color[0:3], dtype=np.float32) * a + current * (1.0 - a)).astype(np.uint8)
    dst[y, x, 3] = 255


def fill_rect(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    """Fill the inclusive pixel rectangle spanned by two corners."""
    left = max(0, min(x0, x1))
    right = min(dst.shape[1] - 1, max(x0, x1))
    top = max(0, min(y0, y1))
    bottom = min(dst.shape[0] - 1, max(y0, y1))
    if right < left or bottom < top:
        return
    dst[top : bottom + 1, left : right + 1] = color


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    fill_rect(dst, x0, y, x1, y, color)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    fill_rect(dst, x, y0, x, y1, color)
