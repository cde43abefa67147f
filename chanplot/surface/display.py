from __future__ import annotations

import math

from chanplot.surface.base import WindowGeometry


DEFAULT_ASPECT_RATIO = 4.0 / 3.0
DEFAULT_DISPLAY_FRACTION = 0.6
DEFAULT_MIN_WIDTH = 640
DEFAULT_MIN_HEIGHT = 480
DEFAULT_FALLBACK_SIZE = (800, 600)


def resolve_default_geometry(
    *,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    display_fraction: float = DEFAULT_DISPLAY_FRACTION,
    min_width: int = DEFAULT_MIN_WIDTH,
    min_height: int = DEFAULT_MIN_HEIGHT,
) -> WindowGeometry:
    """Window geometry for a full (non re-opened) plot window, sized from the screen when one is present."""
    if aspect_ratio <= 0:
        raise ValueError("aspect_ratio must be > 0")
    if display_fraction <= 0:
        raise ValueError("display_fraction must be > 0")
    if min_width <= 0 or min_height <= 0:
        raise ValueError("min_width/min_height must be > 0")

    screen = _detect_screen_size()
    if screen is None:
        w, h = _fit_aspect(DEFAULT_FALLBACK_SIZE[0], DEFAULT_FALLBACK_SIZE[1], aspect_ratio, min_width, min_height)
        return WindowGeometry(0, 0, w, h)

    sw, sh = screen
    w, h = _fit_aspect(
        max(1, int(sw * display_fraction)),
        max(1, int(sh * display_fraction)),
        aspect_ratio,
        min_width,
        min_height,
    )
    return WindowGeometry((sw - w) // 2 if sw > w else 0, (sh - h) // 2 if sh > h else 0, w, h)


def _fit_aspect(max_w: int, max_h: int, aspect_ratio: float, min_width: int, min_height: int) -> tuple[int, int]:
    w = max_w
    h = int(round(w / aspect_ratio))
    if h > max_h:
        h = max_h
        w = int(round(h * aspect_ratio))
    w = max(w, min_width)
    h = max(h, min_height)
    return (max(1, int(math.floor(w))), max(1, int(math.floor(h))))


def _detect_screen_size() -> tuple[int, int] | None:
    try:
        import tkinter as tk
    except ImportError:
        return None
    try:
        root = tk.Tk()
    except tk.TclError:
        return None
    try:
        root.withdraw()
        width = int(root.winfo_screenwidth())
        height = int(root.winfo_screenheight())
    finally:
        root.destroy()
    if width > 0 and height > 0:
        return (width, height)
    return None
