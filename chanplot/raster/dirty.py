from __future__ import annotations

from dataclasses import dataclass


Rect = tuple[int, int, int, int]


@dataclass
class DirtyState:
    """Pixel rectangle (x, y, w, h) touched since the last frame was published."""

    dirty: bool = True
    rect: Rect | None = None

    def touch(self, x0: int, y0: int, x1: int, y1: int) -> None:
        rect = (min(x0, x1), min(y0, y1), abs(x1 - x0) + 1, abs(y1 - y0) + 1)
        self.rect = union_rect(self.rect, rect)
        self.dirty = True

    def touch_all(self, width: int, height: int) -> None:
        self.rect = (0, 0, width, height)
        self.dirty = True

    def clear(self) -> None:
        self.dirty = False
        self.rect = None


def union_rect(a: Rect | None, b: Rect | None) -> Rect | None:
    if a is None:
        return b
    if b is None:
        return a
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    x0 = min(ax, bx)
    y0 = min(ay, by)
    x1 = max(ax + aw, bx + bw)
    y1 = max(ay + ah, by + bh)
    return (x0, y0, x1 - x0, y1 - y0)


def clip_rect(rect: Rect, width: int, height: int) -> Rect | None:
    x, y, w, h = rect
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(width, x + w)
    y1 = min(height, y + h)
    if x1 <= x0 or y1 <= y0:
        return None
    return (x0, y0, x1 - x0, y1 - y0)
