from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, Sequence


Box = tuple[float, float, float, float]


class SurfaceError(RuntimeError):
    """Raised by surface implementations when the device cannot honor a request."""


class WindowKind(enum.Enum):
    SCREEN = "screen"
    PRINT = "print"
    EPS = "eps"

    @property
    def is_document(self) -> bool:
        return self is not WindowKind.SCREEN


class TextJustify(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class WindowGeometry:
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("window width/height must be > 0")


class SurfaceEventKind(enum.Enum):
    EXPOSE = "expose"
    RESIZE = "resize"
    CLOSE = "close"


@dataclass(frozen=True)
class SurfaceEvent:
    kind: SurfaceEventKind
    width: int = 0
    height: int = 0


DrawCallback = Callable[[], None]
EventSource = Iterable[SurfaceEvent]


class Area(Protocol):
    """Sub-region of a surface with its own world-coordinate mapping.

    ``frac`` is (x0, y0, x1, y1) in surface fractions, origin bottom-left;
    ``world`` is the world rectangle mapped onto it. Annotation offsets are in
    character widths measured leftwards from the region's left edge. An empty
    ``annotations`` sequence suppresses per-tick labels; ``None`` labels ticks
    numerically.
    """

    frac: Box
    world: Box

    def close(self) -> None:
        ...

    def set_foreground(self, color: str) -> None:
        ...

    def set_line_thickness(self, thickness: int) -> None:
        ...

    def set_line_key(self, key: int) -> None:
        ...

    def set_color_key(self, key: int) -> None:
        ...

    def line(self, x0: float, y0: float, x1: float, y1: float) -> None:
        ...

    def point(self, x: float, y: float) -> None:
        ...

    def mark(self, x: float, y: float, mark_num: int) -> None:
        ...

    def char(self, x: float, y: float, code: str) -> None:
        ...

    def arc(self, cx: float, cy: float, radius: float, start_deg: float, end_deg: float, incr_deg: float) -> None:
        ...

    def text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        justify: TextJustify = TextJustify.LEFT,
        height: float = 0.0,
        angle: float = 0.0,
    ) -> None:
        ...

    def grid(self) -> None:
        ...

    def grid_label(
        self,
        x_label: str,
        x_annotations: Sequence[str] | None,
        y_label: str,
        y_annotations: Sequence[str] | None,
        angle: float = 0.0,
    ) -> None:
        ...

    def annot_x(
        self,
        offset: float,
        origin: float,
        extent: float,
        n_int: int,
        draw_axis: bool,
        label: str,
        annotations: Sequence[str] | None = None,
        angle: float = 0.0,
    ) -> None:
        ...

    def annot_y(
        self,
        offset: float,
        origin: float,
        extent: float,
        n_int: int,
        draw_axis: bool,
        label: str,
        annotations: Sequence[str] | None = None,
        angle: float = 90.0,
    ) -> None:
        ...

    def annot_y_mark(self, offset: float, mark_num: int) -> None:
        ...

    def erase(self) -> None:
        ...


class DrawingSurface(Protocol):
    kind: WindowKind

    def info(self) -> WindowGeometry:
        ...

    def is_mono(self) -> bool:
        ...

    def y_frac_to_x_frac(self, y_frac: float) -> float:
        ...

    def open_area(
        self,
        frac: Box,
        world: Box,
        *,
        x_nint: int = 1,
        y_nint: int = 1,
        char_ht: float = 0.0,
    ) -> Area:
        ...

    def erase(self) -> None:
        ...

    def map(self) -> None:
        ...

    def loop(self, draw: DrawCallback) -> None:
        ...

    def replot(self, draw: DrawCallback) -> None:
        ...

    def close(self) -> None:
        ...


def default_char_height(lo: float, hi: float) -> float:
    """Character height, as a surface fraction, suited to a region spanning [lo, hi] vertically."""
    return max(0.010, 0.025 * (hi - lo))
