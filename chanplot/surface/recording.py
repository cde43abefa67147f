from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
import logging
from typing import Any, Sequence

from chanplot.surface.base import (
    Box,
    DrawCallback,
    EventSource,
    SurfaceError,
    SurfaceEventKind,
    TextJustify,
    WindowGeometry,
    WindowKind,
)


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawOp:
    area: int
    name: str
    args: tuple[Any, ...] = ()


class RecordingArea:
    def __init__(self, surface: RecordingSurface, area_id: int, frac: Box, world: Box, char_ht: float) -> None:
        self.surface = surface
        self.area_id = area_id
        self.frac = frac
        self.world = world
        self.char_ht = char_ht
        self.closed = False

    def _record(self, name: str, *args: Any) -> None:
        if self.closed:
            raise SurfaceError(f"area {self.area_id} is closed")
        self.surface._append(DrawOp(self.area_id, name, args))

    def close(self) -> None:
        self._record("close")
        self.closed = True
        self.surface.open_areas.discard(self.area_id)

    def set_foreground(self, color: str) -> None:
        self._record("set_foreground", color)

    def set_line_thickness(self, thickness: int) -> None:
        self._record("set_line_thickness", thickness)

    def set_line_key(self, key: int) -> None:
        self._record("set_line_key", key)

    def set_color_key(self, key: int) -> None:
        self._record("set_color_key", key)

    def line(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self._record("line", x0, y0, x1, y1)

    def point(self, x: float, y: float) -> None:
        self._record("point", x, y)

    def mark(self, x: float, y: float, mark_num: int) -> None:
        self._record("mark", x, y, mark_num)

    def char(self, x: float, y: float, code: str) -> None:
        self._record("char", x, y, code)

    def arc(self, cx: float, cy: float, radius: float, start_deg: float, end_deg: float, incr_deg: float) -> None:
        self._record("arc", cx, cy, radius, start_deg, end_deg, incr_deg)

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
        self._record("text", x, y, text, justify, height, angle)

    def grid(self) -> None:
        self._record("grid")

    def grid_label(
        self,
        x_label: str,
        x_annotations: Sequence[str] | None,
        y_label: str,
        y_annotations: Sequence[str] | None,
        angle: float = 0.0,
    ) -> None:
        self._record(
            "grid_label",
            x_label,
            _freeze(x_annotations),
            y_label,
            _freeze(y_annotations),
            angle,
        )

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
        self._record("annot_x", offset, origin, extent, n_int, draw_axis, label, _freeze(annotations), angle)

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
        self._record("annot_y", offset, origin, extent, n_int, draw_axis, label, _freeze(annotations), angle)

    def annot_y_mark(self, offset: float, mark_num: int) -> None:
        self._record("annot_y_mark", offset, mark_num)

    def erase(self) -> None:
        self._record("erase")


class RecordingSurface:
    """Drawing surface that records primitives instead of rasterizing them.

    Used for headless rendering checks and by the test-suite. Closing the
    surface while regions are still open is recorded in ``leaked_areas``.
    """

    def __init__(
        self,
        kind: WindowKind = WindowKind.SCREEN,
        geometry: WindowGeometry | None = None,
        *,
        mono: bool = False,
        events: EventSource | None = None,
    ) -> None:
        self.kind = kind
        self.geometry = geometry or WindowGeometry(0, 0, 800, 600)
        self.mono = mono
        self.events = events
        self.ops: list[DrawOp] = []
        self.open_areas: set[int] = set()
        self.leaked_areas: set[int] = set()
        self.areas: dict[int, RecordingArea] = {}
        self.closed = False
        self.mapped = False
        self.draw_count = 0
        self._ids = count(1)

    def _append(self, op: DrawOp) -> None:
        self.ops.append(op)

    def _check_open(self) -> None:
        if self.closed:
            raise SurfaceError("surface is closed")

    def info(self) -> WindowGeometry:
        self._check_open()
        return self.geometry

    def is_mono(self) -> bool:
        return self.mono

    def y_frac_to_x_frac(self, y_frac: float) -> float:
        return y_frac * self.geometry.height / self.geometry.width

    def open_area(
        self,
        frac: Box,
        world: Box,
        *,
        x_nint: int = 1,
        y_nint: int = 1,
        char_ht: float = 0.0,
    ) -> RecordingArea:
        self._check_open()
        area_id = next(self._ids)
        area = RecordingArea(self, area_id, frac, world, char_ht)
        self.areas[area_id] = area
        self.open_areas.add(area_id)
        self._append(DrawOp(area_id, "open", (frac, world, x_nint, y_nint, char_ht)))
        return area

    def erase(self) -> None:
        self._check_open()
        self._append(DrawOp(0, "erase_surface"))

    def map(self) -> None:
        self._check_open()
        self.mapped = True

    def loop(self, draw: DrawCallback) -> None:
        self._check_open()
        if self.events is None:
            self._draw(draw)
            return
        for event in self.events:
            if event.kind is SurfaceEventKind.CLOSE:
                break
            if event.kind is SurfaceEventKind.RESIZE:
                self.geometry = WindowGeometry(self.geometry.x, self.geometry.y, event.width, event.height)
            self._check_open()
            self._draw(draw)

    def replot(self, draw: DrawCallback) -> None:
        self._check_open()
        self._draw(draw)

    def close(self) -> None:
        if self.closed:
            return
        if self.open_areas:
            LOGGER.warning("closing surface with %d open area(s)", len(self.open_areas))
            self.leaked_areas |= self.open_areas
        self.closed = True

    def _draw(self, draw: DrawCallback) -> None:
        self.draw_count += 1
        self._append(DrawOp(0, "redraw", (self.draw_count,)))
        draw()

    def ops_named(self, name: str, area: int | None = None) -> list[DrawOp]:
        return [op for op in self.ops if op.name == name and (area is None or op.area == area)]

    def segments(self, area: int | None = None) -> list[tuple[float, float, float, float]]:
        return [op.args for op in self.ops_named("line", area)]

    def clear(self) -> None:
        self.ops.clear()


def _freeze(values: Sequence[str] | None) -> tuple[str, ...] | None:
    return None if values is None else tuple(values)
