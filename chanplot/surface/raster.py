from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image, ImageColor

from chanplot.raster import (
    DirtyState,
    clip_rect,
    dash_pattern_for_key,
    draw_mark,
    draw_markers,
    draw_segment,
    draw_text_anchored,
    fill_rect,
    new_canvas,
    text_size,
)
from chanplot.raster.canvas import RGBA
from chanplot.scales import format_ticks_for_axis, interval_ticks
from chanplot.surface.base import (
    Box,
    DrawCallback,
    EventSource,
    SurfaceError,
    SurfaceEventKind,
    TextJustify,
    WindowGeometry,
    WindowKind,
    default_char_height,
)
from chanplot.surface.frames import FrameBuffer


LOGGER = logging.getLogger(__name__)

PALETTE = ("black", "blue", "red", "forestgreen", "darkorange", "magenta", "teal", "saddlebrown", "purple")
GRID_COLOR: RGBA = (200, 200, 200, 255)
MIN_FONT_PX = 6.0
DOCUMENT_FORMATS = {WindowKind.PRINT: "PDF", WindowKind.EPS: "EPS"}


def parse_color(color: str) -> RGBA:
    rgb = ImageColor.getrgb(color)
    if len(rgb) == 4:
        return (int(rgb[0]), int(rgb[1]), int(rgb[2]), int(rgb[3]))
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255)


class RasterArea:
    """Sub-region drawing into its surface's numpy canvas; nothing is clipped to the region."""

    def __init__(
        self,
        surface: RasterSurface,
        frac: Box,
        world: Box,
        *,
        x_nint: int,
        y_nint: int,
        char_ht: float,
    ) -> None:
        wx0, wy0, wx1, wy1 = world
        if wx0 == wx1 or wy0 == wy1:
            raise SurfaceError(f"degenerate world rectangle: {world}")
        self.surface = surface
        self.frac = frac
        self.world = world
        self.x_nint = x_nint
        self.y_nint = y_nint
        self.char_ht = char_ht if char_ht > 0 else default_char_height(frac[1], frac[3])
        self.foreground = surface.foreground
        self.thickness = 1
        self.dash: tuple[int, ...] = ()
        self.closed = False

    @property
    def char_ht_x(self) -> float:
        return self.surface.y_frac_to_x_frac(self.char_ht)

    @property
    def font_px(self) -> float:
        return max(MIN_FONT_PX, self.char_ht * self.surface.height)

    def close(self) -> None:
        self.closed = True
        self.surface._release(self)

    def set_foreground(self, color: str) -> None:
        self.foreground = parse_color(color)

    def set_line_thickness(self, thickness: int) -> None:
        if thickness <= 0:
            raise ValueError("line thickness must be > 0")
        self.thickness = thickness

    def set_line_key(self, key: int) -> None:
        if self.surface.is_mono():
            self.dash = dash_pattern_for_key(key)
        else:
            self.dash = ()
            self.foreground = parse_color(PALETTE[key % len(PALETTE)])

    def set_color_key(self, key: int) -> None:
        if not self.surface.is_mono():
            self.foreground = parse_color(PALETTE[key % len(PALETTE)])

    def world_to_frac(self, x: float, y: float) -> tuple[float, float]:
        fx0, fy0, fx1, fy1 = self.frac
        wx0, wy0, wx1, wy1 = self.world
        return (
            fx0 + (x - wx0) / (wx1 - wx0) * (fx1 - fx0),
            fy0 + (y - wy0) / (wy1 - wy0) * (fy1 - fy0),
        )

    def _px(self, x: float, y: float) -> tuple[int, int]:
        return self.surface.frac_to_pixel(*self.world_to_frac(x, y))

    def line(self, x0: float, y0: float, x1: float, y1: float) -> None:
        self._check_open()
        ax, ay = self._px(x0, y0)
        bx, by = self._px(x1, y1)
        self._segment_px(ax, ay, bx, by, self.foreground, self.thickness, self.dash)

    def point(self, x: float, y: float) -> None:
        self._check_open()
        px, py = self._px(x, y)
        size = max(2, self.thickness + 1)
        draw_markers(self.surface.canvas, np.asarray([px]), np.asarray([py]), self.foreground, size=size)
        self.surface.dirty.touch(px - size, py - size, px + size, py + size)

    def mark(self, x: float, y: float, mark_num: int) -> None:
        self._check_open()
        self._mark_px(*self._px(x, y), mark_num)

    def char(self, x: float, y: float, code: str) -> None:
        self._check_open()
        px, py = self._px(x, y)
        _, h = text_size(code, font_size_px=self.font_px)
        self._text_px(px, py + h // 2, code, TextJustify.CENTER, self.font_px, 0)

    def arc(self, cx: float, cy: float, radius: float, start_deg: float, end_deg: float, incr_deg: float) -> None:
        self._check_open()
        if incr_deg <= 0:
            raise ValueError("arc increment must be > 0")
        if end_deg <= start_deg:
            end_deg += 360.0
        steps = max(1, int(math.ceil((end_deg - start_deg) / incr_deg)))
        angles = np.radians(np.linspace(start_deg, end_deg, steps + 1))
        xs = cx + radius * np.cos(angles)
        ys = cy + radius * np.sin(angles)
        for i in range(steps):
            self.line(float(xs[i]), float(ys[i]), float(xs[i + 1]), float(ys[i + 1]))

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
        self._check_open()
        px, py = self._px(x, y)
        font_px = max(MIN_FONT_PX, height * self.surface.height) if height > 0 else self.font_px
        self._text_px(px, py, text, justify, font_px, _quarter_turns(angle))

    def grid(self) -> None:
        self._check_open()
        fx0, fy0, fx1, fy1 = self.frac
        for t in interval_ticks(fx0, fx1, self.x_nint)[1:-1]:
            self._frac_segment(float(t), fy0, float(t), fy1, GRID_COLOR, 1, (1, 3))
        for t in interval_ticks(fy0, fy1, self.y_nint)[1:-1]:
            self._frac_segment(fx0, float(t), fx1, float(t), GRID_COLOR, 1, (1, 3))
        self._frac_segment(fx0, fy0, fx1, fy0, self.surface.foreground, 1, ())
        self._frac_segment(fx1, fy0, fx1, fy1, self.surface.foreground, 1, ())
        self._frac_segment(fx1, fy1, fx0, fy1, self.surface.foreground, 1, ())
        self._frac_segment(fx0, fy1, fx0, fy0, self.surface.foreground, 1, ())

    def grid_label(
        self,
        x_label: str,
        x_annotations: Sequence[str] | None,
        y_label: str,
        y_annotations: Sequence[str] | None,
        angle: float = 0.0,
    ) -> None:
        wx0, wy0, wx1, wy1 = self.world
        self.grid()
        self.annot_x(0, wx0, wx1, self.x_nint, False, x_label, x_annotations, angle)
        self.annot_y(0, wy0, wy1, self.y_nint, False, y_label, y_annotations, 90.0)

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
        self._check_open()
        fx0, fy0, fx1, _ = self.frac
        ch = self.char_ht
        y = fy0 - offset * ch
        ticks = interval_ticks(origin, extent, n_int)
        xs = interval_ticks(fx0, fx1, n_int)
        color = self.surface.foreground
        if draw_axis:
            self._frac_segment(fx0, y, fx1, y, color, 1, ())
        for fx in xs.tolist():
            self._frac_segment(fx, y, fx, y - 0.4 * ch, color, 1, ())
        for fx, text in zip(xs.tolist(), _tick_texts(ticks, annotations), strict=False):
            px, py = self.surface.frac_to_pixel(fx, y - 1.6 * ch)
            self._text_px(px, py, text, TextJustify.CENTER, self.font_px, _quarter_turns(angle), color)
        if label:
            px, py = self.surface.frac_to_pixel((fx0 + fx1) / 2.0, y - 3.4 * ch)
            self._text_px(px, py, label, TextJustify.CENTER, self.font_px, 0, color)

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
        self._check_open()
        fx0, fy0, _, fy1 = self.frac
        ch = self.char_ht
        chx = self.char_ht_x
        x = fx0 - offset * chx
        ticks = interval_ticks(origin, extent, n_int)
        ys = interval_ticks(fy0, fy1, n_int)
        color = self.foreground
        if draw_axis:
            self._frac_segment(x, fy0, x, fy1, color, 1, ())
        for fy in ys.tolist():
            self._frac_segment(x, fy, x - 0.4 * chx, fy, color, 1, ())
        for fy, text in zip(ys.tolist(), _tick_texts(ticks, annotations), strict=False):
            px, py = self.surface.frac_to_pixel(x - 0.6 * chx, fy - 0.4 * ch)
            self._text_px(px, py, text, TextJustify.RIGHT, self.font_px, 0, color)
        if label:
            px, py = self.surface.frac_to_pixel(x - 4.6 * chx, (fy0 + fy1) / 2.0)
            self._text_px(px, py, label, TextJustify.CENTER, self.font_px, _quarter_turns(angle), color)

    def annot_y_mark(self, offset: float, mark_num: int) -> None:
        self._check_open()
        fx0, _, _, fy1 = self.frac
        px, py = self.surface.frac_to_pixel(fx0 - (offset + 2.0) * self.char_ht_x, fy1 + self.char_ht)
        self._mark_px(px, py, mark_num)

    def erase(self) -> None:
        self._check_open()
        fx0, fy0, fx1, fy1 = self.frac
        ax, ay = self.surface.frac_to_pixel(fx0, fy0)
        bx, by = self.surface.frac_to_pixel(fx1, fy1)
        fill_rect(self.surface.canvas, ax, ay, bx, by, self.surface.background)
        self.surface.dirty.touch(ax, ay, bx, by)

    def _check_open(self) -> None:
        if self.closed:
            raise SurfaceError("area is closed")
        self.surface._check_open()

    def _frac_segment(
        self,
        fx0: float,
        fy0: float,
        fx1: float,
        fy1: float,
        color: RGBA,
        width: int,
        dash: tuple[int, ...],
    ) -> None:
        ax, ay = self.surface.frac_to_pixel(fx0, fy0)
        bx, by = self.surface.frac_to_pixel(fx1, fy1)
        self._segment_px(ax, ay, bx, by, color, width, dash)

    def _segment_px(self, ax: int, ay: int, bx: int, by: int, color: RGBA, width: int, dash: tuple[int, ...]) -> None:
        draw_segment(self.surface.canvas, ax, ay, bx, by, color=color, width=width, dash=dash)
        pad = width // 2
        self.surface.dirty.touch(min(ax, bx) - pad, min(ay, by) - pad, max(ax, bx) + pad, max(ay, by) + pad)

    def _mark_px(self, px: int, py: int, mark_num: int) -> None:
        size = max(5, int(self.font_px * 0.7))
        draw_mark(self.surface.canvas, px, py, mark_num, self.foreground, size=size)
        self.surface.dirty.touch(px - size, py - size, px + size, py + size)

    def _text_px(
        self,
        px: int,
        py: int,
        text: str,
        justify: TextJustify,
        font_px: float,
        rotate_deg: int,
        color: RGBA | None = None,
    ) -> None:
        if not text.strip():
            return
        draw_text_anchored(
            self.surface.canvas,
            px,
            py,
            text,
            color or self.foreground,
            justify=justify.value,
            font_size_px=font_px,
            rotate_deg=rotate_deg,
        )
        w, h = text_size(text, font_size_px=font_px)
        reach = max(w, h) + 2
        self.surface.dirty.touch(px - reach, py - reach, px + reach, py + reach)


class RasterSurface:
    """numpy RGBA drawing surface.

    SCREEN surfaces publish every redraw to a torch ``FrameBuffer`` and save
    what was published. PRINT and EPS surfaces write a PDF or Encapsulated
    PostScript file when closed.
    """

    def __init__(
        self,
        kind: WindowKind = WindowKind.SCREEN,
        geometry: WindowGeometry | None = None,
        *,
        path: str | Path | None = None,
        mono: bool = False,
        events: EventSource | None = None,
        frame_buffer: FrameBuffer | None = None,
        background: str = "white",
        foreground: str = "black",
    ) -> None:
        if kind.is_document and path is None:
            raise ValueError(f"{kind.value} surface requires an output path")
        self.kind = kind
        self.geometry = geometry or WindowGeometry(0, 0, 800, 600)
        self.path = Path(path) if path is not None else None
        self.mono = mono
        self.events = events
        self.background = parse_color(background)
        if frame_buffer is None and kind is WindowKind.SCREEN:
            frame_buffer = FrameBuffer(self.geometry.height, self.geometry.width, self.background)
        self.frame_buffer = frame_buffer
        self.foreground = parse_color(foreground)
        self.canvas = new_canvas(self.geometry.width, self.geometry.height, self.background)
        self.dirty = DirtyState()
        self.mapped = False
        self.closed = False
        self._open_areas: list[RasterArea] = []
        self._published_full = False

    @property
    def width(self) -> int:
        return self.geometry.width

    @property
    def height(self) -> int:
        return self.geometry.height

    @property
    def open_area_count(self) -> int:
        return len(self._open_areas)

    def info(self) -> WindowGeometry:
        self._check_open()
        return self.geometry

    def is_mono(self) -> bool:
        return self.mono

    def y_frac_to_x_frac(self, y_frac: float) -> float:
        return y_frac * self.height / self.width

    def frac_to_pixel(self, fx: float, fy: float) -> tuple[int, int]:
        return (int(round(fx * (self.width - 1))), int(round((1.0 - fy) * (self.height - 1))))

    def open_area(
        self,
        frac: Box,
        world: Box,
        *,
        x_nint: int = 1,
        y_nint: int = 1,
        char_ht: float = 0.0,
    ) -> RasterArea:
        self._check_open()
        area = RasterArea(self, frac, world, x_nint=x_nint, y_nint=y_nint, char_ht=char_ht)
        self._open_areas.append(area)
        return area

    def erase(self) -> None:
        self._check_open()
        self.canvas[:, :] = np.asarray(self.background, dtype=np.uint8)
        self.dirty.touch_all(self.width, self.height)

    def map(self) -> None:
        self._check_open()
        self.mapped = True

    def loop(self, draw: DrawCallback) -> None:
        self._check_open()
        if self.events is None:
            self._redraw(draw)
            return
        for event in self.events:
            if event.kind is SurfaceEventKind.CLOSE:
                break
            if event.kind is SurfaceEventKind.RESIZE:
                self._resize(event.width, event.height)
            self._check_open()
            self._redraw(draw)

    def replot(self, draw: DrawCallback) -> None:
        self._check_open()
        self._redraw(draw)

    def close(self) -> None:
        if self.closed:
            return
        if self._open_areas:
            LOGGER.warning("closing surface with %d open area(s)", len(self._open_areas))
        self.closed = True
        fmt = DOCUMENT_FORMATS.get(self.kind)
        if fmt is not None and self.path is not None:
            self.save(self.path, fmt)

    def save(self, path: str | Path, fmt: str | None = None) -> None:
        if self.frame_buffer is not None:
            self.publish()
            image = self.frame_buffer.to_image()
        else:
            image = self.to_image()
        try:
            image.save(path, format=fmt)
        except (OSError, ValueError) as exc:
            raise SurfaceError(f"failed to write {path}: {exc}") from exc
        LOGGER.info("wrote %s plot to %s", fmt or "image", path)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.canvas[:, :, :3]))

    def publish(self) -> None:
        if self.frame_buffer is None:
            self.dirty.clear()
            return
        if not self._published_full:
            self.frame_buffer.publish(self.canvas)
            self._published_full = True
        elif self.dirty.dirty and self.dirty.rect is not None:
            rect = clip_rect(self.dirty.rect, self.width, self.height)
            if rect is not None:
                self.frame_buffer.publish(self.canvas, rect)
        self.dirty.clear()

    def _redraw(self, draw: DrawCallback) -> None:
        draw()
        self.publish()

    def _resize(self, width: int, height: int) -> None:
        self.geometry = WindowGeometry(self.geometry.x, self.geometry.y, width, height)
        self.canvas = new_canvas(width, height, self.background)
        self.dirty.touch_all(width, height)
        if self.frame_buffer is not None:
            LOGGER.info("surface resized to %dx%d; reallocating frame buffer", width, height)
            self.frame_buffer = FrameBuffer(height, width, self.background)
            self._published_full = False

    def _release(self, area: RasterArea) -> None:
        if area in self._open_areas:
            self._open_areas.remove(area)

    def _check_open(self) -> None:
        if self.closed:
            raise SurfaceError("surface is closed")


def _quarter_turns(angle: float) -> int:
    return int(round(angle / 90.0)) * 90 % 360


def _tick_texts(ticks: np.ndarray, annotations: Sequence[str] | None) -> list[str]:
    if annotations is None:
        return format_ticks_for_axis(ticks)
    return [str(a) for a in annotations]


def open_raster_surface(kind: WindowKind, geometry: WindowGeometry, name: str, title: str) -> RasterSurface:
    """Default surface opener: document kinds treat ``name`` as the output path."""
    if kind.is_document and not name:
        raise SurfaceError(f"{kind.value} output requires a file name")
    LOGGER.debug("opening %s raster surface %r (%dx%d)", kind.value, title, geometry.width, geometry.height)
    return RasterSurface(kind, geometry, path=name if kind.is_document else None)
