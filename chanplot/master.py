from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
import logging
from typing import Any, Callable

from chanplot.axis import AxisRange, auto_range, resolve_time_axis, setup_axis
from chanplot.channels import ChannelSource, SampleSet
from chanplot.errors import PlotConfigError, PlotResourceError, PlotSurfaceError
from chanplot.geometry import GeometryKind, routines_for
from chanplot.streamer import ContinuityState
from chanplot.surface.base import Area, Box, DrawingSurface, SurfaceError, WindowGeometry, WindowKind
from chanplot.surface.display import resolve_default_geometry
from chanplot.surface.raster import open_raster_surface


LOGGER = logging.getLogger(__name__)

SurfaceOpener = Callable[[WindowKind, WindowGeometry, str, str], DrawingSurface]


class PlotAttr(enum.Enum):
    LINE = "line"
    MARK = "mark"
    POINT = "point"
    SHOW = "show_status"
    UNDER = "fill_under"
    WRAP = "wrap_x"
    XLAB = "x_label"
    XANN = "x_annot"
    YLAB = "y_label"
    YANN = "y_annot"
    MONO = "mono"
    FG1 = "fg1"
    FG2 = "fg2"


class AxisAttr(enum.Enum):
    X_CHANNEL = "x_channel"
    FOREGROUND = "foreground"
    BACKGROUND = "background"


@dataclass
class RenderOptions:
    line: bool = True
    point: bool = False
    mark: bool = False
    show_status: bool = False
    fill_under: bool = False
    wrap_x: bool = False
    x_label: bool = True
    x_annot: bool = True
    y_label: bool = True
    y_annot: bool = True
    mono: bool = False


_OPTION_NAMES = frozenset(f.name for f in fields(RenderOptions))


@dataclass
class Titles:
    top: str = ""
    left: str = ""
    bottom: str = ""
    right: str = ""


@dataclass(eq=False)
class PlotSlave:
    """One plotted channel: its axis, its drawn region and where its line left off."""

    channel: ChannelSource
    mark_num: int
    line_key: int
    axis: AxisRange
    x_channel: bool = False
    fg: str | None = None
    # Stored only; surfaces have no per-region background primitive.
    bg: str | None = None
    area: Area | None = None
    frac: Box | None = None
    continuity: ContinuityState = field(default_factory=ContinuityState)

    def set_attr(self, attr: AxisAttr | str, value: Any) -> PlotSlave:
        attr = _coerce_attr(AxisAttr, attr)
        if attr is AxisAttr.X_CHANNEL:
            self.x_channel = bool(value)
        elif attr is AxisAttr.FOREGROUND:
            self.fg = str(value) if value else None
        elif attr is AxisAttr.BACKGROUND:
            self.bg = str(value) if value else None
        return self

    def setup_axis(self) -> AxisRange:
        self.axis = setup_axis(self.channel)
        return self.axis

    def auto_range(self) -> AxisRange:
        self.axis = auto_range(self.channel, self.axis)
        return self.axis

    def open_area(
        self,
        surface: DrawingSurface,
        frac: Box,
        world: Box,
        *,
        x_nint: int = 1,
        y_nint: int = 1,
        char_ht: float = 0.0,
    ) -> Area:
        """Replace this slave's drawn region; the previous region is closed first."""
        self.release_area()
        try:
            self.area = surface.open_area(frac, world, x_nint=x_nint, y_nint=y_nint, char_ht=char_ht)
        except SurfaceError as exc:
            raise PlotResourceError(f"could not open a region for channel {self.channel.name!r}: {exc}") from exc
        self.frac = frac
        return self.area

    def release_area(self) -> None:
        if self.area is not None:
            self.area.close()
        self.area = None
        self.frac = None

    def contains(self, x_frac: float, y_frac: float) -> bool:
        if self.frac is None:
            return False
        x0, y0, x1, y1 = self.frac
        return x0 <= x_frac <= x1 and y0 <= y_frac <= y1


class PlotMaster:
    """One plot surface, its rendering configuration and its ordered channels.

    A master is opened on a surface (``open`` or ``attach``), populated with
    ``add_channel``, given a geometry, and then drawn either through the redraw
    loop (``win_loop`` / ``win_replot``) or by calling ``draw_grid`` once and
    ``plot_samples`` as new samples arrive.
    """

    def __init__(self, samples: SampleSet, *, opener: SurfaceOpener = open_raster_surface) -> None:
        self.samples = samples
        self.opener = opener
        self.surface: DrawingSurface | None = None
        self.kind = WindowKind.SCREEN
        self.name = ""
        self.title = ""
        self.window: WindowGeometry | None = None
        self.mono = False
        self._init_common()

    def _init_common(self) -> None:
        self.geometry: GeometryKind | None = None
        self.options = RenderOptions()
        self.titles = Titles()
        self.alt_fg1: str | None = None
        self.alt_fg2: str | None = None
        self.label = ""
        self.ref_text = ""
        self.slaves: list[PlotSlave] = []
        self.origin = 0.0
        self.extent = 0.0
        self.n_int = 5
        if self.samples.sample_count >= 1:
            self.extent = float(self.samples.delta_sec[self.samples.last_data])

    @property
    def no_color(self) -> bool:
        return self.mono or self.options.mono

    # Lifecycle.

    def open(
        self,
        kind: WindowKind = WindowKind.SCREEN,
        *,
        name: str = "",
        title: str = "",
        full_init: bool = True,
        opener: SurfaceOpener | None = None,
    ) -> PlotMaster:
        """Open a surface. A partial init re-opens at the geometry saved by the last shutdown."""
        if self.surface is not None:
            self.done(quit=True)
        geometry = self.window if (not full_init and self.window is not None) else resolve_default_geometry()
        try:
            surface = (opener or self.opener)(kind, geometry, name, title)
        except SurfaceError as exc:
            raise PlotResourceError(f"could not open {kind.value} surface {name!r}: {exc}") from exc
        self._init_common()
        self.surface = surface
        self.kind = kind
        self.name = name
        self.title = title
        self.mono = surface.is_mono()
        self.window = geometry
        LOGGER.debug("opened %s surface %r at %s", kind.value, title, geometry)
        return self

    def attach(self, surface: DrawingSurface) -> PlotMaster:
        """Plot onto a surface owned by the caller."""
        if self.surface is not None and self.surface is not surface:
            self.done(quit=True)
        self._init_common()
        self.surface = surface
        self.kind = surface.kind
        self.mono = surface.is_mono()
        return self

    def done(self, quit: bool = False) -> None:
        """Shut down when ``quit`` is set: slave regions first, then the surface."""
        if not quit:
            return
        for slave in self.slaves:
            slave.release_area()
        surface, self.surface = self.surface, None
        try:
            if surface is not None:
                self._save_window(surface)
                surface.close()
        except SurfaceError as exc:
            raise PlotSurfaceError(f"failed to close surface: {exc}") from exc
        finally:
            self.slaves = []

    def _save_window(self, surface: DrawingSurface) -> None:
        try:
            self.window = surface.info()
        except SurfaceError as exc:
            LOGGER.warning("keeping saved window geometry %s: %s", self.window, exc)

    # Configuration.

    def add_channel(self, channel: ChannelSource) -> PlotSlave:
        if not channel.kind.is_numeric:
            LOGGER.warning("rejecting non-numeric channel %r (%s)", channel.name, channel.kind.value)
            raise PlotConfigError(f"channel {channel.name!r} has non-numeric kind {channel.kind.value}")
        position = len(self.slaves)
        slave = PlotSlave(
            channel=channel,
            mark_num=position,
            line_key=position + 1,
            axis=setup_axis(channel),
        )
        self.slaves.append(slave)
        return slave

    def set_attr(self, attr: PlotAttr | str, value: Any) -> PlotMaster:
        attr = _coerce_attr(PlotAttr, attr)
        if attr is PlotAttr.FG1:
            self.alt_fg1 = str(value) if value else None
        elif attr is PlotAttr.FG2:
            self.alt_fg2 = str(value) if value else None
        elif attr.value in _OPTION_NAMES:
            setattr(self.options, attr.value, bool(value))
        else:
            raise PlotConfigError(f"unsupported plot attribute: {attr!r}")
        return self

    def set_geometry(self, kind: GeometryKind | str) -> PlotMaster:
        self.geometry = kind if isinstance(kind, GeometryKind) else GeometryKind.parse(kind)
        return self

    def set_titles(
        self,
        top: str | None = None,
        left: str | None = None,
        bottom: str | None = None,
        right: str | None = None,
    ) -> PlotMaster:
        if top is not None:
            self.titles.top = top
        if left is not None:
            self.titles.left = left
        if bottom is not None:
            self.titles.bottom = bottom
        if right is not None:
            self.titles.right = right
        return self

    def set_x_domain(self, origin: float, extent: float, n_int: int, label: str) -> PlotMaster:
        """Fix the time axis ahead of streaming, when samples have not arrived yet."""
        if n_int <= 0:
            raise ValueError("n_int must be > 0")
        self.origin = origin
        self.extent = extent
        self.n_int = n_int
        self.label = label
        return self

    def x_slave(self) -> PlotSlave | None:
        """The slave supplying X values: the first flagged one, else the first slave."""
        for slave in self.slaves:
            if slave.x_channel:
                return slave
        return self.slaves[0] if self.slaves else None

    def y_slaves(self) -> list[PlotSlave]:
        x_slave = self.x_slave()
        return [slave for slave in self.slaves if slave is not x_slave]

    def slave_at(self, x_frac: float, y_frac: float) -> PlotSlave | None:
        for slave in self.slaves:
            if slave.contains(x_frac, y_frac):
                return slave
        return None

    # Drawing.

    def draw_grid(self) -> None:
        routines = routines_for(self.geometry)
        self._require_surface()
        LOGGER.debug("grid phase: geometry=%s slaves=%d", self.geometry.value, len(self.slaves))
        try:
            routines.draw_grid(self)
        except SurfaceError as exc:
            raise PlotSurfaceError(f"grid phase failed: {exc}") from exc

    def plot_samples(self, begin: int, end: int, incremental: bool = True) -> None:
        routines = routines_for(self.geometry)
        self._require_surface()
        LOGGER.debug("stream samples [%d, %d] incremental=%s", begin, end, incremental)
        try:
            routines.draw_samples(self, begin, end, incremental)
        except SurfaceError as exc:
            raise PlotSurfaceError(f"sample drawing failed: {exc}") from exc

    def plot(self) -> None:
        """Redraw callback: grid phase, then a batch replay of every buffered sample."""
        surface = self._require_surface()
        try:
            self.window = surface.info()
        except SurfaceError as exc:
            raise PlotSurfaceError(f"surface unavailable: {exc}") from exc
        self.draw_grid()
        if self.samples.sample_count > 0:
            self.plot_samples(self.samples.first_data, self.samples.last_data, incremental=False)

    def erase_samples(self) -> None:
        self._require_surface()
        for slave in self.slaves:
            slave.continuity = ContinuityState()
            if slave.area is not None:
                try:
                    slave.area.erase()
                except SurfaceError as exc:
                    raise PlotSurfaceError(f"erase failed: {exc}") from exc

    def win_loop(self) -> None:
        surface = self._require_surface()
        routines_for(self.geometry)
        self._resolve_time_axis()
        try:
            surface.map()
            self.mono = surface.is_mono()
            surface.loop(self.plot)
            self.window = surface.info()
        except SurfaceError as exc:
            raise PlotSurfaceError(f"redraw loop failed: {exc}") from exc

    def win_replot(self) -> None:
        surface = self._require_surface()
        routines_for(self.geometry)
        self._resolve_time_axis()
        try:
            surface.erase()
            surface.replot(self.plot)
        except SurfaceError as exc:
            raise PlotSurfaceError(f"replot failed: {exc}") from exc

    def _resolve_time_axis(self) -> None:
        axis = resolve_time_axis(self.samples, self.origin, self.extent)
        self.origin = axis.origin
        self.extent = axis.extent
        self.n_int = axis.n_int
        self.label = axis.label
        self.ref_text = axis.ref_text

    def _require_surface(self) -> DrawingSurface:
        if self.surface is None:
            raise PlotConfigError("plot master has no surface; call open() or attach() first")
        return self.surface


def _coerce_attr(enum_cls: type[enum.Enum], attr: Any) -> Any:
    if isinstance(attr, enum_cls):
        return attr
    if not isinstance(attr, str):
        raise PlotConfigError(f"unknown {enum_cls.__name__} selector: {attr!r}")
    try:
        return enum_cls(attr.strip().lower())
    except ValueError:
        raise PlotConfigError(f"unknown {enum_cls.__name__} selector: {attr!r}") from None
