from __future__ import annotations

import enum
from dataclasses import dataclass
from functools import partial
import logging
from typing import TYPE_CHECKING, Callable, Sequence

from chanplot.errors import PlotConfigError
from chanplot.layout import layout_plot
from chanplot.smith import smith_grid
from chanplot.streamer import IndexXSource, PairedXSource, RenderModes, TimeXSource, XSource, stream_channel
from chanplot.surface.base import Area, default_char_height

if TYPE_CHECKING:
    from chanplot.master import PlotMaster, PlotSlave


LOGGER = logging.getLogger(__name__)

ENUM_LINE_THICKNESS = 3
SINGLE_GRID_LEFT_CHARS = 12.0
GRID_BOTTOM_CHARS = 6.0
SHARED_AXIS_STEP_CHARS = 6


class GeometryKind(enum.Enum):
    TIME_Y = "time_y"
    TIME_YY = "time_yy"
    XY = "xy"
    XYY = "xyy"
    INDEX_Y = "index_y"
    INDEX_YY = "index_yy"
    SMITH_IMPEDANCE = "smith_impedance"
    SMITH_ADMITTANCE = "smith_admittance"
    SMITH_IMMITTANCE = "smith_immittance"

    @classmethod
    def parse(cls, raw: str) -> GeometryKind:
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise PlotConfigError(f"unknown plot geometry: {raw!r}") from None


@dataclass(frozen=True)
class XAxis:
    origin: float
    extent: float
    n_int: int
    label: str


@dataclass(frozen=True)
class GeometryRoutines:
    draw_grid: Callable[[PlotMaster], None]
    draw_samples: Callable[[PlotMaster, int, int, bool], None]


def routines_for(kind: GeometryKind | None) -> GeometryRoutines:
    if kind is None:
        raise PlotConfigError("plot geometry has not been set")
    try:
        return ROUTINES[kind]
    except KeyError:
        raise PlotConfigError(f"unsupported plot geometry: {kind!r}") from None


def time_x_axis(master: PlotMaster) -> XAxis:
    if master.origin == master.extent:
        return XAxis(0.0, 100.0, 5, master.label)
    return XAxis(master.origin, master.extent, master.n_int, master.label)


def index_x_axis(master: PlotMaster) -> XAxis:
    """Element-index domain; when every channel is scalar, the requested sample count."""
    xmax = max((slave.channel.el_count for slave in master.slaves), default=0)
    if xmax == 1:
        xmax = master.samples.requested_count - 1
    return XAxis(0.0, float(max(1, xmax)), 1, "")


def paired_x_axis(x_slave: PlotSlave) -> XAxis:
    return XAxis(x_slave.axis.origin, x_slave.axis.extent, x_slave.axis.n_int, x_slave.channel.label)


# Grid routines.


def time_grid(master: PlotMaster) -> None:
    _single_grids(master, master.slaves, time_x_axis(master), enum_thick=True)


def index_grid(master: PlotMaster) -> None:
    _single_grids(master, master.slaves, index_x_axis(master), enum_thick=True)


def xy_grid(master: PlotMaster) -> None:
    x_slave = master.x_slave()
    if x_slave is None:
        layout_plot(master, 1)
        return
    x_slave.release_area()
    _single_grids(master, master.y_slaves(), paired_x_axis(x_slave), enum_thick=False)


def time_shared_grid(master: PlotMaster) -> None:
    _shared_grid(master, master.slaves, time_x_axis(master), key_auxiliary=False)


def index_shared_grid(master: PlotMaster) -> None:
    _shared_grid(master, master.slaves, index_x_axis(master), key_auxiliary=False)


def xy_shared_grid(master: PlotMaster) -> None:
    x_slave = master.x_slave()
    if x_slave is None:
        layout_plot(master, 1)
        return
    x_slave.release_area()
    _shared_grid(master, master.y_slaves(), paired_x_axis(x_slave), key_auxiliary=True)


def _single_grids(master: PlotMaster, slaves: Sequence[PlotSlave], x_axis: XAxis, *, enum_thick: bool) -> None:
    """One grid per channel, stacked bottom-up."""
    surface = master.surface
    layout = layout_plot(master, len(slaves))
    options = master.options
    ylo, yhi = layout.ylo, layout.yhi
    for slave in slaves:
        ch = default_char_height(ylo, yhi)
        chx = surface.y_frac_to_x_frac(ch)
        frac = (layout.xlo + SINGLE_GRID_LEFT_CHARS * chx, ylo + GRID_BOTTOM_CHARS * ch, layout.xhi, yhi)
        world = (x_axis.origin, slave.axis.origin, x_axis.extent, slave.axis.extent)
        area = slave.open_area(surface, frac, world, x_nint=x_axis.n_int, y_nint=slave.axis.n_int, char_ht=ch)
        if slave.fg and not master.no_color:
            area.set_foreground(slave.fg)
        elif options.line and enum_thick and slave.channel.kind.is_enum:
            area.set_line_thickness(ENUM_LINE_THICKNESS)
        area.grid_label(
            x_axis.label if options.x_label else "",
            None if options.x_annot else (),
            slave.channel.label if options.y_label else "",
            _y_annotations(master, slave),
            0.0,
        )
        ylo += layout.y_part
        yhi += layout.y_part


def _shared_grid(master: PlotMaster, slaves: Sequence[PlotSlave], x_axis: XAxis, *, key_auxiliary: bool) -> None:
    """One grid shared by every channel, with a floating Y axis per channel after the first.

    ``key_auxiliary`` applies line keys to the auxiliary channels even in
    monochrome; otherwise a key is applied in monochrome only past key 1.
    """
    surface = master.surface
    layout = layout_plot(master, 1)
    options = master.options
    ch = layout.char_ht
    xlo = layout.xlo + SHARED_AXIS_STEP_CHARS * layout.char_ht_x * len(slaves)
    ylo = layout.ylo + GRID_BOTTOM_CHARS * ch
    frac = (xlo, ylo, layout.xhi, layout.yhi)
    offset = 0
    draw_axis = False
    for slave in slaves:
        world = (x_axis.origin, slave.axis.origin, x_axis.extent, slave.axis.extent)
        area = slave.open_area(surface, frac, world, x_nint=x_axis.n_int, y_nint=slave.axis.n_int, char_ht=ch)
        _style_shared(master, slave, area, draw_axis, key_auxiliary)
        if not draw_axis:
            area.grid()
            area.annot_x(
                0,
                x_axis.origin,
                x_axis.extent,
                x_axis.n_int,
                False,
                x_axis.label if options.x_label else "",
                None if options.x_annot else (),
                0.0,
            )
        area.annot_y(
            offset,
            slave.axis.origin,
            slave.axis.extent,
            slave.axis.n_int,
            draw_axis,
            slave.channel.label if options.y_label else "",
            _y_annotations(master, slave),
            90.0,
        )
        if options.mark:
            area.annot_y_mark(offset, slave.mark_num)
        offset += SHARED_AXIS_STEP_CHARS
        draw_axis = True


def _style_shared(master: PlotMaster, slave: PlotSlave, area: Area, draw_axis: bool, key_auxiliary: bool) -> None:
    options = master.options
    if slave.fg and not master.no_color:
        area.set_foreground(slave.fg)
    elif options.line:
        if key_auxiliary:
            if draw_axis or not master.no_color:
                area.set_line_key(slave.line_key)
            return
        if slave.channel.kind.is_enum:
            area.set_line_thickness(ENUM_LINE_THICKNESS)
        if slave.line_key > 1 or not master.no_color:
            area.set_line_key(slave.line_key)
    elif not master.no_color:
        area.set_color_key(slave.line_key)


def _y_annotations(master: PlotMaster, slave: PlotSlave) -> tuple[str, ...] | None:
    if not master.options.y_annot:
        return ()
    return slave.axis.annotations


# Sample routines.


def time_samples(master: PlotMaster, begin: int, end: int, incremental: bool) -> None:
    wrap = master.extent if master.options.wrap_x else None
    _stream_slaves(master, master.slaves, TimeXSource(master.samples.delta_sec), begin, end, incremental, wrap)


def index_samples(master: PlotMaster, begin: int, end: int, incremental: bool) -> None:
    wrap = index_x_axis(master).extent if master.options.wrap_x else None
    _stream_slaves(master, master.slaves, IndexXSource(), begin, end, incremental, wrap)


def paired_samples(master: PlotMaster, begin: int, end: int, incremental: bool) -> None:
    x_slave = master.x_slave()
    if x_slave is None:
        return
    wrap = x_slave.axis.extent if master.options.wrap_x else None
    _stream_slaves(master, master.y_slaves(), PairedXSource(x_slave.channel), begin, end, incremental, wrap)


def _stream_slaves(
    master: PlotMaster,
    slaves: Sequence[PlotSlave],
    x_source: XSource,
    begin: int,
    end: int,
    incremental: bool,
    wrap_extent: float | None,
) -> None:
    options = master.options
    modes = RenderModes(line=options.line, point=options.point, mark=options.mark, show_status=options.show_status)
    for slave in slaves:
        if not slave.channel.connected or not slave.channel.is_data:
            continue
        if slave.area is None:
            raise PlotConfigError(f"channel {slave.channel.name!r} has no drawn region; run the grid phase first")
        slave.continuity = stream_channel(
            slave.area,
            slave.channel,
            x_source,
            begin,
            end,
            incremental=incremental,
            state=slave.continuity,
            modes=modes,
            mark_num=slave.mark_num,
            wrap_extent=wrap_extent,
        )


ROUTINES: dict[GeometryKind, GeometryRoutines] = {
    GeometryKind.TIME_Y: GeometryRoutines(time_grid, time_samples),
    GeometryKind.TIME_YY: GeometryRoutines(time_shared_grid, time_samples),
    GeometryKind.XY: GeometryRoutines(xy_grid, paired_samples),
    GeometryKind.XYY: GeometryRoutines(xy_shared_grid, paired_samples),
    GeometryKind.INDEX_Y: GeometryRoutines(index_grid, index_samples),
    GeometryKind.INDEX_YY: GeometryRoutines(index_shared_grid, index_samples),
    GeometryKind.SMITH_IMPEDANCE: GeometryRoutines(partial(smith_grid, admittance=False, impedance=True), paired_samples),
    GeometryKind.SMITH_ADMITTANCE: GeometryRoutines(partial(smith_grid, admittance=True, impedance=False), paired_samples),
    GeometryKind.SMITH_IMMITTANCE: GeometryRoutines(partial(smith_grid, admittance=True, impedance=True), paired_samples),
}
