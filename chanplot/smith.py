from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from chanplot.layout import layout_plot
from chanplot.surface.base import Area, TextJustify

if TYPE_CHECKING:
    from chanplot.master import PlotMaster


ARC_INCREMENT_DEG = 5.0
RADIUS_LABELS = ("5", "2", "1", "0.5", "0.2", "0")
LABEL_GAP = 0.015


@dataclass(frozen=True)
class ReactanceArc:
    """Fixed arc of one overlay family, drawn counterclockwise from ``start`` to ``end`` degrees."""

    cx: float
    cy: float
    radius: float
    start: float
    end: float
    label: str
    label_x: float
    label_y: float
    justify: TextJustify


ADMITTANCE_ARCS = (
    ReactanceArc(0.0, 0.75, 0.25, 270.0, 37.0, "2", 0.19, 0.92, TextJustify.RIGHT),
    ReactanceArc(0.0, 0.25, 0.25, 323.0, 90.0, "2", 0.19, 0.08, TextJustify.RIGHT),
    ReactanceArc(0.0, 1.0, 0.5, 270.0, 0.0, "1", 0.5, 1.02, TextJustify.CENTER),
    ReactanceArc(0.0, 0.0, 0.5, 0.0, 90.0, "1", 0.5, -0.02, TextJustify.CENTER),
    ReactanceArc(0.0, 1.5, 1.0, 270.0, 323.0, "0.5", 0.81, 0.92, TextJustify.LEFT),
    ReactanceArc(0.0, -0.5, 1.0, 37.0, 90.0, "0.5", 0.81, 0.08, TextJustify.LEFT),
)

IMPEDANCE_ARCS = (
    ReactanceArc(1.0, 0.75, 0.25, 143.0, 270.0, "2", 0.81, 0.92, TextJustify.LEFT),
    ReactanceArc(1.0, 0.25, 0.25, 90.0, 217.0, "2", 0.81, 0.08, TextJustify.LEFT),
    ReactanceArc(1.0, 1.0, 0.5, 180.0, 270.0, "1", 0.5, 1.02, TextJustify.CENTER),
    ReactanceArc(1.0, 0.0, 0.5, 90.0, 180.0, "1", 0.5, -0.02, TextJustify.CENTER),
    ReactanceArc(1.0, 1.5, 1.0, 217.0, 270.0, "0.5", 0.19, 0.92, TextJustify.RIGHT),
    ReactanceArc(1.0, -0.5, 1.0, 90.0, 143.0, "0.5", 0.19, 0.08, TextJustify.RIGHT),
)


def draw_admittance_family(area: Area, *, primary: bool) -> None:
    """Circles tangent at (0, 0.5). As a secondary family the outer circle, axis and labels are left out."""
    if primary:
        area.line(0.0, 0.5, 1.0, 0.5)
    for r in range(6, 0, -1):
        rad = r / 12.0
        if r != 6 or primary:
            area.arc(rad, 0.5, rad, 0.0, 360.0, ARC_INCREMENT_DEG)
        if primary:
            area.text(rad + rad + LABEL_GAP, 0.5, RADIUS_LABELS[r - 1], justify=TextJustify.LEFT)
    for arc in ADMITTANCE_ARCS:
        area.arc(arc.cx, arc.cy, arc.radius, arc.start, arc.end, ARC_INCREMENT_DEG)
        if primary:
            area.text(arc.label_x, arc.label_y, arc.label, justify=arc.justify)


def draw_impedance_family(area: Area) -> None:
    """Circles tangent at (1, 0.5) with resistance and reactance labels."""
    area.line(0.0, 0.5, 1.0, 0.5)
    for r in range(6, 0, -1):
        rad = r / 12.0
        x = 1.0 - rad
        area.arc(x, 0.5, rad, 0.0, 360.0, ARC_INCREMENT_DEG)
        area.text(x - rad - LABEL_GAP, 0.5, RADIUS_LABELS[r - 1], justify=TextJustify.RIGHT)
    for arc in IMPEDANCE_ARCS:
        area.arc(arc.cx, arc.cy, arc.radius, arc.start, arc.end, ARC_INCREMENT_DEG)
        area.text(arc.label_x, arc.label_y, arc.label, justify=arc.justify)


def smith_grid(master: PlotMaster, *, admittance: bool, impedance: bool) -> None:
    """Grid phase for the Smith geometries; both families together form the immittance chart."""
    layout = layout_plot(master, 1)
    xlo = layout.xlo + 3.0 * layout.char_ht_x
    ylo = layout.ylo + 2.0 * layout.char_ht
    xhi = layout.xhi - layout.char_ht
    yhi = layout.yhi - 2.0 * layout.char_ht
    frac = (xlo, ylo, xhi, yhi)
    immittance = admittance and impedance

    overlay = master.surface.open_area(frac, (0.0, 0.0, 1.0, 1.0))
    try:
        if admittance:
            if not master.no_color and master.alt_fg2:
                overlay.set_foreground(master.alt_fg2)
            elif immittance or not master.no_color:
                overlay.set_line_key(1)
            draw_admittance_family(overlay, primary=not immittance)
        if impedance:
            if not master.no_color and master.alt_fg1:
                overlay.set_foreground(master.alt_fg1)
            else:
                overlay.set_line_key(0)
            draw_impedance_family(overlay)
    finally:
        overlay.close()

    x_slave = master.x_slave()
    if x_slave is None:
        return
    x_slave.release_area()
    for slave in master.y_slaves():
        world = (x_slave.axis.origin, slave.axis.origin, x_slave.axis.extent, slave.axis.extent)
        area = slave.open_area(master.surface, frac, world)
        if slave.fg and not master.no_color:
            area.set_foreground(slave.fg)
