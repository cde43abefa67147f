from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from chanplot.surface.base import TextJustify, default_char_height

if TYPE_CHECKING:
    from chanplot.master import PlotMaster


TITLE_CHAR_HT = 0.012
TIMESTAMP_CHAR_HT = 0.008
TIMESTAMP_FORMAT = "%b %d, %Y %H:%M:%S"


@dataclass(frozen=True)
class PlotLayout:
    """Fractional rectangle of the first (lowest) grid and the character heights suited to it.

    Further grids are stacked by adding ``y_part`` to ``ylo`` and ``yhi``.
    """

    xlo: float
    ylo: float
    xhi: float
    yhi: float
    y_part: float
    char_ht: float
    char_ht_x: float


def layout_plot(master: PlotMaster, n_grids: int, *, now: datetime | None = None) -> PlotLayout:
    """Draw the titles (and the document timestamp) and partition what remains into ``n_grids`` strips."""
    surface = master.surface
    n_grids = max(1, n_grids)
    xlo, xhi = 0.0, 0.98
    ylo, yhi = 0.0, 0.98
    ch = TITLE_CHAR_HT
    chx = surface.y_frac_to_x_frac(ch)
    titles = master.titles

    area = surface.open_area((0.0, 0.0, 1.0, 1.0), (0.0, 0.0, 1.0, 1.0))
    try:
        if master.kind.is_document:
            stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
            area.text(0.98, 0.995, stamp, justify=TextJustify.RIGHT, height=TIMESTAMP_CHAR_HT)
        if titles.top:
            yhi = 1.0 - ch
            area.text(0.5, yhi, titles.top, justify=TextJustify.CENTER, height=ch)
            yhi -= 2.0 * ch
        if titles.left:
            xlo = 2.0 * chx
            area.text(xlo, 0.5, titles.left, justify=TextJustify.CENTER, height=ch, angle=90.0)
            xlo += 2.0 * chx
        if titles.bottom:
            ylo = 2.0 * ch
            area.text(0.5, ylo, titles.bottom, justify=TextJustify.CENTER, height=ch)
            ylo += 2.0 * ch
        if titles.right:
            xhi = 1.0 - 2.0 * chx
            area.text(xhi, 0.5, titles.right, justify=TextJustify.CENTER, height=ch, angle=90.0)
            xhi -= 2.0 * chx
    finally:
        area.close()

    y_part = (yhi - ylo) / n_grids
    yhi = ylo + y_part
    ch = default_char_height(ylo, yhi)
    return PlotLayout(
        xlo=xlo,
        ylo=ylo,
        xhi=xhi,
        yhi=yhi,
        y_part=y_part,
        char_ht=ch,
        char_ht_x=surface.y_frac_to_x_frac(ch),
    )
