from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Protocol

import numpy as np

from chanplot.channels import ChannelSource
from chanplot.surface.base import Area


@dataclass
class ContinuityState:
    """Where a channel's drawn line left off: no point yet, a pending gap, and the last point."""

    first: bool = True
    skip: bool = False
    last_x: float = 0.0
    last_y: float = 0.0

    def copy(self) -> ContinuityState:
        return replace(self)


@dataclass(frozen=True)
class RenderModes:
    line: bool = True
    point: bool = False
    mark: bool = False
    show_status: bool = False


class XSource(Protocol):
    """Supplies the X coordinate of each sample for one geometry family."""

    stair_step: bool

    def x_at(self, index: int) -> float:
        ...

    def is_missing(self, index: int) -> bool:
        ...

    def is_restart(self, index: int) -> bool:
        ...

    def element_limit(self, el_count: int) -> int:
        ...

    def array_x(self, index: int, n: int) -> np.ndarray:
        ...


class _OwnFlagsOnly:
    def is_missing(self, index: int) -> bool:
        return False

    def is_restart(self, index: int) -> bool:
        return False

    def element_limit(self, el_count: int) -> int:
        return el_count

    def array_x(self, index: int, n: int) -> np.ndarray:
        return np.arange(n, dtype=np.float64)


class TimeXSource(_OwnFlagsOnly):
    """X is the sample's offset in seconds from the reference time."""

    stair_step = True

    def __init__(self, delta_sec: np.ndarray) -> None:
        self.delta_sec = delta_sec

    def x_at(self, index: int) -> float:
        return float(self.delta_sec[index])


class IndexXSource(_OwnFlagsOnly):
    """X is the sample's buffer index."""

    stair_step = True

    def x_at(self, index: int) -> float:
        return float(index)


class PairedXSource:
    """X is another channel's value; its missing and restart flags count as the plotted channel's own."""

    stair_step = False

    def __init__(self, channel: ChannelSource) -> None:
        self.channel = channel

    def x_at(self, index: int) -> float:
        return self.channel.value_at(index)

    def is_missing(self, index: int) -> bool:
        return self.channel.is_missing(index)

    def is_restart(self, index: int) -> bool:
        return self.channel.is_restart(index)

    def element_limit(self, el_count: int) -> int:
        return min(el_count, self.channel.el_count)

    def array_x(self, index: int, n: int) -> np.ndarray:
        return self.channel.elements_at(index)[:n]


def wrap_x(x: float, extent: float | None) -> float:
    """Fold ``x`` into (0, extent] when it runs past a positive extent."""
    if extent is None or extent <= 0 or x <= extent:
        return x
    return x - (math.ceil(x / extent) - 1) * extent


def stream_channel(
    area: Area,
    channel: ChannelSource,
    x_source: XSource,
    begin: int,
    end: int,
    *,
    incremental: bool,
    state: ContinuityState,
    modes: RenderModes,
    mark_num: int = 0,
    wrap_extent: float | None = None,
) -> ContinuityState:
    """Draw samples ``begin`` through ``end`` (inclusive, wrapping at the buffer capacity).

    Returns the continuity state to store for the next call. Batch calls start
    from a fresh state; incremental calls continue from ``state``.
    """
    capacity = channel.capacity
    if not 0 <= begin < capacity or not 0 <= end < capacity:
        raise ValueError(f"sample range [{begin}, {end}] outside buffer of capacity {capacity}")
    if not channel.connected or not channel.is_data:
        return state.copy()

    st = state.copy() if incremental else ContinuityState()
    n_el = x_source.element_limit(channel.el_count)
    drew_fresh = False
    i = begin
    while True:
        missing = channel.is_missing(i) or x_source.is_missing(i)
        restart = channel.is_restart(i) or x_source.is_restart(i)
        filled = channel.is_filled(i)
        # A filled flag met after this call has drawn new samples belongs to an overwritten index.
        stale = incremental and drew_fresh and filled

        if missing:
            st.skip = True
        elif st.first or st.skip or restart or stale:
            if n_el > 1:
                draw_array(area, channel, x_source, i, n_el)
            else:
                st.last_x = wrap_x(x_source.x_at(i), wrap_extent)
                st.last_y = channel.value_at(i)
                _draw_glyphs(area, channel, i, st.last_x, st.last_y, modes, mark_num)
            st.skip = False
            drew_fresh = drew_fresh or not filled
        elif filled:
            pass
        else:
            if n_el > 1:
                draw_array(area, channel, x_source, i, n_el)
            else:
                new_x = wrap_x(x_source.x_at(i), wrap_extent)
                new_y = channel.value_at(i)
                if modes.line and x_source.stair_step and channel.kind.is_enum:
                    area.line(st.last_x, st.last_y, new_x, st.last_y)
                    st.last_x = new_x
                if modes.line:
                    area.line(st.last_x, st.last_y, new_x, new_y)
                _draw_glyphs(area, channel, i, new_x, new_y, modes, mark_num)
                st.last_x, st.last_y = new_x, new_y
            drew_fresh = True

        st.first = False
        if i == end:
            break
        i = (i + 1) % capacity
    return st


def draw_array(area: Area, channel: ChannelSource, x_source: XSource, index: int, n_el: int) -> None:
    """Draw one multi-element sample as a polyline of ``n_el`` points."""
    xs = x_source.array_x(index, n_el)
    ys = channel.elements_at(index)[:n_el]
    for k in range(1, n_el):
        area.line(float(xs[k - 1]), float(ys[k - 1]), float(xs[k]), float(ys[k]))


def _draw_glyphs(
    area: Area,
    channel: ChannelSource,
    index: int,
    x: float,
    y: float,
    modes: RenderModes,
    mark_num: int,
) -> None:
    if modes.mark:
        area.mark(x, y, mark_num)
    code = channel.status_code(index)
    if modes.show_status and code != " ":
        area.char(x, y, code)
    elif modes.point:
        area.point(x, y)
