from __future__ import annotations

from dataclasses import dataclass

from chanplot.channels import ChannelSource, SampleSet
from chanplot.scales import generate_nice_ticks


DEFAULT_INTERVALS = 5
ELAPSED_LABEL = "elapsed seconds"
ELAPSED_DOMAIN = (0.0, 100.0)
BLANK_STATE = " "


@dataclass(frozen=True)
class AxisRange:
    """Axis domain [origin, extent], its major-interval count and optional per-tick labels."""

    origin: float
    extent: float
    n_int: int = DEFAULT_INTERVALS
    annotations: tuple[str, ...] | None = None


@dataclass(frozen=True)
class TimeAxis:
    origin: float
    extent: float
    n_int: int
    label: str
    ref_text: str


def setup_axis(channel: ChannelSource) -> AxisRange:
    """Default axis for a channel.

    Enumerated channels span their state indices, with at least two (blank)
    states. Other channels use the display limits, then the observed data
    range, then an arbitrary non-degenerate range anchored at zero.
    """
    annotations: tuple[str, ...] | None = None
    n_int = DEFAULT_INTERVALS
    if channel.kind.is_enum:
        states = tuple(channel.states)
        if len(states) < 2:
            states = (BLANK_STATE, BLANK_STATE)
        n_int = len(states) - 1
        origin, extent = 0.0, float(n_int)
        annotations = states
    else:
        origin, extent = float(channel.display_low), float(channel.display_high)

    if origin == extent:
        origin, extent = float(channel.observed_min), float(channel.observed_max)
    origin, extent = _widen(origin, extent)
    return AxisRange(origin=origin, extent=extent, n_int=n_int, annotations=annotations)


def auto_range(channel: ChannelSource, current: AxisRange) -> AxisRange:
    """Range the axis to the observed data, keeping the interval count and labels."""
    origin, extent = _widen(float(channel.observed_min), float(channel.observed_max))
    return AxisRange(
        origin=origin,
        extent=extent,
        n_int=current.n_int,
        annotations=current.annotations,
    )


def _widen(origin: float, extent: float) -> tuple[float, float]:
    """Stretch a single-value domain to one end at zero; [0, 0] becomes [0, 10]."""
    if origin != extent:
        return origin, extent
    if origin == 0.0:
        return 0.0, 10.0
    if origin < 0.0:
        return origin, 0.0
    return 0.0, extent


def auto_ends_and_interval(lo: float, hi: float) -> tuple[float, float, int]:
    """Round [lo, hi] outwards to nice tick values and count the intervals between them."""
    if hi < lo:
        lo, hi = hi, lo
    if hi == lo:
        hi = lo + 1.0
    ticks = generate_nice_ticks(lo, hi, DEFAULT_INTERVALS)
    return float(ticks[0]), float(ticks[-1]), max(1, int(ticks.size) - 1)


def resolve_time_axis(samples: SampleSet, origin: float, extent: float) -> TimeAxis:
    if samples.sample_count > 1 and origin != extent:
        lo = float(samples.delta_sec[samples.first_data])
        hi = float(samples.delta_sec[samples.last_data])
        origin, extent, n_int = auto_ends_and_interval(lo, hi)
        ref_text = samples.ref_label
        return TimeAxis(origin, extent, n_int, f"sec past {ref_text}", ref_text)
    lo, hi = ELAPSED_DOMAIN
    return TimeAxis(lo, hi, DEFAULT_INTERVALS, ELAPSED_LABEL, "")
