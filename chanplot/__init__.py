from chanplot.axis import AxisRange, auto_range, setup_axis
from chanplot.channels import Channel, ChannelSource, SampleSet, ValueKind
from chanplot.errors import PlotConfigError, PlotError, PlotResourceError, PlotSurfaceError
from chanplot.geometry import GeometryKind
from chanplot.master import AxisAttr, PlotAttr, PlotMaster, PlotSlave
from chanplot.streamer import ContinuityState, RenderModes, stream_channel

__all__ = [
    "AxisAttr",
    "AxisRange",
    "Channel",
    "ChannelSource",
    "ContinuityState",
    "GeometryKind",
    "PlotAttr",
    "PlotConfigError",
    "PlotError",
    "PlotMaster",
    "PlotResourceError",
    "PlotSlave",
    "PlotSurfaceError",
    "RenderModes",
    "SampleSet",
    "ValueKind",
    "auto_range",
    "setup_axis",
    "stream_channel",
]
