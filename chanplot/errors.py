from __future__ import annotations


class PlotError(Exception):
    """Base class for plotting failures reported to the caller."""


class PlotConfigError(PlotError, ValueError):
    """The caller configured the master, a slave or a channel in an unsupported way."""


class PlotResourceError(PlotError):
    """A surface or a drawing region could not be opened."""


class PlotSurfaceError(PlotError):
    """The drawing surface failed while rendering; the master may be re-opened."""
