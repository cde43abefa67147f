from .base import (
    Area,
    DrawingSurface,
    SurfaceError,
    SurfaceEvent,
    SurfaceEventKind,
    TextJustify,
    WindowGeometry,
    WindowKind,
)
from .display import resolve_default_geometry
from .frames import FrameBuffer
from .raster import RasterArea, RasterSurface
from .recording import DrawOp, RecordingArea, RecordingSurface

__all__ = [
    "Area",
    "DrawOp",
    "DrawingSurface",
    "FrameBuffer",
    "RasterArea",
    "RasterSurface",
    "RecordingArea",
    "RecordingSurface",
    "SurfaceError",
    "SurfaceEvent",
    "SurfaceEventKind",
    "TextJustify",
    "WindowGeometry",
    "WindowKind",
    "resolve_default_geometry",
]
