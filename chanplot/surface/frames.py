from __future__ import annotations

import logging
import threading

import numpy as np
from PIL import Image
import torch

from chanplot.raster.canvas import RGBA
from chanplot.raster.dirty import Rect


LOGGER = logging.getLogger(__name__)


class FrameBuffer:
    """Published image of a screen surface.

    The surface draws into its numpy canvas and copies the changed region here
    on every publish. Readers (a presenter, ``RasterSurface.save``) only ever
    see whole revisions.
    """

    def __init__(self, height: int, width: int, background: RGBA = (255, 255, 255, 255)) -> None:
        if height <= 0 or width <= 0:
            raise ValueError("frame height and width must be > 0")
        self.height = height
        self.width = width
        self._lock = threading.Lock()
        self._revision = 0
        self._pixels = torch.tensor(background, dtype=torch.uint8).view(1, 1, 4).expand(height, width, 4).clone()

    @property
    def revision(self) -> int:
        return self._revision

    def snapshot(self) -> torch.Tensor:
        with self._lock:
            return self._pixels.clone()

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.snapshot()[:, :, :3].numpy()))

    def publish(self, canvas: np.ndarray, rect: Rect | None = None) -> int:
        """Copy ``rect`` (x, y, w, h) of ``canvas``, or the whole canvas, as a new revision."""
        _check_canvas(canvas, self.height, self.width)
        if rect is not None:
            _check_rect(rect, self.width, self.height)
        source = torch.from_numpy(np.ascontiguousarray(canvas))
        with self._lock:
            if rect is None:
                self._pixels = source.clone()
            else:
                x, y, w, h = rect
                self._pixels[y : y + h, x : x + w] = source[y : y + h, x : x + w]
            self._revision += 1
            revision = self._revision
        LOGGER.debug("published frame revision %d (%s)", revision, "full" if rect is None else f"rect {rect}")
        return revision


def _check_canvas(canvas: np.ndarray, height: int, width: int) -> None:
    if canvas.dtype != np.uint8:
        raise ValueError("canvas must be uint8")
    if canvas.shape != (height, width, 4):
        raise ValueError(f"canvas has shape {canvas.shape}, frame expects {(height, width, 4)}")


def _check_rect(rect: Rect, width: int, height: int) -> None:
    x, y, w, h = rect
    if w <= 0 or h <= 0:
        raise ValueError("rect width/height must be > 0")
    if x < 0 or y < 0 or x + w > width or y + h > height:
        raise ValueError(f"rect {rect} exceeds {width}x{height} frame")
