"""Pixel sources: read-only 2D grids of RGBA samples.

The partition builder only ever talks to a PixelSource. A source has a fixed
bounding box, which is not necessarily anchored at (0, 0), and answers pixel
lookups by absolute coordinate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from quadart.core.tree import Rect


class PixelSource(ABC):
    """Abstract read-only RGBA pixel grid."""

    @property
    @abstractmethod
    def bounds(self) -> Rect:
        """Bounding box of the source in absolute coordinates."""

    @abstractmethod
    def at(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (r, g, b, a) sample at absolute coordinate (x, y)."""

    def region(self, rect: Rect) -> np.ndarray:
        """Return the pixels under ``rect`` as a (height, width, 4) array.

        The default implementation gathers samples one by one through at().
        Subclasses backed by arrays should override it with a slice.
        """
        out = np.empty((rect.height, rect.width, 4), dtype=np.float64)
        for j in range(rect.height):
            for i in range(rect.width):
                out[j, i] = self.at(rect.x + i, rect.y + j)
        return out

    def contains(self, rect: Rect) -> bool:
        b = self.bounds
        return (
            rect.x >= b.x
            and rect.y >= b.y
            and rect.x + rect.width <= b.x + b.width
            and rect.y + rect.height <= b.y + b.height
        )


class ArrayPixelSource(PixelSource):
    """PixelSource over an (H, W, 4) or (H, W, 3) integer array.

    Three-channel input is widened with an opaque alpha channel. The array is
    copied once and marked read-only.

    Args:
        pixels: Image array indexed [row, column, channel]
        origin: Absolute (x, y) coordinate of pixels[0, 0]
    """

    def __init__(self, pixels: np.ndarray, origin: tuple[int, int] = (0, 0)):
        if not isinstance(pixels, np.ndarray):
            raise TypeError(f"Expected ndarray, got {type(pixels)}")
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError(
                f"Expected image with shape (H, W, 3) or (H, W, 4), got {pixels.shape}"
            )
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError(f"Image must be at least 1x1, got {pixels.shape[:2]}")
        if not np.issubdtype(pixels.dtype, np.integer):
            raise ValueError(f"Expected uint8 or int dtype, got {pixels.dtype}")

        if pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=pixels.dtype)
            pixels = np.concatenate([pixels, alpha], axis=2)

        self._pixels = np.array(pixels, copy=True)
        self._pixels.setflags(write=False)
        self._origin = (int(origin[0]), int(origin[1]))

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def origin(self) -> tuple[int, int]:
        return self._origin

    @property
    def bounds(self) -> Rect:
        h, w = self._pixels.shape[:2]
        return Rect(self._origin[0], self._origin[1], w, h)

    def at(self, x: int, y: int) -> tuple[int, int, int, int]:
        col = x - self._origin[0]
        row = y - self._origin[1]
        h, w = self._pixels.shape[:2]
        if not (0 <= col < w and 0 <= row < h):
            raise IndexError(f"Pixel ({x}, {y}) outside source bounds {self.bounds}")
        r, g, b, a = self._pixels[row, col]
        return (int(r), int(g), int(b), int(a))

    def region(self, rect: Rect) -> np.ndarray:
        if not self.contains(rect):
            raise IndexError(f"Region {rect} outside source bounds {self.bounds}")
        col = rect.x - self._origin[0]
        row = rect.y - self._origin[1]
        return self._pixels[row:row + rect.height, col:col + rect.width]

    def __repr__(self) -> str:
        return f"ArrayPixelSource(bounds={self.bounds})"
