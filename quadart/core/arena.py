"""Raster arena and RasterRef handles.

All mutable raster memory used during a refinement run (the Canvas and every
captured Frame) lives in one pre-allocated buffer. Components hold RasterRefs,
small immutable handles (offset, height, width, channels, generation), and get
NumPy views back from the arena on demand.

Key Features:
- Bump allocation: rasters are laid out back to back, never freed individually
- Explicit snapshots: snapshot() is the only way to clone a raster
- Generation counter: views of refs from before reset() are rejected

Example:
    >>> arena = RasterArena(size_bytes=1 << 20)
    >>> canvas = arena.alloc_raster(32, 32)
    >>> arena.view(canvas)[:] = (255, 0, 0, 255)
    >>> frame = arena.snapshot(canvas)
    >>> arena.reset()  # every ref above is now stale
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class RasterRef:
    """Handle to a (height, width, channels) raster stored in a RasterArena.

    Attributes:
        offset: Byte offset into the arena buffer
        height: Number of rows
        width: Number of columns
        channels: Samples per pixel (4 for RGBA)
        dtype: NumPy sample type
        generation: Arena generation the ref was allocated in
    """

    offset: int
    height: int
    width: int
    channels: int
    dtype: np.dtype
    generation: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if self.height < 1 or self.width < 1 or self.channels < 1:
            raise ValueError(
                f"raster dimensions must be positive, got "
                f"{self.height}x{self.width}x{self.channels}"
            )

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.height, self.width, self.channels)

    @property
    def nbytes(self) -> int:
        return self.height * self.width * self.channels * self.dtype.itemsize


class RasterArena:
    """Contiguous buffer handing out rasters with a bump pointer.

    Attributes:
        size: Total arena size in bytes
        offset: Bytes handed out so far
        generation: Incremented by reset() to invalidate outstanding refs
    """

    def __init__(self, size_bytes: int):
        if size_bytes <= 0:
            raise ValueError(f"size_bytes must be positive, got {size_bytes}")

        self._buffer = bytearray(size_bytes)
        self._size = size_bytes
        self._offset = 0
        self._generation = 0

    @staticmethod
    def bytes_for(
        height: int,
        width: int,
        count: int = 1,
        channels: int = 4,
        dtype: np.dtype[Any] | type | str = np.uint8,
    ) -> int:
        """Bytes needed to hold ``count`` rasters of the given shape, with alignment slack."""
        dt = np.dtype(dtype)
        per_raster = height * width * channels * dt.itemsize + dt.alignment
        return max(per_raster * count, 1)

    @property
    def size(self) -> int:
        return self._size

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def available(self) -> int:
        return self._size - self._offset

    def reset(self) -> None:
        """Release every raster at once. Outstanding refs become stale."""
        self._offset = 0
        self._generation += 1

    def alloc_raster(
        self,
        height: int,
        width: int,
        channels: int = 4,
        dtype: np.dtype[Any] | type | str = np.uint8,
    ) -> RasterRef:
        """Reserve space for a raster. Contents are whatever the buffer held before.

        Raises:
            ValueError: If the arena cannot fit the raster
        """
        dt = np.dtype(dtype)
        nbytes = height * width * channels * dt.itemsize

        alignment = dt.alignment
        start = (self._offset + alignment - 1) // alignment * alignment
        end = start + nbytes
        if end > self._size:
            raise ValueError(
                f"Arena out of memory: raster {height}x{width}x{channels} needs "
                f"{nbytes} bytes at offset {start}, arena size is {self._size} "
                f"(available: {self.available})"
            )

        ref = RasterRef(
            offset=start,
            height=height,
            width=width,
            channels=channels,
            dtype=dt,
            generation=self._generation,
        )
        self._offset = end
        return ref

    def view(self, ref: RasterRef) -> np.ndarray:
        """Return a writable NumPy view of ``ref`` backed by arena memory.

        Raises:
            ValueError: If the ref predates the last reset() or overruns the buffer
        """
        if ref.generation != self._generation:
            raise ValueError(
                f"Stale RasterRef: arena was reset (current generation {self._generation}, "
                f"ref is from generation {ref.generation})"
            )
        if ref.offset + ref.nbytes > self._size:
            raise ValueError(
                f"RasterRef out of bounds: offset={ref.offset}, nbytes={ref.nbytes}, "
                f"arena size={self._size}"
            )

        return np.ndarray(
            shape=ref.shape,
            dtype=ref.dtype,
            buffer=self._buffer,
            offset=ref.offset,
        )

    def fill(self, ref: RasterRef, value: tuple[int, ...]) -> None:
        self.view(ref)[:] = value

    def copy_raster(self, arr: np.ndarray) -> RasterRef:
        """Allocate a raster and copy ``arr`` (H, W, C) into it."""
        if arr.ndim != 3:
            raise ValueError(f"Expected raster with shape (H, W, C), got {arr.shape}")
        ref = self.alloc_raster(arr.shape[0], arr.shape[1], arr.shape[2], arr.dtype)
        self.view(ref)[:] = arr
        return ref

    def snapshot(self, ref: RasterRef) -> RasterRef:
        """Deep-copy ``ref`` into a fresh allocation.

        The snapshot shares no memory with the source, so later writes to the
        source raster never show up in it.
        """
        clone = self.alloc_raster(ref.height, ref.width, ref.channels, ref.dtype)
        self.view(clone)[:] = self.view(ref)
        return clone

    def __repr__(self) -> str:
        return (
            f"RasterArena(size={self._size}, offset={self._offset}, "
            f"generation={self._generation}, available={self.available})"
        )
