"""Tests for pixel sources."""

from __future__ import annotations

import numpy as np
import pytest

from quadart.core.source import ArrayPixelSource, PixelSource
from quadart.core.tree import Rect, build_tree


class CheckerSource(PixelSource):
    """Procedural source that only implements at()."""

    def __init__(self, width: int, height: int, origin: tuple[int, int] = (0, 0)):
        self._rect = Rect(origin[0], origin[1], width, height)

    @property
    def bounds(self) -> Rect:
        return self._rect

    def at(self, x: int, y: int) -> tuple[int, int, int, int]:
        v = 255 if (x + y) % 2 else 0
        return (v, v, v, 255)


class TestArrayPixelSource:
    """Test the array-backed pixel source."""

    def test_bounds(self) -> None:
        """Test bounds follow the array shape and origin."""
        src = ArrayPixelSource(np.zeros((3, 5, 4), dtype=np.uint8), origin=(-2, 7))
        assert src.bounds == Rect(-2, 7, 5, 3)

    def test_at_uses_absolute_coordinates(self) -> None:
        """Test at() subtracts the origin."""
        img = np.zeros((2, 2, 4), dtype=np.uint8)
        img[1, 0] = (1, 2, 3, 4)
        src = ArrayPixelSource(img, origin=(10, 10))

        assert src.at(10, 11) == (1, 2, 3, 4)
        assert src.at(10, 10) == (0, 0, 0, 0)

    def test_at_out_of_bounds(self) -> None:
        """Test lookups outside the bounding box raise IndexError."""
        src = ArrayPixelSource(np.zeros((2, 2, 4), dtype=np.uint8), origin=(10, 10))
        with pytest.raises(IndexError):
            src.at(0, 0)
        with pytest.raises(IndexError):
            src.at(12, 10)

    def test_region_slice(self) -> None:
        """Test region() returns the pixels under a rectangle."""
        img = np.arange(4 * 4 * 4, dtype=np.uint8).reshape(4, 4, 4)
        src = ArrayPixelSource(img, origin=(1, 1))

        region = src.region(Rect(2, 3, 2, 1))
        np.testing.assert_array_equal(region, img[2:3, 1:3])

    def test_region_out_of_bounds(self) -> None:
        """Test region() refuses rectangles outside the source."""
        src = ArrayPixelSource(np.zeros((2, 2, 4), dtype=np.uint8))
        with pytest.raises(IndexError):
            src.region(Rect(1, 1, 2, 2))

    def test_rgb_gets_opaque_alpha(self) -> None:
        """Test 3-channel input is widened with alpha 255."""
        img = np.full((2, 3, 3), 9, dtype=np.uint8)
        src = ArrayPixelSource(img)

        assert src.pixels.shape == (2, 3, 4)
        assert src.at(2, 1) == (9, 9, 9, 255)

    def test_read_only_copy(self) -> None:
        """Test the source keeps a private read-only copy."""
        img = np.zeros((2, 2, 4), dtype=np.uint8)
        src = ArrayPixelSource(img)
        img[0, 0] = 255

        assert src.at(0, 0) == (0, 0, 0, 0)
        with pytest.raises(ValueError):
            src.pixels[0, 0] = 1

    def test_invalid_inputs(self) -> None:
        """Test bad arrays are rejected."""
        with pytest.raises(TypeError):
            ArrayPixelSource([[1, 2, 3]])  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="shape"):
            ArrayPixelSource(np.zeros((4, 4), dtype=np.uint8))
        with pytest.raises(ValueError, match="dtype"):
            ArrayPixelSource(np.zeros((4, 4, 4), dtype=np.float32))
        with pytest.raises(ValueError, match="at least 1x1"):
            ArrayPixelSource(np.zeros((0, 4, 4), dtype=np.uint8))


class TestCustomPixelSource:
    """Test sources that only provide at()."""

    def test_default_region(self) -> None:
        """Test the default region() gathers pixels through at()."""
        src = CheckerSource(3, 2, origin=(1, 0))
        region = src.region(Rect(1, 0, 3, 2))

        assert region.shape == (2, 3, 4)
        assert region[0, 0, 0] == 255  # (1, 0) is odd
        assert region[0, 1, 0] == 0

    def test_builds_same_tree_as_array(self) -> None:
        """Test a procedural source and its array rendering give identical trees."""
        src = CheckerSource(6, 5)
        img = np.zeros((5, 6, 4), dtype=np.uint8)
        for y in range(5):
            for x in range(6):
                img[y, x] = src.at(x, y)

        procedural = [(n.rect, n.color, n.error) for n in build_tree(src).walk()]
        array = [(n.rect, n.color, n.error) for n in build_tree(ArrayPixelSource(img)).walk()]
        assert procedural == array
