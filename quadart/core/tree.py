"""Partition tree: recursive quadrant decomposition of a raster.

Every node covers a rectangle of the source and carries a single flat color
plus an error score describing how badly that color approximates the pixels
underneath. Internal nodes own exactly four children that tile their
rectangle; a node is a leaf as soon as either side of its rectangle is one
pixel long, so 1xk strips are leaves that average k pixels.

Colors are kept as float64 per channel so averaging across levels never
accumulates quantization drift. Quantization happens only when a node is
painted onto a uint8 canvas.

Example:
    >>> source = ArrayPixelSource(img)
    >>> tree = build_tree(source)
    >>> tree.root.color, tree.root.error
    >>> sum(1 for _ in tree.walk("level"))
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Literal

import numpy as np

if TYPE_CHECKING:
    from quadart.core.source import PixelSource

logger = logging.getLogger(__name__)

CHANNELS = 4

# Child slot order
TOP_LEFT = 0
TOP_RIGHT = 1
BOTTOM_LEFT = 2
BOTTOM_RIGHT = 3

Color = tuple[float, float, float, float]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer rectangle with origin (x, y)."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Rect must be at least 1x1, got {self.width}x{self.height}"
            )

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_leaf(self) -> bool:
        # Strips one pixel thick are never split
        return self.width == 1 or self.height == 1

    def split(self) -> tuple[Rect, Rect, Rect, Rect]:
        """Split into (top-left, top-right, bottom-left, bottom-right) quadrants.

        The left/top halves get the floor of half the side, the right/bottom
        halves get the remainder, so odd sides still tile exactly.

        Raises:
            ValueError: If the rectangle is a leaf and cannot be split
        """
        if self.is_leaf:
            raise ValueError(f"Cannot split leaf rectangle {self}")

        half_w = self.width // 2
        half_h = self.height // 2
        rest_w = self.width - half_w
        rest_h = self.height - half_h
        return (
            Rect(self.x, self.y, half_w, half_h),
            Rect(self.x + half_w, self.y, rest_w, half_h),
            Rect(self.x, self.y + half_h, half_w, rest_h),
            Rect(self.x + half_w, self.y + half_h, rest_w, rest_h),
        )


@dataclass(frozen=True, eq=False)
class PartitionNode:
    """One region of the partition.

    Attributes:
        rect: Region covered by this node
        color: Representative color, float64 per channel (r, g, b, a)
        error: Mean squared per-channel deviation of the region from ``color``
        children: Four child slots in TL, TR, BL, BR order; all None for leaves
    """

    rect: Rect
    color: Color
    error: float
    children: tuple[PartitionNode | None, ...] = field(default=(None, None, None, None))

    @property
    def is_leaf(self) -> bool:
        return self.rect.is_leaf

    @property
    def quadrants(self) -> list[PartitionNode]:
        """Children that are present, in slot order."""
        return [child for child in self.children if child is not None]

    def describe(self) -> str:
        r = self.rect
        rgba = ", ".join(f"{c:.1f}" for c in self.color)
        return f"x: {r.x}, y: {r.y}, w: {r.width}, h: {r.height}, c: ({rgba}), error: {self.error:f}"


@dataclass(frozen=True, eq=False)
class PartitionTree:
    """Root node plus the dimensions of the image it was built from.

    Attributes:
        root: Node covering the whole image
        origin: Absolute (x, y) of the image's top-left pixel
        width: Image width in pixels
        height: Image height in pixels
    """

    root: PartitionNode
    origin: tuple[int, int]
    width: int
    height: int

    @property
    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def walk(self, order: Literal["pre", "level"] = "pre") -> Iterator[PartitionNode]:
        """Iterate over every node, depth-first pre-order or breadth-first."""
        if order == "pre":
            stack = [self.root]
            while stack:
                node = stack.pop()
                yield node
                stack.extend(reversed(node.quadrants))
        elif order == "level":
            queue = deque([self.root])
            while queue:
                node = queue.popleft()
                yield node
                queue.extend(node.quadrants)
        else:
            raise ValueError(f"Unknown traversal order: {order!r}")

    def leaves(self) -> Iterator[PartitionNode]:
        return (node for node in self.walk() if node.is_leaf)

    def log_nodes(self, order: Literal["pre", "level"] = "level") -> None:
        """Dump every node at DEBUG level."""
        for node in self.walk(order):
            logger.debug(node.describe())


def _mean_color(pixels: np.ndarray) -> Color:
    flat = pixels.reshape(-1, pixels.shape[-1]).astype(np.float64)
    return tuple(float(c) for c in flat.mean(axis=0))  # type: ignore[return-value]


def _scan_error(pixels: np.ndarray, color: Color) -> float:
    """Squared per-channel deviation from ``color``, summed over channels, averaged by area."""
    area = pixels.shape[0] * pixels.shape[1]
    diff = pixels.astype(np.float64) - np.asarray(color, dtype=np.float64)
    return float(np.sum(diff * diff) / area)


def build_node(source: PixelSource, rect: Rect) -> PartitionNode:
    """Build the subtree covering ``rect``.

    Leaves take the mean of their pixels. Internal nodes take the
    area-weighted mean of their four children's colors. Every node's error
    is then measured by rescanning its full rectangle.
    """
    pixels = source.region(rect)
    if pixels.shape[-1] != CHANNELS:
        raise ValueError(f"Expected {CHANNELS}-channel pixels, got shape {pixels.shape}")

    if rect.is_leaf:
        color = _mean_color(pixels)
        return PartitionNode(rect=rect, color=color, error=_scan_error(pixels, color))

    children = tuple(build_node(source, quadrant) for quadrant in rect.split())

    weights = np.array([child.rect.area for child in children], dtype=np.float64)
    colors = np.array([child.color for child in children], dtype=np.float64)
    mixed = weights @ colors / rect.area
    color: Color = tuple(float(c) for c in mixed)  # type: ignore[assignment]

    return PartitionNode(
        rect=rect,
        color=color,
        error=_scan_error(pixels, color),
        children=children,
    )


def build_tree(source: PixelSource) -> PartitionTree:
    """Build the partition tree over the full bounding box of ``source``."""
    bounds = source.bounds
    logger.debug("Building partition tree over %s", bounds)
    root = build_node(source, bounds)
    tree = PartitionTree(
        root=root,
        origin=(bounds.x, bounds.y),
        width=bounds.width,
        height=bounds.height,
    )
    logger.debug("Partition tree built: root error %.3f", root.error)
    return tree
