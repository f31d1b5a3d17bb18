"""Error-driven refinement order and canvas painting.

A refinement step pops the node whose flat color is currently the worst
approximation, paints its rectangle, then queues its children. Because a
node is only queued after its parent has been painted, every pop paints a
finer approximation over the region its parent covered.
"""

from __future__ import annotations

import logging
from typing import Iterator

import numpy as np

from quadart.core.heap import MaxHeap
from quadart.core.tree import PartitionNode, PartitionTree

logger = logging.getLogger(__name__)


def refinement_order(tree: PartitionTree, steps: int) -> Iterator[PartitionNode]:
    """Yield up to ``steps`` nodes in refinement order.

    Stops early once every leaf has been visited and the queue is empty.
    """
    queue: MaxHeap[PartitionNode] = MaxHeap(key=lambda node: node.error)
    queue.push(tree.root)

    taken = 0
    while queue and taken < steps:
        node = queue.pop()
        taken += 1
        yield node
        for child in node.quadrants:
            queue.push(child)

    if not queue:
        logger.debug("Refinement queue drained after %d steps", taken)


def quantize(color: tuple[float, ...]) -> np.ndarray:
    """Round a float color to the nearest uint8 sample per channel."""
    return np.clip(np.rint(np.asarray(color, dtype=np.float64)), 0, 255).astype(np.uint8)


def paint(canvas: np.ndarray, node: PartitionNode, origin: tuple[int, int] = (0, 0)) -> None:
    """Overwrite the node's rectangle on ``canvas`` with its flat color.

    Args:
        canvas: (H, W, 4) uint8 raster indexed from the image's top-left corner
        node: Node to paint
        origin: Absolute coordinate that canvas[0, 0] corresponds to
    """
    r = node.rect
    col = r.x - origin[0]
    row = r.y - origin[1]
    canvas[row:row + r.height, col:col + r.width] = quantize(node.color)


def is_sample_step(step: int, period: int) -> bool:
    """Whether 1-indexed refinement ``step`` is captured as a frame.

    Frames are taken at steps 1, 1 + period, 1 + 2 * period, ..., so the
    first pop is always recorded.
    """
    return (step - 1) % period == 0


def expected_frames(steps: int, period: int) -> int:
    """Frames captured for ``steps`` consumed steps when the queue does not drain."""
    if steps <= 0 or period <= 0:
        return 0
    return (steps - 1) // period + 1
