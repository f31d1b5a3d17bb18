"""High-level API.

Wraps the World / system pipeline so callers can go from an image array to
output rasters in one call.

Example:
    >>> import numpy as np
    >>> from quadart import approximate
    >>> img = np.random.randint(0, 256, (64, 64, 4), dtype=np.uint8)
    >>> [final] = approximate(img, steps=200)
    >>> frames = approximate(img, steps=200, animate=True, period=10)
    >>> len(frames)
    20
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from pydantic import BaseModel, Field

from quadart.components.frames import Frames
from quadart.config import RefineSettings
from quadart.core.arena import RasterArena
from quadart.core.refine import expected_frames
from quadart.core.source import ArrayPixelSource
from quadart.core.tree import PartitionTree, build_tree
from quadart.core.world import World
from quadart.systems.metrics import MetricMSE, MetricPSNR
from quadart.systems.partition import BuildPartition
from quadart.systems.refine import Refine

logger = logging.getLogger(__name__)


class Rendering(BaseModel):
    """Result of a refinement run.

    Attributes:
        frames: Output rasters, (H, W, 4) uint8, detached from any arena
        animated: Whether ``frames`` are sampled snapshots
        steps_taken: Refinement steps consumed
        exhausted: True if every node was painted before the budget ran out
        node_count: Nodes in the partition tree (0 if nothing was rendered)
        mse: Mean squared error of the last frame against the source
        psnr: PSNR of the last frame against the source, in dB
    """

    model_config = {"arbitrary_types_allowed": True}

    frames: list[np.ndarray] = Field(default_factory=list)
    animated: bool = False
    steps_taken: int = Field(default=0, ge=0)
    exhausted: bool = False
    node_count: int = Field(default=0, ge=0)
    mse: float | None = None
    psnr: float | None = None

    @property
    def empty(self) -> bool:
        return not self.frames


def _validate_image(image: Any) -> np.ndarray:
    if not isinstance(image, np.ndarray):
        raise TypeError(f"Expected ndarray, got {type(image)}")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected shape (H, W, 3) or (H, W, 4), got {image.shape}")
    if image.shape[0] < 1 or image.shape[1] < 1:
        raise ValueError(f"Image must be at least 1x1, got {image.shape[:2]}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected uint8 dtype, got {image.dtype}")
    return image


def _arena_bytes(height: int, width: int, settings: RefineSettings) -> int:
    """Arena size for the source, the canvas and every snapshot a run can take."""
    area = height * width
    # Every leaf covers at least one pixel and internal nodes have four
    # children, so a tree never has more than (4 * area + 2) // 3 nodes.
    max_steps = min(settings.steps, (4 * area + 2) // 3)
    snapshots = expected_frames(max_steps, settings.period) if settings.animate else 0
    return RasterArena.bytes_for(height, width, count=snapshots + 2)


def render(
    image: np.ndarray,
    settings: RefineSettings | None = None,
    origin: tuple[int, int] = (0, 0),
    metrics: bool = True,
) -> Rendering:
    """Build the partition tree for ``image`` and run refinement on it.

    Args:
        image: (H, W, 3) or (H, W, 4) uint8 array; RGB gets opaque alpha
        settings: Refinement settings (defaults if None)
        origin: Absolute coordinate of the image's top-left pixel
        metrics: Compute MSE/PSNR of the last frame against the source

    Returns:
        Rendering; its ``frames`` list is empty when ``settings`` asks for
        no work (zero steps, or zero period while animating)

    Raises:
        TypeError: If ``image`` is not an ndarray
        ValueError: If the image shape or dtype is unsupported
    """
    image = _validate_image(image)
    settings = settings or RefineSettings()

    if not settings.has_work:
        logger.warning(
            "Nothing to render: steps=%d, animate=%s, period=%d",
            settings.steps, settings.animate, settings.period,
        )
        return Rendering(animated=settings.animate)

    world = World(arena_bytes=_arena_bytes(image.shape[0], image.shape[1], settings))
    try:
        entity = world.spawn_image(image, origin=origin)
        pipeline = world.pipe(entity).to(BuildPartition()).to(Refine.from_settings(settings))
        if metrics:
            pipeline = pipeline.to(MetricMSE()).to(MetricPSNR())
        frames: Frames = pipeline.out(Frames)

        meta = world.metadata[entity]
        return Rendering(
            # Copy out before the arena is reset
            frames=[world.arena.view(ref).copy() for ref in frames.frames],
            animated=frames.animated,
            steps_taken=frames.steps_taken,
            exhausted=frames.exhausted,
            node_count=meta.get("node_count", 0),
            mse=meta.get("mse"),
            psnr=meta.get("psnr"),
        )
    finally:
        world.clear()


def approximate(
    image: np.ndarray,
    steps: int = 100,
    animate: bool = False,
    period: int = 20,
    background: tuple[int, int, int, int] = (0, 0, 0, 0),
) -> list[np.ndarray]:
    """Approximate ``image`` with flat-colored rectangles.

    Returns:
        [final canvas] when ``animate`` is False, otherwise one snapshot per
        sampled step. Empty when ``steps`` is 0, or ``period`` is 0 while
        animating.

    Raises:
        ValueError: For negative settings or an unsupported image
    """
    settings = RefineSettings(steps=steps, animate=animate, period=period, background=background)
    return render(image, settings, metrics=False).frames


def partition_image(image: np.ndarray, origin: tuple[int, int] = (0, 0)) -> PartitionTree:
    """Build the partition tree for an image array."""
    return build_tree(ArrayPixelSource(_validate_image(image), origin=origin))


def total_squared_error(a: np.ndarray, b: np.ndarray) -> float:
    """Sum of squared per-sample differences between two rasters."""
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {a.shape} vs {b.shape}")
    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sum(diff * diff))
