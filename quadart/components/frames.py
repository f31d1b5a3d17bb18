"""Rendered output component."""

from pydantic import Field

from quadart.components.image import Component
from quadart.core.arena import RasterRef


class Frames(Component):
    """Ordered rasters produced by refinement.

    In static mode ``frames`` holds the single final canvas. In animated
    mode it holds one snapshot per sampled step, oldest first. An empty list
    means the refinement settings asked for no work at all.

    Attributes:
        frames: RasterRefs to (H, W, 4) uint8 rasters
        animated: Whether frames are sampled snapshots
        steps_taken: Refinement steps actually consumed
        exhausted: True when the queue drained before the step budget ran out
    """

    frames: list[RasterRef] = Field(default_factory=list)
    animated: bool = Field(default=False)
    steps_taken: int = Field(default=0, ge=0)
    exhausted: bool = Field(default=False)

    @property
    def empty(self) -> bool:
        return not self.frames
