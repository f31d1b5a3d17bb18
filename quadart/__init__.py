"""quadart: progressive quadrant-partition image approximation.

An image is split recursively into four quadrants until regions are one
pixel thick. Each region gets a flat average color and an error score, and
the approximation is refined by repeatedly painting the region whose flat
color is currently the worst fit. The result is either a single final
raster or a sequence of snapshots suitable for an animation.

Quick Start:
    >>> import numpy as np
    >>> from quadart import approximate
    >>> img = np.random.randint(0, 256, (128, 128, 4), dtype=np.uint8)
    >>> [final] = approximate(img, steps=500)
    >>> frames = approximate(img, steps=500, animate=True, period=25)

For more control, drive the systems directly:
    >>> from quadart.core.world import World
    >>> from quadart.components.frames import Frames
    >>> from quadart.systems.partition import BuildPartition
    >>> from quadart.systems.refine import Refine
    >>>
    >>> world = World()
    >>> entity = world.spawn_image(img)
    >>> frames = world.pipe(entity).to(BuildPartition()).to(Refine(steps=500)).out(Frames)
"""

__version__ = "0.1.0"

from quadart.api import Rendering, approximate, partition_image, render, total_squared_error
from quadart.config import RefineSettings, Settings, load_settings
from quadart.core.heap import MaxHeap
from quadart.core.source import ArrayPixelSource, PixelSource
from quadart.core.tree import PartitionNode, PartitionTree, Rect, build_tree

__all__ = [
    "__version__",
    "ArrayPixelSource",
    "MaxHeap",
    "PartitionNode",
    "PartitionTree",
    "PixelSource",
    "Rect",
    "RefineSettings",
    "Rendering",
    "Settings",
    "approximate",
    "build_tree",
    "load_settings",
    "partition_image",
    "render",
    "total_squared_error",
]
