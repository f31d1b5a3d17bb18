"""Partition tree builder system."""

from __future__ import annotations

import logging
import time

from quadart.components.image import RGBA
from quadart.components.partition import Partition
from quadart.core.source import ArrayPixelSource
from quadart.core.system import System
from quadart.core.tree import build_tree
from quadart.core.world import World

logger = logging.getLogger(__name__)


class BuildPartition(System):
    """Build a Partition from each entity's RGBA image.

    Also records the node count and build time in ``world.metadata[eid]``
    under 'node_count' and 'build_seconds'.
    """

    def required_components(self) -> list[type]:
        return [RGBA]

    def produced_components(self) -> list[type]:
        return [Partition]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            rgba = world.get_component(eid, RGBA)
            source = ArrayPixelSource(world.arena.view(rgba.pix), origin=rgba.origin)

            start = time.perf_counter()
            tree = build_tree(source)
            elapsed = time.perf_counter() - start

            node_count = tree.node_count
            world.add_component(eid, Partition(tree=tree))
            world.metadata[eid]["node_count"] = node_count
            world.metadata[eid]["build_seconds"] = elapsed
            logger.info(
                "Built partition tree for entity %d: %dx%d, %d nodes in %.2fs",
                eid, tree.width, tree.height, node_count, elapsed,
            )
