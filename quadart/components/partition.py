"""Partition tree component."""

from pydantic import InstanceOf

from quadart.components.image import Component
from quadart.core.tree import PartitionTree


class Partition(Component):
    """Partition tree built from an entity's RGBA image.

    The tree is accepted by identity; its nodes are never re-validated.

    Attributes:
        tree: Fully built, read-only partition tree
    """

    tree: InstanceOf[PartitionTree]
