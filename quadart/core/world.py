"""World: registry of entities, their components, and the raster arena.

One entity per source image. Systems hang components off it as the run
progresses: the decoded image (RGBA), the built tree (Partition), and the
rendered output (Frames). Scalar results such as metrics go into
``world.metadata[eid]``.

Example:
    >>> world = World(arena_bytes=64 << 20)
    >>> eid = world.spawn_image(img)
    >>> frames = world.pipe(eid).to(BuildPartition()).to(Refine(steps=50)).out(Frames)
    >>> world.clear()
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import numpy as np
from pydantic import BaseModel

from quadart.core.arena import RasterArena

logger = logging.getLogger(__name__)

Component = BaseModel

T = TypeVar("T", bound=Component)


class World:
    """Central registry owning the arena, entities and component stores.

    Attributes:
        arena: Raster arena backing every RasterRef handed out in this world
        metadata: Per-entity dict of free-form values
    """

    def __init__(self, arena_bytes: int = 64 << 20):
        self.arena = RasterArena(size_bytes=arena_bytes)
        self._next_eid = 0
        self._components: dict[type[Component], dict[int, Component]] = {}
        self.metadata: dict[int, dict[str, Any]] = {}

    def new_entity(self) -> int:
        eid = self._next_eid
        self._next_eid += 1
        self.metadata[eid] = {}
        return eid

    def spawn_image(self, img: np.ndarray, origin: tuple[int, int] = (0, 0)) -> int:
        """Copy an image into the arena and attach it to a new entity.

        Args:
            img: (H, W, 3) or (H, W, 4) uint8 array; RGB input gets opaque alpha
            origin: Absolute coordinate of the image's top-left pixel

        Returns:
            Entity ID carrying an RGBA component

        Raises:
            ValueError: If the image shape or dtype is unsupported
        """
        from quadart.components.image import RGBA

        if img.ndim != 3 or img.shape[2] not in (3, 4):
            raise ValueError(
                f"Expected image with shape (H, W, 3) or (H, W, 4), got {img.shape}"
            )
        if img.dtype != np.uint8:
            raise ValueError(f"Expected dtype uint8, got {img.dtype}")

        if img.shape[2] == 3:
            alpha = np.full(img.shape[:2] + (1,), 255, dtype=np.uint8)
            img = np.concatenate([img, alpha], axis=2)

        eid = self.new_entity()
        pix_ref = self.arena.copy_raster(img)
        self.add_component(eid, RGBA(pix=pix_ref, origin=origin))

        self.metadata[eid]["image_shape"] = img.shape
        logger.debug("Spawned entity %d for %dx%d image", eid, img.shape[1], img.shape[0])
        return eid

    def clear(self) -> None:
        """Drop every entity and component and reset the arena."""
        self.arena.reset()
        self._next_eid = 0
        self._components.clear()
        self.metadata.clear()

    def add_component(self, eid: int, component: Component) -> None:
        """Attach ``component`` to ``eid``, replacing one of the same type.

        Raises:
            ValueError: If the entity does not exist
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")
        self._components.setdefault(type(component), {})[eid] = component

    def get_component(self, eid: int, comp_type: type[T]) -> T:
        """Fetch the ``comp_type`` component of ``eid``.

        Raises:
            KeyError: If the entity does not carry that component
        """
        store = self._components.get(comp_type)
        if store is None:
            raise KeyError(f"No entities have component type {comp_type.__name__}")
        if eid not in store:
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")
        return store[eid]  # type: ignore[return-value]

    def has_component(self, eid: int, comp_type: type[Component]) -> bool:
        return eid in self._components.get(comp_type, {})

    def remove_component(self, eid: int, comp_type: type[Component]) -> None:
        if not self.has_component(eid, comp_type):
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")
        del self._components[comp_type][eid]

    def query(self, *comp_types: type[Component]) -> list[int]:
        """Entities carrying every one of ``comp_types``, sorted by ID."""
        if not comp_types:
            return list(self.metadata.keys())

        result = set(self._components.get(comp_types[0], {}))
        for comp_type in comp_types[1:]:
            result &= set(self._components.get(comp_type, {}))
        return sorted(result)

    def pipe(self, entity: int) -> Any:
        """Start a fluent pipeline on ``entity``."""
        from quadart.core.pipeline import Pipe

        return Pipe(world=self, entity=entity)

    def __repr__(self) -> str:
        return (
            f"World(entities={len(self.metadata)}, "
            f"component_types={len(self._components)}, arena={self.arena})"
        )
