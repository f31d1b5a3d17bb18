"""System base class.

Systems hold the behaviour of a run. Each one declares the components it
needs on an entity and the components it leaves behind, and run() does the
work for a batch of entity IDs.

Example:
    >>> class Invert(System):
    ...     def required_components(self):
    ...         return [RGBA]
    ...     def produced_components(self):
    ...         return [Frames]
    ...     def run(self, world, eids):
    ...         for eid in eids:
    ...             ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quadart.core.world import World


class System(ABC):
    """Base class for all systems."""

    @abstractmethod
    def required_components(self) -> list[type]:
        """Component types an entity must carry before run()."""

    @abstractmethod
    def produced_components(self) -> list[type]:
        """Component types run() attaches to each entity."""

    @abstractmethod
    def run(self, world: World, eids: list[int]) -> None:
        """Process ``eids`` in ``world``."""

    def can_run(self, world: World, eid: int) -> bool:
        return all(world.has_component(eid, ct) for ct in self.required_components())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
