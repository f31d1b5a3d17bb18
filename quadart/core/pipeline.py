"""Fluent pipeline over a World entity.

Example:
    >>> frames = (
    ...     world.pipe(entity)
    ...     .to(BuildPartition())
    ...     .to(Refine(steps=200, animate=True, period=10))
    ...     .out(Frames)
    ... )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from quadart.core.system import System
    from quadart.core.world import World

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Pipe:
    """Ordered list of systems to apply to one entity.

    Systems are chained with ``.to()`` or ``|`` and only executed when
    ``.execute()`` or ``.out()`` is called.
    """

    def __init__(self, world: "World", entity: int) -> None:
        self.world: Any = world
        self.entities = [entity]
        self.systems: list[Any] = []

    def to(self, system: "System") -> "Pipe":
        self.systems.append(system)
        return self

    def __or__(self, system: "System") -> "Pipe":
        return self.to(system)

    def out(self, component_type: type[T]) -> T:
        """Execute the pipeline and return the entity's ``component_type``.

        Raises:
            RuntimeError: If a system's required components are missing
            KeyError: If the entity lacks ``component_type`` afterwards
        """
        self.execute()
        return self.world.get_component(self.entities[0], component_type)  # type: ignore[no-any-return]

    def execute(self) -> None:
        """Run every system in order.

        Raises:
            RuntimeError: If no entity satisfies a system's requirements
        """
        for system in self.systems:
            runnable = [eid for eid in self.entities if system.can_run(self.world, eid)]
            if not runnable:
                required = [ct.__name__ for ct in system.required_components()]
                raise RuntimeError(
                    f"System {type(system).__name__} cannot run: "
                    f"entities missing required components {required}. "
                    f"Available entities: {self.entities}"
                )
            logger.debug("Running %r on entities %s", system, runnable)
            system.run(self.world, runnable)
