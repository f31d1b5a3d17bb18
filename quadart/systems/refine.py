"""Refinement engine system.

Paints a canvas by repeatedly popping the highest-error node of the
partition tree and filling its rectangle with the node's flat color. In
static mode the final canvas is the only output; in animated mode a
snapshot of the canvas is taken every ``period`` steps, starting with the
first one.

Both the canvas and every snapshot are allocated in the world's arena.
"""

from __future__ import annotations

import logging

from quadart.components.frames import Frames
from quadart.components.partition import Partition
from quadart.config import RefineSettings
from quadart.core.refine import is_sample_step, paint, refinement_order
from quadart.core.system import System
from quadart.core.world import World

logger = logging.getLogger(__name__)


class Refine(System):
    """Turn a Partition into Frames.

    Args:
        steps: Refinement step budget; 0 produces an empty result
        animate: Capture sampled snapshots instead of only the final canvas
        period: Steps between snapshots when animating; 0 produces an empty result
        background: RGBA fill for regions not yet painted

    Raises:
        ValueError: If any setting is out of range (e.g. negative)
    """

    def __init__(
        self,
        steps: int = 100,
        animate: bool = False,
        period: int = 20,
        background: tuple[int, int, int, int] = (0, 0, 0, 0),
    ):
        self.settings = RefineSettings(
            steps=steps, animate=animate, period=period, background=background
        )

    @classmethod
    def from_settings(cls, settings: RefineSettings) -> "Refine":
        return cls(
            steps=settings.steps,
            animate=settings.animate,
            period=settings.period,
            background=settings.background,
        )

    def required_components(self) -> list[type]:
        return [Partition]

    def produced_components(self) -> list[type]:
        return [Frames]

    def run(self, world: World, eids: list[int]) -> None:
        settings = self.settings
        for eid in eids:
            if not settings.has_work:
                logger.warning(
                    "Nothing to render for entity %d: steps=%d, animate=%s, period=%d",
                    eid, settings.steps, settings.animate, settings.period,
                )
                world.add_component(eid, Frames(animated=settings.animate))
                continue

            tree = world.get_component(eid, Partition).tree
            canvas_ref = world.arena.alloc_raster(tree.height, tree.width)
            world.arena.fill(canvas_ref, settings.background)
            canvas = world.arena.view(canvas_ref)

            frames = []
            step = 0
            for node in refinement_order(tree, settings.steps):
                paint(canvas, node, tree.origin)
                step += 1
                if settings.animate and is_sample_step(step, settings.period):
                    frames.append(world.arena.snapshot(canvas_ref))

            if not settings.animate:
                frames.append(canvas_ref)

            world.add_component(
                eid,
                Frames(
                    frames=frames,
                    animated=settings.animate,
                    steps_taken=step,
                    exhausted=step < settings.steps,
                ),
            )
            logger.info(
                "Refined entity %d: %d steps, %d frame(s)%s",
                eid, step, len(frames), " (queue drained)" if step < settings.steps else "",
            )

    def __repr__(self) -> str:
        s = self.settings
        return f"Refine(steps={s.steps}, animate={s.animate}, period={s.period})"
