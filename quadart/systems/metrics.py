"""Quality metrics comparing the rendered output to the source image.

Both systems compare the RGBA source against the last raster in Frames
using scikit-image and store the result in ``world.metadata[eid]``.
Entities whose Frames are empty are skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from skimage.metrics import mean_squared_error, peak_signal_noise_ratio

from quadart.components.frames import Frames
from quadart.components.image import RGBA
from quadart.core.system import System

if TYPE_CHECKING:
    from quadart.core.world import World

logger = logging.getLogger(__name__)


def _final_pair(world: World, eid: int) -> tuple[np.ndarray, np.ndarray] | None:
    src = world.get_component(eid, RGBA)
    frames = world.get_component(eid, Frames)
    if frames.empty:
        logger.warning("Entity %d has no rendered frames; skipping metric", eid)
        return None

    src_data = world.arena.view(src.pix)
    final = world.arena.view(frames.frames[-1])
    if src_data.shape != final.shape:
        raise ValueError(f"Shape mismatch: src {src_data.shape} vs final {final.shape}")
    return src_data, final


class MetricMSE(System):
    """Mean squared error per sample. Stored under 'mse'."""

    def required_components(self) -> list[type]:
        return [RGBA, Frames]

    def produced_components(self) -> list[type]:
        return []

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            pair = _final_pair(world, eid)
            if pair is None:
                continue
            world.metadata[eid]["mse"] = float(mean_squared_error(*pair))


class MetricPSNR(System):
    """Peak signal-to-noise ratio in dB. Stored under 'psnr'.

    An exact reconstruction reports ``inf``.
    """

    def __init__(self, data_range: float = 255.0):
        self.data_range = data_range

    def required_components(self) -> list[type]:
        return [RGBA, Frames]

    def produced_components(self) -> list[type]:
        return []

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            pair = _final_pair(world, eid)
            if pair is None:
                continue
            if mean_squared_error(*pair) == 0:
                psnr = float("inf")
            else:
                psnr = float(peak_signal_noise_ratio(*pair, data_range=self.data_range))
            world.metadata[eid]["psnr"] = psnr
