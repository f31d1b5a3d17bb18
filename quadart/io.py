"""Image file I/O backed by Pillow.

Decoding and encoding are kept at the edge of the package: the core only
ever sees (H, W, 4) uint8 arrays.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def read_image(path: str | Path) -> np.ndarray:
    """Decode an image file into an (H, W, 4) uint8 RGBA array.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ValueError: If the file cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input image not found: {path}")
    try:
        with Image.open(path) as image:
            # Always RGBA so every source has four channels
            rgba = image.convert("RGBA")
            pixels = np.array(rgba, dtype=np.uint8)
    except OSError as e:
        raise ValueError(f"Failed to load image {path}: {e}") from e

    logger.debug("Read %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return pixels


def _to_image(raster: np.ndarray) -> Image.Image:
    if raster.ndim != 3 or raster.shape[2] not in (3, 4) or raster.dtype != np.uint8:
        raise ValueError(
            f"Expected uint8 raster with shape (H, W, 3|4), got {raster.shape} {raster.dtype}"
        )
    return Image.fromarray(np.ascontiguousarray(raster))


def write_image(path: str | Path, raster: np.ndarray, quality: int = 75) -> None:
    """Write ``raster`` as a JPEG. Alpha is discarded."""
    image = _to_image(raster).convert("RGB")
    image.save(path, format="JPEG", quality=quality)
    logger.debug("Wrote %s", path)


def write_gif(path: str | Path, frames: Sequence[np.ndarray], delay_ms: int = 0) -> None:
    """Write ``frames`` as an animated GIF on the web-safe palette.

    Args:
        path: Output file
        frames: Rasters in display order, all the same size
        delay_ms: Delay between frames

    Raises:
        ValueError: If there are no frames or their sizes differ
    """
    if not frames:
        raise ValueError("Cannot write an animation with no frames")
    size = frames[0].shape[:2]
    for i, frame in enumerate(frames):
        if frame.shape[:2] != size:
            raise ValueError(f"Frame {i} has size {frame.shape[:2]}, expected {size}")

    paletted = [
        _to_image(frame)
        .convert("RGB")
        .convert("P", palette=Image.Palette.WEB, dither=Image.Dither.NONE)
        for frame in frames
    ]
    paletted[0].save(
        path,
        format="GIF",
        save_all=True,
        append_images=paletted[1:],
        duration=delay_ms,
        loop=0,
    )
    logger.debug("Wrote %s (%d frames)", path, len(paletted))
