"""Tests for Pillow-backed image I/O."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from quadart.io import read_image, write_gif, write_image


def _solid(value: int, size: int = 8) -> np.ndarray:
    frame = np.full((size, size, 4), value, dtype=np.uint8)
    frame[..., 3] = 255
    return frame


class TestReadImage:
    """Test decoding."""

    def test_png_rgb(self, tmp_path: Path) -> None:
        """Test RGB files come back as opaque RGBA."""
        rgb = np.random.randint(0, 256, (6, 9, 3), dtype=np.uint8)
        path = tmp_path / "in.png"
        Image.fromarray(rgb).save(path)

        pixels = read_image(path)

        assert pixels.shape == (6, 9, 4)
        assert pixels.dtype == np.uint8
        np.testing.assert_array_equal(pixels[..., :3], rgb)
        assert np.all(pixels[..., 3] == 255)

    def test_png_rgba(self, tmp_path: Path) -> None:
        """Test alpha survives decoding."""
        rgba = np.random.randint(0, 256, (5, 5, 4), dtype=np.uint8)
        path = tmp_path / "in.png"
        Image.fromarray(rgba).save(path)

        np.testing.assert_array_equal(read_image(str(path)), rgba)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test missing input raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_image(tmp_path / "missing.png")

    def test_garbage_file(self, tmp_path: Path) -> None:
        """Test undecodable input raises ValueError."""
        path = tmp_path / "bad.png"
        path.write_bytes(b"not an image at all")
        with pytest.raises(ValueError, match="Failed to load image"):
            read_image(path)


class TestWriteImage:
    """Test JPEG output."""

    def test_write_jpeg(self, tmp_path: Path) -> None:
        """Test a JPEG of the right size is written."""
        path = tmp_path / "out.jpg"
        write_image(path, _solid(128, size=16), quality=90)

        with Image.open(path) as image:
            assert image.format == "JPEG"
            assert image.size == (16, 16)
            assert image.mode == "RGB"

    def test_rejects_bad_raster(self, tmp_path: Path) -> None:
        """Test non-uint8 rasters are rejected."""
        with pytest.raises(ValueError):
            write_image(tmp_path / "out.jpg", np.zeros((4, 4, 4), dtype=np.float32))


class TestWriteGif:
    """Test animated GIF output."""

    def test_frame_count(self, tmp_path: Path) -> None:
        """Test every frame lands in the file."""
        path = tmp_path / "anim.gif"
        frames = [_solid(0), _solid(51), _solid(102)]

        write_gif(path, frames, delay_ms=40)

        with Image.open(path) as image:
            assert image.format == "GIF"
            assert image.n_frames == 3
            assert image.size == (8, 8)

    def test_web_safe_colors_preserved(self, tmp_path: Path) -> None:
        """Test colors on the web-safe palette come back exactly."""
        path = tmp_path / "anim.gif"
        write_gif(path, [_solid(153), _solid(204)])

        with Image.open(path) as image:
            assert image.convert("RGB").getpixel((0, 0)) == (153, 153, 153)

    def test_no_frames(self, tmp_path: Path) -> None:
        """Test an empty frame list is rejected."""
        with pytest.raises(ValueError, match="no frames"):
            write_gif(tmp_path / "anim.gif", [])

    def test_size_mismatch(self, tmp_path: Path) -> None:
        """Test frames must share a size."""
        with pytest.raises(ValueError, match="Frame 1"):
            write_gif(tmp_path / "anim.gif", [_solid(0, 8), _solid(0, 4)])
