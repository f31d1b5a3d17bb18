"""Tests for the command-line entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from quadart.cli import EXIT_FAILURE, EXIT_NOTHING_TO_DO, EXIT_OK, main
from quadart.config import CONFIG_ENV


@pytest.fixture
def input_image(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Write a small PNG and isolate config lookup."""
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)

    rgb = np.random.default_rng(7).integers(0, 256, (16, 16, 3), dtype=np.uint8)
    path = tmp_path / "photo.png"
    Image.fromarray(rgb).save(path)
    return path


class TestMain:
    """Test main()."""

    def test_static_run(self, input_image: Path) -> None:
        """Test a static run writes only the final JPEG."""
        assert main(["--file", str(input_image), "--step", "20"]) == EXIT_OK

        assert (input_image.parent / "photo_final.jpg").exists()
        assert not (input_image.parent / "photo_animated.gif").exists()

    def test_animated_run(self, input_image: Path) -> None:
        """Test an animated run writes the GIF with the source frame appended."""
        code = main(["--file", str(input_image), "--step", "30", "--animate", "--period", "10"])
        assert code == EXIT_OK

        gif = input_image.parent / "photo_animated.gif"
        assert gif.exists()
        with Image.open(gif) as image:
            # Samples at steps 1, 11, 21 plus the source image
            assert image.n_frames == 4

    def test_output_dir(self, input_image: Path, tmp_path: Path) -> None:
        """Test outputs can go elsewhere."""
        out = tmp_path / "out" / "nested"
        assert main(["--file", str(input_image), "--output-dir", str(out)]) == EXIT_OK
        assert (out / "photo_final.jpg").exists()

    def test_config_file(self, input_image: Path, tmp_path: Path) -> None:
        """Test quadart.toml settings apply when flags are absent."""
        (tmp_path / "quadart.toml").write_text(
            "[refine]\nsteps = 12\nanimate = true\nperiod = 4\n"
            "[output]\nappend_source_frame = false\n"
        )

        assert main(["--file", str(input_image)]) == EXIT_OK

        with Image.open(tmp_path / "photo_animated.gif") as image:
            assert image.n_frames == 3

    def test_flags_override_config(self, input_image: Path, tmp_path: Path) -> None:
        """Test command-line values win over the config file."""
        (tmp_path / "quadart.toml").write_text("[refine]\nsteps = 0\n")
        assert main(["--file", str(input_image), "--step", "5"]) == EXIT_OK

    def test_no_animate_overrides_config(self, input_image: Path, tmp_path: Path) -> None:
        """Test --no-animate turns off animation enabled in the config file."""
        (tmp_path / "quadart.toml").write_text("[refine]\nanimate = true\nperiod = 2\n")

        assert main(["--file", str(input_image), "--step", "6", "--no-animate"]) == EXIT_OK

        assert (tmp_path / "photo_final.jpg").exists()
        assert not (tmp_path / "photo_animated.gif").exists()

    def test_log_file(self, input_image: Path, tmp_path: Path) -> None:
        """Test --log-file receives a copy of the log."""
        log_path = tmp_path / "run.log"

        assert main(["--file", str(input_image), "--step", "4", "--log-file", str(log_path)]) == EXIT_OK

        text = log_path.read_text(encoding="utf-8")
        assert "photo_final.jpg" in text
        assert "last frame MSE" in text

    def test_metrics_reported_for_last_frame(
        self, input_image: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test the summary names the frame the metrics were measured on."""
        with caplog.at_level(logging.INFO, logger="quadart"):
            code = main(["--file", str(input_image), "--step", "7", "--animate", "--period", "5"])

        assert code == EXIT_OK
        assert "last frame MSE" in caplog.text

    def test_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a missing input exits with failure."""
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.chdir(tmp_path)
        assert main(["--file", str(tmp_path / "nope.png")]) == EXIT_FAILURE

    def test_zero_steps(self, input_image: Path) -> None:
        """Test a zero budget writes nothing."""
        assert main(["--file", str(input_image), "--step", "0"]) == EXIT_NOTHING_TO_DO
        assert not (input_image.parent / "photo_final.jpg").exists()

    def test_zero_period_animated(self, input_image: Path) -> None:
        """Test a zero period while animating writes nothing."""
        code = main(["--file", str(input_image), "--animate", "--period", "0"])
        assert code == EXIT_NOTHING_TO_DO

    def test_negative_steps(self, input_image: Path) -> None:
        """Test invalid values exit with failure."""
        assert main(["--file", str(input_image), "--step", "-3"]) == EXIT_FAILURE

    def test_bad_config(self, input_image: Path, tmp_path: Path) -> None:
        """Test a broken config file exits with failure."""
        (tmp_path / "quadart.toml").write_text("[refine\n")
        assert main(["--file", str(input_image)]) == EXIT_FAILURE

    def test_help(self) -> None:
        """Test --help exits cleanly."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_file_required(self) -> None:
        """Test --file is mandatory."""
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
