"""Run configuration.

Settings come from pydantic models with defaults, optionally overridden by a
``quadart.toml`` file::

    [refine]
    steps = 500
    animate = true
    period = 10
    background = [255, 255, 255, 255]

    [output]
    jpeg_quality = 90
    frame_delay_ms = 40
    append_source_frame = true

The file is looked up from the QUADART_CONFIG environment variable, then an
explicit path, then ``./quadart.toml`` and ``~/quadart.toml``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, cast

from pydantic import BaseModel, Field, field_validator

# TOML loading for Python 3.11+ and older
try:
    import tomllib  # type: ignore[import-not-found, unused-ignore]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef, unused-ignore]

logger = logging.getLogger(__name__)

CONFIG_ENV = "QUADART_CONFIG"
CONFIG_FILENAME = "quadart.toml"


class RefineSettings(BaseModel):
    """Refinement parameters.

    Attributes:
        steps: Refinement step budget
        animate: Produce sampled snapshots rather than one final raster
        period: Steps between snapshots when animating
        background: RGBA fill of the canvas before anything is painted
    """

    model_config = {"extra": "forbid"}

    steps: int = Field(default=100, ge=0)
    animate: bool = Field(default=False)
    period: int = Field(default=20, ge=0)
    background: tuple[int, int, int, int] = Field(default=(0, 0, 0, 0))

    @field_validator("background")
    @classmethod
    def _check_background(cls, value: tuple[int, int, int, int]) -> tuple[int, int, int, int]:
        if any(not 0 <= channel <= 255 for channel in value):
            raise ValueError(f"background channels must be in [0, 255], got {value}")
        return value

    @property
    def has_work(self) -> bool:
        """False for budgets that must yield an empty result."""
        if self.steps == 0:
            return False
        if self.animate and self.period == 0:
            return False
        return True


class OutputSettings(BaseModel):
    """Encoder parameters.

    Attributes:
        jpeg_quality: Quality of the still output (1-95)
        frame_delay_ms: Delay between animation frames in milliseconds
        append_source_frame: End the animation with the untouched source image
    """

    model_config = {"extra": "forbid"}

    jpeg_quality: int = Field(default=75, ge=1, le=95)
    frame_delay_ms: int = Field(default=0, ge=0)
    append_source_frame: bool = Field(default=True)


class Settings(BaseModel):
    model_config = {"extra": "forbid"}

    refine: RefineSettings = Field(default_factory=RefineSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)


def resolve_config_path(config_path: str | None = None) -> str | None:
    """Find the config file to load, or None to use defaults.

    Raises:
        FileNotFoundError: If QUADART_CONFIG or ``config_path`` names a missing file
    """
    for explicit in (os.environ.get(CONFIG_ENV), config_path):
        if explicit:
            if not os.path.exists(explicit):
                raise FileNotFoundError(f"Config file not found at {explicit}")
            return explicit

    candidates = [
        CONFIG_FILENAME,
        os.path.expanduser(f"~/{CONFIG_FILENAME}"),
    ]
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    return None


def load_settings(config_path: str | None = None) -> Settings:
    """Load settings from TOML, falling back to defaults when no file exists.

    Raises:
        FileNotFoundError: If an explicitly named config file is missing
        ValueError: If the file is not valid TOML or holds invalid values
    """
    resolved = resolve_config_path(config_path)
    if resolved is None:
        logger.debug("No %s found, using defaults", CONFIG_FILENAME)
        return Settings()

    with open(resolved, "rb") as f:
        try:
            raw = cast(dict[str, Any], tomllib.load(f))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {resolved}: {e}") from e

    logger.debug("Loaded settings from %s", resolved)
    return Settings.model_validate(raw)
