"""Command-line entry point.

Usage:
    quadart --file photo.png --step 2000
    quadart --file photo.png --step 2000 --animate --period 25

Writes ``<stem>_final.jpg`` next to the input and, when animating,
``<stem>_animated.gif``. Values not given on the command line come from
quadart.toml (see quadart.config), then from built-in defaults.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from quadart.api import render
from quadart.config import RefineSettings, load_settings
from quadart.io import read_image, write_gif, write_image
from quadart.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NOTHING_TO_DO = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quadart",
        description="Approximate an image with recursively refined flat-colored rectangles.",
    )
    parser.add_argument(
        "--file",
        type=Path,
        required=True,
        help="Path to the input image",
    )
    parser.add_argument(
        "--step",
        type=int,
        default=None,
        help="Number of refinement steps before stopping (default: 100)",
    )
    parser.add_argument(
        "--animate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Also write an animated GIF of the refinement (--no-animate overrides quadart.toml)",
    )
    parser.add_argument(
        "--period",
        type=int,
        default=None,
        help="When animating, capture a frame every n steps (default: 20)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for output files (defaults to the input's directory)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to quadart.toml",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write log records to this file",
    )
    return parser


def _refine_settings(args: argparse.Namespace, base: RefineSettings) -> RefineSettings:
    overrides = {
        "steps": args.step,
        "animate": args.animate,
        "period": args.period,
    }
    merged = base.model_dump()
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return RefineSettings.model_validate(merged)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), log_file=args.log_file)

    try:
        settings = load_settings(args.config)
        refine = _refine_settings(args, settings.refine)
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_FAILURE

    logger.info(
        "Input file: %s, steps: %d, animated: %s, period: %d",
        args.file, refine.steps, refine.animate, refine.period,
    )

    try:
        source = read_image(args.file)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    logger.info("Rendering")
    result = render(source, refine)
    if result.empty:
        logger.error("Nothing to render: step budget and period must be positive")
        return EXIT_NOTHING_TO_DO

    out_dir = args.output_dir or args.file.parent
    stem = args.file.stem
    final_path = out_dir / f"{stem}_final.jpg"
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Writing %s", final_path)
        write_image(final_path, result.frames[-1], quality=settings.output.jpeg_quality)

        if refine.animate:
            frames = list(result.frames)
            if settings.output.append_source_frame:
                frames.append(source)
            gif_path = out_dir / f"{stem}_animated.gif"
            logger.info("Writing %s (%d frames)", gif_path, len(frames))
            write_gif(gif_path, frames, delay_ms=settings.output.frame_delay_ms)
    except (OSError, ValueError) as e:
        logger.error("Failed to write output: %s", e)
        return EXIT_FAILURE

    if result.mse is not None:
        logger.info(
            "Done: %d steps over %d nodes, last frame MSE %.2f, PSNR %.2f dB",
            result.steps_taken, result.node_count, result.mse, result.psnr,
        )
    return EXIT_OK
