#!/usr/bin/env python3
"""Quickstart example using the high-level approximate()/render() API.

This example demonstrates the simplest way to use the package:
- Load an image (or generate a gradient)
- Render a static approximation with render() and print its metrics
- Produce animation snapshots with approximate()
"""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np

from quadart import RefineSettings, approximate, render
from quadart.io import read_image, write_gif, write_image


def _gradient(size: int) -> np.ndarray:
    ys, xs = np.mgrid[0:size, 0:size]
    img = np.zeros((size, size, 4), dtype=np.uint8)
    img[..., 0] = xs * 255 // (size - 1)
    img[..., 1] = ys * 255 // (size - 1)
    img[..., 2] = (xs + ys) * 255 // (2 * size - 2)
    img[..., 3] = 255
    return img


def main() -> None:
    parser = argparse.ArgumentParser(description="Quickstart API example")
    parser.add_argument("--input", type=Path, default=None, help="Optional input image")
    parser.add_argument("--size", type=int, default=128, help="Gradient size if no input")
    parser.add_argument("--steps", type=int, default=500, help="Refinement steps")
    parser.add_argument("--period", type=int, default=25, help="Steps between frames")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Where to write quickstart_final.jpg and quickstart.gif",
    )
    args = parser.parse_args()

    image = read_image(args.input) if args.input else _gradient(args.size)
    print(f"Image shape: {image.shape}")

    result = render(image, RefineSettings(steps=args.steps))
    print(f"Nodes in partition tree: {result.node_count}")
    print(f"Steps taken: {result.steps_taken} (queue drained: {result.exhausted})")
    print(f"MSE: {result.mse:.2f}  PSNR: {result.psnr:.2f} dB")

    frames = approximate(image, steps=args.steps, animate=True, period=args.period)
    print(f"Captured {len(frames)} animation frames")

    args.output_dir.mkdir(parents=True, exist_ok=True)
    write_image(args.output_dir / "quickstart_final.jpg", result.frames[-1])
    write_gif(args.output_dir / "quickstart.gif", frames + [image], delay_ms=40)
    print(f"Wrote outputs to {args.output_dir}")


if __name__ == "__main__":
    main()
