#!/usr/bin/env python3
"""Render the soft shadow of a triangle onto a floor.

Each floor pixel shoots a biased shadow ray toward a disc-shaped area light
and spreads it into a beam over the disc. The fraction of beam rays that
reach the light gives the pixel's brightness, so the shadow fades from umbra
through penumbra to full light.

Usage:
    python -m examples.soft_shadow [options]

Options:
    --size SIZE         Image width and height in pixels (default: 96)
    --samples SAMPLES   Beam rays per pixel (default: 32)
    --radius RADIUS     Radius of the area light (default: 0.6)
    --sampling MODE     Disc sampling mode, legacy or uniform (default: legacy)
    --seed SEED         Seed for reproducible beams (default: none)
    --output OUTPUT     Output file path (default: soft_shadow.png)
    --quiet             Suppress progress output

Example:
    python -m examples.soft_shadow --size 128 --samples 64 --sampling uniform
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np
import taichi as ti

logger = logging.getLogger("soft_shadow")

# Floor spans [-FLOOR_EXTENT, FLOOR_EXTENT] in x and y at z = 0
FLOOR_EXTENT = 2.0
LIGHT_POSITION = (0.0, 0.0, 4.0)
OCCLUDER = ((-0.6, -0.5, 1.2), (0.7, -0.4, 1.2), (0.0, 0.8, 1.2))


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the soft shadow of a triangle onto a floor.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--size", type=int, default=96, help="Image size in pixels (default: 96)")
    parser.add_argument(
        "--samples", type=int, default=32, help="Beam rays per pixel (default: 32)"
    )
    parser.add_argument(
        "--radius", type=float, default=0.6, help="Radius of the area light (default: 0.6)"
    )
    parser.add_argument(
        "--sampling",
        choices=("legacy", "uniform"),
        default="legacy",
        help="Disc sampling mode (default: legacy)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible beams")
    parser.add_argument(
        "--output",
        type=str,
        default="soft_shadow.png",
        help="Output file path (default: soft_shadow.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_soft_shadow(
    size: int = 96,
    samples: int = 32,
    radius: float = 0.6,
    sampling: str = "legacy",
    seed: int | None = None,
    output_path: str = "soft_shadow.png",
) -> Path:
    """Render the shadow mask and save it as a grayscale PNG.

    Args:
        size: Image width and height in pixels.
        samples: Beam rays attempted per pixel.
        radius: Radius of the area light.
        sampling: Disc sampling mode for the beams.
        seed: Seed for the beam generator, or None for fresh entropy.
        output_path: Output file path (PNG).

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from PIL import Image

    from raygeom.core.config import scaled_ray_policy
    from raygeom.core.sampling import make_rng
    from raygeom.scene.manager import TriangleScene

    scene = TriangleScene()
    scene.add_triangle(*OCCLUDER)

    policy = scaled_ray_policy(scene_scale=0.1, seed=seed, sampling=sampling)
    rng = make_rng(policy.seed)
    logger.info("Rendering %dx%d, %d rays per pixel, bias %.3g", size, size, samples, policy.bias)

    coords = np.linspace(-FLOOR_EXTENT, FLOOR_EXTENT, size)
    image = np.empty((size, size), dtype=np.float64)
    start_time = time.time()

    for row, y in enumerate(coords[::-1]):
        for col, x in enumerate(coords):
            image[row, col] = scene.soft_shadow(
                (x, y, 0.0),
                (0.0, 0.0, 1.0),
                LIGHT_POSITION,
                radius,
                samples,
                policy=policy,
                rng=rng,
            )
        logger.debug("Row %d/%d done", row + 1, size)

    logger.info("Rendered in %.2fs", time.time() - start_time)

    output_file = Path(output_path)
    Image.fromarray((np.clip(image, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)).save(output_file)
    logger.info("Saved to: %s", output_file.absolute())
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        logger.info("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        logger.info("Using CPU backend")

    try:
        render_soft_shadow(
            size=args.size,
            samples=args.samples,
            radius=args.radius,
            sampling=args.sampling,
            seed=args.seed,
            output_path=args.output,
        )
        return 0
    except Exception:
        logger.exception("Rendering failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
