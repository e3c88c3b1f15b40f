#!/usr/bin/env python3
"""Render a sphere scene to a PPM or PNG image.

The scene is either one of the built-in presets or a JSON scene file written
by SceneManager.save_json(). Progress goes to stderr; image data goes only to
the output file (or stdout).

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene SCENE           Preset name or path to a JSON scene (default: two_spheres)
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Width / height (default: 16/9)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Bounce budget per ray (default: 50)
    --seed SEED             Sampling seed (default: 0)
    --bands BANDS           Number of row bands (default: 1)
    --output OUTPUT         .ppm or .png path, or - for PPM on stdout (default: -)
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --quiet                 Suppress progress output

Example:
    python examples/render_spheres.py --scene materials --samples 50 > image.ppm
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import taichi as ti

DEFAULT_ASPECT_RATIO = 16.0 / 9.0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="two_spheres",
        help="Preset name (two_spheres, materials, random_spheres) or JSON file",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=DEFAULT_ASPECT_RATIO,
        help="Image width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per camera ray (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the sampler (default: 0)",
    )
    parser.add_argument(
        "--bands",
        type=int,
        default=1,
        help="Number of row bands rendered one after another (default: 1)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help="Output .ppm or .png path, or - for PPM on stdout (default: -)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_spheres(
    scene_name: str = "two_spheres",
    width: int = 400,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    num_samples: int = 100,
    max_depth: int = 50,
    seed: int = 0,
    num_bands: int = 1,
    output_path: str = "-",
    quiet: bool = False,
) -> None:
    """Render a scene and write the image.

    Args:
        scene_name: Preset name or path to a JSON scene file.
        width: Image width in pixels.
        aspect_ratio: Width divided by height.
        num_samples: Number of samples per pixel.
        max_depth: Bounce budget per camera ray.
        seed: Sampling seed.
        num_bands: Number of row bands.
        output_path: Output path (.ppm or .png), or "-" for stdout.
        quiet: If True, suppress progress output.

    Raises:
        ValueError: If the settings, scene or output path are invalid.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.config import RenderSettings
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.scene.presets import SCENE_FACTORIES, create_scene

    settings = RenderSettings(
        image_width=width,
        aspect_ratio=aspect_ratio,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
        seed=seed,
        num_bands=num_bands,
    )
    settings.validate()

    suffix = Path(output_path).suffix.lower()
    if output_path != "-" and suffix not in (".ppm", ".png"):
        raise ValueError(f"Output must be a .ppm or .png file, got {output_path}")

    # Preset scenes bring their own camera; JSON scenes use the default view
    if scene_name in SCENE_FACTORIES:
        scene, camera = create_scene(scene_name, aspect_ratio=settings.aspect_ratio)
    else:
        scene, camera = create_scene("two_spheres", aspect_ratio=settings.aspect_ratio)
        scene.load_json(scene_name)

    setup_camera(camera)

    image_height = settings.image_height
    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{settings.image_width}x{image_height}, {settings.samples_per_pixel} spp",
            file=sys.stderr,
        )

    renderer = ProgressiveRenderer(
        settings.image_width,
        image_height,
        max_depth=settings.max_depth,
        seed=settings.seed,
        num_bands=settings.num_bands,
    )

    def band_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            print(f"\rScanlines remaining: {total_rows - rows_done} ", end="", file=sys.stderr, flush=True)

    renderer.render(settings.samples_per_pixel, band_callback=band_callback)

    if output_path == "-":
        renderer.write_ppm(sys.stdout)
        sys.stdout.flush()
    elif suffix == ".png":
        renderer.save_png(output_path)
    else:
        renderer.save_ppm(output_path)

    if not quiet:
        print("\nDone.", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    try:
        render_spheres(
            scene_name=args.scene,
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            num_samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            num_bands=args.bands,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
