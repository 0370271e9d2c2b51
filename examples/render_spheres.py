#!/usr/bin/env python3
"""Render the default four-sphere scene.

Builds one of the built-in scenes, renders it with a progress line on stderr
and writes the image. The output format follows the file extension; an output
of "-" streams PPM to stdout.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels; height follows 16:9 (default: 400)
    --samples N         Camera samples per pixel (default: 100)
    --depth DEPTH       Bounce budget per camera ray (default: 50)
    --output OUTPUT     .ppm or .png path, or - for PPM on stdout (default: spheres.ppm)
    --scene NAME        Scene to render: default or two-spheres (default: default)
    --seed SEED         Random seed (default: 0)
    --deterministic     Single-threaded CPU render, reproducible for a seed
    --gpu               Try the GPU backend, falling back to CPU
    --batch-size N      Samples between progress lines (default: 10)
    --quiet             Print nothing but errors

Example:
    python -m examples.render_spheres --width 200 --samples 20 --output out.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

SCENES = ("default", "two-spheres")

STDOUT_PATH = "-"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render the default sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels; height follows 16:9 (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Camera samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=50,
        help="Bounce budget per camera ray (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.ppm",
        help=".ppm or .png path, or - for PPM on stdout (default: spheres.ppm)",
    )
    parser.add_argument(
        "--scene",
        choices=SCENES,
        default="default",
        help="Scene to render (default: default)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--deterministic",
        action="store_true",
        help="Single-threaded CPU render, reproducible for a given seed",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Try the GPU backend, falling back to CPU",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples between progress lines (default: 10)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print nothing but errors",
    )
    return parser.parse_args(argv)


def render_spheres(
    width: int = 400,
    num_samples: int = 100,
    max_depth: int = 50,
    output_path: str = "spheres.ppm",
    scene_name: str = "default",
    batch_size: int = 10,
    quiet: bool = False,
) -> Path | None:
    """Render scene_name at the given width and write it to output_path.

    An output_path of "-" writes plain PPM to standard output.

    Returns:
        The path written, or None when the image went to stdout.

    Raises:
        ValueError: If the output extension is not .ppm or .png.
    """
    # Importing these allocates Taichi fields, so the runtime must be up
    from raytrace.camera.pinhole import setup_camera
    from raytrace.core.renderer import Renderer
    from raytrace.scene.default_scene import (
        DefaultSceneParams,
        create_default_scene,
        create_two_sphere_scene,
    )

    to_stdout = output_path == STDOUT_PATH
    output_file = Path(output_path)
    suffix = ".ppm" if to_stdout else output_file.suffix.lower()
    if suffix not in (".ppm", ".png"):
        raise ValueError(f"Unsupported output format '{suffix}', use .ppm or .png")

    if scene_name == "two-spheres":
        scene, camera, settings = create_two_sphere_scene(width, num_samples, max_depth)
    else:
        params = DefaultSceneParams(
            image_width=width,
            samples_per_pixel=num_samples,
            max_depth=max_depth,
        )
        scene, camera, settings = create_default_scene(params)

    if not quiet:
        print(
            f"Created scene '{scene_name}' with {scene.get_sphere_count()} spheres "
            f"({settings.image_width}x{settings.image_height})",
            file=sys.stderr,
        )

    setup_camera(camera)
    renderer = Renderer.from_settings(settings)

    if not quiet:
        print(
            f"Rendering {settings.samples_per_pixel} samples per pixel "
            f"(max depth {settings.max_depth})...",
            file=sys.stderr,
        )

    started = time.perf_counter()

    def report(done: int, target: int) -> None:
        if not quiet:
            rate = done / max(time.perf_counter() - started, 1e-9)
            print(
                f"\r  Samples remaining: {target - done:<6d} ({rate:.1f} spp/s)",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=report,
    )

    if not quiet:
        print(file=sys.stderr)

    if to_stdout:
        renderer.write_ppm(sys.stdout.buffer)
        sys.stdout.buffer.flush()
    elif suffix == ".png":
        renderer.save_png(output_file)
    else:
        renderer.save_ppm(output_file)

    destination = "stdout" if to_stdout else str(output_file.resolve())
    if not quiet:
        print(
            f"Wrote {destination} in {time.perf_counter() - started:.2f}s",
            file=sys.stderr,
        )

    return None if to_stdout else output_file


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    from raytrace.core.runtime import init_runtime

    try:
        backend = init_runtime(
            arch="gpu" if args.gpu else "cpu",
            seed=args.seed,
            deterministic=args.deterministic,
        )
        if not args.quiet:
            print(f"Using {backend.upper()} backend", file=sys.stderr)

        render_spheres(
            width=args.width,
            num_samples=args.samples,
            max_depth=args.depth,
            output_path=args.output,
            scene_name=args.scene,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
