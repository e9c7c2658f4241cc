#!/usr/bin/env python3
"""Render the demo scene.

Renders three reflective spheres above a checkerboard floor with two
directional lights and one spherical light, then writes an 8-bit PNG.

Usage:
    python -m examples.render_demo_scene [options]

Options:
    --width WIDTH         Image width in pixels (default: 800)
    --height HEIGHT       Image height in pixels (default: 600)
    --output OUTPUT       Output file path (default: demo_scene.png)
    --texture PATH        Image file for the floor (default: checkerboard)
    --no-texture          Plain red floor instead of a texture
    --max-depth DEPTH     Maximum recursion depth (default: 10)
    --gamma GAMMA         Gamma encoding for the PNG (default: 1.0)
    --cpu                 Force the CPU backend
    --verbose             Enable debug logging
    --quiet               Suppress progress output

Example:
    python -m examples.render_demo_scene --width 320 --height 240 --output small.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=800, help="Image width (default: 800)")
    parser.add_argument("--height", type=int, default=600, help="Image height (default: 600)")
    parser.add_argument(
        "--output",
        type=str,
        default="demo_scene.png",
        help="Output file path (default: demo_scene.png)",
    )
    parser.add_argument(
        "--texture",
        type=str,
        default=None,
        help="Image file for the floor (default: generated checkerboard)",
    )
    parser.add_argument(
        "--no-texture",
        action="store_true",
        help="Use a plain red floor",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=10,
        help="Maximum recursion depth (default: 10)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma encoding for the PNG (default: 1.0)",
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_demo_scene(
    width: int = 800,
    height: int = 600,
    output_path: str = "demo_scene.png",
    texture_path: str | None = None,
    textured: bool = True,
    max_depth: int = 10,
    gamma: float = 1.0,
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save it to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.core.shader import render
    from src.whitted.preview.export import load_texture, save_png
    from src.whitted.scene.demo_scene import create_demo_scene

    if not quiet:
        print(f"Creating demo scene ({width}x{height})...")

    floor_texture = load_texture(texture_path) if texture_path else None
    scene = create_demo_scene(
        width,
        height,
        textured=textured,
        floor_texture=floor_texture,
        max_recursion_depth=max_depth,
    )

    start_time = time.time()
    image = render(scene)
    if not quiet:
        print(f"Rendered in {time.time() - start_time:.2f}s")

    output_file = Path(output_path)
    save_png(image, str(output_file), gamma=gamma)
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu, default_fp=ti.f64)
    else:
        try:
            ti.init(arch=ti.gpu, default_fp=ti.f64)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu, default_fp=ti.f64)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_demo_scene(
            width=args.width,
            height=args.height,
            output_path=args.output,
            texture_path=args.texture,
            textured=not args.no_texture,
            max_depth=args.max_depth,
            gamma=args.gamma,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
