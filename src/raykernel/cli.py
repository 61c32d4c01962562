"""Command-line interface.

Usage:
    raykernel [--log-level LEVEL] demo [options]
    raykernel [--log-level LEVEL] pfm2png INPUT OUTPUT [--factor F] [--gamma G]

The ``demo`` command renders the built-in demo scene, writes the HDR result
as PFM and a tone-mapped copy as PNG. The ``pfm2png`` command converts an
existing PFM file.

Example:
    raykernel demo --width 320 --height 240 --algorithm path --samples-per-pixel 4
    raykernel pfm2png output.pfm output.png --factor 0.3 --gamma 2.2
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence

from raykernel.config import ALGORITHMS, RenderSettings, ToneMapSettings
from raykernel.core.color import BLACK, WHITE
from raykernel.core.kernel_tracer import KernelTracer
from raykernel.image.hdr import HdrImage
from raykernel.image.pfm import read_pfm_file, write_pfm_file
from raykernel.logging_config import init_taichi, setup_logging
from raykernel.preview.display import tone_map
from raykernel.preview.export import save_png
from raykernel.scene.demo import DemoSceneParams, create_demo_scene
from raykernel.scene.manager import Scene

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its two subcommands."""
    defaults = RenderSettings()
    tone_defaults = ToneMapSettings()

    parser = argparse.ArgumentParser(
        prog="raykernel",
        description="Render the demo scene or convert PFM images to PNG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    demo = subparsers.add_parser("demo", help="Render the demo scene")
    demo.add_argument("--width", type=int, default=defaults.width,
                      help=f"Image width in pixels (default: {defaults.width})")
    demo.add_argument("--height", type=int, default=defaults.height,
                      help=f"Image height in pixels (default: {defaults.height})")
    demo.add_argument("--algorithm", choices=ALGORITHMS, default=defaults.algorithm,
                      help=f"Rendering algorithm (default: {defaults.algorithm})")
    demo.add_argument("--angle-deg", type=float, default=defaults.angle_deg,
                      help="Orbit angle of the camera in degrees (default: 0)")
    demo.add_argument("--pfm-output", default=defaults.pfm_output,
                      help=f"HDR output file (default: {defaults.pfm_output})")
    demo.add_argument("--png-output", default=defaults.png_output,
                      help=f"PNG output file (default: {defaults.png_output})")
    demo.add_argument("--init-state", type=int, default=defaults.init_state,
                      help=f"Random generator state (default: {defaults.init_state})")
    demo.add_argument("--init-seq", type=int, default=defaults.init_seq,
                      help=f"Random generator sequence (default: {defaults.init_seq})")
    demo.add_argument("--num-rays", type=int, default=defaults.num_rays,
                      help=f"Rays per bounce (default: {defaults.num_rays})")
    demo.add_argument("--max-depth", type=int, default=defaults.max_depth,
                      help=f"Maximum ray depth (default: {defaults.max_depth})")
    demo.add_argument("--russian-roulette-limit", type=int,
                      default=defaults.russian_roulette_limit,
                      help="Depth where Russian roulette starts "
                           f"(default: {defaults.russian_roulette_limit})")
    demo.add_argument("--samples-per-pixel", type=int,
                      default=defaults.samples_per_pixel,
                      help="Anti-aliasing rays per pixel, a perfect square (default: 0)")
    demo.add_argument("--orthogonal", action="store_true",
                      help="Use an orthogonal camera")
    demo.add_argument("--factor", type=float, default=defaults.factor,
                      help=f"Tone mapping factor of the PNG (default: {defaults.factor})")
    demo.add_argument("--gamma", type=float, default=defaults.gamma,
                      help=f"Gamma of the PNG (default: {defaults.gamma})")

    pfm2png = subparsers.add_parser("pfm2png", help="Convert a PFM file to PNG")
    pfm2png.add_argument("input", help="PFM file to read")
    pfm2png.add_argument("output", help="PNG file to write")
    pfm2png.add_argument("--factor", type=float, default=tone_defaults.factor,
                         help=f"Tone mapping factor (default: {tone_defaults.factor})")
    pfm2png.add_argument("--gamma", type=float, default=tone_defaults.gamma,
                         help=f"Display gamma (default: {tone_defaults.gamma})")

    return parser


def make_tracer(settings: RenderSettings, scene: Scene, image: HdrImage) -> KernelTracer:
    """Build the kernel tracer running the algorithm of ``settings`` on ``scene``."""
    return KernelTracer(
        image,
        scene.get_camera(),
        scene.world,
        algorithm=settings.algorithm,
        background_color=BLACK,
        color=WHITE,
        samples_per_side=settings.samples_per_side,
        num_of_rays=settings.num_rays,
        max_depth=settings.max_depth,
        russian_roulette_limit=settings.russian_roulette_limit,
        init_state=settings.init_state,
        init_seq=settings.init_seq,
    )


def render_demo(settings: RenderSettings) -> HdrImage:
    """Render the demo scene, write the PFM and PNG outputs.

    Returns:
        The rendered HDR image (before tone mapping).
    """
    scene = create_demo_scene(
        DemoSceneParams(
            angle_deg=settings.angle_deg,
            aspect_ratio=settings.aspect_ratio,
            orthogonal=settings.orthogonal,
        )
    )
    image = HdrImage(settings.width, settings.height)
    tracer = make_tracer(settings, scene, image)

    logger.info(
        "Rendering %dx%d image with the %s renderer",
        settings.width,
        settings.height,
        settings.algorithm,
    )
    start_time = time.time()
    def progress_callback(done: int, total: int) -> None:
        logger.info("Progress: %d/%d rows (%.1f%%)", done, total, 100.0 * done / total)

    tracer.fire_all_rays(callback=progress_callback)
    logger.info("Rendering completed in %.2fs", time.time() - start_time)

    pfm_path = write_pfm_file(image, settings.pfm_output)
    logger.info("HDR image written to %s", pfm_path)

    ldr = tone_map(image.copy(), settings.factor)
    png_path = save_png(ldr, settings.png_output, settings.gamma)
    logger.info("PNG image written to %s", png_path)

    return image


def convert_pfm_to_png(input_path: str, output_path: str, settings: ToneMapSettings) -> None:
    """Tone map a PFM file and store it as PNG."""
    image = read_pfm_file(input_path)
    logger.info("File %s has been read from disk", input_path)

    tone_map(image, settings.factor)
    png_path = save_png(image, output_path, settings.gamma)
    logger.info("File %s has been written to disk", png_path)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        init_taichi()
        if args.command == "demo":
            settings = RenderSettings(
                width=args.width,
                height=args.height,
                algorithm=args.algorithm,
                angle_deg=args.angle_deg,
                pfm_output=args.pfm_output,
                png_output=args.png_output,
                init_state=args.init_state,
                init_seq=args.init_seq,
                num_rays=args.num_rays,
                max_depth=args.max_depth,
                russian_roulette_limit=args.russian_roulette_limit,
                samples_per_pixel=args.samples_per_pixel,
                orthogonal=args.orthogonal,
                factor=args.factor,
                gamma=args.gamma,
            )
            render_demo(settings)
        else:
            convert_pfm_to_png(
                args.input,
                args.output,
                ToneMapSettings(factor=args.factor, gamma=args.gamma),
            )
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
