"""
Command line entry point for the point reprojection demo.

Usage:
    point-reprojection resources/pose.bmp --model resources/model.json
    point-reprojection pose.bmp --rows 6 --cols 8 --no-display --output-dir out
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from point_reprojection import __version__
from point_reprojection.core.types import CalibrationError
from point_reprojection.demo import DemoConfig, ReprojectionDemo
from point_reprojection.utils.logging import get_logger, setup_logging

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="point-reprojection",
        description="Detect a checkerboard and reproject the world X/Y axes into the image.",
    )
    parser.add_argument("image", type=Path, help="checkerboard image")
    parser.add_argument(
        "--model", type=Path, default=None,
        help="camera model file (.json/.h5); estimated from the image if omitted",
    )
    parser.add_argument("--rows", type=int, default=6, help="inner corner rows (default: 6)")
    parser.add_argument("--cols", type=int, default=8, help="inner corner columns (default: 8)")
    parser.add_argument(
        "--square-size", type=float, default=16.002,
        help="square size in world units, mm (default: 16.002)",
    )
    parser.add_argument(
        "--axis-length", type=float, default=2.0,
        help="drawn axis length in squares (default: 2)",
    )
    parser.add_argument(
        "--delay", type=int, default=1000,
        help="pause between visualization steps in ms (default: 1000)",
    )
    parser.add_argument("--no-display", action="store_true", help="do not open a window")
    parser.add_argument("--output-dir", type=Path, default=None, help="save rendered frames here")
    parser.add_argument("--save-model", type=Path, default=None, help="save the camera model here")
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: INFO)",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="also log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the demo from command line arguments.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)

    try:
        config = DemoConfig(
            image_path=args.image,
            model_path=args.model,
            checkerboard_rows=args.rows,
            checkerboard_cols=args.cols,
            square_size=args.square_size,
            axis_length_factor=args.axis_length,
            delay_ms=args.delay,
            display=not args.no_display,
            output_dir=args.output_dir,
            save_model_path=args.save_model,
        )
        demo = ReprojectionDemo(config)
    except CalibrationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        result = demo.run()
        demo.viewer.hold()
    except CalibrationError as e:
        logger.error(f"Reprojection failed: {e}")
        return 1
    finally:
        demo.viewer.close()

    for name, pixel in zip(("origin", "x_axis_end", "y_axis_end"), result.axis_pixels):
        logger.info(f"{name}: ({pixel.x:.2f}, {pixel.y:.2f})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
