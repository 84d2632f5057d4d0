#!/usr/bin/env python3
"""
point-reprojection: checkerboard axis reprojection demo

Main entry point.

Usage:
    python main.py resources/pose.bmp --model resources/model.json
    python -m point_reprojection resources/pose.bmp
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))


def main():
    """Main entry point."""
    from point_reprojection.cli import main as run_cli

    sys.exit(run_cli())


if __name__ == "__main__":
    main()
