"""Utility functions."""

from point_reprojection.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
