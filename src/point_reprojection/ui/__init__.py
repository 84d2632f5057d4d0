"""Overlay rendering and presentation."""

from point_reprojection.ui.overlay import (
    OverlayCanvas,
    PointType,
    ShapeDecoration,
    TextDecoration,
)
from point_reprojection.ui.viewer import ImageViewer

__all__ = [
    "ImageViewer",
    "OverlayCanvas",
    "PointType",
    "ShapeDecoration",
    "TextDecoration",
]
