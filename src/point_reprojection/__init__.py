"""
point-reprojection: world to pixel reprojection toolkit

Detects checkerboard calibration targets, derives or loads a camera model
and reprojects world-coordinate points into the image for visualization.
"""

__version__ = "1.0.0"

from point_reprojection.core.types import (
    CameraExtrinsics,
    CameraIntrinsics,
    Point2D,
    Point3D,
)
from point_reprojection.core.projection import CameraProjectionModel

__all__ = [
    "CameraProjectionModel",
    "CameraIntrinsics",
    "CameraExtrinsics",
    "Point2D",
    "Point3D",
    "__version__",
]
