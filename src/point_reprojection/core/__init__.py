"""Core projection model and calibration collaborators - no UI dependencies."""

from point_reprojection.core.types import (
    CalibrationError,
    CalibrationResult,
    CameraExtrinsics,
    CameraIntrinsics,
    CheckerboardConfig,
    CornerDetectionError,
    DegenerateProjectionError,
    FileFormatError,
    InvalidParameterError,
    Point2D,
    Point3D,
    ProjectionError,
    UnsupportedFrameError,
)
from point_reprojection.core.projection import CameraProjectionModel, CoordinateFrame
from point_reprojection.core.corner_detector import (
    CheckerboardCornerDetector,
    CornerDetection,
    CornerDetector,
)
from point_reprojection.core.calibration import (
    CalibrationEstimator,
    OneShotCalibrationConfig,
    OneShotCalibrator,
    PoseEstimator,
)

__all__ = [
    # Types
    "Point2D",
    "Point3D",
    "CameraIntrinsics",
    "CameraExtrinsics",
    "CheckerboardConfig",
    "CalibrationResult",
    # Errors
    "CalibrationError",
    "InvalidParameterError",
    "ProjectionError",
    "UnsupportedFrameError",
    "DegenerateProjectionError",
    "CornerDetectionError",
    "FileFormatError",
    # Projection
    "CameraProjectionModel",
    "CoordinateFrame",
    # Corner Detection
    "CornerDetector",
    "CornerDetection",
    "CheckerboardCornerDetector",
    # Calibration
    "CalibrationEstimator",
    "OneShotCalibrationConfig",
    "OneShotCalibrator",
    "PoseEstimator",
]
