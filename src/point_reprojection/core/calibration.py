"""
Camera calibration estimators.

Calibration estimation is delegated to OpenCV behind the
:class:`CalibrationEstimator` interface, so the demo pipeline can run
against any backend that turns detected corners into a camera model.

Two estimators are provided:
- OneShotCalibrator: intrinsics and pose from a single checkerboard view
- PoseEstimator: pose only, for a camera whose intrinsics are known
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import cv2
import numpy as np
from numpy.typing import NDArray

from point_reprojection.core.corner_detector import CornerDetection
from point_reprojection.core.projection import CameraProjectionModel
from point_reprojection.core.types import (
    CalibrationError,
    CalibrationResult,
    CameraExtrinsics,
    CameraIntrinsics,
    CheckerboardConfig,
    CornerDetectionError,
    InvalidParameterError,
)
from point_reprojection.utils.logging import get_logger

logger = get_logger("core.calibration")

# Minimum number of correspondences for a planar pose
MIN_POINTS_FOR_CALIBRATION = 6


def correspondences(
    detection: CornerDetection,
    checkerboard: CheckerboardConfig,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Pair detected corners with their world coordinates.

    World coordinates come from the (row, col) pattern indices:
    (x, y, z) = (col * square_size, row * square_size, 0).

    Returns:
        (object_points (N, 3), image_points (N, 2))

    Raises:
        CornerDetectionError: If the detection failed or is unusable.
    """
    if not detection.success or detection.points is None:
        raise CornerDetectionError(detection.error_message or "Corner detection failed")

    image_points = np.asarray(detection.points, dtype=np.float64).reshape(-1, 2)

    if detection.indices is not None:
        indices = np.asarray(detection.indices).reshape(-1, 2)
        if len(indices) != len(image_points):
            raise CornerDetectionError(
                f"{len(image_points)} corners but {len(indices)} pattern indices"
            )
        object_points = np.zeros((len(indices), 3), dtype=np.float64)
        object_points[:, 0] = indices[:, 1] * checkerboard.square_size
        object_points[:, 1] = indices[:, 0] * checkerboard.square_size
    else:
        if len(image_points) != checkerboard.num_corners:
            raise CornerDetectionError(
                f"Expected {checkerboard.num_corners} corners, found {len(image_points)}"
            )
        object_points = checkerboard.generate_object_points()

    if len(image_points) < MIN_POINTS_FOR_CALIBRATION:
        raise CornerDetectionError(
            f"Need at least {MIN_POINTS_FOR_CALIBRATION} corners, have {len(image_points)}"
        )

    return object_points, image_points


def reprojection_rms(
    model: CameraProjectionModel,
    object_points: NDArray[np.float64],
    image_points: NDArray[np.float64],
) -> float:
    """RMS distance in pixels between observed and reprojected points."""
    projected = model.project(object_points)
    return float(np.sqrt(np.mean(np.sum((image_points - projected) ** 2, axis=1))))


class CalibrationEstimator(ABC):
    """Interface of a camera calibration backend."""

    @abstractmethod
    def estimate(
        self,
        detection: CornerDetection,
        checkerboard: CheckerboardConfig,
    ) -> CalibrationResult:
        """Estimate a camera model from detected target corners.

        Raises:
            CornerDetectionError: If the detection cannot be used.
            CalibrationError: If estimation fails.
        """


@dataclass
class OneShotCalibrationConfig:
    """Configuration for single-view calibration.

    A single planar view constrains only a few intrinsic parameters, so by
    default the principal point is fixed at the image center, pixels are
    square and lens distortion is not estimated.

    Attributes:
        fix_principal_point: Keep the principal point at the image center.
        fix_aspect_ratio: Keep fx/fy = 1.
        estimate_radial_distortion: Estimate k1 and k2.
    """
    fix_principal_point: bool = True
    fix_aspect_ratio: bool = True
    estimate_radial_distortion: bool = False

    def get_calibration_flags(self) -> int:
        """Get OpenCV calibration flags from config."""
        flags = cv2.CALIB_ZERO_TANGENT_DIST | cv2.CALIB_FIX_K3
        if self.fix_principal_point:
            flags |= cv2.CALIB_FIX_PRINCIPAL_POINT
        if self.fix_aspect_ratio:
            flags |= cv2.CALIB_FIX_ASPECT_RATIO
        if not self.estimate_radial_distortion:
            flags |= cv2.CALIB_FIX_K1 | cv2.CALIB_FIX_K2
        return flags


class OneShotCalibrator(CalibrationEstimator):
    """
    Single-view camera calibration.

    Estimates focal length and pose from one image of the checkerboard.
    The board must be tilted relative to the image plane; a fronto-parallel
    view does not constrain the focal length.
    """

    def __init__(self, config: OneShotCalibrationConfig | None = None):
        self.config = config or OneShotCalibrationConfig()

    def estimate(
        self,
        detection: CornerDetection,
        checkerboard: CheckerboardConfig,
    ) -> CalibrationResult:
        object_points, image_points = correspondences(detection, checkerboard)

        width, height = detection.image_size
        if width <= 0 or height <= 0:
            raise InvalidParameterError(f"Invalid image size: {detection.image_size}")

        logger.info(
            f"Running one-shot calibration with {len(image_points)} corners, "
            f"image size: {detection.image_size}"
        )

        try:
            rms, camera_matrix, dist_coeffs, rvecs, tvecs = cv2.calibrateCamera(
                [object_points.astype(np.float32)],
                [image_points.reshape(-1, 1, 2).astype(np.float32)],
                (width, height),
                np.eye(3, dtype=np.float64),
                np.zeros(5, dtype=np.float64),
                flags=self.config.get_calibration_flags(),
            )
        except cv2.error as e:
            raise CalibrationError(f"calibrateCamera failed: {e}")

        intrinsics = CameraIntrinsics.from_camera_matrix(
            camera_matrix,
            distortion_coeffs=np.asarray(dist_coeffs).ravel()[:5],
            image_size=(width, height),
        )
        extrinsics = CameraExtrinsics.from_rotation_vector(rvecs[0], tvecs[0])

        model = CameraProjectionModel(intrinsics, extrinsics)
        error = reprojection_rms(model, object_points, image_points)

        logger.info(
            f"One-shot calibration complete, fx={intrinsics.fx:.2f}, "
            f"RMS error: {error:.4f} pixels (OpenCV: {rms:.4f})"
        )

        return CalibrationResult(
            intrinsics=intrinsics,
            extrinsics=extrinsics,
            reprojection_error=error,
            checkerboard_config=checkerboard,
            notes="one-shot calibration",
        )


class PoseEstimator(CalibrationEstimator):
    """
    Pose estimation for a camera with known intrinsics.

    The world frame is the checkerboard: origin at corner (0, 0), X along
    the columns, Y along the rows, Z perpendicular to the board.
    """

    def __init__(
        self,
        intrinsics: CameraIntrinsics,
        method: int = cv2.SOLVEPNP_ITERATIVE,
    ):
        self.intrinsics = intrinsics
        self.method = method

    def estimate(
        self,
        detection: CornerDetection,
        checkerboard: CheckerboardConfig,
    ) -> CalibrationResult:
        object_points, image_points = correspondences(detection, checkerboard)

        dist = self.intrinsics.distortion_coeffs
        try:
            success, rvec, tvec = cv2.solvePnP(
                object_points,
                image_points,
                self.intrinsics.camera_matrix,
                np.array(dist) if dist.size else None,
                flags=self.method,
            )
        except cv2.error as e:
            raise CalibrationError(f"solvePnP failed: {e}")

        if not success:
            raise CalibrationError("solvePnP failed")

        extrinsics = CameraExtrinsics.from_rotation_vector(rvec, tvec)
        model = CameraProjectionModel(self.intrinsics, extrinsics)
        error = reprojection_rms(model, object_points, image_points)

        logger.info(f"Pose estimation complete, RMS error: {error:.4f} pixels")

        return CalibrationResult(
            intrinsics=self.intrinsics,
            extrinsics=extrinsics,
            reprojection_error=error,
            checkerboard_config=checkerboard,
            notes="pose estimation",
        )
