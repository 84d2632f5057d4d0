"""
Core data types for point reprojection.

This module defines the value types shared by the projection model,
the calibration collaborators and the file formats: points, camera
parameters, the checkerboard target and calibration results.

Camera parameters are immutable once constructed. Their numpy arrays are
stored as read-only copies, so a model built from them can be shared
between threads without locking.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence

import cv2
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.transform import Rotation

if TYPE_CHECKING:
    from point_reprojection.core.projection import CameraProjectionModel

# Tolerance used when checking that a rotation matrix is orthonormal
ORTHONORMAL_TOLERANCE = 1e-6

# Distortion vector lengths understood by the projection model
# (none, k1 k2 p1 p2, + k3, + k4 k5 k6 rational model)
SUPPORTED_DISTORTION_SIZES = (0, 4, 5, 8)


def _frozen_array(values: ArrayLike) -> NDArray[np.float64]:
    """Copy values into a read-only float64 array."""
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class Point3D:
    """A 3D point, e.g. in world or camera coordinates."""

    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "z", float(self.z))

    def as_array(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@dataclass(frozen=True)
class Point2D:
    """A 2D point in pixel coordinates."""

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def as_array(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y], dtype=np.float64)

    def as_int_tuple(self) -> tuple[int, int]:
        """Rounded integer coordinates, as expected by OpenCV drawing calls."""
        return (int(round(self.x)), int(round(self.y)))


@dataclass(frozen=True, eq=False)
class CameraIntrinsics:
    """Camera intrinsic parameters.

    Attributes:
        fx: Focal length in x direction (pixels), must be > 0.
        fy: Focal length in y direction (pixels), must be > 0.
        cx: Principal point x coordinate (pixels).
        cy: Principal point y coordinate (pixels).
        distortion_coeffs: Distortion coefficients in OpenCV order
            [k1, k2, p1, p2, k3, k4, k5, k6]. Empty means no distortion.
        image_size: Optional image dimensions as (width, height).

    Raises:
        InvalidParameterError: If any value is non-finite, a focal length
            is not positive, or the distortion vector has an unsupported length.
    """

    fx: float
    fy: float
    cx: float
    cy: float
    distortion_coeffs: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(0, dtype=np.float64)
    )
    image_size: Optional[tuple[int, int]] = None

    def __post_init__(self) -> None:
        for name in ("fx", "fy", "cx", "cy"):
            raw = getattr(self, name)
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise InvalidParameterError(f"{name} must be a real number, got {raw!r}")
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be finite, got {value}")
            object.__setattr__(self, name, value)

        if self.fx <= 0:
            raise InvalidParameterError(f"fx must be > 0, got {self.fx}")
        if self.fy <= 0:
            raise InvalidParameterError(f"fy must be > 0, got {self.fy}")

        coeffs = self.distortion_coeffs
        if coeffs is None:
            coeffs = ()
        try:
            coeffs = _frozen_array(coeffs).ravel()
        except (TypeError, ValueError):
            raise InvalidParameterError(
                f"distortion_coeffs must be numeric, got {self.distortion_coeffs!r}"
            )
        if coeffs.size not in SUPPORTED_DISTORTION_SIZES:
            raise InvalidParameterError(
                f"distortion_coeffs must have one of {SUPPORTED_DISTORTION_SIZES} "
                f"elements, got {coeffs.size}"
            )
        if not np.all(np.isfinite(coeffs)):
            raise InvalidParameterError("distortion_coeffs must be finite")
        object.__setattr__(self, "distortion_coeffs", coeffs)

        if self.image_size is not None:
            if len(self.image_size) != 2:
                raise InvalidParameterError(
                    f"image_size must be (width, height), got {self.image_size!r}"
                )
            width, height = (int(v) for v in self.image_size)
            if width <= 0 or height <= 0:
                raise InvalidParameterError(
                    f"image_size must be positive, got {self.image_size!r}"
                )
            object.__setattr__(self, "image_size", (width, height))

    @classmethod
    def from_camera_matrix(
        cls,
        camera_matrix: ArrayLike,
        distortion_coeffs: Optional[ArrayLike] = None,
        image_size: Optional[tuple[int, int]] = None,
    ) -> CameraIntrinsics:
        """Create from a 3x3 camera matrix K.

        Raises:
            InvalidParameterError: If K is not a skew-free 3x3 camera matrix.
        """
        K = np.asarray(camera_matrix, dtype=np.float64)
        if K.shape != (3, 3):
            raise InvalidParameterError(f"camera_matrix must be 3x3, got {K.shape}")
        if K[0, 1] != 0.0:
            raise InvalidParameterError(f"camera_matrix skew is not supported, got {K[0, 1]}")
        return cls(
            fx=K[0, 0],
            fy=K[1, 1],
            cx=K[0, 2],
            cy=K[1, 2],
            distortion_coeffs=distortion_coeffs if distortion_coeffs is not None else (),
            image_size=image_size,
        )

    @property
    def camera_matrix(self) -> NDArray[np.float64]:
        """3x3 camera matrix K = [[fx, 0, cx], [0, fy, cy], [0, 0, 1]]."""
        return np.array(
            [[self.fx, 0.0, self.cx], [0.0, self.fy, self.cy], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )

    def _coeff(self, index: int) -> float:
        if index < self.distortion_coeffs.size:
            return float(self.distortion_coeffs[index])
        return 0.0

    @property
    def k1(self) -> float:
        """First radial distortion coefficient."""
        return self._coeff(0)

    @property
    def k2(self) -> float:
        """Second radial distortion coefficient."""
        return self._coeff(1)

    @property
    def p1(self) -> float:
        """First tangential distortion coefficient."""
        return self._coeff(2)

    @property
    def p2(self) -> float:
        """Second tangential distortion coefficient."""
        return self._coeff(3)

    @property
    def k3(self) -> float:
        """Third radial distortion coefficient."""
        return self._coeff(4)

    @property
    def has_distortion(self) -> bool:
        """True if any distortion coefficient is non-zero."""
        return bool(np.any(self.distortion_coeffs != 0.0))


@dataclass(frozen=True, eq=False)
class CameraExtrinsics:
    """Camera extrinsic parameters (pose).

    Maps world coordinates into camera coordinates:
    ``p_camera = R @ p_world + t``.

    Attributes:
        rotation_matrix: 3x3 orthonormal rotation matrix R (det = +1).
        translation_vector: Translation vector t, shape (3,).

    Raises:
        InvalidParameterError: If shapes are wrong, values are non-finite
            or R is not a proper rotation within ORTHONORMAL_TOLERANCE.
    """

    rotation_matrix: NDArray[np.float64]
    translation_vector: NDArray[np.float64]

    def __post_init__(self) -> None:
        try:
            R = _frozen_array(self.rotation_matrix)
            t = _frozen_array(self.translation_vector).ravel()
        except (TypeError, ValueError):
            raise InvalidParameterError("rotation and translation must be numeric arrays")

        if R.shape != (3, 3):
            raise InvalidParameterError(f"rotation_matrix must be 3x3, got {R.shape}")
        if t.shape != (3,):
            raise InvalidParameterError(f"translation_vector must have 3 elements, got {t.size}")
        if not (np.all(np.isfinite(R)) and np.all(np.isfinite(t))):
            raise InvalidParameterError("rotation and translation must be finite")

        orthogonality_error = float(np.max(np.abs(R @ R.T - np.eye(3))))
        if orthogonality_error > ORTHONORMAL_TOLERANCE:
            raise InvalidParameterError(
                f"rotation_matrix is not orthonormal (max |R R^T - I| = {orthogonality_error:.3e})"
            )
        determinant = float(np.linalg.det(R))
        if abs(determinant - 1.0) > ORTHONORMAL_TOLERANCE:
            raise InvalidParameterError(
                f"rotation_matrix must have determinant +1, got {determinant:.6f}"
            )

        object.__setattr__(self, "rotation_matrix", R)
        object.__setattr__(self, "translation_vector", t)

    @classmethod
    def identity(cls) -> CameraExtrinsics:
        """Camera frame coincides with the world frame."""
        return cls(rotation_matrix=np.eye(3), translation_vector=np.zeros(3))

    @classmethod
    def from_rotation_vector(
        cls,
        rotation_vector: ArrayLike,
        translation_vector: ArrayLike,
    ) -> CameraExtrinsics:
        """Create from a Rodrigues rotation vector (as returned by solvePnP)."""
        try:
            rvec = np.array(rotation_vector, dtype=np.float64).reshape(3, 1)
        except ValueError:
            raise InvalidParameterError(
                f"rotation_vector must have 3 elements, got {rotation_vector!r}"
            )
        R, _ = cv2.Rodrigues(rvec)
        return cls(rotation_matrix=R, translation_vector=translation_vector)

    @classmethod
    def from_quaternion(
        cls,
        quaternion: Sequence[float],
        translation_vector: ArrayLike,
    ) -> CameraExtrinsics:
        """Create from a unit quaternion in scalar-last (x, y, z, w) order.

        The quaternion is normalized before conversion.
        """
        try:
            R = Rotation.from_quat(np.asarray(quaternion, dtype=np.float64)).as_matrix()
        except ValueError as e:
            raise InvalidParameterError(f"Invalid quaternion {quaternion!r}: {e}")
        return cls(rotation_matrix=R, translation_vector=translation_vector)

    @property
    def rotation_vector(self) -> NDArray[np.float64]:
        """Rodrigues rotation vector, shape (3,)."""
        rvec, _ = cv2.Rodrigues(np.array(self.rotation_matrix))
        return rvec.ravel()

    @property
    def transformation_matrix(self) -> NDArray[np.float64]:
        """4x4 homogeneous transformation matrix [R|t]."""
        T = np.eye(4, dtype=np.float64)
        T[:3, :3] = self.rotation_matrix
        T[:3, 3] = self.translation_vector
        return T

    @property
    def camera_position(self) -> NDArray[np.float64]:
        """Camera position in world coordinates."""
        return -self.rotation_matrix.T @ self.translation_vector


@dataclass
class CheckerboardConfig:
    """Configuration for the checkerboard calibration target.

    Attributes:
        rows: Number of inner corners in the vertical direction.
        cols: Number of inner corners in the horizontal direction.
        square_size: Size of each square in world units (millimeters in the demo).

    Example:
        A board of 9x7 squares has 8x6 inner corners:
        >>> config = CheckerboardConfig(rows=6, cols=8, square_size=16.002)
    """

    rows: int
    cols: int
    square_size: float

    def __post_init__(self) -> None:
        if self.rows < 2:
            raise InvalidParameterError(f"rows must be >= 2, got {self.rows}")
        if self.cols < 2:
            raise InvalidParameterError(f"cols must be >= 2, got {self.cols}")
        if not self.square_size > 0:
            raise InvalidParameterError(f"square_size must be > 0, got {self.square_size}")

    @property
    def pattern_size(self) -> tuple[int, int]:
        """OpenCV-compatible pattern size (cols, rows)."""
        return (self.cols, self.rows)

    @property
    def num_corners(self) -> int:
        """Total number of inner corners."""
        return self.rows * self.cols

    def generate_object_points(self) -> NDArray[np.float64]:
        """Generate 3D world points for the inner corners.

        Points are ordered row by row, matching the detector output, with
        (x, y, z) = (col * square_size, row * square_size, 0).

        Returns:
            Array of shape (rows*cols, 3).
        """
        objp = np.zeros((self.num_corners, 3), dtype=np.float64)
        objp[:, :2] = np.mgrid[0:self.cols, 0:self.rows].T.reshape(-1, 2)
        objp *= self.square_size
        return objp

    def pattern_indices(self) -> NDArray[np.int32]:
        """(row, col) index of every inner corner, in object point order."""
        rows, cols = np.divmod(np.arange(self.num_corners), self.cols)
        return np.stack([rows, cols], axis=1).astype(np.int32)


@dataclass
class CalibrationResult:
    """Camera calibration result.

    Holds the estimated camera parameters together with the quality
    metric and metadata about how they were obtained.
    """

    intrinsics: CameraIntrinsics
    extrinsics: CameraExtrinsics
    reprojection_error: float = 0.0

    # Calibration metadata
    timestamp: datetime = field(default_factory=datetime.now)
    checkerboard_config: Optional[CheckerboardConfig] = None
    software_version: str = "1.0.0"
    notes: str = ""

    def __post_init__(self) -> None:
        self.reprojection_error = float(self.reprojection_error)
        if not (math.isfinite(self.reprojection_error) and self.reprojection_error >= 0):
            raise InvalidParameterError(
                f"reprojection_error must be a non-negative number, got {self.reprojection_error}"
            )

    def to_model(self) -> CameraProjectionModel:
        """Build a projection model from the calibrated parameters."""
        from point_reprojection.core.projection import CameraProjectionModel

        return CameraProjectionModel(self.intrinsics, self.extrinsics)

    def summary(self) -> str:
        """Generate a human-readable summary of the calibration."""
        intr = self.intrinsics
        extr = self.extrinsics
        lines = [
            "=" * 50,
            "Camera Model",
            "=" * 50,
            f"Timestamp: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "Intrinsic Parameters:",
            f"  Focal Length: fx={intr.fx:.2f}, fy={intr.fy:.2f}",
            f"  Principal Point: cx={intr.cx:.2f}, cy={intr.cy:.2f}",
            f"  Distortion: k1={intr.k1:.6f}, k2={intr.k2:.6f}, "
            f"p1={intr.p1:.6f}, p2={intr.p2:.6f}, k3={intr.k3:.6f}",
            "",
            "Extrinsic Parameters:",
            f"  Rotation Vector: {extr.rotation_vector}",
            f"  Translation Vector: {extr.translation_vector}",
            f"  Camera Position: {extr.camera_position}",
            "",
            f"Reprojection Error: {self.reprojection_error:.4f} pixels",
        ]

        if self.checkerboard_config:
            lines.extend([
                f"Checkerboard: {self.checkerboard_config.cols} x "
                f"{self.checkerboard_config.rows}, square {self.checkerboard_config.square_size}",
            ])

        lines.append("=" * 50)
        return "\n".join(lines)


# Custom exceptions
class CalibrationError(Exception):
    """Base exception for calibration and projection errors."""
    pass


class InvalidParameterError(CalibrationError, ValueError):
    """Raised when malformed camera or target parameters are provided."""
    pass


class ProjectionError(CalibrationError):
    """Base exception for failed point mappings."""
    pass


class UnsupportedFrameError(ProjectionError, ValueError):
    """Raised when a coordinate frame mapping is not implemented."""
    pass


class DegenerateProjectionError(ProjectionError):
    """Raised when points lie on or behind the camera plane.

    Attributes:
        indices: Input indices of the points that cannot be projected.
    """

    def __init__(self, message: str, indices: Sequence[int] = ()):
        super().__init__(message)
        self.indices = tuple(int(i) for i in indices)


class CornerDetectionError(CalibrationError):
    """Raised when corner detection fails."""
    pass


class FileFormatError(CalibrationError):
    """Raised when file format is invalid or unsupported."""
    pass
