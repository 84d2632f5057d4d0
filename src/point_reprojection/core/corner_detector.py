"""
Checkerboard corner detection.

Corner detection is an external service as far as the projection model is
concerned: anything implementing :class:`CornerDetector` can feed the
calibration estimators. :class:`CheckerboardCornerDetector` is the OpenCV
backed implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
from numpy.typing import NDArray

from point_reprojection.core.types import CheckerboardConfig, Point2D
from point_reprojection.io.image_loader import ImageLoader
from point_reprojection.utils.logging import get_logger

logger = get_logger("core.corner_detector")

ImageSource = Union[str, Path, NDArray]


@dataclass
class CornerDetection:
    """Result of corner detection on a single image.

    Attributes:
        success: Whether the full pattern was detected.
        points: Detected corner points (N, 2), or None if failed.
        indices: Integer (row, col) pattern index of each point (N, 2), or None.
        image_size: Image dimensions (width, height).
        image_path: Path to the source image, if loaded from disk.
        error_message: Error description if detection failed.
    """
    success: bool
    points: Optional[NDArray[np.float64]]
    indices: Optional[NDArray[np.int32]]
    image_size: tuple[int, int]
    image_path: Optional[Path] = None
    error_message: str = ""

    @property
    def num_corners(self) -> int:
        """Number of detected corners."""
        if self.points is None:
            return 0
        return len(self.points)

    def corner_points(self) -> list[Point2D]:
        """Detected corners as Point2D values."""
        if self.points is None:
            return []
        return [Point2D(x, y) for x, y in self.points.tolist()]

    def corner_indices(self) -> list[tuple[int, int]]:
        """Pattern indices as (row, col) tuples."""
        if self.indices is None:
            return []
        return [(int(r), int(c)) for r, c in self.indices.tolist()]


class CornerDetector(ABC):
    """Interface of a calibration target corner detector."""

    @abstractmethod
    def detect(self, image: ImageSource) -> CornerDetection:
        """Detect the target corners in an image.

        Detection failures are reported through ``CornerDetection.success``.
        """


class CheckerboardCornerDetector(CornerDetector):
    """OpenCV checkerboard corner detector.

    Uses findChessboardCorners with optional subpixel refinement. The
    pattern origin (row 0, col 0) is the first corner OpenCV reports.

    Example:
        >>> config = CheckerboardConfig(rows=6, cols=8, square_size=16.002)
        >>> detector = CheckerboardCornerDetector(config)
        >>> detection = detector.detect("resources/pose.bmp")
        >>> if detection.success:
        ...     print(f"Found {detection.num_corners} corners")
    """

    SUBPIX_CRITERIA = (
        cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER,
        30,  # max iterations
        0.001,  # epsilon
    )
    SUBPIX_WINDOW_SIZE = (11, 11)
    SUBPIX_ZERO_ZONE = (-1, -1)

    DEFAULT_FLAGS = cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE

    def __init__(
        self,
        config: CheckerboardConfig,
        refine_corners: bool = True,
        detection_flags: Optional[int] = None,
    ):
        """
        Args:
            config: Checkerboard configuration.
            refine_corners: Whether to refine corners with subpixel accuracy.
            detection_flags: OpenCV detection flags (default: adaptive + normalize).
        """
        self.config = config
        self.refine_corners = refine_corners
        self.detection_flags = self.DEFAULT_FLAGS if detection_flags is None else detection_flags
        self._image_loader = ImageLoader()

    def detect(self, image: ImageSource) -> CornerDetection:
        image_path: Optional[Path] = None
        if isinstance(image, (str, Path)):
            image_path = Path(image)
            loaded = self._image_loader.load(image_path)
            if loaded is None:
                return self._failure(image_path, (0, 0), f"Failed to load image: {image_path}")
            image = loaded

        height, width = image.shape[:2]
        image_size = (width, height)

        if image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image

        found, corners = cv2.findChessboardCorners(
            gray, self.config.pattern_size, flags=self.detection_flags
        )

        if not found or corners is None:
            logger.debug(f"Corner detection failed for: {image_path or 'array'}")
            return self._failure(image_path, image_size, "No checkerboard pattern found")

        expected = self.config.num_corners
        if len(corners) != expected:
            return self._failure(
                image_path, image_size, f"Expected {expected} corners, found {len(corners)}"
            )

        if self.refine_corners:
            corners = cv2.cornerSubPix(
                gray,
                corners,
                self.SUBPIX_WINDOW_SIZE,
                self.SUBPIX_ZERO_ZONE,
                self.SUBPIX_CRITERIA,
            )

        logger.debug(f"Detected {len(corners)} corners in: {image_path or 'array'}")

        return CornerDetection(
            success=True,
            points=corners.reshape(-1, 2).astype(np.float64),
            indices=self.config.pattern_indices(),
            image_size=image_size,
            image_path=image_path,
        )

    @staticmethod
    def _failure(
        image_path: Optional[Path],
        image_size: tuple[int, int],
        message: str,
    ) -> CornerDetection:
        return CornerDetection(
            success=False,
            points=None,
            indices=None,
            image_size=image_size,
            image_path=image_path,
            error_message=message,
        )
