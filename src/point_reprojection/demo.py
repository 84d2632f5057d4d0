"""
Point reprojection demo.

Finds the corners of a checkerboard calibration target, obtains a camera
model (loaded from file or estimated from the image), then reprojects the
world X and Y axes into the original image and draws them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from numpy.typing import NDArray

from point_reprojection.core.calibration import CalibrationEstimator, OneShotCalibrator
from point_reprojection.core.corner_detector import (
    CheckerboardCornerDetector,
    CornerDetection,
    CornerDetector,
)
from point_reprojection.core.projection import CameraProjectionModel, CoordinateFrame
from point_reprojection.core.types import (
    CalibrationResult,
    CheckerboardConfig,
    CornerDetectionError,
    FileFormatError,
    InvalidParameterError,
    Point2D,
    Point3D,
)
from point_reprojection.io.image_loader import ImageLoader
from point_reprojection.io.model_file import CameraModelFile
from point_reprojection.ui.overlay import OverlayCanvas, PointType, ShapeDecoration, TextDecoration
from point_reprojection.ui.viewer import ImageViewer
from point_reprojection.utils.logging import get_logger

logger = get_logger("demo")

# Indices into the axis point list
ORIGIN, X_AXIS_END, Y_AXIS_END, X_LABEL, Y_LABEL = range(5)

# Corner index labels are drawn this many pixels above the corner
CORNER_LABEL_OFFSET = 10


@dataclass
class DemoConfig:
    """Configuration for the reprojection demo.

    Attributes:
        image_path: Checkerboard image used to place the camera.
        model_path: Previously saved camera model. If None the model is
            estimated from the image.
        checkerboard_rows: Inner corners in the vertical direction.
        checkerboard_cols: Inner corners in the horizontal direction.
        square_size: Size of a checkerboard square in world units (mm).
        axis_length_factor: Length of the drawn axes in squares.
        delay_ms: Pause between visualization steps when displaying.
        display: Show an OpenCV window.
        output_dir: Directory for rendered frames (optional).
        font_size: Axis label size in pixels.
        line_width: Axis line width in pixels.
        save_model_path: Where to save the camera model (optional).
    """
    image_path: Path
    model_path: Optional[Path] = None
    checkerboard_rows: int = 6
    checkerboard_cols: int = 8
    square_size: float = 16.002
    axis_length_factor: float = 2.0
    delay_ms: int = 1000
    display: bool = True
    output_dir: Optional[Path] = None
    font_size: int = 25
    line_width: int = 5
    save_model_path: Optional[Path] = None
    checkerboard: CheckerboardConfig = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.image_path = Path(self.image_path)
        if self.model_path is not None:
            self.model_path = Path(self.model_path)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        if self.save_model_path is not None:
            self.save_model_path = Path(self.save_model_path)

        if not self.axis_length_factor > 0:
            raise InvalidParameterError(
                f"axis_length_factor must be > 0, got {self.axis_length_factor}"
            )
        if self.delay_ms < 0:
            raise InvalidParameterError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if self.font_size < 1:
            raise InvalidParameterError(f"font_size must be >= 1, got {self.font_size}")
        if self.line_width < 1:
            raise InvalidParameterError(f"line_width must be >= 1, got {self.line_width}")

        self.checkerboard = CheckerboardConfig(
            rows=self.checkerboard_rows,
            cols=self.checkerboard_cols,
            square_size=self.square_size,
        )


@dataclass(frozen=True)
class DemoStyle:
    """Decorations used by the demo, one per kind of graphic."""
    corners: ShapeDecoration
    corner_labels: TextDecoration
    x_axis: ShapeDecoration
    y_axis: ShapeDecoration
    origin: ShapeDecoration
    axis_labels: TextDecoration

    @classmethod
    def create(cls, font_size: int = 25, line_width: int = 5) -> DemoStyle:
        return cls(
            corners=ShapeDecoration(line_color=(190, 0, 190), point_type=PointType.DOT, point_size=12),
            corner_labels=TextDecoration(color=(255, 255, 0), size=10),
            x_axis=ShapeDecoration(line_color=(255, 0, 0), line_width=line_width),
            y_axis=ShapeDecoration(line_color=(0, 255, 0), line_width=line_width),
            origin=ShapeDecoration(line_color=(0, 0, 255), point_type=PointType.DOT, point_size=12),
            axis_labels=TextDecoration(color=(0, 180, 180), size=font_size),
        )


@dataclass
class DemoResult:
    """Everything the demo produced."""
    calibration: CalibrationResult
    model: CameraProjectionModel
    detection: CornerDetection
    axis_points: list[Point3D]
    axis_pixels: list[Point2D]
    image: NDArray


def build_axis_points(square_size: float, axis_length_factor: float = 2.0) -> list[Point3D]:
    """
    World points of the coordinate system graphic.

    Returns, in order: origin, X axis end, Y axis end, X label anchor,
    Y label anchor. All points lie on the board plane (z = 0).
    """
    length = square_size * axis_length_factor
    return [
        Point3D(0.0, 0.0, 0.0),
        Point3D(length, 0.0, 0.0),
        Point3D(0.0, length, 0.0),
        Point3D(length, -square_size / 2, 0.0),
        Point3D(-square_size / 2, length, 0.0),
    ]


class ReprojectionDemo:
    """
    The point reprojection pipeline.

    Detector, estimator and viewer are replaceable, so the pipeline can run
    against another vision backend or headless.
    """

    def __init__(
        self,
        config: DemoConfig,
        detector: Optional[CornerDetector] = None,
        estimator: Optional[CalibrationEstimator] = None,
        viewer: Optional[ImageViewer] = None,
    ):
        self.config = config
        self.checkerboard = config.checkerboard
        self.detector = detector or CheckerboardCornerDetector(self.checkerboard)
        self.estimator = estimator or OneShotCalibrator()
        self.viewer = viewer or ImageViewer(
            display=config.display,
            output_dir=config.output_dir,
            delay_ms=config.delay_ms,
        )
        self.style = DemoStyle.create(config.font_size, config.line_width)
        self._image_loader = ImageLoader()

    def run(self) -> DemoResult:
        """
        Run the demo.

        Raises:
            FileFormatError: If the image or model file cannot be loaded.
            CornerDetectionError: If the model has to be estimated and the
                checkerboard is not found.
            CalibrationError: If the model cannot be estimated.
            ProjectionError: If the axes cannot be reprojected.
        """
        config = self.config

        calibration: Optional[CalibrationResult] = None
        if config.model_path is not None:
            calibration = CameraModelFile.load(config.model_path)

        image = self._image_loader.load(config.image_path)
        if image is None:
            raise FileFormatError(f"Failed to load image: {config.image_path}")

        detection = self.detector.detect(image)
        if detection.success:
            logger.info(f"Detected {detection.num_corners} checkerboard corners")
        elif calibration is None:
            raise CornerDetectionError(
                f"Cannot estimate camera model: {detection.error_message}"
            )
        else:
            logger.warning(f"Corner detection failed: {detection.error_message}")

        if calibration is None:
            calibration = self.estimator.estimate(detection, self.checkerboard)
            logger.info(f"Camera model estimated:\n{calibration.summary()}")

        if config.save_model_path is not None:
            CameraModelFile.save(config.save_model_path, calibration)

        model = calibration.to_model()

        # Check that the corners are detected properly
        canvas = OverlayCanvas(image)
        self.draw_corners(canvas, detection)
        self.viewer.present(canvas)

        # Reproject the coordinate system into the original image
        axis_points = build_axis_points(config.square_size, config.axis_length_factor)
        axis_pixels = model.map_points(axis_points, CoordinateFrame.WORLD, CoordinateFrame.PIXEL)
        self.draw_axes(canvas, axis_pixels)
        self.viewer.present(canvas)

        logger.info("App finished.")

        return DemoResult(
            calibration=calibration,
            model=model,
            detection=detection,
            axis_points=axis_points,
            axis_pixels=axis_pixels,
            image=canvas.image,
        )

    def draw_corners(self, canvas: OverlayCanvas, detection: CornerDetection) -> None:
        """Draw detected corners and their (row, col) indices."""
        points = detection.corner_points()
        canvas.add_points(points, self.style.corners)
        for point, (row, col) in zip(points, detection.corner_indices()):
            canvas.add_text(
                f"({row}, {col})",
                Point2D(point.x, point.y - CORNER_LABEL_OFFSET),
                self.style.corner_labels,
            )

    def draw_axes(self, canvas: OverlayCanvas, axis_pixels: list[Point2D]) -> None:
        """Draw X/Y axes, the origin dot and the axis labels."""
        style = self.style
        canvas.add_line_segment(axis_pixels[ORIGIN], axis_pixels[X_AXIS_END], style.x_axis)
        canvas.add_line_segment(axis_pixels[ORIGIN], axis_pixels[Y_AXIS_END], style.y_axis)
        # Dot at the origin stands for the Z axis
        canvas.add_points([axis_pixels[ORIGIN]], style.origin)

        half = style.axis_labels.size / 2
        for label, index in (("X", X_LABEL), ("Y", Y_LABEL)):
            anchor = axis_pixels[index]
            canvas.add_text(label, Point2D(anchor.x - half, anchor.y + half), style.axis_labels)
