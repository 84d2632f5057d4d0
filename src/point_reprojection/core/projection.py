"""
Pinhole camera projection model.

Maps points expressed in world coordinates to pixel coordinates.

Coordinate frames:
- World (Xw, Yw, Zw): defined by the calibration target, origin at a corner,
  Zw perpendicular to the target plane
- Camera (Xc, Yc, Zc): origin at the optical center, Zc along the optical axis
- Pixel (u, v): origin at the top-left image corner, u right, v down

If any point of a request lies on or behind the camera plane, or has no
finite pixel position under the distortion model, the whole request fails
with DegenerateProjectionError; no partial result is produced.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from point_reprojection.core.distortion import distort_normalized
from point_reprojection.core.types import (
    CameraExtrinsics,
    CameraIntrinsics,
    DegenerateProjectionError,
    InvalidParameterError,
    Point2D,
    Point3D,
    UnsupportedFrameError,
)


class CoordinateFrame(Enum):
    """Named coordinate frames."""

    WORLD = "world"
    CAMERA = "camera"
    PIXEL = "pixel"

    @classmethod
    def parse(cls, frame: Union[str, CoordinateFrame]) -> CoordinateFrame:
        """Resolve a frame name, accepting the vendor-style aliases.

        Raises:
            UnsupportedFrameError: If the name is not a known frame.
        """
        if isinstance(frame, cls):
            return frame
        name = str(frame).strip().lower()
        if name in _FRAME_ALIASES:
            return _FRAME_ALIASES[name]
        raise UnsupportedFrameError(f"Unknown coordinate frame: {frame!r}")


_FRAME_ALIASES = {
    "world": CoordinateFrame.WORLD,
    "external_world": CoordinateFrame.WORLD,
    "camera": CoordinateFrame.CAMERA,
    "camera_metric": CoordinateFrame.CAMERA,
    "pixel": CoordinateFrame.PIXEL,
    "camera_pixel": CoordinateFrame.PIXEL,
}

FrameLike = Union[str, CoordinateFrame]


class CameraProjectionModel:
    """
    Calibrated pinhole camera with optional lens distortion.

    The model is immutable after construction and holds no mutable state,
    so one instance can serve concurrent callers.

    Example:
        >>> model = CameraProjectionModel(
        ...     CameraIntrinsics(fx=1000, fy=1000, cx=500, cy=500),
        ...     CameraExtrinsics.identity(),
        ... )
        >>> model.map_points([Point3D(1, 0, 10)], "world", "pixel")
        [Point2D(x=600.0, y=500.0)]
    """

    SUPPORTED_MAPPINGS = frozenset({(CoordinateFrame.WORLD, CoordinateFrame.PIXEL)})

    def __init__(self, intrinsics: CameraIntrinsics, extrinsics: CameraExtrinsics):
        """
        Args:
            intrinsics: Camera intrinsic parameters.
            extrinsics: World to camera pose.

        Raises:
            InvalidParameterError: If either argument is not a valid parameter set.
        """
        if not isinstance(intrinsics, CameraIntrinsics):
            raise InvalidParameterError(
                f"intrinsics must be CameraIntrinsics, got {type(intrinsics).__name__}"
            )
        if not isinstance(extrinsics, CameraExtrinsics):
            raise InvalidParameterError(
                f"extrinsics must be CameraExtrinsics, got {type(extrinsics).__name__}"
            )

        self._intrinsics = intrinsics
        self._extrinsics = extrinsics

        # Cached read-only views
        self._R = extrinsics.rotation_matrix
        self._t = extrinsics.translation_vector
        self._dist = intrinsics.distortion_coeffs
        self._has_distortion = intrinsics.has_distortion

    @classmethod
    def from_parameters(
        cls,
        fx: float,
        fy: float,
        cx: float,
        cy: float,
        rotation_matrix: Optional[ArrayLike] = None,
        translation_vector: Optional[ArrayLike] = None,
        distortion_coeffs: Optional[ArrayLike] = None,
    ) -> CameraProjectionModel:
        """Build a model from plain numbers, defaulting to the identity pose."""
        intrinsics = CameraIntrinsics(
            fx=fx,
            fy=fy,
            cx=cx,
            cy=cy,
            distortion_coeffs=distortion_coeffs if distortion_coeffs is not None else (),
        )
        extrinsics = CameraExtrinsics(
            rotation_matrix=np.eye(3) if rotation_matrix is None else rotation_matrix,
            translation_vector=np.zeros(3) if translation_vector is None else translation_vector,
        )
        return cls(intrinsics, extrinsics)

    @property
    def intrinsics(self) -> CameraIntrinsics:
        return self._intrinsics

    @property
    def extrinsics(self) -> CameraExtrinsics:
        return self._extrinsics

    def map_points(
        self,
        points: Sequence[Point3D],
        source_frame: FrameLike = CoordinateFrame.WORLD,
        target_frame: FrameLike = CoordinateFrame.PIXEL,
    ) -> list[Point2D]:
        """
        Map points between coordinate frames.

        Only world -> pixel is supported. Output index i corresponds to
        input index i.

        Args:
            points: Points in the source frame.
            source_frame: Frame of the input points ("world" / "EXTERNAL_WORLD").
            target_frame: Frame of the output points ("pixel" / "CAMERA_PIXEL").

        Returns:
            Pixel coordinates, one per input point.

        Raises:
            UnsupportedFrameError: For any frame pair other than world -> pixel.
            DegenerateProjectionError: If any point has camera z <= 0 or
                lands where the distortion model is singular.
        """
        mapping = (CoordinateFrame.parse(source_frame), CoordinateFrame.parse(target_frame))
        if mapping not in self.SUPPORTED_MAPPINGS:
            raise UnsupportedFrameError(
                f"Mapping {mapping[0].value} -> {mapping[1].value} is not supported"
            )

        world = _points_to_array(points)
        pixels = self.project(world)
        return [Point2D(u, v) for u, v in pixels.tolist()]

    def world_to_camera(self, world_points: ArrayLike) -> NDArray[np.float64]:
        """
        World -> camera coordinates, P_camera = R @ P_world + t.

        Args:
            world_points: World coordinates (N, 3).

        Returns:
            Camera coordinates (N, 3).
        """
        pts = np.asarray(world_points, dtype=np.float64).reshape(-1, 3)
        return pts @ self._R.T + self._t

    def project(self, world_points: ArrayLike) -> NDArray[np.float64]:
        """
        Vectorised world -> pixel projection.

        Args:
            world_points: World coordinates (N, 3) or (3,).

        Returns:
            Pixel coordinates (N, 2).

        Raises:
            InvalidParameterError: If any coordinate is not finite.
            DegenerateProjectionError: If any point has camera z <= 0 or
                lands where the distortion model is singular.
        """
        world = np.asarray(world_points, dtype=np.float64).reshape(-1, 3)
        if not np.all(np.isfinite(world)):
            raise InvalidParameterError("world points must be finite")

        camera = self.world_to_camera(world)
        z = camera[:, 2]
        degenerate = np.flatnonzero(~(z > 0.0))
        if degenerate.size:
            raise DegenerateProjectionError(
                f"{degenerate.size} point(s) on or behind the camera plane "
                f"at indices {degenerate.tolist()}",
                indices=degenerate.tolist(),
            )

        intr = self._intrinsics
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            normalized = camera[:, :2] / z[:, np.newaxis]
            if self._has_distortion:
                normalized = distort_normalized(normalized, self._dist)
            u = intr.fx * normalized[:, 0] + intr.cx
            v = intr.fy * normalized[:, 1] + intr.cy
        pixels = np.stack([u, v], axis=1)

        # The rational distortion denominator can vanish far off-axis
        singular = np.flatnonzero(~np.all(np.isfinite(pixels), axis=1))
        if singular.size:
            raise DegenerateProjectionError(
                f"{singular.size} point(s) without a finite pixel position "
                f"at indices {singular.tolist()}",
                indices=singular.tolist(),
            )
        return pixels

    def __repr__(self) -> str:
        intr = self._intrinsics
        return (
            f"{type(self).__name__}(fx={intr.fx:g}, fy={intr.fy:g}, "
            f"cx={intr.cx:g}, cy={intr.cy:g}, distortion={self._has_distortion})"
        )


def _points_to_array(points: Iterable[Union[Point3D, Sequence[float]]]) -> NDArray[np.float64]:
    """Stack Point3D values (or 3-sequences) into an (N, 3) array."""
    rows = []
    for point in points:
        if isinstance(point, Point3D):
            rows.append((point.x, point.y, point.z))
        else:
            values = tuple(point)
            if len(values) != 3:
                raise InvalidParameterError(f"Expected a 3D point, got {point!r}")
            rows.append(values)
    return np.array(rows, dtype=np.float64).reshape(-1, 3)
