"""Unit tests for core value types."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from point_reprojection.core.types import (
    CalibrationResult,
    CameraExtrinsics,
    CameraIntrinsics,
    CheckerboardConfig,
    DegenerateProjectionError,
    InvalidParameterError,
    Point2D,
    Point3D,
    ProjectionError,
)


class TestPoints:
    """Point2D / Point3D value types"""

    def test_coordinates_are_floats(self):
        point = Point3D(1, 2, 3)
        assert point == Point3D(1.0, 2.0, 3.0)
        assert isinstance(point.x, float)

    def test_points_are_immutable(self):
        point = Point2D(1.0, 2.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            point.x = 5.0

    def test_as_int_tuple_rounds(self):
        assert Point2D(10.4, 10.6).as_int_tuple() == (10, 11)

    def test_as_array(self):
        np.testing.assert_array_equal(Point3D(1, 2, 3).as_array(), [1.0, 2.0, 3.0])


class TestCameraIntrinsics:
    """CameraIntrinsics validation and accessors"""

    def test_camera_matrix(self):
        intrinsics = CameraIntrinsics(fx=1000.0, fy=900.0, cx=640.0, cy=360.0)
        K = intrinsics.camera_matrix
        assert K.shape == (3, 3)
        assert K[0, 0] == 1000.0
        assert K[1, 1] == 900.0
        assert K[0, 2] == 640.0
        assert K[1, 2] == 360.0
        assert K[2, 2] == 1.0

    @pytest.mark.parametrize("fx, fy", [(0.0, 1000.0), (1000.0, 0.0), (-1.0, 1000.0)])
    def test_non_positive_focal_length_rejected(self, fx, fy):
        with pytest.raises(InvalidParameterError):
            CameraIntrinsics(fx=fx, fy=fy, cx=500.0, cy=500.0)

    def test_non_finite_value_rejected(self):
        with pytest.raises(InvalidParameterError):
            CameraIntrinsics(fx=float("nan"), fy=1000.0, cx=500.0, cy=500.0)
        with pytest.raises(InvalidParameterError):
            CameraIntrinsics(fx=1000.0, fy=1000.0, cx=float("inf"), cy=500.0)

    def test_invalid_parameter_error_is_value_error(self):
        with pytest.raises(ValueError):
            CameraIntrinsics(fx=0.0, fy=1000.0, cx=500.0, cy=500.0)

    def test_unsupported_distortion_length_rejected(self):
        with pytest.raises(InvalidParameterError):
            CameraIntrinsics(fx=1.0, fy=1.0, cx=0.0, cy=0.0, distortion_coeffs=[0.1, 0.2, 0.3])

    def test_distortion_accessors(self):
        intrinsics = CameraIntrinsics(
            fx=1.0, fy=1.0, cx=0.0, cy=0.0,
            distortion_coeffs=[-0.1, 0.05, 0.001, 0.002, 0.01],
        )
        assert intrinsics.k1 == pytest.approx(-0.1)
        assert intrinsics.k2 == pytest.approx(0.05)
        assert intrinsics.p1 == pytest.approx(0.001)
        assert intrinsics.p2 == pytest.approx(0.002)
        assert intrinsics.k3 == pytest.approx(0.01)
        assert intrinsics.has_distortion is True

    def test_missing_coefficients_read_as_zero(self):
        intrinsics = CameraIntrinsics(fx=1.0, fy=1.0, cx=0.0, cy=0.0, distortion_coeffs=[-0.1, 0.0, 0.0, 0.0])
        assert intrinsics.k3 == 0.0

    def test_zero_distortion_is_not_distortion(self):
        intrinsics = CameraIntrinsics(fx=1.0, fy=1.0, cx=0.0, cy=0.0, distortion_coeffs=np.zeros(5))
        assert intrinsics.has_distortion is False
        assert CameraIntrinsics(fx=1.0, fy=1.0, cx=0.0, cy=0.0).has_distortion is False

    def test_distortion_array_is_read_only_copy(self):
        coeffs = np.array([-0.1, 0.0, 0.0, 0.0, 0.0])
        intrinsics = CameraIntrinsics(fx=1.0, fy=1.0, cx=0.0, cy=0.0, distortion_coeffs=coeffs)
        coeffs[0] = 5.0
        assert intrinsics.k1 == pytest.approx(-0.1)
        with pytest.raises(ValueError):
            intrinsics.distortion_coeffs[0] = 1.0

    def test_frozen(self):
        intrinsics = CameraIntrinsics(fx=1.0, fy=1.0, cx=0.0, cy=0.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            intrinsics.fx = 2.0

    def test_from_camera_matrix(self):
        K = np.array([[800.0, 0.0, 320.0], [0.0, 810.0, 240.0], [0.0, 0.0, 1.0]])
        intrinsics = CameraIntrinsics.from_camera_matrix(K, image_size=(640, 480))
        assert (intrinsics.fx, intrinsics.fy, intrinsics.cx, intrinsics.cy) == (800.0, 810.0, 320.0, 240.0)
        assert intrinsics.image_size == (640, 480)

    def test_from_camera_matrix_rejects_skew(self):
        K = np.array([[800.0, 1.0, 320.0], [0.0, 800.0, 240.0], [0.0, 0.0, 1.0]])
        with pytest.raises(InvalidParameterError):
            CameraIntrinsics.from_camera_matrix(K)

    def test_invalid_image_size_rejected(self):
        with pytest.raises(InvalidParameterError):
            CameraIntrinsics(fx=1.0, fy=1.0, cx=0.0, cy=0.0, image_size=(0, 480))


class TestCameraExtrinsics:
    """CameraExtrinsics validation and conversions"""

    def test_identity(self):
        extrinsics = CameraExtrinsics.identity()
        np.testing.assert_array_equal(extrinsics.rotation_matrix, np.eye(3))
        np.testing.assert_array_equal(extrinsics.translation_vector, np.zeros(3))

    def test_scaled_matrix_rejected(self):
        with pytest.raises(InvalidParameterError):
            CameraExtrinsics(rotation_matrix=np.eye(3) * 1.001, translation_vector=np.zeros(3))

    def test_reflection_rejected(self):
        reflection = np.diag([1.0, 1.0, -1.0])
        with pytest.raises(InvalidParameterError):
            CameraExtrinsics(rotation_matrix=reflection, translation_vector=np.zeros(3))

    def test_small_numerical_error_accepted(self):
        R = np.eye(3)
        R[0, 1] = 1e-9
        CameraExtrinsics(rotation_matrix=R, translation_vector=np.zeros(3))

    def test_wrong_shapes_rejected(self):
        with pytest.raises(InvalidParameterError):
            CameraExtrinsics(rotation_matrix=np.eye(2), translation_vector=np.zeros(3))
        with pytest.raises(InvalidParameterError):
            CameraExtrinsics(rotation_matrix=np.eye(3), translation_vector=np.zeros(2))

    def test_translation_accepts_column_vector(self):
        extrinsics = CameraExtrinsics(rotation_matrix=np.eye(3), translation_vector=[[1.0], [2.0], [3.0]])
        np.testing.assert_array_equal(extrinsics.translation_vector, [1.0, 2.0, 3.0])

    def test_rotation_vector_round_trip(self):
        rvec = np.array([0.1, -0.2, 0.3])
        extrinsics = CameraExtrinsics.from_rotation_vector(rvec, [0.0, 0.0, 1.0])
        np.testing.assert_allclose(extrinsics.rotation_vector, rvec, atol=1e-9)

    def test_from_quaternion_identity(self):
        extrinsics = CameraExtrinsics.from_quaternion([0.0, 0.0, 0.0, 1.0], [0.0, 0.0, 0.0])
        np.testing.assert_allclose(extrinsics.rotation_matrix, np.eye(3), atol=1e-12)

    def test_from_quaternion_quarter_turn_about_z(self):
        half = np.sqrt(0.5)
        extrinsics = CameraExtrinsics.from_quaternion([0.0, 0.0, half, half], [0.0, 0.0, 0.0])
        np.testing.assert_allclose(extrinsics.rotation_matrix @ [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], atol=1e-12)

    def test_zero_quaternion_rejected(self):
        with pytest.raises(InvalidParameterError):
            CameraExtrinsics.from_quaternion([0.0, 0.0, 0.0, 0.0], [0.0, 0.0, 0.0])

    def test_camera_position(self):
        extrinsics = CameraExtrinsics(rotation_matrix=np.eye(3), translation_vector=[1.0, 2.0, 3.0])
        np.testing.assert_allclose(extrinsics.camera_position, [-1.0, -2.0, -3.0])

    def test_transformation_matrix(self):
        extrinsics = CameraExtrinsics.from_rotation_vector([0.0, 0.0, 0.5], [1.0, 2.0, 3.0])
        T = extrinsics.transformation_matrix
        assert T.shape == (4, 4)
        np.testing.assert_allclose(T[:3, :3], extrinsics.rotation_matrix)
        np.testing.assert_allclose(T[:3, 3], [1.0, 2.0, 3.0])
        np.testing.assert_allclose(T[3], [0.0, 0.0, 0.0, 1.0])

    def test_arrays_are_read_only(self):
        extrinsics = CameraExtrinsics.identity()
        with pytest.raises(ValueError):
            extrinsics.rotation_matrix[0, 0] = 2.0


class TestCheckerboardConfig:
    """CheckerboardConfig validation and object points"""

    def test_invalid_values_rejected(self):
        with pytest.raises(InvalidParameterError):
            CheckerboardConfig(rows=1, cols=8, square_size=10.0)
        with pytest.raises(InvalidParameterError):
            CheckerboardConfig(rows=6, cols=8, square_size=0.0)

    def test_pattern_size_is_cols_rows(self):
        assert CheckerboardConfig(rows=6, cols=8, square_size=1.0).pattern_size == (8, 6)

    def test_object_points_row_major(self):
        config = CheckerboardConfig(rows=2, cols=3, square_size=10.0)
        objp = config.generate_object_points()
        np.testing.assert_allclose(
            objp,
            [[0, 0, 0], [10, 0, 0], [20, 0, 0], [0, 10, 0], [10, 10, 0], [20, 10, 0]],
        )

    def test_pattern_indices_match_object_points(self):
        config = CheckerboardConfig(rows=3, cols=4, square_size=5.0)
        indices = config.pattern_indices()
        objp = config.generate_object_points()
        np.testing.assert_allclose(objp[:, 0], indices[:, 1] * 5.0)
        np.testing.assert_allclose(objp[:, 1], indices[:, 0] * 5.0)


class TestCalibrationResult:
    """CalibrationResult"""

    def test_negative_error_rejected(self, simple_intrinsics):
        with pytest.raises(InvalidParameterError):
            CalibrationResult(
                intrinsics=simple_intrinsics,
                extrinsics=CameraExtrinsics.identity(),
                reprojection_error=-1.0,
            )

    def test_to_model(self, simple_intrinsics):
        result = CalibrationResult(intrinsics=simple_intrinsics, extrinsics=CameraExtrinsics.identity())
        model = result.to_model()
        assert model.intrinsics is simple_intrinsics

    def test_summary_mentions_parameters(self, board_calibration):
        summary = board_calibration.summary()
        assert "fx=1000.00" in summary
        assert "Reprojection Error: 0.1000" in summary
        assert "Checkerboard: 8 x 6" in summary


def test_degenerate_error_carries_indices():
    error = DegenerateProjectionError("behind camera", indices=[2, 5])
    assert error.indices == (2, 5)
    assert isinstance(error, ProjectionError)
