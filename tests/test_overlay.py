"""Tests for image overlays."""

import dataclasses

import numpy as np
import pytest

from point_reprojection.core.types import InvalidParameterError, Point2D
from point_reprojection.ui.overlay import OverlayCanvas, PointType, ShapeDecoration, TextDecoration


@pytest.fixture
def white_image():
    return np.full((100, 120, 3), 255, dtype=np.uint8)


def test_points_are_drawn_in_bgr(white_image):
    canvas = OverlayCanvas(white_image)

    canvas.add_points([Point2D(50.0, 40.0)], ShapeDecoration(line_color=(255, 0, 0), point_size=12))

    assert tuple(canvas.image[40, 50]) == (0, 0, 255)


def test_cross_marker(white_image):
    canvas = OverlayCanvas(white_image)
    decoration = ShapeDecoration(line_color=(0, 255, 0), point_type=PointType.CROSS, point_size=15, line_width=3)

    canvas.add_points([Point2D(60.0, 50.0)], decoration)

    assert tuple(canvas.image[50, 60]) == (0, 255, 0)
    # Cross arms, not a filled disc
    assert tuple(canvas.image[45, 55]) == (255, 255, 255)


def test_line_segment(white_image):
    canvas = OverlayCanvas(white_image)

    canvas.add_line_segment(Point2D(10.0, 20.0), Point2D(100.0, 20.0), ShapeDecoration(line_color=(0, 0, 255), line_width=5))

    image = canvas.image
    assert tuple(image[20, 55]) == (255, 0, 0)
    assert tuple(image[80, 55]) == (255, 255, 255)


def test_text_changes_pixels_near_position(white_image):
    canvas = OverlayCanvas(white_image)

    canvas.add_text("X", Point2D(20.0, 60.0), TextDecoration(color=(0, 0, 0), size=25))

    region = canvas.image[30:65, 15:50]
    assert (region < 128).any()
    assert (canvas.image[70:, :] == 255).all()


def test_base_image_not_modified(white_image):
    before = white_image.copy()
    canvas = OverlayCanvas(white_image)

    canvas.add_points([Point2D(50.0, 40.0)], ShapeDecoration())

    np.testing.assert_array_equal(white_image, before)


def test_image_property_is_a_copy(white_image):
    canvas = OverlayCanvas(white_image)

    canvas.image[:] = 0

    assert (canvas.image == 255).all()


def test_grayscale_converted_to_bgr():
    canvas = OverlayCanvas(np.zeros((30, 40), dtype=np.uint8))

    assert canvas.image.shape == (30, 40, 3)
    assert canvas.size == (40, 30)


def test_clear(white_image):
    canvas = OverlayCanvas(white_image)
    canvas.add_points([Point2D(50.0, 40.0)], ShapeDecoration(point_size=12))

    canvas.clear()

    np.testing.assert_array_equal(canvas.image, white_image)


class TestDecorations:
    """ShapeDecoration / TextDecoration"""

    def test_defaults(self):
        shape = ShapeDecoration()
        assert shape.line_color == (0, 0, 255)
        assert shape.line_width == 1
        assert shape.point_type is PointType.DOT
        assert TextDecoration().size == 10

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ShapeDecoration().line_width = 3
        with pytest.raises(dataclasses.FrozenInstanceError):
            TextDecoration().size = 20

    @pytest.mark.parametrize("color", [(256, 0, 0), (-1, 0, 0), (0, 0)])
    def test_invalid_color(self, color):
        with pytest.raises(InvalidParameterError):
            ShapeDecoration(line_color=color)
        with pytest.raises(InvalidParameterError):
            TextDecoration(color=color)

    def test_invalid_sizes(self):
        with pytest.raises(InvalidParameterError):
            ShapeDecoration(line_width=0)
        with pytest.raises(InvalidParameterError):
            ShapeDecoration(point_size=0)
        with pytest.raises(InvalidParameterError):
            TextDecoration(size=0)

    def test_text_scale_grows_with_size(self):
        assert TextDecoration(size=25).font_scale > TextDecoration(size=10).font_scale
        assert TextDecoration(size=5).thickness == 1
