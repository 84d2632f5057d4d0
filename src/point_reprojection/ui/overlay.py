"""
Image overlays.

Decorations are immutable value objects passed with every draw call, and
text positions are arguments of the call rather than decoration state.
Colors are given as RGB, matching how they are usually written down, and
converted to OpenCV's BGR order when drawing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import cv2
from numpy.typing import NDArray

from point_reprojection.core.types import InvalidParameterError, Point2D

RGB = tuple[int, int, int]

# Height in pixels of FONT_HERSHEY_SIMPLEX capitals at fontScale 1
_HERSHEY_SIMPLEX_HEIGHT = 22.0


class PointType(Enum):
    """Marker shape used for points."""
    DOT = "dot"
    CROSS = "cross"


def _check_color(color: RGB) -> RGB:
    if len(color) != 3 or any(not 0 <= int(c) <= 255 for c in color):
        raise InvalidParameterError(f"color must be three values in 0..255, got {color!r}")
    return tuple(int(c) for c in color)


def _bgr(color: RGB) -> tuple[int, int, int]:
    r, g, b = color
    return (b, g, r)


@dataclass(frozen=True)
class ShapeDecoration:
    """Style of points and line segments.

    Attributes:
        line_color: RGB color of lines and markers.
        line_width: Line thickness in pixels.
        point_type: Marker shape for points.
        point_size: Marker diameter in pixels.
    """
    line_color: RGB = (0, 0, 255)
    line_width: int = 1
    point_type: PointType = PointType.DOT
    point_size: int = 5

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_color", _check_color(self.line_color))
        if self.line_width < 1:
            raise InvalidParameterError(f"line_width must be >= 1, got {self.line_width}")
        if self.point_size < 1:
            raise InvalidParameterError(f"point_size must be >= 1, got {self.point_size}")


@dataclass(frozen=True)
class TextDecoration:
    """Style of text labels.

    Attributes:
        color: RGB text color.
        size: Approximate text height in pixels.
    """
    color: RGB = (0, 0, 0)
    size: int = 10

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _check_color(self.color))
        if self.size < 1:
            raise InvalidParameterError(f"size must be >= 1, got {self.size}")

    @property
    def font_scale(self) -> float:
        return self.size / _HERSHEY_SIMPLEX_HEIGHT

    @property
    def thickness(self) -> int:
        return max(1, int(round(self.size / 12)))


class OverlayCanvas:
    """
    Drawing surface over a base image.

    The base image is copied; drawing never modifies the caller's array.
    Grayscale images are converted to BGR so colored overlays are visible.
    """

    def __init__(self, image: NDArray):
        self._base = self._to_bgr(image)
        self._image = self._base.copy()

    @staticmethod
    def _to_bgr(image: NDArray) -> NDArray:
        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        return image.copy()

    @property
    def image(self) -> NDArray:
        """Current rendering (a copy)."""
        return self._image.copy()

    @property
    def size(self) -> tuple[int, int]:
        """Canvas dimensions (width, height)."""
        height, width = self._image.shape[:2]
        return (width, height)

    def clear(self) -> None:
        """Remove all overlays."""
        self._image = self._base.copy()

    def add_points(self, points: Iterable[Point2D], decoration: ShapeDecoration) -> None:
        color = _bgr(decoration.line_color)
        radius = max(1, decoration.point_size // 2)
        for point in points:
            center = point.as_int_tuple()
            if decoration.point_type is PointType.DOT:
                cv2.circle(self._image, center, radius, color, -1, cv2.LINE_AA)
            else:
                cv2.drawMarker(
                    self._image,
                    center,
                    color,
                    cv2.MARKER_CROSS,
                    decoration.point_size,
                    decoration.line_width,
                    cv2.LINE_AA,
                )

    def add_line_segment(
        self,
        start: Point2D,
        end: Point2D,
        decoration: ShapeDecoration,
    ) -> None:
        cv2.line(
            self._image,
            start.as_int_tuple(),
            end.as_int_tuple(),
            _bgr(decoration.line_color),
            decoration.line_width,
            cv2.LINE_AA,
        )

    def add_text(
        self,
        text: str,
        position: Point2D,
        decoration: TextDecoration,
    ) -> None:
        """Draw text with its bottom-left corner at position."""
        cv2.putText(
            self._image,
            text,
            position.as_int_tuple(),
            cv2.FONT_HERSHEY_SIMPLEX,
            decoration.font_scale,
            _bgr(decoration.color),
            decoration.thickness,
            cv2.LINE_AA,
        )
