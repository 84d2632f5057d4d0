"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import numpy as np
import pytest

from point_reprojection.core.projection import CameraProjectionModel
from point_reprojection.core.types import (
    CalibrationResult,
    CameraExtrinsics,
    CameraIntrinsics,
    CheckerboardConfig,
)

# Synthetic checkerboard layout: 9x7 squares -> 8x6 inner corners
BOARD_ROWS = 6
BOARD_COLS = 8
SQUARE_PX = 40
MARGIN_PX = 40


def make_checkerboard_image(
    rows: int = BOARD_ROWS,
    cols: int = BOARD_COLS,
    square_px: int = SQUARE_PX,
    margin_px: int = MARGIN_PX,
) -> np.ndarray:
    """Grayscale checkerboard with (rows x cols) inner corners and a white border."""
    squares_y, squares_x = rows + 1, cols + 1
    height = squares_y * square_px + 2 * margin_px
    width = squares_x * square_px + 2 * margin_px
    board = np.full((height, width), 255, dtype=np.uint8)

    for y in range(squares_y):
        for x in range(squares_x):
            if (x + y) % 2 == 0:
                top = margin_px + y * square_px
                left = margin_px + x * square_px
                board[top:top + square_px, left:left + square_px] = 0

    return board


def expected_corner_pixels(
    rows: int = BOARD_ROWS,
    cols: int = BOARD_COLS,
    square_px: int = SQUARE_PX,
    margin_px: int = MARGIN_PX,
) -> np.ndarray:
    """Sub-pixel location of every inner corner of make_checkerboard_image()."""
    # Square edges fall between pixel centers, hence the -0.5
    grid = np.mgrid[1:cols + 1, 1:rows + 1].T.reshape(-1, 2).astype(np.float64)
    return margin_px + grid * square_px - 0.5


@pytest.fixture
def checkerboard_config() -> CheckerboardConfig:
    """8x6 inner corners, square size equal to the synthetic square in pixels."""
    return CheckerboardConfig(rows=BOARD_ROWS, cols=BOARD_COLS, square_size=float(SQUARE_PX))


@pytest.fixture
def checkerboard_image() -> np.ndarray:
    return make_checkerboard_image()


@pytest.fixture
def checkerboard_image_path(tmp_path: Path, checkerboard_image: np.ndarray) -> Path:
    import cv2

    path = tmp_path / "pose.png"
    assert cv2.imwrite(str(path), checkerboard_image)
    return path


@pytest.fixture
def simple_intrinsics() -> CameraIntrinsics:
    """fx = fy = 1000, principal point (500, 500), no distortion."""
    return CameraIntrinsics(fx=1000.0, fy=1000.0, cx=500.0, cy=500.0)


@pytest.fixture
def simple_model(simple_intrinsics: CameraIntrinsics) -> CameraProjectionModel:
    return CameraProjectionModel(simple_intrinsics, CameraExtrinsics.identity())


@pytest.fixture
def board_model() -> CameraProjectionModel:
    """Fronto-parallel camera mapping 1 world unit to 1 pixel of the synthetic board.

    World origin (corner row 0, col 0) lands on the first inner corner.
    """
    origin_px = MARGIN_PX + SQUARE_PX - 0.5
    intrinsics = CameraIntrinsics(fx=1000.0, fy=1000.0, cx=320.0, cy=240.0)
    extrinsics = CameraExtrinsics(
        rotation_matrix=np.eye(3),
        translation_vector=[origin_px - 320.0, origin_px - 240.0, 1000.0],
    )
    return CameraProjectionModel(intrinsics, extrinsics)


@pytest.fixture
def board_calibration(board_model: CameraProjectionModel, checkerboard_config) -> CalibrationResult:
    return CalibrationResult(
        intrinsics=board_model.intrinsics,
        extrinsics=board_model.extrinsics,
        reprojection_error=0.1,
        checkerboard_config=checkerboard_config,
        notes="synthetic",
    )


@pytest.fixture
def tilted_model() -> CameraProjectionModel:
    """640x480 camera looking at a tilted board, ~500 units away."""
    intrinsics = CameraIntrinsics(
        fx=800.0,
        fy=800.0,
        cx=319.5,
        cy=239.5,
        image_size=(640, 480),
    )
    extrinsics = CameraExtrinsics.from_rotation_vector(
        [0.4, -0.3, 0.1],
        [-80.0, -60.0, 500.0],
    )
    return CameraProjectionModel(intrinsics, extrinsics)


@pytest.fixture
def expected_corners() -> np.ndarray:
    return expected_corner_pixels()


@pytest.fixture
def blank_image_path(tmp_path: Path) -> Path:
    import cv2

    path = tmp_path / "blank.png"
    assert cv2.imwrite(str(path), np.full((480, 640), 255, dtype=np.uint8))
    return path


@pytest.fixture
def make_board():
    """Factory for synthetic checkerboards of other sizes."""
    return make_checkerboard_image
