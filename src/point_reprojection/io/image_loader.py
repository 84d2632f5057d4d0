"""
Image loading utilities with Unicode path support.

OpenCV's imread()/imwrite() cannot open non-ASCII paths on Windows, so
files are read and written as bytes and decoded with imdecode/imencode.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
from numpy.typing import NDArray

from point_reprojection.utils.logging import get_logger

logger = get_logger("io.image_loader")


class ImageLoader:
    """Cross-platform image loader.

    Example:
        >>> loader = ImageLoader()
        >>> image = loader.load("resources/pose.bmp")
        >>> if image is not None:
        ...     print(f"Loaded image: {image.shape}")
    """

    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif"}

    def load(
        self,
        path: Union[str, Path],
        flags: int = cv2.IMREAD_COLOR,
    ) -> Optional[NDArray]:
        """Load an image from file.

        Args:
            path: Path to the image file (supports Unicode).
            flags: OpenCV imread flags (default: IMREAD_COLOR).

        Returns:
            Image as numpy array, or None if loading failed.
        """
        path = Path(path)

        if not path.exists():
            logger.error(f"Image file not found: {path}")
            return None

        if path.suffix.lower() not in self.SUPPORTED_EXTENSIONS:
            logger.warning(f"Unsupported image format: {path.suffix}")

        try:
            data = path.read_bytes()
            image = cv2.imdecode(np.frombuffer(data, np.uint8), flags)
        except OSError as e:
            logger.error(f"Failed to read image file: {path} - {e}")
            return None
        except cv2.error as e:
            logger.error(f"OpenCV error decoding image: {path} - {e}")
            return None

        if image is None:
            logger.error(f"Failed to decode image: {path}")
            return None

        logger.debug(f"Loaded image: {path} ({image.shape})")
        return image

    @staticmethod
    def save(
        path: Union[str, Path],
        image: NDArray,
        params: Optional[list[int]] = None,
    ) -> bool:
        """Save an image to file (with Unicode path support).

        Args:
            path: Output path; the extension selects the encoder.
            image: Image to save.
            params: Optional imwrite parameters.

        Returns:
            True if successful, False otherwise.
        """
        path = Path(path)

        try:
            success, encoded = cv2.imencode(path.suffix.lower(), image, params or [])
        except cv2.error as e:
            logger.error(f"OpenCV error encoding image: {path} - {e}")
            return False

        if not success:
            logger.error(f"Failed to encode image for: {path}")
            return False

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(encoded.tobytes())
        except OSError as e:
            logger.error(f"Failed to save image: {path} - {e}")
            return False

        logger.debug(f"Saved image: {path}")
        return True
