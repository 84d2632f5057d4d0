"""
Presenting overlays.

ImageViewer shows each rendering in an OpenCV window, or writes it to
numbered image files when running headless.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import cv2

from point_reprojection.io.image_loader import ImageLoader
from point_reprojection.ui.overlay import OverlayCanvas
from point_reprojection.utils.logging import get_logger

logger = get_logger("ui.viewer")


class ImageViewer:
    """
    Present canvas renderings.

    Args:
        window_name: OpenCV window title.
        display: Show an OpenCV window. When False nothing is shown.
        output_dir: If set, every presented frame is also saved there as
            ``frame_000.png``, ``frame_001.png``, ...
        delay_ms: Time a displayed frame stays up before present() returns.
    """

    def __init__(
        self,
        window_name: str = "Point Reprojection",
        display: bool = True,
        output_dir: Optional[Union[str, Path]] = None,
        delay_ms: int = 1000,
    ):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self.window_name = window_name
        self.display = display
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.delay_ms = delay_ms
        self._frame_index = 0
        self._window_open = False
        self.saved_frames: list[Path] = []

    def present(self, canvas: OverlayCanvas) -> Optional[Path]:
        """Show the current rendering and/or save it.

        Returns:
            Path of the saved frame, if one was written.
        """
        image = canvas.image
        saved: Optional[Path] = None

        if self.output_dir is not None:
            path = self.output_dir / f"frame_{self._frame_index:03d}.png"
            if ImageLoader.save(path, image):
                saved = path
                self.saved_frames.append(path)
                logger.info(f"Saved frame: {path}")
            else:
                logger.warning(f"Could not save frame: {path}")

        if self.display:
            cv2.imshow(self.window_name, image)
            self._window_open = True
            # waitKey needs at least 1 ms to pump window events
            cv2.waitKey(max(1, self.delay_ms))

        self._frame_index += 1
        return saved

    def hold(self) -> None:
        """Keep the window up until a key is pressed."""
        if self._window_open:
            cv2.waitKey(0)

    def close(self) -> None:
        if self._window_open:
            cv2.destroyWindow(self.window_name)
            self._window_open = False
