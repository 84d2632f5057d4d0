"""Data I/O layer for camera models and images."""

from point_reprojection.io.image_loader import ImageLoader
from point_reprojection.io.model_file import CameraModelFile, ModelFileFormat

__all__ = [
    "ImageLoader",
    "CameraModelFile",
    "ModelFileFormat",
]
