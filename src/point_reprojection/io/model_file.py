"""
Unified camera model file interface.

Single entry point for saving/loading camera models in JSON or HDF5,
with the format chosen from the file extension.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Union

from point_reprojection.core.types import CalibrationResult, FileFormatError
from point_reprojection.io.formats.hdf5_format import HDF5Format
from point_reprojection.io.formats.json_format import JSONFormat
from point_reprojection.utils.logging import get_logger

logger = get_logger("io.model_file")


class ModelFileFormat(Enum):
    """Supported camera model file formats."""
    JSON = "json"
    HDF5 = "hdf5"

    @classmethod
    def from_extension(cls, ext: str) -> ModelFileFormat:
        """Get format from file extension (with or without leading dot).

        Raises:
            FileFormatError: If extension is not recognized.
        """
        ext = ext.lower().lstrip(".")
        mapping = {
            "json": cls.JSON,
            "h5": cls.HDF5,
            "hdf5": cls.HDF5,
        }
        if ext not in mapping:
            raise FileFormatError(f"Unknown file extension: {ext!r}")
        return mapping[ext]


class CameraModelFile:
    """Load and save camera models.

    Example:
        >>> result = CameraModelFile.load("resources/model.json")
        >>> model = result.to_model()
        >>> CameraModelFile.save("model.h5", result)
    """

    _handlers = {
        ModelFileFormat.JSON: JSONFormat,
        ModelFileFormat.HDF5: HDF5Format,
    }

    @classmethod
    def save(
        cls,
        path: Union[str, Path],
        result: CalibrationResult,
        format: ModelFileFormat | None = None,
    ) -> Path:
        """Save a calibration result.

        Args:
            path: Output file path.
            result: Calibration result to save.
            format: File format (from extension if None; JSON if unknown).

        Returns:
            Path to the saved file.
        """
        path = Path(path)

        if format is None:
            try:
                format = ModelFileFormat.from_extension(path.suffix)
            except FileFormatError:
                format = ModelFileFormat.JSON
                path = path.with_suffix(JSONFormat.EXTENSION)

        cls._handlers[format].save(path, result)

        logger.info(f"Saved camera model to {format.value}: {path}")
        return path

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        format: ModelFileFormat | None = None,
    ) -> CalibrationResult:
        """Load a calibration result.

        Raises:
            FileFormatError: If the file is missing, has an unknown
                extension or cannot be parsed.
        """
        path = Path(path)

        if not path.exists():
            raise FileFormatError(f"File not found: {path}")

        if format is None:
            format = ModelFileFormat.from_extension(path.suffix)

        result = cls._handlers[format].load(path)

        logger.info(f"Loaded camera model from {format.value}: {path}")
        return result
