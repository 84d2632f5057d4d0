"""
HDF5 format support for camera models.

HDF5 can be read by Python (h5py), MATLAB, Octave, Julia and R, which makes
it the exchange format for models used outside this package.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Union

import h5py
import numpy as np

from point_reprojection.core.types import (
    CalibrationResult,
    CameraExtrinsics,
    CameraIntrinsics,
    CheckerboardConfig,
    FileFormatError,
)
from point_reprojection.io.formats.json_format import FORMAT_TYPE
from point_reprojection.utils.logging import get_logger

logger = get_logger("io.formats.hdf5")


class HDF5Format:
    """HDF5 format reader/writer for camera models.

    File structure:
        /intrinsic/
            camera_matrix      (3,3) float64
            distortion_coeffs  (n,) float64
            image_size         (2,) int32     (optional)
        /extrinsic/
            rotation_matrix    (3,3) float64
            rotation_vector    (3,) float64
            translation_vector (3,) float64
        /metadata/             attributes only
            timestamp, reprojection_error, software_version, notes,
            checkerboard_rows, checkerboard_cols, square_size (optional)

    Example (Octave/MATLAB):
        K = h5read('model.h5', '/intrinsic/camera_matrix');
    """

    EXTENSIONS = (".h5", ".hdf5")
    VERSION = "1.0"

    @classmethod
    def save(
        cls,
        path: Union[str, Path],
        result: CalibrationResult,
        compression: str | None = "gzip",
    ) -> None:
        """Save a calibration result to an HDF5 file.

        Args:
            path: Output file path.
            result: Calibration result to save.
            compression: Compression algorithm ('gzip', 'lzf', or None).
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with h5py.File(path, "w") as f:
            f.attrs["format_version"] = cls.VERSION
            f.attrs["format_type"] = FORMAT_TYPE

            intrinsic_grp = f.create_group("intrinsic")
            intrinsic_grp.create_dataset(
                "camera_matrix",
                data=result.intrinsics.camera_matrix,
                compression=compression,
            )
            intrinsic_grp.create_dataset(
                "distortion_coeffs",
                data=np.array(result.intrinsics.distortion_coeffs),
            )
            if result.intrinsics.image_size is not None:
                intrinsic_grp.create_dataset(
                    "image_size",
                    data=np.array(result.intrinsics.image_size, dtype=np.int32),
                )

            extrinsic_grp = f.create_group("extrinsic")
            extrinsic_grp.create_dataset(
                "rotation_matrix",
                data=np.array(result.extrinsics.rotation_matrix),
                compression=compression,
            )
            extrinsic_grp.create_dataset(
                "rotation_vector",
                data=result.extrinsics.rotation_vector,
            )
            extrinsic_grp.create_dataset(
                "translation_vector",
                data=np.array(result.extrinsics.translation_vector),
            )

            metadata_grp = f.create_group("metadata")
            metadata_grp.attrs["timestamp"] = result.timestamp.isoformat()
            metadata_grp.attrs["reprojection_error"] = result.reprojection_error
            metadata_grp.attrs["software_version"] = result.software_version
            metadata_grp.attrs["notes"] = result.notes

            if result.checkerboard_config is not None:
                metadata_grp.attrs["checkerboard_rows"] = result.checkerboard_config.rows
                metadata_grp.attrs["checkerboard_cols"] = result.checkerboard_config.cols
                metadata_grp.attrs["square_size"] = result.checkerboard_config.square_size

        logger.debug(f"Wrote HDF5 camera model: {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> CalibrationResult:
        """Load a calibration result from an HDF5 file.

        Raises:
            FileFormatError: If the file is missing or invalid.
        """
        path = Path(path)

        if not path.exists():
            raise FileFormatError(f"File not found: {path}")

        try:
            f = h5py.File(path, "r")
        except OSError as e:
            raise FileFormatError(f"Invalid HDF5 file: {path} - {e}")

        with f:
            format_type = f.attrs.get("format_type", "")
            if format_type != FORMAT_TYPE:
                logger.warning(f"Unknown format type: {format_type}")

            if "intrinsic" not in f or "camera_matrix" not in f["intrinsic"]:
                raise FileFormatError("Missing intrinsic group in HDF5 file")
            if "extrinsic" not in f or "translation_vector" not in f["extrinsic"]:
                raise FileFormatError("Missing extrinsic group in HDF5 file")

            intrinsic_grp = f["intrinsic"]
            image_size = None
            if "image_size" in intrinsic_grp:
                image_size = tuple(int(v) for v in intrinsic_grp["image_size"][:])
            intrinsics = CameraIntrinsics.from_camera_matrix(
                intrinsic_grp["camera_matrix"][:],
                distortion_coeffs=intrinsic_grp["distortion_coeffs"][:]
                if "distortion_coeffs" in intrinsic_grp
                else None,
                image_size=image_size,
            )

            extrinsic_grp = f["extrinsic"]
            translation = extrinsic_grp["translation_vector"][:]
            if "rotation_matrix" in extrinsic_grp:
                extrinsics = CameraExtrinsics(
                    rotation_matrix=extrinsic_grp["rotation_matrix"][:],
                    translation_vector=translation,
                )
            elif "rotation_vector" in extrinsic_grp:
                extrinsics = CameraExtrinsics.from_rotation_vector(
                    extrinsic_grp["rotation_vector"][:], translation
                )
            else:
                raise FileFormatError("Extrinsic group needs rotation_matrix or rotation_vector")

            checkerboard_config = None
            reprojection_error = 0.0
            timestamp_str = ""
            software_version = "unknown"
            notes = ""

            metadata_grp = f.get("metadata")
            if isinstance(metadata_grp, h5py.Group):
                attrs = metadata_grp.attrs
                if "checkerboard_rows" in attrs and "checkerboard_cols" in attrs:
                    checkerboard_config = CheckerboardConfig(
                        rows=int(attrs["checkerboard_rows"]),
                        cols=int(attrs["checkerboard_cols"]),
                        square_size=float(attrs.get("square_size", 0.0)),
                    )
                reprojection_error = float(attrs.get("reprojection_error", 0.0))
                timestamp_str = str(attrs.get("timestamp", ""))
                software_version = str(attrs.get("software_version", "unknown"))
                notes = str(attrs.get("notes", ""))

        try:
            timestamp = datetime.fromisoformat(timestamp_str) if timestamp_str else datetime.now()
        except ValueError:
            timestamp = datetime.now()

        return CalibrationResult(
            intrinsics=intrinsics,
            extrinsics=extrinsics,
            reprojection_error=reprojection_error,
            timestamp=timestamp,
            checkerboard_config=checkerboard_config,
            software_version=software_version,
            notes=notes,
        )
