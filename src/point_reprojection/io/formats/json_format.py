"""
JSON format support for camera models.

JSON is human-readable and the format the demo loads its camera
model from by default.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Union

import numpy as np

from point_reprojection.core.types import (
    CalibrationResult,
    CameraExtrinsics,
    CameraIntrinsics,
    CheckerboardConfig,
    FileFormatError,
)
from point_reprojection.utils.logging import get_logger

logger = get_logger("io.formats.json")

FORMAT_TYPE = "point-reprojection"


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy arrays."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class JSONFormat:
    """JSON format reader/writer for camera models.

    JSON structure:
        {
            "format_version": "1.0",
            "format_type": "point-reprojection",
            "intrinsic": {
                "fx": 1000.0, "fy": 1000.0, "cx": 640.0, "cy": 480.0,
                "camera_matrix": [[fx, 0, cx], [0, fy, cy], [0, 0, 1]],
                "distortion_coeffs": [k1, k2, p1, p2, k3],
                "image_size": [width, height]  // optional
            },
            "extrinsic": {
                "rotation_matrix": [[...], [...], [...]],
                "rotation_vector": [rx, ry, rz],
                "translation_vector": [tx, ty, tz],
                "camera_position": [x, y, z]
            },
            "metadata": {
                "timestamp": "2024-01-01T12:00:00",
                "reprojection_error": 0.12,
                "checkerboard": {"rows": 6, "cols": 8, "square_size": 16.002},
                "software_version": "1.0.0",
                "notes": ""
            }
        }

    On load the rotation may be given either as "rotation_matrix" or as
    "rotation_vector", and fx/fy/cx/cy fall back to "camera_matrix".
    """

    EXTENSION = ".json"
    VERSION = "1.0"

    @classmethod
    def to_dict(cls, result: CalibrationResult) -> dict[str, Any]:
        """Build the JSON document for a calibration result."""
        intr = result.intrinsics
        extr = result.extrinsics

        data: dict[str, Any] = {
            "format_version": cls.VERSION,
            "format_type": FORMAT_TYPE,
            "intrinsic": {
                "fx": intr.fx,
                "fy": intr.fy,
                "cx": intr.cx,
                "cy": intr.cy,
                "camera_matrix": intr.camera_matrix,
                "distortion_coeffs": intr.distortion_coeffs,
            },
            "extrinsic": {
                "rotation_matrix": extr.rotation_matrix,
                "rotation_vector": extr.rotation_vector,
                "translation_vector": extr.translation_vector,
                "camera_position": extr.camera_position,
            },
            "metadata": {
                "timestamp": result.timestamp,
                "reprojection_error": result.reprojection_error,
                "software_version": result.software_version,
                "notes": result.notes,
            },
        }

        if intr.image_size is not None:
            data["intrinsic"]["image_size"] = list(intr.image_size)

        if result.checkerboard_config is not None:
            data["metadata"]["checkerboard"] = {
                "rows": result.checkerboard_config.rows,
                "cols": result.checkerboard_config.cols,
                "square_size": result.checkerboard_config.square_size,
            }

        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalibrationResult:
        """Parse a JSON document into a calibration result.

        Raises:
            FileFormatError: If required sections are missing or malformed.
        """
        if not isinstance(data, dict) or "intrinsic" not in data:
            raise FileFormatError("Missing 'intrinsic' section")
        if "extrinsic" not in data:
            raise FileFormatError("Missing 'extrinsic' section")

        try:
            intrinsics = cls._parse_intrinsics(data["intrinsic"])
            extrinsics = cls._parse_extrinsics(data["extrinsic"])

            metadata = data.get("metadata", {})
            if not isinstance(metadata, dict):
                raise FileFormatError("'metadata' must be an object")

            checkerboard_config = None
            if "checkerboard" in metadata:
                cb_data = metadata["checkerboard"]
                checkerboard_config = CheckerboardConfig(
                    rows=int(cb_data["rows"]),
                    cols=int(cb_data["cols"]),
                    square_size=float(cb_data["square_size"]),
                )
            reprojection_error = float(metadata.get("reprojection_error", 0.0))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise FileFormatError(f"Malformed camera model: {e}")

        timestamp_str = metadata.get("timestamp", "")
        try:
            timestamp = datetime.fromisoformat(timestamp_str) if timestamp_str else datetime.now()
        except (TypeError, ValueError):
            timestamp = datetime.now()

        return CalibrationResult(
            intrinsics=intrinsics,
            extrinsics=extrinsics,
            reprojection_error=reprojection_error,
            timestamp=timestamp,
            checkerboard_config=checkerboard_config,
            software_version=str(metadata.get("software_version", "unknown")),
            notes=str(metadata.get("notes", "")),
        )

    @staticmethod
    def _parse_intrinsics(section: dict[str, Any]) -> CameraIntrinsics:
        image_size = section.get("image_size")
        if image_size is not None:
            image_size = tuple(image_size)
        distortion = section.get("distortion_coeffs", [])

        if all(key in section for key in ("fx", "fy", "cx", "cy")):
            return CameraIntrinsics(
                fx=section["fx"],
                fy=section["fy"],
                cx=section["cx"],
                cy=section["cy"],
                distortion_coeffs=distortion,
                image_size=image_size,
            )
        if "camera_matrix" in section:
            return CameraIntrinsics.from_camera_matrix(
                section["camera_matrix"],
                distortion_coeffs=distortion,
                image_size=image_size,
            )
        raise FileFormatError("Intrinsic section needs fx/fy/cx/cy or camera_matrix")

    @staticmethod
    def _parse_extrinsics(section: dict[str, Any]) -> CameraExtrinsics:
        translation = section["translation_vector"]
        if "rotation_matrix" in section:
            return CameraExtrinsics(
                rotation_matrix=section["rotation_matrix"],
                translation_vector=translation,
            )
        if "rotation_vector" in section:
            return CameraExtrinsics.from_rotation_vector(section["rotation_vector"], translation)
        raise FileFormatError("Extrinsic section needs rotation_matrix or rotation_vector")

    @classmethod
    def save(
        cls,
        path: Union[str, Path],
        result: CalibrationResult,
        indent: int = 2,
    ) -> None:
        """Save a calibration result to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(cls.to_dict(result), f, indent=indent, ensure_ascii=False, cls=NumpyEncoder)

        logger.debug(f"Wrote JSON camera model: {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> CalibrationResult:
        """Load a calibration result from a JSON file.

        Raises:
            FileFormatError: If the file is missing or invalid.
        """
        path = Path(path)

        if not path.exists():
            raise FileFormatError(f"File not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise FileFormatError(f"Invalid JSON format: {e}")

        if isinstance(data, dict) and data.get("format_type", FORMAT_TYPE) != FORMAT_TYPE:
            logger.warning(f"Unknown format type: {data.get('format_type')}")

        return cls.from_dict(data)
