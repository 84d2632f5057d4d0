"""Camera model file formats."""

from point_reprojection.io.formats.hdf5_format import HDF5Format
from point_reprojection.io.formats.json_format import JSONFormat

__all__ = [
    "HDF5Format",
    "JSONFormat",
]
