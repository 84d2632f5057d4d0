"""
Lens distortion model.

Applies the radial/tangential (Brown-Conrady) distortion used by OpenCV
to points on the normalized image plane (z = 1):

    r^2    = x^2 + y^2
    radial = (1 + k1 r^2 + k2 r^4 + k3 r^6) / (1 + k4 r^2 + k5 r^4 + k6 r^6)
    x_d    = x * radial + 2 p1 x y + p2 (r^2 + 2 x^2)
    y_d    = y * radial + p1 (r^2 + 2 y^2) + 2 p2 x y

Coefficients follow the OpenCV order [k1, k2, p1, p2, k3, k4, k5, k6];
missing trailing coefficients are treated as zero.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


def _padded_coefficients(distortion_coeffs: ArrayLike) -> NDArray[np.float64]:
    coeffs = np.asarray(distortion_coeffs, dtype=np.float64).ravel()
    padded = np.zeros(8, dtype=np.float64)
    padded[: min(coeffs.size, 8)] = coeffs[:8]
    return padded


def distort_normalized(
    normalized: NDArray[np.float64],
    distortion_coeffs: ArrayLike,
) -> NDArray[np.float64]:
    """Apply lens distortion to normalized image coordinates.

    Args:
        normalized: Normalized coordinates (N, 2), i.e. (x/z, y/z).
        distortion_coeffs: Distortion coefficients [k1, k2, p1, p2, k3, k4, k5, k6].

    Returns:
        Distorted normalized coordinates (N, 2). The input is not modified.
    """
    k1, k2, p1, p2, k3, k4, k5, k6 = _padded_coefficients(distortion_coeffs)

    x = normalized[:, 0]
    y = normalized[:, 1]
    r2 = x * x + y * y
    r4 = r2 * r2
    r6 = r4 * r2

    radial = (1.0 + k1 * r2 + k2 * r4 + k3 * r6) / (1.0 + k4 * r2 + k5 * r4 + k6 * r6)
    xy = x * y

    x_d = x * radial + 2.0 * p1 * xy + p2 * (r2 + 2.0 * x * x)
    y_d = y * radial + p1 * (r2 + 2.0 * y * y) + 2.0 * p2 * xy

    return np.stack([x_d, y_d], axis=1)
