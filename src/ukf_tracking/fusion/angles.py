"""
Angle normalization utilities.

Residuals of angular quantities must be wrapped before they enter a weighted
sum or an outer product, otherwise a heading of +179° and -179° would look
358° apart instead of 2°.

Wrapping convention:
    normalize(r) ∈ (−π, π]  and  normalize(r) ≡ r (mod 2π)
"""

import numpy as np
from typing import Iterable, Union

TWO_PI = 2.0 * np.pi

ArrayLike = Union[float, np.ndarray]


def normalize_angle(angle: ArrayLike) -> ArrayLike:
    """
    Wrap an angle (or array of angles) into the half-open interval (−π, π].

    Args:
        angle: Angle in radians, scalar or numpy array

    Returns:
        Wrapped angle with the same shape as the input
    """
    wrapped = np.pi - np.mod(np.pi - np.asarray(angle, dtype=float), TWO_PI)
    # np.mod can round up to exactly 2π for tiny negative arguments
    wrapped = np.where(wrapped <= -np.pi, wrapped + TWO_PI, wrapped)
    if np.ndim(wrapped) == 0:
        return float(wrapped)
    return wrapped


def normalize_components(vector: np.ndarray, indices: Iterable[int]) -> np.ndarray:
    """
    Return a copy of vector with the given components wrapped into (−π, π].

    Works on a single residual (1-D) or a matrix of residual columns (2-D),
    in which case the listed rows are wrapped.
    """
    result = np.array(vector, dtype=float, copy=True)
    for index in indices:
        result[index] = normalize_angle(result[index])
    return result
