"""
Sigma point generation for the augmented CTRV state.

Mathematical Foundation:
    Given the augmented mean x_a ∈ ℝᴸ and covariance P_a ∈ ℝᴸˣᴸ with L = 7,
    the 2L + 1 sigma points are

        χ₀     = x_a
        χᵢ     = x_a + √(λ + L) · Aᵢ          i = 1..L
        χᵢ₊ₗ   = x_a − √(λ + L) · Aᵢ          i = 1..L

    where A is the lower Cholesky factor of P_a (P_a = A Aᵀ) and Aᵢ its i-th
    column. The weights are

        w₀ = λ / (λ + L),    wᵢ = 1 / (2(λ + L))   i = 1..2L

    and sum to one. They depend only on λ and L, so they are computed once
    at import time and shared by prediction and both measurement updates.
"""

import logging

import numpy as np
import scipy.linalg
from typing import Tuple

from .errors import SigmaPointError
from .state import FilterConfig, LAMBDA, N_AUG, N_SIGMA, N_X

logger = logging.getLogger(__name__)


def _compute_weights() -> np.ndarray:
    weights = np.full(N_SIGMA, 0.5 / (LAMBDA + N_AUG))
    weights[0] = LAMBDA / (LAMBDA + N_AUG)
    weights.setflags(write=False)
    return weights


SIGMA_WEIGHTS = _compute_weights()

SPREAD = np.sqrt(LAMBDA + N_AUG)


def sigma_weights() -> np.ndarray:
    """Return a writable copy of the 15 sigma point weights."""
    return SIGMA_WEIGHTS.copy()


def augment(x: np.ndarray, P: np.ndarray, config: FilterConfig) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the augmented mean and covariance.

    Args:
        x: State mean (5,)
        P: State covariance (5x5)
        config: Filter configuration providing the process noise block

    Returns:
        Tuple of augmented mean (7,) and block-diagonal covariance (7x7)
    """
    x_aug = np.zeros(N_AUG)
    x_aug[:N_X] = x

    P_aug = np.zeros((N_AUG, N_AUG))
    P_aug[:N_X, :N_X] = P
    P_aug[N_X:, N_X:] = config.process_noise
    return x_aug, P_aug


def matrix_square_root(P_aug: np.ndarray) -> np.ndarray:
    """
    Lower Cholesky factor A of P_aug such that A Aᵀ = P_aug.

    Raises:
        SigmaPointError: If P_aug contains non-finite values or is not
            positive definite
    """
    if not np.all(np.isfinite(P_aug)):
        raise SigmaPointError("Augmented covariance contains NaN or infinite values")
    try:
        return scipy.linalg.cholesky(P_aug, lower=True)
    except np.linalg.LinAlgError as exc:
        eigenvalues = np.linalg.eigvalsh(0.5 * (P_aug + P_aug.T))
        logger.warning(f"Augmented covariance not positive definite: min eigenvalue {eigenvalues.min():.3e}")
        raise SigmaPointError(
            f"Augmented covariance is not positive definite (min eigenvalue {eigenvalues.min():.3e})"
        ) from exc


def generate_sigma_points(x: np.ndarray, P: np.ndarray, config: FilterConfig) -> np.ndarray:
    """
    Generate the augmented sigma point matrix.

    Args:
        x: State mean (5,)
        P: State covariance (5x5)
        config: Filter configuration

    Returns:
        7x15 matrix, one sigma point per column

    Raises:
        SigmaPointError: If the augmented covariance has no Cholesky factor
    """
    x_aug, P_aug = augment(x, P, config)
    A = matrix_square_root(P_aug)

    Xsig_aug = np.empty((N_AUG, N_SIGMA))
    Xsig_aug[:, 0] = x_aug
    offsets = SPREAD * A
    Xsig_aug[:, 1:N_AUG + 1] = x_aug[:, np.newaxis] + offsets
    Xsig_aug[:, N_AUG + 1:] = x_aug[:, np.newaxis] - offsets
    return Xsig_aug
