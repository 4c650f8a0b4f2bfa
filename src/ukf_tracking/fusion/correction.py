"""
Unscented measurement correction.

Update Equations:
    T  = Σ wᵢ (χᵢ − x̂⁻)(Zᵢ − ẑ)ᵀ          cross-correlation
    K  = T S⁻¹                              Kalman gain
    y  = z − ẑ                              innovation
    x̂⁺ = x̂⁻ + K y
    P⁺ = P⁻ − K S Kᵀ
    ε  = yᵀ S⁻¹ y                           normalized innovation squared

S is factorized once with a Cholesky decomposition and reused for both the
gain and the NIS, so S⁻¹ is never formed explicitly.
"""

import logging
from dataclasses import dataclass

import numpy as np
import scipy.linalg

from .angles import normalize_components
from .errors import InnovationCovarianceError
from .measurement import MeasurementModel, MeasurementPrediction
from .sigma_points import SIGMA_WEIGHTS
from .state import YAW_INDEX

logger = logging.getLogger(__name__)


@dataclass
class CorrectionResult:
    """Posterior mean/covariance plus the quantities of the update."""
    x: np.ndarray
    P: np.ndarray
    nis: float
    innovation: np.ndarray
    kalman_gain: np.ndarray


def cross_correlation(Xsig_pred: np.ndarray, x_pred: np.ndarray,
                      prediction: MeasurementPrediction,
                      model: MeasurementModel) -> np.ndarray:
    """
    Cross-correlation between state and measurement sigma point residuals.

    Returns:
        5 x dim matrix T
    """
    x_residuals = normalize_components(Xsig_pred - x_pred[:, np.newaxis], [YAW_INDEX])
    z_residuals = model.residual(prediction.Zsig, prediction.z_pred[:, np.newaxis])
    return (x_residuals * SIGMA_WEIGHTS) @ z_residuals.T


def factorize_innovation_covariance(S: np.ndarray):
    """
    Cholesky factorization of S for repeated solves.

    Raises:
        InnovationCovarianceError: If S is non-finite or not positive definite
    """
    if not np.all(np.isfinite(S)):
        raise InnovationCovarianceError("Innovation covariance contains NaN or infinite values")
    try:
        return scipy.linalg.cho_factor(S, lower=True)
    except np.linalg.LinAlgError as exc:
        logger.warning(f"Innovation covariance not invertible: det={np.linalg.det(S):.3e}")
        raise InnovationCovarianceError("Innovation covariance is not invertible") from exc


def correct(x_pred: np.ndarray, P_pred: np.ndarray, z: np.ndarray,
            prediction: MeasurementPrediction, model: MeasurementModel,
            Xsig_pred: np.ndarray) -> CorrectionResult:
    """
    Fuse a measurement into the predicted belief.

    Args:
        x_pred: Predicted state mean (5,)
        P_pred: Predicted state covariance (5x5)
        z: Actual measurement (dim,)
        prediction: Predicted measurement distribution
        model: Measurement model that produced the prediction
        Xsig_pred: 5x15 predicted sigma points

    Returns:
        CorrectionResult with the posterior belief and NIS

    Raises:
        InnovationCovarianceError: If S cannot be inverted
    """
    z = np.asarray(z, dtype=float)
    if z.shape != (model.dim,):
        raise ValueError(f"{model.sensor_type.value} measurement must have {model.dim} elements, got {z.shape}")

    S_factor = factorize_innovation_covariance(prediction.S)

    T = cross_correlation(Xsig_pred, x_pred, prediction, model)
    innovation = model.residual(z, prediction.z_pred)

    nis = float(innovation @ scipy.linalg.cho_solve(S_factor, innovation))
    # S is symmetric, so K = T S⁻¹ = (S⁻¹ Tᵀ)ᵀ
    K = scipy.linalg.cho_solve(S_factor, T.T).T

    x = normalize_components(x_pred + K @ innovation, [YAW_INDEX])
    P = P_pred - K @ prediction.S @ K.T
    P = 0.5 * (P + P.T)

    logger.debug(f"{model.sensor_type.value} update applied: NIS={nis:.3f}")
    return CorrectionResult(x=x, P=P, nis=nis, innovation=innovation, kalman_gain=K)
