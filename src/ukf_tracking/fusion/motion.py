"""
CTRV (constant turn rate and velocity) motion model and unscented prediction.

Process Model:
    For a sigma point [px, py, v, ψ, ψ̇, νa, νψ̈] and elapsed time Δt

    ψ̇ ≠ 0:
        px' = px + v/ψ̇ (sin(ψ + ψ̇Δt) − sin ψ)
        py' = py + v/ψ̇ (−cos(ψ + ψ̇Δt) + cos ψ)
    ψ̇ ≈ 0:
        px' = px + v cos ψ Δt
        py' = py + v sin ψ Δt
    always:
        v'  = v
        ψ'  = ψ + ψ̇Δt
        ψ̇'  = ψ̇

    plus the noise displacement

        [½Δt² cos ψ νa, ½Δt² sin ψ νa, Δt νa, ½Δt² νψ̈, Δt νψ̈]

Unscented Prediction:
    x̂⁻ = Σ wᵢ χᵢ
    P⁻ = Σ wᵢ (χᵢ − x̂⁻)(χᵢ − x̂⁻)ᵀ       heading residual wrapped into (−π, π]
"""

import logging

import numpy as np
from typing import Tuple

from .angles import normalize_components
from .sigma_points import SIGMA_WEIGHTS, generate_sigma_points
from .state import FilterConfig, N_SIGMA, N_X, YAW_INDEX

logger = logging.getLogger(__name__)


def ctrv_displacement(v: float, yaw: float, yaw_rate: float, dt: float,
                      threshold: float = 1e-3) -> np.ndarray:
    """
    Deterministic CTRV state change over dt.

    Args:
        v: Speed
        yaw: Heading
        yaw_rate: Turn rate
        dt: Elapsed time in seconds
        threshold: |yaw_rate| at or below which the straight-line model is used

    Returns:
        5-element displacement [dpx, dpy, dv, dψ, dψ̇]
    """
    if abs(yaw_rate) > threshold:
        ratio = v / yaw_rate
        return np.array([
            ratio * (np.sin(yaw + yaw_rate * dt) - np.sin(yaw)),
            ratio * (-np.cos(yaw + yaw_rate * dt) + np.cos(yaw)),
            0.0,
            yaw_rate * dt,
            0.0,
        ])
    # Straight-line motion avoids the division by a near-zero turn rate
    return np.array([
        v * np.cos(yaw) * dt,
        v * np.sin(yaw) * dt,
        0.0,
        yaw_rate * dt,
        0.0,
    ])


def noise_displacement(yaw: float, nu_a: float, nu_yawdd: float, dt: float) -> np.ndarray:
    """State change caused by the augmented acceleration noise terms."""
    half_dt2 = 0.5 * dt * dt
    return np.array([
        half_dt2 * np.cos(yaw) * nu_a,
        half_dt2 * np.sin(yaw) * nu_a,
        dt * nu_a,
        half_dt2 * nu_yawdd,
        dt * nu_yawdd,
    ])


def predict_sigma_points(Xsig_aug: np.ndarray, dt: float, config: FilterConfig) -> np.ndarray:
    """
    Propagate augmented sigma points through the CTRV model.

    Args:
        Xsig_aug: 7x15 augmented sigma points
        dt: Elapsed time in seconds
        config: Filter configuration (turn rate threshold)

    Returns:
        5x15 predicted sigma points
    """
    Xsig_pred = np.empty((N_X, N_SIGMA))
    for i in range(N_SIGMA):
        point = Xsig_aug[:, i]
        v, yaw, yaw_rate, nu_a, nu_yawdd = point[2:7]
        Xsig_pred[:, i] = (point[:N_X]
                           + ctrv_displacement(v, yaw, yaw_rate, dt, config.turn_rate_threshold)
                           + noise_displacement(yaw, nu_a, nu_yawdd, dt))
    return Xsig_pred


def predict_mean_and_covariance(Xsig_pred: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Recover mean and covariance from predicted sigma points.

    Args:
        Xsig_pred: 5x15 predicted sigma points

    Returns:
        Tuple of predicted mean (5,) and symmetric covariance (5x5)
    """
    x_pred = Xsig_pred @ SIGMA_WEIGHTS

    residuals = normalize_components(Xsig_pred - x_pred[:, np.newaxis], [YAW_INDEX])
    P_pred = (residuals * SIGMA_WEIGHTS) @ residuals.T
    P_pred = 0.5 * (P_pred + P_pred.T)
    return x_pred, P_pred


def predict(x: np.ndarray, P: np.ndarray, dt: float,
            config: FilterConfig) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Full unscented prediction step.

    Args:
        x: Prior state mean (5,)
        P: Prior state covariance (5x5)
        dt: Elapsed time in seconds
        config: Filter configuration

    Returns:
        Tuple of (predicted mean, predicted covariance, 5x15 predicted sigma points)

    Raises:
        SigmaPointError: If the augmented covariance is not positive definite
    """
    Xsig_aug = generate_sigma_points(x, P, config)
    Xsig_pred = predict_sigma_points(Xsig_aug, dt, config)
    x_pred, P_pred = predict_mean_and_covariance(Xsig_pred)

    logger.debug(f"Prediction step completed, dt={dt:.3f}s, trace(P)={np.trace(P_pred):.3e}")
    return x_pred, P_pred, Xsig_pred
