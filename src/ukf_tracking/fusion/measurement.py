"""
Measurement models mapping predicted sigma points into sensor space.

Both sensors share one unscented machinery; a model only has to say how a
state maps to a measurement, which components are angles and what the
sensor noise is.

Lidar (linear):
    h(x) = [px, py]ᵀ

Radar (nonlinear):
    ρ  = √(px² + py²)
    φ  = atan2(py, px)
    ρ̇  = (px cos ψ v + py sin ψ v) / ρ

Unscented Measurement Prediction:
    ẑ = Σ wᵢ Zᵢ
    S = Σ wᵢ (Zᵢ − ẑ)(Zᵢ − ẑ)ᵀ + R
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from ..sensors.types import SensorType
from .angles import normalize_components
from .sigma_points import SIGMA_WEIGHTS
from .state import BEARING_INDEX, FilterConfig, N_LIDAR, N_RADAR

logger = logging.getLogger(__name__)


@dataclass
class MeasurementPrediction:
    """
    Predicted measurement distribution.

    Attributes:
        Zsig: dim x 15 sigma points in measurement space
        z_pred: Predicted measurement mean
        S: Innovation covariance (includes measurement noise)
    """
    Zsig: np.ndarray
    z_pred: np.ndarray
    S: np.ndarray


class MeasurementModel(ABC):
    """Interface shared by the lidar and radar measurement models."""

    sensor_type: SensorType
    dim: int
    angle_indices: Tuple[int, ...] = ()

    @abstractmethod
    def noise_covariance(self, config: FilterConfig) -> np.ndarray:
        """Measurement noise covariance R."""

    @abstractmethod
    def transform(self, Xsig_pred: np.ndarray, config: FilterConfig) -> np.ndarray:
        """Map 5x15 predicted sigma points to dim x 15 measurement sigma points."""

    def residual(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """a − b with angular components wrapped into (−π, π]."""
        diff = np.asarray(a, dtype=float) - np.asarray(b, dtype=float)
        if not self.angle_indices:
            return diff
        return normalize_components(diff, self.angle_indices)

    def mean(self, Zsig: np.ndarray) -> np.ndarray:
        """
        Weighted mean of measurement sigma points.

        Angular components are accumulated as wrapped residuals around the
        first sigma point, which keeps bearings that straddle ±π together.
        Away from the cut the result equals the plain weighted sum.
        """
        if not self.angle_indices:
            return Zsig @ SIGMA_WEIGHTS
        reference = Zsig[:, 0]
        offsets = self.residual(Zsig, reference[:, np.newaxis])
        z_pred = reference + offsets @ SIGMA_WEIGHTS
        return normalize_components(z_pred, self.angle_indices)

    def predict(self, Xsig_pred: np.ndarray, config: FilterConfig) -> MeasurementPrediction:
        """Run the unscented transform into measurement space."""
        Zsig = self.transform(Xsig_pred, config)
        z_pred = self.mean(Zsig)

        residuals = self.residual(Zsig, z_pred[:, np.newaxis])
        S = (residuals * SIGMA_WEIGHTS) @ residuals.T + self.noise_covariance(config)
        S = 0.5 * (S + S.T)
        return MeasurementPrediction(Zsig=Zsig, z_pred=z_pred, S=S)


class LidarModel(MeasurementModel):
    """Position-only measurement: z = [px, py]."""

    sensor_type = SensorType.LASER
    dim = N_LIDAR
    angle_indices = ()

    def noise_covariance(self, config: FilterConfig) -> np.ndarray:
        return config.lidar_noise

    def transform(self, Xsig_pred: np.ndarray, config: FilterConfig) -> np.ndarray:
        return Xsig_pred[0:2, :].copy()


class RadarModel(MeasurementModel):
    """
    Range, bearing and range-rate measurement: z = [ρ, φ, ρ̇].

    A sigma point at the origin has no defined range rate; the range in the
    denominator is floored at ``config.min_range`` instead of dividing by zero.
    """

    sensor_type = SensorType.RADAR
    dim = N_RADAR
    angle_indices = (BEARING_INDEX,)

    def noise_covariance(self, config: FilterConfig) -> np.ndarray:
        return config.radar_noise

    def transform(self, Xsig_pred: np.ndarray, config: FilterConfig) -> np.ndarray:
        px, py, v, yaw = Xsig_pred[0], Xsig_pred[1], Xsig_pred[2], Xsig_pred[3]

        rho = np.hypot(px, py)
        phi = np.arctan2(py, px)

        denominator = np.maximum(rho, config.min_range)
        if np.any(rho < config.min_range):
            logger.debug(f"Radar range below {config.min_range:.1e} m, clamping range-rate denominator")
        rho_dot = (px * np.cos(yaw) * v + py * np.sin(yaw) * v) / denominator

        return np.vstack([rho, phi, rho_dot])


_MODELS: Dict[SensorType, MeasurementModel] = {
    SensorType.LASER: LidarModel(),
    SensorType.RADAR: RadarModel(),
}


def model_for(sensor_type: SensorType) -> MeasurementModel:
    """Measurement model for a sensor type."""
    try:
        return _MODELS[sensor_type]
    except KeyError:
        raise ValueError(f"Unsupported sensor type: {sensor_type}") from None
