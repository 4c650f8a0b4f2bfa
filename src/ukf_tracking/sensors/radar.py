"""
Radar sensor simulation.

Radar Measurement Model:
    z_radar = [ρ, φ, ρ̇]ᵀ + n_radar

    ρ  = √(px² + py²)                     range [m]
    φ  = atan2(py, px)                    bearing [rad]
    ρ̇  = (px vx + py vy) / ρ              range rate [m/s]

    with vx = v cos ψ, vy = v sin ψ and n_radar ~ N(0, diag(σρ², σφ², σρ̇²)).
    The noisy bearing is wrapped back into (−π, π].
"""

import numpy as np
from typing import Optional

from .types import MeasurementPackage, SensorType


def _wrap(angle: float) -> float:
    return float(np.arctan2(np.sin(angle), np.cos(angle)))


class RadarSensor:
    """
    Radar sensor producing range, bearing and range rate.

    Attributes:
        std_rho: Range noise standard deviation (meters)
        std_phi: Bearing noise standard deviation (radians)
        std_rho_dot: Range-rate noise standard deviation (m/s)
        dropout_prob: Probability of a missed detection [0.0, 1.0]
    """

    sensor_type = SensorType.RADAR

    def __init__(self, std_rho: float = 0.3, std_phi: float = 0.03, std_rho_dot: float = 0.3,
                 dropout_prob: float = 0.0, seed: Optional[int] = None):
        if std_rho <= 0 or std_phi <= 0 or std_rho_dot <= 0:
            raise ValueError("Radar noise standard deviations must be positive")
        if not 0 <= dropout_prob <= 1:
            raise ValueError("Dropout probability must be between 0 and 1")

        self.std_rho = std_rho
        self.std_phi = std_phi
        self.std_rho_dot = std_rho_dot
        self.dropout_prob = dropout_prob
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_config(cls, config, **kwargs) -> 'RadarSensor':
        """Build a sensor whose noise matches a FilterConfig."""
        return cls(std_rho=config.std_radr, std_phi=config.std_radphi,
                   std_rho_dot=config.std_radrd, **kwargs)

    @staticmethod
    def ideal_measurement(true_state: np.ndarray) -> np.ndarray:
        """
        Noise-free [ρ, φ, ρ̇] for a true state.

        Raises:
            ValueError: If the target sits at the sensor origin
        """
        px, py, v, yaw = true_state[0:4]
        rho = np.hypot(px, py)
        if rho == 0.0:
            raise ValueError("Range rate is undefined for a target at the radar origin")
        phi = np.arctan2(py, px)
        rho_dot = (px * np.cos(yaw) * v + py * np.sin(yaw) * v) / rho
        return np.array([rho, phi, rho_dot])

    def measure(self, true_state: np.ndarray) -> np.ndarray:
        """Noisy [ρ, φ, ρ̇] for a true CTRV state, without dropout."""
        measurement = self.ideal_measurement(true_state)
        measurement += self._rng.normal(0.0, [self.std_rho, self.std_phi, self.std_rho_dot])
        measurement[1] = _wrap(measurement[1])
        return measurement

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> Optional[MeasurementPackage]:
        """
        Generate a radar measurement package.

        Returns:
            MeasurementPackage, or None if a dropout occurs
        """
        if self._rng.random() < self.dropout_prob:
            return None
        return MeasurementPackage(self.sensor_type, self.measure(true_state), timestamp)

    def get_measurement_covariance(self) -> np.ndarray:
        """3x3 measurement noise covariance."""
        return np.diag([self.std_rho ** 2, self.std_phi ** 2, self.std_rho_dot ** 2])
