"""
Lidar sensor simulation.

Lidar Measurement Model:
    z_lidar = [px, py]ᵀ + n_lidar

    where:
    - [px, py]: True position in meters
    - n_lidar: Zero-mean Gaussian noise ~ N(0, diag(σpx², σpy²))

Failure Modes:
    - Dropout: with probability dropout_prob no return is produced
"""

import numpy as np
from typing import Optional

from .types import MeasurementPackage, SensorType


class LidarSensor:
    """
    Lidar sensor with configurable noise and dropout characteristics.

    Attributes:
        std_px: Standard deviation of the x measurement (meters)
        std_py: Standard deviation of the y measurement (meters)
        dropout_prob: Probability of a missing return [0.0, 1.0]
    """

    sensor_type = SensorType.LASER

    def __init__(self, std_px: float = 0.15, std_py: float = 0.15,
                 dropout_prob: float = 0.0, seed: Optional[int] = None):
        """
        Initialize lidar sensor.

        Args:
            std_px: Standard deviation of Gaussian noise on px (meters)
            std_py: Standard deviation of Gaussian noise on py (meters)
            dropout_prob: Probability of measurement dropout per scan
            seed: Seed for the noise generator
        """
        if std_px <= 0 or std_py <= 0:
            raise ValueError("Lidar noise standard deviations must be positive")
        if not 0 <= dropout_prob <= 1:
            raise ValueError("Dropout probability must be between 0 and 1")

        self.std_px = std_px
        self.std_py = std_py
        self.dropout_prob = dropout_prob
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_config(cls, config, **kwargs) -> 'LidarSensor':
        """Build a sensor whose noise matches a FilterConfig."""
        return cls(std_px=config.std_laspx, std_py=config.std_laspy, **kwargs)

    def measure(self, true_state: np.ndarray) -> np.ndarray:
        """Noisy [px, py] for a true CTRV state, without dropout."""
        if len(true_state) < 2:
            raise ValueError("Lidar requires a state with at least [px, py]")
        noise = self._rng.normal(0.0, [self.std_px, self.std_py])
        return np.asarray(true_state[0:2], dtype=float) + noise

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> Optional[MeasurementPackage]:
        """
        Generate a lidar measurement package.

        Args:
            true_state: True state [px, py, v, ψ, ψ̇]
            timestamp: Acquisition time in microseconds

        Returns:
            MeasurementPackage, or None if a dropout occurs
        """
        if self._rng.random() < self.dropout_prob:
            return None
        return MeasurementPackage(self.sensor_type, self.measure(true_state), timestamp)

    def get_measurement_covariance(self) -> np.ndarray:
        """2x2 measurement noise covariance."""
        return np.diag([self.std_px ** 2, self.std_py ** 2])
