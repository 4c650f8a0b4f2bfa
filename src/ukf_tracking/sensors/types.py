"""
Measurement data contract shared by sensors and the filter.

A MeasurementPackage carries one reading of one sensor:

    LASER (linear):     raw_measurements = [px, py]           [m, m]
    RADAR (nonlinear):  raw_measurements = [ρ, φ, ρ̇]          [m, rad, m/s]

Timestamps are integer microseconds and must be delivered in
non-decreasing order.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum


class SensorType(Enum):
    """Enumeration of supported sensor types."""
    LASER = "laser"
    RADAR = "radar"

    # Measurement-model aliases
    LINEAR = "laser"
    NONLINEAR = "radar"

    @property
    def measurement_dim(self) -> int:
        """Number of components in a raw measurement of this sensor."""
        return 2 if self is SensorType.LASER else 3


@dataclass
class MeasurementPackage:
    """
    Single timestamped sensor reading.

    Attributes:
        sensor_type: Which sensor produced the reading
        raw_measurements: 2 (lidar) or 3 (radar) element vector
        timestamp: Acquisition time in microseconds
    """
    sensor_type: SensorType
    raw_measurements: np.ndarray
    timestamp: int

    def __post_init__(self):
        """Validate measurement dimensions and values."""
        if not isinstance(self.sensor_type, SensorType):
            raise ValueError(f"Unknown sensor type: {self.sensor_type!r}")

        self.raw_measurements = np.asarray(self.raw_measurements, dtype=float).reshape(-1)
        expected = self.sensor_type.measurement_dim
        if self.raw_measurements.shape != (expected,):
            raise ValueError(f"{self.sensor_type.value} measurement must have {expected} elements, "
                             f"got {self.raw_measurements.size}")
        if not np.all(np.isfinite(self.raw_measurements)):
            raise ValueError("Measurement contains NaN or infinite values")

        self.timestamp = int(self.timestamp)

    @property
    def timestamp_seconds(self) -> float:
        return self.timestamp / 1e6
