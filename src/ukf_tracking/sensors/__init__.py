"""
Sensor modules for ukf tracking.

This module contains the measurement data contract and simulated lidar and
radar sensors with Gaussian noise and dropout.
"""

from .types import SensorType, MeasurementPackage
from .lidar import LidarSensor
from .radar import RadarSensor

__all__ = [
    "SensorType",
    "MeasurementPackage",
    "LidarSensor",
    "RadarSensor"
]
