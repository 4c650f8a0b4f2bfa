"""
Filter initialization from the first accepted measurement.

A single measurement only pins down position. The remaining components are
seeded with placeholders from the configuration and given a conservative
variance, so the first few updates can move them freely.
"""

import logging

import numpy as np

from ..sensors.types import MeasurementPackage, SensorType
from .state import FilterConfig, FilterSnapshot

logger = logging.getLogger(__name__)


def _radar_belief(package: MeasurementPackage, config: FilterConfig):
    rho, phi, rho_dot = package.raw_measurements
    # Range rate under an unknown heading only gives rough seeds for ψ and ψ̇
    x = np.array([
        rho * np.cos(phi),
        rho * np.sin(phi),
        config.initial_speed,
        rho_dot * np.cos(phi),
        rho_dot * np.sin(phi),
    ])
    P = np.diag([
        config.std_radr ** 2,
        config.std_radr ** 2,
        1.0,
        config.std_radphi,
        config.std_radphi,
    ])
    return x, P


def _lidar_belief(package: MeasurementPackage, config: FilterConfig):
    px, py = package.raw_measurements
    x = np.array([
        px,
        py,
        config.initial_speed,
        config.lidar_initial_yaw,
        config.lidar_initial_yaw_rate,
    ])
    P = np.diag([
        config.std_laspx ** 2,
        config.std_laspy ** 2,
        1.0,
        1.0,
        1.0,
    ])
    return x, P


def initialize(package: MeasurementPackage, config: FilterConfig) -> FilterSnapshot:
    """
    Seed the belief from a single measurement.

    No prediction or update happens on this call; the snapshot clock is set
    to the measurement timestamp.

    Args:
        package: First accepted measurement
        config: Filter configuration

    Returns:
        Initial FilterSnapshot
    """
    if package.sensor_type == SensorType.RADAR:
        x, P = _radar_belief(package, config)
    elif package.sensor_type == SensorType.LASER:
        x, P = _lidar_belief(package, config)
    else:
        raise ValueError(f"Unsupported sensor type: {package.sensor_type}")

    logger.info(f"Filter initialized from {package.sensor_type.value} at t={package.timestamp}us: "
                f"pos=[{x[0]:.3f}, {x[1]:.3f}]")
    return FilterSnapshot(x=x, P=P, timestamp=package.timestamp)
