"""
UKF Tracking: CTRV target tracking with lidar and radar fusion

A scientific Python package for estimating the position, speed, heading and
turn rate of a moving object from asynchronous lidar and radar measurements
using an Unscented Kalman Filter.

This package implements:
- Sigma point generation on the augmented CTRV state
- Unscented prediction through the nonlinear CTRV motion model
- Linear (lidar) and nonlinear (radar) unscented measurement updates
- NIS based consistency monitoring
- Simulated sensors, ground truth and plotting for evaluation
"""

from .fusion.ukf import UnscentedKalmanFilter, UpdateDiagnostics, step
from .fusion.state import FilterConfig, FilterSnapshot
from .fusion.consistency import NISMonitor
from .fusion.errors import FilterError, NumericalInstabilityError, SigmaPointError, InnovationCovarianceError
from .sensors.types import SensorType, MeasurementPackage
from .sensors.lidar import LidarSensor
from .sensors.radar import RadarSensor
from .simulation.trajectory import CTRVTrajectory
from .simulation.scenario import TrackingScenario

# Optional visualization import (graceful failure if not available)
try:
    from .visualization.plotter import plot_tracking, plot_nis
    _has_visualization = True
except ImportError:
    plot_tracking = None
    plot_nis = None
    _has_visualization = False

__version__ = "1.0.0"
__author__ = "UKF Tracking Team"

__all__ = [
    "UnscentedKalmanFilter",
    "UpdateDiagnostics",
    "step",
    "FilterConfig",
    "FilterSnapshot",
    "NISMonitor",
    "FilterError",
    "NumericalInstabilityError",
    "SigmaPointError",
    "InnovationCovarianceError",
    "SensorType",
    "MeasurementPackage",
    "LidarSensor",
    "RadarSensor",
    "CTRVTrajectory",
    "TrackingScenario"
]

# Add visualization to __all__ only if available
if _has_visualization:
    __all__.extend(["plot_tracking", "plot_nis"])
