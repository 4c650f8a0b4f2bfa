"""
Sensor fusion algorithms for ukf tracking.

This module implements the Unscented Kalman Filter and its building blocks
for fusing lidar and radar measurements into CTRV state estimates.
"""

from .state import FilterConfig, FilterSnapshot, N_X, N_AUG, N_SIGMA, LAMBDA
from .angles import normalize_angle
from .sigma_points import SIGMA_WEIGHTS, generate_sigma_points, sigma_weights
from .measurement import LidarModel, RadarModel, MeasurementModel, model_for
from .errors import FilterError, NumericalInstabilityError, SigmaPointError, InnovationCovarianceError
from .ukf import UnscentedKalmanFilter, UpdateDiagnostics, step
from .consistency import NISMonitor, chi_square_threshold

__all__ = [
    "UnscentedKalmanFilter",
    "UpdateDiagnostics",
    "step",
    "FilterConfig",
    "FilterSnapshot",
    "N_X",
    "N_AUG",
    "N_SIGMA",
    "LAMBDA",
    "normalize_angle",
    "SIGMA_WEIGHTS",
    "generate_sigma_points",
    "sigma_weights",
    "MeasurementModel",
    "LidarModel",
    "RadarModel",
    "model_for",
    "FilterError",
    "NumericalInstabilityError",
    "SigmaPointError",
    "InnovationCovarianceError",
    "NISMonitor",
    "chi_square_threshold"
]
