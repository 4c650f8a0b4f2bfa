"""
Plotting of tracking results and filter consistency.

Classes and functions:
    plot_tracking: Estimated vs. true trajectory with measurements and
        confidence ellipses
    plot_nis: NIS sequence of one sensor against its chi-square threshold

Figures are returned to the caller; nothing is shown or saved here.
"""

import logging
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import scipy.stats
from matplotlib.patches import Ellipse

from ..fusion.consistency import NISMonitor
from ..fusion.state import FilterSnapshot
from ..sensors.types import MeasurementPackage, SensorType

logger = logging.getLogger(__name__)


def _measurement_positions(measurements: Sequence[MeasurementPackage], sensor_type: SensorType) -> np.ndarray:
    points = []
    for package in measurements:
        if package.sensor_type != sensor_type:
            continue
        if sensor_type == SensorType.RADAR:
            rho, phi = package.raw_measurements[0:2]
            points.append([rho * np.cos(phi), rho * np.sin(phi)])
        else:
            points.append(package.raw_measurements[0:2])
    return np.asarray(points).reshape(-1, 2)


def confidence_ellipse(mean: np.ndarray, covariance: np.ndarray,
                       confidence: float = 0.95, **kwargs) -> Ellipse:
    """
    Ellipse patch covering the given probability mass of a 2D Gaussian.

    Args:
        mean: 2D center
        covariance: 2x2 covariance
        confidence: Probability mass inside the ellipse
    """
    eigenvals, eigenvecs = np.linalg.eigh(covariance)
    eigenvals = np.clip(eigenvals, 0.0, None)
    scale = np.sqrt(scipy.stats.chi2.ppf(confidence, 2))
    angle = np.degrees(np.arctan2(eigenvecs[1, 1], eigenvecs[0, 1]))
    return Ellipse(xy=mean, width=2 * scale * np.sqrt(eigenvals[1]),
                   height=2 * scale * np.sqrt(eigenvals[0]), angle=angle, **kwargs)


def plot_tracking(estimates: Sequence[FilterSnapshot],
                  ground_truth: Optional[Sequence[np.ndarray]] = None,
                  measurements: Optional[Sequence[MeasurementPackage]] = None,
                  ellipse_every: int = 0,
                  confidence: float = 0.95):
    """
    Plot the estimated trajectory in the xy plane.

    Args:
        estimates: Filter snapshots in time order
        ground_truth: True states aligned with the estimates
        measurements: Raw measurements; radar readings are converted to xy
        ellipse_every: Draw a position confidence ellipse every n estimates (0 disables)
        confidence: Probability mass of the ellipses

    Returns:
        Tuple of (figure, axes)
    """
    if not estimates:
        raise ValueError("At least one estimate is required")

    fig, ax = plt.subplots(figsize=(8, 8))
    positions = np.array([snapshot.x[0:2] for snapshot in estimates])
    ax.plot(positions[:, 0], positions[:, 1], 'b-', linewidth=1.5, label='UKF estimate')

    if ground_truth is not None and len(ground_truth) > 0:
        truth = np.asarray(ground_truth)[:, 0:2]
        ax.plot(truth[:, 0], truth[:, 1], 'k--', linewidth=1.0, label='Ground truth')

    if measurements:
        lidar_points = _measurement_positions(measurements, SensorType.LASER)
        radar_points = _measurement_positions(measurements, SensorType.RADAR)
        if len(lidar_points):
            ax.scatter(lidar_points[:, 0], lidar_points[:, 1], s=8, c='g', marker='o', label='Lidar')
        if len(radar_points):
            ax.scatter(radar_points[:, 0], radar_points[:, 1], s=8, c='r', marker='x', label='Radar')

    if ellipse_every > 0:
        for snapshot in estimates[::ellipse_every]:
            ax.add_patch(confidence_ellipse(snapshot.x[0:2], snapshot.P[0:2, 0:2], confidence,
                                            fill=False, edgecolor='b', alpha=0.4))

    ax.set_xlabel('x [m]')
    ax.set_ylabel('y [m]')
    ax.set_title('CTRV Unscented Kalman Filter')
    ax.set_aspect('equal', adjustable='datalim')
    ax.grid(True, alpha=0.3)
    ax.legend()
    return fig, ax


def plot_nis(monitor: NISMonitor, sensor_type: SensorType):
    """
    Plot the NIS sequence of one sensor with its chi-square threshold.

    Returns:
        Tuple of (figure, axes)
    """
    values: List[float] = monitor.samples.get(sensor_type, [])
    threshold = monitor.threshold(sensor_type)

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(np.arange(len(values)), values, linewidth=1.0, label=f'NIS {sensor_type.value}')
    ax.axhline(threshold, color='r', linestyle='--',
               label=f'χ² {monitor.confidence:.2f} ({threshold:.3f})')
    ax.set_xlabel('Update')
    ax.set_ylabel('NIS')
    ax.set_title(f'{sensor_type.value.capitalize()} NIS: '
                 f'{100 * monitor.exceedance_ratio(sensor_type):.1f}% above threshold')
    ax.grid(True, alpha=0.3)
    ax.legend()

    if not values:
        logger.warning(f"No NIS samples recorded for {sensor_type.value}")
    return fig, ax
