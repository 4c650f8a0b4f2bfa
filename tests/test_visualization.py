import pytest
import numpy as np
import sys
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ukf_tracking.fusion import FilterSnapshot, NISMonitor
from ukf_tracking.sensors import MeasurementPackage, SensorType
from ukf_tracking.visualization import plot_tracking, plot_nis, confidence_ellipse


@pytest.fixture
def estimates():
    """Short straight track of snapshots"""
    return [
        FilterSnapshot(x=np.array([float(k), 0.5 * k, 1.0, 0.4, 0.0]),
                       P=np.diag([0.04, 0.01, 1.0, 0.1, 0.1]), timestamp=k * 50000)
        for k in range(10)
    ]


class TestPlotTracking:
    """Test trajectory plotting"""

    def test_estimate_and_truth_lines(self, estimates):
        """Estimate and ground truth are drawn as lines"""
        truth = [snapshot.x.copy() for snapshot in estimates]

        fig, ax = plot_tracking(estimates, ground_truth=truth)

        assert len(ax.lines) == 2
        np.testing.assert_allclose(ax.lines[0].get_xdata(), np.arange(10))
        plt.close(fig)

    def test_measurements_and_ellipses(self, estimates):
        """Lidar and radar readings are scattered, ellipses added"""
        measurements = [
            MeasurementPackage(SensorType.LASER, [1.0, 0.5], 0),
            MeasurementPackage(SensorType.RADAR, [2.0, 0.3, 1.0], 50000),
        ]

        fig, ax = plot_tracking(estimates, measurements=measurements, ellipse_every=5)

        assert len(ax.collections) == 2
        assert len(ax.patches) == 2
        plt.close(fig)

    def test_empty_estimates_rejected(self):
        """At least one estimate is required"""
        with pytest.raises(ValueError):
            plot_tracking([])


class TestConfidenceEllipse:
    """Test covariance ellipse geometry"""

    def test_axis_aligned_ellipse(self):
        """Axes scale with the standard deviations"""
        ellipse = confidence_ellipse(np.array([1.0, 2.0]), np.diag([4.0, 1.0]), confidence=0.95)
        scale = np.sqrt(5.991464547107979)

        assert ellipse.width == pytest.approx(2 * scale * 2.0)
        assert ellipse.height == pytest.approx(2 * scale * 1.0)


class TestPlotNIS:
    """Test NIS plotting"""

    def test_threshold_line(self):
        """NIS sequence and threshold line are drawn"""
        monitor = NISMonitor()
        for value in [0.5, 1.2, 8.0, 2.2]:
            monitor.record(SensorType.RADAR, value)

        fig, ax = plot_nis(monitor, SensorType.RADAR)

        assert len(ax.lines) == 2
        np.testing.assert_allclose(ax.lines[1].get_ydata(), [monitor.threshold(SensorType.RADAR)] * 2)
        assert '25.0%' in ax.get_title()
        plt.close(fig)

    def test_no_samples(self):
        """Plotting without samples still returns a figure"""
        fig, ax = plot_nis(NISMonitor(), SensorType.LASER)

        assert len(ax.lines) == 2
        plt.close(fig)
