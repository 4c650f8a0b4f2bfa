import pytest
import numpy as np
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ukf_tracking.fusion import FilterConfig, NISMonitor, UnscentedKalmanFilter, chi_square_threshold
from ukf_tracking.sensors import LidarSensor, RadarSensor, SensorType
from ukf_tracking.simulation import CTRVTrajectory, TrajectoryParameters, TrackingScenario


class TestCTRVTrajectory:
    """Test ground-truth generation"""

    def test_circle_closes(self):
        """A noise-free turning target returns to its start after one revolution"""
        params = TrajectoryParameters(initial_state=np.array([0.0, 0.0, 2.0, 0.0, 0.5]))
        trajectory = CTRVTrajectory(params)
        period = 2 * np.pi / 0.5

        states = trajectory.sample(period / 100, 100)

        np.testing.assert_allclose(states[-1][0:2], [0.0, 0.0], atol=1e-9)
        assert trajectory.time == pytest.approx(period)

    def test_straight_line(self):
        """Zero turn rate keeps a straight course"""
        params = TrajectoryParameters(initial_state=np.array([1.0, 1.0, 2.0, np.pi / 2, 0.0]))
        trajectory = CTRVTrajectory(params)

        state = trajectory.advance(1.5)

        np.testing.assert_allclose(state[0:2], [1.0, 4.0], atol=1e-12)

    def test_reset(self):
        """Reset restores the initial state"""
        trajectory = CTRVTrajectory(TrajectoryParameters(std_a=0.5, std_yawdd=0.1), seed=4)
        trajectory.sample(0.1, 10)

        trajectory.reset()

        np.testing.assert_allclose(trajectory.state, trajectory.params.initial_state)
        assert trajectory.time == 0.0

    def test_invalid_parameters(self):
        """Trajectory parameters are validated"""
        with pytest.raises(ValueError):
            TrajectoryParameters(initial_state=np.zeros(4))
        with pytest.raises(ValueError):
            TrajectoryParameters(std_a=-1.0)


class TestTrackingScenario:
    """Test measurement stream generation"""

    def test_alternating_sensors(self):
        """Lidar and radar alternate at the configured period"""
        scenario = TrackingScenario(CTRVTrajectory(), LidarSensor(seed=0), RadarSensor(seed=1),
                                    period_us=50000, start_time_us=0)

        samples = scenario.generate(6)

        assert [s.package.sensor_type for s in samples] == [SensorType.LASER, SensorType.RADAR] * 3
        assert [s.package.timestamp for s in samples] == [0, 50000, 100000, 150000, 200000, 250000]

    def test_requires_a_sensor(self):
        """A scenario without sensors is rejected"""
        with pytest.raises(ValueError):
            TrackingScenario(CTRVTrajectory())

    def test_dropouts_skip_samples(self):
        """Dropped readings are skipped"""
        scenario = TrackingScenario(CTRVTrajectory(), lidar=LidarSensor(dropout_prob=1.0, seed=0),
                                    radar=RadarSensor(seed=1))

        samples = scenario.generate(10)

        assert len(samples) == 5
        assert all(s.package.sensor_type == SensorType.RADAR for s in samples)


class TestFilterOnSimulatedTarget:
    """End-to-end tracking and consistency on simulated data"""

    @pytest.fixture
    def tuned_run(self):
        """Filter and truth sharing the same process noise"""
        config = FilterConfig(std_a=0.3, std_yawdd=0.1)
        params = TrajectoryParameters(initial_state=np.array([80.0, 40.0, 4.0, 0.5, 0.0]),
                                      std_a=config.std_a, std_yawdd=config.std_yawdd)
        scenario = TrackingScenario(CTRVTrajectory(params, seed=11),
                                    LidarSensor.from_config(config, seed=12),
                                    RadarSensor.from_config(config, seed=13))

        ukf = UnscentedKalmanFilter(config)
        monitor = NISMonitor()
        samples = scenario.generate(400)
        errors = []
        for index, sample in enumerate(samples):
            diagnostics = ukf.process_measurement(sample.package)
            if index >= 40:
                monitor.record_diagnostics(diagnostics)
                errors.append(ukf.x[0:2] - sample.ground_truth[0:2])
        return ukf, monitor, np.array(errors)

    def test_position_accuracy(self, tuned_run):
        """Position RMSE stays on the order of the lidar noise"""
        _, _, errors = tuned_run

        rmse = np.sqrt(np.mean(errors ** 2, axis=0))

        assert np.all(rmse < 0.3)

    def test_covariance_stays_symmetric(self, tuned_run):
        """Covariance is symmetric positive definite after many cycles"""
        ukf, _, _ = tuned_run

        np.testing.assert_allclose(ukf.P, ukf.P.T, atol=1e-12)
        assert np.all(np.linalg.eigvalsh(ukf.P) > 0)

    def test_nis_consistency(self, tuned_run):
        """Roughly 5% of NIS values exceed the chi-square 0.95 quantile"""
        _, monitor, _ = tuned_run

        for sensor_type in (SensorType.LASER, SensorType.RADAR):
            assert len(monitor.samples[sensor_type]) > 150
            assert 0.01 < monitor.exceedance_ratio(sensor_type) < 0.15
            assert monitor.is_consistent(sensor_type, tolerance=0.1)


class TestNISMonitor:
    """Test NIS bookkeeping"""

    def test_thresholds(self):
        """Thresholds are the chi-square 0.95 quantiles for 2 and 3 dof"""
        monitor = NISMonitor()

        assert monitor.threshold(SensorType.LASER) == pytest.approx(5.991, abs=1e-3)
        assert monitor.threshold(SensorType.RADAR) == pytest.approx(7.815, abs=1e-3)
        assert chi_square_threshold(2, 0.95) == pytest.approx(5.991, abs=1e-3)

    def test_exceedance_ratio(self):
        """Ratio counts samples strictly above the threshold"""
        monitor = NISMonitor()
        for value in [1.0, 2.0, 3.0, 10.0]:
            monitor.record(SensorType.LASER, value)

        assert monitor.exceedance_ratio(SensorType.LASER) == pytest.approx(0.25)
        assert monitor.exceedance_ratio(SensorType.RADAR) == 0.0

    def test_is_consistent(self):
        """Consistency compares the exceedance ratio with 1 - confidence"""
        monitor = NISMonitor()
        for value in [1.0] * 19 + [10.0]:
            monitor.record(SensorType.LASER, value)
        for value in [10.0] * 10:
            monitor.record(SensorType.RADAR, value)

        assert monitor.is_consistent(SensorType.LASER)
        assert not monitor.is_consistent(SensorType.RADAR)
        assert not monitor.is_consistent(SensorType.LASER, tolerance=-0.01)

    def test_non_finite_ignored(self):
        """NaN samples are not recorded"""
        monitor = NISMonitor()
        monitor.record(SensorType.RADAR, float('nan'))

        assert len(monitor.samples[SensorType.RADAR]) == 0

    def test_summary(self):
        """Summary reports count, mean and threshold per sensor"""
        monitor = NISMonitor()
        monitor.record(SensorType.RADAR, 2.0)
        monitor.record(SensorType.RADAR, 4.0)

        summary = monitor.get_summary()

        assert summary['radar']['count'] == 2
        assert summary['radar']['mean'] == pytest.approx(3.0)
        assert 'laser' not in summary

    def test_invalid_confidence(self):
        """Confidence must lie strictly between 0 and 1"""
        with pytest.raises(ValueError):
            NISMonitor(confidence=1.0)
