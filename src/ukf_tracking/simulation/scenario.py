"""
Simulated lidar/radar measurement streams with ground truth.

A scenario advances a CTRV target at a fixed period and alternates lidar
and radar readings, producing the time-ordered measurement stream the
filter expects together with the true state at every timestamp.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

import numpy as np

from ..sensors.lidar import LidarSensor
from ..sensors.radar import RadarSensor
from ..sensors.types import MeasurementPackage
from .trajectory import CTRVTrajectory

logger = logging.getLogger(__name__)


@dataclass
class ScenarioSample:
    """One measurement and the true state it was generated from."""
    package: MeasurementPackage
    ground_truth: np.ndarray


class TrackingScenario:
    """
    Time-ordered measurement generator.

    Attributes:
        trajectory: Ground-truth target
        lidar: Lidar simulator, or None to produce radar only
        radar: Radar simulator, or None to produce lidar only
        period_us: Time between consecutive measurements in microseconds
        start_time_us: Timestamp of the first measurement
    """

    def __init__(self, trajectory: CTRVTrajectory,
                 lidar: Optional[LidarSensor] = None,
                 radar: Optional[RadarSensor] = None,
                 period_us: int = 50000,
                 start_time_us: int = 1477010443000000):
        if lidar is None and radar is None:
            raise ValueError("Scenario needs at least one sensor")
        if period_us <= 0:
            raise ValueError(f"Measurement period must be positive, got {period_us}")

        self.trajectory = trajectory
        self.lidar = lidar
        self.radar = radar
        self.period_us = int(period_us)
        self.start_time_us = int(start_time_us)

    def _sensors(self):
        return [sensor for sensor in (self.lidar, self.radar) if sensor is not None]

    def stream(self, count: int) -> Iterator[ScenarioSample]:
        """
        Yield up to ``count`` measurements.

        The first sample is taken at the initial state; each following one
        advances the target by one period. Dropped readings are skipped but
        still consume a time slot.
        """
        sensors = self._sensors()
        dt = self.period_us / 1e6
        timestamp = self.start_time_us
        truth = self.trajectory.state.copy()

        for index in range(count):
            if index > 0:
                truth = self.trajectory.advance(dt)
                timestamp += self.period_us
            sensor = sensors[index % len(sensors)]
            package = sensor.get_measurement(truth, timestamp)
            if package is None:
                logger.debug(f"{sensor.sensor_type.value} dropout at t={timestamp}us")
                continue
            yield ScenarioSample(package=package, ground_truth=truth.copy())

    def generate(self, count: int) -> List[ScenarioSample]:
        return list(self.stream(count))
