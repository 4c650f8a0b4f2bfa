"""
Simulation components for ukf tracking.

This module contains CTRV ground-truth generation and measurement scenarios
for testing and demonstrating the filter.

Components:
    - CTRVTrajectory: Stepwise CTRV target with optional process noise
    - TrackingScenario: Alternating lidar/radar measurement stream with truth
"""

from .trajectory import CTRVTrajectory, TrajectoryParameters
from .scenario import TrackingScenario, ScenarioSample

__all__ = [
    "CTRVTrajectory",
    "TrajectoryParameters",
    "TrackingScenario",
    "ScenarioSample"
]
