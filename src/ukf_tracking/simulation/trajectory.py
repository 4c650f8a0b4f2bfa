"""
Ground-truth CTRV trajectory generation.

Mathematical Framework:
    The target follows the same discrete CTRV model the filter assumes:

        x(k+1) = x(k) + f_ctrv(x(k), Δt) + g(x(k), νa(k), νψ̈(k), Δt)

    where νa ~ N(0, σa²) and νψ̈ ~ N(0, σψ̈²) are drawn once per step and
    held constant over the step. With σa = σψ̈ = 0 the target moves on an
    exact circular arc (or straight line for ψ̇ = 0).

Generating truth from the filter's own process model makes the normalized
innovation squared of a correctly tuned filter chi-square distributed,
which is what the consistency tests rely on.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional
import warnings

from ..fusion.angles import normalize_angle
from ..fusion.motion import ctrv_displacement, noise_displacement
from ..fusion.state import N_X, YAW_INDEX


@dataclass
class TrajectoryParameters:
    """Parameters of a simulated CTRV target with validation."""

    initial_state: np.ndarray = field(default_factory=lambda: np.array([10.0, 5.0, 5.0, 0.0, 0.2]))
    std_a: float = 0.0            # Longitudinal acceleration noise [m/s²]
    std_yawdd: float = 0.0        # Yaw acceleration noise [rad/s²]
    turn_rate_threshold: float = 1e-3

    def __post_init__(self):
        """Validate trajectory parameters."""
        self.initial_state = np.asarray(self.initial_state, dtype=float)
        if self.initial_state.shape != (N_X,):
            raise ValueError(f"Initial state must have {N_X} elements, got {self.initial_state.size}")
        if not np.all(np.isfinite(self.initial_state)):
            raise ValueError("Initial state contains NaN or infinite values")
        if self.std_a < 0 or self.std_yawdd < 0:
            raise ValueError("Process noise standard deviations must be non-negative")
        if abs(self.initial_state[4]) > 2.0:
            warnings.warn(f"High turn rate {self.initial_state[4]:.2f} rad/s may give a very tight circle")


class CTRVTrajectory:
    """
    Stepwise CTRV ground truth.

    Attributes:
        params: Trajectory parameters
        state: Current true state [px, py, v, ψ, ψ̇]
        time: Elapsed simulation time in seconds
    """

    def __init__(self, params: Optional[TrajectoryParameters] = None, seed: Optional[int] = None):
        self.params = params if params is not None else TrajectoryParameters()
        self._rng = np.random.default_rng(seed)
        self.state = self.params.initial_state.copy()
        self.time = 0.0

    def advance(self, dt: float) -> np.ndarray:
        """
        Move the target forward by dt seconds.

        Args:
            dt: Time step in seconds

        Returns:
            Copy of the new true state
        """
        if dt < 0:
            raise ValueError(f"Time step must be non-negative, got {dt}")

        v, yaw, yaw_rate = self.state[2:5]
        nu_a = self._rng.normal(0.0, self.params.std_a) if self.params.std_a > 0 else 0.0
        nu_yawdd = self._rng.normal(0.0, self.params.std_yawdd) if self.params.std_yawdd > 0 else 0.0

        self.state = (self.state
                      + ctrv_displacement(v, yaw, yaw_rate, dt, self.params.turn_rate_threshold)
                      + noise_displacement(yaw, nu_a, nu_yawdd, dt))
        self.state[YAW_INDEX] = normalize_angle(self.state[YAW_INDEX])
        self.time += dt
        return self.state.copy()

    def sample(self, dt: float, steps: int) -> List[np.ndarray]:
        """True states at t = dt, 2dt, ..., steps·dt."""
        return [self.advance(dt) for _ in range(steps)]

    def reset(self) -> None:
        self.state = self.params.initial_state.copy()
        self.time = 0.0
