"""
Filter state store: dimension constants, configuration and belief snapshots.

State Vector Definition:
    x = [px, py, v, ψ, ψ̇]ᵀ ∈ ℝ⁵

Where:
    - [px, py]: Position in the tracking frame (m)
    - v: Speed magnitude along the heading (m/s)
    - ψ: Heading (yaw) angle (rad)
    - ψ̇: Turn rate (rad/s)

Augmented State:
    x_aug = [px, py, v, ψ, ψ̇, νa, νψ̈]ᵀ ∈ ℝ⁷

    The two trailing components are zero-mean process noise variables
    (longitudinal acceleration and yaw acceleration) so that process noise
    travels through the same sigma point machinery as the state.

Every matrix shape in the filter derives from the constants below; they are
module level and never mutated.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

# State dimension
N_X = 5

# Augmented state dimension (state + two process noise terms)
N_AUG = N_X + 2

# Number of sigma points
N_SIGMA = 2 * N_AUG + 1

# Sigma point spreading parameter
LAMBDA = 3 - N_X

# Measurement dimensions
N_LIDAR = 2
N_RADAR = 3

# Angular components
YAW_INDEX = 3
BEARING_INDEX = 1


@dataclass(frozen=True)
class FilterConfig:
    """
    Construction-time configuration of the unscented filter.

    Noise values are standard deviations; the matching covariance matrices
    are exposed as properties.

    Attributes:
        use_laser: Process lidar measurements (ignored otherwise)
        use_radar: Process radar measurements (ignored otherwise)
        std_a: Longitudinal acceleration noise [m/s²]
        std_yawdd: Yaw acceleration noise [rad/s²]
        std_laspx: Lidar noise on px [m]
        std_laspy: Lidar noise on py [m]
        std_radr: Radar range noise [m]
        std_radphi: Radar bearing noise [rad]
        std_radrd: Radar range-rate noise [m/s]
        initial_speed: Speed placeholder used to seed the first estimate [m/s]
        lidar_initial_yaw: Heading placeholder for lidar initialization [rad]
        lidar_initial_yaw_rate: Turn rate placeholder for lidar initialization [rad/s]
        turn_rate_threshold: Below this |ψ̇| the straight-line model is used
        min_range: Floor for the range in the radar range-rate denominator [m]
    """
    use_laser: bool = True
    use_radar: bool = True

    std_a: float = 3.0
    std_yawdd: float = 0.5

    # Provided by the sensor manufacturer
    std_laspx: float = 0.15
    std_laspy: float = 0.15
    std_radr: float = 0.3
    std_radphi: float = 0.03
    std_radrd: float = 0.3

    initial_speed: float = 4.0
    lidar_initial_yaw: float = 0.5
    lidar_initial_yaw_rate: float = 0.0

    turn_rate_threshold: float = 1e-3
    min_range: float = 1e-4

    def __post_init__(self):
        """Validate noise parameters and thresholds."""
        for name in ("std_a", "std_yawdd", "std_laspx", "std_laspy",
                     "std_radr", "std_radphi", "std_radrd"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.turn_rate_threshold < 0:
            raise ValueError(f"Turn rate threshold must be non-negative, got {self.turn_rate_threshold}")
        if self.min_range <= 0:
            raise ValueError(f"Minimum range must be positive, got {self.min_range}")

    @property
    def process_noise(self) -> np.ndarray:
        """2x2 covariance of the augmented noise variables [νa, νψ̈]."""
        return np.diag([self.std_a ** 2, self.std_yawdd ** 2])

    @property
    def lidar_noise(self) -> np.ndarray:
        """2x2 lidar measurement covariance."""
        return np.diag([self.std_laspx ** 2, self.std_laspy ** 2])

    @property
    def radar_noise(self) -> np.ndarray:
        """3x3 radar measurement covariance."""
        return np.diag([self.std_radr ** 2, self.std_radphi ** 2, self.std_radrd ** 2])


def _frozen_copy(array: Optional[np.ndarray], shape: tuple, name: str) -> Optional[np.ndarray]:
    if array is None:
        return None
    result = np.array(array, dtype=float, copy=True)
    if result.shape != shape:
        raise ValueError(f"{name} must have shape {shape}, got {result.shape}")
    result.setflags(write=False)
    return result


@dataclass(frozen=True, eq=False)
class FilterSnapshot:
    """
    Immutable belief of the filter after a processed measurement.

    Arrays are copied and made read-only on construction, so a snapshot can
    be handed out freely without the risk of a caller mutating filter state.

    Attributes:
        x: State mean [px, py, v, ψ, ψ̇]
        P: 5x5 state covariance
        timestamp: Timestamp of the last processed measurement [µs]
        nis_laser: NIS of the most recent lidar update
        nis_radar: NIS of the most recent radar update
        sigma_points_pred: 5x15 predicted sigma points of the last prediction
    """
    x: np.ndarray
    P: np.ndarray
    timestamp: int
    nis_laser: float = 0.0
    nis_radar: float = 0.0
    sigma_points_pred: Optional[np.ndarray] = field(default=None, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "x", _frozen_copy(self.x, (N_X,), "State mean"))
        object.__setattr__(self, "P", _frozen_copy(self.P, (N_X, N_X), "State covariance"))
        object.__setattr__(self, "sigma_points_pred",
                           _frozen_copy(self.sigma_points_pred, (N_X, N_SIGMA), "Predicted sigma points"))
        object.__setattr__(self, "timestamp", int(self.timestamp))

    @property
    def position(self) -> np.ndarray:
        """Position [px, py] in meters."""
        return self.x[0:2].copy()

    @property
    def velocity(self) -> np.ndarray:
        """Cartesian velocity [vx, vy] derived from speed and heading."""
        v, yaw = self.x[2], self.x[3]
        return np.array([v * np.cos(yaw), v * np.sin(yaw)])

    def get_uncertainty(self) -> np.ndarray:
        """Standard deviations of each state component."""
        return np.sqrt(np.clip(np.diag(self.P), 0.0, None))

    def get_state_dict(self) -> dict:
        """Plain-python view of the snapshot for reporting."""
        return {
            'x': self.x.tolist(),
            'P': self.P.tolist(),
            'timestamp': self.timestamp,
            'nis_laser': self.nis_laser,
            'nis_radar': self.nis_radar,
            'uncertainty': self.get_uncertainty().tolist(),
        }

    def __str__(self) -> str:
        return (f"FilterSnapshot(t={self.timestamp}, pos=[{self.x[0]:.3f}, {self.x[1]:.3f}], "
                f"v={self.x[2]:.3f}, yaw={np.degrees(self.x[3]):.1f}°, "
                f"yaw_rate={self.x[4]:.3f})")
