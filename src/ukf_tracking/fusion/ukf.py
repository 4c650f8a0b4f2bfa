"""
Unscented Kalman Filter for CTRV target tracking with lidar and radar.

This module ties the sigma point engine, the CTRV motion model and the
measurement models into one recursive estimator.

Mathematical Foundation:
    The UKF propagates a Gaussian belief through nonlinear models without
    linearization. A deterministic set of sigma points is drawn from the
    augmented belief, pushed through the model, and the output mean and
    covariance are recovered by weighted sums:

    x(k+1) = f(x(k), ν(k), Δt)          CTRV process model
    z(k)   = h(x(k)) + w(k)             lidar (linear) or radar (nonlinear)

UKF Recursion (per measurement):
    1. First accepted measurement: seed x̂, P; no prediction or update.
    2. Prediction over Δt = (t_k − t_{k−1}) / 10⁶ seconds.
    3. Measurement prediction with the model selected by sensor type.
    4. Correction with Kalman gain K = T S⁻¹ and NIS bookkeeping.

The core is the pure function ``step``: it takes a prior snapshot and
returns a new one, never mutating its inputs. ``UnscentedKalmanFilter`` is
a thin stateful facade that commits a snapshot only after a fully
successful cycle.
"""

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, Optional, Tuple

import numpy as np

from ..sensors.types import MeasurementPackage, SensorType
from .correction import correct
from .errors import NumericalInstabilityError
from .initialization import initialize
from .measurement import model_for
from .motion import predict
from .sigma_points import sigma_weights
from .state import FilterConfig, FilterSnapshot

# Configure logging for filter diagnostics
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MICROSECONDS_PER_SECOND = 1e6


@dataclass
class UpdateDiagnostics:
    """Container for the outcome of one processed measurement."""
    sensor_type: SensorType
    timestamp: int
    dt: float = 0.0
    nis: Optional[float] = None
    innovation: Optional[np.ndarray] = None
    innovation_covariance: Optional[np.ndarray] = None
    predicted_measurement: Optional[np.ndarray] = None
    kalman_gain: Optional[np.ndarray] = None
    initialized: bool = False
    skipped: bool = False


def is_enabled(sensor_type: SensorType, config: FilterConfig) -> bool:
    """Whether measurements of this sensor type are processed."""
    if sensor_type == SensorType.LASER:
        return config.use_laser
    if sensor_type == SensorType.RADAR:
        return config.use_radar
    return False


def elapsed_seconds(previous: int, current: int) -> float:
    """Time between two microsecond timestamps in seconds."""
    dt = (current - previous) / MICROSECONDS_PER_SECOND
    if dt < 0:
        logger.warning(f"Out-of-order measurement: t={current}us is {-dt:.6f}s before last processed t={previous}us")
    return dt


def step(prior: Optional[FilterSnapshot], package: MeasurementPackage,
         config: FilterConfig) -> Tuple[Optional[FilterSnapshot], UpdateDiagnostics]:
    """
    Process one measurement.

    Args:
        prior: Belief after the previous measurement, or None before the first
        package: Incoming measurement
        config: Filter configuration

    Returns:
        Tuple of (posterior snapshot, diagnostics). A disabled sensor returns
        the prior unchanged (possibly None) with ``skipped`` set.

    Raises:
        SigmaPointError: If the augmented covariance lost positive definiteness
        InnovationCovarianceError: If the innovation covariance is singular
    """
    if not is_enabled(package.sensor_type, config):
        logger.debug(f"Ignoring {package.sensor_type.value} measurement (disabled)")
        return prior, UpdateDiagnostics(package.sensor_type, package.timestamp, skipped=True)

    if prior is None:
        snapshot = initialize(package, config)
        return snapshot, UpdateDiagnostics(package.sensor_type, package.timestamp, initialized=True)

    dt = elapsed_seconds(prior.timestamp, package.timestamp)

    x_pred, P_pred, Xsig_pred = predict(prior.x, prior.P, dt, config)

    model = model_for(package.sensor_type)
    prediction = model.predict(Xsig_pred, config)
    result = correct(x_pred, P_pred, package.raw_measurements, prediction, model, Xsig_pred)

    nis_fields = {'nis_radar': result.nis} if package.sensor_type == SensorType.RADAR else {'nis_laser': result.nis}
    posterior = replace(prior, x=result.x, P=result.P, timestamp=package.timestamp,
                        sigma_points_pred=Xsig_pred, **nis_fields)

    diagnostics = UpdateDiagnostics(
        sensor_type=package.sensor_type,
        timestamp=package.timestamp,
        dt=dt,
        nis=result.nis,
        innovation=result.innovation,
        innovation_covariance=prediction.S,
        predicted_measurement=prediction.z_pred,
        kalman_gain=result.kalman_gain,
    )
    return posterior, diagnostics


class UnscentedKalmanFilter:
    """
    Stateful facade around ``step``.

    Holds the current FilterSnapshot and replaces it after every successful
    cycle. When a cycle fails numerically the previous snapshot is kept and
    the error is re-raised; recovery (e.g. ``reset``) is left to the caller.

    Attributes:
        config: Filter configuration
        history: Diagnostics of the most recently processed measurements
    """

    def __init__(self, config: Optional[FilterConfig] = None, history_length: int = 1000):
        """
        Initialize the filter.

        Args:
            config: Filter configuration; defaults are used if None
            history_length: Number of UpdateDiagnostics to retain
        """
        if history_length <= 0:
            raise ValueError(f"History length must be positive, got {history_length}")

        self.config = config if config is not None else FilterConfig()
        self.history: Deque[UpdateDiagnostics] = deque(maxlen=history_length)
        self._snapshot: Optional[FilterSnapshot] = None

        logger.info(f"Unscented Kalman Filter created (laser={self.config.use_laser}, "
                    f"radar={self.config.use_radar})")

    def process_measurement(self, package: MeasurementPackage) -> UpdateDiagnostics:
        """
        Run initialization or a full predict/update cycle for a measurement.

        Args:
            package: The latest lidar or radar measurement

        Returns:
            Diagnostics of this cycle

        Raises:
            NumericalInstabilityError: If the cycle failed; state is unchanged
        """
        try:
            snapshot, diagnostics = step(self._snapshot, package, self.config)
        except NumericalInstabilityError as exc:
            logger.warning(f"Cycle at t={package.timestamp}us aborted, keeping previous state: {exc}")
            raise

        self._snapshot = snapshot
        if not diagnostics.skipped:
            self.history.append(diagnostics)
        return diagnostics

    def reset(self) -> None:
        """Forget the current belief; the next measurement re-initializes."""
        self._snapshot = None
        self.history.clear()
        logger.info("Unscented Kalman Filter reset")

    @property
    def is_initialized(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Optional[FilterSnapshot]:
        """Current immutable belief, None before initialization."""
        return self._snapshot

    def _require_snapshot(self) -> FilterSnapshot:
        if self._snapshot is None:
            raise RuntimeError("Filter has not been initialized with a measurement yet")
        return self._snapshot

    @property
    def x(self) -> np.ndarray:
        """Copy of the state mean [px, py, v, ψ, ψ̇]."""
        return self._require_snapshot().x.copy()

    @property
    def P(self) -> np.ndarray:
        """Copy of the 5x5 state covariance."""
        return self._require_snapshot().P.copy()

    @property
    def timestamp(self) -> Optional[int]:
        return None if self._snapshot is None else self._snapshot.timestamp

    @property
    def nis_laser(self) -> float:
        return 0.0 if self._snapshot is None else self._snapshot.nis_laser

    @property
    def nis_radar(self) -> float:
        return 0.0 if self._snapshot is None else self._snapshot.nis_radar

    @property
    def weights(self) -> np.ndarray:
        return sigma_weights()
