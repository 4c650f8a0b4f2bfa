"""
Filter consistency checks based on the normalized innovation squared.

For a consistent filter the NIS of a d-dimensional measurement follows a
chi-square distribution with d degrees of freedom. Roughly 5% of samples
should exceed the 0.95 quantile:

    d = 2 (lidar):  χ²₀.₉₅ ≈ 5.991
    d = 3 (radar):  χ²₀.₉₅ ≈ 7.815

Many more exceedances mean the noise is underestimated; far fewer mean it
is overestimated. NIS is only observed here, never fed back into the filter.
"""

import logging
from collections import defaultdict
from typing import Dict, List

import numpy as np
import scipy.stats

from ..sensors.types import SensorType

logger = logging.getLogger(__name__)


def chi_square_threshold(dof: int, confidence: float = 0.95) -> float:
    """Chi-square quantile for the given degrees of freedom."""
    if dof <= 0:
        raise ValueError(f"Degrees of freedom must be positive, got {dof}")
    if not 0 < confidence < 1:
        raise ValueError("Confidence level must be between 0 and 1")
    return float(scipy.stats.chi2.ppf(confidence, dof))


class NISMonitor:
    """
    Collects NIS samples per sensor type and summarizes their consistency.

    Attributes:
        confidence: Quantile used for the exceedance threshold
        samples: NIS values recorded per sensor type
    """

    def __init__(self, confidence: float = 0.95):
        if not 0 < confidence < 1:
            raise ValueError("Confidence level must be between 0 and 1")
        self.confidence = confidence
        self.samples: Dict[SensorType, List[float]] = defaultdict(list)

    def record(self, sensor_type: SensorType, nis: float) -> None:
        if not np.isfinite(nis):
            logger.warning(f"Ignoring non-finite NIS for {sensor_type.value}")
            return
        self.samples[sensor_type].append(float(nis))

    def record_diagnostics(self, diagnostics) -> None:
        """Record the NIS of an UpdateDiagnostics, skipping init/skipped cycles."""
        if diagnostics.nis is not None:
            self.record(diagnostics.sensor_type, diagnostics.nis)

    def threshold(self, sensor_type: SensorType) -> float:
        return chi_square_threshold(sensor_type.measurement_dim, self.confidence)

    def exceedance_ratio(self, sensor_type: SensorType) -> float:
        """Fraction of recorded samples above the chi-square threshold."""
        values = self.samples.get(sensor_type)
        if not values:
            return 0.0
        return float(np.mean(np.asarray(values) > self.threshold(sensor_type)))

    def is_consistent(self, sensor_type: SensorType, tolerance: float = 0.05) -> bool:
        """True if the exceedance ratio is within tolerance of 1 - confidence."""
        expected = 1.0 - self.confidence
        return abs(self.exceedance_ratio(sensor_type) - expected) <= tolerance

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        summary = {}
        for sensor_type, values in self.samples.items():
            data = np.asarray(values)
            summary[sensor_type.value] = {
                'count': int(data.size),
                'mean': float(np.mean(data)),
                'threshold': self.threshold(sensor_type),
                'exceedance_ratio': self.exceedance_ratio(sensor_type),
            }
        return summary
