"""
Exception hierarchy for the unscented filter.

Numerical failures abort the current predict/update cycle. They are raised
instead of letting NaNs leak into the state mean and covariance, because
they indicate filter divergence that the caller has to resolve (reset the
filter or fall back to another estimator).
"""


class FilterError(Exception):
    """Base class for all filter errors."""


class NumericalInstabilityError(FilterError):
    """The filter lost a numerical invariant and cannot continue this cycle."""


class SigmaPointError(NumericalInstabilityError):
    """Augmented covariance is not positive definite; no square root exists."""


class InnovationCovarianceError(NumericalInstabilityError):
    """Innovation covariance S cannot be inverted."""
