"""Errors raised by the queueing system."""

from typing import List, Tuple


class SamplingDomainError(ValueError):
    """A sampler was asked to evaluate a formula outside its domain.

    Raised by the service-time generator when the logarithm argument is not
    positive. This is a configuration problem and is never retried.
    """

    def __init__(self, message: str, rate: float, draw: float):
        super().__init__(message)
        self.rate = rate
        self.draw = draw


class IntensityBoundError(ValueError):
    """The dominating rate does not bound the intensity profile on the window."""

    def __init__(self, max_rate: float, violations: List[Tuple[float, float]]):
        self.max_rate = max_rate
        self.violations = list(violations)
        shown = ', '.join(f"t={t:.2f}: {ratio:.3f}" for t, ratio in self.violations[:5])
        more = len(self.violations) - 5
        if more > 0:
            shown += f" (+{more} more)"
        super().__init__(
            f"lambda(t)/lambda_max outside [0, 1] for lambda_max={max_rate}: {shown}"
        )
