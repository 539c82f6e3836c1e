"""
Random variable generators for the queueing system.
Every generator draws from an injected RandomSource, so runs are repeatable.
"""

from typing import Callable, Iterable, Optional, Protocol

import numpy as np

from nhpp_queue.core.errors import SamplingDomainError

IntensityProfile = Callable[[float], float]


class RandomSource(Protocol):
    """Anything that can produce a uniform value in ``[a, b)``."""

    def uniform(self, a: float, b: float) -> float:
        ...


class NumpyRandomSource:
    """RandomSource backed by a numpy Generator."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self, a: float, b: float) -> float:
        return float(self._rng.uniform(a, b))


class SequenceRandomSource:
    """RandomSource that replays a fixed sequence of unit draws.

    Each value ``v`` in ``[0, 1)`` is mapped to ``a + (b - a) * v``. With
    ``cycle=True`` the sequence restarts when exhausted; otherwise an
    ``IndexError`` is raised.
    """

    def __init__(self, values: Iterable[float], cycle: bool = True):
        self.values = [float(v) for v in values]
        if not self.values:
            raise ValueError("SequenceRandomSource needs at least one value")
        for v in self.values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Unit draws must lie in [0, 1), got {v}")
        self.cycle = cycle
        self.position = 0

    def uniform(self, a: float, b: float) -> float:
        if self.position >= len(self.values):
            if not self.cycle:
                raise IndexError("SequenceRandomSource exhausted")
            self.position = 0
        v = self.values[self.position]
        self.position += 1
        return a + (b - a) * v


def exponential(rate: float, source: RandomSource) -> float:
    """Generate an exponential random variable with the given rate.

    A draw of exactly 0 gives an infinite value.
    """
    u = source.uniform(0.0, 1.0)
    if u <= 0.0:
        return np.inf
    return -np.log(u) / rate


class ArrivalProcessGenerator:
    """Next-arrival sampler for a nonhomogeneous Poisson process (thinning).

    Candidates are generated from a homogeneous process with rate ``max_rate``
    and each is kept with probability ``intensity(t) / max_rate``. The caller
    guarantees ``intensity(t) <= max_rate`` on the operating window; see
    ``intensity.check_intensity_ratio``.
    """

    def __init__(self, max_rate: float, intensity: IntensityProfile, source: RandomSource):
        if max_rate <= 0:
            raise ValueError(f"max_rate must be > 0, got {max_rate}")
        self.max_rate = max_rate
        self.intensity = intensity
        self.source = source
        self.candidates = 0
        self.accepted = 0

    def next_arrival(self, current_time: float) -> float:
        """Return the first accepted arrival instant strictly after ``current_time``."""
        t = current_time
        while True:
            t += exponential(self.max_rate, self.source)
            self.candidates += 1
            if np.isinf(t):
                return np.inf
            u2 = self.source.uniform(0.0, 1.0)
            if u2 <= self.intensity(t) / self.max_rate:
                self.accepted += 1
                return float(t)

    def acceptance_rate(self) -> float:
        """Fraction of candidate instants that were accepted so far."""
        if self.candidates > 0:
            return self.accepted / self.candidates
        return 0.0


class ServiceTimeGenerator:
    """Service-duration sampler: ``-ln(1 - 2u / rate)`` for ``u`` uniform in [0, 1).

    This is not the textbook ``-ln(1 - u) / rate`` sampler; the shape of the
    distribution depends on it, so it is kept as is. For ``rate < 2`` the
    logarithm argument can be non-positive and ``sample`` raises
    ``SamplingDomainError``.
    """

    def __init__(self, rate: float, source: RandomSource):
        if rate <= 0:
            raise ValueError(f"service rate must be > 0, got {rate}")
        self.rate = rate
        self.source = source

    def sample(self) -> float:
        u = self.source.uniform(0.0, 1.0)
        argument = 1.0 - 2.0 * u / self.rate
        if argument <= 0.0:
            raise SamplingDomainError(
                f"service time undefined: 1 - 2u/rate = {argument:.6g} <= 0 "
                f"(rate={self.rate}, u={u:.6g}); use a service rate of at least 2",
                rate=self.rate,
                draw=u,
            )
        return float(-np.log(argument))

    def support_is_safe(self) -> bool:
        """True when no draw in [0, 1) can leave the logarithm's domain."""
        return self.rate >= 2.0

