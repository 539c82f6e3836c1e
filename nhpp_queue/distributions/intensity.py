"""Arrival intensity profiles and checks against the dominating rate."""

from typing import Callable, List, Tuple

import numpy as np
from scipy import integrate

from nhpp_queue.core.errors import IntensityBoundError

# Boundaries of the reference profile's pieces (hours of the day).
REFERENCE_BREAKPOINTS = (7.0, 9.0, 11.0, 13.0, 15.0, 17.0, 19.0, 21.0, 23.0)
BASELINE_RATE = 0.01


def reference_intensity(t: float) -> float:
    """Piecewise arrival rate over a working day, 0.01 outside [7, 23)."""
    if 7 <= t < 9:
        return 1.4 * t - 9.2
    if 9 <= t < 11:
        return -0.23 * t + 4.3
    if 11 <= t < 13:
        return -0.2 * t + 4.4
    if 13 <= t < 15:
        return -0.8 * (t - 14) * (t - 14) + 5.8
    if 15 <= t < 17:
        return -0.2 * t + 6.1
    if 17 <= t < 19:
        return 0.6 * t - 9.0
    if 19 <= t < 21:
        return -1.5 * (t - 20) * (t - 20) + 5.5
    if 21 <= t < 23:
        return -0.8 * t + 19.65
    return BASELINE_RATE


def constant_intensity(rate: float) -> Callable[[float], float]:
    """Create a profile with a fixed arrival rate."""
    if rate < 0:
        raise ValueError(f"rate must be >= 0, got {rate}")
    return lambda t: rate


def ratio_grid(start: float, finish: float, step: float = 0.5) -> np.ndarray:
    """Grid ``start, start + step, ...`` up to and including ``finish``."""
    if step <= 0:
        raise ValueError("step must be > 0")
    count = int(np.floor((finish - start) / step + 1e-9)) + 1
    return start + step * np.arange(max(count, 0))


def intensity_ratio_violations(intensity: Callable[[float], float],
                               max_rate: float,
                               start: float,
                               finish: float,
                               step: float = 0.5) -> List[Tuple[float, float]]:
    """Return every grid point where ``intensity(t) / max_rate`` leaves [0, 1]."""
    if max_rate <= 0:
        raise ValueError(f"max_rate must be > 0, got {max_rate}")
    violations = []
    for t in ratio_grid(start, finish, step):
        ratio = intensity(float(t)) / max_rate
        if ratio < 0 or ratio > 1:
            violations.append((float(t), float(ratio)))
    return violations


def check_intensity_ratio(intensity: Callable[[float], float],
                          max_rate: float,
                          start: float,
                          finish: float,
                          step: float = 0.5) -> None:
    """Raise IntensityBoundError if ``max_rate`` does not bound the profile on the grid."""
    violations = intensity_ratio_violations(intensity, max_rate, start, finish, step)
    if violations:
        raise IntensityBoundError(max_rate, violations)


def peak_intensity(intensity: Callable[[float], float],
                   start: float,
                   finish: float,
                   resolution: int = 2001) -> float:
    """Largest value of the profile on a fine grid over the window."""
    times = np.linspace(start, finish, resolution)
    return float(max(intensity(float(t)) for t in times))


def expected_arrivals(intensity: Callable[[float], float],
                      start: float,
                      finish: float) -> float:
    """Mean number of arrivals in [start, finish]: the integral of the profile."""
    if finish <= start:
        return 0.0
    points = [p for p in REFERENCE_BREAKPOINTS if start < p < finish]
    value, _ = integrate.quad(intensity, start, finish, points=points or None, limit=200)
    return float(value)
