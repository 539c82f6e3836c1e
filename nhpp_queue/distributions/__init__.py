"""Random variable generators and intensity profiles for the queueing system."""

from .random_variables import (
    RandomSource,
    NumpyRandomSource,
    SequenceRandomSource,
    ArrivalProcessGenerator,
    ServiceTimeGenerator,
    exponential,
)
from .intensity import (
    reference_intensity,
    constant_intensity,
    intensity_ratio_violations,
    check_intensity_ratio,
    peak_intensity,
    expected_arrivals,
)

__all__ = [
    'RandomSource',
    'NumpyRandomSource',
    'SequenceRandomSource',
    'ArrivalProcessGenerator',
    'ServiceTimeGenerator',
    'exponential',
    'reference_intensity',
    'constant_intensity',
    'intensity_ratio_violations',
    'check_intensity_ratio',
    'peak_intensity',
    'expected_arrivals',
]
