import math

import numpy as np
import pytest

from nhpp_queue.core.errors import SamplingDomainError
from nhpp_queue.distributions.intensity import constant_intensity
from nhpp_queue.distributions.random_variables import (
    ArrivalProcessGenerator,
    NumpyRandomSource,
    SequenceRandomSource,
    ServiceTimeGenerator,
    exponential,
)


def test_sequence_source_scales_and_cycles():
    src = SequenceRandomSource([0.25, 0.5])
    assert src.uniform(0.0, 1.0) == 0.25
    assert src.uniform(2.0, 4.0) == 3.0
    assert src.uniform(0.0, 1.0) == 0.25


def test_sequence_source_without_cycle_raises_when_exhausted():
    src = SequenceRandomSource([0.5], cycle=False)
    src.uniform(0.0, 1.0)
    with pytest.raises(IndexError):
        src.uniform(0.0, 1.0)


def test_sequence_source_rejects_values_outside_unit_interval():
    with pytest.raises(ValueError):
        SequenceRandomSource([1.0])
    with pytest.raises(ValueError):
        SequenceRandomSource([])


def test_exponential_of_zero_draw_is_infinite():
    assert exponential(1.0, SequenceRandomSource([0.0])) == np.inf
    assert exponential(2.0, SequenceRandomSource([0.5])) == pytest.approx(math.log(2) / 2.0)


def test_arrival_generator_zero_draw_ends_the_process():
    gen = ArrivalProcessGenerator(1.0, constant_intensity(0.5), SequenceRandomSource([0.0]))
    assert gen.next_arrival(3.0) == np.inf
    assert gen.accepted == 0


def test_service_time_of_zero_draw_is_zero():
    assert ServiceTimeGenerator(4.0, SequenceRandomSource([0.0])).sample() == 0.0


def test_numpy_source_is_repeatable_with_seed():
    a = NumpyRandomSource(7)
    b = NumpyRandomSource(7)
    draws_a = [a.uniform(0.0, 1.0) for _ in range(5)]
    draws_b = [b.uniform(0.0, 1.0) for _ in range(5)]
    assert draws_a == draws_b
    assert all(0.0 <= u < 1.0 for u in draws_a)


def test_arrival_generator_thins_candidates():
    # First candidate at ln 2 is rejected (0.9 > 0.5), second at 2 ln 2 accepted.
    src = SequenceRandomSource([0.5, 0.9, 0.5, 0.3], cycle=False)
    gen = ArrivalProcessGenerator(1.0, constant_intensity(0.5), src)
    t = gen.next_arrival(0.0)
    assert t == pytest.approx(2 * math.log(2))
    assert gen.candidates == 2
    assert gen.accepted == 1
    assert gen.acceptance_rate() == 0.5


def test_arrival_generator_returns_time_after_current():
    gen = ArrivalProcessGenerator(2.0, constant_intensity(1.5), NumpyRandomSource(3))
    t = 5.0
    for _ in range(100):
        nxt = gen.next_arrival(t)
        assert nxt > t
        t = nxt


def test_arrival_generator_requires_positive_max_rate():
    with pytest.raises(ValueError):
        ArrivalProcessGenerator(0.0, constant_intensity(0.5), NumpyRandomSource(1))


def test_service_time_formula():
    gen = ServiceTimeGenerator(4.0, SequenceRandomSource([0.5]))
    assert gen.sample() == pytest.approx(-math.log(0.75))
    assert gen.support_is_safe()


def test_service_time_domain_error_for_small_rate():
    gen = ServiceTimeGenerator(1.0, SequenceRandomSource([0.9]))
    assert not gen.support_is_safe()
    with pytest.raises(SamplingDomainError) as excinfo:
        gen.sample()
    assert excinfo.value.rate == 1.0
    assert excinfo.value.draw == 0.9


def test_service_time_small_rate_inside_domain():
    gen = ServiceTimeGenerator(1.0, SequenceRandomSource([0.25]))
    assert gen.sample() == pytest.approx(-math.log(0.5))


def test_service_time_requires_positive_rate():
    with pytest.raises(ValueError):
        ServiceTimeGenerator(0.0, NumpyRandomSource(1))
