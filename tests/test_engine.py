import json
import math

import numpy as np
import pytest

from nhpp_queue.core import EngineState, EventKind, Phase
from nhpp_queue.core.errors import SamplingDomainError
from nhpp_queue.distributions.intensity import constant_intensity, reference_intensity
from nhpp_queue.distributions.random_variables import NumpyRandomSource, SequenceRandomSource
from nhpp_queue.system.engine import SimulationEngine

ARRIVAL_STEP = math.log(2)        # -ln(0.5) / 1.0
SERVICE_TIME = -math.log(0.75)    # -ln(1 - 2 * 0.5 / 4.0)


def make_engine(values, service_rate=4.0, rate=0.5, cycle=True, **kwargs):
    return SimulationEngine(
        window_start=0.0,
        window_close=10.0,
        max_arrival_rate=1.0,
        service_rate=service_rate,
        intensity=constant_intensity(rate),
        source=SequenceRandomSource(values, cycle=cycle),
        **kwargs,
    )


def test_constructor_validates_window_and_rate():
    with pytest.raises(ValueError):
        SimulationEngine(10.0, 10.0, 1.0, 4.0)
    with pytest.raises(ValueError):
        SimulationEngine(0.0, 10.0, 0.0, 4.0)
    with pytest.raises(ValueError):
        SimulationEngine(0.0, 10.0, 1.0, 4.0, arrival_limit=-1)


def test_deterministic_alternation_and_idle_time():
    result = make_engine([0.5]).run()

    # Arrivals every ln 2; each client leaves before the next arrives.
    kinds = [e.kind for e in result.events]
    assert kinds == [EventKind.ARRIVAL, EventKind.DEPARTURE] * 14
    assert [e.queue_size for e in result.events] == [1, 0] * 14
    assert [e.label for e in result.events[:4]] == [
        "Client 1 arrived", "Client 1 departed", "Client 2 arrived", "Client 2 departed",
    ]

    for k, client in enumerate(result.clients, start=1):
        assert client.client_id == k
        assert client.arrival_time == pytest.approx(k * ARRIVAL_STEP)
        assert client.waiting_time() == 0.0
        assert client.service_time() == pytest.approx(SERVICE_TIME)

    stats = result.statistics
    # First gap ln 2, thirteen gaps of ln 2 - d, then the stretch after the last departure.
    expected_idle = (ARRIVAL_STEP + 13 * (ARRIVAL_STEP - SERVICE_TIME)
                     + (10.0 - (14 * ARRIVAL_STEP + SERVICE_TIME)))
    assert stats.idle_time == pytest.approx(expected_idle)
    assert stats.idle_time == pytest.approx(10.0 - 14 * SERVICE_TIME)
    assert stats.utilization == pytest.approx(14 * SERVICE_TIME / 10.0)
    assert stats.tail_overrun == 0.0
    assert stats.total_clients == 14
    assert stats.mean_waiting_time == 0.0
    assert stats.mean_system_time == pytest.approx(SERVICE_TIME)
    assert stats.mean_queue_length == pytest.approx(0.5)
    assert stats.max_queue_length == 1

    final = result.final_state
    assert final.phase is Phase.TERMINATED
    assert final.arrivals == final.departures == 14
    assert final.t_departure == np.inf


def test_no_arrivals_inside_window():
    # The first candidate lands at -ln(1e-5) ~ 11.5, after closing.
    result = make_engine([1e-5, 0.5]).run()

    assert result.events == []
    assert result.clients == []
    assert result.final_state.arrivals == 0
    assert result.final_state.departures == 0
    assert result.statistics.idle_time == pytest.approx(10.0)
    assert result.statistics.utilization == pytest.approx(0.0)
    assert result.statistics.tail_overrun == 0.0
    assert result.statistics.mean_queue_length == 0.0


def test_single_late_client_drains_after_closing():
    service_time = -math.log(1 - 2 * 0.99 / 2.5)
    values = [math.exp(-9.9), 0.1, 1e-5, 0.1, 0.99]
    result = make_engine(values, service_rate=2.5, cycle=False).run()

    assert [e.kind for e in result.events] == [EventKind.ARRIVAL, EventKind.POST_CLOSE_DEPARTURE]
    client = result.clients[0]
    assert client.arrival_time == pytest.approx(9.9)
    assert client.departure_time == pytest.approx(9.9 + service_time)
    assert result.statistics.tail_overrun == pytest.approx(client.departure_time - 10.0)
    assert result.statistics.tail_overrun > 0
    assert result.statistics.idle_time == pytest.approx(9.9)


def test_post_close_departure_promotes_next_client():
    first_service = -math.log(1 - 2 * 0.99 / 2.5)
    second_service = -math.log(1 - 2 * 0.5 / 2.5)
    values = [math.exp(-9.0), 0.1,   # first arrival at 9.0
              math.exp(-0.5), 0.1,   # second arrival at 9.5
              0.99,                  # service of client 1
              1e-5, 0.1,             # third arrival far after closing
              0.5]                   # service of client 2, started after closing
    engine = make_engine(values, service_rate=2.5, cycle=False)
    result = engine.run()

    kinds = [e.kind for e in result.events]
    assert kinds == [
        EventKind.ARRIVAL,
        EventKind.ARRIVAL,
        EventKind.POST_CLOSE_DEPARTURE,
        EventKind.POST_CLOSE_DEPARTURE,
    ]
    first, second = result.clients
    assert second.service_start_time == pytest.approx(first.departure_time)
    assert second.waiting_time() == pytest.approx(9.0 + first_service - 9.5)
    assert second.departure_time == pytest.approx(first.departure_time + second_service)
    assert result.statistics.tail_overrun == pytest.approx(second.departure_time - 10.0)
    assert result.statistics.idle_time == pytest.approx(9.0)
    assert len(engine.waiting_line) == 0


def test_arrival_wins_tie_with_departure():
    engine = make_engine([0.5])
    engine.start()
    tied = EngineState(t=1.0, t_arrival=2.0, t_departure=2.0, in_system=1, arrivals=1)
    assert engine.next_event(tied) is EventKind.ARRIVAL
    later = EngineState(t=1.0, t_arrival=2.5, t_departure=2.0, in_system=1, arrivals=1)
    assert engine.next_event(later) is EventKind.DEPARTURE


def test_next_event_after_closing():
    engine = make_engine([0.5])
    engine.start()
    draining = EngineState(t=9.0, t_arrival=12.0, t_departure=11.0, in_system=2, arrivals=2)
    assert engine.next_event(draining) is EventKind.POST_CLOSE_DEPARTURE
    drained = EngineState(t=11.0, t_arrival=12.0, in_system=0, arrivals=2, departures=2)
    assert engine.next_event(drained) is EventKind.TERMINATE


def test_arrival_limit_stops_admissions():
    result = make_engine([0.5], arrival_limit=3).run()

    assert result.final_state.arrivals == 3
    assert result.final_state.departures == 3
    assert result.statistics.idle_time == pytest.approx(10.0 - 3 * SERVICE_TIME)


def test_sampling_domain_error_surfaces_from_run():
    engine = make_engine([0.9], service_rate=1.0, rate=1.0)
    with pytest.raises(SamplingDomainError):
        engine.run()


def test_run_twice_raises():
    engine = make_engine([0.5])
    engine.run()
    with pytest.raises(RuntimeError):
        engine.run()
    with pytest.raises(RuntimeError):
        engine.step()


def test_result_before_termination_raises():
    engine = make_engine([0.5])
    engine.step()
    with pytest.raises(RuntimeError):
        engine.result()


def reference_engine(seed):
    return SimulationEngine(7.0, 23.0, 6.0, 10.0, reference_intensity, NumpyRandomSource(seed))


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_invariants_hold_at_every_step(seed):
    engine = reference_engine(seed)
    engine.start()
    engine.check_invariants()
    while engine.state.phase is not Phase.TERMINATED:
        engine.step()
        engine.check_invariants()

    result = engine.result()
    arrivals = [e.time for e in result.events if e.kind is EventKind.ARRIVAL]
    departures = [e.time for e in result.events if e.kind is not EventKind.ARRIVAL]
    assert arrivals == sorted(arrivals)
    assert departures == sorted(departures)
    assert len(arrivals) == len(departures) == len(result.clients)
    assert all(7.0 < t <= 23.0 for t in arrivals)

    stats = result.statistics
    assert 0.0 <= stats.utilization <= 1.0
    assert stats.idle_time + stats.busy_time() == pytest.approx(23.0 - 7.0)
    assert stats.tail_overrun >= 0.0
    assert stats.served_clients == stats.total_clients


def test_identical_inputs_give_identical_runs():
    first = reference_engine(11).run()
    second = reference_engine(11).run()
    assert first.as_dict() == second.as_dict()
    assert repr(first.events) == repr(second.events)


def test_heavy_load_builds_a_queue():
    # Service rate 2.1 gives long services relative to the peak arrival rate.
    result = SimulationEngine(7.0, 23.0, 6.0, 2.1, reference_intensity, NumpyRandomSource(5)).run()
    assert result.statistics.max_queue_length > 1
    assert result.statistics.mean_waiting_time > 0.0
    for client in result.clients:
        assert client.service_start_time >= client.arrival_time
        assert client.system_time() == pytest.approx(client.waiting_time() + client.service_time())


def test_source_of_zero_draws_ends_without_arrivals():
    # A zero draw makes the first candidate step infinite, so nobody arrives.
    result = make_engine([0.0]).run()

    assert result.final_state.arrivals == 0
    assert result.final_state.t_arrival == np.inf
    assert result.statistics.idle_time == pytest.approx(10.0)
    assert result.statistics.utilization == pytest.approx(0.0)


def test_result_serializes_as_strict_json():
    result = make_engine([0.5]).run()
    data = json.loads(json.dumps(result.as_dict(), allow_nan=False))
    assert data['final_state']['t_departure'] is None
    assert data['final_state']['phase'] == 'terminated'


def test_check_invariants_reports_inconsistent_state():
    engine = make_engine([0.5])
    engine.start()
    engine.check_invariants()
    with pytest.raises(RuntimeError):
        engine.check_invariants(EngineState(t=0.0, t_arrival=1.0, in_system=1, arrivals=1))
    with pytest.raises(RuntimeError):
        engine.check_invariants(EngineState(t=0.0, t_arrival=1.0, in_system=1, arrivals=0))
