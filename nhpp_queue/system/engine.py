"""Single-server simulation engine driven by a nonhomogeneous Poisson arrival process."""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

import numpy as np

from nhpp_queue.core import (
    Client,
    ClientRegistry,
    EngineState,
    EventKind,
    EventRecord,
    Phase,
    WaitingLine,
)
from nhpp_queue.distributions.intensity import reference_intensity
from nhpp_queue.distributions.random_variables import (
    ArrivalProcessGenerator,
    NumpyRandomSource,
    RandomSource,
    ServiceTimeGenerator,
)
from nhpp_queue.system.statistics import SimulationStatistics, StatisticsCollector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """Read-only outputs of a finished run."""
    window_start: float
    window_close: float
    events: List[EventRecord]
    clients: List[Client]
    statistics: SimulationStatistics
    final_state: EngineState
    acceptance_rate: float

    def as_dict(self) -> Dict:
        return {
            'window_start': self.window_start,
            'window_close': self.window_close,
            'statistics': self.statistics.as_dict(),
            'final_state': self.final_state.as_dict(),
            'acceptance_rate': self.acceptance_rate,
            'events': [e.as_dict() for e in self.events],
            'clients': [c.as_dict() for c in self.clients],
        }


class SimulationEngine:
    """Event-scheduling loop for one server and one FIFO waiting line.

    At every step the pending arrival ``t_arrival``, the pending departure
    ``t_departure`` and the window close are compared:

    * arrival, if ``t_arrival <= t_departure`` and the arrival falls inside the
      window (arrivals win ties with departures);
    * departure, if ``t_departure`` falls inside the window;
    * post-close departure, if the window is over but clients remain;
    * otherwise the run terminates.
    """

    def __init__(self,
                 window_start: float,
                 window_close: float,
                 max_arrival_rate: float,
                 service_rate: float,
                 intensity: Callable[[float], float] = reference_intensity,
                 source: Optional[RandomSource] = None,
                 arrival_limit: Optional[int] = None):
        if window_close <= window_start:
            raise ValueError(
                f"window_close ({window_close}) must be greater than window_start ({window_start})"
            )
        if max_arrival_rate <= 0:
            raise ValueError(f"max_arrival_rate must be > 0, got {max_arrival_rate}")
        if arrival_limit is not None and arrival_limit < 0:
            raise ValueError("arrival_limit must be >= 0")

        self.window_start = window_start
        self.window_close = window_close
        self.arrival_limit = arrival_limit
        self.source = source if source is not None else NumpyRandomSource()
        self.arrival_generator = ArrivalProcessGenerator(max_arrival_rate, intensity, self.source)
        self.service_generator = ServiceTimeGenerator(service_rate, self.source)

        self.clients = ClientRegistry()
        self.waiting_line = WaitingLine()
        self.statistics = StatisticsCollector()
        self.state: Optional[EngineState] = None

        self._handlers = {
            EventKind.ARRIVAL: self._handle_arrival,
            EventKind.DEPARTURE: self._handle_departure,
            EventKind.POST_CLOSE_DEPARTURE: self._handle_post_close_departure,
            EventKind.TERMINATE: self._terminate,
        }

    # -------------------- driving the loop --------------------

    def start(self) -> EngineState:
        """Schedule the first arrival and return the initial state."""
        if self.state is not None:
            raise RuntimeError("Simulation already started")
        first_arrival = self.arrival_generator.next_arrival(self.window_start)
        self.state = EngineState(t=self.window_start, t_arrival=first_arrival)
        logger.debug("Start at t=%.5f, first arrival scheduled at t=%.5f",
                     self.window_start, first_arrival)
        return self.state

    def next_event(self, state: Optional[EngineState] = None) -> EventKind:
        """Classify the transition the engine takes from ``state``."""
        state = state if state is not None else self.state
        if state is None:
            raise RuntimeError("Simulation not started")
        if state.phase is Phase.TERMINATED:
            raise RuntimeError("Simulation already terminated")

        if state.t_arrival <= state.t_departure and self._arrival_admissible(state):
            return EventKind.ARRIVAL
        if state.t_departure <= self.window_close:
            return EventKind.DEPARTURE
        if state.in_system > 0:
            return EventKind.POST_CLOSE_DEPARTURE
        return EventKind.TERMINATE

    def step(self) -> EventKind:
        """Process exactly one transition and return its kind."""
        if self.state is None:
            self.start()
        kind = self.next_event()
        self.state = self._handlers[kind](self.state)
        return kind

    def run(self) -> SimulationResult:
        """Process events until the window is closed and the server has drained."""
        if self.state is not None and self.state.phase is Phase.TERMINATED:
            raise RuntimeError("Simulation already terminated; create a new engine")
        while self.state is None or self.state.phase is not Phase.TERMINATED:
            self.step()
        return self.result()

    def result(self) -> SimulationResult:
        if self.state is None or self.state.phase is not Phase.TERMINATED:
            raise RuntimeError("Simulation has not terminated yet")
        return SimulationResult(
            window_start=self.window_start,
            window_close=self.window_close,
            events=list(self.statistics.events),
            clients=list(self.clients),
            statistics=self.statistics.summarize(
                self.clients,
                self.window_start,
                self.window_close,
                self.state.idle_time,
                self.state.tail_overrun,
            ),
            final_state=self.state,
            acceptance_rate=self.arrival_generator.acceptance_rate(),
        )

    def check_invariants(self, state: Optional[EngineState] = None) -> None:
        """Raise RuntimeError if the state disagrees with the line and counters."""
        state = state if state is not None else self.state
        if not state.in_system == state.arrivals - state.departures >= 0:
            raise RuntimeError(f"Client count out of balance: {state}")
        if (state.t_departure == np.inf) != (state.in_system == 0):
            raise RuntimeError(f"Pending departure disagrees with occupancy: {state}")
        if len(self.waiting_line) != state.in_system:
            raise RuntimeError(
                f"Waiting line holds {len(self.waiting_line)} clients, state says {state.in_system}")
        head = self.waiting_line.head()
        if head is not None and not (head.in_service and head.departure_time == state.t_departure):
            raise RuntimeError(f"Head of the line is not the client in service: {head}")

    # -------------------- handlers --------------------

    def _arrival_admissible(self, state: EngineState) -> bool:
        if state.t_arrival > self.window_close:
            return False
        if self.arrival_limit is not None and state.arrivals >= self.arrival_limit:
            return False
        return True

    def _handle_arrival(self, state: EngineState) -> EngineState:
        t = state.t_arrival
        arrivals = state.arrivals + 1
        in_system = state.in_system + 1

        client = Client(client_id=arrivals, arrival_time=t)
        self.clients.add(client)
        self.waiting_line.join(client)

        next_arrival = self.arrival_generator.next_arrival(t)

        t_departure = state.t_departure
        if in_system == 1:
            client.begin_service(t, self.service_generator.sample())
            t_departure = client.departure_time

        event = self.statistics.record(EventKind.ARRIVAL, f"Client {arrivals} arrived", t, in_system)
        logger.debug("%s at t=%.5f (n=%d)", event.label, t, in_system)
        return replace(
            state,
            t=t,
            t_arrival=next_arrival,
            t_departure=t_departure,
            in_system=in_system,
            arrivals=arrivals,
        )

    def _handle_departure(self, state: EngineState) -> EngineState:
        return self._complete_departure(state, EventKind.DEPARTURE)

    def _handle_post_close_departure(self, state: EngineState) -> EngineState:
        # No arrivals compete after closing; service continues through the line.
        return self._complete_departure(state, EventKind.POST_CLOSE_DEPARTURE)

    def _complete_departure(self, state: EngineState, kind: EventKind) -> EngineState:
        t = state.t_departure
        departures = state.departures + 1
        in_system = state.in_system - 1

        client = self.waiting_line.pop_head()
        idle_time = state.idle_time + self._idle_gap(client, departures, state.last_departure_time)

        t_departure = np.inf
        if in_system > 0:
            successor = self.waiting_line.head()
            successor.begin_service(t, self.service_generator.sample())
            t_departure = successor.departure_time

        event = self.statistics.record(kind, f"Client {departures} departed", t, in_system)
        logger.debug("%s at t=%.5f (n=%d)", event.label, t, in_system)
        return replace(
            state,
            t=t,
            t_departure=t_departure,
            in_system=in_system,
            departures=departures,
            idle_time=idle_time,
            last_departure_time=t,
            phase=Phase.DRAINING if kind is EventKind.POST_CLOSE_DEPARTURE else state.phase,
        )

    def _idle_gap(self, client: Client, departures: int, last_departure_time: Optional[float]) -> float:
        """Idle time that ended when ``client`` went straight into service."""
        if client.waiting_time() != 0:
            return 0.0
        if departures == 1:
            return client.arrival_time - self.window_start
        return client.arrival_time - last_departure_time

    def _terminate(self, state: EngineState) -> EngineState:
        last_departure = self.clients.last_departure_time(default=self.window_close)
        tail_overrun = max(last_departure - self.window_close, 0.0)

        # Idle stretch between the last in-window departure and closing.
        idle_since = state.last_departure_time
        if idle_since is None:
            idle_since = self.window_start
        closing_idle = max(self.window_close - idle_since, 0.0)

        final = replace(
            state,
            idle_time=state.idle_time + closing_idle,
            tail_overrun=tail_overrun,
            phase=Phase.TERMINATED,
        )
        logger.info(
            "Simulation finished: %d arrivals, %d departures, idle %.5f, overrun %.5f",
            final.arrivals, final.departures, final.idle_time, final.tail_overrun,
        )
        return final
