"""Base data model for the single-server queueing system."""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Optional


class EventKind(str, Enum):
    """Transitions the engine can take from a given state."""
    ARRIVAL = 'arrival'
    DEPARTURE = 'departure'
    POST_CLOSE_DEPARTURE = 'post_close_departure'
    TERMINATE = 'terminate'


class Phase(str, Enum):
    OPEN = 'open'
    DRAINING = 'draining'
    TERMINATED = 'terminated'


@dataclass
class Client:
    """A client flowing through the system.

    Created on arrival with only ``arrival_time`` set; ``begin_service`` fills in
    the service start and departure instants exactly once.
    """
    client_id: int
    arrival_time: float
    service_start_time: Optional[float] = None
    departure_time: Optional[float] = None

    @property
    def in_service(self) -> bool:
        return self.service_start_time is not None

    def begin_service(self, start_time: float, duration: float) -> None:
        """Place the client in service at ``start_time`` for ``duration`` time units."""
        if self.service_start_time is not None:
            raise RuntimeError(f"Client {self.client_id} already started service")
        self.service_start_time = start_time
        self.departure_time = start_time + duration

    def waiting_time(self) -> float:
        """Time spent in line before service (0.0 until service starts)."""
        if self.service_start_time is None:
            return 0.0
        return max(0.0, self.service_start_time - self.arrival_time)

    def service_time(self) -> float:
        if self.service_start_time is None or self.departure_time is None:
            return 0.0
        return self.departure_time - self.service_start_time

    def system_time(self) -> float:
        """Total time between arrival and departure."""
        if self.departure_time is None:
            return 0.0
        return self.departure_time - self.arrival_time

    def as_dict(self) -> Dict[str, Optional[float]]:
        record = asdict(self)
        record['waiting_time'] = self.waiting_time()
        record['service_time'] = self.service_time()
        record['system_time'] = self.system_time()
        return record


@dataclass(frozen=True)
class EventRecord:
    """One entry of the event log: what happened, when, and the size of the system after it."""
    kind: EventKind
    label: str
    time: float
    queue_size: int

    def as_dict(self) -> Dict[str, object]:
        return {
            'kind': self.kind.value,
            'label': self.label,
            'time': self.time,
            'queue_size': self.queue_size,
        }


@dataclass(frozen=True)
class EngineState:
    """Scheduling state of the engine.

    Handlers never mutate a state; they return a new one.
    ``t_departure`` is ``inf`` exactly when ``in_system == 0``.
    """
    t: float
    t_arrival: float
    t_departure: float = float('inf')
    in_system: int = 0
    arrivals: int = 0
    departures: int = 0
    idle_time: float = 0.0
    tail_overrun: float = 0.0
    last_departure_time: Optional[float] = None
    phase: Phase = Phase.OPEN

    @property
    def server_busy(self) -> bool:
        return self.in_system > 0

    def as_dict(self) -> Dict[str, object]:
        """Plain mapping; infinite times (nothing pending) become None."""
        record = asdict(self)
        for key in ('t_arrival', 't_departure'):
            if math.isinf(record[key]):
                record[key] = None
        record['phase'] = self.phase.value
        return record


@dataclass
class ClientRegistry:
    """Append-only, arrival-ordered record of every client the engine has admitted."""
    clients: list = field(default_factory=list)

    def add(self, client: Client) -> None:
        self.clients.append(client)

    def __len__(self) -> int:
        return len(self.clients)

    def __iter__(self):
        return iter(self.clients)

    def __getitem__(self, index):
        return self.clients[index]

    def last_departure_time(self, default: float) -> float:
        """Largest scheduled departure among all clients, or ``default`` when there is none."""
        times = [c.departure_time for c in self.clients if c.departure_time is not None]
        if not times:
            return default
        return max(times)
