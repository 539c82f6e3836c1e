"""Run statistics: per-event samples and the aggregate figures derived from them."""

from dataclasses import dataclass, asdict
from typing import Dict, List, Sequence

import numpy as np

from nhpp_queue.core.base import Client, EventKind, EventRecord


@dataclass(frozen=True)
class SimulationStatistics:
    """Aggregate performance figures of one run."""
    total_clients: int
    served_clients: int
    mean_waiting_time: float
    mean_service_time: float
    mean_system_time: float
    mean_queue_length: float
    max_queue_length: int
    utilization: float
    idle_time: float
    tail_overrun: float
    window_length: float

    def busy_time(self) -> float:
        """Window time the server spent busy according to the idle accounting."""
        return self.utilization * self.window_length

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def _mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


class StatisticsCollector:
    """Accumulates the event log and queue-size samples while the engine runs."""

    def __init__(self):
        self.events: List[EventRecord] = []
        self.queue_sizes: List[int] = []

    def record(self, kind: EventKind, label: str, time: float, queue_size: int) -> EventRecord:
        """Record one event and the number of clients in the system after it."""
        event = EventRecord(kind=kind, label=label, time=time, queue_size=queue_size)
        self.events.append(event)
        self.queue_sizes.append(queue_size)
        return event

    def reset(self) -> None:
        self.events.clear()
        self.queue_sizes.clear()

    def event_times(self, kind: EventKind) -> List[float]:
        return [e.time for e in self.events if e.kind == kind]

    def summarize(self,
                  clients: Sequence[Client],
                  window_start: float,
                  window_close: float,
                  idle_time: float,
                  tail_overrun: float) -> SimulationStatistics:
        """Derive aggregate statistics from the recorded samples and client records."""
        window_length = window_close - window_start
        served = [c for c in clients if c.departure_time is not None]
        return SimulationStatistics(
            total_clients=len(clients),
            served_clients=len(served),
            mean_waiting_time=_mean([c.waiting_time() for c in clients]),
            mean_service_time=_mean([c.service_time() for c in served]),
            mean_system_time=_mean([c.system_time() for c in clients]),
            mean_queue_length=_mean(self.queue_sizes),
            max_queue_length=max(self.queue_sizes, default=0),
            utilization=(window_length - idle_time) / window_length,
            idle_time=idle_time,
            tail_overrun=tail_overrun,
            window_length=window_length,
        )
