"""Single-server queueing simulation with nonhomogeneous Poisson arrivals."""

from nhpp_queue.core import Client, EngineState, EventKind, EventRecord, Phase, WaitingLine
from nhpp_queue.core.errors import IntensityBoundError, SamplingDomainError
from nhpp_queue.config import RunConfig
from nhpp_queue.system import SimulationEngine, SimulationResult, SimulationStatistics

__all__ = [
    'Client',
    'EngineState',
    'EventKind',
    'EventRecord',
    'Phase',
    'WaitingLine',
    'IntensityBoundError',
    'SamplingDomainError',
    'RunConfig',
    'SimulationEngine',
    'SimulationResult',
    'SimulationStatistics',
]
