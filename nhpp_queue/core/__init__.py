"""Core components of the queueing system."""

from .base import Client, ClientRegistry, EngineState, EventKind, EventRecord, Phase
from .errors import IntensityBoundError, SamplingDomainError
from .queue import WaitingLine

__all__ = [
    'Client',
    'ClientRegistry',
    'EngineState',
    'EventKind',
    'EventRecord',
    'Phase',
    'IntensityBoundError',
    'SamplingDomainError',
    'WaitingLine',
]
