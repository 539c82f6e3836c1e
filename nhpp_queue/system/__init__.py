"""Simulation engine and run statistics."""

from .engine import SimulationEngine, SimulationResult
from .statistics import SimulationStatistics, StatisticsCollector

__all__ = [
    'SimulationEngine',
    'SimulationResult',
    'SimulationStatistics',
    'StatisticsCollector',
]
