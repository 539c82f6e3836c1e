"""
Visualization utilities for simulation runs.
"""

import matplotlib.pyplot as plt
import numpy as np
from typing import Callable, Optional
import seaborn as sns

from nhpp_queue.core.base import EventKind
from nhpp_queue.system.engine import SimulationResult


def plot_queue_length(result: SimulationResult, ax=None):
    """Step plot of the number of clients in the system after each event."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 5))
    else:
        fig = ax.figure

    times = [result.window_start] + [e.time for e in result.events]
    sizes = [0] + [e.queue_size for e in result.events]
    ax.step(times, sizes, where='post', color='steelblue')

    ax.axvline(result.window_close, color='red', linestyle='--', label='Closing time')
    ax.axhline(result.statistics.mean_queue_length, color='gray', linestyle=':',
               label=f"Mean = {result.statistics.mean_queue_length:.2f}")
    ax.set_xlabel('Time')
    ax.set_ylabel('Clients in system')
    ax.set_title('Clients in System Over Time')
    ax.legend()
    ax.grid(True, alpha=0.3)
    return fig


def plot_client_timeline(result: SimulationResult, max_clients: int = 50, ax=None):
    """Gantt-like chart of waiting and service intervals for the first clients."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 6))
    else:
        fig = ax.figure

    clients = [c for c in result.clients if c.departure_time is not None][:max_clients]
    for i, c in enumerate(clients):
        ax.barh(i, c.waiting_time(), left=c.arrival_time, height=0.5,
                color='orange', label='Waiting' if i == 0 else "")
        ax.barh(i, c.service_time(), left=c.service_start_time, height=0.5,
                color='seagreen', label='Service' if i == 0 else "")

    ax.axvline(result.window_close, color='red', linestyle='--')
    ax.set_yticks(range(len(clients)))
    ax.set_yticklabels([str(c.client_id) for c in clients])
    ax.set_xlabel('Time')
    ax.set_ylabel('Client')
    ax.set_title('Client Timeline')
    if clients:
        ax.legend()
    return fig


def plot_waiting_time_distribution(result: SimulationResult, ax=None):
    """Histogram of client waiting times."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))
    else:
        fig = ax.figure

    waits = np.array([c.waiting_time() for c in result.clients])
    if len(waits):
        sns.histplot(waits, bins=30, ax=ax, color='steelblue')
        ax.axvline(result.statistics.mean_waiting_time, color='red', linestyle='--',
                   label=f"Mean = {result.statistics.mean_waiting_time:.3f}")
        ax.legend()
    else:
        ax.text(0.5, 0.5, 'No Waiting Time Data',
                ha='center', va='center', transform=ax.transAxes)
    ax.set_xlabel('Waiting time')
    ax.set_title('Waiting Time Distribution')
    return fig


def plot_intensity_profile(intensity: Callable[[float], float],
                           max_rate: float,
                           start: float,
                           finish: float,
                           result: Optional[SimulationResult] = None,
                           ax=None):
    """Plot lambda(t) against the dominating rate, with arrival instants as a rug."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 5))
    else:
        fig = ax.figure

    times = np.linspace(start, finish, 500)
    ax.plot(times, [intensity(float(t)) for t in times], label='lambda(t)')
    ax.axhline(max_rate, color='red', linestyle='--', label='lambda_max')

    if result is not None:
        arrivals = [e.time for e in result.events if e.kind == EventKind.ARRIVAL]
        sns.rugplot(x=arrivals, ax=ax, color='black', height=0.05)

    ax.set_xlabel('Time')
    ax.set_ylabel('Arrival rate')
    ax.set_title('Arrival Intensity')
    ax.legend()
    ax.grid(True, alpha=0.3)
    return fig


def create_performance_report(result: SimulationResult,
                              intensity: Callable[[float], float],
                              max_rate: float,
                              save_path: Optional[str] = None):
    """Create a performance report with the run's main visualizations."""
    fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(16, 10))
    fig.suptitle('Queueing System Performance', fontsize=16)

    plot_intensity_profile(intensity, max_rate, result.window_start, result.window_close,
                           result=result, ax=ax1)
    plot_queue_length(result, ax=ax2)
    plot_client_timeline(result, ax=ax3)
    plot_waiting_time_distribution(result, ax=ax4)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')

    return fig
