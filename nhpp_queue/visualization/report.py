"""
Text report rendering for finished runs.
Consumes the read-only outputs of a run and returns strings; nothing here prints.
"""

from typing import List, Optional, Sequence, Tuple

from nhpp_queue.system.engine import SimulationResult
from nhpp_queue.system.statistics import SimulationStatistics


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render rows as a boxed table with left-aligned columns."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    separator = '+' + '+'.join('-' * (w + 2) for w in widths) + '+'

    def line(cells: Sequence[str]) -> str:
        return '|' + '|'.join(f" {cell:<{w}} " for cell, w in zip(cells, widths)) + '|'

    lines = [separator, line(headers), separator]
    lines.extend(line(row) for row in rows)
    lines.append(separator)
    return '\n'.join(lines)


def render_event_log(result: SimulationResult) -> str:
    rows = [[e.label, f"{e.time:.5f}", str(e.queue_size)] for e in result.events]
    return format_table(['Event', 'Time', 'In system'], rows)


def render_client_table(result: SimulationResult) -> str:
    """One row per client with its arrival, service and departure timings."""
    rows = []
    for c in result.clients:
        rows.append([
            str(c.client_id),
            f"{c.arrival_time:.5f}",
            f"{c.service_start_time:.5f}" if c.service_start_time is not None else '-',
            f"{c.waiting_time():.5f}",
            f"{c.service_time():.5f}",
            f"{c.departure_time:.5f}" if c.departure_time is not None else '-',
            f"{c.system_time():.5f}",
        ])
    headers = ['#', 'Arrival', 'Service start', 'Waiting', 'Service', 'Departure', 'In system']
    return format_table(headers, rows)


def render_statistics(stats: SimulationStatistics, expected_arrivals: Optional[float] = None) -> str:
    lines = [
        "--- Statistics ---",
        f"Clients arrived: {stats.total_clients}",
    ]
    if expected_arrivals is not None:
        lines.append(f"Expected arrivals: {expected_arrivals:.2f}")
    lines.extend([
        f"Closing-time overrun: {stats.tail_overrun:.5f}",
        f"Mean waiting time: {stats.mean_waiting_time:.5f}",
        f"Mean queue length: {stats.mean_queue_length:.2f}",
        f"Mean time in system: {stats.mean_system_time:.5f}",
        f"Server idle time: {stats.idle_time:.5f}",
        f"Server utilization: {stats.utilization:.5f}",
    ])
    return '\n'.join(lines)


def render_ratio_check(violations: List[Tuple[float, float]], max_rate: float) -> str:
    """Summary of the lambda(t)/lambda_max check over the window."""
    if not violations:
        return f"All lambda(t)/lambda_max values lie in [0, 1] (lambda_max={max_rate})"
    lines = [f"lambda(t)/lambda_max outside [0, 1] (lambda_max={max_rate}):"]
    lines.extend(f"  t = {t:.2f}: ratio = {ratio:.3f}" for t, ratio in violations)
    return '\n'.join(lines)


def render_report(result: SimulationResult, expected_arrivals: Optional[float] = None) -> str:
    """Event log, client table and statistics in one block of text."""
    return '\n\n'.join([
        render_event_log(result),
        render_client_table(result),
        render_statistics(result.statistics, expected_arrivals),
    ])
