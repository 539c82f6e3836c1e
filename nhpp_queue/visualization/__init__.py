"""Reporting and visualization utilities for simulation runs."""

from .plotting import (
    plot_queue_length,
    plot_client_timeline,
    plot_waiting_time_distribution,
    plot_intensity_profile,
    create_performance_report
)
from .report import (
    format_table,
    render_event_log,
    render_client_table,
    render_statistics,
    render_ratio_check,
    render_report
)

__all__ = [
    'plot_queue_length',
    'plot_client_timeline',
    'plot_waiting_time_distribution',
    'plot_intensity_profile',
    'create_performance_report',
    'format_table',
    'render_event_log',
    'render_client_table',
    'render_statistics',
    'render_ratio_check',
    'render_report'
]
