#!/usr/bin/env python3
"""Command-line interface for running queueing simulations."""

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

import numpy as np
from scipy import stats

from nhpp_queue.config import PROFILES, RunConfig
from nhpp_queue.core.errors import IntensityBoundError, SamplingDomainError
from nhpp_queue.distributions.intensity import check_intensity_ratio, expected_arrivals
from nhpp_queue.distributions.random_variables import NumpyRandomSource, RandomSource
from nhpp_queue.system.engine import SimulationEngine, SimulationResult
from nhpp_queue.visualization.report import (
    render_client_table,
    render_event_log,
    render_ratio_check,
    render_statistics,
)

logger = logging.getLogger(__name__)


def create_engine(config: RunConfig, source: Optional[RandomSource] = None) -> SimulationEngine:
    """Create an engine for the given configuration."""
    if source is None:
        source = NumpyRandomSource(config.seed)
    return SimulationEngine(
        window_start=config.window_start,
        window_close=config.window_close,
        max_arrival_rate=config.max_arrival_rate,
        service_rate=config.service_rate,
        intensity=config.intensity(),
        source=source,
        arrival_limit=config.arrival_limit,
    )


def run_simulation(config: RunConfig, random_seed: Optional[int] = None) -> SimulationResult:
    """Run a single simulation and return its result."""
    if random_seed is not None:
        config = config.with_overrides(seed=random_seed)
    logger.info("Running %s profile over [%s, %s] with seed %s",
                config.profile, config.window_start, config.window_close, config.seed)
    return create_engine(config).run()


def run_replications(config: RunConfig,
                     num_replications: int,
                     base_seed: int = 42,
                     confidence: float = 0.95) -> Dict:
    """Run multiple replications and compute statistics."""
    if num_replications < 1:
        raise ValueError("num_replications must be >= 1")

    results = [run_simulation(config, base_seed + i).statistics.as_dict()
               for i in range(num_replications)]

    summary = {
        'replications': num_replications,
        'window_start': config.window_start,
        'window_close': config.window_close,
        'confidence': confidence,
        'statistics': {},
    }

    for key in results[0]:
        values = np.array([r[key] for r in results], dtype=float)
        if num_replications > 1:
            sem = np.std(values, ddof=1) / np.sqrt(num_replications)
            half_width = float(stats.t.ppf((1 + confidence) / 2, num_replications - 1) * sem)
        else:
            half_width = 0.0
        summary['statistics'][key] = {
            'mean': float(np.mean(values)),
            'std': float(np.std(values)),
            'min': float(np.min(values)),
            'max': float(np.max(values)),
            'half_width': half_width,
        }

    return summary


def save_results(results: Dict, output_path: str) -> None:
    """Save results to JSON file."""
    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2)


def print_results(result: SimulationResult, config: RunConfig, detailed: bool = False) -> None:
    """Print a single run to the console."""
    if detailed:
        print(render_event_log(result))
        print()
        print(render_client_table(result))
        print()
    expected = expected_arrivals(config.intensity(), config.window_start, config.window_close)
    print(render_statistics(result.statistics, expected))


def print_replications(summary: Dict, detailed: bool = False) -> None:
    print("\n=== Simulation Results ===")
    print(f"Replications: {summary['replications']}")
    print(f"Window: [{summary['window_start']}, {summary['window_close']}]")
    for metric, values in summary['statistics'].items():
        print(f"  {metric}:")
        print(f"    Mean: {values['mean']:.4f} (±{values['half_width']:.4f})")
        if detailed:
            print(f"    Std: {values['std']:.4f}, Min: {values['min']:.4f}, Max: {values['max']:.4f}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Simulate a single-server queue with time-varying Poisson arrivals')

    parser.add_argument('profile', nargs='?', choices=PROFILES,
                        help='Arrival intensity profile (default: reference)')

    parser.add_argument('--config', type=str,
                        help='JSON configuration file; command-line values override it')
    parser.add_argument('--start', type=float, help='Window start (default: 7)')
    parser.add_argument('--close', type=float, help='Window close (default: 23)')
    parser.add_argument('--max-rate', type=float,
                        help='Dominating arrival rate lambda_max (default: 6)')
    parser.add_argument('--service-rate', type=float,
                        help='Service rate parameter (default: 10)')
    parser.add_argument('--rate', type=float,
                        help='Arrival rate for the constant profile (default: 0.5)')
    parser.add_argument('--limit', type=int,
                        help='Stop admitting arrivals after this many clients')
    parser.add_argument('-r', '--replications', type=int, default=1,
                        help='Number of replications (default: 1)')
    parser.add_argument('-s', '--seed', type=int,
                        help='Random seed (default: 42)')
    parser.add_argument('--allow-ratio-violations', action='store_true',
                        help='Run even if lambda_max does not bound lambda(t)')

    parser.add_argument('-o', '--output', type=str,
                        help='Output file for results (JSON)')
    parser.add_argument('-p', '--plot', action='store_true',
                        help='Show plots')
    parser.add_argument('--plot-file', type=str,
                        help='Save plots to file')
    parser.add_argument('-d', '--detailed', action='store_true',
                        help='Print the event log and client table')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Suppress console output')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Log progress (-v) or every event (-vv)')
    return parser


def load_config(args: argparse.Namespace) -> RunConfig:
    config = RunConfig.from_json(args.config) if args.config else RunConfig()
    return config.with_overrides(
        profile=args.profile,
        window_start=args.start,
        window_close=args.close,
        max_arrival_rate=args.max_rate,
        service_rate=args.service_rate,
        constant_rate=args.rate,
        arrival_limit=args.limit,
        seed=args.seed,
    ).validate()


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    try:
        config = load_config(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        check_intensity_ratio(config.intensity(), config.max_arrival_rate,
                              config.window_start, config.window_close,
                              config.ratio_check_step)
        if not args.quiet:
            print(render_ratio_check([], config.max_arrival_rate))
    except IntensityBoundError as e:
        print(render_ratio_check(e.violations, e.max_rate), file=sys.stderr)
        if not args.allow_ratio_violations:
            sys.exit(2)
        logger.warning("Running with lambda_max=%s despite %d ratio violations",
                       e.max_rate, len(e.violations))

    try:
        if args.replications > 1:
            summary = run_replications(config, args.replications, config.seed or 0)
            if not args.quiet:
                print_replications(summary, args.detailed)
            output = summary
            result = None
        else:
            result = run_simulation(config)
            if not args.quiet:
                print_results(result, config, args.detailed)
            output = {'config': config.as_dict(), **result.as_dict()}
    except SamplingDomainError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.output:
        save_results(output, args.output)
        if not args.quiet:
            print(f"\nResults saved to: {args.output}")

    if args.plot or args.plot_file:
        from nhpp_queue.visualization.plotting import create_performance_report

        if result is None:
            print("\nRunning additional simulation for plotting...")
            result = run_simulation(config)

        create_performance_report(result, config.intensity(), config.max_arrival_rate,
                                  save_path=args.plot_file)
        if args.plot_file and not args.quiet:
            print(f"Plot saved to: {args.plot_file}")

        if args.plot:
            import matplotlib.pyplot as plt
            plt.show()


if __name__ == '__main__':
    main()
