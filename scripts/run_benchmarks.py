#!/usr/bin/env python3
"""
Multi-trace benchmark runner for branch prediction evaluation.

Runs every configured predictor over every trace in a directory and
generates a comparison report.
"""

import argparse
import multiprocessing
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path

from brchpredict.predictors import PRESETS
from brchpredict.simulation.simulator import BranchSimulator, SimulationConfig
from brchpredict.utils.helpers import create_predictor_from_config, load_config, save_results

TRACE_PATTERNS = ('*.txt', '*.trace', '*.bin', '*.gz', '*.xz', '*.bz2', '*.lzma')


def find_traces(base_dir: Path) -> list:
    """Find all trace files below a directory."""
    traces = set()
    for pattern in TRACE_PATTERNS:
        traces.update(base_dir.rglob(pattern))
    return sorted(traces)


def run_benchmark(trace_path: Path, predictor_configs: dict,
                  warmup: int, branches: int) -> dict:
    """Run every predictor on a single trace."""
    sim_config = SimulationConfig(warmup_branches=warmup, max_branches=branches)

    results = {}
    elapsed = 0.0
    for name, pred_config in predictor_configs.items():
        simulator = BranchSimulator(create_predictor_from_config(pred_config), sim_config)
        run = simulator.run(trace_path)
        elapsed += run.elapsed_time
        results[name] = {
            'precision': run.stats.precision,
            'mpki': run.stats.mpki,
            'mispredictions': run.stats.incorrect,
            'branches': run.branches_simulated,
            'total_kb': run.hardware_cost.get('total_kb', 0),
        }

    return {
        'trace': trace_path.name,
        'time': elapsed,
        'predictors': results,
    }


def _run_benchmark_worker(args: tuple) -> dict:
    """Worker function for parallel benchmark execution."""
    trace_path, predictor_configs, warmup, branches = args
    try:
        result = run_benchmark(trace_path, predictor_configs, warmup, branches)
        result['success'] = True
        return result
    except (ValueError, OSError) as e:
        return {
            'trace': trace_path.name,
            'success': False,
            'error': str(e)
        }


def run_all_benchmarks(traces: list, predictor_configs: dict,
                       warmup: int, branches: int,
                       num_workers: int = None) -> dict:
    """Run benchmarks on all traces in parallel."""
    if num_workers is None:
        num_workers = max(1, multiprocessing.cpu_count() - 1)

    all_results = {
        'timestamp': datetime.now().isoformat(),
        'config': {
            'warmup': warmup,
            'branches': branches,
            'num_workers': num_workers,
            'predictors': predictor_configs,
        },
        'traces': []
    }

    total = len(traces)
    print(f"\nRunning {total} traces with {num_workers} parallel workers...")
    print("=" * 60)

    completed = 0
    start_time = time.time()

    with ProcessPoolExecutor(max_workers=num_workers) as executor:
        future_to_trace = {
            executor.submit(_run_benchmark_worker,
                            (trace, predictor_configs, warmup, branches)): trace
            for trace in traces
        }

        for future in as_completed(future_to_trace):
            completed += 1
            result = future.result()

            if result['success']:
                all_results['traces'].append(result)
                best = max(result['predictors'].items(),
                           key=lambda x: x[1]['precision'])
                print(f"[{completed}/{total}] {result['trace']}: "
                      f"Best: {best[0]} ({best[1]['precision']:.2f}%)")
            else:
                print(f"[{completed}/{total}] {result['trace']}: Error - {result['error']}")

    elapsed = time.time() - start_time
    print(f"\nCompleted {completed} traces in {elapsed:.1f}s")

    return all_results


def print_summary(results: dict) -> None:
    """Print average precision per predictor."""
    totals = {}
    for trace_result in results.get('traces', []):
        for name, stats in trace_result['predictors'].items():
            entry = totals.setdefault(name, {'precision': 0.0, 'mpki': 0.0, 'count': 0})
            entry['precision'] += stats['precision']
            entry['mpki'] += stats['mpki']
            entry['count'] += 1

    print("\n" + "=" * 70)
    print("OVERALL AVERAGES")
    print("=" * 70)

    for name, entry in sorted(totals.items(), key=lambda x: -x[1]['precision']):
        count = entry['count']
        print(f"{name:24}: Avg Precision: {entry['precision'] / count:7.3f}% | "
              f"Avg MPKI: {entry['mpki'] / count:8.2f}")


def main():
    parser = argparse.ArgumentParser(description='Run multi-trace benchmarks')
    parser.add_argument('--trace-dir', '-d', type=str, default='traces',
                        help='Directory containing trace files')
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='YAML config with a `predictors` section (default: presets)')
    parser.add_argument('--warmup', '-w', type=int, default=0,
                        help='Warmup branches')
    parser.add_argument('--branches', '-n', type=int, default=None,
                        help='Scored branches per trace (default: whole trace)')
    parser.add_argument('--workers', '-j', type=int, default=None,
                        help='Number of parallel workers (default: CPU count - 1)')
    parser.add_argument('--output', '-o', type=str, default='results/benchmark.json',
                        help='Output file (.json, .yaml or .csv)')

    args = parser.parse_args()

    trace_dir = Path(args.trace_dir)
    if not trace_dir.exists():
        print(f"Error: Trace directory not found: {trace_dir}")
        sys.exit(1)

    if args.config:
        predictor_configs = load_config(args.config).get('predictors') or {}
    else:
        predictor_configs = dict(PRESETS)

    traces = find_traces(trace_dir)
    if not traces:
        print(f"No traces found in {trace_dir}")
        sys.exit(1)

    results = run_all_benchmarks(traces, predictor_configs,
                                 args.warmup, args.branches, args.workers)
    print_summary(results)

    output_path = save_results(results, args.output)

    print(f"\nResults saved to: {output_path}")


if __name__ == '__main__':
    main()
