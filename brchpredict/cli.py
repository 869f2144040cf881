"""
Command-line front end.

Replays a branch trace through one predictor and writes the outcome report,
or generates a synthetic trace.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .predictors import PRESETS
from .simulation.simulator import BranchSimulator, SimulationConfig
from .trace.parser import SAMPLE_PATTERNS, TraceParser, create_sample_trace
from .utils.helpers import (
    create_predictor_from_config,
    load_config,
    resolve_predictor_config,
    save_results,
    setup_logging,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='brchpredict',
        description='Trace-driven branch direction predictor simulator'
    )
    parser.add_argument('trace', nargs='?',
                        help='Branch trace to replay')
    parser.add_argument('--predictor', '-p', type=str, default='tage',
                        help=f'Predictor name from the config or a preset {sorted(PRESETS)}')
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='YAML file with `predictors` and `simulation` sections')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Report file (default: brchPredict.txt)')
    parser.add_argument('--format', '-f', type=str, default=None,
                        choices=TraceParser.list_supported_formats(),
                        help='Trace format (detected from the file name by default)')
    parser.add_argument('--max-branches', '-n', type=int, default=None,
                        help='Branches to score after warmup')
    parser.add_argument('--warmup', '-w', type=int, default=None,
                        help='Branches used for training only')
    parser.add_argument('--results', type=str, default=None, metavar='PATH',
                        help='Also write the full results (.json, .yaml or .csv)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Show a progress bar')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        help='Logging level')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also log to this file')

    generate = parser.add_argument_group('trace generation')
    generate.add_argument('--generate', type=str, default=None, metavar='PATH',
                          help='Write a synthetic trace to PATH and exit')
    generate.add_argument('--pattern', type=str, default='random', choices=SAMPLE_PATTERNS,
                          help='Synthetic branch pattern')
    generate.add_argument('--branches', type=int, default=10000,
                          help='Number of synthetic branches')
    generate.add_argument('--seed', type=int, default=None,
                          help='Random seed for synthetic traces')
    return parser


def _simulation_config(config: dict, args: argparse.Namespace) -> SimulationConfig:
    settings = dict(config.get('simulation') or {})
    overrides = {
        'output_file': args.output,
        'warmup_branches': args.warmup,
        'max_branches': args.max_branches,
        'verbose': True if args.verbose else None,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return SimulationConfig(**settings)
    except TypeError as e:
        raise ValueError(f"Bad simulation section: {e}") from e


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.log_level, args.log_file)

        if args.generate:
            path = create_sample_trace(args.generate, args.branches, args.pattern, args.seed)
            print(f"Trace written to: {path}")
            return 0

        if not args.trace:
            parser.error("a trace file is required unless --generate is given")

        config = load_config(args.config) if args.config else {}
        predictor = create_predictor_from_config(
            resolve_predictor_config(config, args.predictor)
        )
        sim_config = _simulation_config(config, args)

        simulator = BranchSimulator(predictor, sim_config)
        results = simulator.run(args.trace, trace_format=args.format)
        simulator.write_report()

        if args.results:
            save_results(results.to_dict(), args.results)

    except (ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
