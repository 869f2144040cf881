"""
Branch Prediction Simulator

Trace-driven harness: feeds every resolved branch to a predictor, scores the
prediction and writes the final report.
"""

import logging
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Optional, Union

from tqdm import tqdm

from ..predictors.base import BasePredictor
from ..trace.parser import TraceParser
from ..trace.formats import BranchRecord
from .metrics import BranchStats, SimulationResults

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Configuration for simulation run."""
    warmup_branches: int = 0
    max_branches: Optional[int] = None
    verbose: bool = False
    log_interval: int = 100000
    output_file: str = "brchPredict.txt"

    def __post_init__(self):
        if self.warmup_branches < 0:
            raise ValueError(f"warmup_branches must be non-negative, got {self.warmup_branches}")
        if self.max_branches is not None and self.max_branches < 0:
            raise ValueError(f"max_branches must be non-negative, got {self.max_branches}")
        if self.log_interval < 1:
            raise ValueError(f"log_interval must be at least 1, got {self.log_interval}")


class BranchSimulator:
    """
    Branch Prediction Simulator.

    Owns the outcome counters of one run. Every branch is handled as one
    predict() immediately followed by the matching update().
    """

    def __init__(self, predictor: BasePredictor,
                 config: Union[SimulationConfig, dict, None] = None):
        """
        Initialize simulator.

        Args:
            predictor: Predictor under evaluation
            config: Simulation configuration
        """
        if config is None:
            self.config = SimulationConfig()
        elif isinstance(config, dict):
            self.config = SimulationConfig(**config)
        else:
            self.config = config

        self.predictor = predictor
        self.stats = BranchStats()

        # State
        self.branches_processed = 0
        self.warmup_complete = self.config.warmup_branches == 0

    def process_branch(self, pc: int, taken: bool) -> bool:
        """
        Predict, train and score a single branch.

        Returns:
            The prediction that was made
        """
        prediction = self.predictor.predict(pc)
        self.predictor.update(taken, prediction, pc)

        self.branches_processed += 1
        if self.branches_processed > self.config.warmup_branches:
            if not self.warmup_complete:
                self.warmup_complete = True
                logger.info("Warmup complete after %d branches", self.config.warmup_branches)
            self.stats.record(prediction, taken)

        return prediction

    def run(self, trace_path: Union[str, Path],
            trace_format: Optional[str] = None) -> SimulationResults:
        """
        Run simulation on a trace file.

        Args:
            trace_path: Path to trace file
            trace_format: Optional format hint

        Returns:
            SimulationResults for the run
        """
        trace_path = Path(trace_path)
        parser = TraceParser(format_name=trace_format)

        trace_info = parser.get_trace_info(trace_path)
        logger.info("Simulating %s on %s (format %s, ~%d branches)",
                    self.predictor.name, trace_path.name,
                    trace_info.format, trace_info.estimated_branches)

        limit = None
        if self.config.max_branches is not None:
            limit = self.config.warmup_branches + self.config.max_branches

        records = parser.parse_file(trace_path, max_branches=limit)
        return self._simulate(records, str(trace_path), total=limit)

    def run_on_trace(self, records: Iterable[BranchRecord],
                     name: str = "memory") -> SimulationResults:
        """
        Run simulation on pre-loaded records.

        Args:
            records: Branch records (a BranchTrace or any iterable)
            name: Label used in the results

        Returns:
            SimulationResults
        """
        total = len(records) if hasattr(records, '__len__') else None
        return self._simulate(records, name, total=total)

    def _simulate(self, records: Iterable[BranchRecord], trace_name: str,
                  total: Optional[int] = None) -> SimulationResults:
        self._reset()
        start_time = time.time()

        if self.config.verbose:
            records = tqdm(records, total=total, desc="Simulating", unit="branches")

        limit = None
        if self.config.max_branches is not None:
            limit = self.config.warmup_branches + self.config.max_branches

        for branch in records:
            if limit is not None and self.branches_processed >= limit:
                break

            self.process_branch(branch.pc, branch.taken)

            if self.config.verbose and self.branches_processed % self.config.log_interval == 0:
                tqdm.write(f"Branches: {self.branches_processed:,} | "
                           f"Precision: {self.stats.precision:.2f}%")

        elapsed_time = time.time() - start_time
        results = self._compile_results(trace_name, elapsed_time)
        logger.info("Finished %s: %d branches, precision %.4f%%",
                    trace_name, results.branches_simulated, self.stats.precision)
        return results

    def _reset(self) -> None:
        """Reset simulator and predictor state."""
        self.stats.reset()
        self.predictor.reset()
        self.branches_processed = 0
        self.warmup_complete = self.config.warmup_branches == 0

    def _compile_results(self, trace_name: str, elapsed_time: float) -> SimulationResults:
        """Compile simulation results."""
        return SimulationResults(
            trace_name=trace_name,
            predictor_name=self.predictor.name,
            branches_simulated=self.stats.total,
            warmup_branches=min(self.branches_processed, self.config.warmup_branches),
            elapsed_time=elapsed_time,
            stats=replace(self.stats),
            hardware_cost=self.predictor.get_hardware_cost(),
            config={
                'simulation': dict(vars(self.config)),
                'predictor': self.predictor.config,
            }
        )

    def format_report(self) -> str:
        return self.stats.format_report()

    def write_report(self, path: Union[str, Path, None] = None,
                     echo: bool = True) -> Path:
        """
        Write the final report to a file and, by default, standard output.

        Args:
            path: Report file (defaults to the configured output file)
            echo: Also print the report

        Returns:
            The path written
        """
        report = self.format_report()
        if echo:
            print(report, end="")

        report_path = Path(path or self.config.output_file)
        if report_path.parent != Path('.'):
            report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, 'w') as f:
            f.write(report)

        logger.debug("Report written to %s", report_path)
        return report_path
