"""
Metrics Collection and Reporting

Outcome counters owned by the harness and the report it writes at the end
of a run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class BranchStats:
    """
    The four outcome counters of a run.

    "taken"/"not taken" refer to the prediction; correct/incorrect to
    whether it matched the actual outcome.
    """
    taken_correct: int = 0
    taken_incorrect: int = 0
    not_taken_correct: int = 0
    not_taken_incorrect: int = 0

    def record(self, predicted: bool, actual: bool) -> None:
        """Score one prediction."""
        if predicted:
            if actual:
                self.taken_correct += 1
            else:
                self.taken_incorrect += 1
        else:
            if actual:
                self.not_taken_incorrect += 1
            else:
                self.not_taken_correct += 1

    @property
    def total(self) -> int:
        return (self.taken_correct + self.taken_incorrect +
                self.not_taken_correct + self.not_taken_incorrect)

    @property
    def correct(self) -> int:
        return self.taken_correct + self.not_taken_correct

    @property
    def incorrect(self) -> int:
        return self.taken_incorrect + self.not_taken_incorrect

    @property
    def precision(self) -> float:
        """Percentage of correct predictions (0.0 for an empty run)."""
        if self.total == 0:
            return 0.0
        return 100 * self.correct / self.total

    @property
    def accuracy(self) -> float:
        """Fraction of correct predictions (0.0 for an empty run)."""
        if self.total == 0:
            return 0.0
        return self.correct / self.total

    @property
    def mpki(self) -> float:
        """Mispredictions per 1000 branches."""
        if self.total == 0:
            return 0.0
        return (self.incorrect / self.total) * 1000

    def reset(self) -> None:
        self.taken_correct = 0
        self.taken_incorrect = 0
        self.not_taken_correct = 0
        self.not_taken_incorrect = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'taken_correct': self.taken_correct,
            'taken_incorrect': self.taken_incorrect,
            'not_taken_correct': self.not_taken_correct,
            'not_taken_incorrect': self.not_taken_incorrect,
            'total': self.total,
            'precision': self.precision,
            'accuracy': self.accuracy,
            'mpki': self.mpki,
        }

    def format_report(self) -> str:
        """Human-readable report, one counter per line."""
        return "\n".join([
            f"takenCorrect: {self.taken_correct}",
            f"takenIncorrect: {self.taken_incorrect}",
            f"notTakenCorrect: {self.not_taken_correct}",
            f"notTakenIncorrect: {self.not_taken_incorrect}",
            f"Precision: {self.precision:g}",
        ]) + "\n"


@dataclass
class SimulationResults:
    """Container for simulation results."""
    trace_name: str
    predictor_name: str
    branches_simulated: int
    warmup_branches: int
    elapsed_time: float
    stats: BranchStats
    hardware_cost: Dict[str, Any] = field(default_factory=dict)
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            'trace_name': self.trace_name,
            'predictor_name': self.predictor_name,
            'branches_simulated': self.branches_simulated,
            'warmup_branches': self.warmup_branches,
            'elapsed_time': self.elapsed_time,
            'stats': self.stats.to_dict(),
            'hardware_cost': self.hardware_cost,
            'config': self.config
        }

    def get_summary(self) -> str:
        """Get text summary of results."""
        return "\n".join([
            f"Trace: {self.trace_name}",
            f"Predictor: {self.predictor_name}",
            f"Branches: {self.branches_simulated:,}",
            f"Time: {self.elapsed_time:.2f}s",
            f"Precision: {self.stats.precision:.4f}%",
            f"MPKI: {self.stats.mpki:.4f}",
        ])
