"""
Tournament Branch Predictor

Selects between two sub-predictors with a meta saturating counter that
tracks which of them has recently been right when the other was wrong.
"""

from typing import Tuple

from .base import BasePredictor
from ..components.counters import SaturatingCounter, two_bit_transition


# Bimodal against gshare, each with 64K entries
TOURNAMENT_DEFAULT = {
    'name': 'Tournament-BHT-GShare',
    'type': 'tournament',
    'meta_width': 2,
    'predictors': [
        {'type': 'bht', 'entries_log': 16},
        {'type': 'global_history', 'ghr_width': 16, 'entries_log': 16, 'hash': 'xor'},
    ],
}


class TournamentPredictor(BasePredictor):
    """
    Two-way tournament predictor.

    The meta counter's top half selects sub-predictor 1, the bottom half
    sub-predictor 0. Both sub-predictors learn every outcome; selection only
    steers the meta counter.
    """

    def __init__(self, predictor0: BasePredictor, predictor1: BasePredictor,
                 meta_width: int = 2):
        super().__init__("Tournament", {
            'predictors': [predictor0.name, predictor1.name],
            'meta_width': meta_width,
        })
        self.predictors: Tuple[BasePredictor, BasePredictor] = (predictor0, predictor1)
        self.meta = SaturatingCounter(meta_width)

    @property
    def selected(self) -> int:
        """Index of the sub-predictor the meta counter currently trusts."""
        return 1 if self.meta.is_taken() else 0

    def predict(self, addr: int) -> bool:
        return self.predictors[self.selected].predict(addr)

    def update(self, taken_actually: bool, taken_predicted: bool, addr: int) -> None:
        correct0 = self.predictors[0].predict(addr) == taken_actually
        correct1 = self.predictors[1].predict(addr) == taken_actually

        # Same fast exit from the midpoint as the 2-bit counter tables
        if correct1 and not correct0:
            two_bit_transition(self.meta, True)
        elif correct0 and not correct1:
            two_bit_transition(self.meta, False)

        self.predictors[0].update(taken_actually, taken_predicted, addr)
        self.predictors[1].update(taken_actually, taken_predicted, addr)

    def reset(self) -> None:
        self.meta.reset()
        for predictor in self.predictors:
            predictor.reset()

    def get_hardware_cost(self) -> dict:
        sub_costs = [p.get_hardware_cost() for p in self.predictors]
        bits = sum(c['total_bits'] for c in sub_costs) + self.meta.width
        return {
            'sub_predictors': sub_costs,
            'meta_bits': self.meta.width,
            'total_bits': bits,
            'total_bytes': bits // 8,
            'total_kb': bits / 8 / 1024,
        }
