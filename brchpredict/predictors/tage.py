"""
TAGE Branch Predictor

TAgged GEometric history length predictor built from the framework's own
pieces:
- Table 0: bimodal (BHT) base predictor, always provides a prediction
- Tables 1..N-1: global-history predictors whose history widths grow
  geometrically by a factor alpha
- One row of usefulness counters per tagged table, aged periodically

The provider is the longest-history table whose tag matches; the alternate
provider is the previous match (or the base). Both are recorded by predict()
and consumed by the following update().
"""

import logging
from typing import List, Union

import numpy as np

from .base import BasePredictor, BHTPredictor, GlobalHistoryPredictor
from ..components.hashing import HashFunction, get_hash_function, hash_name, truncate
from ..components.history import MAX_HISTORY_WIDTH

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Presets
# ============================================================================

TAGE_DEFAULT = {
    'name': 'TAGE-5T',
    'type': 'tage',
    'tnum': 5,
    'base_entries_log': 10,
    't1_ghr_width': 4,
    'alpha': 2,
    'entries_log': 12,
    'counter_width': 2,
    'reset_period': 256 * 1024,
    'hash': 'xor',
    'tag_hash': 'xor1',
}

TAGE_SMALL = {
    'name': 'TAGE-3T',
    'type': 'tage',
    'tnum': 3,
    'base_entries_log': 8,
    't1_ghr_width': 4,
    'alpha': 2,
    'entries_log': 10,
    'counter_width': 3,
    'reset_period': 64 * 1024,
    'hash': 'xor',
    'tag_hash': 'xnor',
}

USEFUL_MAX = np.iinfo(np.uint8).max


def geometric_history_widths(t1_ghr_width: int, alpha: float, count: int) -> List[int]:
    """
    History widths for `count` tagged tables.

    Each width is the previous one multiplied by alpha and truncated.
    """
    widths = []
    width = t1_ghr_width
    for _ in range(count):
        widths.append(width)
        width = int(width * alpha)
    return widths


class TAGEPredictor(BasePredictor):
    """
    TAGE predictor over BHT / global-history sub-predictors.
    """

    def __init__(self, tnum: int, base_entries_log: int, t1_ghr_width: int,
                 alpha: float, entries_log: int, counter_width: int = 2,
                 reset_period: int = 256 * 1024,
                 hash_fn: Union[str, HashFunction] = 'xor',
                 tag_hash: Union[str, HashFunction] = 'xor1',
                 base_counter_width: int = 2):
        """
        Args:
            tnum: Number of tables, base included
            base_entries_log: Log2 of the base BHT size
            t1_ghr_width: History width of table 1
            alpha: Geometric growth factor of the history widths
            entries_log: Log2 of each tagged table's size
            counter_width: Counter width of the tagged tables
            reset_period: Updates between usefulness resets
            hash_fn: Index hash of the tagged tables
            tag_hash: Second hash used to check tag hits
            base_counter_width: Counter width of the base BHT
        """
        if tnum < 1:
            raise ValueError(f"TAGE needs at least the base table, got tnum={tnum}")
        if alpha <= 0:
            raise ValueError(f"alpha must be positive, got {alpha}")
        if reset_period < 1:
            raise ValueError(f"reset_period must be at least 1, got {reset_period}")

        self.hash_fn = get_hash_function(hash_fn)
        self.tag_hash = get_hash_function(tag_hash)

        self.history_widths = geometric_history_widths(t1_ghr_width, alpha, tnum - 1)
        for shorter, longer in zip(self.history_widths, self.history_widths[1:]):
            if longer <= shorter:
                raise ValueError(
                    f"History widths must strictly increase, got {self.history_widths} "
                    f"(t1_ghr_width={t1_ghr_width}, alpha={alpha})"
                )
        if self.history_widths and self.history_widths[-1] > MAX_HISTORY_WIDTH:
            raise ValueError(
                f"Longest history {self.history_widths[-1]} exceeds {MAX_HISTORY_WIDTH} bits"
            )

        super().__init__("TAGE", {
            'tnum': tnum,
            'base_entries_log': base_entries_log,
            't1_ghr_width': t1_ghr_width,
            'alpha': alpha,
            'entries_log': entries_log,
            'counter_width': counter_width,
            'reset_period': reset_period,
            'hash': hash_name(self.hash_fn),
            'tag_hash': hash_name(self.tag_hash),
            'base_counter_width': base_counter_width,
        })

        self.tnum = tnum
        self.entries_log = entries_log
        self.reset_period = reset_period

        # === Tables ===
        self.tables: List[BasePredictor] = [BHTPredictor(base_entries_log, base_counter_width)]
        for width in self.history_widths:
            self.tables.append(
                GlobalHistoryPredictor(width, entries_log, counter_width,
                                       hash_fn=self.hash_fn, tag_hash=self.hash_fn)
            )

        # Row 0 belongs to the base table and is never used
        self.useful = np.zeros((tnum, 1 << entries_log), dtype=np.uint8)
        self.reset_count = 0

        # === State for update ===
        self._table_predictions = [False] * tnum
        self.provider_index = 0
        self.alt_provider_index = 0

        logger.debug("TAGE built: %d tables, history widths %s",
                     tnum, self.history_widths)

    def _tag2(self, addr: int, table: GlobalHistoryPredictor) -> int:
        return truncate(self.tag_hash(addr, table.get_ghr()), self.entries_log)

    def predict(self, addr: int) -> bool:
        self.provider_index = 0
        self.alt_provider_index = 0
        self._table_predictions[0] = self.tables[0].predict(addr)

        for i in range(1, self.tnum):
            table = self.tables[i]
            self._table_predictions[i] = table.predict(addr)

            if self._tag2(addr, table) == table.get_tag(addr):
                self.alt_provider_index = self.provider_index
                self.provider_index = i

        return self._table_predictions[self.provider_index]

    def update(self, taken_actually: bool, taken_predicted: bool, addr: int) -> None:
        provider = self.provider_index
        self.tables[provider].update(taken_actually, taken_predicted, addr)

        # Usefulness only moves when the alternate disagreed
        if provider != 0:
            tag = self.tables[provider].get_tag(addr)
            alt_prediction = self._table_predictions[self.alt_provider_index]
            if alt_prediction != taken_predicted:
                if taken_predicted == taken_actually:
                    self._increase_useful(provider, tag)
                else:
                    self._decrease_useful(provider, tag)

        self.reset_count += 1
        if self.reset_count == self.reset_period:
            self.useful[1:].fill(0)
            self.reset_count = 0

        if taken_actually != taken_predicted:
            self._allocate(provider, addr)

    def _allocate(self, provider: int, addr: int) -> None:
        """Seed the first unused longer table, or age all longer tables."""
        for i in range(provider + 1, self.tnum):
            table = self.tables[i]
            if self.useful[i, table.index_of(addr)] == 0:
                table.reset_counter(addr)
                return

        for i in range(provider + 1, self.tnum):
            self._decrease_useful(i, self.tables[i].index_of(addr))

    def _increase_useful(self, table: int, index: int) -> None:
        if self.useful[table, index] < USEFUL_MAX:
            self.useful[table, index] += 1

    def _decrease_useful(self, table: int, index: int) -> None:
        if self.useful[table, index] > 0:
            self.useful[table, index] -= 1

    def reset(self) -> None:
        for table in self.tables:
            table.reset()
        self.useful.fill(0)
        self.reset_count = 0
        self._table_predictions = [False] * self.tnum
        self.provider_index = 0
        self.alt_provider_index = 0

    def get_hardware_cost(self) -> dict:
        table_costs = [t.get_hardware_cost() for t in self.tables]
        useful_bits = (self.tnum - 1) * self.useful.shape[1] * 8
        bits = sum(c['total_bits'] for c in table_costs) + useful_bits
        return {
            'n_tables': self.tnum,
            'history_lengths': list(self.history_widths),
            'useful_bits': useful_bits,
            'total_bits': bits,
            'total_bytes': bits // 8,
            'total_kb': bits / 8 / 1024,
        }
