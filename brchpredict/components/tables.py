"""
Counter Tables

Contiguous tables of saturating counters backing the predictors.
"""

import numpy as np

from .counters import check_counter_width, get_transition_policy

MAX_ENTRIES_LOG = 28


def check_entries_log(entries_log: int) -> int:
    """Validate a log2 table size, returning it unchanged."""
    if not 0 <= entries_log <= MAX_ENTRIES_LOG:
        raise ValueError(
            f"Table size log must be in [0, {MAX_ENTRIES_LOG}], got {entries_log}"
        )
    return entries_log


class CounterSlot:
    """View of a single counter inside a CounterTable."""

    __slots__ = ['_table', '_index']

    def __init__(self, table: 'CounterTable', index: int):
        self._table = table
        self._index = index

    @property
    def value(self) -> int:
        return int(self._table.values[self._index])

    def increase(self) -> None:
        if self._table.values[self._index] < self._table.max_value:
            self._table.values[self._index] += 1

    def decrease(self) -> None:
        if self._table.values[self._index] > 0:
            self._table.values[self._index] -= 1

    def reset(self) -> None:
        self._table.values[self._index] = self._table.init_value


class CounterTable:
    """
    Table of 2**entries_log saturating counters of a single width.

    Counters live in one numpy array; `slot(index)` hands out views that
    behave like a SaturatingCounter so the transition policies apply
    unchanged.
    """

    def __init__(self, entries_log: int, width: int = 2):
        """
        Initialize counter table.

        Args:
            entries_log: Log2 of the number of entries
            width: Bits per counter
        """
        self.entries_log = check_entries_log(entries_log)
        self.width = check_counter_width(width)
        self.num_entries = 1 << entries_log

        self.max_value = (1 << width) - 1
        self.init_value = (1 << width) // 2

        self.values = np.full(self.num_entries, self.init_value, dtype=np.int64)
        self._transition = get_transition_policy(width)

    def slot(self, index: int) -> CounterSlot:
        return CounterSlot(self, index)

    def is_taken(self, index: int) -> bool:
        return bool(self.values[index] > self.init_value - 1)

    def apply_outcome(self, index: int, taken: bool) -> None:
        """Run the width's transition policy on one entry."""
        self._transition(self.slot(index), taken)

    def reset_entry(self, index: int) -> None:
        self.values[index] = self.init_value

    def reset(self) -> None:
        """Return every counter to its weakly-taken state."""
        self.values.fill(self.init_value)

    def get_storage_bits(self) -> int:
        return self.num_entries * self.width

    def __len__(self) -> int:
        return self.num_entries

    def __repr__(self) -> str:
        return f"CounterTable(entries={self.num_entries}, width={self.width})"
