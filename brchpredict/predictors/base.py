"""
Base Predictor Interface

Abstract base class for all branch predictors, plus the two table-based
predictors the composite predictors are built from.
"""

from abc import ABC, abstractmethod
from typing import Union

from ..components.tables import CounterTable
from ..components.history import ShiftRegister
from ..components.hashing import HashFunction, get_hash_function, hash_name, truncate


# ============================================================================
# Configuration Presets
# ============================================================================

BHT_4K = {
    'name': 'BHT-4K',
    'type': 'bht',
    'entries_log': 12,
    'counter_width': 2,
}

GSHARE_64K = {
    'name': 'GShare-64K',
    'type': 'global_history',
    'ghr_width': 16,
    'entries_log': 16,
    'counter_width': 2,
    'hash': 'xor',
}


class BasePredictor(ABC):
    """Abstract base class for branch predictors."""

    def __init__(self, name: str, config: dict):
        """
        Initialize the predictor.

        Args:
            name: Name identifier for this predictor
            config: Construction parameters, kept for reporting
        """
        self.name = name
        self.config = config

    @abstractmethod
    def predict(self, addr: int) -> bool:
        """
        Make a branch prediction.

        Args:
            addr: Address of the branch instruction

        Returns:
            True if the branch is predicted taken
        """
        pass

    @abstractmethod
    def update(self, taken_actually: bool, taken_predicted: bool, addr: int) -> None:
        """
        Update the predictor with the resolved outcome.

        Must follow the predict() call for the same branch.

        Args:
            taken_actually: Actual branch outcome
            taken_predicted: The prediction that was made
            addr: Address of the branch instruction
        """
        pass

    @abstractmethod
    def get_hardware_cost(self) -> dict:
        """
        Estimate hardware implementation cost.

        Returns:
            Dictionary with storage (bits/bytes) and other metrics
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Return the predictor to its power-on state."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config})"


def _cost(bits: int, **extra) -> dict:
    cost = dict(extra)
    cost.update({
        'total_bits': bits,
        'total_bytes': bits // 8,
        'total_kb': bits / 8 / 1024,
    })
    return cost


class BHTPredictor(BasePredictor):
    """
    Bimodal predictor: a branch history table of saturating counters
    indexed by the low bits of the branch address.
    """

    def __init__(self, entries_log: int, counter_width: int = 2):
        super().__init__("BHT", {
            'entries_log': entries_log,
            'counter_width': counter_width,
        })
        self.entries_log = entries_log
        self.table = CounterTable(entries_log, counter_width)

    def _index(self, addr: int) -> int:
        return truncate(addr, self.entries_log)

    def predict(self, addr: int) -> bool:
        return self.table.is_taken(self._index(addr))

    def update(self, taken_actually: bool, taken_predicted: bool, addr: int) -> None:
        self.table.apply_outcome(self._index(addr), taken_actually)

    def reset(self) -> None:
        self.table.reset()

    def get_hardware_cost(self) -> dict:
        return _cost(
            self.table.get_storage_bits(),
            table_entries=self.table.num_entries,
            bits_per_entry=self.table.width,
        )


class GlobalHistoryPredictor(BasePredictor):
    """
    Global-history predictor (gshare-style).

    The pattern table is indexed by hash(addr, ghr). The owned history
    register records every resolved outcome, whatever the counter does.
    A second hash, used only by TAGE, derives a tag from the same inputs.
    """

    def __init__(self, ghr_width: int, entries_log: int, counter_width: int = 2,
                 hash_fn: Union[str, HashFunction] = 'xor',
                 tag_hash: Union[str, HashFunction, None] = None):
        """
        Args:
            ghr_width: Width of the global history register
            entries_log: Log2 of the pattern table size
            counter_width: Bits per saturating counter
            hash_fn: Index hash
            tag_hash: Tag hash (defaults to the index hash)
        """
        self.hash_fn = get_hash_function(hash_fn)
        self.tag_hash = self.hash_fn if tag_hash is None else get_hash_function(tag_hash)

        super().__init__("GlobalHistory", {
            'ghr_width': ghr_width,
            'entries_log': entries_log,
            'counter_width': counter_width,
            'hash': hash_name(self.hash_fn),
            'tag_hash': hash_name(self.tag_hash),
        })
        self.entries_log = entries_log
        self.ghr = ShiftRegister(ghr_width)
        self.table = CounterTable(entries_log, counter_width)

    def index_of(self, addr: int) -> int:
        """Pattern table index for addr under the current history."""
        return truncate(self.hash_fn(addr, self.ghr.value), self.entries_log)

    # Only for TAGE
    def get_tag(self, addr: int) -> int:
        return truncate(self.tag_hash(addr, self.ghr.value), self.entries_log)

    # Only for TAGE
    def get_ghr(self) -> int:
        return self.ghr.value

    # Only for TAGE: back to weakly taken, history untouched
    def reset_counter(self, addr: int) -> None:
        self.table.reset_entry(self.get_tag(addr))

    def predict(self, addr: int) -> bool:
        return self.table.is_taken(self.index_of(addr))

    def update(self, taken_actually: bool, taken_predicted: bool, addr: int) -> None:
        self.table.apply_outcome(self.index_of(addr), taken_actually)
        self.ghr.shift_in(taken_actually)

    def reset(self) -> None:
        self.table.reset()
        self.ghr.reset()

    def get_hardware_cost(self) -> dict:
        return _cost(
            self.table.get_storage_bits() + self.ghr.width,
            table_entries=self.table.num_entries,
            bits_per_entry=self.table.width,
            history_bits=self.ghr.width,
        )
