"""
Global History Register

Fixed-width shift register recording recent branch outcomes.
"""

import numpy as np

MIN_HISTORY_WIDTH = 1
MAX_HISTORY_WIDTH = 127


class ShiftRegister:
    """
    Branch history shift register.

    Outcomes enter at bit 0 and the oldest outcome leaves from bit
    width-1. The value is masked to `width` bits after every shift.
    """

    def __init__(self, width: int):
        """
        Initialize the history register.

        Args:
            width: Number of branch outcomes to track
        """
        if not MIN_HISTORY_WIDTH <= width <= MAX_HISTORY_WIDTH:
            raise ValueError(
                f"History width must be in [{MIN_HISTORY_WIDTH}, {MAX_HISTORY_WIDTH}], got {width}"
            )
        self.width = width
        self._mask = (1 << width) - 1
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def shift_in(self, bit: bool) -> bool:
        """
        Shift a new outcome in.

        Args:
            bit: Branch outcome (True = taken)

        Returns:
            The bit evicted from the top of the register
        """
        evicted = bool(self._value & (1 << (self.width - 1)))
        self._value = ((self._value << 1) | int(bool(bit))) & self._mask
        return evicted

    def bits(self) -> np.ndarray:
        """History as a 0/1 array, most recent outcome first."""
        return np.array([(self._value >> i) & 1 for i in range(self.width)],
                        dtype=np.int8)

    def reset(self) -> None:
        """Reset history to initial state."""
        self._value = 0

    def __len__(self) -> int:
        return self.width

    def __repr__(self) -> str:
        hist_str = format(self._value, f'0{self.width}b')[-16:]
        return f"GHR({self.width}): {hist_str}"
