"""
Saturating Counters

Fixed-width clamped counters and the transition policies predictors apply
to them when a branch outcome is known.
"""

from typing import Callable, Dict

MIN_COUNTER_WIDTH = 1
MAX_COUNTER_WIDTH = 63


def check_counter_width(width: int) -> int:
    """Validate a counter width, returning it unchanged."""
    if not MIN_COUNTER_WIDTH <= width <= MAX_COUNTER_WIDTH:
        raise ValueError(
            f"Counter width must be in [{MIN_COUNTER_WIDTH}, {MAX_COUNTER_WIDTH}], got {width}"
        )
    return width


class SaturatingCounter:
    """
    Unsigned saturating counter.

    Values range over 0 .. 2**width - 1 and clamp at both ends. The counter
    powers up (and resets) to 2**(width-1), the weakly-taken state.
    """

    __slots__ = ['_width', '_value', '_max_value', '_init_value']

    def __init__(self, width: int = 2):
        self._width = check_counter_width(width)
        self._max_value = (1 << width) - 1
        self._init_value = (1 << width) // 2
        self._value = self._init_value

    @property
    def width(self) -> int:
        return self._width

    @property
    def value(self) -> int:
        return self._value

    @property
    def init_value(self) -> int:
        return self._init_value

    @property
    def max_value(self) -> int:
        return self._max_value

    def increase(self) -> None:
        if self._value < self._max_value:
            self._value += 1

    def decrease(self) -> None:
        if self._value > 0:
            self._value -= 1

    def reset(self) -> None:
        self._value = self._init_value

    def is_taken(self) -> bool:
        """Top half of the range predicts taken."""
        return self._value > self._init_value - 1

    def __repr__(self) -> str:
        return f"SaturatingCounter(width={self._width}, value={self._value})"


# ============================================================================
# Transition policies
#
# Each policy takes anything exposing value/increase/decrease/reset (a
# SaturatingCounter or a CounterTable slot) and the actual outcome.
# ============================================================================

def two_bit_transition(counter, taken: bool) -> None:
    """
    2-bit counter with fast exit from the weak states.

    A taken outcome from 1 jumps straight to 3 and a not-taken outcome
    from 2 drops straight to 0.
    """
    if taken:
        if counter.value == 1:
            counter.increase()
        counter.increase()
    else:
        if counter.value == 2:
            counter.decrease()
        counter.decrease()


def three_bit_transition(counter, taken: bool) -> None:
    """3-bit counter with a literal per-state hysteresis table."""
    value = counter.value

    if value == 0b000:
        if taken:
            counter.increase()
    elif value == 0b011:
        if taken:
            counter.reset()
            counter.increase()
            counter.increase()
        else:
            counter.decrease()
    elif value == 0b111:
        if not taken:
            counter.decrease()
    elif value == 0b100:
        if not taken:
            counter.decrease()
            counter.decrease()
            counter.decrease()
            counter.decrease()
        else:
            counter.increase()
    else:
        linear_transition(counter, taken)


def linear_transition(counter, taken: bool) -> None:
    """Plain saturating increment/decrement."""
    if taken:
        counter.increase()
    else:
        counter.decrease()


TRANSITION_POLICIES: Dict[int, Callable] = {
    2: two_bit_transition,
    3: three_bit_transition,
}


def get_transition_policy(width: int) -> Callable:
    """Policy for a counter width; widths without a table move linearly."""
    return TRANSITION_POLICIES.get(width, linear_transition)
