import pytest

from brchpredict.components.counters import (
    SaturatingCounter,
    get_transition_policy,
    linear_transition,
    three_bit_transition,
    two_bit_transition,
)
from brchpredict.components.tables import CounterTable


def counter_at(width: int, value: int) -> SaturatingCounter:
    counter = SaturatingCounter(width)
    for _ in range(counter.max_value + 1):
        counter.decrease()
    for _ in range(value):
        counter.increase()
    assert counter.value == value
    return counter


def test_counter_starts_weakly_taken():
    for width in (1, 2, 3, 8, 63):
        counter = SaturatingCounter(width)
        assert counter.value == 1 << (width - 1)
        assert counter.is_taken()


def test_counter_clamps_at_both_ends():
    counter = SaturatingCounter(2)
    for _ in range(10):
        counter.increase()
    assert counter.value == 3

    for _ in range(10):
        counter.decrease()
    assert counter.value == 0


def test_counter_stays_in_range_for_mixed_sequences():
    for width in (1, 2, 3, 5):
        counter = SaturatingCounter(width)
        for step in range(200):
            if (step * 7) % 5 < 2:
                counter.decrease()
            else:
                counter.increase()
            assert 0 <= counter.value < (1 << width)


def test_reset_returns_to_init_value():
    counter = counter_at(3, 0)
    counter.reset()
    assert counter.value == 4


@pytest.mark.parametrize("width, taken_values", [
    (2, {2, 3}),
    (3, {4, 5, 6, 7}),
    (1, {1}),
])
def test_is_taken_threshold(width, taken_values):
    for value in range(1 << width):
        assert counter_at(width, value).is_taken() == (value in taken_values)


@pytest.mark.parametrize("width", [0, 64, -1])
def test_invalid_width_rejected(width):
    with pytest.raises(ValueError):
        SaturatingCounter(width)


def test_two_bit_fast_exit_from_weak_states():
    counter = counter_at(2, 1)
    two_bit_transition(counter, True)
    assert counter.value == 3

    counter = counter_at(2, 2)
    two_bit_transition(counter, False)
    assert counter.value == 0


@pytest.mark.parametrize("start, taken, expected", [
    (0, True, 1),
    (0, False, 0),
    (1, False, 0),
    (2, True, 3),
    (3, True, 3),
    (3, False, 2),
])
def test_two_bit_single_steps(start, taken, expected):
    counter = counter_at(2, start)
    two_bit_transition(counter, taken)
    assert counter.value == expected


@pytest.mark.parametrize("start, taken, expected", [
    (0b000, True, 0b001),
    (0b000, False, 0b000),
    (0b011, True, 0b110),   # reset to 4, then two increments
    (0b011, False, 0b010),
    (0b111, True, 0b111),
    (0b111, False, 0b110),
    (0b100, True, 0b101),
    (0b100, False, 0b000),  # four decrements
    (0b001, True, 0b010),
    (0b010, False, 0b001),
    (0b101, False, 0b100),
    (0b110, True, 0b111),
])
def test_three_bit_case_table(start, taken, expected):
    counter = counter_at(3, start)
    three_bit_transition(counter, taken)
    assert counter.value == expected


def test_policy_lookup_by_width():
    assert get_transition_policy(2) is two_bit_transition
    assert get_transition_policy(3) is three_bit_transition
    assert get_transition_policy(4) is linear_transition
    assert get_transition_policy(1) is linear_transition


def test_counter_table_initial_state():
    table = CounterTable(4, 3)
    assert len(table) == 16
    assert all(int(v) == 4 for v in table.values)
    assert table.is_taken(0)


def test_counter_table_slots_clamp():
    table = CounterTable(2, 2)
    slot = table.slot(1)
    for _ in range(5):
        slot.increase()
    assert slot.value == 3
    for _ in range(5):
        slot.decrease()
    assert slot.value == 0
    assert not table.is_taken(1)
    # Neighbouring entries untouched
    assert int(table.values[0]) == 2


def test_counter_table_apply_outcome_uses_width_policy():
    table = CounterTable(2, 2)
    table.values[3] = 1
    table.apply_outcome(3, True)
    assert int(table.values[3]) == 3

    table3 = CounterTable(2, 3)
    table3.values[0] = 0b100
    table3.apply_outcome(0, False)
    assert int(table3.values[0]) == 0


def test_counter_table_reset():
    table = CounterTable(3, 2)
    table.values[:] = 0
    table.reset_entry(5)
    assert int(table.values[5]) == 2
    assert int(table.values[4]) == 0

    table.reset()
    assert all(int(v) == 2 for v in table.values)


@pytest.mark.parametrize("entries_log", [-1, 29])
def test_counter_table_rejects_bad_size(entries_log):
    with pytest.raises(ValueError):
        CounterTable(entries_log, 2)
