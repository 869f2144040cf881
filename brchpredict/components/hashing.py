"""
Indexing Hashes

Hash functions combining a branch address with a history value. They are
chosen once, when a predictor is built.
"""

from typing import Callable, Dict, Union

# Hash arithmetic is confined to 128 bits
HASH_BITS = 128
HASH_MASK = (1 << HASH_BITS) - 1

HashFunction = Callable[[int, int], int]


def truncate(value: int, bits: int) -> int:
    """Keep the low `bits` bits of value."""
    return value & ((1 << bits) - 1)


def f_xor(addr: int, history: int) -> int:
    """XOR of address and history (gshare-style)."""
    return (addr ^ history) & HASH_MASK


def f_xor1(addr: int, history: int) -> int:
    """XOR of the inverted address and inverted history."""
    return (~addr ^ ~history) & HASH_MASK


def f_xnor(addr: int, history: int) -> int:
    """Complement of address XOR inverted history."""
    return ~(addr ^ ~history) & HASH_MASK


HASH_FUNCTIONS: Dict[str, HashFunction] = {
    'xor': f_xor,
    'xor1': f_xor1,
    'xnor': f_xnor,
}


def get_hash_function(hash_fn: Union[str, HashFunction]) -> HashFunction:
    """
    Resolve a hash strategy.

    Args:
        hash_fn: Registered name ('xor', 'xor1', 'xnor') or a callable

    Returns:
        Hash function taking (address, history)
    """
    if callable(hash_fn):
        return hash_fn

    func = HASH_FUNCTIONS.get(str(hash_fn).lower())
    if func is None:
        raise ValueError(
            f"Unknown hash function: {hash_fn} (choose from {sorted(HASH_FUNCTIONS)})"
        )
    return func


def hash_name(hash_fn: HashFunction) -> str:
    """Registered name of a hash function, or its qualified name."""
    for name, func in HASH_FUNCTIONS.items():
        if func is hash_fn:
            return name
    return getattr(hash_fn, '__name__', repr(hash_fn))
