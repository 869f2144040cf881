# Components Package
from .counters import SaturatingCounter, get_transition_policy
from .tables import CounterTable
from .history import ShiftRegister
from .hashing import f_xor, f_xor1, f_xnor, get_hash_function, truncate

__all__ = [
    'SaturatingCounter',
    'get_transition_policy',
    'CounterTable',
    'ShiftRegister',
    'f_xor',
    'f_xor1',
    'f_xnor',
    'get_hash_function',
    'truncate',
]
