# Branch Predictor Package
"""
brchpredict: branch direction predictor simulator

Trace-driven models of classic predictors:
- Bimodal branch history table (BHT)
- Global-history (gshare-style) predictor
- Tournament selection between two predictors
- TAGE over geometric history lengths
"""

__version__ = "1.0.0"

from .predictors import (
    BasePredictor,
    BHTPredictor,
    GlobalHistoryPredictor,
    TournamentPredictor,
    TAGEPredictor,
)
from .simulation import BranchSimulator, SimulationConfig, BranchStats

__all__ = [
    'BasePredictor',
    'BHTPredictor',
    'GlobalHistoryPredictor',
    'TournamentPredictor',
    'TAGEPredictor',
    'BranchSimulator',
    'SimulationConfig',
    'BranchStats',
]
