# Simulation Package
from .simulator import BranchSimulator, SimulationConfig
from .metrics import BranchStats, SimulationResults

__all__ = [
    'BranchSimulator',
    'SimulationConfig',
    'BranchStats',
    'SimulationResults'
]
