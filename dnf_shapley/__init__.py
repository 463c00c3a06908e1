"""
Exact Shapley values for DNF-defined simple games.

This package provides implementations for:
- Structural decomposition of monotone DNF formulas
- Shapley value propagation over the decomposition tree
- Ablation harness comparing decomposition modes against each other
"""

from .modules import (
    AblationRunner,
    AblationType,
    AllocationEngine,
    AllocationResult,
    DataGenerator,
    Dnf,
    Game,
    cal_sv_recursive_decompose,
    cal_sv_recursive_decompose_ablation,
)
from .utils import ExperimentLogger

__all__ = [
    'AblationRunner',
    'AblationType',
    'AllocationEngine',
    'AllocationResult',
    'DataGenerator',
    'Dnf',
    'Game',
    'cal_sv_recursive_decompose',
    'cal_sv_recursive_decompose_ablation',
    'ExperimentLogger'
]

__version__ = "1.0.0"
