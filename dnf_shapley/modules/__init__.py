"""
Modules package for DNF Shapley computation.

This package contains core modules for:
- Formula and coefficient algebra (dnf, coeffs, product_tree, union_combination)
- Structural decomposition (decompose) and the propagation engine (decompose_tree)
- Allocation: recursive decomposition and brute-force enumeration
- Data generation: random and structured games
- Ablation running: sweeps over decomposition modes
"""

from .allocation import AllocationEngine, AllocationResult
from .data_gen import DataGenerator
from .decompose_tree import (
    AblationType,
    cal_sv_recursive_decompose,
    cal_sv_recursive_decompose_ablation,
)
from .dnf import Dnf
from .game import Game
from .runner import AblationRunner

__all__ = [
    'AllocationEngine',
    'AllocationResult',
    'DataGenerator',
    'AblationType',
    'cal_sv_recursive_decompose',
    'cal_sv_recursive_decompose_ablation',
    'Dnf',
    'Game',
    'AblationRunner'
]
