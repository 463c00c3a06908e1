"""
Utilities package for DNF Shapley computation.

This package contains utility modules for:
- Logging: sweep tracking and logging setup
- Metrics: statistical helpers for benchmark timings
- Validation: game well-formedness and Shapley axiom checks
"""

from .logging_utils import ExperimentLogger, setup_logging
from .metrics import compute_confidence_interval, speedup_ratio

__all__ = [
    'ExperimentLogger',
    'setup_logging',
    'compute_confidence_interval',
    'speedup_ratio'
]
