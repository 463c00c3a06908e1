# =============================================================================
# FILE: dnf_shapley/utils/metrics.py
"""
Statistical helpers for benchmark timings
"""
# =============================================================================

import numpy as np
from typing import Tuple
from scipy import stats


def compute_confidence_interval(
    data: np.ndarray,
    confidence: float = 0.95
) -> Tuple[float, float]:
    """
    Confidence interval of the mean using the t-distribution

    Args:
        data: Input data array
        confidence: Confidence level (default 0.95 for 95% CI)

    Returns:
        Tuple of (lower_bound, upper_bound); degenerate for fewer than two
        observations
    """
    data = np.asarray(data, dtype=float)
    n = len(data)
    if n == 0:
        return float('nan'), float('nan')

    mean = float(np.mean(data))
    if n < 2:
        return mean, mean

    std_err = stats.sem(data)
    t_value = stats.t.ppf((1 + confidence) / 2, df=n - 1)

    margin_error = float(t_value * std_err)
    return mean - margin_error, mean + margin_error


def speedup_ratio(baseline_times: np.ndarray, times: np.ndarray) -> float:
    """
    Ratio of total baseline time to total time (> 1 means faster)

    Args:
        baseline_times: Wall-clock times of the reference variant
        times: Wall-clock times of the compared variant

    Returns:
        Speedup factor, nan when the compared variant took no time
    """
    total = float(np.sum(times))
    if total <= 0:
        return float('nan')
    return float(np.sum(baseline_times)) / total
