from __future__ import annotations

from typing import Sequence

import numpy as np
from scipy.stats import variation
from statsmodels.tsa.stattools import acf


def as_array(series: Sequence[float]) -> np.ndarray:
    return np.asarray([float(v) for v in series], dtype=float)


def sample_variance(values: np.ndarray) -> float:
    if len(values) < 2:
        return 0.0
    return float(np.var(values, ddof=1))


def sample_std(values: np.ndarray) -> float:
    return float(np.sqrt(sample_variance(values)))


def population_cv(values: np.ndarray) -> float:
    """Coefficient of variation with population std; 1.0 when the mean is zero."""
    if len(values) < 2:
        return 0.0
    mean = float(np.mean(values))
    if mean == 0:
        return 1.0
    return float(np.std(values) / mean)


def autocorrelations(values: np.ndarray, max_lag: int) -> np.ndarray:
    """Lag 0..max_lag autocorrelations, all zero for a constant series."""
    if len(values) == 0 or max_lag >= len(values) or np.all(values == values[0]):
        return np.zeros(max_lag + 1)
    return acf(values, nlags=max_lag, adjusted=False, fft=False)


def seasonal_cv_spread(values: np.ndarray, season_length: int) -> float:
    """Standard deviation of the per-position coefficients of variation.

    Positions are grouped by ``index % season_length``; positions with a
    non-positive mean are skipped and single-observation positions count as
    zero variation.
    """
    cvs: list[float] = []
    for position in range(season_length):
        group = values[position::season_length]
        if len(group) == 0 or np.mean(group) <= 0:
            continue
        cvs.append(float(variation(group, ddof=1)) if len(group) > 1 else 0.0)
    return sample_std(np.asarray(cvs, dtype=float))
