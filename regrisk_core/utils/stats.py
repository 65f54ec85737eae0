"""
Statistical helpers: normal variates, normal CDF and moment statistics.
"""

import numpy as np
from scipy import stats

from regrisk_core._types import FloatArray


def box_muller(
    rng: np.random.Generator,
    size: int | tuple[int, ...],
) -> FloatArray:
    """
    Draw standard normal variates with the Box-Muller transform.

    Parameters
    ----------
    rng : np.random.Generator
        Random source
    size : int | tuple[int, ...]
        Output shape

    Returns
    -------
    FloatArray
        Independent N(0, 1) draws

    Example
    -------
    >>> rng = np.random.default_rng(7)
    >>> z = box_muller(rng, (10_000, 3))
    """
    # 1 - U keeps u1 in (0, 1] so the log stays finite
    u1 = 1.0 - rng.random(size)
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def norm_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return float(stats.norm.cdf(x))


def distribution_moments(values: FloatArray) -> dict[str, float]:
    """
    Summary statistics of a return series.

    Standard deviation is the population figure. Skewness is the third
    standardized moment and kurtosis is the excess fourth standardized
    moment; both are 0 when the series has no dispersion.

    Parameters
    ----------
    values : FloatArray
        1D sample

    Returns
    -------
    dict[str, float]
        Keys: min, max, mean, median, std, skewness, kurtosis
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return {
            "min": 0.0,
            "max": 0.0,
            "mean": 0.0,
            "median": 0.0,
            "std": 0.0,
            "skewness": 0.0,
            "kurtosis": 0.0,
        }

    std = float(np.std(values))
    if std > 0:
        skewness = float(stats.skew(values))
        kurtosis = float(stats.kurtosis(values))
    else:
        skewness = 0.0
        kurtosis = 0.0

    return {
        "min": float(np.min(values)),
        "max": float(np.max(values)),
        "mean": float(np.mean(values)),
        "median": float(np.median(values)),
        "std": std,
        "skewness": skewness,
        "kurtosis": kurtosis,
    }
