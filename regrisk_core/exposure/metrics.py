"""
Exposure metrics over simulated value paths.

Provides functions to compute:
- PFE (Potential Future Exposure) per time step
- Peak exposure per path
"""

from dataclasses import dataclass

import numpy as np

from regrisk_core._types import FloatArray, PathArray


@dataclass(frozen=True)
class PathExposureSummary:
    """
    Summary of simulated exposure paths for a netting set.

    Attributes
    ----------
    quantile : float
        Confidence level used for PFE
    pfe : float
        Quantile of the per-path peak exposure
    expected_exposure : float
        Mean of the per-path peak exposure
    max_exposure : float
        Largest peak exposure over all paths
    pfe_profile : FloatArray
        Per-step PFE, shape (n_steps,)
    """

    quantile: float
    pfe: float
    expected_exposure: float
    max_exposure: float
    pfe_profile: FloatArray

    @classmethod
    def from_values(cls, values: PathArray, quantile: float) -> "PathExposureSummary":
        """
        Summarize a simulated value matrix.

        Parameters
        ----------
        values : PathArray
            Netting set value, shape (n_paths, n_steps)
        quantile : float
            Confidence level in (0, 1)

        Returns
        -------
        PathExposureSummary
            Peak-based PFE, EE and per-step PFE profile
        """
        peaks = calculate_peak_exposure(values)
        return cls(
            quantile=quantile,
            pfe=float(np.quantile(peaks, quantile)),
            expected_exposure=float(peaks.mean()),
            max_exposure=float(peaks.max()),
            pfe_profile=calculate_pfe(values, quantile=quantile),
        )


def calculate_pfe(mtm: PathArray, quantile: float = 0.95) -> FloatArray:
    """
    Calculate Potential Future Exposure at each time step.

    PFE(t, α) = Quantile_α(max(V(t), 0))

    Parameters
    ----------
    mtm : PathArray
        Values, shape (n_paths, n_steps)
    quantile : float
        Quantile level (default 0.95 for 95% PFE)

    Returns
    -------
    FloatArray
        PFE at each time step, shape (n_steps,)

    Example
    -------
    >>> pfe_95 = calculate_pfe(mtm, quantile=0.95)
    >>> pfe_99 = calculate_pfe(mtm, quantile=0.99)
    """
    if not 0 < quantile < 1:
        raise ValueError(f"Quantile must be in (0, 1), got {quantile}")

    return np.quantile(np.maximum(mtm, 0), quantile, axis=0)


def calculate_peak_exposure(mtm: PathArray) -> FloatArray:
    """
    Largest positive exposure reached along each path.

    Parameters
    ----------
    mtm : PathArray
        Values, shape (n_paths, n_steps)

    Returns
    -------
    FloatArray
        max_t max(V(t), 0) per path, shape (n_paths,)
    """
    return np.maximum(mtm, 0).max(axis=1)
