"""
Common type aliases used throughout the regulatory risk engines.

This module defines type aliases for numpy arrays and other common types
to improve code readability and enable better static type checking.
"""

from typing import TypeAlias

import numpy as np
import numpy.typing as npt

# Array type aliases
FloatArray: TypeAlias = npt.NDArray[np.float64]
"""1D or 2D array of 64-bit floats."""

PathArray: TypeAlias = npt.NDArray[np.float64]
"""
2D array of shape (n_paths, n_steps) representing Monte Carlo paths.

Each row is a single simulation path, and each column is a time step.
"""

ReturnSeries: TypeAlias = npt.NDArray[np.float64]
"""1D array of simple daily returns, oldest first."""

# Scalar type aliases
Year: TypeAlias = float
"""Time measured in years (e.g., 0.25 for quarterly)."""
