"""
Value-at-Risk module.

Historical simulation, parametric and Monte Carlo VaR with Expected
Shortfall, position contributions and stress scenarios.
"""

from regrisk_core.var.calculator import (
    AssetContribution,
    ReturnDistribution,
    VaRCalculator,
    VaRResult,
    calculate_var,
    historical_var,
    parametric_var,
    stress_scenarios,
)

__all__ = [
    "AssetContribution",
    "ReturnDistribution",
    "VaRCalculator",
    "VaRResult",
    "calculate_var",
    "historical_var",
    "parametric_var",
    "stress_scenarios",
]
