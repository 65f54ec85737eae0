"""
Regulatory exposure calculation module.

Provides SA-CCR (Standardized Approach for Counterparty Credit Risk)
Exposure at Default calculations as specified in Basel CRE52.
"""

from regrisk_core.reg.saccr import (
    SUPERVISORY_FACTORS,
    AddOnResult,
    PotentialFutureExposureResult,
    ReplacementCostResult,
    SACCRCalculator,
    SACCRResult,
    TradeAddOn,
    calculate_potential_future_exposure,
    calculate_replacement_cost,
    calculate_saccr,
    calculate_saccr_ead,
    supervisory_factor,
)

__all__ = [
    "SACCRCalculator",
    "SACCRResult",
    "ReplacementCostResult",
    "AddOnResult",
    "PotentialFutureExposureResult",
    "TradeAddOn",
    "SUPERVISORY_FACTORS",
    "supervisory_factor",
    "calculate_replacement_cost",
    "calculate_potential_future_exposure",
    "calculate_saccr",
    "calculate_saccr_ead",
]
