"""
Collateral and margin agreement terms.

Provides:
- Netting set margin terms (threshold, MTA, NICA, VM, MPOR)
- Collateral items with haircut aggregation
- Threshold / minimum transfer amount rule for margin calls
"""

from regrisk_core.collateral.agreement import IMNettingSet, NettingSet
from regrisk_core.collateral.items import (
    CollateralItem,
    apply_threshold_and_mta,
    collateral_value,
)

__all__ = [
    "NettingSet",
    "IMNettingSet",
    "CollateralItem",
    "collateral_value",
    "apply_threshold_and_mta",
]
