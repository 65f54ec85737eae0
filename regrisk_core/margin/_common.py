"""
Shared pieces of the initial margin engines.

Both engines aggregate one margin figure per SIMM risk class through a
fixed 6×6 correlation matrix and then apply the same collateral,
threshold and minimum transfer amount rules.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from regrisk_core._types import FloatArray
from regrisk_core.collateral.agreement import IMNettingSet
from regrisk_core.collateral.items import (
    CollateralItem,
    apply_threshold_and_mta,
    collateral_value,
)
from regrisk_core.instruments.base import AssetClass
from regrisk_core.instruments.margin import RiskFactorType

RISK_FACTOR_ORDER: tuple[RiskFactorType, ...] = (
    RiskFactorType.INTEREST_RATE,
    RiskFactorType.CREDIT_QUALIFYING,
    RiskFactorType.CREDIT_NON_QUALIFYING,
    RiskFactorType.EQUITY,
    RiskFactorType.COMMODITY,
    RiskFactorType.FX,
)

ASSET_CLASS_RISK_FACTOR: Mapping[AssetClass, RiskFactorType] = MappingProxyType(
    {
        AssetClass.INTEREST_RATE: RiskFactorType.INTEREST_RATE,
        AssetClass.CREDIT: RiskFactorType.CREDIT_QUALIFYING,
        AssetClass.EQUITY: RiskFactorType.EQUITY,
        AssetClass.COMMODITY: RiskFactorType.COMMODITY,
        AssetClass.FOREIGN_EXCHANGE: RiskFactorType.FX,
    }
)

RISK_FACTOR_ASSET_CLASS: Mapping[RiskFactorType, AssetClass] = MappingProxyType(
    {
        RiskFactorType.INTEREST_RATE: AssetClass.INTEREST_RATE,
        RiskFactorType.CREDIT_QUALIFYING: AssetClass.CREDIT,
        RiskFactorType.CREDIT_NON_QUALIFYING: AssetClass.CREDIT,
        RiskFactorType.EQUITY: AssetClass.EQUITY,
        RiskFactorType.COMMODITY: AssetClass.COMMODITY,
        RiskFactorType.FX: AssetClass.FOREIGN_EXCHANGE,
    }
)


def readonly_matrix(rows: Sequence[Sequence[float]]) -> FloatArray:
    """Build a read-only symmetric correlation matrix."""
    matrix = np.array(rows, dtype=np.float64)
    if matrix.shape != (len(RISK_FACTOR_ORDER), len(RISK_FACTOR_ORDER)):
        raise ValueError(f"Correlation matrix must be 6x6, got {matrix.shape}")
    if not np.allclose(matrix, matrix.T) or not np.allclose(np.diag(matrix), 1.0):
        raise ValueError("Correlation matrix must be symmetric with unit diagonal")
    matrix.setflags(write=False)
    return matrix


def correlation(matrix: FloatArray, i: RiskFactorType, j: RiskFactorType) -> float:
    """Look up the correlation between two risk classes."""
    return float(matrix[RISK_FACTOR_ORDER.index(i), RISK_FACTOR_ORDER.index(j)])


def correlation_table(matrix: FloatArray) -> dict[str, dict[str, float]]:
    """Nested-dict view of a correlation matrix, keyed by risk class value."""
    return {
        ri.value: {rj.value: float(matrix[a, b]) for b, rj in enumerate(RISK_FACTOR_ORDER)}
        for a, ri in enumerate(RISK_FACTOR_ORDER)
    }


def aggregate_components(
    components: Mapping[RiskFactorType, float],
    matrix: FloatArray,
) -> float:
    """
    Correlated aggregation across risk classes.

    IM = sqrt(Σ_i Σ_j ρ_ij × K_i × K_j)

    Parameters
    ----------
    components : Mapping[RiskFactorType, float]
        Margin per risk class (missing classes count as 0)
    matrix : FloatArray
        6×6 correlation matrix in ``RISK_FACTOR_ORDER``

    Returns
    -------
    float
        Aggregated margin
    """
    k = np.array([components.get(rf, 0.0) for rf in RISK_FACTOR_ORDER])
    return float(np.sqrt(max(k @ matrix @ k, 0.0)))


@dataclass(frozen=True)
class MarginTerms:
    """Collateral value and net margin after threshold and MTA."""

    collateral_value: float
    net_initial_margin: float


def apply_margin_terms(
    initial_margin: float,
    netting_set: IMNettingSet,
    collateral: Iterable[CollateralItem],
) -> MarginTerms:
    """
    Apply collateral (haircuts in percent) and the threshold/MTA rule.

    Parameters
    ----------
    initial_margin : float
        Gross initial margin
    netting_set : IMNettingSet
        Threshold and minimum transfer amount
    collateral : Iterable[CollateralItem]
        Collateral posted

    Returns
    -------
    MarginTerms
        Collateral value and net initial margin
    """
    return MarginTerms(
        collateral_value=collateral_value(collateral, haircut_in_percent=True),
        net_initial_margin=apply_threshold_and_mta(
            initial_margin,
            netting_set.threshold_amount,
            netting_set.minimum_transfer_amount,
        ),
    )


@dataclass(frozen=True)
class InitialMarginResult:
    """
    Fields shared by both initial margin results.

    Attributes
    ----------
    initial_margin : float
        Gross initial margin
    net_initial_margin : float
        Margin after threshold and MTA
    collateral_value : float
        Haircut-adjusted collateral
    components : dict[RiskFactorType, float]
        Margin per risk class
    netting_set_id : str
        Echo of the netting agreement id
    trade_count : int
        Number of trades
    total_notional : float
        Σ notional
    valuation_date : date
        Calculation date
    timestamp : datetime
        Calculation time
    """

    initial_margin: float
    net_initial_margin: float
    collateral_value: float
    components: dict[RiskFactorType, float]
    netting_set_id: str
    trade_count: int
    total_notional: float
    valuation_date: date
    timestamp: datetime = field(default_factory=datetime.now)

    def _base_dict(self) -> dict[str, Any]:
        return {
            "initial_margin": self.initial_margin,
            "net_initial_margin": self.net_initial_margin,
            "collateral_value": self.collateral_value,
            "components": {rf.value: v for rf, v in self.components.items()},
            "timestamp": self.timestamp.isoformat(),
            "input_summary": {
                "netting_set_id": self.netting_set_id,
                "trade_count": self.trade_count,
                "total_notional": self.total_notional,
                "valuation_date": self.valuation_date.isoformat(),
            },
        }
