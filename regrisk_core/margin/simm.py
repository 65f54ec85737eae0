"""
ISDA SIMM (v2.6 style) initial margin.

Sensitivity-based aggregation in three steps:

1. Weighted sensitivity per bucket: WS_b = |Σ s| × RW[class][bucket]
2. Within each risk class: K = sqrt(Σ WS_b² + 2 Σ_{b<b'} ρ_class WS_b WS_b')
3. Across risk classes: IM = sqrt(Σ K_i² + Σ_{i≠j} γ_ij K_i K_j)
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np

from regrisk_core.config.models import SIMMInput
from regrisk_core.exceptions import coerce_model
from regrisk_core.instruments.base import AssetClass
from regrisk_core.instruments.margin import RiskFactorType
from regrisk_core.margin._common import (
    RISK_FACTOR_ASSET_CLASS,
    InitialMarginResult,
    aggregate_components,
    apply_margin_terms,
    correlation_table,
    readonly_matrix,
)

logger = logging.getLogger(__name__)

DEFAULT_RISK_WEIGHT = 0.01

RISK_WEIGHTS: Mapping[RiskFactorType, Mapping[int, float]] = MappingProxyType(
    {
        # Regular, low and high volatility currencies
        RiskFactorType.INTEREST_RATE: MappingProxyType({1: 0.016, 2: 0.009, 3: 0.014}),
        # IG 1-3Y, 3-7Y, 7Y+, HY 1-3Y, 3-7Y, 7Y+, emerging markets
        RiskFactorType.CREDIT_QUALIFYING: MappingProxyType(
            {1: 0.0038, 2: 0.0042, 3: 0.0046, 4: 0.0060, 5: 0.0070, 6: 0.0080, 7: 0.0200}
        ),
        RiskFactorType.CREDIT_NON_QUALIFYING: MappingProxyType({1: 0.008, 2: 0.012}),
        # Large/small cap developed, large/small cap emerging
        RiskFactorType.EQUITY: MappingProxyType({1: 0.28, 2: 0.32, 3: 0.30, 4: 0.35}),
        # Energy, metals, agricultural, other
        RiskFactorType.COMMODITY: MappingProxyType({1: 0.18, 2: 0.14, 3: 0.18, 4: 0.20}),
        RiskFactorType.FX: MappingProxyType({1: 0.06, 2: 0.04, 3: 0.10}),
    }
)

INTRA_CORRELATIONS: Mapping[RiskFactorType, float] = MappingProxyType(
    {
        RiskFactorType.INTEREST_RATE: 0.25,
        RiskFactorType.CREDIT_QUALIFYING: 0.35,
        RiskFactorType.CREDIT_NON_QUALIFYING: 0.35,
        RiskFactorType.EQUITY: 0.15,
        RiskFactorType.COMMODITY: 0.20,
        RiskFactorType.FX: 0.25,
    }
)

# Order: IR, credit qualifying, credit non-qualifying, equity, commodity, FX
INTER_CORRELATIONS = readonly_matrix(
    [
        [1.00, 0.30, 0.20, 0.10, 0.15, 0.40],
        [0.30, 1.00, 0.75, 0.40, 0.10, 0.15],
        [0.20, 0.75, 1.00, 0.30, 0.10, 0.15],
        [0.10, 0.40, 0.30, 1.00, 0.20, 0.15],
        [0.15, 0.10, 0.10, 0.20, 1.00, 0.15],
        [0.40, 0.15, 0.15, 0.15, 0.15, 1.00],
    ]
)


def risk_weight(factor_type: RiskFactorType, bucket: int) -> float:
    """Risk weight for a bucket; unknown buckets use ``DEFAULT_RISK_WEIGHT``."""
    weight = RISK_WEIGHTS[factor_type].get(bucket)
    if weight is None:
        logger.warning(
            "No SIMM risk weight for %s bucket %d, using %.2f",
            factor_type.value,
            bucket,
            DEFAULT_RISK_WEIGHT,
        )
        return DEFAULT_RISK_WEIGHT
    return weight


def aggregate_buckets(weighted: Mapping[int, float], rho: float) -> float:
    """
    Intra-class aggregation of bucket weighted sensitivities.

    K = sqrt(Σ WS_b² + 2 × Σ_{b<b'} ρ × WS_b × WS_b')
    """
    ws = np.array(list(weighted.values()), dtype=np.float64)
    if ws.size == 0:
        return 0.0
    total = ws.sum()
    squares = float(ws @ ws)
    # Σ_{b<b'} WS_b WS_b' = ((Σ WS)² − Σ WS²) / 2
    cross = (total * total - squares) / 2.0
    return float(np.sqrt(max(squares + 2.0 * rho * cross, 0.0)))


@dataclass(frozen=True, kw_only=True)
class SIMMResult(InitialMarginResult):
    """
    ISDA SIMM result.

    Attributes
    ----------
    diversification_benefit : float
        Σ K_i − IM
    risk_factor_contributions : dict[RiskFactorType, dict[int, float]]
        Weighted sensitivity per risk class and bucket
    margin_by_asset_class : dict[AssetClass, float]
        Σ K_i grouped by asset class
    """

    diversification_benefit: float = 0.0
    risk_factor_contributions: dict[RiskFactorType, dict[int, float]] = field(
        default_factory=dict
    )
    margin_by_asset_class: dict[AssetClass, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = self._base_dict()
        data["diversification_benefit"] = self.diversification_benefit
        data["risk_factor_contributions"] = {
            rf.value: {str(b): v for b, v in buckets.items()}
            for rf, buckets in self.risk_factor_contributions.items()
        }
        data["margin_by_asset_class"] = {
            ac.value: v for ac, v in self.margin_by_asset_class.items()
        }
        data["correlation_matrix"] = correlation_table(INTER_CORRELATIONS)
        return data

    def summary(self) -> str:
        """Generate formatted summary."""
        lines = [
            f"ISDA SIMM ({self.netting_set_id})",
            "=" * 40,
        ]
        for rf, k in self.components.items():
            lines.append(f"{rf.value:<24}${k:>14,.0f}")
        lines += [
            "-" * 40,
            f"Diversification:        ${self.diversification_benefit:>14,.0f}",
            f"Initial Margin:         ${self.initial_margin:>14,.0f}",
            f"Net Initial Margin:     ${self.net_initial_margin:>14,.0f}",
        ]
        return "\n".join(lines)


class SIMMCalculator:
    """
    ISDA SIMM initial margin calculator.

    Example
    -------
    >>> calc = SIMMCalculator()
    >>> result = calc.calculate(simm_input)
    >>> print(f"IM: ${result.initial_margin:,.0f}")
    """

    def __init__(self, valuation_date: date | None = None) -> None:
        self.valuation_date = valuation_date

    def calculate(self, im_input: SIMMInput | Mapping[str, Any]) -> SIMMResult:
        """
        Calculate SIMM initial margin.

        Parameters
        ----------
        im_input : SIMMInput | Mapping
            Trades with risk factors, netting set and collateral

        Returns
        -------
        SIMMResult
            Initial margin, diversification benefit and breakdowns
        """
        im_input = coerce_model(SIMMInput, im_input)

        # Net sensitivities per risk class and bucket
        net: dict[RiskFactorType, dict[int, float]] = defaultdict(lambda: defaultdict(float))
        for trade in im_input.trades:
            for factor in trade.risk_factors:
                net[factor.factor_type][factor.bucket] += factor.value * trade.sensitivity_value

        contributions: dict[RiskFactorType, dict[int, float]] = {}
        components: dict[RiskFactorType, float] = {}
        for rf, buckets in net.items():
            weighted = {
                bucket: abs(value) * risk_weight(rf, bucket)
                for bucket, value in sorted(buckets.items())
            }
            contributions[rf] = weighted
            components[rf] = aggregate_buckets(weighted, INTRA_CORRELATIONS[rf])

        total = aggregate_components(components, INTER_CORRELATIONS)
        diversification = sum(components.values()) - total

        by_asset_class: dict[AssetClass, float] = {}
        for rf, k in components.items():
            ac = RISK_FACTOR_ASSET_CLASS[rf]
            by_asset_class[ac] = by_asset_class.get(ac, 0.0) + k

        terms = apply_margin_terms(total, im_input.netting_set, im_input.collateral)

        logger.debug(
            "SIMM IM %.2f (diversification %.2f) over %d risk classes",
            total,
            diversification,
            len(components),
        )

        return SIMMResult(
            initial_margin=total,
            net_initial_margin=terms.net_initial_margin,
            collateral_value=terms.collateral_value,
            components=components,
            netting_set_id=im_input.netting_set.netting_agreement_id,
            trade_count=len(im_input.trades),
            total_notional=float(sum(t.notional_amount for t in im_input.trades)),
            valuation_date=self.valuation_date or date.today(),
            diversification_benefit=diversification,
            risk_factor_contributions=contributions,
            margin_by_asset_class=by_asset_class,
        )


def calculate_simm_im(
    im_input: SIMMInput | Mapping[str, Any],
    valuation_date: date | None = None,
) -> SIMMResult:
    """Convenience function for a SIMM calculation."""
    return SIMMCalculator(valuation_date=valuation_date).calculate(im_input)
