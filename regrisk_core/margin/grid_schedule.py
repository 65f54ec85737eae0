"""
BCBS-IOSCO Grid/Schedule initial margin.

The standardized schedule applies a notional-based risk weight per asset
class and residual-maturity bucket:

    IM_class = Σ_bucket grossNotional × RW[class][bucket]
    IM       = sqrt(Σ_i Σ_j ρ_ij × IM_i × IM_j)

Asset classes are mapped onto SIMM risk classes so that the same
correlation mechanism aggregates them.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping

from regrisk_core.config.models import GridScheduleInput
from regrisk_core.exceptions import CalculationInputError, coerce_model
from regrisk_core.instruments.base import AssetClass
from regrisk_core.instruments.margin import GridScheduleTrade, MaturityBucket, RiskFactorType
from regrisk_core.margin._common import (
    ASSET_CLASS_RISK_FACTOR,
    InitialMarginResult,
    aggregate_components,
    apply_margin_terms,
    correlation_table,
    readonly_matrix,
)
from regrisk_core.utils.dates import residual_maturity

logger = logging.getLogger(__name__)

_LT1 = MaturityBucket.LESS_THAN_ONE_YEAR
_1TO5 = MaturityBucket.ONE_TO_FIVE_YEARS
_GT5 = MaturityBucket.GREATER_THAN_FIVE_YEARS

RISK_WEIGHTS: Mapping[AssetClass, Mapping[MaturityBucket, float]] = MappingProxyType(
    {
        AssetClass.INTEREST_RATE: MappingProxyType({_LT1: 0.02, _1TO5: 0.05, _GT5: 0.15}),
        AssetClass.CREDIT: MappingProxyType({_LT1: 0.05, _1TO5: 0.08, _GT5: 0.15}),
        AssetClass.EQUITY: MappingProxyType({_LT1: 0.15, _1TO5: 0.15, _GT5: 0.15}),
        AssetClass.COMMODITY: MappingProxyType({_LT1: 0.15, _1TO5: 0.15, _GT5: 0.15}),
        AssetClass.FOREIGN_EXCHANGE: MappingProxyType({_LT1: 0.06, _1TO5: 0.08, _GT5: 0.10}),
    }
)

# Order: IR, credit qualifying, credit non-qualifying, equity, commodity, FX
GRID_CORRELATIONS = readonly_matrix(
    [
        [1.00, 0.50, 0.50, 0.30, 0.20, 0.40],
        [0.50, 1.00, 0.90, 0.50, 0.20, 0.30],
        [0.50, 0.90, 1.00, 0.50, 0.20, 0.30],
        [0.30, 0.50, 0.50, 1.00, 0.30, 0.20],
        [0.20, 0.20, 0.20, 0.30, 1.00, 0.20],
        [0.40, 0.30, 0.30, 0.20, 0.20, 1.00],
    ]
)


@dataclass(frozen=True, kw_only=True)
class GridScheduleResult(InitialMarginResult):
    """
    Grid/Schedule initial margin result.

    Attributes
    ----------
    gross_notional_by_asset_class : dict[AssetClass, dict[MaturityBucket, float]]
        Gross notional per asset class and maturity bucket
    margin_by_asset_class : dict[AssetClass, float]
        Schedule margin per asset class before correlation
    """

    gross_notional_by_asset_class: dict[AssetClass, dict[MaturityBucket, float]] = field(
        default_factory=dict
    )
    margin_by_asset_class: dict[AssetClass, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = self._base_dict()
        data["gross_notional_by_asset_class"] = {
            ac.value: {b.value: v for b, v in buckets.items()}
            for ac, buckets in self.gross_notional_by_asset_class.items()
        }
        data["margin_by_asset_class"] = {
            ac.value: v for ac, v in self.margin_by_asset_class.items()
        }
        data["correlation_matrix"] = correlation_table(GRID_CORRELATIONS)
        return data

    def summary(self) -> str:
        """Generate formatted summary."""
        lines = [
            f"Grid/Schedule IM ({self.netting_set_id})",
            "=" * 40,
        ]
        for ac, margin in self.margin_by_asset_class.items():
            lines.append(f"{ac.value:<24}${margin:>14,.0f}")
        lines += [
            "-" * 40,
            f"Initial Margin:         ${self.initial_margin:>14,.0f}",
            f"Net Initial Margin:     ${self.net_initial_margin:>14,.0f}",
            f"Collateral Value:       ${self.collateral_value:>14,.0f}",
        ]
        return "\n".join(lines)


class GridScheduleCalculator:
    """
    Grid/Schedule initial margin calculator.

    Attributes
    ----------
    valuation_date : date | None
        Date used to bucket trades without an explicit maturity bucket
        (today when None)

    Example
    -------
    >>> calc = GridScheduleCalculator()
    >>> result = calc.calculate({"trades": [{"id": "T1", "assetClass": "INTEREST_RATE",
    ...     "notionalAmount": 1e6, "maturityBucket": "one_to_five_years"}]})
    >>> result.initial_margin
    50000.0
    """

    def __init__(self, valuation_date: date | None = None) -> None:
        self.valuation_date = valuation_date

    def maturity_bucket(self, trade: GridScheduleTrade) -> MaturityBucket:
        """Explicit bucket, or one derived from residual maturity."""
        if trade.maturity_bucket is not None:
            return trade.maturity_bucket
        if trade.maturity_date is None:
            raise CalculationInputError(
                "a maturity bucket or maturity date is required",
                record_id=trade.id or None,
                field="maturity_bucket",
            )
        years = residual_maturity(
            trade.maturity_date, self.valuation_date or date.today(), trade.start_date
        )
        return MaturityBucket.from_years(years)

    def calculate(
        self,
        im_input: GridScheduleInput | Mapping[str, Any],
    ) -> GridScheduleResult:
        """
        Calculate Grid/Schedule initial margin.

        Parameters
        ----------
        im_input : GridScheduleInput | Mapping
            Trades, netting set and collateral (haircuts in percent)

        Returns
        -------
        GridScheduleResult
            Initial margin, net margin and breakdowns

        Raises
        ------
        CalculationInputError
            If a trade is invalid or cannot be bucketed
        """
        im_input = coerce_model(GridScheduleInput, im_input)

        gross: dict[AssetClass, dict[MaturityBucket, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        for trade in im_input.trades:
            gross[trade.asset_class][self.maturity_bucket(trade)] += trade.notional_amount

        margin_by_class: dict[AssetClass, float] = {}
        components: dict[RiskFactorType, float] = {}
        for asset_class, buckets in gross.items():
            weights = RISK_WEIGHTS[asset_class]
            margin = sum(notional * weights[bucket] for bucket, notional in buckets.items())
            margin_by_class[asset_class] = margin
            rf = ASSET_CLASS_RISK_FACTOR[asset_class]
            components[rf] = components.get(rf, 0.0) + margin

        total = aggregate_components(components, GRID_CORRELATIONS)
        terms = apply_margin_terms(total, im_input.netting_set, im_input.collateral)

        logger.debug(
            "Grid/Schedule IM %.2f (net %.2f) over %d asset classes",
            total,
            terms.net_initial_margin,
            len(margin_by_class),
        )

        return GridScheduleResult(
            initial_margin=total,
            net_initial_margin=terms.net_initial_margin,
            collateral_value=terms.collateral_value,
            components=components,
            netting_set_id=im_input.netting_set.netting_agreement_id,
            trade_count=len(im_input.trades),
            total_notional=float(sum(t.notional_amount for t in im_input.trades)),
            valuation_date=self.valuation_date or date.today(),
            gross_notional_by_asset_class={ac: dict(b) for ac, b in gross.items()},
            margin_by_asset_class=margin_by_class,
        )


def calculate_grid_schedule_im(
    im_input: GridScheduleInput | Mapping[str, Any],
    valuation_date: date | None = None,
) -> GridScheduleResult:
    """
    Convenience function for a Grid/Schedule calculation.

    Parameters
    ----------
    im_input : GridScheduleInput | Mapping
        Trades, netting set and collateral
    valuation_date : date | None
        Date used for maturity bucketing

    Returns
    -------
    GridScheduleResult
        Initial margin result
    """
    return GridScheduleCalculator(valuation_date=valuation_date).calculate(im_input)
