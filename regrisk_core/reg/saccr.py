"""
SA-CCR (Standardized Approach for Counterparty Credit Risk) implementation.

Implements the Basel CRE52 framework for calculating regulatory Exposure
at Default (EAD) for a netting set.

EAD = α × (RC + PFE)

where:
    α = 1.4 (regulatory multiplier)
    RC = replacement cost
    PFE = potential future exposure = multiplier × AddOn
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from regrisk_core.collateral.agreement import NettingSet
from regrisk_core.collateral.items import CollateralItem, collateral_value
from regrisk_core.config.models import SACCRConfig, SACCRInput
from regrisk_core.exceptions import CalculationInputError, coerce_model
from regrisk_core.instruments.base import (
    AssetClass,
    MarginType,
    OptionType,
    TransactionType,
)
from regrisk_core.instruments.trades import (
    CommodityTrade,
    CreditTrade,
    EquityTrade,
    ForeignExchangeTrade,
    InterestRateTrade,
    TradeBase,
)
from regrisk_core.utils.dates import residual_maturity
from regrisk_core.utils.stats import norm_cdf

logger = logging.getLogger(__name__)

BUSINESS_DAYS_PER_YEAR = 250.0

# Supervisory factors by asset class and sub-category (CRE52.72)
SUPERVISORY_FACTORS: Mapping[AssetClass, Mapping[str, float]] = MappingProxyType(
    {
        AssetClass.INTEREST_RATE: MappingProxyType({"DEFAULT": 0.005}),
        AssetClass.FOREIGN_EXCHANGE: MappingProxyType({"DEFAULT": 0.04}),
        AssetClass.CREDIT: MappingProxyType(
            {
                "INVESTMENT_GRADE_SINGLE_NAME": 0.05,
                "SPECULATIVE_GRADE_SINGLE_NAME": 0.10,
                "INVESTMENT_GRADE_INDEX": 0.03,
                "SPECULATIVE_GRADE_INDEX": 0.06,
                "DEFAULT": 0.05,
            }
        ),
        AssetClass.EQUITY: MappingProxyType(
            {"SINGLE_NAME": 0.32, "INDEX": 0.20, "DEFAULT": 0.32}
        ),
        AssetClass.COMMODITY: MappingProxyType(
            {"ELECTRICITY": 0.40, "DEFAULT": 0.18}
        ),
    }
)


def supervisory_factor(trade: TradeBase) -> float:
    """
    Supervisory factor for a trade.

    Parameters
    ----------
    trade : TradeBase
        Any trade variant

    Returns
    -------
    float
        Factor from ``SUPERVISORY_FACTORS`` for the trade's sub-category
    """
    factors = SUPERVISORY_FACTORS[trade.asset_class]

    if isinstance(trade, CreditTrade):
        grade = "INVESTMENT_GRADE" if trade.is_investment_grade else "SPECULATIVE_GRADE"
        kind = "INDEX" if trade.is_index_trade else "SINGLE_NAME"
        return factors[f"{grade}_{kind}"]
    if isinstance(trade, EquityTrade):
        return factors["INDEX"] if trade.is_index_trade else factors["SINGLE_NAME"]
    if isinstance(trade, CommodityTrade):
        return factors["ELECTRICITY"] if trade.is_electricity_trade else factors["DEFAULT"]
    if isinstance(trade, (InterestRateTrade, ForeignExchangeTrade)):
        return factors["DEFAULT"]
    raise TypeError(f"Unsupported trade type: {type(trade).__name__}")


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class ReplacementCostResult:
    """
    Replacement cost and the components it was built from.

    Attributes
    ----------
    value : float
        RC, never negative
    current_exposure : float
        Σ current market value (V)
    collateral : float
        Haircut-adjusted collateral (C)
    variation_margin : float
        VM held (0 for unmargined sets)
    threshold, minimum_transfer_amount, independent_collateral_amount : float
        Margin terms (0 for unmargined sets)
    """

    value: float
    current_exposure: float
    collateral: float
    variation_margin: float = 0.0
    threshold: float = 0.0
    minimum_transfer_amount: float = 0.0
    independent_collateral_amount: float = 0.0

    @property
    def net_current_exposure(self) -> float:
        """V − C used by the PFE multiplier."""
        return self.current_exposure - self.variation_margin - self.collateral

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "components": {
                "current_exposure": self.current_exposure,
                "collateral": self.collateral,
                "variation_margin": self.variation_margin,
                "threshold": self.threshold,
                "minimum_transfer_amount": self.minimum_transfer_amount,
                "independent_collateral_amount": self.independent_collateral_amount,
            },
        }


@dataclass(frozen=True)
class TradeAddOn:
    """Add-on inputs for a single trade."""

    trade_id: str
    asset_class: AssetClass
    hedging_set: str
    notional: float
    maturity: float
    maturity_factor: float
    supervisory_delta: float
    effective_notional: float
    supervisory_factor: float


@dataclass(frozen=True)
class AddOnResult:
    """
    Aggregate add-on with its breakdown.

    Attributes
    ----------
    value : float
        Aggregate add-on
    components : dict[AssetClass, float]
        Add-on per asset class
    hedging_sets : dict[str, float]
        Add-on per hedging set, keyed ``"<ASSET_CLASS>/<key>"``
    trade_addons : tuple[TradeAddOn, ...]
        Per-trade inputs
    """

    value: float
    components: dict[AssetClass, float] = field(default_factory=dict)
    hedging_sets: dict[str, float] = field(default_factory=dict)
    trade_addons: tuple[TradeAddOn, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "components": {ac.value: v for ac, v in self.components.items()},
            "hedging_sets": dict(self.hedging_sets),
        }


@dataclass(frozen=True)
class PotentialFutureExposureResult:
    """PFE = multiplier × aggregate add-on."""

    value: float
    multiplier: float
    add_on: AddOnResult

    @property
    def aggregate_addon(self) -> float:
        return self.add_on.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "multiplier": self.multiplier,
            "add_on": self.add_on.to_dict(),
        }


@dataclass(frozen=True)
class SACCRResult:
    """
    Container for SA-CCR calculation results.

    Attributes
    ----------
    exposure_at_default : float
        EAD = α × (RC + PFE)
    replacement_cost : ReplacementCostResult
        RC and components
    potential_future_exposure : PotentialFutureExposureResult
        PFE, multiplier and add-on breakdown
    alpha : float
        Regulatory multiplier used
    netting_set_id : str
        Echo of the netting agreement id
    margin_type : MarginType
        Echo of the margin type
    trade_count : int
        Number of trades
    asset_classes : tuple[AssetClass, ...]
        Asset classes present, in first-seen order
    total_notional : float
        Σ notional
    valuation_date : date
        Date maturities were measured from
    timestamp : datetime
        Calculation time
    """

    exposure_at_default: float
    replacement_cost: ReplacementCostResult
    potential_future_exposure: PotentialFutureExposureResult
    alpha: float
    netting_set_id: str
    margin_type: MarginType
    trade_count: int
    asset_classes: tuple[AssetClass, ...]
    total_notional: float
    valuation_date: date
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def ead(self) -> float:
        return self.exposure_at_default

    @property
    def trade_addons(self) -> tuple[TradeAddOn, ...]:
        return self.potential_future_exposure.add_on.trade_addons

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "exposure_at_default": self.exposure_at_default,
            "replacement_cost": self.replacement_cost.to_dict(),
            "potential_future_exposure": self.potential_future_exposure.to_dict(),
            "alpha": self.alpha,
            "timestamp": self.timestamp.isoformat(),
            "input_summary": {
                "netting_set_id": self.netting_set_id,
                "trade_count": self.trade_count,
                "asset_classes": [ac.value for ac in self.asset_classes],
                "margin_type": self.margin_type.value,
                "total_notional": self.total_notional,
                "valuation_date": self.valuation_date.isoformat(),
            },
        }

    def summary(self) -> str:
        """Generate formatted summary."""
        pfe = self.potential_future_exposure
        lines = [
            f"SA-CCR Summary ({self.netting_set_id})",
            "=" * 40,
            f"Replacement Cost (RC):  ${self.replacement_cost.value:>12,.0f}",
            f"Aggregate Add-On:       ${pfe.aggregate_addon:>12,.0f}",
            f"Multiplier:             {pfe.multiplier:>12.4f}",
            f"PFE:                    ${pfe.value:>12,.0f}",
            "-" * 40,
            f"EAD (α={self.alpha}):            ${self.exposure_at_default:>12,.0f}",
        ]
        return "\n".join(lines)


# =============================================================================
# Calculator
# =============================================================================


class SACCRCalculator:
    """
    SA-CCR EAD calculator.

    Attributes
    ----------
    alpha : float
        Regulatory multiplier (default 1.4)
    multiplier_floor : float
        PFE multiplier floor (default 0.05)
    maturity_floor_days : int
        Minimum maturity in business days (default 10)
    default_option_volatility : float
        Volatility for option deltas when a trade carries none
    risk_free_rate : float
        Rate used in the Black-Scholes delta
    valuation_date : date | None
        Date maturities are measured from (today when None)

    Example
    -------
    >>> calc = SACCRCalculator()
    >>> result = calc.calculate(saccr_input)
    >>> print(f"EAD: ${result.ead:,.0f}")
    """

    def __init__(
        self,
        alpha: float = 1.4,
        multiplier_floor: float = 0.05,
        maturity_floor_days: int = 10,
        default_option_volatility: float = 0.2,
        risk_free_rate: float = 0.02,
        valuation_date: date | None = None,
    ) -> None:
        if alpha < 1.0:
            raise ValueError(f"Alpha must be >= 1.0, got {alpha}")
        if not 0 < multiplier_floor < 1:
            raise ValueError(f"Multiplier floor must be in (0, 1), got {multiplier_floor}")
        if default_option_volatility <= 0:
            raise ValueError(
                f"Default option volatility must be positive, got {default_option_volatility}"
            )
        self.alpha = alpha
        self.multiplier_floor = multiplier_floor
        self.maturity_floor_days = maturity_floor_days
        self.default_option_volatility = default_option_volatility
        self.risk_free_rate = risk_free_rate
        self.valuation_date = valuation_date

    @classmethod
    def from_config(
        cls,
        config: SACCRConfig,
        valuation_date: date | None = None,
    ) -> "SACCRCalculator":
        """Create a calculator from a validated ``SACCRConfig``."""
        return cls(
            alpha=config.alpha,
            multiplier_floor=config.multiplier_floor,
            maturity_floor_days=config.maturity_floor_days,
            default_option_volatility=config.default_option_volatility,
            risk_free_rate=config.risk_free_rate,
            valuation_date=valuation_date,
        )

    def _as_of(self) -> date:
        return self.valuation_date or date.today()

    # -------------------------------------------------------------------------
    # Replacement cost
    # -------------------------------------------------------------------------

    def replacement_cost(
        self,
        trades: Sequence[TradeBase],
        netting_set: NettingSet,
        collateral: Iterable[CollateralItem] = (),
    ) -> ReplacementCostResult:
        """
        Calculate replacement cost.

        Unmargined: RC = max(V − C, 0)
        Margined:   RC = max(V − VM − C, TH + MTA − NICA, 0)

        Parameters
        ----------
        trades : Sequence[TradeBase]
            Trades in the netting set
        netting_set : NettingSet
            Margin terms
        collateral : Iterable[CollateralItem]
            Collateral held, haircuts as fractions

        Returns
        -------
        ReplacementCostResult
            RC value and components
        """
        current_exposure = float(sum(t.current_market_value for t in trades))
        held = collateral_value(collateral)

        # Margin terms read as zero on an unmargined set
        vm = netting_set.effective_variation_margin
        th = netting_set.effective_threshold
        mta = netting_set.effective_mta
        nica = netting_set.effective_nica

        value = max(current_exposure - vm - held, 0.0)
        if netting_set.is_margined:
            value = max(value, th + mta - nica)

        return ReplacementCostResult(
            value=value,
            current_exposure=current_exposure,
            collateral=held,
            variation_margin=vm,
            threshold=th,
            minimum_transfer_amount=mta,
            independent_collateral_amount=nica,
        )

    # -------------------------------------------------------------------------
    # Potential future exposure
    # -------------------------------------------------------------------------

    def potential_future_exposure(
        self,
        saccr_input: SACCRInput | Mapping[str, Any],
        replacement_cost: ReplacementCostResult,
    ) -> PotentialFutureExposureResult:
        """
        Calculate PFE = multiplier × aggregate add-on.

        Trades are grouped by asset class and then by hedging set. Each
        hedging set contributes |Σ δ × notional × MF| × SF, and the
        aggregate add-on is the sum over all hedging sets.

        Parameters
        ----------
        saccr_input : SACCRInput | Mapping
            Trades and netting set
        replacement_cost : ReplacementCostResult
            Output of ``replacement_cost``, supplies V − C

        Returns
        -------
        PotentialFutureExposureResult
            PFE value, multiplier and add-on breakdown
        """
        saccr_input = coerce_model(SACCRInput, saccr_input)
        self._validate(saccr_input)
        netting_set = saccr_input.netting_set

        hedging_sets: dict[tuple[AssetClass, str], list[TradeAddOn]] = defaultdict(list)
        trade_addons = []
        for trade in saccr_input.trades:
            addon = self._trade_addon(trade, netting_set)
            trade_addons.append(addon)
            hedging_sets[(trade.asset_class, addon.hedging_set)].append(addon)

        components: dict[AssetClass, float] = {}
        hedging_set_addons: dict[str, float] = {}
        for (asset_class, key), addons in hedging_sets.items():
            effective_notional = sum(a.effective_notional for a in addons)
            # First trade's factor applies to the whole hedging set
            hs_addon = abs(effective_notional) * addons[0].supervisory_factor
            hedging_set_addons[f"{asset_class.value}/{key}"] = hs_addon
            components[asset_class] = components.get(asset_class, 0.0) + hs_addon

        aggregate = float(sum(hedging_set_addons.values()))
        multiplier = self._calculate_multiplier(
            replacement_cost.net_current_exposure, aggregate
        )

        logger.debug(
            "SA-CCR add-on %.2f over %d hedging sets, multiplier %.4f",
            aggregate,
            len(hedging_set_addons),
            multiplier,
        )

        return PotentialFutureExposureResult(
            value=multiplier * aggregate,
            multiplier=multiplier,
            add_on=AddOnResult(
                value=aggregate,
                components=components,
                hedging_sets=hedging_set_addons,
                trade_addons=tuple(trade_addons),
            ),
        )

    def calculate(self, saccr_input: SACCRInput | Mapping[str, Any]) -> SACCRResult:
        """
        Calculate SA-CCR EAD for a netting set.

        Parameters
        ----------
        saccr_input : SACCRInput | Mapping
            Trades, netting set and collateral. Raw mappings are validated
            first.

        Returns
        -------
        SACCRResult
            Complete SA-CCR calculation results

        Raises
        ------
        CalculationInputError
            If any trade or the netting set fails validation
        """
        saccr_input = coerce_model(SACCRInput, saccr_input)
        self._validate(saccr_input)

        rc = self.replacement_cost(
            saccr_input.trades, saccr_input.netting_set, saccr_input.collateral
        )
        pfe = self.potential_future_exposure(saccr_input, rc)
        ead = self.alpha * (rc.value + pfe.value)

        asset_classes = tuple(dict.fromkeys(t.asset_class for t in saccr_input.trades))
        logger.info(
            "SA-CCR netting set %s: RC=%.2f PFE=%.2f EAD=%.2f",
            saccr_input.netting_set.netting_agreement_id,
            rc.value,
            pfe.value,
            ead,
        )

        return SACCRResult(
            exposure_at_default=ead,
            replacement_cost=rc,
            potential_future_exposure=pfe,
            alpha=self.alpha,
            netting_set_id=saccr_input.netting_set.netting_agreement_id,
            margin_type=saccr_input.netting_set.margin_type,
            trade_count=len(saccr_input.trades),
            asset_classes=asset_classes,
            total_notional=float(sum(t.notional_amount for t in saccr_input.trades)),
            valuation_date=self._as_of(),
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _validate(self, saccr_input: SACCRInput) -> None:
        """Reject inputs the formulas cannot handle."""
        if not saccr_input.trades:
            raise CalculationInputError("No trades provided for SA-CCR calculation")

        for trade in saccr_input.trades:
            if trade.transaction_type is not TransactionType.OPTION:
                continue
            if trade.option_type is None:
                raise CalculationInputError(
                    "option trades require an option type",
                    record_id=trade.id,
                    field="option_type",
                )
            for name in ("strike_price", "underlying_price"):
                value = getattr(trade, name)
                if value is None or value <= 0:
                    raise CalculationInputError(
                        "option trades require a positive value",
                        record_id=trade.id,
                        field=name,
                    )

    def _trade_addon(self, trade: TradeBase, netting_set: NettingSet) -> TradeAddOn:
        maturity = self._maturity(trade)
        mf = self._maturity_factor(maturity, netting_set)
        delta = self._supervisory_delta(trade, maturity)
        sf = supervisory_factor(trade)
        return TradeAddOn(
            trade_id=trade.id,
            asset_class=trade.asset_class,
            hedging_set=trade.hedging_set_key,
            notional=trade.notional_amount,
            maturity=maturity,
            maturity_factor=mf,
            supervisory_delta=delta,
            effective_notional=delta * trade.notional_amount * mf,
            supervisory_factor=sf,
        )

    def _maturity(self, trade: TradeBase) -> float:
        """Residual maturity in years, floored at the minimum maturity."""
        m = residual_maturity(trade.maturity_date, self._as_of(), trade.start_date)
        return max(m, self.maturity_floor_days / BUSINESS_DAYS_PER_YEAR)

    def _maturity_factor(self, maturity: float, netting_set: NettingSet) -> float:
        """
        Calculate maturity factor.

        Unmargined: MF = sqrt(min(M, 1))
        Margined:   MF = 1.5 × sqrt(MPOR / 365)
        """
        if netting_set.is_margined:
            return 1.5 * math.sqrt(netting_set.margin_period_of_risk / 365.0)
        return math.sqrt(min(maturity, 1.0))

    def _supervisory_delta(self, trade: TradeBase, maturity: float) -> float:
        """
        Supervisory delta.

        Linear trades take the direction sign, options a signed
        Black-Scholes delta, basis and volatility trades +1.
        """
        sign = trade.position_type.sign

        if trade.transaction_type is TransactionType.LINEAR:
            return sign
        if trade.transaction_type is not TransactionType.OPTION:
            return 1.0

        spot = trade.underlying_price
        strike = trade.strike_price
        if spot is None or strike is None:
            raise CalculationInputError(
                "option requires strike and underlying price",
                record_id=trade.id,
                field="strike_price" if strike is None else "underlying_price",
            )
        sigma = trade.volatility or self.default_option_volatility
        t = trade.time_to_maturity if trade.time_to_maturity else maturity
        t = max(t, 1.0 / 365.0)

        d1 = (
            math.log(spot / strike)
            + (self.risk_free_rate + 0.5 * sigma**2) * t
        ) / (sigma * math.sqrt(t))
        call_delta = norm_cdf(d1)

        if trade.option_type is OptionType.CALL:
            return sign * call_delta
        return sign * (call_delta - 1.0)

    def _calculate_multiplier(self, net_current_exposure: float, addon: float) -> float:
        """
        Calculate PFE multiplier.

        multiplier = min(1, floor + (1 − floor) × exp((V − C) / (2 × AddOn)))

        Equal to 1 when the add-on is zero.
        """
        if addon <= 0:
            return 1.0

        floor = self.multiplier_floor
        exponent = net_current_exposure / (2.0 * addon)
        # exp overflows for large positive exponents; the cap makes them 1 anyway
        if exponent > 0:
            return 1.0
        return min(1.0, floor + (1.0 - floor) * math.exp(exponent))


# =============================================================================
# Convenience functions
# =============================================================================


def calculate_replacement_cost(
    trades: Sequence[TradeBase],
    netting_set: NettingSet,
    collateral: Iterable[CollateralItem] = (),
) -> ReplacementCostResult:
    """
    Calculate SA-CCR replacement cost.

    Parameters
    ----------
    trades : Sequence[TradeBase]
        Trades in the netting set
    netting_set : NettingSet
        Margin terms
    collateral : Iterable[CollateralItem]
        Collateral held

    Returns
    -------
    ReplacementCostResult
        RC value and components
    """
    return SACCRCalculator().replacement_cost(trades, netting_set, collateral)


def calculate_potential_future_exposure(
    saccr_input: SACCRInput | Mapping[str, Any],
    replacement_cost: ReplacementCostResult,
    valuation_date: date | None = None,
) -> PotentialFutureExposureResult:
    """Calculate SA-CCR PFE given a replacement cost result."""
    calc = SACCRCalculator(valuation_date=valuation_date)
    return calc.potential_future_exposure(saccr_input, replacement_cost)


def calculate_saccr(
    saccr_input: SACCRInput | Mapping[str, Any],
    valuation_date: date | None = None,
) -> SACCRResult:
    """
    Convenience function for a full SA-CCR calculation.

    Parameters
    ----------
    saccr_input : SACCRInput | Mapping
        Trades, netting set and collateral
    valuation_date : date | None
        Date maturities are measured from (today when None)

    Returns
    -------
    SACCRResult
        EAD with RC and PFE breakdown
    """
    return SACCRCalculator(valuation_date=valuation_date).calculate(saccr_input)


def calculate_saccr_ead(
    saccr_input: SACCRInput | Mapping[str, Any],
    alpha: float = 1.4,
    valuation_date: date | None = None,
) -> float:
    """Return only the EAD figure."""
    calc = SACCRCalculator(alpha=alpha, valuation_date=valuation_date)
    return calc.calculate(saccr_input).exposure_at_default
