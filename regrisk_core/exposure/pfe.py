"""
Potential Future Exposure (PFE) engine.

Four methods are selected by ``netting_set.calculation_method``:

- Regulatory standardised approach: SA-CCR style add-on per asset class,
  scaled by supervisory factor, horizon and confidence
- Internal model: notional × internal volatility × horizon × confidence
- Historical simulation: as internal model with historical volatilities
  and a 1.2 historical factor
- Monte Carlo: GBM market factor per asset class, PFE as a quantile of
  the per-path peak exposure

Expected exposure is the method-specific multiplier × PFE (Monte Carlo:
mean of the per-path peaks). The analytical methods share one exposure
profile, notional × supervisory PFE factor × shape, and peak exposure is
its maximum.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import numpy as np

from regrisk_core._types import FloatArray, PathArray
from regrisk_core.config.models import (
    PFECalculationMethod,
    PFEConfidenceLevel,
    PFEConfig,
    PFEInput,
    PFENettingSet,
    PFETimeHorizon,
)
from regrisk_core.exceptions import coerce_model
from regrisk_core.exposure.metrics import PathExposureSummary
from regrisk_core.exposure.profile import ExposurePoint, build_profile, profile_shape
from regrisk_core.instruments.base import AssetClass, MarginType, TransactionType
from regrisk_core.instruments.trades import TradeBase
from regrisk_core.reg.saccr import SUPERVISORY_FACTORS
from regrisk_core.utils.dates import residual_maturity, year_fraction
from regrisk_core.utils.stats import box_muller

logger = logging.getLogger(__name__)

_IR = AssetClass.INTEREST_RATE
_FX = AssetClass.FOREIGN_EXCHANGE
_CR = AssetClass.CREDIT
_EQ = AssetClass.EQUITY
_CO = AssetClass.COMMODITY

INTERNAL_MODEL_VOLATILITIES: Mapping[AssetClass, float] = MappingProxyType(
    {_IR: 0.01, _FX: 0.08, _CR: 0.10, _EQ: 0.20, _CO: 0.15}
)

HISTORICAL_VOLATILITIES: Mapping[AssetClass, float] = MappingProxyType(
    {_IR: 0.015, _FX: 0.12, _CR: 0.15, _EQ: 0.30, _CO: 0.25}
)
HISTORICAL_FACTOR = 1.2

# Annual GBM drift of the Monte Carlo market factors
ASSET_CLASS_DRIFTS: Mapping[AssetClass, float] = MappingProxyType(
    {_IR: 0.005, _FX: 0.01, _CR: 0.02, _EQ: 0.07, _CO: 0.03}
)

ASSET_CLASS_STRESS_FACTORS: Mapping[AssetClass, float] = MappingProxyType(
    {_IR: 1.5, _FX: 2.0, _CR: 2.5, _EQ: 3.0, _CO: 2.5}
)
MIN_STRESS_FACTOR = 1.5

EE_MULTIPLIERS: Mapping[PFECalculationMethod, float] = MappingProxyType(
    {
        PFECalculationMethod.REGULATORY_STANDARDISED: 0.7,
        PFECalculationMethod.INTERNAL_MODEL: 0.65,
        PFECalculationMethod.HISTORICAL_SIMULATION: 0.6,
    }
)

STRESS_MULTIPLIERS: Mapping[PFECalculationMethod, float] = MappingProxyType(
    {
        PFECalculationMethod.REGULATORY_STANDARDISED: 2.5,
        PFECalculationMethod.INTERNAL_MODEL: 3.0,
        PFECalculationMethod.HISTORICAL_SIMULATION: 2.2,
    }
)

# Share of the Monte Carlo PFE attributed to asset classes
MC_DIVERSIFICATION_FACTOR = 0.85

_BASIS_ADJUSTMENT = 0.5
_VOLATILITY_ADJUSTMENT = 1.5
_OPTION_ADJUSTMENT = 0.8


def transaction_adjustment(trade: TradeBase) -> float:
    """
    Notional adjustment by transaction type.

    Linear 1, basis 0.5, volatility 1.5. Options use ±0.8 by direction,
    scaled by sqrt(volatility) when the trade carries one.
    """
    if trade.transaction_type is TransactionType.OPTION:
        adjustment = _OPTION_ADJUSTMENT * trade.position_type.sign
        if trade.volatility:
            adjustment *= np.sqrt(trade.volatility)
        return float(adjustment)
    if trade.transaction_type is TransactionType.BASIS:
        return _BASIS_ADJUSTMENT
    if trade.transaction_type is TransactionType.VOLATILITY:
        return _VOLATILITY_ADJUSTMENT
    return 1.0


def adjusted_notional_factor(years: float) -> float:
    """Maturity scaling clamp(years / 5, 0.05, 1)."""
    return min(1.0, max(0.05, years / 5.0))


def pfe_factor(
    asset_class: AssetClass,
    time_horizon: PFETimeHorizon,
    confidence_level: PFEConfidenceLevel,
) -> float:
    """SF × sqrt(days / 365) × z."""
    return (
        SUPERVISORY_FACTORS[asset_class]["DEFAULT"]
        * time_horizon.time_factor
        * confidence_level.z_score
    )


def mpor_scaling(netting_set: PFENettingSet) -> float:
    """sqrt(MPOR / 10) for margined sets, 1 otherwise."""
    if netting_set.margin_type is MarginType.MARGINED:
        return float(np.sqrt(netting_set.margin_period_of_risk / 10.0))
    return 1.0


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class PFEResult:
    """
    Container for PFE calculation results.

    Attributes
    ----------
    potential_future_exposure : float
        Headline PFE at the requested horizon and confidence
    expected_exposure : float
        Method multiplier × PFE (Monte Carlo: mean of path peaks)
    peak_exposure : float
        Maximum over the exposure profile
    stressed_pfe : float
        PFE under the method's stress multiplier
    exposure_profile : tuple[ExposurePoint, ...]
        Exposure at equally spaced dates out to the horizon
    asset_class_breakdown : dict[AssetClass, float]
        PFE contribution per asset class
    netting_set_id : str
        Echo of the netting agreement id
    margin_type : MarginType
        Echo of the margin type
    time_horizon : PFETimeHorizon
        Echo of the horizon
    confidence_level : PFEConfidenceLevel
        Echo of the confidence level
    calculation_method : PFECalculationMethod
        Method actually used
    trade_count : int
        Number of trades
    asset_classes : tuple[AssetClass, ...]
        Asset classes present, in first-seen order
    total_notional : float
        Σ notional
    valuation_date : date
        Profile start date
    timestamp : datetime
        Calculation time
    """

    potential_future_exposure: float
    expected_exposure: float
    peak_exposure: float
    stressed_pfe: float
    exposure_profile: tuple[ExposurePoint, ...]
    asset_class_breakdown: dict[AssetClass, float]
    netting_set_id: str
    margin_type: MarginType
    time_horizon: PFETimeHorizon
    confidence_level: PFEConfidenceLevel
    calculation_method: PFECalculationMethod
    trade_count: int
    asset_classes: tuple[AssetClass, ...]
    total_notional: float
    valuation_date: date
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def pfe(self) -> float:
        return self.potential_future_exposure

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "potential_future_exposure": self.potential_future_exposure,
            "expected_exposure": self.expected_exposure,
            "peak_exposure": self.peak_exposure,
            "stressed_pfe": self.stressed_pfe,
            "exposure_profile": {
                point.date.isoformat(): point.exposure for point in self.exposure_profile
            },
            "asset_class_breakdown": {
                ac.value: v for ac, v in self.asset_class_breakdown.items()
            },
            "timestamp": self.timestamp.isoformat(),
            "input_summary": {
                "netting_set_id": self.netting_set_id,
                "trade_count": self.trade_count,
                "asset_classes": [ac.value for ac in self.asset_classes],
                "margin_type": self.margin_type.value,
                "total_notional": self.total_notional,
                "time_horizon": self.time_horizon.value,
                "confidence_level": self.confidence_level.value,
                "calculation_method": self.calculation_method.value,
                "valuation_date": self.valuation_date.isoformat(),
            },
        }

    def summary(self) -> str:
        """Generate formatted summary."""
        lines = [
            f"PFE Summary ({self.netting_set_id})",
            "=" * 40,
            f"Method:      {self.calculation_method.value}",
            f"Horizon:     {self.time_horizon.value} @ {self.confidence_level.value}",
            "-" * 40,
            f"PFE:                    ${self.potential_future_exposure:>12,.0f}",
            f"Expected Exposure:      ${self.expected_exposure:>12,.0f}",
            f"Peak Exposure:          ${self.peak_exposure:>12,.0f}",
            f"Stressed PFE:           ${self.stressed_pfe:>12,.0f}",
        ]
        return "\n".join(lines)


@dataclass(frozen=True)
class _MethodOutput:
    pfe: float
    expected_exposure: float
    stressed_pfe: float
    breakdown: dict[AssetClass, float]
    profile: tuple[ExposurePoint, ...]


# =============================================================================
# Calculator
# =============================================================================


class PFECalculator:
    """
    Potential Future Exposure calculator.

    Attributes
    ----------
    profile_intervals : int
        Number of equal intervals in the exposure profile
    n_simulations : int
        Monte Carlo paths
    seed : int | None
        Monte Carlo seed (non-deterministic when None)
    valuation_date : date | None
        Profile start and maturity reference date (today when None)

    Example
    -------
    >>> calc = PFECalculator(seed=42)
    >>> result = calc.calculate(pfe_input)
    >>> print(f"PFE: ${result.pfe:,.0f}")
    """

    def __init__(
        self,
        profile_intervals: int = 10,
        n_simulations: int = 10000,
        seed: int | None = None,
        valuation_date: date | None = None,
    ) -> None:
        if profile_intervals < 1:
            raise ValueError(f"Profile intervals must be >= 1, got {profile_intervals}")
        if n_simulations < 1:
            raise ValueError(f"Number of simulations must be >= 1, got {n_simulations}")
        self.profile_intervals = profile_intervals
        self.n_simulations = n_simulations
        self.seed = seed
        self.valuation_date = valuation_date

    @classmethod
    def from_config(
        cls,
        config: PFEConfig,
        valuation_date: date | None = None,
    ) -> "PFECalculator":
        """Create a calculator from a validated ``PFEConfig``."""
        return cls(
            profile_intervals=config.profile_intervals,
            n_simulations=config.n_simulations,
            seed=config.seed,
            valuation_date=valuation_date,
        )

    def _as_of(self) -> date:
        return self.valuation_date or date.today()

    def calculate(self, pfe_input: PFEInput | Mapping[str, Any]) -> PFEResult:
        """
        Calculate PFE for a netting set.

        Parameters
        ----------
        pfe_input : PFEInput | Mapping
            Trades and a netting set carrying horizon, confidence and method

        Returns
        -------
        PFEResult
            PFE, EE, peak, stressed PFE, profile and breakdown

        Raises
        ------
        CalculationInputError
            If the input fails validation
        """
        pfe_input = coerce_model(PFEInput, pfe_input)
        trades = pfe_input.trades
        netting_set = pfe_input.netting_set
        method = netting_set.calculation_method

        by_class: dict[AssetClass, list[TradeBase]] = defaultdict(list)
        for trade in trades:
            by_class[trade.asset_class].append(trade)

        if method is PFECalculationMethod.MONTE_CARLO:
            output = self._monte_carlo(by_class, netting_set)
        elif method is PFECalculationMethod.INTERNAL_MODEL:
            output = self._volatility_method(
                by_class, netting_set, method, INTERNAL_MODEL_VOLATILITIES, 1.0
            )
        elif method is PFECalculationMethod.HISTORICAL_SIMULATION:
            output = self._volatility_method(
                by_class, netting_set, method, HISTORICAL_VOLATILITIES, HISTORICAL_FACTOR
            )
        else:
            output = self._standardised(by_class, netting_set)

        peak = max((p.exposure for p in output.profile), default=0.0)

        logger.debug(
            "PFE %.2f (%s, %s @ %s) over %d trades",
            output.pfe,
            method.value,
            netting_set.time_horizon.value,
            netting_set.confidence_level.value,
            len(trades),
        )

        return PFEResult(
            potential_future_exposure=output.pfe,
            expected_exposure=output.expected_exposure,
            peak_exposure=peak,
            stressed_pfe=output.stressed_pfe,
            exposure_profile=output.profile,
            asset_class_breakdown=output.breakdown,
            netting_set_id=netting_set.netting_agreement_id,
            margin_type=netting_set.margin_type,
            time_horizon=netting_set.time_horizon,
            confidence_level=netting_set.confidence_level,
            calculation_method=method,
            trade_count=len(trades),
            asset_classes=tuple(by_class),
            total_notional=float(sum(t.notional_amount for t in trades)),
            valuation_date=self._as_of(),
        )

    # -------------------------------------------------------------------------
    # Analytical methods
    # -------------------------------------------------------------------------

    def _analytical_profile(
        self,
        by_class: Mapping[AssetClass, Sequence[TradeBase]],
        netting_set: PFENettingSet,
    ) -> tuple[ExposurePoint, ...]:
        """Profile Σ notional_class × pfe_factor_class × shape(day)."""
        level = float(
            sum(
                sum(t.notional_amount for t in trades)
                * pfe_factor(
                    asset_class, netting_set.time_horizon, netting_set.confidence_level
                )
                for asset_class, trades in by_class.items()
            )
        )
        total_days = netting_set.time_horizon.days
        return build_profile(
            self._as_of(),
            total_days,
            lambda day: level * profile_shape(day, total_days),
            self.profile_intervals,
        )

    def _standardised(
        self,
        by_class: Mapping[AssetClass, Sequence[TradeBase]],
        netting_set: PFENettingSet,
    ) -> _MethodOutput:
        method = PFECalculationMethod.REGULATORY_STANDARDISED
        scale = mpor_scaling(netting_set)
        as_of = self._as_of()

        breakdown: dict[AssetClass, float] = {}
        for asset_class, trades in by_class.items():
            adjusted = sum(
                t.notional_amount
                * abs(transaction_adjustment(t))
                * adjusted_notional_factor(year_fraction(as_of, t.maturity_date))
                for t in trades
            )
            sf = SUPERVISORY_FACTORS[asset_class]["DEFAULT"]
            factor = pfe_factor(
                asset_class, netting_set.time_horizon, netting_set.confidence_level
            )
            breakdown[asset_class] = adjusted * sf * factor * scale

        total = float(sum(breakdown.values()))
        return _MethodOutput(
            pfe=total,
            expected_exposure=total * EE_MULTIPLIERS[method],
            stressed_pfe=total * STRESS_MULTIPLIERS[method],
            breakdown=breakdown,
            profile=self._analytical_profile(by_class, netting_set),
        )

    def _volatility_method(
        self,
        by_class: Mapping[AssetClass, Sequence[TradeBase]],
        netting_set: PFENettingSet,
        method: PFECalculationMethod,
        volatilities: Mapping[AssetClass, float],
        historical_factor: float,
    ) -> _MethodOutput:
        horizon = netting_set.time_horizon.time_factor
        z = netting_set.confidence_level.z_score

        breakdown: dict[AssetClass, float] = {}
        for asset_class, trades in by_class.items():
            notional = sum(t.notional_amount for t in trades)
            breakdown[asset_class] = (
                notional * volatilities[asset_class] * horizon * z * historical_factor
            )

        total = float(sum(breakdown.values()))
        return _MethodOutput(
            pfe=total,
            expected_exposure=total * EE_MULTIPLIERS[method],
            stressed_pfe=total * STRESS_MULTIPLIERS[method],
            breakdown=breakdown,
            profile=self._analytical_profile(by_class, netting_set),
        )

    # -------------------------------------------------------------------------
    # Monte Carlo
    # -------------------------------------------------------------------------

    def simulate_market_factors(
        self,
        asset_classes: Sequence[AssetClass],
        horizon_years: float,
        n_steps: int,
        rng: np.random.Generator,
    ) -> dict[AssetClass, PathArray]:
        """
        Simulate GBM market factors starting at 1.

        Parameters
        ----------
        asset_classes : Sequence[AssetClass]
            Classes to simulate, one independent factor each
        horizon_years : float
            Simulation horizon in years
        n_steps : int
            Number of time steps to the horizon
        rng : np.random.Generator
            Random source

        Returns
        -------
        dict[AssetClass, PathArray]
            Factor paths of shape (n_simulations, n_steps + 1), column 0 = 1

        Notes
        -----
        Uses log-Euler discretization:
            F(t+dt) = F(t) * exp[(μ - 0.5σ²)dt + σ√dt * Z]
        """
        dt = horizon_years / n_steps
        paths: dict[AssetClass, PathArray] = {}
        for asset_class in asset_classes:
            mu = ASSET_CLASS_DRIFTS[asset_class]
            sigma = INTERNAL_MODEL_VOLATILITIES[asset_class]
            z = box_muller(rng, (self.n_simulations, n_steps))
            increments = (mu - 0.5 * sigma**2) * dt + sigma * np.sqrt(dt) * z
            log_paths = np.concatenate(
                [np.zeros((self.n_simulations, 1)), np.cumsum(increments, axis=1)], axis=1
            )
            paths[asset_class] = np.exp(log_paths)
        return paths

    def _trade_values(
        self,
        trade: TradeBase,
        factor: PathArray,
        elapsed: FloatArray,
    ) -> PathArray:
        """Trade value along factor paths, decaying with remaining life."""
        maturity = residual_maturity(trade.maturity_date, self._as_of(), trade.start_date)
        remaining = np.clip(maturity - elapsed, 0.0, 1.0)
        move = trade.notional_amount * (factor - 1.0) * remaining
        if trade.transaction_type is TransactionType.OPTION:
            return trade.position_type.sign * np.maximum(move, 0.0)
        return trade.position_type.sign * move

    def _monte_carlo(
        self,
        by_class: Mapping[AssetClass, Sequence[TradeBase]],
        netting_set: PFENettingSet,
    ) -> _MethodOutput:
        horizon = netting_set.time_horizon
        quantile = netting_set.confidence_level.quantile
        n_steps = horizon.simulation_steps
        horizon_years = horizon.days / 365.0

        rng = np.random.default_rng(self.seed)
        factors = self.simulate_market_factors(list(by_class), horizon_years, n_steps, rng)
        elapsed = np.linspace(0.0, horizon_years, n_steps + 1)

        values = np.zeros((self.n_simulations, n_steps + 1))
        for asset_class, trades in by_class.items():
            for trade in trades:
                values += self._trade_values(trade, factors[asset_class], elapsed)

        stats = PathExposureSummary.from_values(values, quantile)

        notional_by_class = {
            ac: float(sum(t.notional_amount for t in trades)) for ac, trades in by_class.items()
        }
        total_notional = sum(notional_by_class.values())
        weights = {ac: n / total_notional for ac, n in notional_by_class.items()}

        stress_factor = max(
            MIN_STRESS_FACTOR,
            sum(w * ASSET_CLASS_STRESS_FACTORS[ac] for ac, w in weights.items()),
        )
        breakdown = {
            ac: stats.pfe * w * MC_DIVERSIFICATION_FACTOR for ac, w in weights.items()
        }

        def exposure_at(day: int) -> float:
            step = min(n_steps, int(round(day / horizon.days * n_steps)))
            return float(stats.pfe_profile[step])

        profile = build_profile(
            self._as_of(), horizon.days, exposure_at, self.profile_intervals
        )

        logger.debug(
            "Monte Carlo PFE over %d paths x %d steps, seed=%s",
            self.n_simulations,
            n_steps,
            self.seed,
        )

        return _MethodOutput(
            pfe=stats.pfe,
            expected_exposure=stats.expected_exposure,
            stressed_pfe=stats.max_exposure * stress_factor,
            breakdown=breakdown,
            profile=profile,
        )


def calculate_pfe_exposure(
    pfe_input: PFEInput | Mapping[str, Any],
    config: PFEConfig | None = None,
    valuation_date: date | None = None,
) -> PFEResult:
    """
    Convenience function for a PFE calculation.

    Parameters
    ----------
    pfe_input : PFEInput | Mapping
        Trades and netting set
    config : PFEConfig | None
        Profile and Monte Carlo settings (defaults when None)
    valuation_date : date | None
        Profile start date (today when None)

    Returns
    -------
    PFEResult
        PFE result
    """
    calc = PFECalculator.from_config(config or PFEConfig(), valuation_date=valuation_date)
    return calc.calculate(pfe_input)
