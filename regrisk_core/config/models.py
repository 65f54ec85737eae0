"""
Pydantic models for engine configuration and calculation inputs.

These models provide validation and type-safe configuration for:
- Engine parameters (SA-CCR alpha, PFE profile, Monte Carlo settings)
- PFE and VaR calculation parameters (horizon, confidence, method)
- Calculation input envelopes for each engine
"""

import math
import warnings
from typing import Any

from pydantic import BaseModel, Field, field_validator

from regrisk_core.collateral.agreement import IMNettingSet, NettingSet
from regrisk_core.collateral.items import CollateralItem
from regrisk_core.instruments.base import LenientEnum, Record
from regrisk_core.instruments.margin import GridScheduleTrade, SIMMTrade
from regrisk_core.instruments.positions import VaRPosition
from regrisk_core.instruments.trades import Trade
from regrisk_core.market.history import HistoricalMarketData


# =============================================================================
# PFE parameters
# =============================================================================


class PFETimeHorizon(LenientEnum):
    """PFE horizons with their calendar day counts."""

    ONE_WEEK = "1_week"
    TWO_WEEKS = "2_weeks"
    ONE_MONTH = "1_month"
    THREE_MONTHS = "3_months"
    SIX_MONTHS = "6_months"
    ONE_YEAR = "1_year"

    @property
    def days(self) -> int:
        return _PFE_HORIZON_DAYS[self.value]

    @property
    def time_factor(self) -> float:
        """sqrt(days / 365), exactly 1 for one year."""
        if self is PFETimeHorizon.ONE_YEAR:
            return 1.0
        return math.sqrt(self.days / 365.0)

    @property
    def simulation_steps(self) -> int:
        """Trading-day steps used by the Monte Carlo method."""
        return _PFE_HORIZON_STEPS[self.value]


_PFE_HORIZON_DAYS = {
    "1_week": 7,
    "2_weeks": 14,
    "1_month": 30,
    "3_months": 90,
    "6_months": 180,
    "1_year": 365,
}

_PFE_HORIZON_STEPS = {
    "1_week": 5,
    "2_weeks": 10,
    "1_month": 21,
    "3_months": 63,
    "6_months": 126,
    "1_year": 252,
}


class PFEConfidenceLevel(LenientEnum):
    NINETY_FIVE = "95%"
    NINETY_SEVEN_POINT_FIVE = "97.5%"
    NINETY_NINE = "99%"

    @property
    def z_score(self) -> float:
        return {"95%": 1.645, "97.5%": 1.96, "99%": 2.326}[self.value]

    @property
    def quantile(self) -> float:
        return float(self.value.rstrip("%")) / 100.0


class PFECalculationMethod(LenientEnum):
    REGULATORY_STANDARDISED = "regulatory_standardised_approach"
    MONTE_CARLO = "monte_carlo_simulation"
    INTERNAL_MODEL = "internal_model_method"
    HISTORICAL_SIMULATION = "historical_simulation_method"


class PFENettingSet(NettingSet):
    """
    Netting set carrying the PFE calculation parameters.

    An unrecognized ``calculation_method`` falls back to the regulatory
    standardised approach with a warning.
    """

    time_horizon: PFETimeHorizon = PFETimeHorizon.ONE_YEAR
    confidence_level: PFEConfidenceLevel = PFEConfidenceLevel.NINETY_FIVE
    calculation_method: PFECalculationMethod = PFECalculationMethod.REGULATORY_STANDARDISED

    @field_validator("calculation_method", mode="before")
    @classmethod
    def fallback_calculation_method(cls, v: Any) -> Any:
        """Unknown methods fall back to the standardised approach."""
        try:
            return PFECalculationMethod(v)
        except ValueError:
            warnings.warn(
                f"Unknown PFE calculation method {v!r}; "
                "using regulatory_standardised_approach",
                UserWarning,
                stacklevel=2,
            )
            return PFECalculationMethod.REGULATORY_STANDARDISED


# =============================================================================
# VaR parameters
# =============================================================================


class VaRTimeHorizon(LenientEnum):
    """VaR horizons with their trading-day counts."""

    ONE_DAY = "1_day"
    TEN_DAYS = "10_days"
    ONE_MONTH = "1_month"
    THREE_MONTHS = "3_months"

    @property
    def trading_days(self) -> int:
        return {"1_day": 1, "10_days": 10, "1_month": 21, "3_months": 63}[self.value]

    @property
    def scale_factor(self) -> float:
        """Square-root-of-time scaling from one day."""
        return math.sqrt(self.trading_days)


class VaRConfidenceLevel(LenientEnum):
    NINETY = "90%"
    NINETY_FIVE = "95%"
    NINETY_SEVEN_POINT_FIVE = "97.5%"
    NINETY_NINE = "99%"

    @property
    def probability(self) -> float:
        return float(self.value.rstrip("%")) / 100.0

    @property
    def z_score(self) -> float:
        return {"90%": 1.282, "95%": 1.645, "97.5%": 1.96, "99%": 2.326}[self.value]

    @property
    def es_multiplier(self) -> float:
        """Normal expected-shortfall multiplier used by the parametric method."""
        return {"90%": 1.755, "95%": 2.063, "97.5%": 2.338, "99%": 2.665}[self.value]


class VaRCalculationMethod(LenientEnum):
    HISTORICAL_SIMULATION = "historical_simulation"
    MONTE_CARLO = "monte_carlo_simulation"
    PARAMETRIC = "parametric"


class VaRParameters(Record):
    """
    VaR calculation parameters.

    Attributes
    ----------
    time_horizon : VaRTimeHorizon
        Horizon the daily figures are scaled to
    confidence_level : VaRConfidenceLevel
        Confidence level
    calculation_method : VaRCalculationMethod
        Historical, parametric or Monte Carlo; unknown values fall back to
        historical simulation with a warning
    lookback_period : int | None
        Keep only the most recent N daily returns (None keeps all)
    include_correlations : bool
        Echoed in the result
    seed : int | None
        Random seed for synthetic series and Monte Carlo draws
    """

    time_horizon: VaRTimeHorizon = VaRTimeHorizon.ONE_DAY
    confidence_level: VaRConfidenceLevel = VaRConfidenceLevel.NINETY_FIVE
    calculation_method: VaRCalculationMethod = VaRCalculationMethod.HISTORICAL_SIMULATION
    lookback_period: int | None = Field(default=None, gt=1)
    include_correlations: bool = True
    seed: int | None = None

    @field_validator("calculation_method", mode="before")
    @classmethod
    def fallback_calculation_method(cls, v: Any) -> Any:
        """Unknown methods fall back to historical simulation."""
        try:
            return VaRCalculationMethod(v)
        except ValueError:
            warnings.warn(
                f"Unknown VaR calculation method {v!r}; using historical_simulation",
                UserWarning,
                stacklevel=2,
            )
            return VaRCalculationMethod.HISTORICAL_SIMULATION


# =============================================================================
# Calculation inputs
# =============================================================================


class SACCRInput(Record):
    """Trades, netting set and collateral for an SA-CCR calculation."""

    trades: list[Trade] = Field(min_length=1)
    netting_set: NettingSet
    collateral: list[CollateralItem] = Field(default_factory=list)


class GridScheduleInput(Record):
    """Trades, netting set and collateral for a Grid/Schedule IM calculation."""

    trades: list[GridScheduleTrade] = Field(min_length=1)
    netting_set: IMNettingSet = Field(default_factory=IMNettingSet)
    collateral: list[CollateralItem] = Field(default_factory=list)


class SIMMInput(Record):
    """Trades, netting set and collateral for an ISDA SIMM calculation."""

    trades: list[SIMMTrade] = Field(min_length=1)
    netting_set: IMNettingSet = Field(default_factory=IMNettingSet)
    collateral: list[CollateralItem] = Field(default_factory=list)


class PFEInput(Record):
    """Trades, netting set (with PFE parameters) and collateral."""

    trades: list[Trade] = Field(min_length=1)
    netting_set: PFENettingSet = Field(default_factory=PFENettingSet)
    collateral: list[CollateralItem] = Field(default_factory=list)


class VaRInput(Record):
    """Positions, parameters and optional price histories for VaR."""

    positions: list[VaRPosition] = Field(min_length=1)
    parameters: VaRParameters = Field(default_factory=VaRParameters)
    historical_data: list[HistoricalMarketData] = Field(default_factory=list)


# =============================================================================
# Engine configuration
# =============================================================================


class SACCRConfig(BaseModel):
    """
    SA-CCR engine parameters.

    Attributes
    ----------
    alpha : float
        Regulatory multiplier (1.4 per CRE52)
    multiplier_floor : float
        PFE multiplier floor
    maturity_floor_days : int
        Minimum maturity in business days (250 per year)
    default_option_volatility : float
        Volatility used for option deltas when the trade carries none
    risk_free_rate : float
        Rate used in the Black-Scholes delta
    """

    alpha: float = Field(ge=1.0, le=3.0, default=1.4)
    multiplier_floor: float = Field(gt=0, lt=1, default=0.05)
    maturity_floor_days: int = Field(ge=0, le=250, default=10)
    default_option_volatility: float = Field(gt=0, le=5.0, default=0.2)
    risk_free_rate: float = Field(ge=-0.05, le=0.25, default=0.02)

    @field_validator("alpha")
    @classmethod
    def alpha_regulatory(cls, v: float) -> float:
        """Warn when alpha departs from the regulatory value."""
        if v != 1.4:
            warnings.warn(
                f"Alpha {v} differs from the CRE52 value of 1.4",
                UserWarning,
                stacklevel=2,
            )
        return v


class PFEConfig(BaseModel):
    """
    PFE engine parameters.

    Attributes
    ----------
    profile_intervals : int
        Number of equal intervals in the exposure profile
    n_simulations : int
        Monte Carlo paths
    seed : int | None
        Random seed for the Monte Carlo method
    """

    profile_intervals: int = Field(ge=1, le=250, default=10)
    n_simulations: int = Field(ge=100, le=100000, default=10000)
    seed: int | None = None


class VaRConfig(BaseModel):
    """
    VaR engine parameters.

    Attributes
    ----------
    n_simulations : int
        Monte Carlo draws
    synthetic_length : int
        Length of generated return series for positions without history
    seed : int | None
        Default random seed (overridden by ``VaRParameters.seed``)
    """

    n_simulations: int = Field(ge=100, le=1000000, default=10000)
    synthetic_length: int = Field(ge=10, le=5000, default=252)
    seed: int | None = None


class EngineConfig(BaseModel):
    """Configuration for all engines."""

    saccr: SACCRConfig = Field(default_factory=SACCRConfig)
    pfe: PFEConfig = Field(default_factory=PFEConfig)
    var: VaRConfig = Field(default_factory=VaRConfig)
