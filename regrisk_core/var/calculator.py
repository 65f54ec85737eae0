"""
Value-at-Risk and Expected Shortfall.

Daily VaR is estimated from the value-weighted portfolio return series by
one of three methods and scaled to the horizon by sqrt(trading days):

- Historical simulation: empirical quantile of the return series
- Parametric: VaR = V × max(0, z·σ − μ)
- Monte Carlo: independent normal draws per position with the fitted
  mean and σ of its returns, then historical simulation on the draws

Positions without a usable price history get a synthetic normal return
series with an asset-type default volatility.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import numpy as np

from regrisk_core._types import ReturnSeries
from regrisk_core.config.models import (
    VaRCalculationMethod,
    VaRConfidenceLevel,
    VaRConfig,
    VaRInput,
    VaRParameters,
)
from regrisk_core.exceptions import CalculationInputError, coerce_model
from regrisk_core.instruments.positions import VaRAssetType, VaRPosition
from regrisk_core.market.history import HistoricalMarketData, daily_returns
from regrisk_core.utils.stats import box_muller, distribution_moments

logger = logging.getLogger(__name__)

# Daily volatility of synthetic return series
SYNTHETIC_VOLATILITIES: Mapping[VaRAssetType, float] = MappingProxyType(
    {
        VaRAssetType.EQUITY: 0.015,
        VaRAssetType.FOREIGN_EXCHANGE: 0.008,
        VaRAssetType.INTEREST_RATE: 0.003,
        VaRAssetType.COMMODITY: 0.02,
        VaRAssetType.CRYPTO: 0.05,
    }
)
DEFAULT_SYNTHETIC_VOLATILITY = 0.01

# Illustrative fixed shocks as a fraction of portfolio value
CRISIS_SCENARIOS: Mapping[str, float] = MappingProxyType(
    {
        "2008 Financial Crisis": 0.40,
        "COVID-19 Crash": 0.30,
    }
)

_WORST_DAY_LABELS = ("Worst Day", "Second Worst Day", "Third Worst Day")


def historical_var(
    value: float,
    returns: ReturnSeries,
    confidence_level: VaRConfidenceLevel,
) -> tuple[float, float]:
    """
    Historical-simulation VaR and Expected Shortfall.

    Works on the P&L series V × r sorted ascending, so a short exposure is
    measured on the up-moves. index = floor(n × (1 − confidence)), kept
    inside [0, n − 1]. VaR = |pnl_(index)|, ES = mean |pnl_(0..index)| over
    at least one observation. For V > 0 this is V × |r_(index)|.

    Parameters
    ----------
    value : float
        Signed exposure the returns apply to
    returns : ReturnSeries
        Daily returns
    confidence_level : VaRConfidenceLevel
        Confidence level

    Returns
    -------
    tuple[float, float]
        (VaR, ES); both 0 for an empty series
    """
    pnl = np.sort(value * np.asarray(returns, dtype=np.float64))
    n = pnl.size
    if n == 0:
        return 0.0, 0.0

    # Rounding absorbs float noise in 1 − confidence (e.g. 1 − 0.9)
    index = math.floor(round(n * (1.0 - confidence_level.probability), 9))
    index = min(max(index, 0), n - 1)

    var = abs(float(pnl[index]))
    es = float(np.abs(pnl[: max(index, 1)]).mean())
    return var, es


def parametric_var(
    value: float,
    returns: ReturnSeries,
    confidence_level: VaRConfidenceLevel,
) -> tuple[float, float]:
    """
    Variance-covariance VaR and Expected Shortfall.

    VaR = |V| × max(0, z·σ − μ'), ES = |V| × max(0, m·σ − μ'), with the
    population σ of the series and μ' the mean return signed by the
    direction of V.
    """
    returns = np.asarray(returns, dtype=np.float64)
    if returns.size == 0:
        return 0.0, 0.0
    mu = float(np.sign(value) * returns.mean())
    sigma = float(returns.std())
    exposure = abs(value)
    var = exposure * max(0.0, confidence_level.z_score * sigma - mu)
    es = exposure * max(0.0, confidence_level.es_multiplier * sigma - mu)
    return var, es


def stress_scenarios(value: float, returns: ReturnSeries) -> dict[str, float]:
    """
    Stress losses from the worst observed P&L days plus fixed crisis shocks.

    Scenarios needing more days than the series holds are left out.
    """
    pnl = np.sort(value * np.asarray(returns, dtype=np.float64))
    scenarios: dict[str, float] = {}
    for i, label in enumerate(_WORST_DAY_LABELS):
        if i < pnl.size:
            scenarios[label] = abs(float(pnl[i]))
    if pnl.size:
        scenarios["Average of 5 Worst Days"] = float(np.abs(pnl[:5]).mean())
    for label, shock in CRISIS_SCENARIOS.items():
        scenarios[label] = abs(value) * shock
    return scenarios


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class AssetContribution:
    """Standalone VaR of one position and its share of the total."""

    asset_identifier: str
    position_id: str
    value_at_risk: float
    contribution: float


@dataclass(frozen=True)
class ReturnDistribution:
    """Moments of the daily portfolio return series."""

    min: float
    max: float
    mean: float
    median: float
    standard_deviation: float
    skewness: float
    kurtosis: float

    @classmethod
    def from_returns(cls, returns: ReturnSeries) -> "ReturnDistribution":
        moments = distribution_moments(returns)
        return cls(
            min=moments["min"],
            max=moments["max"],
            mean=moments["mean"],
            median=moments["median"],
            standard_deviation=moments["std"],
            skewness=moments["skewness"],
            kurtosis=moments["kurtosis"],
        )


@dataclass(frozen=True)
class VaRResult:
    """
    Container for VaR calculation results.

    Attributes
    ----------
    value_at_risk : float
        Horizon-scaled VaR
    expected_shortfall : float
        Horizon-scaled ES
    portfolio_value : float
        Σ quantity × current price
    diversification_benefit : float
        Σ standalone position VaR − portfolio VaR
    contributions : tuple[AssetContribution, ...]
        Standalone VaR per position
    return_distribution : ReturnDistribution
        Moments of the daily portfolio returns
    stress_scenarios : dict[str, float]
        Loss per stress scenario
    parameters : VaRParameters
        Parameters used
    data_points : int
        Length of the portfolio return series
    asset_data_sources : dict[str, str]
        ``historical`` or ``synthetic`` per asset identifier
    timestamp : datetime
        Calculation time
    """

    value_at_risk: float
    expected_shortfall: float
    portfolio_value: float
    diversification_benefit: float
    contributions: tuple[AssetContribution, ...]
    return_distribution: ReturnDistribution
    stress_scenarios: dict[str, float]
    parameters: VaRParameters
    data_points: int
    asset_data_sources: dict[str, str]
    start_date: date | None = None
    end_date: date | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def var(self) -> float:
        return self.value_at_risk

    @property
    def var_percentage(self) -> float:
        """VaR as a percentage of portfolio value."""
        return self.value_at_risk / abs(self.portfolio_value) * 100.0

    @property
    def asset_contributions(self) -> dict[str, AssetContribution]:
        return {c.asset_identifier: c for c in self.contributions}

    @property
    def data_source(self) -> str:
        sources = set(self.asset_data_sources.values())
        if len(sources) == 1:
            return sources.pop()
        return "mixed"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        dist = self.return_distribution
        return {
            "value_at_risk": self.value_at_risk,
            "var_percentage": self.var_percentage,
            "expected_shortfall": self.expected_shortfall,
            "diversification_benefit": self.diversification_benefit,
            "portfolio_value": self.portfolio_value,
            "asset_contributions": {
                c.asset_identifier: {
                    "value_at_risk": c.value_at_risk,
                    "contribution": c.contribution,
                }
                for c in self.contributions
            },
            "stress_scenarios": dict(self.stress_scenarios),
            "return_distribution": {
                "min": dist.min,
                "max": dist.max,
                "mean": dist.mean,
                "median": dist.median,
                "standard_deviation": dist.standard_deviation,
                "skewness": dist.skewness,
                "kurtosis": dist.kurtosis,
            },
            "parameters": {
                "confidence_level": self.parameters.confidence_level.value,
                "time_horizon": self.parameters.time_horizon.value,
                "calculation_method": self.parameters.calculation_method.value,
                "lookback_period": self.parameters.lookback_period,
                "include_correlations": self.parameters.include_correlations,
            },
            "timestamp": self.timestamp.isoformat(),
            "metadata": {
                "data_source": self.data_source,
                "data_points": self.data_points,
                "start_date": self.start_date.isoformat() if self.start_date else None,
                "end_date": self.end_date.isoformat() if self.end_date else None,
                "asset_data_sources": dict(self.asset_data_sources),
            },
        }

    def summary(self) -> str:
        """Generate formatted summary."""
        p = self.parameters
        lines = [
            f"VaR Summary ({p.calculation_method.value})",
            "=" * 40,
            f"Horizon:     {p.time_horizon.value} @ {p.confidence_level.value}",
            f"Portfolio Value:        ${self.portfolio_value:>14,.0f}",
            "-" * 40,
            f"VaR:                    ${self.value_at_risk:>14,.0f}",
            f"VaR (% of value):       {self.var_percentage:>14.2f}%",
            f"Expected Shortfall:     ${self.expected_shortfall:>14,.0f}",
            f"Diversification:        ${self.diversification_benefit:>14,.0f}",
        ]
        return "\n".join(lines)


# =============================================================================
# Calculator
# =============================================================================


class VaRCalculator:
    """
    Portfolio Value-at-Risk calculator.

    Attributes
    ----------
    n_simulations : int
        Monte Carlo draws
    synthetic_length : int
        Length of synthetic return series
    seed : int | None
        Default seed, overridden by ``VaRParameters.seed``

    Example
    -------
    >>> calc = VaRCalculator(seed=7)
    >>> result = calc.calculate(var_input)
    >>> print(f"1-day 95% VaR: ${result.var:,.0f}")
    """

    def __init__(
        self,
        n_simulations: int = 10000,
        synthetic_length: int = 252,
        seed: int | None = None,
    ) -> None:
        if n_simulations < 1:
            raise ValueError(f"Number of simulations must be >= 1, got {n_simulations}")
        if synthetic_length < 2:
            raise ValueError(f"Synthetic series length must be >= 2, got {synthetic_length}")
        self.n_simulations = n_simulations
        self.synthetic_length = synthetic_length
        self.seed = seed

    @classmethod
    def from_config(cls, config: VaRConfig) -> "VaRCalculator":
        """Create a calculator from a validated ``VaRConfig``."""
        return cls(
            n_simulations=config.n_simulations,
            synthetic_length=config.synthetic_length,
            seed=config.seed,
        )

    def synthetic_returns(
        self,
        position: VaRPosition,
        rng: np.random.Generator,
    ) -> ReturnSeries:
        """Normal daily returns with the asset type's default volatility."""
        vol = SYNTHETIC_VOLATILITIES.get(position.asset_type, DEFAULT_SYNTHETIC_VOLATILITY)
        return box_muller(rng, self.synthetic_length) * vol

    def position_returns(
        self,
        positions: Sequence[VaRPosition],
        history: Sequence[HistoricalMarketData],
        parameters: VaRParameters,
        rng: np.random.Generator,
    ) -> tuple[list[ReturnSeries], list[str]]:
        """
        Daily returns per position and where they came from.

        Parameters
        ----------
        positions : Sequence[VaRPosition]
            Portfolio positions
        history : Sequence[HistoricalMarketData]
            Price histories matched on identifier and asset type
        parameters : VaRParameters
            Lookback applied to historical series
        rng : np.random.Generator
            Random source for synthetic series

        Returns
        -------
        tuple[list[ReturnSeries], list[str]]
            Return series and ``historical``/``synthetic`` per position
        """
        series: list[ReturnSeries] = []
        sources: list[str] = []
        for position in positions:
            data = next(
                (h for h in history if h.matches(position.asset_identifier, position.asset_type)),
                None,
            )
            if data is not None and len(data.data) > 1:
                returns = daily_returns(data.data)
                if parameters.lookback_period is not None:
                    returns = returns[-parameters.lookback_period :]
                series.append(returns)
                sources.append("historical")
            else:
                logger.warning(
                    "No price history for %s (%s), using synthetic returns",
                    position.asset_identifier,
                    position.asset_type.value,
                )
                series.append(self.synthetic_returns(position, rng))
                sources.append("synthetic")
        return series, sources

    def _method_var(
        self,
        value: float,
        returns: ReturnSeries,
        parameters: VaRParameters,
    ) -> tuple[float, float]:
        if parameters.calculation_method is VaRCalculationMethod.PARAMETRIC:
            return parametric_var(value, returns, parameters.confidence_level)
        return historical_var(value, returns, parameters.confidence_level)

    def _monte_carlo_returns(
        self,
        series: Sequence[ReturnSeries],
        weights: np.ndarray,
        rng: np.random.Generator,
    ) -> ReturnSeries:
        means = np.array([s.mean() if s.size else 0.0 for s in series])
        stds = np.array([s.std() if s.size else 0.0 for s in series])
        z = box_muller(rng, (self.n_simulations, len(series)))
        return (means + z * stds) @ weights

    def calculate(self, var_input: VaRInput | Mapping[str, Any]) -> VaRResult:
        """
        Calculate portfolio VaR and ES.

        Parameters
        ----------
        var_input : VaRInput | Mapping
            Positions, parameters and optional price histories

        Returns
        -------
        VaRResult
            VaR, ES, contributions, distribution and stress scenarios

        Raises
        ------
        CalculationInputError
            If the input fails validation or the portfolio value is zero
        """
        var_input = coerce_model(VaRInput, var_input)
        positions = var_input.positions
        parameters = var_input.parameters

        portfolio_value = float(sum(p.market_value for p in positions))
        if portfolio_value == 0:
            raise CalculationInputError("portfolio value must be non-zero", field="quantity")

        seed = parameters.seed if parameters.seed is not None else self.seed
        rng = np.random.default_rng(seed)

        series, sources = self.position_returns(
            positions, var_input.historical_data, parameters, rng
        )
        weights = np.array([p.market_value / portfolio_value for p in positions])

        # Align on the most recent observations of the shortest series
        length = min(s.size for s in series)
        aligned = np.array([s[s.size - length :] for s in series]).reshape(len(series), length)
        portfolio_returns = weights @ aligned

        if parameters.calculation_method is VaRCalculationMethod.MONTE_CARLO:
            simulated = self._monte_carlo_returns(series, weights, rng)
            var, es = historical_var(portfolio_value, simulated, parameters.confidence_level)
        else:
            var, es = self._method_var(portfolio_value, portfolio_returns, parameters)

        scale = parameters.time_horizon.scale_factor
        var *= scale
        es *= scale

        contributions = []
        for position, returns in zip(positions, series):
            position_var, _ = self._method_var(position.market_value, returns, parameters)
            position_var *= scale
            share = position_var / var * 100.0 if var else 0.0
            contributions.append(
                AssetContribution(
                    asset_identifier=position.asset_identifier,
                    position_id=position.id,
                    value_at_risk=position_var,
                    contribution=share,
                )
            )
        diversification = sum(c.value_at_risk for c in contributions) - var

        dates = [
            point.date
            for h in var_input.historical_data
            for point in h.data
        ]

        logger.debug(
            "VaR %.2f (%s, %s @ %s) over %d positions and %d returns",
            var,
            parameters.calculation_method.value,
            parameters.time_horizon.value,
            parameters.confidence_level.value,
            len(positions),
            length,
        )

        return VaRResult(
            value_at_risk=var,
            expected_shortfall=es,
            portfolio_value=portfolio_value,
            diversification_benefit=diversification,
            contributions=tuple(contributions),
            return_distribution=ReturnDistribution.from_returns(portfolio_returns),
            stress_scenarios=stress_scenarios(portfolio_value, portfolio_returns),
            parameters=parameters,
            data_points=int(length),
            asset_data_sources={
                p.asset_identifier: source for p, source in zip(positions, sources)
            },
            start_date=min(dates) if dates else None,
            end_date=max(dates) if dates else None,
        )


def calculate_var(
    var_input: VaRInput | Mapping[str, Any],
    config: VaRConfig | None = None,
) -> VaRResult:
    """
    Convenience function for a VaR calculation.

    Parameters
    ----------
    var_input : VaRInput | Mapping
        Positions, parameters and optional price histories
    config : VaRConfig | None
        Monte Carlo and synthetic-series settings (defaults when None)

    Returns
    -------
    VaRResult
        VaR result
    """
    return VaRCalculator.from_config(config or VaRConfig()).calculate(var_input)
