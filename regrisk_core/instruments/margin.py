"""
Trade records for the initial margin engines.
"""

from pydantic import Field

from regrisk_core.instruments.base import (
    AssetClass,
    DateField,
    IdField,
    LenientEnum,
    Record,
)


class MaturityBucket(LenientEnum):
    """Grid/Schedule residual maturity buckets."""

    LESS_THAN_ONE_YEAR = "less_than_one_year"
    ONE_TO_FIVE_YEARS = "one_to_five_years"
    GREATER_THAN_FIVE_YEARS = "greater_than_five_years"

    @classmethod
    def from_years(cls, years: float) -> "MaturityBucket":
        """Bucket for a residual maturity in years."""
        if years < 1.0:
            return cls.LESS_THAN_ONE_YEAR
        if years <= 5.0:
            return cls.ONE_TO_FIVE_YEARS
        return cls.GREATER_THAN_FIVE_YEARS


class RiskFactorType(LenientEnum):
    """The six SIMM risk classes."""

    INTEREST_RATE = "interest_rate"
    CREDIT_QUALIFYING = "credit_qualifying"
    CREDIT_NON_QUALIFYING = "credit_non_qualifying"
    EQUITY = "equity"
    COMMODITY = "commodity"
    FX = "fx"


class IMTrade(Record):
    """
    Trade fields shared by the Grid/Schedule and SIMM engines.

    Attributes
    ----------
    id : str
        Trade identifier (optional for IM, used in error messages)
    asset_class : AssetClass
        Regulatory asset class
    notional_amount : float
        Positive gross notional
    currency : str
        Trade currency
    maturity_date : date | None
        Final maturity
    start_date : date | None
        Effective date
    """

    id: IdField = ""
    asset_class: AssetClass
    notional_amount: float = Field(gt=0)
    currency: str = "USD"
    maturity_date: DateField | None = None
    start_date: DateField | None = None


class GridScheduleTrade(IMTrade):
    """
    Grid/Schedule trade.

    When ``maturity_bucket`` is omitted it is derived from the residual
    maturity at the valuation date.
    """

    maturity_bucket: MaturityBucket | None = None


class RiskFactor(Record):
    """
    A single SIMM sensitivity.

    Attributes
    ----------
    factor_type : RiskFactorType
        Risk class (serialized as ``type``)
    bucket : int
        Tenor/rating/sector bucket number
    label : str
        Free-text description
    value : float
        Sensitivity amount
    """

    factor_type: RiskFactorType = Field(alias="type")
    bucket: int = Field(ge=1)
    label: str = ""
    value: float


class SIMMTrade(IMTrade):
    """SIMM trade: risk factor sensitivities scaled by ``sensitivity_value``."""

    risk_factors: list[RiskFactor] = Field(min_length=1)
    sensitivity_value: float = 1.0
