"""
Derivative trade records used by the SA-CCR and PFE engines.

A trade is a tagged variant keyed by ``asset_class``: each asset class has
its own model carrying only the fields that make sense for it. ``Trade`` is
the discriminated union; ``parse_trade`` builds the right variant from a
raw mapping.
"""

from typing import Annotated, Any, ClassVar, Union

from pydantic import Discriminator, Field, Tag, TypeAdapter, model_validator

from regrisk_core.instruments.base import (
    AssetClass,
    DateField,
    IdField,
    OptionType,
    PositionType,
    Record,
    TransactionType,
)


class TradeBase(Record):
    """
    Fields common to every derivative trade.

    Attributes
    ----------
    id : str
        Unique trade identifier
    transaction_type : TransactionType
        Linear, option, basis or volatility
    position_type : PositionType
        Long or short
    notional_amount : float
        Positive notional in trade currency
    currency : str
        Trade currency
    maturity_date : date
        Final maturity
    start_date : date | None
        Effective date; defaults to the valuation date
    current_market_value : float
        Signed mark-to-market
    option_type, strike_price, underlying_price, volatility, time_to_maturity
        Option parameters, only meaningful for ``TransactionType.OPTION``
    """

    ASSET_CLASS: ClassVar[AssetClass]

    id: IdField = Field(min_length=1)
    asset_class: AssetClass
    transaction_type: TransactionType
    position_type: PositionType
    notional_amount: float = Field(gt=0)
    currency: str = "USD"
    maturity_date: DateField
    start_date: DateField | None = None
    current_market_value: float = 0.0

    option_type: OptionType | None = None
    strike_price: float | None = None
    underlying_price: float | None = None
    volatility: float | None = Field(default=None, ge=0)
    time_to_maturity: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def asset_class_matches_variant(self) -> "TradeBase":
        """Each variant only accepts its own asset class."""
        if self.asset_class is not self.ASSET_CLASS:
            raise ValueError(
                f"{type(self).__name__} requires asset class "
                f"{self.ASSET_CLASS.value}, got {self.asset_class.value}"
            )
        return self

    @property
    def hedging_set_key(self) -> str:
        """Attribute that groups offsetting trades within the asset class."""
        return "DEFAULT"


class InterestRateTrade(TradeBase):
    """Interest rate derivative. Hedging sets are keyed by reference currency."""

    ASSET_CLASS: ClassVar[AssetClass] = AssetClass.INTEREST_RATE

    asset_class: AssetClass = AssetClass.INTEREST_RATE
    reference_currency: str | None = None
    payment_frequency: int = Field(default=3, gt=0)
    reset_frequency: int = Field(default=3, gt=0)
    index_name: str | None = None
    basis: str | None = None

    @property
    def hedging_set_key(self) -> str:
        return self.reference_currency or "DEFAULT"


class ForeignExchangeTrade(TradeBase):
    """FX derivative. Hedging sets are keyed by currency pair."""

    ASSET_CLASS: ClassVar[AssetClass] = AssetClass.FOREIGN_EXCHANGE

    asset_class: AssetClass = AssetClass.FOREIGN_EXCHANGE
    currency_pair: str | None = None
    settlement_date: DateField | None = None

    @property
    def hedging_set_key(self) -> str:
        return self.currency_pair or "DEFAULT"


class CreditTrade(TradeBase):
    """Credit derivative. Hedging sets are keyed by reference entity."""

    ASSET_CLASS: ClassVar[AssetClass] = AssetClass.CREDIT

    asset_class: AssetClass = AssetClass.CREDIT
    reference_entity: str | None = None
    seniority: str = "SENIOR"
    sector: str = "CORPORATE"
    credit_quality: str | None = None
    is_index: bool = False

    @property
    def hedging_set_key(self) -> str:
        return self.reference_entity or "DEFAULT"

    @property
    def is_index_trade(self) -> bool:
        return self.is_index or "INDEX" in (self.reference_entity or "").upper()

    @property
    def is_investment_grade(self) -> bool:
        """Missing ratings are treated as investment grade."""
        quality = (self.credit_quality or "INVESTMENT_GRADE").upper()
        return quality in ("INVESTMENT_GRADE", "IG")


class EquityTrade(TradeBase):
    """Equity derivative. Hedging sets are keyed by issuer."""

    ASSET_CLASS: ClassVar[AssetClass] = AssetClass.EQUITY

    asset_class: AssetClass = AssetClass.EQUITY
    issuer: str | None = None
    market: str | None = None
    sector: str | None = None
    is_index: bool = False

    @property
    def hedging_set_key(self) -> str:
        return self.issuer or "DEFAULT"

    @property
    def is_index_trade(self) -> bool:
        return self.is_index or "INDEX" in (self.issuer or "").upper()


class CommodityTrade(TradeBase):
    """Commodity derivative. Hedging sets are keyed by commodity type."""

    ASSET_CLASS: ClassVar[AssetClass] = AssetClass.COMMODITY

    asset_class: AssetClass = AssetClass.COMMODITY
    commodity_type: str | None = None
    sub_type: str | None = None
    is_electricity: bool = False

    @property
    def hedging_set_key(self) -> str:
        return self.commodity_type or "DEFAULT"

    @property
    def is_electricity_trade(self) -> bool:
        return self.is_electricity or (self.commodity_type or "").upper() == "ELECTRICITY"


TRADE_VARIANTS: dict[AssetClass, type[TradeBase]] = {
    AssetClass.INTEREST_RATE: InterestRateTrade,
    AssetClass.FOREIGN_EXCHANGE: ForeignExchangeTrade,
    AssetClass.CREDIT: CreditTrade,
    AssetClass.EQUITY: EquityTrade,
    AssetClass.COMMODITY: CommodityTrade,
}


def _asset_class_tag(value: Any) -> str | None:
    """Route raw mappings and model instances to their variant."""
    if isinstance(value, TradeBase):
        return value.asset_class.value
    if isinstance(value, dict):
        raw = value.get("asset_class", value.get("assetClass"))
        if raw is None:
            return None
        try:
            return AssetClass(raw).value
        except ValueError:
            return None
    return None


Trade = Annotated[
    Union[
        Annotated[InterestRateTrade, Tag(AssetClass.INTEREST_RATE.value)],
        Annotated[ForeignExchangeTrade, Tag(AssetClass.FOREIGN_EXCHANGE.value)],
        Annotated[CreditTrade, Tag(AssetClass.CREDIT.value)],
        Annotated[EquityTrade, Tag(AssetClass.EQUITY.value)],
        Annotated[CommodityTrade, Tag(AssetClass.COMMODITY.value)],
    ],
    Discriminator(_asset_class_tag),
]
"""Discriminated union of all trade variants."""

_TRADE_ADAPTER: TypeAdapter[Any] = TypeAdapter(Trade)


def parse_trade(data: Any) -> TradeBase:
    """
    Build the trade variant matching ``data["asset_class"]``.

    Parameters
    ----------
    data : Mapping | TradeBase
        Raw trade fields (snake_case or camelCase keys) or a trade

    Returns
    -------
    TradeBase
        Concrete trade variant

    Raises
    ------
    pydantic.ValidationError
        If the asset class is missing/unknown or a field is invalid
    """
    return _TRADE_ADAPTER.validate_python(data)
