"""
Market risk positions for the VaR engine.
"""

from pydantic import Field

from regrisk_core.instruments.base import DateField, IdField, LenientEnum, Record


class VaRAssetType(LenientEnum):
    EQUITY = "EQUITY"
    FOREIGN_EXCHANGE = "FOREIGN_EXCHANGE"
    INTEREST_RATE = "INTEREST_RATE"
    COMMODITY = "COMMODITY"
    CRYPTO = "CRYPTO"


class VaRPosition(Record):
    """
    A holding valued at ``quantity × current_price``.

    Attributes
    ----------
    id : str
        Position identifier
    asset_type : VaRAssetType
        Asset type, selects the default volatility for synthetic returns
    asset_identifier : str
        Ticker, currency pair or series id used to look up price history
    quantity : float
        Signed quantity (negative for shorts)
    current_price : float
        Latest price, must be positive
    currency : str
        Price currency
    """

    id: IdField = ""
    asset_type: VaRAssetType
    asset_identifier: str = Field(min_length=1)
    quantity: float
    current_price: float = Field(gt=0)
    currency: str = "USD"
    purchase_date: DateField | None = None

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price
