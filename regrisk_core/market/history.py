"""
Historical price series and daily return derivation.

Price histories are supplied by the caller; nothing here fetches data.
"""

import numpy as np
from pydantic import Field

from regrisk_core._types import ReturnSeries
from regrisk_core.instruments.base import DateField, Record
from regrisk_core.instruments.positions import VaRAssetType


class MarketDataPoint(Record):
    """A single (date, price) observation."""

    date: DateField
    price: float = Field(gt=0)
    volume: float | None = None


class HistoricalMarketData(Record):
    """
    Price history for one asset.

    Attributes
    ----------
    asset_identifier : str
        Ticker, currency pair or series id
    asset_type : VaRAssetType
        Asset type, matched together with the identifier
    currency : str
        Price currency
    data : list[MarketDataPoint]
        Observations in any order
    data_source : str
        Free-text provenance label
    """

    asset_identifier: str
    asset_type: VaRAssetType
    currency: str = "USD"
    data: list[MarketDataPoint] = Field(default_factory=list)
    data_source: str = "user_provided"

    def matches(self, asset_identifier: str, asset_type: VaRAssetType) -> bool:
        return self.asset_identifier == asset_identifier and self.asset_type is asset_type


def daily_returns(points: list[MarketDataPoint]) -> ReturnSeries:
    """
    Simple daily returns from a price series.

    return_t = (price_t − price_{t−1}) / price_{t−1}, after sorting the
    observations chronologically.

    Parameters
    ----------
    points : list[MarketDataPoint]
        Price observations

    Returns
    -------
    ReturnSeries
        ``len(points) − 1`` returns, oldest first
    """
    ordered = sorted(points, key=lambda p: p.date)
    prices = np.array([p.price for p in ordered], dtype=np.float64)
    if prices.size < 2:
        return np.zeros(0)
    return np.diff(prices) / prices[:-1]
