"""
Market data inputs.

Provides historical price series containers and daily return derivation
for the VaR engine.
"""

from regrisk_core.market.history import (
    HistoricalMarketData,
    MarketDataPoint,
    daily_returns,
)

__all__ = [
    "MarketDataPoint",
    "HistoricalMarketData",
    "daily_returns",
]
