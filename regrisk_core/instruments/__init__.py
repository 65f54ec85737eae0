"""
Trade and position records.

Provides the tagged-variant derivative trades used by SA-CCR and PFE,
initial margin trades with SIMM risk factors, and VaR positions.
"""

from regrisk_core.instruments.base import (
    AssetClass,
    LenientEnum,
    MarginType,
    OptionType,
    PositionType,
    Record,
    TransactionType,
)
from regrisk_core.instruments.margin import (
    GridScheduleTrade,
    IMTrade,
    MaturityBucket,
    RiskFactor,
    RiskFactorType,
    SIMMTrade,
)
from regrisk_core.instruments.positions import VaRAssetType, VaRPosition
from regrisk_core.instruments.trades import (
    TRADE_VARIANTS,
    CommodityTrade,
    CreditTrade,
    EquityTrade,
    ForeignExchangeTrade,
    InterestRateTrade,
    Trade,
    TradeBase,
    parse_trade,
)

__all__ = [
    # Enums
    "LenientEnum",
    "AssetClass",
    "TransactionType",
    "PositionType",
    "OptionType",
    "MarginType",
    "MaturityBucket",
    "RiskFactorType",
    "VaRAssetType",
    # Records
    "Record",
    "TradeBase",
    "InterestRateTrade",
    "ForeignExchangeTrade",
    "CreditTrade",
    "EquityTrade",
    "CommodityTrade",
    "Trade",
    "TRADE_VARIANTS",
    "parse_trade",
    "IMTrade",
    "GridScheduleTrade",
    "RiskFactor",
    "SIMMTrade",
    "VaRPosition",
]
