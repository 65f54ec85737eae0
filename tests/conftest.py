"""
Pytest fixtures for regulatory risk engine testing.

Provides reusable test fixtures for trades, netting sets, margin inputs and
VaR portfolios.
"""

from datetime import date, timedelta
from typing import Any, Callable

import numpy as np
import pytest

VALUATION_DATE = date(2025, 1, 1)


@pytest.fixture
def valuation_date() -> date:
    """Fixed valuation date so maturities are reproducible."""
    return VALUATION_DATE


@pytest.fixture
def ir_trade() -> dict[str, Any]:
    """1Y long IR swap, 1mm USD, as a form payload."""
    return {
        "id": "IR1",
        "assetClass": "INTEREST_RATE",
        "transactionType": "LINEAR",
        "positionType": "LONG",
        "notionalAmount": "1000000",
        "currency": "USD",
        "maturityDate": "2026-01-01",
        "currentMarketValue": "0",
        "referenceCurrency": "USD",
    }


@pytest.fixture
def fx_trade() -> dict[str, Any]:
    """6M long EURUSD forward, 2mm."""
    return {
        "id": "FX1",
        "assetClass": "FOREIGN_EXCHANGE",
        "transactionType": "LINEAR",
        "positionType": "LONG",
        "notionalAmount": 2_000_000,
        "currency": "USD",
        "maturityDate": "2025-07-02",
        "currentMarketValue": 50_000,
        "currencyPair": "EURUSD",
    }


@pytest.fixture
def equity_option() -> dict[str, Any]:
    """ATM 1Y long equity call on a single name."""
    return {
        "id": "EQ1",
        "assetClass": "EQUITY",
        "transactionType": "OPTION",
        "positionType": "LONG",
        "notionalAmount": 500_000,
        "currency": "USD",
        "maturityDate": "2026-01-01",
        "optionType": "CALL",
        "strikePrice": 100,
        "underlyingPrice": 100,
        "volatility": 0.25,
        "issuer": "ACME",
    }


@pytest.fixture
def unmargined_netting_set() -> dict[str, Any]:
    """Unmargined netting set payload."""
    return {"nettingAgreementId": "NS1", "marginType": "UNMARGINED"}


@pytest.fixture
def margined_netting_set() -> dict[str, Any]:
    """Margined netting set with threshold, MTA and NICA."""
    return {
        "nettingAgreementId": "NS2",
        "marginType": "MARGINED",
        "thresholdAmount": 100_000,
        "minimumTransferAmount": 10_000,
        "independentCollateralAmount": 20_000,
        "variationMargin": 0,
        "marginPeriodOfRisk": 10,
    }


@pytest.fixture
def saccr_input(ir_trade: dict[str, Any], unmargined_netting_set: dict[str, Any]) -> dict[str, Any]:
    """Single IR trade in an unmargined netting set."""
    return {"trades": [ir_trade], "nettingSet": unmargined_netting_set}


@pytest.fixture
def grid_input() -> dict[str, Any]:
    """Single 1-5Y IR trade for Grid/Schedule."""
    return {
        "trades": [
            {
                "id": "G1",
                "assetClass": "INTEREST_RATE",
                "notionalAmount": 1_000_000,
                "currency": "USD",
                "maturityBucket": "one_to_five_years",
            }
        ],
    }


@pytest.fixture
def simm_input() -> dict[str, Any]:
    """Two trades with IR and equity sensitivities."""
    return {
        "trades": [
            {
                "id": "S1",
                "assetClass": "INTEREST_RATE",
                "notionalAmount": 10_000_000,
                "riskFactors": [
                    {"type": "interest_rate", "bucket": 1, "label": "USD-5Y", "value": 100_000},
                    {"type": "interest_rate", "bucket": 2, "label": "JPY-5Y", "value": 50_000},
                ],
            },
            {
                "id": "S2",
                "assetClass": "EQUITY",
                "notionalAmount": 5_000_000,
                "riskFactors": [
                    {"type": "equity", "bucket": 1, "label": "SPX", "value": 200_000},
                ],
            },
        ],
    }


@pytest.fixture
def pfe_trades(ir_trade: dict[str, Any], fx_trade: dict[str, Any]) -> list[dict[str, Any]]:
    """IR and FX trades for PFE."""
    return [ir_trade, fx_trade]


def _price_history(
    identifier: str,
    asset_type: str,
    returns: np.ndarray,
    start_price: float = 100.0,
) -> dict[str, Any]:
    """Build a price history payload whose daily returns are ``returns``."""
    prices = start_price * np.cumprod(np.concatenate([[1.0], 1.0 + returns]))
    return {
        "assetIdentifier": identifier,
        "assetType": asset_type,
        "currency": "USD",
        "data": [
            {"date": (VALUATION_DATE + timedelta(days=i)).isoformat(), "price": float(p)}
            for i, p in enumerate(prices)
        ],
    }


@pytest.fixture
def price_history() -> Callable[..., dict[str, Any]]:
    """Factory for price history payloads with given daily returns."""
    return _price_history


@pytest.fixture
def linear_returns() -> np.ndarray:
    """100 daily returns from -0.100 to 0.098 in steps of 0.002."""
    return np.linspace(-0.10, 0.098, 100)


@pytest.fixture
def var_input(linear_returns: np.ndarray) -> dict[str, Any]:
    """Single equity position with a 100-return price history."""
    history = _price_history("AAPL", "EQUITY", linear_returns)
    last_price = history["data"][-1]["price"]
    return {
        "positions": [
            {
                "id": "P1",
                "assetType": "EQUITY",
                "assetIdentifier": "AAPL",
                "quantity": 10,
                "currentPrice": last_price,
            }
        ],
        "parameters": {
            "timeHorizon": "1_day",
            "confidenceLevel": "95%",
            "calculationMethod": "historical_simulation",
        },
        "historicalData": [history],
    }
