"""
Tests for trade, position and netting set records.
"""

from datetime import date
from typing import Any

import pytest
from pydantic import ValidationError

from regrisk_core.collateral import CollateralItem, NettingSet, collateral_value
from regrisk_core.config.models import SACCRInput
from regrisk_core.exceptions import CalculationInputError, coerce_model
from regrisk_core.instruments import (
    AssetClass,
    CreditTrade,
    EquityTrade,
    ForeignExchangeTrade,
    InterestRateTrade,
    PositionType,
    RiskFactor,
    RiskFactorType,
    TransactionType,
    VaRAssetType,
    VaRPosition,
    parse_trade,
)
from regrisk_core.market import MarketDataPoint, daily_returns


class TestTradeParsing:
    """Tests for the tagged trade variants."""

    def test_variant_by_asset_class(
        self, ir_trade: dict[str, Any], fx_trade: dict[str, Any], equity_option: dict[str, Any]
    ) -> None:
        """Each asset class builds its own model."""
        assert isinstance(parse_trade(ir_trade), InterestRateTrade)
        assert isinstance(parse_trade(fx_trade), ForeignExchangeTrade)
        assert isinstance(parse_trade(equity_option), EquityTrade)

    def test_string_amounts_and_dates(self, ir_trade: dict[str, Any]) -> None:
        """Form strings are coerced to numbers and dates."""
        trade = parse_trade(ir_trade)

        assert trade.notional_amount == 1_000_000.0
        assert trade.maturity_date == date(2026, 1, 1)
        assert trade.current_market_value == 0.0
        assert trade.hedging_set_key == "USD"

    def test_snake_case_keys(self) -> None:
        """Field names work as well as camelCase aliases."""
        trade = parse_trade(
            {
                "id": "C1",
                "asset_class": "CREDIT",
                "transaction_type": "LINEAR",
                "position_type": "SHORT",
                "notional_amount": 5e6,
                "maturity_date": "2030-06-30",
                "reference_entity": "ACME CORP",
            }
        )
        assert isinstance(trade, CreditTrade)
        assert trade.position_type is PositionType.SHORT
        assert trade.hedging_set_key == "ACME CORP"
        assert trade.is_investment_grade

    def test_lenient_enum_spelling(self, ir_trade: dict[str, Any]) -> None:
        """Enum values match regardless of case and separators."""
        trade = parse_trade(
            dict(ir_trade, assetClass="interest rate", transactionType="linear")
        )
        assert trade.asset_class is AssetClass.INTEREST_RATE
        assert trade.transaction_type is TransactionType.LINEAR

    def test_blank_values_use_defaults(self, ir_trade: dict[str, Any]) -> None:
        """Empty strings fall back to field defaults."""
        trade = parse_trade(dict(ir_trade, currentMarketValue="", referenceCurrency="  "))

        assert trade.current_market_value == 0.0
        assert trade.hedging_set_key == "DEFAULT"

    def test_numeric_id(self, ir_trade: dict[str, Any]) -> None:
        """Numeric ids from CSV files become strings."""
        assert parse_trade(dict(ir_trade, id=42)).id == "42"

    def test_unknown_asset_class(self, ir_trade: dict[str, Any]) -> None:
        """Asset classes outside the five are rejected."""
        with pytest.raises(ValidationError):
            parse_trade(dict(ir_trade, assetClass="CRYPTO"))

    def test_variant_rejects_other_asset_class(self, ir_trade: dict[str, Any]) -> None:
        """A variant only accepts its own asset class."""
        with pytest.raises(ValidationError):
            EquityTrade.model_validate(ir_trade)

    def test_records_are_immutable(self, ir_trade: dict[str, Any]) -> None:
        """Trades cannot be modified after validation."""
        trade = parse_trade(ir_trade)
        with pytest.raises(ValidationError):
            trade.notional_amount = 1.0  # type: ignore[misc]

    def test_index_detection(self, equity_option: dict[str, Any]) -> None:
        """Index flag or an INDEX issuer name marks an index trade."""
        assert not parse_trade(equity_option).is_index_trade
        assert parse_trade(dict(equity_option, issuer="S&P INDEX")).is_index_trade
        assert parse_trade(dict(equity_option, isIndex=True)).is_index_trade


class TestErrorConversion:
    """Tests for validation error conversion."""

    def test_error_names_trade_and_field(self, saccr_input: dict[str, Any]) -> None:
        """Nested failures point at the trade id and field."""
        bad = dict(saccr_input["trades"][0], notionalAmount="-5")
        with pytest.raises(CalculationInputError) as exc_info:
            coerce_model(SACCRInput, dict(saccr_input, trades=[bad]))

        assert exc_info.value.record_id == "IR1"
        assert exc_info.value.field == "notionalAmount"
        assert str(exc_info.value).startswith("Trade IR1: field 'notionalAmount': ")
        assert isinstance(exc_info.value, ValueError)

    def test_instances_pass_through(self) -> None:
        """Already-validated models are returned unchanged."""
        netting_set = NettingSet()
        assert coerce_model(NettingSet, netting_set) is netting_set


class TestNettingSetAndCollateral:
    """Tests for margin terms and collateral."""

    def test_unmargined_effective_terms(self) -> None:
        """Margin terms read as zero for unmargined sets."""
        ns = NettingSet(threshold_amount=1e6, minimum_transfer_amount=1e5, variation_margin=5e4)

        assert not ns.is_margined
        assert ns.effective_threshold == 0.0
        assert ns.effective_mta == 0.0
        assert ns.effective_variation_margin == 0.0

    def test_margined_effective_terms(self, margined_netting_set: dict[str, Any]) -> None:
        """Margined sets expose their terms."""
        ns = NettingSet.model_validate(margined_netting_set)

        assert ns.is_margined
        assert ns.effective_threshold == 100_000
        assert ns.effective_nica == 20_000
        assert ns.margin_period_of_risk == 10

    def test_negative_threshold_rejected(self) -> None:
        """Thresholds cannot be negative."""
        with pytest.raises(ValidationError):
            NettingSet(threshold_amount=-1.0)

    def test_collateral_value(self) -> None:
        """Fractional and percentage haircuts."""
        fraction = [CollateralItem(collateral_amount=100.0, haircut=0.1)]
        percent = [CollateralItem(collateral_amount=100.0, haircut=10.0)]

        assert collateral_value(fraction) == pytest.approx(90.0)
        assert collateral_value(percent, haircut_in_percent=True) == pytest.approx(90.0)
        assert collateral_value([]) == 0.0


class TestMarginRecords:
    """Tests for SIMM risk factors."""

    def test_risk_factor_type_alias(self) -> None:
        """Risk factors are keyed by ``type`` in payloads."""
        factor = RiskFactor.model_validate({"type": "FX", "bucket": "2", "value": "1e5"})

        assert factor.factor_type is RiskFactorType.FX
        assert factor.bucket == 2
        assert factor.value == 1e5

    def test_bucket_must_be_positive(self) -> None:
        """Bucket numbers start at one."""
        with pytest.raises(ValidationError):
            RiskFactor.model_validate({"type": "fx", "bucket": 0, "value": 1.0})


class TestPositions:
    """Tests for VaR positions and price histories."""

    def test_market_value(self) -> None:
        """Signed quantity × price."""
        position = VaRPosition.model_validate(
            {
                "assetType": "foreign exchange",
                "assetIdentifier": "EURUSD",
                "quantity": "-2",
                "currentPrice": "1.1",
            }
        )
        assert position.asset_type is VaRAssetType.FOREIGN_EXCHANGE
        assert position.market_value == pytest.approx(-2.2)

    def test_daily_returns_sorted_by_date(self) -> None:
        """Observations are ordered chronologically first."""
        points = [
            MarketDataPoint(date="2025-01-03", price=121.0),
            MarketDataPoint(date="2025-01-01", price=100.0),
            MarketDataPoint(date="2025-01-02", price=110.0),
        ]
        assert daily_returns(points) == pytest.approx([0.10, 0.10])

    def test_single_point_has_no_returns(self) -> None:
        """Fewer than two prices give an empty series."""
        assert daily_returns([MarketDataPoint(date="2025-01-01", price=1.0)]).size == 0
