"""
Tests for CSV ingestion.
"""

import io
from datetime import date
from pathlib import Path

import pytest

from regrisk_core.config.models import PFECalculationMethod, PFETimeHorizon
from regrisk_core.exceptions import CalculationInputError
from regrisk_core.ingest import (
    parse_grid_schedule_csv,
    parse_pfe_csv,
    parse_saccr_csv,
    parse_simm_csv,
    parse_var_csv,
    read_rows,
)
from regrisk_core.instruments import InterestRateTrade, MarginType, VaRAssetType
from regrisk_core.margin import calculate_grid_schedule_im, calculate_simm_im
from regrisk_core.reg import calculate_saccr

SACCR_CSV = """\
id,assetClass,transactionType,positionType,notionalAmount,currency,maturityDate,referenceCurrency,currencyPair,nettingAgreementId,marginType,collateralAmount,haircut
IR1,INTEREST_RATE,LINEAR,LONG,1000000,USD,2026-01-01,USD,,NS-CSV,UNMARGINED,,
FX1, FOREIGN_EXCHANGE ,LINEAR,SHORT,2000000,USD,2025-07-02,,EURUSD,,,,
"""


class TestReadRows:
    """Tests for raw row reading."""

    def test_blank_cells_become_none(self) -> None:
        """Empty cells are None and values are stripped."""
        rows = read_rows(io.StringIO(SACCR_CSV))

        assert len(rows) == 2
        assert rows[1]["assetClass"] == "FOREIGN_EXCHANGE"
        assert rows[1]["referenceCurrency"] is None
        assert rows[0]["notionalAmount"] == "1000000"

    def test_header_only(self) -> None:
        """A file without data rows is rejected."""
        with pytest.raises(CalculationInputError, match="no data rows"):
            read_rows(io.StringIO("id,assetClass\n"))

    def test_reads_from_path(self, tmp_path: Path) -> None:
        """File paths work as well as buffers."""
        path = tmp_path / "trades.csv"
        path.write_text(SACCR_CSV, encoding="utf-8")
        assert len(read_rows(path)) == 2


class TestTradeFiles:
    """Tests for SA-CCR, Grid/Schedule and PFE trade files."""

    def test_saccr_csv(self, valuation_date: date) -> None:
        """Trades are parsed and the first row seeds the netting set."""
        saccr_input = parse_saccr_csv(io.StringIO(SACCR_CSV))

        assert len(saccr_input.trades) == 2
        assert isinstance(saccr_input.trades[0], InterestRateTrade)
        assert saccr_input.netting_set.netting_agreement_id == "NS-CSV"
        assert saccr_input.netting_set.margin_type is MarginType.UNMARGINED
        assert saccr_input.collateral == []

        result = calculate_saccr(saccr_input, valuation_date=valuation_date)
        assert result.trade_count == 2
        assert result.ead > 0

    def test_saccr_csv_collateral(self) -> None:
        """Collateral columns on the first row become a collateral item."""
        text = (
            "id,assetClass,transactionType,positionType,notionalAmount,maturityDate,"
            "collateralAmount,haircut\n"
            "IR1,INTEREST_RATE,LINEAR,LONG,1000000,2026-01-01,50000,0.02\n"
        )
        saccr_input = parse_saccr_csv(io.StringIO(text))
        (item,) = saccr_input.collateral

        assert item.collateral_amount == 50_000
        assert item.haircut == pytest.approx(0.02)

    def test_saccr_csv_invalid_row(self) -> None:
        """Validation errors name the trade."""
        text = (
            "id,assetClass,transactionType,positionType,notionalAmount,maturityDate\n"
            "BAD1,INTEREST_RATE,LINEAR,LONG,abc,2026-01-01\n"
        )
        with pytest.raises(CalculationInputError, match="BAD1"):
            parse_saccr_csv(io.StringIO(text))

    def test_grid_schedule_csv(self) -> None:
        """Grid/Schedule trades with explicit buckets."""
        text = (
            "id,assetClass,notionalAmount,maturityBucket,thresholdAmount\n"
            "G1,INTEREST_RATE,1000000,one_to_five_years,10000\n"
            "G2,EQUITY,200000,less_than_one_year,\n"
        )
        im_input = parse_grid_schedule_csv(io.StringIO(text))

        assert len(im_input.trades) == 2
        assert im_input.netting_set.threshold_amount == 10_000
        result = calculate_grid_schedule_im(im_input)
        assert result.initial_margin > 50_000

    def test_pfe_csv_parameters(self) -> None:
        """First row carries the PFE parameters."""
        text = (
            "id,assetClass,transactionType,positionType,notionalAmount,maturityDate,"
            "timeHorizon,confidenceLevel,calculationMethod\n"
            "IR1,INTEREST_RATE,LINEAR,LONG,1000000,2026-01-01,3_months,99%,internal_model_method\n"
        )
        pfe_input = parse_pfe_csv(io.StringIO(text))

        assert pfe_input.netting_set.time_horizon is PFETimeHorizon.THREE_MONTHS
        assert pfe_input.netting_set.calculation_method is PFECalculationMethod.INTERNAL_MODEL


class TestSimmFiles:
    """Tests for SIMM files with JSON risk factors."""

    def test_simm_csv(self) -> None:
        """Risk factor JSON is decoded per row."""
        text = (
            "id,assetClass,notionalAmount,riskFactors\n"
            'S1,EQUITY,1000000,"[{""type"": ""equity"", ""bucket"": 1, ""value"": 100000}]"\n'
        )
        simm_input = parse_simm_csv(io.StringIO(text))
        (trade,) = simm_input.trades

        assert trade.risk_factors[0].value == 100_000
        assert calculate_simm_im(simm_input).initial_margin == pytest.approx(28_000)

    def test_invalid_json(self) -> None:
        """Malformed risk factor cells name the trade and column."""
        text = "id,assetClass,notionalAmount,riskFactors\nS1,EQUITY,1000000,not-json\n"
        with pytest.raises(CalculationInputError) as exc_info:
            parse_simm_csv(io.StringIO(text))

        assert exc_info.value.record_id == "S1"
        assert exc_info.value.field == "riskFactors"


class TestPriceFiles:
    """Tests for VaR price-history files."""

    PRICES = """\
date,assetIdentifier,assetType,price,currency
2025-01-02,AAPL,EQUITY,101,USD
2025-01-01,AAPL,EQUITY,100,USD
2025-01-03,AAPL,EQUITY,99,USD
2025-01-01,EURUSD,FOREIGN_EXCHANGE,1.10,USD
2025-01-02,EURUSD,FOREIGN_EXCHANGE,1.11,USD
"""

    def test_groups_by_asset(self) -> None:
        """One history and one unit position per asset."""
        var_input = parse_var_csv(io.StringIO(self.PRICES))

        assert [p.id for p in var_input.positions] == ["pos_1", "pos_2"]
        aapl, eurusd = var_input.positions
        assert aapl.quantity == 1
        assert aapl.current_price == 99.0
        assert eurusd.asset_type is VaRAssetType.FOREIGN_EXCHANGE
        assert eurusd.current_price == pytest.approx(1.11)
        assert {h.data_source for h in var_input.historical_data} == {"csv_upload"}

    def test_parameters_applied(self) -> None:
        """Calculation parameters are attached to the input."""
        var_input = parse_var_csv(
            io.StringIO(self.PRICES), parameters={"confidenceLevel": "99%"}
        )
        assert var_input.parameters.confidence_level.value == "99%"

    def test_missing_columns(self) -> None:
        """Required columns are checked up front."""
        text = "date,assetIdentifier,assetType,price\n2025-01-01,AAPL,EQUITY,100\n"
        with pytest.raises(CalculationInputError) as exc_info:
            parse_var_csv(io.StringIO(text))
        assert exc_info.value.field == "currency"

    def test_non_positive_price(self) -> None:
        """Invalid prices name the asset."""
        text = "date,assetIdentifier,assetType,price,currency\n2025-01-01,AAPL,EQUITY,0,USD\n"
        with pytest.raises(CalculationInputError, match="AAPL"):
            parse_var_csv(io.StringIO(text))
