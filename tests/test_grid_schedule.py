"""
Tests for Grid/Schedule initial margin.
"""

import math
from datetime import date
from typing import Any

import numpy as np
import pytest

from regrisk_core.collateral import apply_threshold_and_mta
from regrisk_core.exceptions import CalculationInputError
from regrisk_core.instruments.base import AssetClass
from regrisk_core.instruments.margin import MaturityBucket, RiskFactorType
from regrisk_core.margin import (
    GRID_CORRELATIONS,
    GridScheduleCalculator,
    calculate_grid_schedule_im,
)


def _trade(trade_id: str, asset_class: str, notional: float, **extra: Any) -> dict[str, Any]:
    return {"id": trade_id, "assetClass": asset_class, "notionalAmount": notional, **extra}


class TestSchedule:
    """Tests for the notional schedule."""

    def test_single_ir_trade(self, grid_input: dict[str, Any]) -> None:
        """1mm IR in the 1-5Y bucket gives 5%."""
        result = calculate_grid_schedule_im(grid_input)

        assert result.initial_margin == pytest.approx(50_000)
        assert result.net_initial_margin == pytest.approx(50_000)
        assert result.components == {RiskFactorType.INTEREST_RATE: pytest.approx(50_000)}
        assert result.margin_by_asset_class[AssetClass.INTEREST_RATE] == pytest.approx(50_000)

    def test_bucket_notionals_are_summed(self) -> None:
        """Gross notional accumulates per asset class and bucket."""
        result = calculate_grid_schedule_im(
            {
                "trades": [
                    _trade("A", "INTEREST_RATE", 1e6, maturityBucket="less_than_one_year"),
                    _trade("B", "INTEREST_RATE", 2e6, maturityBucket="less_than_one_year"),
                    _trade("C", "INTEREST_RATE", 1e6, maturityBucket="greater_than_five_years"),
                ]
            }
        )

        gross = result.gross_notional_by_asset_class[AssetClass.INTEREST_RATE]
        assert gross[MaturityBucket.LESS_THAN_ONE_YEAR] == pytest.approx(3e6)
        assert gross[MaturityBucket.GREATER_THAN_FIVE_YEARS] == pytest.approx(1e6)
        # 3mm × 2% + 1mm × 15%
        assert result.initial_margin == pytest.approx(60_000 + 150_000)

    def test_cross_asset_class_correlation(self) -> None:
        """IR and FX aggregate with ρ = 0.4."""
        result = calculate_grid_schedule_im(
            {
                "trades": [
                    _trade("IR", "INTEREST_RATE", 1e6, maturityBucket="one_to_five_years"),
                    _trade("FX", "FOREIGN_EXCHANGE", 1e6, maturityBucket="less_than_one_year"),
                ]
            }
        )

        ir, fx = 50_000.0, 60_000.0
        expected = math.sqrt(ir**2 + fx**2 + 2 * 0.4 * ir * fx)
        assert result.initial_margin == pytest.approx(expected)
        assert result.initial_margin < ir + fx

    def test_credit_maps_to_qualifying(self) -> None:
        """Credit trades aggregate as credit qualifying."""
        result = calculate_grid_schedule_im(
            {"trades": [_trade("CR", "CREDIT", 1e6, maturityBucket="one_to_five_years")]}
        )
        assert result.components == {RiskFactorType.CREDIT_QUALIFYING: pytest.approx(80_000)}

    def test_correlation_matrix_is_read_only(self) -> None:
        """The shared matrix cannot be modified."""
        assert np.allclose(GRID_CORRELATIONS, GRID_CORRELATIONS.T)
        with pytest.raises(ValueError):
            GRID_CORRELATIONS[0, 1] = 0.0


class TestMaturityBucketing:
    """Tests for buckets derived from maturity dates."""

    @pytest.mark.parametrize(
        "maturity, expected",
        [
            ("2025-06-01", 20_000),
            ("2028-01-01", 50_000),
            ("2031-01-01", 150_000),
        ],
    )
    def test_bucket_from_maturity_date(
        self, valuation_date: date, maturity: str, expected: float
    ) -> None:
        """Residual maturity picks the bucket."""
        calc = GridScheduleCalculator(valuation_date=valuation_date)
        result = calc.calculate(
            {"trades": [_trade("IR", "INTEREST_RATE", 1e6, maturityDate=maturity)]}
        )
        assert result.initial_margin == pytest.approx(expected)

    def test_from_years_boundaries(self) -> None:
        """One year is 1-5Y, five years is still 1-5Y."""
        assert MaturityBucket.from_years(0.99) is MaturityBucket.LESS_THAN_ONE_YEAR
        assert MaturityBucket.from_years(1.0) is MaturityBucket.ONE_TO_FIVE_YEARS
        assert MaturityBucket.from_years(5.0) is MaturityBucket.ONE_TO_FIVE_YEARS
        assert MaturityBucket.from_years(5.01) is MaturityBucket.GREATER_THAN_FIVE_YEARS

    def test_missing_bucket_and_date(self) -> None:
        """A trade with neither bucket nor date is rejected."""
        with pytest.raises(CalculationInputError) as exc_info:
            calculate_grid_schedule_im({"trades": [_trade("G9", "EQUITY", 1e6)]})

        assert exc_info.value.record_id == "G9"
        assert exc_info.value.field == "maturity_bucket"


class TestMarginTerms:
    """Tests for collateral, threshold and MTA."""

    def test_threshold_reduces_net_margin(self, grid_input: dict[str, Any]) -> None:
        """Net IM is non-increasing in the threshold."""
        nets = [
            calculate_grid_schedule_im(
                dict(grid_input, nettingSet={"thresholdAmount": th})
            ).net_initial_margin
            for th in (0, 10_000, 30_000, 60_000)
        ]
        assert nets == pytest.approx([50_000, 40_000, 20_000, 0])
        assert all(a >= b for a, b in zip(nets, nets[1:]))

    def test_minimum_transfer_amount_zeroes_small_calls(
        self, grid_input: dict[str, Any]
    ) -> None:
        """A call below the MTA is not made."""
        result = calculate_grid_schedule_im(
            dict(
                grid_input,
                nettingSet={"thresholdAmount": 45_000, "minimumTransferAmount": 10_000},
            )
        )
        assert result.initial_margin == pytest.approx(50_000)
        assert result.net_initial_margin == 0.0

    def test_collateral_haircut_in_percent(self, grid_input: dict[str, Any]) -> None:
        """IM collateral haircuts are percentages."""
        result = calculate_grid_schedule_im(
            dict(grid_input, collateral=[{"collateralAmount": 100_000, "haircut": 10}])
        )
        assert result.collateral_value == pytest.approx(90_000)

    def test_apply_threshold_and_mta(self) -> None:
        """The threshold/MTA rule on its own."""
        assert apply_threshold_and_mta(100_000, 50_000, 60_000) == 0.0
        assert apply_threshold_and_mta(100_000, 50_000, 10_000) == 50_000
        assert apply_threshold_and_mta(40_000, 50_000, 0) == 0.0


class TestResultOutput:
    """Tests for serialization."""

    def test_to_dict(self, grid_input: dict[str, Any]) -> None:
        """Dictionary carries breakdowns and the correlation matrix."""
        data = calculate_grid_schedule_im(grid_input).to_dict()

        assert data["initial_margin"] == pytest.approx(50_000)
        assert data["components"] == {"interest_rate": pytest.approx(50_000)}
        assert data["gross_notional_by_asset_class"]["INTEREST_RATE"] == {
            "one_to_five_years": pytest.approx(1e6)
        }
        assert data["correlation_matrix"]["interest_rate"]["fx"] == 0.4
        assert data["input_summary"]["trade_count"] == 1

    def test_summary(self, grid_input: dict[str, Any]) -> None:
        """Summary lists the asset class margin."""
        summary = calculate_grid_schedule_im(grid_input).summary()
        assert "INTEREST_RATE" in summary
        assert "50,000" in summary

    def test_non_positive_notional(self) -> None:
        """Zero notional is rejected with the trade id."""
        with pytest.raises(CalculationInputError, match="G0"):
            calculate_grid_schedule_im(
                {"trades": [_trade("G0", "INTEREST_RATE", 0, maturityBucket="one_to_five_years")]}
            )
