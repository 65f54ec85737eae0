"""
Tests for engine configuration and YAML loading.
"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from regrisk_core.config import (
    EngineConfig,
    PFEConfidenceLevel,
    PFETimeHorizon,
    SACCRConfig,
    VaRConfidenceLevel,
    VaRTimeHorizon,
    load_engine_config,
    load_saccr_input,
    load_var_input,
)
from regrisk_core.reg import SACCRCalculator


def _write_yaml(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestEngineConfig:
    """Tests for engine parameter models."""

    def test_defaults(self) -> None:
        """Defaults match the regulatory values."""
        config = EngineConfig()

        assert config.saccr.alpha == 1.4
        assert config.saccr.multiplier_floor == 0.05
        assert config.saccr.maturity_floor_days == 10
        assert config.pfe.profile_intervals == 10
        assert config.var.synthetic_length == 252

    def test_alpha_bounds(self) -> None:
        """Alpha must lie in [1, 3]."""
        with pytest.raises(ValidationError):
            SACCRConfig(alpha=0.9)

    def test_non_regulatory_alpha_warns(self) -> None:
        """Departing from 1.4 is allowed but flagged."""
        with pytest.warns(UserWarning, match="1.4"):
            SACCRConfig(alpha=1.5)

    def test_load_nested_yaml(self, tmp_path: Path) -> None:
        """Settings may sit under an ``engine`` key."""
        path = _write_yaml(
            tmp_path / "engine.yaml",
            {"engine": {"pfe": {"n_simulations": 500, "seed": 3}, "var": {"seed": 11}}},
        )
        config = load_engine_config(path)

        assert config.pfe.n_simulations == 500
        assert config.pfe.seed == 3
        assert config.var.seed == 11
        assert config.saccr.alpha == 1.4

    def test_load_flat_yaml(self, tmp_path: Path) -> None:
        """Top-level settings work too."""
        path = _write_yaml(tmp_path / "engine.yaml", {"saccr": {"risk_free_rate": 0.03}})
        calc = SACCRCalculator.from_config(load_engine_config(path).saccr)
        assert calc.risk_free_rate == 0.03

    def test_empty_yaml(self, tmp_path: Path) -> None:
        """An empty file gives the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_engine_config(path) == EngineConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_engine_config(tmp_path / "missing.yaml")

    def test_invalid_value(self, tmp_path: Path) -> None:
        """Out-of-range settings fail validation."""
        path = _write_yaml(tmp_path / "engine.yaml", {"pfe": {"n_simulations": 10}})
        with pytest.raises(ValidationError):
            load_engine_config(path)


class TestInputLoading:
    """Tests for loading calculation inputs."""

    def test_load_saccr_input(self, tmp_path: Path, saccr_input: dict) -> None:
        """SA-CCR inputs load from YAML under a ``saccr`` key."""
        path = _write_yaml(tmp_path / "saccr.yaml", {"saccr": saccr_input})
        loaded = load_saccr_input(path)

        assert loaded.trades[0].id == "IR1"
        assert loaded.netting_set.netting_agreement_id == "NS1"

    def test_load_var_input(self, tmp_path: Path) -> None:
        """VaR inputs without history load with default parameters."""
        path = _write_yaml(
            tmp_path / "var.yaml",
            {
                "positions": [
                    {
                        "id": "P1",
                        "assetType": "EQUITY",
                        "assetIdentifier": "MSFT",
                        "quantity": 5,
                        "currentPrice": 400,
                    }
                ]
            },
        )
        loaded = load_var_input(path)

        assert loaded.positions[0].market_value == 2000
        assert loaded.parameters.time_horizon is VaRTimeHorizon.ONE_DAY
        assert loaded.historical_data == []


class TestParameterEnums:
    """Tests for horizon and confidence lookups."""

    def test_pfe_horizons(self) -> None:
        """Day counts, time factors and simulation steps."""
        assert PFETimeHorizon.ONE_WEEK.days == 7
        assert PFETimeHorizon.ONE_YEAR.time_factor == 1.0
        assert PFETimeHorizon.THREE_MONTHS.time_factor == pytest.approx((90 / 365) ** 0.5)
        assert PFETimeHorizon.SIX_MONTHS.simulation_steps == 126

    def test_pfe_confidence(self) -> None:
        """z-scores and quantiles."""
        assert PFEConfidenceLevel.NINETY_NINE.z_score == 2.326
        assert PFEConfidenceLevel.NINETY_SEVEN_POINT_FIVE.quantile == 0.975

    def test_var_parameters(self) -> None:
        """Trading days and ES multipliers."""
        assert VaRTimeHorizon.TEN_DAYS.scale_factor == pytest.approx(10**0.5)
        assert VaRTimeHorizon.THREE_MONTHS.trading_days == 63
        assert VaRConfidenceLevel.NINETY.probability == pytest.approx(0.9)
        assert VaRConfidenceLevel.NINETY_NINE.es_multiplier == 2.665
