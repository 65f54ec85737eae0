"""
Regulatory Risk Calculation Engines - Core Package.

Counterparty credit and market risk figures for derivative portfolios:
SA-CCR exposure at default, Grid/Schedule and ISDA SIMM initial margin,
Potential Future Exposure and Value-at-Risk.

Example
-------
>>> from datetime import date
>>> from regrisk_core import calculate_saccr
>>> result = calculate_saccr({
...     "trades": [{"id": "T1", "assetClass": "INTEREST_RATE",
...                 "transactionType": "LINEAR", "positionType": "LONG",
...                 "notionalAmount": "1000000", "currency": "USD",
...                 "maturityDate": "2026-01-01"}],
...     "nettingSet": {"nettingAgreementId": "NS1", "marginType": "UNMARGINED"},
... }, valuation_date=date(2025, 1, 1))
>>> result.ead
7000.0
"""

__version__ = "1.0.0"

# Core types
from regrisk_core._types import FloatArray, PathArray, ReturnSeries

# Errors
from regrisk_core.exceptions import CalculationInputError

# Configuration
from regrisk_core.config import (
    EngineConfig,
    GridScheduleInput,
    PFEConfig,
    PFEInput,
    SACCRConfig,
    SACCRInput,
    SIMMInput,
    VaRConfig,
    VaRInput,
    load_engine_config,
)

# Records
from regrisk_core.instruments import AssetClass, Trade, VaRPosition, parse_trade
from regrisk_core.collateral import CollateralItem, IMNettingSet, NettingSet

# Engines
from regrisk_core.reg import SACCRCalculator, SACCRResult, calculate_saccr
from regrisk_core.margin import (
    GridScheduleCalculator,
    GridScheduleResult,
    SIMMCalculator,
    SIMMResult,
    calculate_grid_schedule_im,
    calculate_simm_im,
)
from regrisk_core.exposure import PFECalculator, PFEResult, calculate_pfe_exposure
from regrisk_core.var import VaRCalculator, VaRResult, calculate_var

# Ingestion and reporting
from regrisk_core.ingest import (
    parse_grid_schedule_csv,
    parse_pfe_csv,
    parse_saccr_csv,
    parse_simm_csv,
    parse_var_csv,
)
from regrisk_core.reporting import create_saccr_table

__all__ = [
    # Version
    "__version__",
    # Types
    "FloatArray",
    "PathArray",
    "ReturnSeries",
    # Errors
    "CalculationInputError",
    # Config
    "EngineConfig",
    "SACCRConfig",
    "PFEConfig",
    "VaRConfig",
    "load_engine_config",
    # Inputs
    "SACCRInput",
    "GridScheduleInput",
    "SIMMInput",
    "PFEInput",
    "VaRInput",
    # Records
    "AssetClass",
    "Trade",
    "parse_trade",
    "VaRPosition",
    "NettingSet",
    "IMNettingSet",
    "CollateralItem",
    # SA-CCR
    "SACCRCalculator",
    "SACCRResult",
    "calculate_saccr",
    # Initial margin
    "GridScheduleCalculator",
    "GridScheduleResult",
    "calculate_grid_schedule_im",
    "SIMMCalculator",
    "SIMMResult",
    "calculate_simm_im",
    # PFE
    "PFECalculator",
    "PFEResult",
    "calculate_pfe_exposure",
    # VaR
    "VaRCalculator",
    "VaRResult",
    "calculate_var",
    # Ingestion
    "parse_saccr_csv",
    "parse_grid_schedule_csv",
    "parse_simm_csv",
    "parse_pfe_csv",
    "parse_var_csv",
    # Reporting
    "create_saccr_table",
]
