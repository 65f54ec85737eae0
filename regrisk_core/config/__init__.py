"""
Configuration module for the regulatory risk engines.

Provides Pydantic-validated engine configuration, calculation parameters,
calculation input envelopes and YAML loading utilities.
"""

from regrisk_core.config.loader import (
    load_engine_config,
    load_grid_schedule_input,
    load_pfe_input,
    load_saccr_input,
    load_simm_input,
    load_var_input,
)
from regrisk_core.config.models import (
    EngineConfig,
    GridScheduleInput,
    PFECalculationMethod,
    PFEConfidenceLevel,
    PFEConfig,
    PFEInput,
    PFENettingSet,
    PFETimeHorizon,
    SACCRConfig,
    SACCRInput,
    SIMMInput,
    VaRCalculationMethod,
    VaRConfidenceLevel,
    VaRConfig,
    VaRInput,
    VaRParameters,
    VaRTimeHorizon,
)

__all__ = [
    # Engine configuration
    "SACCRConfig",
    "PFEConfig",
    "VaRConfig",
    "EngineConfig",
    # PFE parameters
    "PFETimeHorizon",
    "PFEConfidenceLevel",
    "PFECalculationMethod",
    "PFENettingSet",
    # VaR parameters
    "VaRTimeHorizon",
    "VaRConfidenceLevel",
    "VaRCalculationMethod",
    "VaRParameters",
    # Inputs
    "SACCRInput",
    "GridScheduleInput",
    "SIMMInput",
    "PFEInput",
    "VaRInput",
    # Loaders
    "load_engine_config",
    "load_saccr_input",
    "load_grid_schedule_input",
    "load_simm_input",
    "load_pfe_input",
    "load_var_input",
]
