"""
YAML loading utilities.

Provides functions to load and validate engine configuration and
calculation inputs from YAML files, returning typed Pydantic model
instances.
"""

from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel

from regrisk_core.config.models import (
    EngineConfig,
    GridScheduleInput,
    PFEInput,
    SACCRInput,
    SIMMInput,
    VaRInput,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _load_yaml(path: Path) -> dict[str, Any]:
    """
    Load a YAML file and return its contents as a dictionary.

    Parameters
    ----------
    path : Path
        Path to the YAML file

    Returns
    -------
    dict[str, Any]
        Parsed YAML contents (empty dict for an empty file)

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    yaml.YAMLError
        If the file contains invalid YAML
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_model(path: Path | str, model_cls: type[ModelT], key: str) -> ModelT:
    data = _load_yaml(Path(path))

    # Handle nested key if present
    if key in data:
        data = data[key]

    return model_cls.model_validate(data)


def load_engine_config(path: Path | str) -> EngineConfig:
    """
    Load engine configuration from a YAML file.

    Parameters
    ----------
    path : Path | str
        Path to the configuration YAML file, optionally nested under an
        ``engine`` key

    Returns
    -------
    EngineConfig
        Validated engine configuration

    Example
    -------
    >>> config = load_engine_config("config/engines.yaml")
    >>> print(config.saccr.alpha)
    1.4
    """
    return _load_model(path, EngineConfig, "engine")


def load_saccr_input(path: Path | str) -> SACCRInput:
    """Load an SA-CCR calculation input (optionally under ``saccr``)."""
    return _load_model(path, SACCRInput, "saccr")


def load_grid_schedule_input(path: Path | str) -> GridScheduleInput:
    """Load a Grid/Schedule input (optionally under ``grid_schedule``)."""
    return _load_model(path, GridScheduleInput, "grid_schedule")


def load_simm_input(path: Path | str) -> SIMMInput:
    """Load an ISDA SIMM input (optionally under ``simm``)."""
    return _load_model(path, SIMMInput, "simm")


def load_pfe_input(path: Path | str) -> PFEInput:
    """Load a PFE input (optionally under ``pfe``)."""
    return _load_model(path, PFEInput, "pfe")


def load_var_input(path: Path | str) -> VaRInput:
    """
    Load a VaR input from a YAML file.

    Parameters
    ----------
    path : Path | str
        Path to the YAML file, optionally nested under a ``var`` key

    Returns
    -------
    VaRInput
        Validated positions, parameters and price histories

    Example
    -------
    >>> var_input = load_var_input("data/var_portfolio.yaml")
    >>> print(len(var_input.positions))
    """
    return _load_model(path, VaRInput, "var")
