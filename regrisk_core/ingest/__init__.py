"""
CSV ingestion module.

Turns uploaded trade and price-history files into validated calculation
inputs for each engine.
"""

from regrisk_core.ingest.csv import (
    parse_grid_schedule_csv,
    parse_pfe_csv,
    parse_saccr_csv,
    parse_simm_csv,
    parse_var_csv,
    read_rows,
)

__all__ = [
    "read_rows",
    "parse_saccr_csv",
    "parse_grid_schedule_csv",
    "parse_simm_csv",
    "parse_pfe_csv",
    "parse_var_csv",
]
