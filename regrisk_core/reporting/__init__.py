"""
Reporting module.

Provides DataFrame formatters for every engine result.
"""

from regrisk_core.reporting.tables import (
    create_addon_breakdown_table,
    create_im_breakdown_table,
    create_pfe_profile_table,
    create_saccr_table,
    create_stress_scenario_table,
    create_var_contribution_table,
)

__all__ = [
    "create_saccr_table",
    "create_addon_breakdown_table",
    "create_im_breakdown_table",
    "create_pfe_profile_table",
    "create_var_contribution_table",
    "create_stress_scenario_table",
]
