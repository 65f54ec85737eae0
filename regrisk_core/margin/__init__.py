"""
Initial margin module.

Provides:
- BCBS-IOSCO Grid/Schedule initial margin
- ISDA SIMM (v2.6 style) sensitivity-based initial margin
- Shared correlated aggregation and threshold/MTA handling
"""

from regrisk_core.margin._common import (
    RISK_FACTOR_ORDER,
    InitialMarginResult,
    aggregate_components,
    correlation,
)
from regrisk_core.margin.grid_schedule import (
    GRID_CORRELATIONS,
    GridScheduleCalculator,
    GridScheduleResult,
    calculate_grid_schedule_im,
)
from regrisk_core.margin.simm import (
    INTER_CORRELATIONS,
    INTRA_CORRELATIONS,
    SIMMCalculator,
    SIMMResult,
    calculate_simm_im,
)

__all__ = [
    "RISK_FACTOR_ORDER",
    "InitialMarginResult",
    "aggregate_components",
    "correlation",
    "GRID_CORRELATIONS",
    "GridScheduleCalculator",
    "GridScheduleResult",
    "calculate_grid_schedule_im",
    "INTER_CORRELATIONS",
    "INTRA_CORRELATIONS",
    "SIMMCalculator",
    "SIMMResult",
    "calculate_simm_im",
]
