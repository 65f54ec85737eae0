"""
Potential Future Exposure module.

Provides:
- PFE engine (standardised, internal model, historical, Monte Carlo)
- Exposure profile grid and shape
- Exposure metrics over simulated paths (PFE, peak)
"""

from regrisk_core.exposure.metrics import (
    PathExposureSummary,
    calculate_peak_exposure,
    calculate_pfe,
)
from regrisk_core.exposure.pfe import (
    PFECalculator,
    PFEResult,
    calculate_pfe_exposure,
)
from regrisk_core.exposure.profile import ExposurePoint, build_profile, profile_shape

__all__ = [
    "PathExposureSummary",
    "calculate_pfe",
    "calculate_peak_exposure",
    "PFECalculator",
    "PFEResult",
    "calculate_pfe_exposure",
    "ExposurePoint",
    "build_profile",
    "profile_shape",
]
