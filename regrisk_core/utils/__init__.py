"""
Numeric and date helpers shared by the calculation engines.
"""

from regrisk_core.utils.dates import parse_date, residual_maturity, year_fraction
from regrisk_core.utils.stats import box_muller, distribution_moments, norm_cdf

__all__ = [
    "parse_date",
    "year_fraction",
    "residual_maturity",
    "box_muller",
    "norm_cdf",
    "distribution_moments",
]
