"""
Exposure profile time grid and shape.

The profile samples exposure at equally spaced days from the valuation
date to the horizon. Its shape starts at 0.2, rises through a sine bump
and ends at 0.5 on the horizon day.
"""

import math
from datetime import date, timedelta
from typing import Callable, NamedTuple


class ExposurePoint(NamedTuple):
    """Exposure at one profile date."""

    day: int
    date: date
    exposure: float


def profile_shape(day: int, total_days: int) -> float:
    """
    Profile shape factor.

    0.2 at day 0, 0.5 at or after the horizon, and
    0.2 + 0.8 × sin(π × day / total_days) in between.
    """
    if day <= 0:
        return 0.2
    if day >= total_days:
        return 0.5
    return 0.2 + math.sin(day / total_days * math.pi) * 0.8


def profile_days(total_days: int, intervals: int = 10) -> list[int]:
    """Day offsets of ``intervals + 1`` equally spaced profile points."""
    step = total_days / intervals
    return [int(round(i * step)) for i in range(intervals + 1)]


def build_profile(
    valuation_date: date,
    total_days: int,
    exposure_at: Callable[[int], float],
    intervals: int = 10,
) -> tuple[ExposurePoint, ...]:
    """
    Evaluate an exposure function on the profile grid.

    Parameters
    ----------
    valuation_date : date
        Profile start date
    total_days : int
        Horizon in calendar days
    exposure_at : Callable[[int], float]
        Exposure as a function of day offset
    intervals : int
        Number of equal intervals

    Returns
    -------
    tuple[ExposurePoint, ...]
        ``intervals + 1`` points, day 0 first
    """
    return tuple(
        ExposurePoint(day, valuation_date + timedelta(days=day), float(exposure_at(day)))
        for day in profile_days(total_days, intervals)
    )
