"""
Tests for date and statistics helpers.
"""

from datetime import date, datetime

import numpy as np
import pytest

from regrisk_core.exposure import build_profile, profile_shape
from regrisk_core.utils import (
    box_muller,
    distribution_moments,
    norm_cdf,
    parse_date,
    residual_maturity,
    year_fraction,
)


class TestDates:
    """Tests for date helpers."""

    def test_parse_date_variants(self) -> None:
        """Dates, datetimes and ISO strings."""
        assert parse_date(date(2025, 3, 1)) == date(2025, 3, 1)
        assert parse_date(datetime(2025, 3, 1, 12, 30)) == date(2025, 3, 1)
        assert parse_date("2025-03-01") == date(2025, 3, 1)
        assert parse_date(" 2025-03-01T09:00:00 ") == date(2025, 3, 1)

    def test_parse_date_invalid(self) -> None:
        """Garbage and blanks raise ValueError."""
        with pytest.raises(ValueError, match="Unparseable"):
            parse_date("03/01/2025")
        with pytest.raises(ValueError):
            parse_date("  ")

    def test_year_fraction(self) -> None:
        """Act/365, signed."""
        assert year_fraction(date(2025, 1, 1), date(2026, 1, 1)) == 1.0
        assert year_fraction(date(2026, 1, 1), date(2025, 1, 1)) == -1.0

    def test_residual_maturity_forward_start(self) -> None:
        """Forward-starting trades are measured from the start date."""
        valuation = date(2025, 1, 1)
        maturity = date(2027, 1, 1)

        spot = residual_maturity(maturity, valuation)
        forward = residual_maturity(maturity, valuation, start_date=date(2026, 1, 1))
        past_start = residual_maturity(maturity, valuation, start_date=date(2024, 1, 1))

        assert spot == pytest.approx(730 / 365)
        assert forward == pytest.approx(1.0)
        assert past_start == spot


class TestStats:
    """Tests for statistics helpers."""

    def test_box_muller_moments(self) -> None:
        """Draws are approximately standard normal."""
        z = box_muller(np.random.default_rng(123), 200_000)

        assert z.shape == (200_000,)
        assert abs(z.mean()) < 0.01
        assert abs(z.std() - 1.0) < 0.01
        assert np.all(np.isfinite(z))

    def test_box_muller_reproducible(self) -> None:
        """Same seed, same draws."""
        a = box_muller(np.random.default_rng(9), (10, 3))
        b = box_muller(np.random.default_rng(9), (10, 3))
        assert np.array_equal(a, b)

    def test_norm_cdf(self) -> None:
        """Known values."""
        assert norm_cdf(0.0) == pytest.approx(0.5)
        assert norm_cdf(1.645) == pytest.approx(0.95, abs=1e-3)

    def test_moments_of_empty_series(self) -> None:
        """All zeros."""
        moments = distribution_moments(np.zeros(0))
        assert set(moments.values()) == {0.0}

    def test_moments(self) -> None:
        """Population statistics."""
        moments = distribution_moments(np.array([1.0, 2.0, 3.0, 4.0]))

        assert moments["mean"] == 2.5
        assert moments["median"] == 2.5
        assert moments["std"] == pytest.approx(np.sqrt(1.25))
        assert moments["skewness"] == pytest.approx(0.0)


class TestProfile:
    """Tests for the profile grid and shape."""

    def test_shape_endpoints(self) -> None:
        """0.2 at the start, 0.5 at the horizon, 1.0 at the midpoint."""
        assert profile_shape(0, 100) == 0.2
        assert profile_shape(100, 100) == 0.5
        assert profile_shape(150, 100) == 0.5
        assert profile_shape(50, 100) == pytest.approx(1.0)

    def test_build_profile(self) -> None:
        """Intervals + 1 points with calendar dates."""
        points = build_profile(date(2025, 1, 1), 30, lambda day: float(day), intervals=3)

        assert [p.day for p in points] == [0, 10, 20, 30]
        assert points[-1].date == date(2025, 1, 31)
        assert [p.exposure for p in points] == [0.0, 10.0, 20.0, 30.0]
