"""
Collateral items and haircut aggregation.
"""

from typing import Iterable

from pydantic import Field

from regrisk_core.instruments.base import Record


class CollateralItem(Record):
    """
    Collateral posted against a netting set.

    Attributes
    ----------
    collateral_amount : float
        Market value of the collateral
    collateral_currency : str
        Currency of the collateral
    haircut : float
        Haircut, as a fraction for SA-CCR or in percent for IM inputs
    stressed_haircut : float | None
        Haircut under stressed conditions
    """

    collateral_amount: float
    collateral_currency: str = "USD"
    haircut: float = Field(default=0.0, ge=0)
    stressed_haircut: float | None = Field(default=None, ge=0)


def collateral_value(
    items: Iterable[CollateralItem],
    haircut_in_percent: bool = False,
) -> float:
    """
    Haircut-adjusted collateral value.

    value = Σ amount × (1 − haircut)

    Parameters
    ----------
    items : Iterable[CollateralItem]
        Collateral items
    haircut_in_percent : bool
        Interpret haircuts as percentages (IM inputs) instead of fractions

    Returns
    -------
    float
        Total collateral value
    """
    scale = 100.0 if haircut_in_percent else 1.0
    return float(
        sum(item.collateral_amount * (1.0 - item.haircut / scale) for item in items)
    )


def apply_threshold_and_mta(
    margin: float,
    threshold: float,
    minimum_transfer_amount: float,
) -> float:
    """
    Margin call after threshold and minimum transfer amount.

    net = max(0, margin − threshold), forced to 0 when it is positive but
    below the minimum transfer amount.

    Example
    -------
    >>> apply_threshold_and_mta(100_000, 50_000, 60_000)
    0.0
    """
    net = max(0.0, margin - threshold)
    if 0.0 < net < minimum_transfer_amount:
        return 0.0
    return net
