"""
Base vocabulary shared by all trade and position records.

Records are immutable pydantic models. They accept snake_case field names
as well as the camelCase keys used by form and JSON payloads, and coerce
string encodings of amounts and dates to numbers and ``date`` objects.
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from regrisk_core.utils.dates import parse_date


class LenientEnum(str, Enum):
    """
    String enum that matches values case-insensitively.

    ``"interest rate"``, ``"Interest-Rate"`` and ``"INTEREST_RATE"`` all
    resolve to the same member.
    """

    @classmethod
    def _missing_(cls, value: object) -> "LenientEnum | None":
        if not isinstance(value, str):
            return None
        key = value.strip().replace("-", "_").replace(" ", "_").upper()
        for member in cls:
            if member.value.upper() == key or member.name == key:
                return member
        return None


class AssetClass(LenientEnum):
    """Regulatory asset classes."""

    INTEREST_RATE = "INTEREST_RATE"
    FOREIGN_EXCHANGE = "FOREIGN_EXCHANGE"
    CREDIT = "CREDIT"
    EQUITY = "EQUITY"
    COMMODITY = "COMMODITY"


class TransactionType(LenientEnum):
    """Trade payoff shape, drives the supervisory delta."""

    LINEAR = "LINEAR"
    OPTION = "OPTION"
    BASIS = "BASIS"
    VOLATILITY = "VOLATILITY"


class PositionType(LenientEnum):
    """Trade direction."""

    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> float:
        """+1 for long, -1 for short."""
        return 1.0 if self is PositionType.LONG else -1.0


class OptionType(LenientEnum):
    CALL = "CALL"
    PUT = "PUT"


class MarginType(LenientEnum):
    MARGINED = "MARGINED"
    UNMARGINED = "UNMARGINED"


def _to_date(value: Any) -> date:
    if isinstance(value, (date, datetime, str)):
        return parse_date(value)
    return value


def _to_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


DateField = Annotated[date, BeforeValidator(_to_date)]
"""Date accepting ``date``, ``datetime`` or ISO strings."""

IdField = Annotated[str, BeforeValidator(_to_str)]
"""Identifier accepting numbers (CSV ids) as well as strings."""


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return isinstance(value, float) and math.isnan(value)


class Record(BaseModel):
    """
    Immutable input record.

    Blank form values (empty strings, ``None`` and NaN from CSV frames) are
    dropped before validation so optional fields fall back to defaults.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
        use_enum_values=False,
    )

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data: Any) -> Any:
        """Remove blank values so defaults apply."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not _is_blank(v)}
        return data
