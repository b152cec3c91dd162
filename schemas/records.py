"""
Pydantic schemas for mapped dataset records with validation

Numeric fields are load-bearing for joins and reduction, so any malformed
value fails validation. Descriptive text fields are cosmetic: a missing or
unreadable value becomes ``"UNKNOWN"`` instead of rejecting the row.
"""

import datetime
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN = "UNKNOWN"

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def text_or_unknown(value: Any) -> str:
    """Strip a text value, or fall back to UNKNOWN when it is not text."""
    if isinstance(value, str):
        return value.strip()
    return UNKNOWN


class PriceObservation(BaseModel):
    """
    One observed price of an item at a premise on a day.

    The source column may hold an ISO string, a date or a timestamp; only
    its first ten characters (the calendar day) are kept.
    """
    model_config = ConfigDict(frozen=True)

    date: datetime.date
    premise_code: int = Field(..., ge=INT64_MIN, le=INT64_MAX)
    item_code: int = Field(..., ge=INT64_MIN, le=INT64_MAX)
    price: float

    @field_validator("date", mode="before")
    @classmethod
    def truncate_to_day(cls, value: Any) -> Any:
        if value is None:
            return value
        return str(value)[:10]


class Premise(BaseModel):
    """Premise lookup record"""
    model_config = ConfigDict(frozen=True)

    premise_code: int = Field(..., ge=INT64_MIN, le=INT64_MAX)
    premise: str = UNKNOWN
    address: str = UNKNOWN
    premise_type: str = UNKNOWN
    state: str = UNKNOWN
    district: str = UNKNOWN

    @field_validator("premise", "address", "premise_type", "state", "district", mode="before")
    @classmethod
    def normalize_text(cls, value: Any) -> str:
        return text_or_unknown(value)


class Item(BaseModel):
    """Item lookup record"""
    model_config = ConfigDict(frozen=True)

    item_code: int = Field(..., ge=INT64_MIN, le=INT64_MAX)
    item: str = UNKNOWN
    unit: str = UNKNOWN
    item_group: str = UNKNOWN
    item_category: str = UNKNOWN

    @field_validator("item", "unit", "item_group", "item_category", mode="before")
    @classmethod
    def normalize_text(cls, value: Any) -> str:
        return text_or_unknown(value)
