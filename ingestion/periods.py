"""
Period catalogue: which monthly revision a run processes.

Selection is a pure function of the enumerated periods and a caller-supplied
index, so the pipeline itself never prompts for input.
"""

import re
from datetime import date, datetime, timezone
from typing import List, Optional
from core.config import settings
from core.exceptions import ConfigurationError

PERIOD_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
REVISION_LABEL_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def period_token(day: date) -> str:
    """Return the ``YYYY-MM`` token of the month containing ``day``."""
    return f"{day.year}-{day.month:02d}"


def utc_today() -> date:
    """Current calendar date in UTC, independent of the host time zone."""
    return datetime.now(timezone.utc).date()


def validate_period(label: str) -> str:
    """
    Accept a ``YYYY-MM`` token or an explicit revision label.

    Labels are restricted to letters, digits, dot, underscore and dash
    because they become part of URLs and file names.
    """
    if PERIOD_PATTERN.match(label) or REVISION_LABEL_PATTERN.match(label):
        return label
    raise ConfigurationError(
        f"Invalid period or revision label: {label!r}",
        context={"period": label}
    )


def available_periods(first_period: Optional[str] = None, today: Optional[date] = None) -> List[str]:
    """
    Enumerate monthly periods from ``first_period`` to the current UTC month.

    Returns:
        Period tokens in ascending order
    """
    first_period = first_period or settings.FIRST_PERIOD
    today = today or utc_today()

    match = PERIOD_PATTERN.match(first_period)
    if not match:
        raise ConfigurationError(
            f"First period must be YYYY-MM, got {first_period!r}",
            context={"period": first_period}
        )

    year, month = int(match.group(1)), int(match.group(2))
    periods = []
    while (year, month) <= (today.year, today.month):
        periods.append(f"{year}-{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return periods


def select_period(periods: List[str], index: int = -1) -> str:
    """
    Pick one period by position; negative indexes count from the end.

    Raises:
        ConfigurationError: If the index is out of range
    """
    try:
        return periods[index]
    except IndexError:
        raise ConfigurationError(
            f"Period index {index} out of range for {len(periods)} periods",
            context={"index": index, "available": len(periods)}
        )
