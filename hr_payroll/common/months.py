"""Month-key helpers shared by routers, services and scripts."""

from __future__ import annotations

from hr_payroll.common.constants import MONTH_KEY_PATTERN
from hr_payroll.common.exceptions import InvalidMonthException


def month_key(year: int, month: int) -> str:
    """Format a storage bucket key, e.g. (2025, 6) -> "2025-06"."""
    return f"{year:04d}-{month:02d}"


def parse_month_key(value: str) -> tuple[int, int]:
    """Split a "YYYY-MM" key into (year, month).

    Raises InvalidMonthException for anything else, including month 00 or 13.
    """
    match = MONTH_KEY_PATTERN.match(value or "")
    if not match:
        raise InvalidMonthException(value)
    return int(match.group(1)), int(match.group(2))
