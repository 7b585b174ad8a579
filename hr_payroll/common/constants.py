"""Enums and constants for the payroll engine — matching the stored string values."""

from __future__ import annotations

import enum
import re
from typing import Optional


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "Present"
    half_day = "Half Day"
    leave = "Leave"
    holiday = "Holiday"
    week_off = "Week Off"
    absent = "Absent"

    @classmethod
    def parse(cls, raw: object) -> Optional["AttendanceStatus"]:
        """Map a stored status string to a member, or None if unrecognised.

        Accepts the display value ("Half Day"), the compact form ("HalfDay")
        and the member name ("half_day"), case-insensitively.
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        wanted = _normalise(raw)
        if not wanted:
            return None
        for member in cls:
            if wanted in (_normalise(member.value), _normalise(member.name)):
                return member
        return None


def _normalise(text: str) -> str:
    return re.sub(r"[\s_\-]+", "", text).lower()


# ── PF register ─────────────────────────────────────────────────────

class PaymentStatus(str, enum.Enum):
    pending = "Pending"
    paid = "Paid"


class EmployeeStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


# ── Compensation rules ──────────────────────────────────────────────

# Holiday department list sentinel meaning "every department".
ALL_DEPARTMENTS = "All"

# Department whose Sunday attendance also counts as a regular present day.
STAFF_DEPARTMENT = "Staff"

# Present days needed for full-month credit, before holiday reduction.
FULL_MONTH_DAYS_31 = 27
FULL_MONTH_DAYS_DEFAULT = 26

PF_RATE = 0.12

# ── Misc constants ──────────────────────────────────────────────────

ISO_DATE_FORMAT = "%Y-%m-%d"
MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
