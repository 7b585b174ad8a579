"""Common module — shared constants, exceptions and helpers."""

from hr_payroll.common.constants import (
    ALL_DEPARTMENTS,
    FULL_MONTH_DAYS_31,
    FULL_MONTH_DAYS_DEFAULT,
    ISO_DATE_FORMAT,
    PF_RATE,
    STAFF_DEPARTMENT,
    AttendanceStatus,
    EmployeeStatus,
    PaymentStatus,
)
from hr_payroll.common.exceptions import (
    AppException,
    InvalidMonthException,
    NotFoundException,
    SnapshotNotFoundException,
    ValidationException,
    register_exception_handlers,
)
from hr_payroll.common.months import month_key, parse_month_key

__all__ = [
    # Constants / Enums
    "AttendanceStatus",
    "EmployeeStatus",
    "PaymentStatus",
    "ALL_DEPARTMENTS",
    "STAFF_DEPARTMENT",
    "FULL_MONTH_DAYS_31",
    "FULL_MONTH_DAYS_DEFAULT",
    "PF_RATE",
    "ISO_DATE_FORMAT",
    # Exceptions
    "AppException",
    "InvalidMonthException",
    "NotFoundException",
    "SnapshotNotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Months
    "month_key",
    "parse_month_key",
]
