"""Compensation Pydantic v2 schemas — engine inputs, outputs and API bodies."""

from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ═════════════════════════════════════════════════════════════════════
# Engine inputs
# ═════════════════════════════════════════════════════════════════════


class SalaryStructure(BaseModel):
    """Static monthly salary structure.

    Stored documents use camelCase keys (``otherAllowance``); both spellings
    are accepted. Missing or null components count as 0.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    basic: float = 0
    hra: float = 0
    conveyance: float = 0
    other_allowance: float = 0
    special_allowance: float = 0
    gross_monthly: Optional[float] = None

    @field_validator(
        "basic", "hra", "conveyance", "other_allowance", "special_allowance",
        mode="before",
    )
    @classmethod
    def _none_is_zero(cls, value):
        return 0 if value is None else value


class EmployeeProfile(BaseModel):
    """Read-only view of an employee as the engine needs it.

    Accepts the stored document keys (``pfApplicable``, ``includePF``) as well
    as the snake_case names.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: Optional[str] = None
    employee_code: Optional[str] = None
    department: Optional[str] = None
    pf_applicable: bool = False
    include_pf: bool = Field(default=False, alias="includePF")
    salary: Optional[SalaryStructure] = None

    @field_validator("pf_applicable", "include_pf", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return False if value is None else value

    @property
    def is_pf_applicable(self) -> bool:
        return self.pf_applicable or self.include_pf


class AttendanceEntry(BaseModel):
    """Raw attendance row.

    Nothing here is rejected at the boundary: a null or non-string ``date`` /
    ``status`` becomes text the aggregator drops, and an unreadable timestamp
    becomes None. A dropped row counts as Absent.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    employee_id: Optional[str] = None
    date: str = ""
    status: str = ""
    date_key: Optional[str] = Field(
        default=None,
        description="Date the row is stored under; rows whose own date differs are ignored.",
    )
    updated_at: Optional[float] = None
    created_at: Optional[float] = None

    @field_validator("employee_id", "date_key", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return None if value is None else str(value)

    @field_validator("date", "status", mode="before")
    @classmethod
    def _text_or_empty(cls, value):
        return "" if value is None else str(value)

    @field_validator("updated_at", "created_at", mode="before")
    @classmethod
    def _epoch_ms_or_none(cls, value):
        if value is None or isinstance(value, bool):
            return None
        try:
            stamp = float(value)
        except (TypeError, ValueError):
            return None
        return stamp if math.isfinite(stamp) else None

    @property
    def timestamp(self) -> float:
        if self.updated_at is not None:
            return self.updated_at
        if self.created_at is not None:
            return self.created_at
        return 0


class HolidayEntry(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    date: str
    name: str = ""
    departments: List[str] = []
    month_key: Optional[str] = None

    @field_validator("departments", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value


# ═════════════════════════════════════════════════════════════════════
# Engine intermediates
# ═════════════════════════════════════════════════════════════════════


class MonthContext(BaseModel):
    """Calendar facts for the target month."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    total_days: int
    sundays: int

    @property
    def month_key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class AttendanceSummary(BaseModel):
    present_count: int = 0
    half_day_count: int = 0
    sunday_worked_count: int = 0
    leave_count: int = 0
    absent_count: int = 0
    recorded_days: int = 0


class EarningsBreakdown(BaseModel):
    monthly_salary: float
    per_day_rate: float
    pd_pay: float
    hd_pay: float
    holiday_pay: float
    effective_sunday_count: int
    sunday_pay: float
    total_gross_earnings: float
    earning_ratio: float
    attendance_basic: int
    attendance_conveyance: int
    payable_days: float


# ═════════════════════════════════════════════════════════════════════
# Engine output
# ═════════════════════════════════════════════════════════════════════


class CompensationResult(BaseModel):
    """Attendance-adjusted pay and PF for one employee and month."""

    employee_id: str
    month: str
    department: Optional[str] = None
    full_working_days: int
    payable_days: float
    attendance_basic: int
    attendance_conveyance: int
    total_gross_earnings: float
    pf_base: int
    pf_amount: int
    earning_ratio: float

    # Informational, for reports and exports
    present_count: int = 0
    half_day_count: int = 0
    sunday_worked_count: int = 0
    leave_count: int = 0
    absent_count: int = 0
    recorded_days: int = 0
    applicable_holidays_count: int = 0
    monthly_salary: float = 0
    per_day_rate: float = 0
    pf_applicable: bool = False


# ═════════════════════════════════════════════════════════════════════
# API bodies
# ═════════════════════════════════════════════════════════════════════


class ComputeRequest(BaseModel):
    """Stateless compute: the caller supplies every input collection."""

    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)
    employees: List[EmployeeProfile]
    attendance: List[AttendanceEntry] = []
    holidays: List[HolidayEntry] = []


class CompensationListResponse(BaseModel):
    month: str
    data: List[CompensationResult]
    total: int


class SnapshotResponse(BaseModel):
    month: str
    data: List[CompensationResult]
    total: int
    computed_at: Optional[datetime] = None
