"""Attendance-based compensation engine.

Turns one month of raw attendance rows into attendance-adjusted Basic and
Conveyance, gross earnings and the Provident Fund contribution for each
employee.

Pipeline per employee:
  AttendanceAggregator   raw rows -> present / half-day / Sunday-worked counts
  HolidayResolver        holiday calendar -> applicable holiday count
  WorkingDaysCalculator  full-month threshold -> credited working days
  EarningsAllocator      salary structure x earning ratio -> adjusted components
  PFCalculator           12% of (Basic + Conveyance), gated by PF applicability

Everything here is synchronous and pure: no I/O, no shared state between
employees. Callers load the three input collections completely before
calling ``MonthlyCompensationEngine.compute``.
"""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from hr_payroll.common.constants import (
    ALL_DEPARTMENTS,
    FULL_MONTH_DAYS_31,
    FULL_MONTH_DAYS_DEFAULT,
    ISO_DATE_FORMAT,
    PF_RATE,
    STAFF_DEPARTMENT,
    AttendanceStatus,
)
from hr_payroll.compensation.schemas import (
    AttendanceEntry,
    AttendanceSummary,
    CompensationResult,
    EarningsBreakdown,
    EmployeeProfile,
    HolidayEntry,
    MonthContext,
    SalaryStructure,
)

logger = logging.getLogger(__name__)

SUNDAY = calendar.SUNDAY


def build_month_context(year: int, month: int) -> MonthContext:
    """Calendar facts for a month. Raises ValueError for an invalid month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    total_days = calendar.monthrange(year, month)[1]
    # itermonthdays2 pads with day 0 outside the month
    sundays = sum(
        1 for day, weekday in calendar.Calendar().itermonthdays2(year, month)
        if day and weekday == SUNDAY
    )
    return MonthContext(year=year, month=month, total_days=total_days, sundays=sundays)


def _parse_date(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value, ISO_DATE_FORMAT).date()
    except (TypeError, ValueError):
        return None


# ═════════════════════════════════════════════════════════════════════
# AttendanceAggregator
# ═════════════════════════════════════════════════════════════════════


class AttendanceAggregator:
    """Reduce raw attendance rows to per-employee day counts."""

    @staticmethod
    def latest_per_day(
        records: Iterable[AttendanceEntry],
        ctx: MonthContext,
    ) -> dict[date, tuple[AttendanceEntry, AttendanceStatus]]:
        """Pick the most recent usable row for each calendar date of the month.

        Rows are dropped when their date does not parse, falls outside the
        month, disagrees with the key they were stored under, or carries an
        unknown status. Among duplicates the greatest ``updated_at`` (else
        ``created_at``, else 0) wins; on equal timestamps the row that comes
        later in input order wins.
        """
        usable: list[tuple[AttendanceEntry, date, AttendanceStatus]] = []
        for record in records:
            if record.date_key is not None and record.date_key != record.date:
                continue
            day = _parse_date(record.date)
            if day is None or (day.year, day.month) != (ctx.year, ctx.month):
                continue
            status = AttendanceStatus.parse(record.status)
            if status is None:
                continue
            usable.append((record, day, status))

        # sorted() is stable, so input order breaks timestamp ties
        latest: dict[date, tuple[AttendanceEntry, AttendanceStatus]] = {}
        for record, day, status in sorted(usable, key=lambda item: item[0].timestamp):
            latest[day] = (record, status)
        return latest

    @staticmethod
    def summarize(
        employee: EmployeeProfile,
        records: Iterable[AttendanceEntry],
        ctx: MonthContext,
    ) -> AttendanceSummary:
        """Count present, half and Sunday-worked days for one employee.

        ``records`` may contain other employees' rows; they are skipped.
        Sunday attendance adds to the present count only for the Staff
        department; every other department is paid for it through the
        Sunday allowance instead.
        """
        own = (r for r in records if r.employee_id == employee.id)
        summary = AttendanceSummary()
        is_staff = employee.department == STAFF_DEPARTMENT

        for day, (_, status) in AttendanceAggregator.latest_per_day(own, ctx).items():
            summary.recorded_days += 1
            if day.weekday() == SUNDAY:
                if status is AttendanceStatus.present:
                    summary.sunday_worked_count += 1
                    if is_staff:
                        summary.present_count += 1
                continue

            if status is AttendanceStatus.present:
                summary.present_count += 1
            elif status is AttendanceStatus.half_day:
                summary.half_day_count += 1
            elif status is AttendanceStatus.leave:
                summary.leave_count += 1
            elif status is AttendanceStatus.absent:
                summary.absent_count += 1

        return summary


# ═════════════════════════════════════════════════════════════════════
# HolidayResolver
# ═════════════════════════════════════════════════════════════════════


class HolidayResolver:
    """Department matching for the holiday calendar."""

    @staticmethod
    def applies_to(holiday: HolidayEntry, department: Optional[str]) -> bool:
        """True for "All" holidays or an exact, case-sensitive department match."""
        if ALL_DEPARTMENTS in holiday.departments:
            return True
        return department is not None and department in holiday.departments

    @staticmethod
    def in_month(holiday: HolidayEntry, ctx: MonthContext) -> bool:
        bucket = holiday.month_key or (holiday.date or "")[:7]
        return bucket == ctx.month_key

    @staticmethod
    def count_applicable(
        holidays: Iterable[HolidayEntry],
        department: Optional[str],
        ctx: MonthContext,
    ) -> int:
        return sum(
            1 for h in holidays
            if HolidayResolver.in_month(h, ctx) and HolidayResolver.applies_to(h, department)
        )


# ═════════════════════════════════════════════════════════════════════
# WorkingDaysCalculator
# ═════════════════════════════════════════════════════════════════════


class WorkingDaysCalculator:
    """Full-month attendance credit."""

    @staticmethod
    def required_days(total_days: int) -> int:
        return FULL_MONTH_DAYS_31 if total_days == 31 else FULL_MONTH_DAYS_DEFAULT

    @staticmethod
    def full_working_days(
        total_days: int,
        present_count: int,
        applicable_holidays: int,
    ) -> int:
        """Credit the whole month once presence reaches the holiday-adjusted bar."""
        adjusted = WorkingDaysCalculator.required_days(total_days) - applicable_holidays
        if present_count >= adjusted:
            return total_days
        return present_count


# ═════════════════════════════════════════════════════════════════════
# EarningsAllocator
# ═════════════════════════════════════════════════════════════════════


class EarningsAllocator:
    """Scale the static salary structure by attendance."""

    @staticmethod
    def monthly_salary(salary: Optional[SalaryStructure]) -> float:
        """Gross override if set and nonzero, otherwise the component sum."""
        if salary is None:
            return 0
        if salary.gross_monthly:
            return salary.gross_monthly
        total = (
            salary.basic
            + salary.hra
            + salary.conveyance
            + salary.other_allowance
            + salary.special_allowance
        )
        return total if total > 0 else 0

    @staticmethod
    def allocate(
        *,
        full_working_days: int,
        half_day_count: int,
        applicable_holidays: int,
        sunday_worked_count: int,
        ctx: MonthContext,
        salary: Optional[SalaryStructure],
    ) -> EarningsBreakdown:
        """Attendance-adjusted earnings for one employee.

        The earning ratio is not clamped: when full-month credit, holidays
        and unworked Sundays together exceed the month, the ratio goes above
        1 and Basic/Conveyance scale up with it.

        Rounding uses the built-in ``round`` (half to even).
        """
        structure = salary or SalaryStructure()
        monthly = EarningsAllocator.monthly_salary(salary)
        per_day_rate = monthly / ctx.total_days

        pd_pay = full_working_days * per_day_rate
        hd_pay = half_day_count * (per_day_rate / 2)
        holiday_pay = applicable_holidays * per_day_rate
        # Sundays already inside full_working_days are subtracted out here
        effective_sundays = max(0, ctx.sundays - sunday_worked_count)
        sunday_pay = effective_sundays * per_day_rate

        gross = pd_pay + hd_pay + holiday_pay + sunday_pay
        ratio = gross / monthly if monthly > 0 else 0

        return EarningsBreakdown(
            monthly_salary=monthly,
            per_day_rate=per_day_rate,
            pd_pay=pd_pay,
            hd_pay=hd_pay,
            holiday_pay=holiday_pay,
            effective_sunday_count=effective_sundays,
            sunday_pay=sunday_pay,
            total_gross_earnings=gross,
            earning_ratio=ratio,
            attendance_basic=round(structure.basic * ratio),
            attendance_conveyance=round(structure.conveyance * ratio),
            payable_days=full_working_days + half_day_count * 0.5,
        )


# ═════════════════════════════════════════════════════════════════════
# PFCalculator
# ═════════════════════════════════════════════════════════════════════


class PFCalculator:
    """Employee Provident Fund on the attendance-adjusted base."""

    @staticmethod
    def calculate(
        attendance_basic: int,
        attendance_conveyance: int,
        applicable: bool,
    ) -> tuple[int, int]:
        """Return (pf_base, pf_amount). No statutory wage ceiling is applied."""
        pf_base = attendance_basic + attendance_conveyance
        pf_amount = round(pf_base * PF_RATE) if applicable else 0
        return pf_base, pf_amount


# ═════════════════════════════════════════════════════════════════════
# MonthlyCompensationEngine
# ═════════════════════════════════════════════════════════════════════


class MonthlyCompensationEngine:
    """Run the full pipeline for a roster and month."""

    @staticmethod
    def compute_employee(
        employee: EmployeeProfile,
        records: Sequence[AttendanceEntry],
        holidays: Sequence[HolidayEntry],
        ctx: MonthContext,
    ) -> CompensationResult:
        if employee is None:
            raise ValueError("employee must not be None")

        attendance = AttendanceAggregator.summarize(employee, records, ctx)
        holiday_count = HolidayResolver.count_applicable(holidays, employee.department, ctx)
        full_days = WorkingDaysCalculator.full_working_days(
            ctx.total_days, attendance.present_count, holiday_count,
        )
        earnings = EarningsAllocator.allocate(
            full_working_days=full_days,
            half_day_count=attendance.half_day_count,
            applicable_holidays=holiday_count,
            sunday_worked_count=attendance.sunday_worked_count,
            ctx=ctx,
            salary=employee.salary,
        )
        pf_base, pf_amount = PFCalculator.calculate(
            earnings.attendance_basic,
            earnings.attendance_conveyance,
            employee.is_pf_applicable,
        )

        return CompensationResult(
            employee_id=employee.id,
            month=ctx.month_key,
            department=employee.department,
            full_working_days=full_days,
            payable_days=earnings.payable_days,
            attendance_basic=earnings.attendance_basic,
            attendance_conveyance=earnings.attendance_conveyance,
            total_gross_earnings=earnings.total_gross_earnings,
            pf_base=pf_base,
            pf_amount=pf_amount,
            earning_ratio=earnings.earning_ratio,
            present_count=attendance.present_count,
            half_day_count=attendance.half_day_count,
            sunday_worked_count=attendance.sunday_worked_count,
            leave_count=attendance.leave_count,
            absent_count=attendance.absent_count,
            recorded_days=attendance.recorded_days,
            applicable_holidays_count=holiday_count,
            monthly_salary=earnings.monthly_salary,
            per_day_rate=earnings.per_day_rate,
            pf_applicable=employee.is_pf_applicable,
        )

    @staticmethod
    def compute(
        employees: Sequence[EmployeeProfile],
        attendance_records: Iterable[AttendanceEntry],
        holidays: Iterable[HolidayEntry],
        year: int,
        month: int,
    ) -> list[CompensationResult]:
        """One result per employee, in roster order."""
        ctx = build_month_context(year, month)
        holiday_list = list(holidays)

        by_employee: dict[str, list[AttendanceEntry]] = defaultdict(list)
        for record in attendance_records:
            by_employee[record.employee_id].append(record)

        results = []
        for employee in employees:
            if employee is None:
                raise ValueError("employee roster contains None")
            results.append(
                MonthlyCompensationEngine.compute_employee(
                    employee, by_employee.get(employee.id, []), holiday_list, ctx,
                )
            )

        logger.debug(
            "Computed %d compensation results for %s (%d days, %d Sundays)",
            len(results), ctx.month_key, ctx.total_days, ctx.sundays,
        )
        return results
