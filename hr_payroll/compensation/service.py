"""Compensation service layer — load a month from the database and run the engine.

Business logic:
  - Gather employees, attendance rows and holidays for the month
  - Run MonthlyCompensationEngine only once all three are loaded
  - Save / read computed results as monthly snapshots
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.attendance.models import AttendanceRecord, Holiday
from hr_payroll.common.constants import EmployeeStatus
from hr_payroll.common.exceptions import SnapshotNotFoundException
from hr_payroll.common.months import month_key
from hr_payroll.compensation.engine import MonthlyCompensationEngine
from hr_payroll.compensation.models import CompensationSnapshot
from hr_payroll.compensation.schemas import (
    AttendanceEntry,
    CompensationResult,
    EmployeeProfile,
    HolidayEntry,
)
from hr_payroll.core_hr.models import Employee

logger = logging.getLogger(__name__)


@dataclass
class MonthInputs:
    """Fully materialised engine inputs for one month."""

    year: int
    month: int
    employees: list[EmployeeProfile]
    attendance: list[AttendanceEntry]
    holidays: list[HolidayEntry]


class CompensationService:
    """Async operations around the compensation engine."""

    # ── Loading ─────────────────────────────────────────────────────

    @staticmethod
    async def get_active_employees(db: AsyncSession) -> list[Employee]:
        stmt = (
            select(Employee)
            .where(
                (Employee.status.is_(None))
                | (Employee.status != EmployeeStatus.inactive.value)
            )
            .order_by(Employee.employee_code, Employee.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def load_month_inputs(
        db: AsyncSession,
        year: int,
        month: int,
    ) -> MonthInputs:
        """Read every collection the engine needs for the month."""
        key = month_key(year, month)

        employees = await CompensationService.get_active_employees(db)

        att_result = await db.execute(
            select(AttendanceRecord).where(AttendanceRecord.date_key.like(f"{key}-%"))
        )
        attendance = [
            AttendanceEntry.model_validate(r) for r in att_result.scalars().all()
        ]

        hol_result = await db.execute(select(Holiday).where(Holiday.month_key == key))
        holidays = [HolidayEntry.model_validate(h) for h in hol_result.scalars().all()]

        logger.info(
            "Loaded %s: %d employees, %d attendance rows, %d holidays",
            key, len(employees), len(attendance), len(holidays),
        )
        return MonthInputs(
            year=year,
            month=month,
            employees=[EmployeeProfile.model_validate(e) for e in employees],
            attendance=attendance,
            holidays=holidays,
        )

    # ── Compute ─────────────────────────────────────────────────────

    @staticmethod
    async def compute_month(
        db: AsyncSession,
        year: int,
        month: int,
    ) -> list[CompensationResult]:
        inputs = await CompensationService.load_month_inputs(db, year, month)
        return MonthlyCompensationEngine.compute(
            inputs.employees, inputs.attendance, inputs.holidays, year, month,
        )

    # ── Snapshots ───────────────────────────────────────────────────

    @staticmethod
    async def save_snapshot(
        db: AsyncSession,
        year: int,
        month: int,
    ) -> tuple[list[CompensationResult], datetime]:
        """Compute the month and replace any previously saved results."""
        key = month_key(year, month)
        results = await CompensationService.compute_month(db, year, month)
        computed_at = datetime.now(timezone.utc)

        await db.execute(
            delete(CompensationSnapshot).where(CompensationSnapshot.month_key == key)
        )
        for r in results:
            db.add(CompensationSnapshot(
                month_key=key,
                employee_id=r.employee_id,
                result=r.model_dump(mode="json"),
                computed_at=computed_at,
            ))
        await db.flush()

        logger.info("Saved %d compensation snapshots for %s", len(results), key)
        return results, computed_at

    @staticmethod
    async def get_snapshot(
        db: AsyncSession,
        year: int,
        month: int,
    ) -> tuple[list[CompensationResult], Optional[datetime]]:
        key = month_key(year, month)
        result = await db.execute(
            select(CompensationSnapshot)
            .where(CompensationSnapshot.month_key == key)
            .order_by(CompensationSnapshot.employee_id)
        )
        rows = list(result.scalars().all())
        if not rows:
            raise SnapshotNotFoundException(key)

        computed_at = max(r.computed_at for r in rows)
        return [CompensationResult.model_validate(r.result) for r in rows], computed_at
