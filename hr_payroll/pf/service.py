"""PF register service — merge computed PF with saved entries and credit flags."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.common.constants import PaymentStatus
from hr_payroll.common.exceptions import NotFoundException
from hr_payroll.common.months import month_key
from hr_payroll.compensation.engine import MonthlyCompensationEngine
from hr_payroll.compensation.service import CompensationService
from hr_payroll.pf.models import PayrollCredit, PfEntry
from hr_payroll.pf.schemas import PfEntryOut, PfRegisterResponse, PfTotals

logger = logging.getLogger(__name__)


class PfService:
    """Business logic for the monthly PF register."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _saved_entries(db: AsyncSession, key: str) -> dict[str, PfEntry]:
        result = await db.execute(select(PfEntry).where(PfEntry.month_key == key))
        return {e.employee_id: e for e in result.scalars().all()}

    @staticmethod
    async def _credited(db: AsyncSession, key: str) -> set[str]:
        result = await db.execute(
            select(PayrollCredit.employee_id).where(
                PayrollCredit.month_key == key,
                PayrollCredit.salary_credited == True,  # noqa: E712
            )
        )
        return set(result.scalars().all())

    @staticmethod
    def _totals(entries: list[PfEntryOut]) -> PfTotals:
        totals = PfTotals()
        for e in entries:
            if not e.pf_included:
                continue
            totals.included_count += 1
            totals.total_pf_amount += e.pf_amount
            if e.payment_status == PaymentStatus.paid:
                totals.paid_count += 1
        totals.pending_count = totals.included_count - totals.paid_count
        return totals

    # ── Register ────────────────────────────────────────────────────

    @staticmethod
    async def get_register(
        db: AsyncSession,
        year: int,
        month: int,
    ) -> PfRegisterResponse:
        """Current PF register for the month.

        A saved line keeps its inclusion flag and payment status but always
        shows the freshly computed amount (0 when excluded). Employees without
        a saved line default to their PF applicability and Pending.
        """
        key = month_key(year, month)
        inputs = await CompensationService.load_month_inputs(db, year, month)
        results = MonthlyCompensationEngine.compute(
            inputs.employees, inputs.attendance, inputs.holidays, year, month,
        )
        saved = await PfService._saved_entries(db, key)
        credited = await PfService._credited(db, key)

        entries: list[PfEntryOut] = []
        for emp, res in zip(inputs.employees, results):
            row = saved.get(emp.id)
            if row is not None:
                included = bool(row.pf_included)
                status = PaymentStatus(row.payment_status)
            else:
                included = emp.is_pf_applicable
                status = PaymentStatus.pending
            # Including a non-applicable employee still shows 0: the engine
            # already gated the amount on the employee's PF flags.
            amount = res.pf_amount if included else 0

            entries.append(PfEntryOut(
                employee_id=emp.id,
                employee_name=emp.name,
                employee_code=emp.employee_code,
                department=emp.department,
                month=key,
                pf_included=included,
                pf_amount=amount,
                pf_base=res.pf_base,
                payment_status=status,
                salary_credited=emp.id in credited,
                saved=row is not None,
            ))

        return PfRegisterResponse(month=key, data=entries, totals=PfService._totals(entries))

    @staticmethod
    async def update_entry(
        db: AsyncSession,
        year: int,
        month: int,
        employee_id: str,
        pf_included: Optional[bool] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> PfEntryOut:
        """Change inclusion and/or payment status of one register line."""
        register = await PfService.get_register(db, year, month)
        current = next((e for e in register.data if e.employee_id == employee_id), None)
        if current is None:
            raise NotFoundException("Employee", employee_id, month=register.month)

        key = register.month
        saved = (await PfService._saved_entries(db, key)).get(employee_id)
        if saved is None:
            saved = PfEntry(
                month_key=key,
                employee_id=employee_id,
                pf_included=current.pf_included,
                payment_status=current.payment_status.value,
            )
            db.add(saved)

        if pf_included is not None:
            saved.pf_included = pf_included
        if payment_status is not None:
            saved.payment_status = payment_status.value
        await db.flush()

        refreshed = await PfService.get_register(db, year, month)
        entry = next(e for e in refreshed.data if e.employee_id == employee_id)
        saved.pf_amount = entry.pf_amount
        await db.flush()

        logger.info(
            "PF entry %s/%s updated: included=%s status=%s",
            key, employee_id, entry.pf_included, entry.payment_status.value,
        )
        return entry

    @staticmethod
    async def save_register(
        db: AsyncSession,
        year: int,
        month: int,
    ) -> int:
        """Persist every included line of the current register; returns the count."""
        register = await PfService.get_register(db, year, month)
        saved = await PfService._saved_entries(db, register.month)

        count = 0
        for entry in register.data:
            if not entry.pf_included:
                continue
            row = saved.get(entry.employee_id)
            if row is None:
                row = PfEntry(month_key=register.month, employee_id=entry.employee_id)
                db.add(row)
            row.pf_included = True
            row.pf_amount = entry.pf_amount
            row.payment_status = entry.payment_status.value
            count += 1
        await db.flush()

        logger.info("Saved %d PF entries for %s", count, register.month)
        return count
