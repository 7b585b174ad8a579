"""PF register router — monthly PF lines, inclusion toggles, payment status."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.common.months import parse_month_key
from hr_payroll.database import get_db
from hr_payroll.pf.schemas import (
    PfEntryOut,
    PfEntryUpdate,
    PfRegisterResponse,
    PfSaveResponse,
)
from hr_payroll.pf.service import PfService

router = APIRouter(prefix="", tags=["pf"])


# ── GET /{month_key} ─────────────────────────────────────────────────

@router.get("/{month}", response_model=PfRegisterResponse)
async def get_register(
    month: str,
    db: AsyncSession = Depends(get_db),
):
    """PF register for the month, with totals."""
    year, month_no = parse_month_key(month)
    return await PfService.get_register(db, year, month_no)


# ── PATCH /{month_key}/{employee_id} ─────────────────────────────────

@router.patch("/{month}/{employee_id}", response_model=PfEntryOut)
async def update_entry(
    month: str,
    employee_id: str,
    body: PfEntryUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Toggle PF inclusion or mark the contribution Paid / Pending."""
    year, month_no = parse_month_key(month)
    return await PfService.update_entry(
        db, year, month_no, employee_id,
        pf_included=body.pf_included,
        payment_status=body.payment_status,
    )


# ── POST /{month_key}/save ───────────────────────────────────────────

@router.post("/{month}/save", response_model=PfSaveResponse)
async def save_register(
    month: str,
    db: AsyncSession = Depends(get_db),
):
    """Persist all included lines of the current register."""
    year, month_no = parse_month_key(month)
    saved = await PfService.save_register(db, year, month_no)
    return PfSaveResponse(month=month, saved=saved)
