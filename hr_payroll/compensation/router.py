"""Compensation router — compute attendance-based pay and PF for a month.

Month keys are "YYYY-MM".
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.common.months import month_key, parse_month_key
from hr_payroll.common.rate_limit import limiter
from hr_payroll.compensation.engine import MonthlyCompensationEngine
from hr_payroll.compensation.schemas import (
    CompensationListResponse,
    ComputeRequest,
    SnapshotResponse,
)
from hr_payroll.compensation.service import CompensationService
from hr_payroll.config import settings
from hr_payroll.database import get_db

router = APIRouter(prefix="", tags=["compensation"])


# ── POST /compute ────────────────────────────────────────────────────

@router.post("/compute", response_model=CompensationListResponse)
@limiter.limit(settings.RATE_LIMIT_COMPUTE)
async def compute(request: Request, body: ComputeRequest):
    """Compute from caller-supplied employees, attendance and holidays (no DB)."""
    results = MonthlyCompensationEngine.compute(
        body.employees, body.attendance, body.holidays, body.year, body.month,
    )
    return CompensationListResponse(
        month=month_key(body.year, body.month),
        data=results,
        total=len(results),
    )


# ── GET /{month_key} ─────────────────────────────────────────────────

@router.get("/{month}", response_model=CompensationListResponse)
async def compute_from_store(
    month: str,
    db: AsyncSession = Depends(get_db),
):
    """Compute the month from stored employees, attendance and holidays."""
    year, month_no = parse_month_key(month)
    results = await CompensationService.compute_month(db, year, month_no)
    return CompensationListResponse(month=month, data=results, total=len(results))


# ── POST /{month_key}/snapshot ───────────────────────────────────────

@router.post("/{month}/snapshot", response_model=SnapshotResponse)
@limiter.limit(settings.RATE_LIMIT_COMPUTE)
async def save_snapshot(
    request: Request,
    month: str,
    db: AsyncSession = Depends(get_db),
):
    """Compute the month and persist the results, replacing earlier ones."""
    year, month_no = parse_month_key(month)
    results, computed_at = await CompensationService.save_snapshot(db, year, month_no)
    return SnapshotResponse(
        month=month, data=results, total=len(results), computed_at=computed_at,
    )


# ── GET /{month_key}/snapshot ────────────────────────────────────────

@router.get("/{month}/snapshot", response_model=SnapshotResponse)
async def get_snapshot(
    month: str,
    db: AsyncSession = Depends(get_db),
):
    """Previously saved results for the month (404 if never saved)."""
    year, month_no = parse_month_key(month)
    results, computed_at = await CompensationService.get_snapshot(db, year, month_no)
    return SnapshotResponse(
        month=month, data=results, total=len(results), computed_at=computed_at,
    )
