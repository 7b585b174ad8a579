"""Shared test fixtures — async DB, client, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Point pydantic-settings at SQLite before anything imports hr_payroll.config
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "warning")

import uuid
from datetime import date, timedelta
from typing import AsyncGenerator, Iterable, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hr_payroll.database import Base, get_db
from hr_payroll.main import create_app

# Import ALL model modules so every table is registered on Base.metadata
import hr_payroll.attendance.models  # noqa: F401
import hr_payroll.compensation.models  # noqa: F401
import hr_payroll.core_hr.models  # noqa: F401
import hr_payroll.pf.models  # noqa: F401

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from hr_payroll.common.rate_limit import limiter
    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Calendar helpers ────────────────────────────────────────────────

def month_days(year: int, month: int) -> list[date]:
    day = date(year, month, 1)
    days = []
    while day.month == month:
        days.append(day)
        day += timedelta(days=1)
    return days


def weekdays(year: int, month: int) -> list[date]:
    """Every non-Sunday date of the month."""
    return [d for d in month_days(year, month) if d.weekday() != 6]


def sundays(year: int, month: int) -> list[date]:
    return [d for d in month_days(year, month) if d.weekday() == 6]


# ── Model factories ─────────────────────────────────────────────────

def _make_salary(
    *,
    basic: float = 15000,
    hra: float = 7500,
    conveyance: float = 1600,
    other: float = 3900,
    special: float = 2000,
    gross: Optional[float] = None,
) -> dict:
    """Stored salary document (camelCase keys, as the HR forms write it)."""
    data = {
        "basic": basic,
        "hra": hra,
        "conveyance": conveyance,
        "otherAllowance": other,
        "specialAllowance": special,
    }
    if gross is not None:
        data["grossMonthly"] = gross
    return data


def _make_employee(
    *,
    department: Optional[str] = "Production",
    pf_applicable: bool = True,
    include_pf: bool = False,
    salary: Optional[dict] = None,
    status: str = "active",
    name: str = "Test Employee",
) -> dict:
    return dict(
        id=uuid.uuid4().hex,
        employee_code=f"EMP-{uuid.uuid4().hex[:6].upper()}",
        name=name,
        department=department,
        status=status,
        pf_applicable=pf_applicable,
        include_pf=include_pf,
        salary=salary if salary is not None else _make_salary(),
    )


def _make_attendance(
    employee_id: str,
    day: date,
    status: str = "Present",
    *,
    date_key: Optional[str] = None,
    updated_at: Optional[int] = None,
    created_at: Optional[int] = 1,
) -> dict:
    iso = day.isoformat()
    return dict(
        id=uuid.uuid4().hex,
        date_key=date_key or iso,
        employee_id=employee_id,
        date=iso,
        status=status,
        created_at=created_at,
        updated_at=updated_at,
    )


def _make_holiday(
    day: date,
    *,
    name: str = "Holiday",
    departments: Iterable[str] = ("All",),
) -> dict:
    return dict(
        id=uuid.uuid4().hex,
        month_key=day.strftime("%Y-%m"),
        date=day.isoformat(),
        name=name,
        departments=list(departments),
    )


async def seed_employee(db: AsyncSession, **kwargs) -> dict:
    from hr_payroll.core_hr.models import Employee

    data = _make_employee(**kwargs)
    db.add(Employee(**data))
    await db.flush()
    return data


async def seed_attendance(
    db: AsyncSession,
    employee_id: str,
    days: Iterable[date],
    status: str = "Present",
    **kwargs,
) -> None:
    from hr_payroll.attendance.models import AttendanceRecord

    for d in days:
        db.add(AttendanceRecord(**_make_attendance(employee_id, d, status, **kwargs)))
    await db.flush()


async def seed_holiday(db: AsyncSession, day: date, **kwargs) -> dict:
    from hr_payroll.attendance.models import Holiday

    data = _make_holiday(day, **kwargs)
    db.add(Holiday(**data))
    await db.flush()
    return data
