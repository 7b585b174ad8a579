"""Core HR ORM models: Employee.

The employee directory is owned by the HR master screens; the payroll
engine only reads it. Ids are the opaque keys assigned by the directory.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from hr_payroll.common.constants import EmployeeStatus
from hr_payroll.database import Base


class Employee(Base):
    """Employee master record with its static monthly salary structure."""

    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(
        sa.String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    employee_code: Mapped[Optional[str]] = mapped_column(sa.String(50))
    name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    department: Mapped[Optional[str]] = mapped_column(sa.String(100))
    status: Mapped[str] = mapped_column(
        sa.String(20), default=EmployeeStatus.active.value,
    )
    pf_applicable: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    # Legacy flag from older employee forms; either flag enables PF.
    include_pf: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    # {"basic", "hra", "conveyance", "otherAllowance", "specialAllowance", "grossMonthly"}
    salary: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Employee {self.id!r} {self.department!r}>"
