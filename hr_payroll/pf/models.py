"""PF register ORM models: PfEntry, PayrollCredit.

SQLAlchemy 2.0 async-compatible models.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hr_payroll.common.constants import PaymentStatus
from hr_payroll.database import Base


class PfEntry(Base):
    """Saved PF register row: whether PF is deducted and whether it was paid."""

    __tablename__ = "pf_entries"
    __table_args__ = (
        sa.UniqueConstraint("month_key", "employee_id", name="uq_pf_month_employee"),
    )

    id: Mapped[str] = mapped_column(
        sa.String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    month_key: Mapped[str] = mapped_column(sa.String(7), nullable=False, index=True)
    employee_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    pf_included: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    # Amount at the time of saving; the register always shows the recomputed value.
    pf_amount: Mapped[int] = mapped_column(sa.Integer, default=0)
    payment_status: Mapped[str] = mapped_column(
        sa.String(20), default=PaymentStatus.pending.value,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<PfEntry {self.month_key} {self.employee_id} {self.payment_status}>"


class PayrollCredit(Base):
    """Salary-credited flag written by the payroll run; read-only here."""

    __tablename__ = "payroll_credits"
    __table_args__ = (
        sa.UniqueConstraint("month_key", "employee_id", name="uq_payroll_credit_month_employee"),
    )

    id: Mapped[str] = mapped_column(
        sa.String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    month_key: Mapped[str] = mapped_column(sa.String(7), nullable=False, index=True)
    employee_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    salary_credited: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    credited_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
