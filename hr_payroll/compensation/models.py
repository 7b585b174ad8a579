"""Compensation ORM models: CompensationSnapshot.

Saved engine output, one row per employee and month. Recomputing a month
overwrites its rows.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from hr_payroll.database import Base


class CompensationSnapshot(Base):
    __tablename__ = "compensation_snapshots"
    __table_args__ = (
        sa.UniqueConstraint("month_key", "employee_id", name="uq_compensation_month_employee"),
    )

    id: Mapped[str] = mapped_column(
        sa.String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    month_key: Mapped[str] = mapped_column(sa.String(7), nullable=False, index=True)
    employee_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    result: Mapped[dict] = mapped_column(JSONB, nullable=False)
    computed_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<CompensationSnapshot {self.month_key} {self.employee_id}>"
