"""Attendance ORM models: AttendanceRecord, Holiday.

Both tables mirror a document store keyed by path: attendance rows are
grouped under their calendar date (``date_key``), holidays under their
month (``month_key``). The payroll engine reads them; the attendance and
holiday-calendar screens write them.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from hr_payroll.database import Base


def _new_key() -> str:
    return uuid.uuid4().hex


class AttendanceRecord(Base):
    """One attendance row for an employee on a date.

    Corrections are appended rather than updated, so several rows may exist
    for the same employee and date; readers keep the one with the latest
    ``updated_at`` (falling back to ``created_at``).
    """

    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.Index("ix_attendance_date_key_employee", "date_key", "employee_id"),
    )

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True, default=_new_key)
    date_key: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    employee_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    date: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    # Epoch milliseconds, as written by the attendance screens.
    created_at: Mapped[Optional[int]] = mapped_column(sa.BigInteger, nullable=True)
    updated_at: Mapped[Optional[int]] = mapped_column(sa.BigInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<AttendanceRecord {self.employee_id} {self.date} {self.status!r}>"


class Holiday(Base):
    """Calendar holiday, applicable to a list of departments or "All"."""

    __tablename__ = "holidays"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True, default=_new_key)
    month_key: Mapped[str] = mapped_column(sa.String(7), nullable=False, index=True)
    date: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    departments: Mapped[list] = mapped_column(JSONB, default=list)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Holiday {self.date} {self.name!r}>"
