"""001 – Payroll engine schema.

Creates the employee directory, attendance rows, holiday calendar, PF
register, payroll credit flags and compensation snapshots.

Uses CREATE TABLE IF NOT EXISTS so the migration is safe to run against a
database where the HR screens already created some of these tables.

Revision ID: 001_payroll_schema
Revises:
Create Date: 2026-10-17 10:00:00.000000+05:30
"""

import re

from alembic import op
import sqlalchemy as sa

# Revision identifiers
revision = "001_payroll_schema"
down_revision = None
branch_labels = None
depends_on = None

_SAFE_IDENT_RE = re.compile(r'^[a-z_][a-z0-9_]*$')

TABLES = [
    "compensation_snapshots",
    "payroll_credits",
    "pf_entries",
    "holidays",
    "attendance_records",
    "employees",
]


def _validate_identifier(name: str) -> str:
    if not _SAFE_IDENT_RE.match(name):
        raise ValueError(f"Unsafe SQL identifier: {name!r}")
    return name


def _safe_drop_table(name: str) -> None:
    _validate_identifier(name)
    op.execute(sa.text(f'DROP TABLE IF EXISTS "{name}" CASCADE'))


def upgrade() -> None:
    # ══════════════════════════════════════════════════════════════════
    # 1. employees
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS employees (
            id              VARCHAR(64) PRIMARY KEY,
            employee_code   VARCHAR(50),
            name            VARCHAR(200),
            department      VARCHAR(100),
            status          VARCHAR(20) DEFAULT 'active',
            pf_applicable   BOOLEAN DEFAULT FALSE,
            include_pf      BOOLEAN DEFAULT FALSE,
            salary          JSONB,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            updated_at      TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ══════════════════════════════════════════════════════════════════
    # 2. attendance_records (duplicates per employee/date allowed)
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS attendance_records (
            id              VARCHAR(64) PRIMARY KEY,
            date_key        VARCHAR(10) NOT NULL,
            employee_id     VARCHAR(64) NOT NULL,
            date            VARCHAR(10) NOT NULL,
            status          VARCHAR(20) NOT NULL,
            created_at      BIGINT,
            updated_at      BIGINT
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_attendance_date_key_employee "
        "ON attendance_records(date_key, employee_id)"
    )

    # ══════════════════════════════════════════════════════════════════
    # 3. holidays
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS holidays (
            id              VARCHAR(64) PRIMARY KEY,
            month_key       VARCHAR(7) NOT NULL,
            date            VARCHAR(10) NOT NULL,
            name            VARCHAR(150) NOT NULL,
            departments     JSONB DEFAULT '[]',
            created_at      TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_holidays_month_key ON holidays(month_key)")

    # ══════════════════════════════════════════════════════════════════
    # 4. pf_entries / payroll_credits / compensation_snapshots
    # ══════════════════════════════════════════════════════════════════
    op.execute("""
        CREATE TABLE IF NOT EXISTS pf_entries (
            id              VARCHAR(64) PRIMARY KEY,
            month_key       VARCHAR(7) NOT NULL,
            employee_id     VARCHAR(64) NOT NULL,
            pf_included     BOOLEAN DEFAULT TRUE,
            pf_amount       INTEGER DEFAULT 0,
            payment_status  VARCHAR(20) DEFAULT 'Pending',
            updated_at      TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_pf_month_employee UNIQUE (month_key, employee_id)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS payroll_credits (
            id              VARCHAR(64) PRIMARY KEY,
            month_key       VARCHAR(7) NOT NULL,
            employee_id     VARCHAR(64) NOT NULL,
            salary_credited BOOLEAN DEFAULT FALSE,
            credited_at     TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_payroll_credit_month_employee UNIQUE (month_key, employee_id)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS compensation_snapshots (
            id              VARCHAR(64) PRIMARY KEY,
            month_key       VARCHAR(7) NOT NULL,
            employee_id     VARCHAR(64) NOT NULL,
            result          JSONB NOT NULL,
            computed_at     TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT uq_compensation_month_employee UNIQUE (month_key, employee_id)
        )
    """)
    for table in ("pf_entries", "payroll_credits", "compensation_snapshots"):
        _validate_identifier(table)
        op.execute(
            f"CREATE INDEX IF NOT EXISTS ix_{table}_month_key ON {table}(month_key)"
        )


def downgrade() -> None:
    for table in TABLES:
        _safe_drop_table(table)
