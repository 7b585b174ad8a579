#!/usr/bin/env python3
"""Compute attendance-based pay and PF for a month from the database.

Usage:
    python scripts/compute_payroll.py --month 2025-06             # print table
    python scripts/compute_payroll.py --month 2025-06 --json      # JSON output
    python scripts/compute_payroll.py --month 2025-06 --snapshot  # also persist

Requires .env at project root with DATABASE_URL.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("compute_payroll")

from hr_payroll.common.exceptions import AppException  # noqa: E402
from hr_payroll.common.months import parse_month_key  # noqa: E402
from hr_payroll.compensation.schemas import CompensationResult  # noqa: E402
from hr_payroll.compensation.service import CompensationService  # noqa: E402
from hr_payroll.database import engine, session_scope  # noqa: E402


async def run(month: str, snapshot: bool) -> list[CompensationResult]:
    year, month_no = parse_month_key(month)
    try:
        async with session_scope() as session:
            if snapshot:
                results, _ = await CompensationService.save_snapshot(session, year, month_no)
            else:
                results = await CompensationService.compute_month(session, year, month_no)
    finally:
        await engine.dispose()
    return results


def print_table(results: list[CompensationResult]) -> None:
    header = f"{'Employee':<20} {'Dept':<12} {'Full':>5} {'Payable':>8} {'Lv':>3} {'Abs':>4} {'Gross':>12} {'Basic':>9} {'Conv':>7} {'PF':>7}"
    print(header)
    print("─" * len(header))
    for r in results:
        print(
            f"{r.employee_id[:20]:<20} {(r.department or '-')[:12]:<12} "
            f"{r.full_working_days:>5} {r.payable_days:>8.1f} {r.leave_count:>3} {r.absent_count:>4} "
            f"{r.total_gross_earnings:>12.2f} "
            f"{r.attendance_basic:>9} {r.attendance_conveyance:>7} {r.pf_amount:>7}"
        )
    print("─" * len(header))
    print(f"{len(results)} employees, total PF {sum(r.pf_amount for r in results)}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Compute monthly attendance-based pay and PF")
    parser.add_argument("--month", required=True, help="Month key, YYYY-MM")
    parser.add_argument("--snapshot", action="store_true", help="Persist results as the month's snapshot")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    args = parser.parse_args()

    try:
        results = asyncio.run(run(args.month, args.snapshot))
    except AppException as e:
        logger.error("%s: %s", e.title, e.errors or e.detail)
        return 2

    if args.json:
        print(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
    else:
        print_table(results)
    if args.snapshot:
        logger.info("Snapshot saved for %s", args.month)
    return 0


if __name__ == "__main__":
    sys.exit(main())
