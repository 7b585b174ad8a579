"""Compensation service + API tests.

Exercise loading a month from the database, snapshot persistence and the
HTTP endpoints. Uses the shared conftest.py pattern with in-memory SQLite.
"""

from __future__ import annotations

from datetime import date

import pytest

from hr_payroll.common.exceptions import NotFoundException
from hr_payroll.compensation.service import CompensationService
from tests.conftest import (
    _make_salary,
    seed_attendance,
    seed_employee,
    seed_holiday,
    sundays,
    weekdays,
)


# ═════════════════════════════════════════════════════════════════════
# 1. LOADING
# ═════════════════════════════════════════════════════════════════════


async def test_load_month_inputs_scopes_to_month(db):
    """Only the month's attendance rows and holidays are loaded."""
    emp = await seed_employee(db)
    await seed_attendance(db, emp["id"], weekdays(2025, 9)[:3])
    await seed_attendance(db, emp["id"], weekdays(2025, 10)[:5])
    await seed_holiday(db, date(2025, 9, 5))
    await seed_holiday(db, date(2025, 10, 2))

    inputs = await CompensationService.load_month_inputs(db, 2025, 9)
    assert len(inputs.employees) == 1
    assert len(inputs.attendance) == 3
    assert len(inputs.holidays) == 1
    assert inputs.employees[0].salary.other_allowance == 3900


async def test_inactive_employees_excluded(db):
    await seed_employee(db, name="Active")
    await seed_employee(db, name="Gone", status="inactive")

    inputs = await CompensationService.load_month_inputs(db, 2025, 9)
    assert [e.name for e in inputs.employees] == ["Active"]


# ═════════════════════════════════════════════════════════════════════
# 2. COMPUTE FROM STORE
# ═════════════════════════════════════════════════════════════════════


async def test_compute_month_reference_scenario(db):
    """30-day month, 20 present, 2 half days, 1 holiday -> PF 1726."""
    emp = await seed_employee(db, salary=_make_salary(gross=30000))
    days = weekdays(2025, 9)
    await seed_attendance(db, emp["id"], days[:20])
    await seed_attendance(db, emp["id"], days[20:22], "Half Day")
    await seed_holiday(db, days[23])

    [r] = await CompensationService.compute_month(db, 2025, 9)
    assert r.employee_id == emp["id"]
    assert r.full_working_days == 20
    assert r.total_gross_earnings == 26000
    assert r.attendance_basic == 13000
    assert r.attendance_conveyance == 1387
    assert r.pf_amount == 1726


async def test_compute_month_uses_latest_correction(db):
    """A later correction row overrides the original for the same date."""
    emp = await seed_employee(db)
    day = weekdays(2025, 9)[0]
    await seed_attendance(db, emp["id"], [day], "Absent", updated_at=1000)
    await seed_attendance(db, emp["id"], [day], "Present", updated_at=2000)

    [r] = await CompensationService.compute_month(db, 2025, 9)
    assert r.present_count == 1


async def test_compute_month_department_holidays(db):
    staff = await seed_employee(db, department="Staff")
    prod = await seed_employee(db, department="Production")
    await seed_holiday(db, date(2025, 9, 5), departments=["Staff"])
    await seed_attendance(db, staff["id"], sundays(2025, 9))
    await seed_attendance(db, prod["id"], sundays(2025, 9))

    results = {r.employee_id: r for r in await CompensationService.compute_month(db, 2025, 9)}
    assert results[staff["id"]].applicable_holidays_count == 1
    assert results[staff["id"]].present_count == 4
    assert results[prod["id"]].applicable_holidays_count == 0
    assert results[prod["id"]].present_count == 0
    assert results[prod["id"]].sunday_worked_count == 4


# ═════════════════════════════════════════════════════════════════════
# 3. SNAPSHOTS
# ═════════════════════════════════════════════════════════════════════


async def test_snapshot_roundtrip(db):
    emp = await seed_employee(db)
    await seed_attendance(db, emp["id"], weekdays(2025, 9))

    saved, computed_at = await CompensationService.save_snapshot(db, 2025, 9)
    loaded, loaded_at = await CompensationService.get_snapshot(db, 2025, 9)
    assert computed_at is not None
    assert loaded_at is not None
    assert [r.model_dump() for r in loaded] == [r.model_dump() for r in saved]


async def test_snapshot_replaced_on_recompute(db):
    emp = await seed_employee(db)
    await seed_attendance(db, emp["id"], weekdays(2025, 9)[:5])
    await CompensationService.save_snapshot(db, 2025, 9)

    await seed_attendance(db, emp["id"], weekdays(2025, 9)[5:])
    await CompensationService.save_snapshot(db, 2025, 9)

    [r], _ = await CompensationService.get_snapshot(db, 2025, 9)
    assert r.full_working_days == 30


async def test_missing_snapshot_raises(db):
    with pytest.raises(NotFoundException):
        await CompensationService.get_snapshot(db, 2025, 9)


# ═════════════════════════════════════════════════════════════════════
# 4. API
# ═════════════════════════════════════════════════════════════════════


async def test_api_compute_stateless(client):
    """POST /compute needs no stored data."""
    days = weekdays(2025, 9)
    body = {
        "year": 2025,
        "month": 9,
        "employees": [{
            "id": "emp-1",
            "department": "Production",
            "pf_applicable": True,
            "salary": {"basic": 15000, "conveyance": 1600, "grossMonthly": 30000},
        }],
        "attendance": (
            [{"employee_id": "emp-1", "date": d.isoformat(), "status": "Present"} for d in days[:20]]
            + [{"employee_id": "emp-1", "date": d.isoformat(), "status": "Half Day"} for d in days[20:22]]
        ),
        "holidays": [{"date": days[23].isoformat(), "name": "Festival", "departments": ["All"]}],
    }
    resp = await client.post("/api/v1/compensation/compute", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["month"] == "2025-09"
    assert data["total"] == 1
    row = data["data"][0]
    assert row["full_working_days"] == 20
    assert row["pf_base"] == 14387
    assert row["pf_amount"] == 1726


async def test_api_compute_rejects_bad_month(client):
    resp = await client.post(
        "/api/v1/compensation/compute",
        json={"year": 2025, "month": 13, "employees": []},
    )
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")


async def test_api_compute_from_store(client, db):
    emp = await seed_employee(db, department="Staff")
    await seed_attendance(db, emp["id"], weekdays(2025, 9) + sundays(2025, 9))
    await db.commit()

    resp = await client.get("/api/v1/compensation/2025-09")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert data["data"][0]["full_working_days"] == 30
    assert data["data"][0]["earning_ratio"] == 1


async def test_api_invalid_month_key(client):
    resp = await client.get("/api/v1/compensation/2025-13")
    assert resp.status_code == 422
    body = resp.json()
    assert "month_key" in body["errors"]


async def test_api_snapshot_lifecycle(client, db):
    emp = await seed_employee(db)
    await seed_attendance(db, emp["id"], weekdays(2025, 9)[:10])
    await db.commit()

    resp = await client.get("/api/v1/compensation/2025-09/snapshot")
    assert resp.status_code == 404

    resp = await client.post("/api/v1/compensation/2025-09/snapshot")
    assert resp.status_code == 200
    assert resp.json()["total"] == 1

    resp = await client.get("/api/v1/compensation/2025-09/snapshot")
    assert resp.status_code == 200
    data = resp.json()
    assert data["data"][0]["present_count"] == 10
    assert data["computed_at"] is not None


async def test_api_compute_accepts_stored_documents(client):
    """Documents posted as stored (camelCase keys) are read, not ignored."""
    day = "2025-09-02"
    body = {
        "year": 2025,
        "month": 9,
        "employees": [{
            "id": "legacy",
            "employeeCode": "EMP-7",
            "department": "Production",
            "pfApplicable": False,
            "includePF": True,
            "salary": {"basic": 15000, "conveyance": 1600, "otherAllowance": 13400},
        }],
        "attendance": [
            {"employeeId": "legacy", "date": day, "dateKey": day, "status": "Present", "updatedAt": 2000},
            {"employeeId": "legacy", "date": day, "dateKey": day, "status": "Absent", "updatedAt": 1000},
        ],
        "holidays": [{"date": "2025-09-05", "monthKey": "2025-09", "departments": ["All"]}],
    }
    resp = await client.post("/api/v1/compensation/compute", json=body)
    assert resp.status_code == 200
    row = resp.json()["data"][0]
    assert row["pf_applicable"] is True
    assert row["pf_amount"] > 0
    assert row["present_count"] == 1
    assert row["absent_count"] == 0
    assert row["applicable_holidays_count"] == 1


async def test_api_compute_malformed_rows_count_as_absent(client):
    """One bad row must not reject the roster; it is simply not counted."""
    days = weekdays(2025, 9)
    attendance = [
        {"employee_id": "emp-1", "date": d.isoformat(), "status": "Present"} for d in days[:20]
    ]
    attendance += [
        {"employee_id": "emp-1", "date": days[20].isoformat(), "status": None},
        {"employee_id": "emp-1", "date": None, "status": "Present"},
        {"employee_id": "emp-1", "date": days[21].isoformat(), "status": "Present",
         "updated_at": 1718000000000.5},
    ]
    body = {
        "year": 2025,
        "month": 9,
        "employees": [{"id": "emp-1", "pf_applicable": True, "salary": {"basic": 15000}}],
        "attendance": attendance,
    }
    resp = await client.post("/api/v1/compensation/compute", json=body)
    assert resp.status_code == 200
    row = resp.json()["data"][0]
    assert row["present_count"] == 21
    assert row["recorded_days"] == 21
