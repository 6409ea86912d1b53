"""
Tests für /api/v1/attendance – Check-in/Check-out, Verspätung, Historie, Statistik.

Die Uhr wird über hrm.api.v1.attendance.org_now eingefroren.
"""
import uuid
from datetime import date, time
from decimal import Decimal

import pytest

import hrm.api.v1.attendance as attendance_api
from hrm.core.config import settings
from hrm.models.attendance import AttendanceLog
from hrm.models.overtime import OvertimeRequest
from hrm.models.schedule import WorkSchedule
from hrm.services.work_settings import update_work_settings
from hrm.utils.timeutils import org_instant, parse_time
from tests.conftest import auth_headers

BASE = "/api/v1/attendance"
DAY = date(2025, 3, 10)  # Montag


def freeze(monkeypatch, day: date, hhmm: str):
    local = org_instant(day, parse_time(hhmm)).astimezone(settings.org_timezone)
    monkeypatch.setattr(attendance_api, "org_now", lambda: local)


# ── Check-in ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_check_in_on_time(client, employee_token, monkeypatch):
    freeze(monkeypatch, DAY, "07:55")
    resp = await client.post(f"{BASE}/check-in", json={"note": "Büro"}, headers=auth_headers(employee_token))
    assert resp.status_code == 201
    data = resp.json()
    assert data["work_date"] == "2025-03-10"
    assert data["status"] == "present"
    assert data["late_minutes"] == 0
    assert data["check_in_note"] == "Büro"
    assert data["check_out_time"] is None


@pytest.mark.asyncio
async def test_check_in_late_against_default_start(client, employee_token, monkeypatch):
    freeze(monkeypatch, DAY, "08:20")
    resp = await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    assert resp.status_code == 201
    assert resp.json()["status"] == "late"
    assert resp.json()["late_minutes"] == 20


@pytest.mark.asyncio
async def test_check_in_late_against_override_start(client, db, employee_user, employee_token, monkeypatch):
    db.add(WorkSchedule(user_id=employee_user.id, work_date=DAY, start_time=time(9, 0)))
    await db.commit()

    freeze(monkeypatch, DAY, "08:45")
    resp = await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    assert resp.json()["status"] == "present"


@pytest.mark.asyncio
async def test_grace_period(client, db, employee_token, monkeypatch):
    await update_work_settings(db, {"allow_grace_period": True, "grace_period_minutes": 5})

    freeze(monkeypatch, DAY, "08:04")
    resp = await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    assert resp.json()["status"] == "present"
    assert resp.json()["late_minutes"] == 0


@pytest.mark.asyncio
async def test_double_check_in_conflict(client, employee_token, monkeypatch):
    freeze(monkeypatch, DAY, "08:00")
    await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    resp = await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_check_in_requires_auth(client):
    resp = await client.post(f"{BASE}/check-in", json={})
    assert resp.status_code in (401, 403)


# ── Check-out ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_check_out_without_session(client, employee_token, monkeypatch):
    freeze(monkeypatch, DAY, "17:30")
    resp = await client.post(f"{BASE}/check-out", json={}, headers=auth_headers(employee_token))
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_check_out_recalculates_overtime(client, db, employee_user, employee_token, monkeypatch):
    db.add(OvertimeRequest(user_id=employee_user.id, request_date=DAY, planned_hours=Decimal("2"), status="approved"))
    await db.commit()

    freeze(monkeypatch, DAY, "08:00")
    await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    freeze(monkeypatch, DAY, "19:30")
    resp = await client.post(f"{BASE}/check-out", json={"note": "fertig"}, headers=auth_headers(employee_token))

    assert resp.status_code == 200
    data = resp.json()
    assert data["check_out_note"] == "fertig"
    # Standard 08:00–17:30 → 510 Soll-Minuten, 630 gearbeitet → 2h
    assert Decimal(str(data["overtime_hours"])) == Decimal("2.00")


@pytest.mark.asyncio
async def test_check_out_unauthorized_overtime_is_zero(client, employee_token, monkeypatch):
    freeze(monkeypatch, DAY, "08:00")
    await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    freeze(monkeypatch, DAY, "19:30")
    resp = await client.post(f"{BASE}/check-out", json={}, headers=auth_headers(employee_token))
    assert Decimal(str(resp.json()["overtime_hours"])) == Decimal("0.00")


@pytest.mark.asyncio
async def test_check_out_survives_recalc_failure(client, employee_token, monkeypatch):
    async def broken(self, log_id):
        raise RuntimeError("boom")

    monkeypatch.setattr(attendance_api.OvertimeService, "recalculate", broken)

    freeze(monkeypatch, DAY, "08:00")
    await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    freeze(monkeypatch, DAY, "17:30")
    resp = await client.post(f"{BASE}/check-out", json={}, headers=auth_headers(employee_token))
    assert resp.status_code == 200
    assert resp.json()["check_out_time"] is not None


# ── Today / History / Stats ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_today_and_history(client, employee_token, monkeypatch):
    freeze(monkeypatch, DAY, "08:00")
    resp = await client.get(f"{BASE}/today", headers=auth_headers(employee_token))
    assert resp.status_code == 200
    assert resp.json() is None

    await client.post(f"{BASE}/check-in", json={}, headers=auth_headers(employee_token))
    resp = await client.get(f"{BASE}/today", headers=auth_headers(employee_token))
    assert resp.json()["work_date"] == "2025-03-10"

    resp = await client.get(f"{BASE}/history", headers=auth_headers(employee_token))
    assert resp.status_code == 200
    assert len(resp.json()) == 1


@pytest.mark.asyncio
async def test_stats_week(client, db, employee_user, employee_token):
    db.add(AttendanceLog(
        user_id=employee_user.id,
        work_date=DAY,
        check_in_time=org_instant(DAY, time(8, 0)),
        check_out_time=org_instant(DAY, time(19, 30)),
        overtime_hours=Decimal("2.00"),
        status="late",
        late_minutes=3,
    ))
    await db.commit()

    resp = await client.get(
        f"{BASE}/stats", params={"view": "week", "reference_date": "2025-03-12"},
        headers=auth_headers(employee_token),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["start_date"] == "2025-03-10"
    assert data["end_date"] == "2025-03-16"
    assert len(data["days"]) == 7
    assert data["days_present"] == 1
    assert data["days_late"] == 1
    assert Decimal(str(data["days"][0]["standard_hours"])) == Decimal("8.50")
    assert Decimal(str(data["total_overtime_hours"])) == Decimal("2.00")


@pytest.mark.asyncio
async def test_stats_month_range(client, employee_token):
    resp = await client.get(
        f"{BASE}/stats", params={"view": "month", "reference_date": "2024-02-10"},
        headers=auth_headers(employee_token),
    )
    data = resp.json()
    assert data["start_date"] == "2024-02-01"
    assert data["end_date"] == "2024-02-29"
    assert len(data["days"]) == 29


# ── Manuelle Nachberechnung ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_recalculate_endpoint(client, db, employee_user, manager_token):
    db.add(WorkSchedule(user_id=employee_user.id, work_date=DAY, allow_overtime=True))
    log = AttendanceLog(
        user_id=employee_user.id,
        work_date=DAY,
        check_in_time=org_instant(DAY, time(8, 0)),
        check_out_time=org_instant(DAY, time(18, 30)),
    )
    db.add(log)
    await db.commit()

    resp = await client.post(f"{BASE}/{log.id}/recalculate", headers=auth_headers(manager_token))
    assert resp.status_code == 200
    assert Decimal(str(resp.json()["overtime_hours"])) == Decimal("1.00")


@pytest.mark.asyncio
async def test_recalculate_endpoint_forbidden_for_employee(client, db, employee_user, employee_token):
    log = AttendanceLog(user_id=employee_user.id, work_date=DAY, check_in_time=org_instant(DAY, time(8, 0)))
    db.add(log)
    await db.commit()
    resp = await client.post(f"{BASE}/{log.id}/recalculate", headers=auth_headers(employee_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_recalculate_endpoint_unknown_log(client, admin_token):
    resp = await client.post(f"{BASE}/{uuid.uuid4()}/recalculate", headers=auth_headers(admin_token))
    assert resp.status_code == 404
