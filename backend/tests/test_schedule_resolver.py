"""
Tests für ScheduleResolver – Override > Wochenvorlage > Organisations-Standard.
"""
from datetime import date, time

import pytest

from hrm.models.schedule import EmployeeDefaultSchedule, WorkSchedule
from hrm.services.schedule_resolver import DefaultSource, ScheduleResolver
from hrm.services.work_settings import WorkSettings, WorkSettingsProvider, update_work_settings
from hrm.utils.timeutils import js_day_of_week
from tests.conftest import auth_headers

MONDAY = date(2025, 3, 10)
SUNDAY = date(2025, 3, 9)


async def add_override(db, user, day=MONDAY, **kw):
    row = WorkSchedule(user_id=user.id, work_date=day, **kw)
    db.add(row)
    await db.commit()
    return row


async def add_template(db, user, day_of_week=1, **kw):
    row = EmployeeDefaultSchedule(employee_id=user.id, day_of_week=day_of_week, **kw)
    db.add(row)
    await db.commit()
    return row


def test_js_day_of_week_sunday_is_zero():
    assert js_day_of_week(SUNDAY) == 0
    assert js_day_of_week(MONDAY) == 1
    assert js_day_of_week(date(2025, 3, 15)) == 6


@pytest.mark.asyncio
async def test_default_without_any_source(db, employee_user):
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "default"
    assert s.shift_type == "full"
    assert s.start_time == time(8, 0)
    assert s.end_time == time(17, 30)
    assert s.allow_overtime is False


@pytest.mark.asyncio
async def test_default_follows_org_settings(db, employee_user):
    await update_work_settings(db, {"work_start_time": "07:00", "work_end_time": "16:00"})
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert (s.start_time, s.end_time) == (time(7, 0), time(16, 0))


@pytest.mark.asyncio
async def test_active_override_wins(db, employee_user):
    await add_template(db, employee_user, shift_type="full", custom_start_time=time(6, 0), allow_overtime=False)
    await add_override(db, employee_user, shift_type="custom", start_time=time(10, 0),
                       end_time=time(20, 0), allow_overtime=True)

    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "override"
    assert s.start_time == time(10, 0)
    assert s.end_time == time(20, 0)
    assert s.allow_overtime is True


@pytest.mark.asyncio
async def test_override_null_times_fall_back_per_field(db, employee_user):
    """Nur das fehlende Feld kommt aus dem Organisations-Standard, nicht aus der Vorlage."""
    await add_template(db, employee_user, custom_start_time=time(6, 0), custom_end_time=time(14, 0))
    await add_override(db, employee_user, shift_type="custom", start_time=None, end_time=time(19, 0))

    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "override"
    assert s.start_time == time(8, 0)
    assert s.end_time == time(19, 0)


@pytest.mark.asyncio
async def test_override_null_allow_overtime_is_false(db, employee_user):
    await add_override(db, employee_user, allow_overtime=None)
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.allow_overtime is False


@pytest.mark.parametrize("status", ["pending", "rejected"])
@pytest.mark.asyncio
async def test_inactive_override_is_ignored(db, employee_user, status):
    await add_override(db, employee_user, start_time=time(10, 0), status=status)
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "default"


@pytest.mark.asyncio
async def test_override_off_is_returned_as_off(db, employee_user):
    await add_override(db, employee_user, shift_type="off")
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "override"
    assert s.is_off


@pytest.mark.asyncio
async def test_template_for_weekday(db, employee_user):
    await add_template(db, employee_user, day_of_week=1, shift_type="custom",
                       custom_start_time=time(9, 0), custom_end_time=time(18, 0), allow_overtime=True)
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "template"
    assert (s.start_time, s.end_time) == (time(9, 0), time(18, 0))
    assert s.allow_overtime is True

    # Sonntag hat keine Vorlage
    s = await ScheduleResolver(db).resolve(employee_user.id, SUNDAY)
    assert s.source == "default"


@pytest.mark.asyncio
async def test_morning_template_ends_at_lunch(db, employee_user):
    await add_template(db, employee_user, shift_type="morning")
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "template"
    assert s.start_time == time(8, 0)
    assert s.end_time == time(12, 0)


@pytest.mark.asyncio
async def test_morning_template_custom_end_wins(db, employee_user):
    await add_template(db, employee_user, shift_type="morning", custom_end_time=time(11, 0))
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.end_time == time(11, 0)


@pytest.mark.asyncio
async def test_off_template_falls_through_to_default(db, employee_user):
    await add_template(db, employee_user, shift_type="off")
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "default"
    assert s.shift_type == "full"


@pytest.mark.asyncio
async def test_non_template_row_is_ignored(db, employee_user):
    await add_template(db, employee_user, custom_start_time=time(6, 0), is_template=False)
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "default"


@pytest.mark.asyncio
async def test_other_users_schedules_do_not_leak(db, employee_user, admin_user):
    await add_override(db, admin_user, start_time=time(10, 0))
    s = await ScheduleResolver(db).resolve(employee_user.id, MONDAY)
    assert s.source == "default"


@pytest.mark.asyncio
async def test_injected_settings_and_sources(db, employee_user):
    preset = WorkSettings(work_start_time=time(6, 0), work_end_time=time(14, 0))
    resolver = ScheduleResolver(db, WorkSettingsProvider(db, preset), sources=[DefaultSource()])
    s = await resolver.resolve(employee_user.id, MONDAY)
    assert (s.start_time, s.end_time) == (time(6, 0), time(14, 0))


# ── API ───────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_effective_endpoint(client, employee_user, employee_token):
    resp = await client.get(
        "/api/v1/schedules/effective",
        params={"work_date": "2025-03-10"},
        headers=auth_headers(employee_token),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "default"
    assert data["start_time"] == "08:00"
    assert data["end_time"] == "17:30"
