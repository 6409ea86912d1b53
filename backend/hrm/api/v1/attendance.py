import logging
import uuid
from datetime import date, timedelta, timezone
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrm.api.deps import DB, CurrentUser, ApproverUser
from hrm.models.attendance import AttendanceLog
from hrm.schemas.attendance import (
    AttendanceLogOut, AttendanceStats, CheckInRequest, CheckOutRequest, DailyStat, RecalculateOut,
)
from hrm.services.overtime_service import OvertimeService, round_hours, standard_minutes
from hrm.services.schedule_resolver import ScheduleResolver
from hrm.services.work_settings import WorkSettingsProvider, get_work_settings
from hrm.utils.timeutils import org_instant, org_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


async def _open_session(db: AsyncSession, user_id: uuid.UUID) -> AttendanceLog | None:
    result = await db.execute(
        select(AttendanceLog)
        .where(
            AttendanceLog.user_id == user_id,
            AttendanceLog.check_in_time.is_not(None),
            AttendanceLog.check_out_time.is_(None),
        )
        .order_by(AttendanceLog.check_in_time.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


@router.post("/check-in", response_model=AttendanceLogOut, status_code=status.HTTP_201_CREATED)
async def check_in(payload: CheckInRequest, current_user: CurrentUser, db: DB):
    if await _open_session(db, current_user.id):
        raise HTTPException(status_code=409, detail="Bereits eingestempelt – bitte zuerst ausstempeln")

    local_now = org_now()
    now = local_now.astimezone(timezone.utc)
    work_date = local_now.date()

    provider = WorkSettingsProvider(db)
    org = await provider.get()
    schedule = await ScheduleResolver(db, provider).resolve(current_user.id, work_date)

    # Verspätung gegenüber dem effektiven Dienstbeginn (optional mit Karenzzeit)
    start = org_instant(work_date, schedule.start_time)
    late_minutes = max(0, int((now - start).total_seconds() // 60))
    grace = org.grace_period_minutes if org.allow_grace_period else 0
    is_late = late_minutes > grace

    log = AttendanceLog(
        user_id=current_user.id,
        work_date=work_date,
        check_in_time=now,
        check_in_note=payload.note,
        status="late" if is_late else "present",
        late_minutes=late_minutes if is_late else 0,
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)

    logger.info(
        "check_in",
        extra={"user_id": str(current_user.id), "work_date": work_date.isoformat(), "late_minutes": log.late_minutes},
    )
    return log


@router.post("/check-out", response_model=AttendanceLogOut)
async def check_out(payload: CheckOutRequest, current_user: CurrentUser, db: DB):
    log = await _open_session(db, current_user.id)
    if not log:
        raise HTTPException(status_code=409, detail="Keine offene Anwesenheit gefunden")

    log.check_out_time = org_now().astimezone(timezone.utc)
    log.check_out_note = payload.note
    await db.commit()

    # Der Check-out ist gespeichert; ein Fehler bei der Nachberechnung wird nur geloggt
    try:
        await OvertimeService(db).recalculate(log.id)
    except Exception:
        logger.exception("overtime_recalc_after_checkout_failed", extra={"log_id": str(log.id)})

    await db.refresh(log)
    return log


@router.get("/today", response_model=AttendanceLogOut | None)
async def get_today(current_user: CurrentUser, db: DB):
    """Letzter Eintrag des heutigen Tages (bzw. eine noch offene Schicht vom Vortag)."""
    open_log = await _open_session(db, current_user.id)
    if open_log:
        return open_log

    result = await db.execute(
        select(AttendanceLog)
        .where(AttendanceLog.user_id == current_user.id, AttendanceLog.work_date == org_now().date())
        .order_by(AttendanceLog.check_in_time.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


@router.get("/history", response_model=list[AttendanceLogOut])
async def get_history(
    current_user: CurrentUser,
    db: DB,
    limit: int = Query(50, ge=1, le=200),
):
    result = await db.execute(
        select(AttendanceLog)
        .where(AttendanceLog.user_id == current_user.id)
        .order_by(AttendanceLog.work_date.desc(), AttendanceLog.check_in_time.desc())
        .limit(limit)
    )
    return result.scalars().all()


def _period(view: str, today: date) -> tuple[date, date]:
    if view == "week":
        start = today - timedelta(days=today.weekday())  # Montag
        return start, start + timedelta(days=6)
    start = today.replace(day=1)
    next_month = (start.replace(day=28) + timedelta(days=4)).replace(day=1)
    return start, next_month - timedelta(days=1)


@router.get("/stats", response_model=AttendanceStats)
async def get_stats(
    current_user: CurrentUser,
    db: DB,
    view: Literal["week", "month"] = "week",
    reference_date: date | None = None,
):
    start, end = _period(view, reference_date or org_now().date())
    org = await get_work_settings(db)

    result = await db.execute(
        select(AttendanceLog)
        .where(
            AttendanceLog.user_id == current_user.id,
            AttendanceLog.work_date >= start,
            AttendanceLog.work_date <= end,
        )
        .order_by(AttendanceLog.work_date)
    )
    logs = result.scalars().all()

    per_day: dict[date, list[Decimal]] = {
        start + timedelta(days=i): [Decimal(0), Decimal(0)] for i in range((end - start).days + 1)
    }
    present_days: set[date] = set()
    late_days: set[date] = set()
    for log in logs:
        present_days.add(log.work_date)
        if log.status == "late":
            late_days.add(log.work_date)
        if log.check_in_time is None or log.check_out_time is None:
            continue
        per_day[log.work_date][0] += standard_minutes(log.check_in_time, log.check_out_time, org)
        per_day[log.work_date][1] += Decimal(log.overtime_hours or 0)

    days = [
        DailyStat(work_date=d, standard_hours=round_hours(std / 60), overtime_hours=round_hours(ot))
        for d, (std, ot) in per_day.items()
    ]
    return AttendanceStats(
        view=view,
        start_date=start,
        end_date=end,
        days_present=len(present_days),
        days_late=len(late_days),
        total_standard_hours=round_hours(sum((d.standard_hours for d in days), Decimal(0))),
        total_overtime_hours=round_hours(sum((d.overtime_hours for d in days), Decimal(0))),
        days=days,
    )


@router.post("/{log_id}/recalculate", response_model=RecalculateOut)
async def recalculate(log_id: uuid.UUID, current_user: ApproverUser, db: DB):
    """Manuelle Nachberechnung eines einzelnen Eintrags (z.B. nach Dienstplanänderung)."""
    log = await db.get(AttendanceLog, log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Attendance log not found")

    hours = await OvertimeService(db).recalculate(log_id)
    return RecalculateOut(log_id=log_id, overtime_hours=hours)
