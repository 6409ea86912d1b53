"""
Dienstpläne: Tages-Overrides und Wochenvorlagen pflegen, effektiven Plan abfragen.

Änderungen an Overrides/Vorlagen berechnen bestehende Einträge nicht neu;
dafür gibt es POST /attendance/{log_id}/recalculate.
"""
import uuid
from datetime import date

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrm.api.deps import APPROVER_ROLES, DB, CurrentUser, ApproverUser
from hrm.models.schedule import EmployeeDefaultSchedule, WorkSchedule
from hrm.models.user import User
from hrm.schemas.schedule import (
    DefaultScheduleOut, DefaultScheduleUpsert, EffectiveScheduleOut, WorkScheduleOut, WorkScheduleUpsert,
)
from hrm.services.schedule_resolver import ScheduleResolver
from hrm.utils.timeutils import format_time

router = APIRouter(prefix="/schedules", tags=["schedules"])


def _can_view(current_user: User, user_id: uuid.UUID) -> bool:
    return current_user.id == user_id or current_user.role in APPROVER_ROLES


async def _require_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# ── Tages-Overrides ───────────────────────────────────────────────────────────

@router.put("/overrides", response_model=WorkScheduleOut)
async def upsert_override(payload: WorkScheduleUpsert, current_user: ApproverUser, db: DB):
    await _require_user(db, payload.user_id)

    result = await db.execute(
        select(WorkSchedule).where(
            WorkSchedule.user_id == payload.user_id,
            WorkSchedule.work_date == payload.work_date,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = WorkSchedule(user_id=payload.user_id, work_date=payload.work_date)
        db.add(row)

    for field, value in payload.model_dump(exclude={"user_id", "work_date"}).items():
        setattr(row, field, value)

    await db.commit()
    await db.refresh(row)
    return row


@router.get("/overrides", response_model=list[WorkScheduleOut])
async def list_overrides(
    current_user: CurrentUser,
    db: DB,
    user_id: uuid.UUID | None = None,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
):
    target = user_id or current_user.id
    if not _can_view(current_user, target):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    q = select(WorkSchedule).where(WorkSchedule.user_id == target)
    if from_date:
        q = q.where(WorkSchedule.work_date >= from_date)
    if to_date:
        q = q.where(WorkSchedule.work_date <= to_date)
    result = await db.execute(q.order_by(WorkSchedule.work_date))
    return result.scalars().all()


@router.delete("/overrides/{override_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_override(override_id: uuid.UUID, current_user: ApproverUser, db: DB):
    row = await db.get(WorkSchedule, override_id)
    if not row:
        raise HTTPException(status_code=404, detail="Schedule override not found")
    await db.delete(row)
    await db.commit()


# ── Wochenvorlagen ────────────────────────────────────────────────────────────

@router.put("/templates/{user_id}", response_model=DefaultScheduleOut)
async def upsert_template(
    user_id: uuid.UUID, payload: DefaultScheduleUpsert, current_user: ApproverUser, db: DB
):
    await _require_user(db, user_id)

    result = await db.execute(
        select(EmployeeDefaultSchedule).where(
            EmployeeDefaultSchedule.employee_id == user_id,
            EmployeeDefaultSchedule.day_of_week == payload.day_of_week,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = EmployeeDefaultSchedule(employee_id=user_id, day_of_week=payload.day_of_week)
        db.add(row)

    for field, value in payload.model_dump(exclude={"day_of_week"}).items():
        setattr(row, field, value)

    await db.commit()
    await db.refresh(row)
    return row


@router.get("/templates/{user_id}", response_model=list[DefaultScheduleOut])
async def list_templates(user_id: uuid.UUID, current_user: CurrentUser, db: DB):
    if not _can_view(current_user, user_id):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    result = await db.execute(
        select(EmployeeDefaultSchedule)
        .where(EmployeeDefaultSchedule.employee_id == user_id)
        .order_by(EmployeeDefaultSchedule.day_of_week)
    )
    return result.scalars().all()


# ── Effektiver Plan ───────────────────────────────────────────────────────────

@router.get("/effective", response_model=EffectiveScheduleOut)
async def get_effective_schedule(
    current_user: CurrentUser,
    db: DB,
    work_date: date,
    user_id: uuid.UUID | None = None,
):
    target = user_id or current_user.id
    if not _can_view(current_user, target):
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    schedule = await ScheduleResolver(db).resolve(target, work_date)
    return EffectiveScheduleOut(
        user_id=target,
        work_date=work_date,
        start_time=format_time(schedule.start_time),
        end_time=format_time(schedule.end_time),
        shift_type=schedule.shift_type,
        allow_overtime=schedule.allow_overtime,
        source=schedule.source,
    )
