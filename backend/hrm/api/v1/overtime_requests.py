"""
Überstundenanträge: Mitarbeiter beantragen Mehrarbeit für einen Tag,
Admin/HR/Vorgesetzte genehmigen oder lehnen ab.

Jede Entscheidung löst eine Nachberechnung aller Anwesenheitseinträge des
Mitarbeiters für diesen Tag aus (auch rückwirkend, wenn bereits gearbeitet wurde).
"""
import logging
import uuid
from datetime import date, datetime, timedelta, timezone

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrm.api.deps import DB, CurrentUser, ApproverUser
from hrm.core.config import settings
from hrm.models.overtime import OvertimeRequest
from hrm.models.schedule import WorkSchedule
from hrm.schemas.overtime import OvertimeDecision, OvertimeDecisionOut, OvertimeRequestCreate, OvertimeRequestOut
from hrm.services.overtime_service import OvertimeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/overtime-requests", tags=["overtime"])

DEFAULT_REASON = "Mehrarbeit auf Anforderung"


def _month_range(month: str) -> tuple[date, date]:
    """'YYYY-MM' -> (erster, letzter Tag)."""
    try:
        start = datetime.strptime(month, "%Y-%m").date()
    except ValueError:
        raise HTTPException(status_code=422, detail="month muss im Format YYYY-MM sein")
    next_month = (start.replace(day=28) + timedelta(days=4)).replace(day=1)
    return start, next_month - timedelta(days=1)


async def _trigger_recalc(db: AsyncSession, user_id: uuid.UUID, work_date: date) -> int:
    """Nachberechnung inline oder per Celery. Die Entscheidung ist zu diesem Zeitpunkt bereits gespeichert."""
    if settings.USE_CELERY:
        from hrm.tasks.overtime_tasks import recalc_overtime_for_user_date
        recalc_overtime_for_user_date.delay(str(user_id), work_date.isoformat())
        return 0
    try:
        return await OvertimeService(db).recalc_for_user_date(user_id, work_date)
    except Exception:
        logger.exception(
            "overtime_trigger_failed",
            extra={"user_id": str(user_id), "work_date": work_date.isoformat()},
        )
        return 0


async def _get_request(db: AsyncSession, request_id: uuid.UUID) -> OvertimeRequest:
    req = await db.get(OvertimeRequest, request_id)
    if not req:
        raise HTTPException(status_code=404, detail="Overtime request not found")
    return req


@router.post("", response_model=OvertimeRequestOut, status_code=status.HTTP_201_CREATED)
async def create_request(payload: OvertimeRequestCreate, current_user: CurrentUser, db: DB):
    existing = await db.execute(
        select(OvertimeRequest).where(
            OvertimeRequest.user_id == current_user.id,
            OvertimeRequest.request_date == payload.request_date,
            OvertimeRequest.status.in_(("pending", "approved")),
        )
    )
    found = existing.scalars().first()
    if found:
        raise HTTPException(
            status_code=409,
            detail=f"Für diesen Tag existiert bereits ein Antrag ({found.status})",
        )

    req = OvertimeRequest(
        user_id=current_user.id,
        request_date=payload.request_date,
        planned_hours=payload.planned_hours,
        reason=payload.reason or DEFAULT_REASON,
        status="pending",
    )
    db.add(req)
    await db.commit()
    await db.refresh(req)
    return req


@router.get("", response_model=list[OvertimeRequestOut])
async def list_own_requests(
    current_user: CurrentUser,
    db: DB,
    month: str | None = Query(None, description="YYYY-MM"),
):
    q = select(OvertimeRequest).where(OvertimeRequest.user_id == current_user.id)
    if month:
        start, end = _month_range(month)
        q = q.where(OvertimeRequest.request_date >= start, OvertimeRequest.request_date <= end)
    result = await db.execute(q.order_by(OvertimeRequest.request_date.desc()).limit(50))
    return result.scalars().all()


@router.get("/pending", response_model=list[OvertimeRequestOut])
async def list_pending(current_user: ApproverUser, db: DB):
    result = await db.execute(
        select(OvertimeRequest)
        .where(OvertimeRequest.status == "pending")
        .order_by(OvertimeRequest.request_date)
    )
    return result.scalars().all()


@router.post("/{request_id}/approve", response_model=OvertimeDecisionOut)
async def approve_request(
    request_id: uuid.UUID,
    current_user: ApproverUser,
    db: DB,
    payload: OvertimeDecision | None = None,
):
    req = await _get_request(db, request_id)
    if req.status != "pending":
        raise HTTPException(status_code=409, detail=f"Antrag ist bereits {req.status}")

    req.status = "approved"
    req.approved_by = current_user.id
    req.approved_at = datetime.now(timezone.utc)
    if payload and payload.admin_note:
        req.admin_note = payload.admin_note
    await db.commit()

    count = await _trigger_recalc(db, req.user_id, req.request_date)
    await db.refresh(req)
    return OvertimeDecisionOut.model_validate(req).model_copy(update={"recalculated_logs": count})


@router.post("/{request_id}/reject", response_model=OvertimeDecisionOut)
async def reject_request(
    request_id: uuid.UUID,
    current_user: ApproverUser,
    db: DB,
    payload: OvertimeDecision | None = None,
):
    """Ablehnen (auch Widerruf einer Genehmigung). Entfernt die Überstunden-Freigabe im Tages-Override."""
    req = await _get_request(db, request_id)
    if req.status == "rejected":
        raise HTTPException(status_code=409, detail="Antrag ist bereits abgelehnt")

    req.status = "rejected"
    req.approved_by = current_user.id
    req.approved_at = datetime.now(timezone.utc)
    req.admin_note = payload.admin_note if payload else None

    await db.execute(
        update(WorkSchedule)
        .where(WorkSchedule.user_id == req.user_id, WorkSchedule.work_date == req.request_date)
        .values(allow_overtime=False)
    )
    await db.commit()

    count = await _trigger_recalc(db, req.user_id, req.request_date)
    await db.refresh(req)
    return OvertimeDecisionOut.model_validate(req).model_copy(update={"recalculated_logs": count})
