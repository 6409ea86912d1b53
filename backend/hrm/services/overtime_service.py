"""
Überstunden-Berechnung pro Anwesenheitseintrag.

overtime_hours auf attendance_logs ist nur ein Cache: der Wert lässt sich
jederzeit aus Check-in, Check-out, effektivem Dienstplan und Genehmigungs-
status neu berechnen. Geschrieben wird er ausschließlich hier.

Ablauf von recalculate():
  1. Dienstplan heute + Dienstplan morgen auflösen
  2. allow_overtime = Flag im Dienstplan ODER genehmigter Überstundenantrag
  3. Check-out auf den Schichtbeginn von morgen kappen (falls morgen nicht "off")
  4. ohne Freigabe: Check-out zusätzlich auf das geplante Ende von heute kappen
  5. Soll-Minuten = Überlappung mit [Beginn, Mittag] + [Mittagsende, Ende]
  6. Ist-Minuten = Dauer abzüglich Mittagspause
  7. Überstunden = max(0, Ist - Soll) / 60, kaufmännisch auf 0,01 gerundet
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrm.core.locks import overtime_lock
from hrm.core.logging_utils import log_context
from hrm.models.attendance import AttendanceLog
from hrm.models.overtime import OvertimeRequest
from hrm.services.schedule_resolver import EffectiveSchedule, ScheduleResolver
from hrm.services.work_settings import WorkSettings, WorkSettingsProvider
from hrm.utils.timeutils import org_date_of, org_instant, to_utc

logger = logging.getLogger(__name__)

ZERO_HOURS = Decimal("0.00")
_CENT = Decimal("0.01")
_SIXTY = Decimal(60)


async def has_approved_overtime(db: AsyncSession, user_id: uuid.UUID, work_date: date) -> bool:
    """True, wenn für (Mitarbeiter, Tag) ein genehmigter Überstundenantrag existiert."""
    result = await db.execute(
        select(OvertimeRequest.id)
        .where(
            OvertimeRequest.user_id == user_id,
            OvertimeRequest.request_date == work_date,
            OvertimeRequest.status == "approved",
        )
        .limit(1)
    )
    return result.first() is not None


@dataclass(frozen=True)
class OvertimeComputation:
    standard_minutes: Decimal
    worked_minutes: Decimal
    effective_check_out: datetime
    clipped_to_next_shift: bool
    clipped_to_schedule_end: bool
    allow_overtime: bool
    overtime_hours: Decimal


def _minutes(delta: timedelta) -> Decimal:
    return Decimal(str(delta.total_seconds())) / _SIXTY


def _overlap_minutes(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> Decimal:
    lo = max(start, window_start)
    hi = min(end, window_end)
    return max(Decimal(0), _minutes(hi - lo))


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def standard_minutes(check_in: datetime, check_out: datetime, org: WorkSettings) -> Decimal:
    """Minuten innerhalb von [Beginn, Mittag] und [Mittagsende, Ende] am Tag des Check-ins."""
    check_in = to_utc(check_in)
    check_out = to_utc(check_out)
    anchor = org_date_of(check_in)
    return (
        _overlap_minutes(
            check_in, check_out,
            org_instant(anchor, org.work_start_time),
            org_instant(anchor, org.lunch_start_time),
        )
        + _overlap_minutes(
            check_in, check_out,
            org_instant(anchor, org.lunch_end_time),
            org_instant(anchor, org.work_end_time),
        )
    )


def compute_overtime(
    check_in: datetime,
    check_out: datetime,
    work_date: date,
    today: EffectiveSchedule,
    tomorrow: EffectiveSchedule | None,
    org: WorkSettings,
    allow_overtime: bool,
) -> OvertimeComputation:
    """
    Reine Berechnung ohne DB-Zugriff.

    Wanduhrzeiten des heutigen Plans und der Organisation werden am
    Kalendertag des Check-ins verankert, der Schichtbeginn von morgen am
    Folgetag des Arbeitstags.
    """
    check_in = to_utc(check_in)
    out = to_utc(check_out)
    anchor = org_date_of(check_in)

    clipped_next = False
    if tomorrow is not None and not tomorrow.is_off:
        next_start = org_instant(work_date + timedelta(days=1), tomorrow.start_time)
        if out > next_start:
            out = next_start
            clipped_next = True

    clipped_end = False
    scheduled_end = org_instant(anchor, today.end_time)
    if not allow_overtime and out > scheduled_end:
        out = scheduled_end
        clipped_end = True

    standard = standard_minutes(check_in, out, org)
    lunch = _overlap_minutes(
        check_in, out,
        org_instant(anchor, org.lunch_start_time),
        org_instant(anchor, org.lunch_end_time),
    )
    worked = max(Decimal(0), _minutes(out - check_in) - lunch)

    hours = ZERO_HOURS
    if allow_overtime:
        hours = round_hours(max(Decimal(0), worked - standard) / _SIXTY)

    return OvertimeComputation(
        standard_minutes=standard,
        worked_minutes=worked,
        effective_check_out=out,
        clipped_to_next_shift=clipped_next,
        clipped_to_schedule_end=clipped_end,
        allow_overtime=allow_overtime,
        overtime_hours=hours,
    )


class OvertimeService:

    def __init__(self, db: AsyncSession, work_settings: WorkSettings | None = None):
        self.db = db
        self._work_settings = work_settings

    async def recalculate(self, log_id: uuid.UUID) -> Decimal:
        """
        Berechnet overtime_hours eines Eintrags neu und speichert das Ergebnis.

        Fehlender Eintrag oder offener Eintrag (ohne Check-in/Check-out) -> 0,
        es wird nichts geschrieben. DB-Fehler werden nach Rollback weitergereicht.
        """
        log = await self.db.get(AttendanceLog, log_id)
        if log is None:
            return ZERO_HOURS

        with log_context(log_id=str(log_id), user_id=str(log.user_id), work_date=log.work_date.isoformat()):
            async with overtime_lock(log.user_id, log.work_date):
                try:
                    await self.db.refresh(log)
                    if log.check_in_time is None or log.check_out_time is None:
                        return ZERO_HOURS

                    calc = await self._compute(log)
                    log.overtime_hours = calc.overtime_hours
                    await self.db.commit()
                except SQLAlchemyError:
                    await self.db.rollback()
                    raise

            logger.info(
                "overtime_recalculated",
                extra={
                    "allow_overtime": calc.allow_overtime,
                    "clipped_to_next_shift": calc.clipped_to_next_shift,
                    "clipped_to_schedule_end": calc.clipped_to_schedule_end,
                    "standard_minutes": str(calc.standard_minutes),
                    "overtime_hours": str(calc.overtime_hours),
                },
            )
        return calc.overtime_hours

    async def _compute(self, log: AttendanceLog) -> OvertimeComputation:
        provider = WorkSettingsProvider(self.db, self._work_settings)
        resolver = ScheduleResolver(self.db, provider)

        today = await resolver.resolve(log.user_id, log.work_date)
        allow = today.allow_overtime or await has_approved_overtime(
            self.db, log.user_id, log.work_date
        )
        tomorrow = await resolver.resolve(log.user_id, log.work_date + timedelta(days=1))

        return compute_overtime(
            check_in=log.check_in_time,
            check_out=log.check_out_time,
            work_date=log.work_date,
            today=today,
            tomorrow=tomorrow,
            org=await provider.get(),
            allow_overtime=allow,
        )

    async def recalc_for_user_date(self, user_id: uuid.UUID, work_date: date) -> int:
        """
        Nachberechnung aller Einträge eines Mitarbeiters für einen Tag
        (nach Genehmigung oder Ablehnung eines Überstundenantrags).

        Fehler bei einem Eintrag werden geloggt und übersprungen.
        Gibt die Anzahl erfolgreich berechneter Einträge zurück.
        """
        result = await self.db.execute(
            select(AttendanceLog.id).where(
                AttendanceLog.user_id == user_id,
                AttendanceLog.work_date == work_date,
            )
        )
        log_ids = list(result.scalars().all())

        done = 0
        for log_id in log_ids:
            try:
                await self.recalculate(log_id)
            except Exception:
                await self.db.rollback()
                logger.exception(
                    "overtime_recalc_failed",
                    extra={"log_id": str(log_id), "user_id": str(user_id), "work_date": work_date.isoformat()},
                )
                continue
            done += 1

        logger.info(
            "overtime_batch_recalculated",
            extra={"user_id": str(user_id), "work_date": work_date.isoformat(), "count": done, "total": len(log_ids)},
        )
        return done
