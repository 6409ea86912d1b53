"""
Effektiver Dienstplan eines Mitarbeiters für einen Kalendertag.

Drei Quellen in fester Reihenfolge, die erste Quelle mit Treffer gewinnt:
  1. Tages-Override (work_schedules, nur Status "active")
  2. Wochenvorlage (employee_default_schedules, is_template, nicht "off")
  3. Organisations-Standard (system_settings)

Zwischen den Quellen wird nichts gemischt. Einzige Ausnahme ist der
Override: fehlt dort Start oder Ende, wird pro Feld die Standardzeit der
Organisation eingesetzt.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, time
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrm.models.schedule import EmployeeDefaultSchedule, WorkSchedule
from hrm.services.work_settings import WorkSettings, WorkSettingsProvider
from hrm.utils.timeutils import js_day_of_week

SOURCE_OVERRIDE = "override"
SOURCE_TEMPLATE = "template"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class EffectiveSchedule:
    start_time: time
    end_time: time
    shift_type: str
    allow_overtime: bool
    source: str

    @property
    def is_off(self) -> bool:
        return self.shift_type == "off"


class ScheduleSource(Protocol):
    async def lookup(
        self, user_id: uuid.UUID, work_date: date, org: WorkSettings
    ) -> EffectiveSchedule | None:
        ...


class OverrideSource:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lookup(
        self, user_id: uuid.UUID, work_date: date, org: WorkSettings
    ) -> EffectiveSchedule | None:
        result = await self.db.execute(
            select(WorkSchedule).where(
                WorkSchedule.user_id == user_id,
                WorkSchedule.work_date == work_date,
            )
        )
        row = result.scalar_one_or_none()
        if row is None or row.status != "active":
            return None

        return EffectiveSchedule(
            start_time=row.start_time or org.work_start_time,
            end_time=row.end_time or org.work_end_time,
            shift_type=row.shift_type or "full",
            allow_overtime=bool(row.allow_overtime),
            source=SOURCE_OVERRIDE,
        )


class TemplateSource:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lookup(
        self, user_id: uuid.UUID, work_date: date, org: WorkSettings
    ) -> EffectiveSchedule | None:
        result = await self.db.execute(
            select(EmployeeDefaultSchedule).where(
                EmployeeDefaultSchedule.employee_id == user_id,
                EmployeeDefaultSchedule.day_of_week == js_day_of_week(work_date),
                EmployeeDefaultSchedule.is_template.is_(True),
            )
        )
        row = result.scalar_one_or_none()
        if row is None or row.shift_type == "off":
            return None

        if row.custom_end_time is not None:
            end_time = row.custom_end_time
        elif row.shift_type == "morning":
            # Vormittagsschicht endet mit der Mittagspause
            end_time = org.lunch_start_time
        else:
            end_time = org.work_end_time

        return EffectiveSchedule(
            start_time=row.custom_start_time or org.work_start_time,
            end_time=end_time,
            shift_type=row.shift_type,
            allow_overtime=bool(row.allow_overtime),
            source=SOURCE_TEMPLATE,
        )


class DefaultSource:

    async def lookup(
        self, user_id: uuid.UUID, work_date: date, org: WorkSettings
    ) -> EffectiveSchedule:
        return EffectiveSchedule(
            start_time=org.work_start_time,
            end_time=org.work_end_time,
            shift_type="full",
            allow_overtime=False,
            source=SOURCE_DEFAULT,
        )


class ScheduleResolver:

    def __init__(
        self,
        db: AsyncSession,
        work_settings: WorkSettingsProvider | None = None,
        sources: Sequence[ScheduleSource] | None = None,
    ):
        self.db = db
        self.work_settings = work_settings or WorkSettingsProvider(db)
        self.sources: Sequence[ScheduleSource] = sources or (
            OverrideSource(db),
            TemplateSource(db),
            DefaultSource(),
        )

    async def resolve(self, user_id: uuid.UUID, work_date: date) -> EffectiveSchedule:
        org = await self.work_settings.get()
        for source in self.sources:
            schedule = await source.lookup(user_id, work_date, org)
            if schedule is not None:
                return schedule
        # nur erreichbar, wenn eine eigene Quellenliste ohne DefaultSource übergeben wurde
        return await DefaultSource().lookup(user_id, work_date, org)
