"""
Organisationsweite Arbeitszeit-Einstellungen (system_settings, Kategorie "work").

Fehlende Schlüssel fallen auf die Standardwerte zurück. Die Überstunden-
Berechnung liest diese Werte nur; geändert werden sie ausschließlich über
die Admin-API.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import time
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrm.models.system_setting import SystemSetting
from hrm.utils.timeutils import format_time, parse_time

logger = logging.getLogger(__name__)

DEFAULT_WORK_SETTINGS: dict[str, Any] = {
    "work_start_time": "08:00",
    "work_end_time": "17:30",
    "lunch_start_time": "12:00",
    "lunch_end_time": "13:00",
    "allow_grace_period": False,
    "grace_period_minutes": 5,
    "work_off_days": [6, 0],  # Sa, So (0=So)
}


@dataclass(frozen=True)
class WorkSettings:
    work_start_time: time = time(8, 0)
    work_end_time: time = time(17, 30)
    lunch_start_time: time = time(12, 0)
    lunch_end_time: time = time(13, 0)
    allow_grace_period: bool = False
    grace_period_minutes: int = 5
    work_off_days: list[int] = field(default_factory=lambda: [6, 0])

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_start_time": format_time(self.work_start_time),
            "work_end_time": format_time(self.work_end_time),
            "lunch_start_time": format_time(self.lunch_start_time),
            "lunch_end_time": format_time(self.lunch_end_time),
            "allow_grace_period": self.allow_grace_period,
            "grace_period_minutes": self.grace_period_minutes,
            "work_off_days": list(self.work_off_days),
        }


def _decode(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


def build_work_settings(values: dict[str, Any]) -> WorkSettings:
    merged = {**DEFAULT_WORK_SETTINGS, **{k: v for k, v in values.items() if v not in (None, "")}}
    return WorkSettings(
        work_start_time=parse_time(merged["work_start_time"]),
        work_end_time=parse_time(merged["work_end_time"]),
        lunch_start_time=parse_time(merged["lunch_start_time"]),
        lunch_end_time=parse_time(merged["lunch_end_time"]),
        allow_grace_period=bool(merged["allow_grace_period"]),
        grace_period_minutes=int(merged["grace_period_minutes"]),
        work_off_days=[int(d) for d in merged["work_off_days"]],
    )


async def get_work_settings(db: AsyncSession) -> WorkSettings:
    try:
        result = await db.execute(
            select(SystemSetting).where(SystemSetting.key.in_(list(DEFAULT_WORK_SETTINGS)))
        )
    except SQLAlchemyError:
        logger.warning("work_settings_read_failed", exc_info=True)
        # abgebrochene Transaktion freigeben
        await db.rollback()
        return WorkSettings()
    values = {row.key: _decode(row.value) for row in result.scalars().all()}
    return build_work_settings(values)


async def update_work_settings(
    db: AsyncSession,
    changes: dict[str, Any],
    updated_by: str | None = None,
) -> WorkSettings:
    """Speichert geänderte Schlüssel (Upsert) und gibt die neuen Einstellungen zurück."""
    current = await get_work_settings(db)
    new_settings = build_work_settings({**current.to_dict(), **changes})
    if not (
        new_settings.work_start_time
        <= new_settings.lunch_start_time
        <= new_settings.lunch_end_time
        <= new_settings.work_end_time
    ):
        raise ValueError("Erwartet: Arbeitsbeginn <= Mittagsbeginn <= Mittagsende <= Arbeitsende")

    encoded = new_settings.to_dict()
    for key in changes:
        if key not in DEFAULT_WORK_SETTINGS:
            continue
        row = await db.get(SystemSetting, key)
        if row is None:
            row = SystemSetting(key=key, category="work")
            db.add(row)
        row.value = json.dumps(encoded[key])
        row.updated_by = updated_by

    await db.commit()
    return new_settings


class WorkSettingsProvider:
    """Liest die Einstellungen einmal pro Instanz (eine Nachberechnung = ein Lesezugriff)."""

    def __init__(self, db: AsyncSession, preset: WorkSettings | None = None):
        self.db = db
        self._cached = preset

    async def get(self) -> WorkSettings:
        if self._cached is None:
            self._cached = await get_work_settings(self.db)
        return self._cached
