"""
Sperre pro (Mitarbeiter, Arbeitstag) für die Überstunden-Nachberechnung.

Check-out und eine Genehmigung können denselben Datensatz gleichzeitig
nachberechnen; ohne Sperre überschreibt die ältere Berechnung die neuere.
Im Einzelprozess reicht ein asyncio.Lock, mit Celery-Workern wird ein
Redis-Lock verwendet.
"""
from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator

import redis.asyncio as aioredis

from hrm.core.config import settings

# key -> (Lock, Anzahl Halter + Wartende); Eintrag fällt weg, sobald niemand ihn mehr nutzt
_local_locks: dict[str, tuple[asyncio.Lock, int]] = {}

_redis: aioredis.Redis | None = None


def overtime_lock_key(user_id: uuid.UUID, work_date: date) -> str:
    return f"hrm:overtime:{user_id}:{work_date.isoformat()}"


def _lock_backend() -> aioredis.Redis:
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(settings.REDIS_URL, health_check_interval=30)
    return _redis


async def close_lock_backend() -> None:
    """Schließt die Redis-Verbindung (Lifespan-Ende, Ende jedes Celery-Tasks)."""
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


@asynccontextmanager
async def _local_lock(key: str) -> AsyncIterator[None]:
    lock, users = _local_locks.get(key, (None, 0))
    if lock is None:
        lock = asyncio.Lock()
    _local_locks[key] = (lock, users + 1)
    try:
        async with lock:
            yield
    finally:
        lock, users = _local_locks[key]
        if users <= 1:
            del _local_locks[key]
        else:
            _local_locks[key] = (lock, users - 1)


@asynccontextmanager
async def overtime_lock(user_id: uuid.UUID, work_date: date) -> AsyncIterator[None]:
    key = overtime_lock_key(user_id, work_date)

    if settings.USE_CELERY:
        async with _lock_backend().lock(
            key,
            timeout=settings.OVERTIME_LOCK_TIMEOUT_SECONDS,
            blocking_timeout=settings.OVERTIME_LOCK_TIMEOUT_SECONDS,
        ):
            yield
        return

    async with _local_lock(key):
        yield
