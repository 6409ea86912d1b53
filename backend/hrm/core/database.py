"""
Async-Engine und Sessions.

Die API bekommt ihre Session über get_db (eine pro Request), Celery-Tasks
öffnen ihre eigene über task_session().
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from hrm.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # Postgres: tote Verbindungen nach DB-Neustart erkennen
    return {"pool_pre_ping": True}


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# expire_on_commit=False: Attendance-Logs werden nach dem Commit noch gelesen (Logging, Response)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def task_session() -> AsyncIterator[AsyncSession]:
    """Session für Hintergrund-Tasks; die Engine-Verbindungen gehören zur Event-Loop des Tasks."""
    try:
        async with AsyncSessionLocal() as session:
            yield session
    finally:
        await engine.dispose()


async def create_tables():
    """Legt alle Tabellen an (SQLite / lokale Entwicklung ohne Alembic)."""
    import hrm.models  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
