"""
Celery-Tasks für die nachträgliche Überstunden-Berechnung.
"""
from hrm.tasks.celery_app import celery_app


@celery_app.task(name="hrm.tasks.overtime_tasks.recalc_overtime_for_user_date")
def recalc_overtime_for_user_date(user_id: str, work_date: str) -> int:
    """Berechnet alle Einträge eines Mitarbeiters für einen Tag neu (ISO-Datum)."""
    import asyncio
    return asyncio.run(_recalc(user_id, work_date))


async def _recalc(user_id: str, work_date: str) -> int:
    import uuid
    from datetime import date
    from hrm.core.database import task_session
    from hrm.core.locks import close_lock_backend
    from hrm.services.overtime_service import OvertimeService

    try:
        async with task_session() as db:
            return await OvertimeService(db).recalc_for_user_date(
                uuid.UUID(user_id), date.fromisoformat(work_date)
            )
    finally:
        # jeder Task läuft in einer eigenen Event-Loop
        await close_lock_backend()
