from celery import Celery

from hrm.core.config import settings

celery_app = Celery(
    "hrm",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["hrm.tasks.overtime_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Nachberechnungen sind idempotent
    task_acks_late=True,
)
