"""
JSON-Logging für API und Celery-Worker.

Jede Zeile trägt den Zeitstempel in der Organisationszeitzone sowie die
Felder aus extra={...}. Während einer Überstunden-Nachberechnung werden
log_id, user_id und work_date per log_context() an alle Log-Zeilen
gehängt, auch an die der aufgerufenen Services.
"""
from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Iterator

from hrm.core.config import settings

# alle Attribute, die ein LogRecord von sich aus hat
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}

_context: ContextVar[dict[str, Any]] = ContextVar("hrm_log_context", default={})


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    token = _context.set({**_context.get(), **fields})
    try:
        yield
    finally:
        _context.reset(token)


class ContextFilter(logging.Filter):
    """Hängt die per log_context gebundenen Felder an den Record (extra hat Vorrang)."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, settings.org_timezone).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # UUID, date, Decimal -> str
        return json.dumps(payload, default=str, ensure_ascii=False)


def setup_logging() -> None:
    handler = logging.StreamHandler()
    handler.addFilter(ContextFilter())
    handler.setFormatter(
        JsonFormatter() if settings.LOG_JSON
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(settings.LOG_LEVEL.upper())
    # nur Warnungen aus dem Zugriffslog
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
