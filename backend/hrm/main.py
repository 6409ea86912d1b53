from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hrm.core.config import settings
from hrm.core.database import create_tables
from hrm.core.logging_utils import setup_logging
from hrm.core.locks import close_lock_backend
from hrm.api.v1.auth import router as auth_router
from hrm.api.v1.attendance import router as attendance_router
from hrm.api.v1.overtime_requests import router as overtime_requests_router
from hrm.api.v1.schedules import router as schedules_router
from hrm.api.v1.admin_settings import router as admin_settings_router

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tabellen beim Start anlegen (SQLite / lokale Entwicklung)
    await create_tables()
    yield
    await close_lock_backend()


app = FastAPI(
    title="HRM Attendance API",
    description="Anwesenheit, Dienstpläne & Überstunden",
    version="1.0.0",
    lifespan=lifespan,
    # Swagger UI nur in Entwicklung – in Produktion DEBUG=false setzen
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(attendance_router, prefix=API_PREFIX)
app.include_router(overtime_requests_router, prefix=API_PREFIX)
app.include_router(schedules_router, prefix=API_PREFIX)
app.include_router(admin_settings_router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "HRM Attendance API", "version": "1.0.0"}
