from pydantic import BaseModel, Field
import uuid
from datetime import date, datetime
from decimal import Decimal


class CheckInRequest(BaseModel):
    note: str | None = None


class CheckOutRequest(BaseModel):
    note: str | None = None


class AttendanceLogOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    work_date: date
    check_in_time: datetime | None
    check_out_time: datetime | None
    check_in_note: str | None
    check_out_note: str | None
    status: str
    late_minutes: int
    overtime_hours: Decimal

    model_config = {"from_attributes": True}


class RecalculateOut(BaseModel):
    log_id: uuid.UUID
    overtime_hours: Decimal


class DailyStat(BaseModel):
    work_date: date
    standard_hours: Decimal = Field(description="Soll-Stunden innerhalb der Organisationsarbeitszeit")
    overtime_hours: Decimal


class AttendanceStats(BaseModel):
    view: str  # week | month
    start_date: date
    end_date: date
    days_present: int
    days_late: int
    total_standard_hours: Decimal
    total_overtime_hours: Decimal
    days: list[DailyStat]
