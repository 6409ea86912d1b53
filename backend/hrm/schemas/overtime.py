from pydantic import BaseModel, Field
import uuid
from datetime import date, datetime
from decimal import Decimal


class OvertimeRequestCreate(BaseModel):
    request_date: date
    planned_hours: Decimal = Field(gt=0, le=24)
    reason: str | None = None


class OvertimeDecision(BaseModel):
    admin_note: str | None = None


class OvertimeRequestOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    request_date: date
    planned_hours: Decimal
    reason: str | None
    status: str
    admin_note: str | None
    approved_by: uuid.UUID | None
    approved_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class OvertimeDecisionOut(OvertimeRequestOut):
    recalculated_logs: int = 0
