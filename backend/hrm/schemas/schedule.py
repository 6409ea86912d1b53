from pydantic import BaseModel, Field, field_validator, model_validator
import uuid
from datetime import date, datetime, time
from typing import Literal

ShiftType = Literal["full", "morning", "afternoon", "custom", "off"]


class WorkScheduleUpsert(BaseModel):
    user_id: uuid.UUID
    work_date: date
    shift_type: ShiftType = "full"
    start_time: time | None = None
    end_time: time | None = None
    allow_overtime: bool | None = False
    title: str | None = None
    location: str | None = None
    status: Literal["active", "pending", "rejected"] = "active"


class WorkScheduleOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    work_date: date
    shift_type: str
    start_time: time | None
    end_time: time | None
    allow_overtime: bool | None
    title: str | None
    location: str | None
    status: str
    updated_at: datetime

    model_config = {"from_attributes": True}


class DefaultScheduleUpsert(BaseModel):
    day_of_week: int = Field(ge=0, le=6)  # 0=So
    shift_type: ShiftType = "full"
    custom_start_time: time | None = None
    custom_end_time: time | None = None
    allow_overtime: bool | None = False
    is_template: bool = True

    @model_validator(mode="after")
    def custom_times_order(self):
        if self.custom_start_time and self.custom_end_time and self.custom_end_time <= self.custom_start_time:
            raise ValueError("custom_end_time muss nach custom_start_time liegen")
        return self


class DefaultScheduleOut(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    day_of_week: int
    shift_type: str
    custom_start_time: time | None
    custom_end_time: time | None
    allow_overtime: bool | None
    is_template: bool

    model_config = {"from_attributes": True}


class EffectiveScheduleOut(BaseModel):
    user_id: uuid.UUID
    work_date: date
    start_time: str
    end_time: str
    shift_type: str
    allow_overtime: bool
    source: str  # override | template | default

    @field_validator("source")
    @classmethod
    def known_source(cls, v: str) -> str:
        if v not in ("override", "template", "default"):
            raise ValueError(f"Unbekannte Quelle: {v}")
        return v
