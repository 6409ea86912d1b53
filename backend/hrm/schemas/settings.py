from pydantic import BaseModel, Field, field_validator

from hrm.utils.timeutils import parse_time


class WorkSettingsOut(BaseModel):
    work_start_time: str
    work_end_time: str
    lunch_start_time: str
    lunch_end_time: str
    allow_grace_period: bool
    grace_period_minutes: int
    work_off_days: list[int]


class WorkSettingsUpdate(BaseModel):
    work_start_time: str | None = None
    work_end_time: str | None = None
    lunch_start_time: str | None = None
    lunch_end_time: str | None = None
    allow_grace_period: bool | None = None
    grace_period_minutes: int | None = Field(default=None, ge=0, le=120)
    work_off_days: list[int] | None = None

    @field_validator("work_start_time", "work_end_time", "lunch_start_time", "lunch_end_time")
    @classmethod
    def valid_wall_clock(cls, v: str | None) -> str | None:
        if v is not None:
            parse_time(v)
        return v

    @field_validator("work_off_days")
    @classmethod
    def valid_days(cls, v: list[int] | None) -> list[int] | None:
        if v is not None and any(d < 0 or d > 6 for d in v):
            raise ValueError("Wochentage müssen zwischen 0 (So) und 6 (Sa) liegen")
        return v
