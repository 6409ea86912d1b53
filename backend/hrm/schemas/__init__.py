from hrm.schemas.auth import Token, LoginRequest, RefreshRequest, ChangePasswordRequest, UserOut
from hrm.schemas.attendance import CheckInRequest, CheckOutRequest, AttendanceLogOut, RecalculateOut, AttendanceStats
from hrm.schemas.overtime import OvertimeRequestCreate, OvertimeDecision, OvertimeRequestOut, OvertimeDecisionOut
from hrm.schemas.schedule import (
    WorkScheduleUpsert, WorkScheduleOut, DefaultScheduleUpsert, DefaultScheduleOut, EffectiveScheduleOut,
)
from hrm.schemas.settings import WorkSettingsOut, WorkSettingsUpdate

__all__ = [
    "Token", "LoginRequest", "RefreshRequest", "ChangePasswordRequest", "UserOut",
    "CheckInRequest", "CheckOutRequest", "AttendanceLogOut", "RecalculateOut", "AttendanceStats",
    "OvertimeRequestCreate", "OvertimeDecision", "OvertimeRequestOut", "OvertimeDecisionOut",
    "WorkScheduleUpsert", "WorkScheduleOut", "DefaultScheduleUpsert", "DefaultScheduleOut", "EffectiveScheduleOut",
    "WorkSettingsOut", "WorkSettingsUpdate",
]
