from hrm.models.user import User
from hrm.models.attendance import AttendanceLog
from hrm.models.schedule import WorkSchedule, EmployeeDefaultSchedule
from hrm.models.overtime import OvertimeRequest
from hrm.models.system_setting import SystemSetting

__all__ = [
    "User",
    "AttendanceLog",
    "WorkSchedule",
    "EmployeeDefaultSchedule",
    "OvertimeRequest",
    "SystemSetting",
]
