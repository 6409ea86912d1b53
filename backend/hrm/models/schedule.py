import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import String, DateTime, Boolean, ForeignKey, Integer, Time, Date, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hrm.core.database import Base


class WorkSchedule(Base):
    """Abweichender Dienstplan für genau einen Tag (hat Vorrang vor der Wochenvorlage)."""

    __tablename__ = "work_schedules"
    __table_args__ = (UniqueConstraint("user_id", "work_date", name="uq_work_schedules_user_date"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    shift_type: Mapped[str] = mapped_column(String(20), default="full")  # full | morning | afternoon | custom | off
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    allow_overtime: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)

    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active")  # active | pending | rejected

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class EmployeeDefaultSchedule(Base):
    """Wiederkehrende Wochenvorlage pro Mitarbeiter und Wochentag."""

    __tablename__ = "employee_default_schedules"
    __table_args__ = (UniqueConstraint("employee_id", "day_of_week", name="uq_default_schedules_employee_day"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=So, 1=Mo … 6=Sa
    shift_type: Mapped[str] = mapped_column(String(20), default="full")
    custom_start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    custom_end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    allow_overtime: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    is_template: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
