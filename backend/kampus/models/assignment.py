import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from kampus.db.base import Base


class DayOfWeek(str, Enum):
    mon = "mon"
    tue = "tue"
    wed = "wed"
    thu = "thu"
    fri = "fri"
    sat = "sat"


DAY_ORDER = {day: index for index, day in enumerate(DayOfWeek)}


class AssignmentStatus(str, Enum):
    active = "active"
    inactive = "inactive"


ACTIVE_ASSIGNMENT_CLAUSE = "status = 'active' AND deleted_at IS NULL"
TEACHER_SLOT_INDEX = "uq_assignments_active_teacher_slot"
GROUP_SLOT_INDEX = "uq_assignments_active_group_slot"


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        Index(
            TEACHER_SLOT_INDEX,
            "teacher_id",
            "day_of_week",
            "time_slot_id",
            "academic_year_id",
            unique=True,
            postgresql_where=text(ACTIVE_ASSIGNMENT_CLAUSE),
            sqlite_where=text(ACTIVE_ASSIGNMENT_CLAUSE),
        ),
        Index(
            GROUP_SLOT_INDEX,
            "group_id",
            "day_of_week",
            "time_slot_id",
            "academic_year_id",
            unique=True,
            postgresql_where=text(ACTIVE_ASSIGNMENT_CLAUSE),
            sqlite_where=text(ACTIVE_ASSIGNMENT_CLAUSE),
        ),
        Index("ix_assignments_year_period", "academic_year_id", "period_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    group_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    time_slot_id: Mapped[str] = mapped_column(String(36), nullable=False)
    day_of_week: Mapped[DayOfWeek] = mapped_column(SAEnum(DayOfWeek, name="day_of_week"), nullable=False)
    academic_year_id: Mapped[str] = mapped_column(String(36), nullable=False)
    period_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    status: Mapped[AssignmentStatus] = mapped_column(
        SAEnum(AssignmentStatus, name="assignment_status"),
        nullable=False,
        default=AssignmentStatus.active,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_active(self) -> bool:
        return self.status == AssignmentStatus.active and self.deleted_at is None
