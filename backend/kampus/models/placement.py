import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from kampus.db.base import Base
from kampus.models.assignment import DayOfWeek


LIVE_PLACEMENT_CLAUSE = "deleted_at IS NULL"
ROOM_SLOT_INDEX = "uq_placements_room_slot"
ASSIGNMENT_SLOT_INDEX = "uq_placements_assignment_slot"


class Placement(Base):
    """Room binding of an assignment at its day and time slot."""

    __tablename__ = "placements"
    __table_args__ = (
        Index(
            ROOM_SLOT_INDEX,
            "classroom_id",
            "time_slot_id",
            "day_of_week",
            "academic_year_id",
            unique=True,
            postgresql_where=text(LIVE_PLACEMENT_CLAUSE),
            sqlite_where=text(LIVE_PLACEMENT_CLAUSE),
        ),
        Index(
            ASSIGNMENT_SLOT_INDEX,
            "assignment_id",
            "time_slot_id",
            "day_of_week",
            "academic_year_id",
            unique=True,
            postgresql_where=text(LIVE_PLACEMENT_CLAUSE),
            sqlite_where=text(LIVE_PLACEMENT_CLAUSE),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    assignment_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    classroom_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    time_slot_id: Mapped[str] = mapped_column(String(36), nullable=False)
    day_of_week: Mapped[DayOfWeek] = mapped_column(SAEnum(DayOfWeek, name="day_of_week"), nullable=False)
    academic_year_id: Mapped[str] = mapped_column(String(36), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
