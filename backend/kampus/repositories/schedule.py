"""Read-side access to committed schedule state used by the conflict checks."""
from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from kampus.models.assignment import Assignment, AssignmentStatus, DayOfWeek
from kampus.models.placement import Placement


class ScheduleRepository(Protocol):
    def find_active_by_teacher_slot(
        self, *, teacher_id: str, day_of_week: DayOfWeek, time_slot_id: str, academic_year_id: str
    ) -> list[str]: ...

    def find_active_by_group_slot(
        self, *, group_id: str, day_of_week: DayOfWeek, time_slot_id: str, academic_year_id: str
    ) -> list[str]: ...

    def find_placements_by_room_slot(
        self, *, classroom_id: str, day_of_week: DayOfWeek, time_slot_id: str, academic_year_id: str
    ) -> list[str]: ...

    def find_placements_by_assignment_slot(
        self, *, assignment_id: str, day_of_week: DayOfWeek, time_slot_id: str, academic_year_id: str
    ) -> list[str]: ...


class SqlScheduleRepository:
    """Answers the slot lookups with single indexed queries on the session's connection."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _active_assignment_ids(self, *criteria) -> list[str]:
        stmt = select(Assignment.id).where(
            Assignment.status == AssignmentStatus.active,
            Assignment.deleted_at.is_(None),
            *criteria,
        )
        return list(self.db.execute(stmt).scalars())

    def _live_placement_ids(self, *criteria) -> list[str]:
        stmt = select(Placement.id).where(Placement.deleted_at.is_(None), *criteria)
        return list(self.db.execute(stmt).scalars())

    def find_active_by_teacher_slot(self, *, teacher_id, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        return self._active_assignment_ids(
            Assignment.teacher_id == teacher_id,
            Assignment.day_of_week == DayOfWeek(day_of_week),
            Assignment.time_slot_id == time_slot_id,
            Assignment.academic_year_id == academic_year_id,
        )

    def find_active_by_group_slot(self, *, group_id, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        return self._active_assignment_ids(
            Assignment.group_id == group_id,
            Assignment.day_of_week == DayOfWeek(day_of_week),
            Assignment.time_slot_id == time_slot_id,
            Assignment.academic_year_id == academic_year_id,
        )

    def find_placements_by_room_slot(self, *, classroom_id, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        return self._live_placement_ids(
            Placement.classroom_id == classroom_id,
            Placement.day_of_week == DayOfWeek(day_of_week),
            Placement.time_slot_id == time_slot_id,
            Placement.academic_year_id == academic_year_id,
        )

    def find_placements_by_assignment_slot(
        self, *, assignment_id, day_of_week, time_slot_id, academic_year_id
    ) -> list[str]:
        return self._live_placement_ids(
            Placement.assignment_id == assignment_id,
            Placement.day_of_week == DayOfWeek(day_of_week),
            Placement.time_slot_id == time_slot_id,
            Placement.academic_year_id == academic_year_id,
        )
