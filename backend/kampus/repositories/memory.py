from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from kampus.models.assignment import AssignmentStatus, DayOfWeek


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class AssignmentRecord:
    teacher_id: str
    subject_id: str
    group_id: str
    time_slot_id: str
    day_of_week: DayOfWeek
    academic_year_id: str
    period_id: str | None = None
    status: AssignmentStatus = AssignmentStatus.active
    deleted: bool = False
    id: str = field(default_factory=_new_id)

    @property
    def is_active(self) -> bool:
        return self.status == AssignmentStatus.active and not self.deleted


@dataclass
class PlacementRecord:
    assignment_id: str
    classroom_id: str
    time_slot_id: str
    day_of_week: DayOfWeek
    academic_year_id: str
    deleted: bool = False
    id: str = field(default_factory=_new_id)


class InMemoryScheduleRepository:
    """Dict-backed schedule state for exercising the conflict rules without a database."""

    def __init__(self) -> None:
        self.assignments: dict[str, AssignmentRecord] = {}
        self.placements: dict[str, PlacementRecord] = {}

    def add_assignment(self, **fields) -> AssignmentRecord:
        fields["day_of_week"] = DayOfWeek(fields["day_of_week"])
        record = AssignmentRecord(**fields)
        self.assignments[record.id] = record
        return record

    def add_placement(self, **fields) -> PlacementRecord:
        fields["day_of_week"] = DayOfWeek(fields["day_of_week"])
        record = PlacementRecord(**fields)
        self.placements[record.id] = record
        return record

    def _matching_assignments(self, key: str, value: str, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        day = DayOfWeek(day_of_week)
        return [
            record.id
            for record in self.assignments.values()
            if record.is_active
            and getattr(record, key) == value
            and record.day_of_week == day
            and record.time_slot_id == time_slot_id
            and record.academic_year_id == academic_year_id
        ]

    def _matching_placements(self, key: str, value: str, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        day = DayOfWeek(day_of_week)
        return [
            record.id
            for record in self.placements.values()
            if not record.deleted
            and getattr(record, key) == value
            and record.day_of_week == day
            and record.time_slot_id == time_slot_id
            and record.academic_year_id == academic_year_id
        ]

    def find_active_by_teacher_slot(self, *, teacher_id, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        return self._matching_assignments("teacher_id", teacher_id, day_of_week, time_slot_id, academic_year_id)

    def find_active_by_group_slot(self, *, group_id, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        return self._matching_assignments("group_id", group_id, day_of_week, time_slot_id, academic_year_id)

    def find_placements_by_room_slot(self, *, classroom_id, day_of_week, time_slot_id, academic_year_id) -> list[str]:
        return self._matching_placements("classroom_id", classroom_id, day_of_week, time_slot_id, academic_year_id)

    def find_placements_by_assignment_slot(
        self, *, assignment_id, day_of_week, time_slot_id, academic_year_id
    ) -> list[str]:
        return self._matching_placements("assignment_id", assignment_id, day_of_week, time_slot_id, academic_year_id)
