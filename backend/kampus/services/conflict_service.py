from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from kampus.models.assignment import DAY_ORDER, DayOfWeek
from kampus.repositories.schedule import ScheduleRepository
from kampus.schemas.conflict import ConflictDetail, ConflictReport, ResolutionAction


class ConflictChecker:
    """Boolean exclusivity predicates over committed schedule state.

    Every check is a read; none of them writes, so callers may run them
    speculatively any number of times before deciding to commit. The
    ``exclude_*`` id lets an update ignore the row being rewritten.
    """

    def __init__(self, repository: ScheduleRepository):
        self.repository = repository

    @staticmethod
    def _others(ids: Iterable[str], exclude_id: str | None) -> bool:
        return any(found != exclude_id for found in ids)

    def teacher_has_conflict(
        self,
        teacher_id: str,
        day_of_week: DayOfWeek | str,
        time_slot_id: str,
        academic_year_id: str,
        exclude_assignment_id: str | None = None,
    ) -> bool:
        found = self.repository.find_active_by_teacher_slot(
            teacher_id=teacher_id,
            day_of_week=DayOfWeek(day_of_week),
            time_slot_id=time_slot_id,
            academic_year_id=academic_year_id,
        )
        return self._others(found, exclude_assignment_id)

    def group_has_conflict(
        self,
        group_id: str,
        day_of_week: DayOfWeek | str,
        time_slot_id: str,
        academic_year_id: str,
        exclude_assignment_id: str | None = None,
    ) -> bool:
        found = self.repository.find_active_by_group_slot(
            group_id=group_id,
            day_of_week=DayOfWeek(day_of_week),
            time_slot_id=time_slot_id,
            academic_year_id=academic_year_id,
        )
        return self._others(found, exclude_assignment_id)

    def room_has_conflict(
        self,
        classroom_id: str,
        day_of_week: DayOfWeek | str,
        time_slot_id: str,
        academic_year_id: str,
        exclude_placement_id: str | None = None,
    ) -> bool:
        found = self.repository.find_placements_by_room_slot(
            classroom_id=classroom_id,
            day_of_week=DayOfWeek(day_of_week),
            time_slot_id=time_slot_id,
            academic_year_id=academic_year_id,
        )
        return self._others(found, exclude_placement_id)

    def assignment_slot_has_conflict(
        self,
        assignment_id: str,
        day_of_week: DayOfWeek | str,
        time_slot_id: str,
        academic_year_id: str,
        exclude_placement_id: str | None = None,
    ) -> bool:
        found = self.repository.find_placements_by_assignment_slot(
            assignment_id=assignment_id,
            day_of_week=DayOfWeek(day_of_week),
            time_slot_id=time_slot_id,
            academic_year_id=academic_year_id,
        )
        return self._others(found, exclude_placement_id)


Coordinate = Tuple[str, DayOfWeek, str, str]

_DESCRIPTIONS = {
    "teacher_conflict": "Teacher {key} holds {count} active assignments in the same slot",
    "group_conflict": "Group {key} holds {count} active assignments in the same slot",
    "room_conflict": "Classroom {key} is placed {count} times in the same slot",
    "assignment_double_booked": "Assignment {key} is placed in {count} classrooms in the same slot",
}


def _bucket(rows: Iterable, key_field: str) -> Dict[Coordinate, List]:
    buckets: Dict[Coordinate, List] = defaultdict(list)
    for row in rows:
        coordinate = (
            getattr(row, key_field),
            DayOfWeek(row.day_of_week),
            row.time_slot_id,
            row.academic_year_id,
        )
        buckets[coordinate].append(row)
    return buckets


def _pairwise(conflict_type: str, prefix: str, buckets: Dict[Coordinate, List]) -> List[ConflictDetail]:
    conflicts: List[ConflictDetail] = []
    ordered = sorted(buckets.items(), key=lambda item: (DAY_ORDER[item[0][1]], item[0][2], item[0][0]))
    for (key, day, slot_id, year_id), rows in ordered:
        if len(rows) < 2:
            continue
        description = _DESCRIPTIONS[conflict_type].format(key=key, count=len(rows))
        for i in range(len(rows)):
            for j in range(i + 1, len(rows)):
                first, second = rows[i], rows[j]
                conflicts.append(ConflictDetail(
                    id=f"{prefix}-{first.id}-{second.id}",
                    conflict_type=conflict_type,
                    description=description,
                    day_of_week=day,
                    time_slot_id=slot_id,
                    academic_year_id=year_id,
                    affected_ids=[first.id, second.id],
                ))
    return conflicts


def detect_conflicts(assignments: Iterable, placements: Iterable = ()) -> ConflictReport:
    """Audit a snapshot of active assignments and live placements for exclusivity violations.

    Rows are expected to be pre-filtered (active, not deleted). Any object
    exposing the coordinate attributes works: ORM rows or in-memory records.
    """
    assignments = list(assignments)
    placements = list(placements)

    conflicts: List[ConflictDetail] = []
    conflicts += _pairwise("teacher_conflict", "teacher", _bucket(assignments, "teacher_id"))
    conflicts += _pairwise("group_conflict", "group", _bucket(assignments, "group_id"))
    conflicts += _pairwise("room_conflict", "room", _bucket(placements, "classroom_id"))
    conflicts += _pairwise("assignment_double_booked", "double", _bucket(placements, "assignment_id"))

    resolutions: List[ResolutionAction] = []
    for conflict in conflicts:
        resolutions.extend(generate_resolutions(conflict))
    return ConflictReport(conflicts=conflicts, suggested_resolutions=resolutions)


def generate_resolutions(conflict: ConflictDetail) -> List[ResolutionAction]:
    # The later row of a pair is the one suggested for change.
    target_id = conflict.affected_ids[-1]
    if conflict.conflict_type in ("teacher_conflict", "group_conflict"):
        return [
            ResolutionAction(
                action_type="move_slot",
                description="Move the assignment to a free day or time slot",
                target_id=target_id,
                parameters={"day_of_week": conflict.day_of_week.value, "time_slot_id": conflict.time_slot_id},
            ),
            ResolutionAction(
                action_type="deactivate_assignment",
                description="Deactivate the duplicate assignment",
                target_id=target_id,
                parameters={},
            ),
        ]
    if conflict.conflict_type == "room_conflict":
        return [
            ResolutionAction(
                action_type="change_room",
                description="Move the placement to a free classroom",
                target_id=target_id,
                parameters={},
            )
        ]
    return [
        ResolutionAction(
            action_type="delete_placement",
            description="Remove the duplicate room binding",
            target_id=target_id,
            parameters={},
        )
    ]
