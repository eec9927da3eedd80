from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from kampus.core.exceptions import (
    ConcurrencyConflictError,
    GroupConflictError,
    ResourceNotFoundError,
    TeacherConflictError,
)
from kampus.models.academic_year import AcademicYear
from kampus.models.assignment import DAY_ORDER, GROUP_SLOT_INDEX, TEACHER_SLOT_INDEX, Assignment, AssignmentStatus, DayOfWeek
from kampus.models.group import Group
from kampus.models.placement import Placement
from kampus.models.teacher import Teacher
from kampus.models.time_slot import TimeSlot
from kampus.repositories.schedule import SqlScheduleRepository
from kampus.services.audit import log_activity
from kampus.services.calendar import require_period_in_year
from kampus.services.catalog import CatalogLookup
from kampus.services.conflict_service import ConflictChecker
from kampus.services.transactions import run_checked_write

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "teacher_id",
    "subject_id",
    "group_id",
    "time_slot_id",
    "day_of_week",
    "academic_year_id",
    "period_id",
    "status",
)
COORDINATE_FIELDS = ("day_of_week", "time_slot_id", "academic_year_id")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentLedger:
    """Creates, edits and retires assignments while keeping teacher and group slots exclusive."""

    def __init__(
        self,
        db: Session,
        institution_id: str,
        *,
        actor_id: str | None = None,
        checker: ConflictChecker | None = None,
    ):
        self.db = db
        self.institution_id = institution_id
        self.actor_id = actor_id
        self.catalog = CatalogLookup(db, institution_id)
        self.checker = checker or ConflictChecker(SqlScheduleRepository(db))

    # -- lookups -----------------------------------------------------------

    def get(self, assignment_id: str) -> Assignment:
        stmt = (
            select(Assignment)
            .join(AcademicYear, AcademicYear.id == Assignment.academic_year_id)
            .where(
                Assignment.id == assignment_id,
                Assignment.deleted_at.is_(None),
                AcademicYear.institution_id == self.institution_id,
            )
        )
        assignment = self.db.execute(stmt).scalar_one_or_none()
        if assignment is None:
            raise ResourceNotFoundError("Assignment", assignment_id)
        return assignment

    def list_assignments(
        self,
        *,
        teacher_id: str | None = None,
        subject_id: str | None = None,
        group_id: str | None = None,
        academic_year_id: str | None = None,
        period_id: str | None = None,
        day_of_week: DayOfWeek | None = None,
        status: AssignmentStatus | None = None,
    ) -> list[Assignment]:
        stmt = (
            select(Assignment, TimeSlot.start_time)
            .join(AcademicYear, AcademicYear.id == Assignment.academic_year_id)
            .join(TimeSlot, TimeSlot.id == Assignment.time_slot_id)
            .where(Assignment.deleted_at.is_(None), AcademicYear.institution_id == self.institution_id)
        )
        filters = (
            (Assignment.teacher_id, teacher_id),
            (Assignment.subject_id, subject_id),
            (Assignment.group_id, group_id),
            (Assignment.academic_year_id, academic_year_id),
            (Assignment.period_id, period_id),
            (Assignment.day_of_week, day_of_week),
            (Assignment.status, status),
        )
        for column, value in filters:
            if value is not None:
                stmt = stmt.where(column == value)
        rows = self.db.execute(stmt).all()
        rows.sort(key=lambda row: (DAY_ORDER[row[0].day_of_week], row[1]))
        return [assignment for assignment, _ in rows]

    def timetable(
        self,
        *,
        teacher_id: str | None = None,
        group_id: str | None = None,
        academic_year_id: str | None = None,
    ) -> list[dict]:
        """Active assignments of one teacher or group, ordered by weekday then slot start."""
        if teacher_id is not None and self.catalog.find(Teacher, teacher_id) is None:
            raise ResourceNotFoundError("Teacher", teacher_id)
        if group_id is not None and self.catalog.find(Group, group_id) is None:
            raise ResourceNotFoundError("Group", group_id)
        assignments = self.list_assignments(
            teacher_id=teacher_id,
            group_id=group_id,
            academic_year_id=academic_year_id,
            status=AssignmentStatus.active,
        )
        if not assignments:
            return []

        slots = {
            slot.id: slot
            for slot in self.db.execute(
                select(TimeSlot).where(TimeSlot.id.in_({item.time_slot_id for item in assignments}))
            ).scalars()
        }
        classrooms: dict[str, list[str]] = {}
        placement_rows = self.db.execute(
            select(Placement.assignment_id, Placement.classroom_id).where(
                Placement.assignment_id.in_([item.id for item in assignments]),
                Placement.deleted_at.is_(None),
            )
        ).all()
        for assignment_id, classroom_id in placement_rows:
            classrooms.setdefault(assignment_id, []).append(classroom_id)

        return [
            {
                "assignment_id": item.id,
                "day_of_week": item.day_of_week,
                "time_slot_id": item.time_slot_id,
                "start_time": slots[item.time_slot_id].start_time,
                "end_time": slots[item.time_slot_id].end_time,
                "teacher_id": item.teacher_id,
                "subject_id": item.subject_id,
                "group_id": item.group_id,
                "period_id": item.period_id,
                "classroom_ids": sorted(classrooms.get(item.id, [])),
            }
            for item in assignments
        ]

    # -- validation --------------------------------------------------------

    def _validate(self, values: dict, *, changed: set[str], exclude_assignment_id: str | None = None) -> None:
        # (a) references resolve inside the institution
        if "teacher_id" in changed:
            self.catalog.require_teacher(values["teacher_id"])
        if "subject_id" in changed:
            self.catalog.require_subject(values["subject_id"])
        if "group_id" in changed:
            self.catalog.require_group(values["group_id"])
        if "time_slot_id" in changed:
            self.catalog.require_time_slot(values["time_slot_id"])
        if "academic_year_id" in changed:
            self.catalog.require_academic_year(values["academic_year_id"])

        # (b) the period belongs to the assignment's year
        if values.get("period_id"):
            require_period_in_year(self.db, values["period_id"], values["academic_year_id"])

        if values.get("status", AssignmentStatus.active) != AssignmentStatus.active:
            return

        # (c) teacher, (d) group
        coordinate = {
            "day_of_week": values["day_of_week"],
            "time_slot_id": values["time_slot_id"],
            "academic_year_id": values["academic_year_id"],
        }
        if self.checker.teacher_has_conflict(
            values["teacher_id"], exclude_assignment_id=exclude_assignment_id, **coordinate
        ):
            raise TeacherConflictError(values["teacher_id"], **self._coordinate_details(coordinate))
        if self.checker.group_has_conflict(
            values["group_id"], exclude_assignment_id=exclude_assignment_id, **coordinate
        ):
            raise GroupConflictError(values["group_id"], **self._coordinate_details(coordinate))

    @staticmethod
    def _coordinate_details(coordinate: dict) -> dict:
        return {
            "day_of_week": DayOfWeek(coordinate["day_of_week"]).value,
            "time_slot_id": coordinate["time_slot_id"],
            "academic_year_id": coordinate["academic_year_id"],
        }

    def _translate(self, values: dict):
        def translate(error: ConcurrencyConflictError):
            coordinate = self._coordinate_details(values)
            constraint = error.details.get("constraint")
            if constraint == TEACHER_SLOT_INDEX:
                return TeacherConflictError(values["teacher_id"], **coordinate)
            if constraint == GROUP_SLOT_INDEX:
                return GroupConflictError(values["group_id"], **coordinate)
            return error

        return translate

    def _retire_placements(self, assignment_id: str) -> int:
        result = self.db.execute(
            update(Placement)
            .where(Placement.assignment_id == assignment_id, Placement.deleted_at.is_(None))
            .values(deleted_at=_utc_now())
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    def _log(self, action: str, assignment: Assignment, **details) -> None:
        log_activity(
            self.db,
            institution_id=self.institution_id,
            actor_id=self.actor_id,
            action=action,
            entity_type="assignment",
            entity_id=assignment.id,
            details=details,
        )

    # -- writes ------------------------------------------------------------

    def create_assignment(
        self,
        *,
        teacher_id: str,
        subject_id: str,
        group_id: str,
        time_slot_id: str,
        day_of_week: DayOfWeek | str,
        academic_year_id: str,
        period_id: str | None = None,
    ) -> Assignment:
        values = {
            "teacher_id": teacher_id,
            "subject_id": subject_id,
            "group_id": group_id,
            "time_slot_id": time_slot_id,
            "day_of_week": DayOfWeek(day_of_week),
            "academic_year_id": academic_year_id,
            "period_id": period_id,
        }

        def work() -> Assignment:
            self._validate(values, changed=set(values))
            assignment = Assignment(**values, status=AssignmentStatus.active)
            self.db.add(assignment)
            self.db.flush()
            self._log("assignment.created", assignment, **self._coordinate_details(values))
            return assignment

        assignment = run_checked_write(self.db, work, translate=self._translate(values))
        self.db.refresh(assignment)
        logger.info(
            "Assignment %s created for teacher %s / group %s on %s slot %s",
            assignment.id,
            teacher_id,
            group_id,
            assignment.day_of_week.value,
            time_slot_id,
        )
        return assignment

    def update_assignment(self, assignment_id: str, changes: dict) -> Assignment:
        """Apply a partial update, validating the merged row against every other assignment.

        Fields absent from ``changes`` keep their stored values. Moving an
        assignment to another day, slot or year retires its placements, as
        does deactivating it.
        """
        changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
        if changes.get("day_of_week") is not None:
            changes["day_of_week"] = DayOfWeek(changes["day_of_week"])
        merged_snapshot: dict = {}

        def work() -> Assignment:
            assignment = self.get(assignment_id)
            current = {field: getattr(assignment, field) for field in EDITABLE_FIELDS}
            merged = dict(current)
            for key, value in changes.items():
                if value is None and key != "period_id":
                    continue
                merged[key] = value
            changed = {key for key in EDITABLE_FIELDS if merged[key] != current[key]}
            reactivating = (
                current["status"] == AssignmentStatus.inactive and merged["status"] == AssignmentStatus.active
            )
            if reactivating:
                changed = set(EDITABLE_FIELDS)

            merged_snapshot.clear()
            merged_snapshot.update(merged)
            self._validate(merged, changed=changed, exclude_assignment_id=assignment.id)

            for key in changed:
                setattr(assignment, key, merged[key])

            retired = 0
            if merged["status"] == AssignmentStatus.inactive and current["status"] == AssignmentStatus.active:
                retired = self._retire_placements(assignment.id)
            elif any(field in changed for field in COORDINATE_FIELDS):
                retired = self._retire_placements(assignment.id)

            self.db.flush()
            self._log(
                "assignment.updated",
                assignment,
                changed=sorted(changed),
                retired_placements=retired,
            )
            return assignment

        assignment = run_checked_write(self.db, work, translate=self._translate(merged_snapshot))
        self.db.refresh(assignment)
        logger.info("Assignment %s updated", assignment.id)
        return assignment

    def deactivate_assignment(self, assignment_id: str) -> Assignment:
        assignment = self.get(assignment_id)
        if assignment.status == AssignmentStatus.inactive:
            return assignment
        assignment.status = AssignmentStatus.inactive
        retired = self._retire_placements(assignment.id)
        self._log("assignment.deactivated", assignment, retired_placements=retired)
        self.db.commit()
        self.db.refresh(assignment)
        logger.info("Assignment %s deactivated, %d placement(s) retired", assignment.id, retired)
        return assignment

    def delete_assignment(self, assignment_id: str) -> None:
        assignment = self.get(assignment_id)
        assignment.deleted_at = _utc_now()
        retired = self._retire_placements(assignment.id)
        self._log("assignment.deleted", assignment, retired_placements=retired)
        self.db.commit()
        logger.info("Assignment %s soft-deleted, %d placement(s) retired", assignment_id, retired)
