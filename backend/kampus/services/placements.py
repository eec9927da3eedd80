from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from kampus.core.exceptions import (
    AssignmentDoubleBookedError,
    AssignmentInactiveError,
    ConcurrencyConflictError,
    ResourceNotFoundError,
    RoomConflictError,
    SlotMismatchError,
    ValidationError,
)
from kampus.models.academic_year import AcademicYear
from kampus.models.assignment import DAY_ORDER, Assignment, AssignmentStatus, DayOfWeek
from kampus.models.classroom import Classroom
from kampus.models.placement import ASSIGNMENT_SLOT_INDEX, ROOM_SLOT_INDEX, Placement
from kampus.models.time_slot import TimeSlot
from kampus.repositories.schedule import SqlScheduleRepository
from kampus.services.audit import log_activity
from kampus.services.catalog import CatalogLookup
from kampus.services.conflict_service import ConflictChecker
from kampus.services.transactions import run_checked_write

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PlacementEngine:
    """Binds active assignments to classrooms at the assignment's own day and slot."""

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

    def _scoped(self, placement_id: str) -> Placement | None:
        stmt = (
            select(Placement)
            .join(Classroom, Classroom.id == Placement.classroom_id)
            .where(Placement.id == placement_id, Classroom.institution_id == self.institution_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get(self, placement_id: str) -> Placement:
        placement = self._scoped(placement_id)
        if placement is None or placement.deleted_at is not None:
            raise ResourceNotFoundError("Placement", placement_id)
        return placement

    def list_placements(
        self,
        *,
        assignment_id: str | None = None,
        classroom_id: str | None = None,
        academic_year_id: str | None = None,
        day_of_week: DayOfWeek | None = None,
    ) -> list[Placement]:
        stmt = (
            select(Placement, TimeSlot.start_time)
            .join(Classroom, Classroom.id == Placement.classroom_id)
            .join(TimeSlot, TimeSlot.id == Placement.time_slot_id)
            .where(Placement.deleted_at.is_(None), Classroom.institution_id == self.institution_id)
        )
        for column, value in (
            (Placement.assignment_id, assignment_id),
            (Placement.classroom_id, classroom_id),
            (Placement.academic_year_id, academic_year_id),
            (Placement.day_of_week, day_of_week),
        ):
            if value is not None:
                stmt = stmt.where(column == value)
        rows = self.db.execute(stmt).all()
        rows.sort(key=lambda row: (DAY_ORDER[row[0].day_of_week], row[1]))
        return [placement for placement, _ in rows]

    def classroom_timetable(self, classroom_id: str, *, academic_year_id: str | None = None) -> list[Placement]:
        if self.catalog.find(Classroom, classroom_id) is None:
            raise ResourceNotFoundError("Classroom", classroom_id)
        return self.list_placements(classroom_id=classroom_id, academic_year_id=academic_year_id)

    def _require_assignment(self, assignment_id: str) -> Assignment:
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
            raise ValidationError(
                f"Assignment {assignment_id} does not exist in this institution",
                details={"field": "assignment_id", "id": assignment_id},
            )
        return assignment

    @staticmethod
    def _translate(assignment_id: str, classroom_id: str, coordinate: dict):
        def translate(error: ConcurrencyConflictError):
            constraint = error.details.get("constraint")
            if constraint == ROOM_SLOT_INDEX:
                return RoomConflictError(classroom_id, **coordinate)
            if constraint == ASSIGNMENT_SLOT_INDEX:
                return AssignmentDoubleBookedError(assignment_id, **coordinate)
            return error

        return translate

    def _log(self, action: str, placement: Placement, **details) -> None:
        log_activity(
            self.db,
            institution_id=self.institution_id,
            actor_id=self.actor_id,
            action=action,
            entity_type="placement",
            entity_id=placement.id,
            details=details,
        )

    def create_placement(
        self,
        *,
        assignment_id: str,
        classroom_id: str,
        time_slot_id: str,
        day_of_week: DayOfWeek | str,
        academic_year_id: str,
    ) -> Placement:
        day = DayOfWeek(day_of_week)
        coordinate = {"day_of_week": day.value, "time_slot_id": time_slot_id, "academic_year_id": academic_year_id}

        def work() -> Placement:
            # (a) the assignment is live and the placement keeps its coordinate
            assignment = self._require_assignment(assignment_id)
            if assignment.status != AssignmentStatus.active:
                raise AssignmentInactiveError(assignment_id)
            if (
                assignment.day_of_week != day
                or assignment.time_slot_id != time_slot_id
                or assignment.academic_year_id != academic_year_id
            ):
                error = SlotMismatchError(assignment_id, **coordinate)
                error.details["expected"] = {
                    "day_of_week": assignment.day_of_week.value,
                    "time_slot_id": assignment.time_slot_id,
                    "academic_year_id": assignment.academic_year_id,
                }
                raise error
            self.catalog.require_classroom(classroom_id)

            # (b) room, (c) the assignment is not already in another room at this moment
            if self.checker.room_has_conflict(classroom_id, day, time_slot_id, academic_year_id):
                raise RoomConflictError(classroom_id, **coordinate)
            if self.checker.assignment_slot_has_conflict(assignment_id, day, time_slot_id, academic_year_id):
                raise AssignmentDoubleBookedError(assignment_id, **coordinate)

            placement = Placement(
                assignment_id=assignment_id,
                classroom_id=classroom_id,
                time_slot_id=time_slot_id,
                day_of_week=day,
                academic_year_id=academic_year_id,
            )
            self.db.add(placement)
            self.db.flush()
            self._log("placement.created", placement, classroom_id=classroom_id, assignment_id=assignment_id)
            return placement

        placement = run_checked_write(
            self.db, work, translate=self._translate(assignment_id, classroom_id, coordinate)
        )
        self.db.refresh(placement)
        logger.info(
            "Assignment %s placed in classroom %s (%s, slot %s)",
            assignment_id,
            classroom_id,
            day.value,
            time_slot_id,
        )
        return placement

    def delete_placement(self, placement_id: str) -> bool:
        """Soft-delete a placement. Returns False when it was already removed."""
        placement = self._scoped(placement_id)
        if placement is None:
            raise ResourceNotFoundError("Placement", placement_id)
        if placement.deleted_at is not None:
            return False
        placement.deleted_at = _utc_now()
        self._log("placement.deleted", placement)
        self.db.commit()
        logger.info("Placement %s removed", placement_id)
        return True

    def move_placement(self, placement_id: str, new_classroom_id: str) -> Placement:
        coordinate: dict = {}
        assignment_ref: dict = {}

        def work() -> Placement:
            placement = self.get(placement_id)
            coordinate.update(
                day_of_week=placement.day_of_week.value,
                time_slot_id=placement.time_slot_id,
                academic_year_id=placement.academic_year_id,
            )
            assignment_ref["id"] = placement.assignment_id
            self.catalog.require_classroom(new_classroom_id)
            if placement.classroom_id == new_classroom_id:
                return placement
            if self.checker.room_has_conflict(
                new_classroom_id,
                placement.day_of_week,
                placement.time_slot_id,
                placement.academic_year_id,
                exclude_placement_id=placement.id,
            ):
                raise RoomConflictError(new_classroom_id, **coordinate)
            previous = placement.classroom_id
            placement.classroom_id = new_classroom_id
            self.db.flush()
            self._log("placement.moved", placement, from_classroom_id=previous, to_classroom_id=new_classroom_id)
            return placement

        def translate(error: ConcurrencyConflictError):
            return self._translate(assignment_ref.get("id", ""), new_classroom_id, coordinate)(error)

        placement = run_checked_write(self.db, work, translate=translate)
        self.db.refresh(placement)
        logger.info("Placement %s moved to classroom %s", placement.id, new_classroom_id)
        return placement
