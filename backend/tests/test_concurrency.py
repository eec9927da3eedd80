"""A writer whose check read stale state must still lose to the unique indexes."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from kampus.core.exceptions import (
    AssignmentDoubleBookedError,
    GroupConflictError,
    RoomConflictError,
    TeacherConflictError,
)
from kampus.models.assignment import Assignment
from kampus.models.classroom import Classroom, ClassroomType
from kampus.models.placement import Placement
from kampus.repositories.schedule import SqlScheduleRepository
from kampus.services.assignments import AssignmentLedger
from kampus.services.conflict_service import ConflictChecker
from kampus.services.placements import PlacementEngine
from kampus.services.transactions import run_checked_write


class StaleChecker(ConflictChecker):
    """Answers "free" for the first ``stale_checks`` calls, as if another writer had not committed yet."""

    def __init__(self, repository, stale_checks: int):
        super().__init__(repository)
        self.stale_checks = stale_checks

    def _stale(self) -> bool:
        if self.stale_checks > 0:
            self.stale_checks -= 1
            return True
        return False

    def teacher_has_conflict(self, *args, **kwargs) -> bool:
        if self._stale():
            return False
        return super().teacher_has_conflict(*args, **kwargs)

    def group_has_conflict(self, *args, **kwargs) -> bool:
        if self._stale():
            return False
        return super().group_has_conflict(*args, **kwargs)

    def room_has_conflict(self, *args, **kwargs) -> bool:
        if self._stale():
            return False
        return super().room_has_conflict(*args, **kwargs)

    def assignment_slot_has_conflict(self, *args, **kwargs) -> bool:
        if self._stale():
            return False
        return super().assignment_slot_has_conflict(*args, **kwargs)


def _assignment_values(catalog, **overrides):
    values = {
        "teacher_id": catalog["teacher_1"],
        "subject_id": catalog["subject_2"],
        "group_id": catalog["group_2"],
        "time_slot_id": catalog["slot_1"],
        "day_of_week": "mon",
        "academic_year_id": catalog["year"],
    }
    values.update(overrides)
    return values


def test_racing_creates_yield_one_success_and_one_teacher_conflict(catalog, make_assignment, db_session):
    winner = make_assignment()
    checker = StaleChecker(SqlScheduleRepository(db_session), stale_checks=1)
    ledger = AssignmentLedger(db_session, catalog["institution_id"], checker=checker)

    with pytest.raises(TeacherConflictError) as excinfo:
        ledger.create_assignment(**_assignment_values(catalog))

    assert excinfo.value.details["teacher_id"] == catalog["teacher_1"]
    assert checker.stale_checks == 0
    count = db_session.execute(
        select(func.count()).select_from(Assignment).where(Assignment.teacher_id == catalog["teacher_1"])
    ).scalar_one()
    assert count == 1
    assert db_session.get(Assignment, winner["id"]) is not None


def test_index_violation_is_translated_when_retries_are_exhausted(catalog, make_assignment, db_session):
    make_assignment()
    checker = StaleChecker(SqlScheduleRepository(db_session), stale_checks=10)
    ledger = AssignmentLedger(db_session, catalog["institution_id"], checker=checker)

    with pytest.raises(TeacherConflictError) as excinfo:
        ledger.create_assignment(**_assignment_values(catalog))

    assert excinfo.value.code == "TEACHER_CONFLICT"
    assert excinfo.value.details["day_of_week"] == "mon"
    assert excinfo.value.details["time_slot_id"] == catalog["slot_1"]


def test_racing_placements_yield_one_room_conflict(client, catalog, make_assignment, db_session):
    first = make_assignment()
    second = make_assignment(teacher_id=catalog["teacher_2"], group_id=catalog["group_2"])
    placed = client.post(
        f"{catalog['base']}/placements",
        json={
            "assignment_id": first["id"],
            "classroom_id": catalog["room_1"],
            "time_slot_id": catalog["slot_1"],
            "day_of_week": "mon",
            "academic_year_id": catalog["year"],
        },
    )
    assert placed.status_code == 201

    checker = StaleChecker(SqlScheduleRepository(db_session), stale_checks=10)
    engine = PlacementEngine(db_session, catalog["institution_id"], checker=checker)

    with pytest.raises(RoomConflictError):
        engine.create_placement(
            assignment_id=second["id"],
            classroom_id=catalog["room_1"],
            time_slot_id=catalog["slot_1"],
            day_of_week="mon",
            academic_year_id=catalog["year"],
        )

    live = db_session.execute(
        select(func.count()).select_from(Placement).where(Placement.classroom_id == catalog["room_1"])
    ).scalar_one()
    assert live == 1


def test_group_index_violation_is_reported_as_group_conflict(catalog, make_assignment, db_session):
    make_assignment()
    checker = StaleChecker(SqlScheduleRepository(db_session), stale_checks=10)
    ledger = AssignmentLedger(db_session, catalog["institution_id"], checker=checker)

    with pytest.raises(GroupConflictError) as excinfo:
        ledger.create_assignment(
            **_assignment_values(catalog, teacher_id=catalog["teacher_2"], group_id=catalog["group_1"])
        )

    assert excinfo.value.code == "GROUP_CONFLICT"
    assert excinfo.value.details["group_id"] == catalog["group_1"]
    count = db_session.execute(
        select(func.count()).select_from(Assignment).where(Assignment.group_id == catalog["group_1"])
    ).scalar_one()
    assert count == 1


def test_assignment_index_violation_is_reported_as_double_booking(client, catalog, make_assignment, db_session):
    assignment = make_assignment()
    placed = client.post(
        f"{catalog['base']}/placements",
        json={
            "assignment_id": assignment["id"],
            "classroom_id": catalog["room_1"],
            "time_slot_id": catalog["slot_1"],
            "day_of_week": "mon",
            "academic_year_id": catalog["year"],
        },
    )
    assert placed.status_code == 201

    checker = StaleChecker(SqlScheduleRepository(db_session), stale_checks=10)
    engine = PlacementEngine(db_session, catalog["institution_id"], checker=checker)

    with pytest.raises(AssignmentDoubleBookedError) as excinfo:
        engine.create_placement(
            assignment_id=assignment["id"],
            classroom_id=catalog["room_2"],
            time_slot_id=catalog["slot_1"],
            day_of_week="mon",
            academic_year_id=catalog["year"],
        )

    assert excinfo.value.code == "ASSIGNMENT_DOUBLE_BOOKED"
    live = db_session.execute(
        select(func.count())
        .select_from(Placement)
        .where(Placement.assignment_id == assignment["id"], Placement.deleted_at.is_(None))
    ).scalar_one()
    assert live == 1


def test_unrelated_integrity_errors_are_not_retried(catalog, db_session):
    calls = []

    def work():
        calls.append(1)
        db_session.add(
            Classroom(institution_id=catalog["institution_id"], name="Room 101", type=ClassroomType.classroom)
        )
        db_session.flush()

    def translate(error):
        raise AssertionError("translate must not be reached")

    with pytest.raises(IntegrityError):
        run_checked_write(db_session, work, translate=translate)

    assert len(calls) == 1
