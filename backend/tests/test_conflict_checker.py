import pytest

from kampus.models.assignment import AssignmentStatus, DayOfWeek
from kampus.repositories.memory import InMemoryScheduleRepository
from kampus.services.conflict_service import ConflictChecker, detect_conflicts


@pytest.fixture
def repository():
    return InMemoryScheduleRepository()


@pytest.fixture
def checker(repository):
    return ConflictChecker(repository)


def _assignment(repository, **overrides):
    fields = {
        "teacher_id": "t1",
        "subject_id": "math",
        "group_id": "g1",
        "time_slot_id": "s1",
        "day_of_week": "mon",
        "academic_year_id": "y2026",
    }
    fields.update(overrides)
    return repository.add_assignment(**fields)


def test_empty_schedule_has_no_conflicts(checker):
    assert checker.teacher_has_conflict("t1", "mon", "s1", "y2026") is False
    assert checker.group_has_conflict("g1", "mon", "s1", "y2026") is False
    assert checker.room_has_conflict("r1", "mon", "s1", "y2026") is False
    assert checker.assignment_slot_has_conflict("a1", "mon", "s1", "y2026") is False


def test_teacher_conflict_only_on_exact_coordinate(repository, checker):
    _assignment(repository)

    assert checker.teacher_has_conflict("t1", DayOfWeek.mon, "s1", "y2026") is True
    assert checker.teacher_has_conflict("t1", "tue", "s1", "y2026") is False
    assert checker.teacher_has_conflict("t1", "mon", "s2", "y2026") is False
    assert checker.teacher_has_conflict("t1", "mon", "s1", "y2027") is False
    assert checker.teacher_has_conflict("t2", "mon", "s1", "y2026") is False


def test_excluding_the_row_being_updated(repository, checker):
    record = _assignment(repository)

    assert checker.teacher_has_conflict("t1", "mon", "s1", "y2026", exclude_assignment_id=record.id) is False
    assert checker.group_has_conflict("g1", "mon", "s1", "y2026", exclude_assignment_id=record.id) is False
    assert checker.group_has_conflict("g1", "mon", "s1", "y2026", exclude_assignment_id="other") is True


def test_inactive_and_deleted_assignments_never_conflict(repository, checker):
    _assignment(repository, status=AssignmentStatus.inactive)
    _assignment(repository, group_id="g2", deleted=True)

    assert checker.teacher_has_conflict("t1", "mon", "s1", "y2026") is False
    assert checker.group_has_conflict("g2", "mon", "s1", "y2026") is False


def test_room_and_assignment_exclusivity_ignore_removed_placements(repository, checker):
    live = repository.add_placement(
        assignment_id="a1", classroom_id="r1", time_slot_id="s1", day_of_week="mon", academic_year_id="y2026"
    )
    repository.add_placement(
        assignment_id="a2", classroom_id="r2", time_slot_id="s1", day_of_week="mon", academic_year_id="y2026",
        deleted=True,
    )

    assert checker.room_has_conflict("r1", "mon", "s1", "y2026") is True
    assert checker.room_has_conflict("r1", "mon", "s1", "y2026", exclude_placement_id=live.id) is False
    assert checker.room_has_conflict("r2", "mon", "s1", "y2026") is False
    assert checker.assignment_slot_has_conflict("a1", "mon", "s1", "y2026") is True
    assert checker.assignment_slot_has_conflict("a2", "mon", "s1", "y2026") is False


def test_checks_do_not_mutate_state(repository, checker):
    _assignment(repository)
    before = dict(repository.assignments)

    for _ in range(3):
        checker.teacher_has_conflict("t1", "mon", "s1", "y2026")

    assert repository.assignments == before


def test_detect_conflicts_reports_each_colliding_pair():
    repository = InMemoryScheduleRepository()
    first = _assignment(repository)
    second = _assignment(repository, group_id="g2")
    _assignment(repository, teacher_id="t2", group_id="g3", day_of_week="tue")

    report = detect_conflicts(repository.assignments.values())

    assert len(report.conflicts) == 1
    conflict = report.conflicts[0]
    assert conflict.conflict_type == "teacher_conflict"
    assert conflict.affected_ids == [first.id, second.id]
    assert conflict.day_of_week == DayOfWeek.mon
    assert conflict.academic_year_id == "y2026"

    actions = {item.action_type for item in report.suggested_resolutions}
    assert actions == {"move_slot", "deactivate_assignment"}
    assert all(item.target_id == second.id for item in report.suggested_resolutions)


def test_detect_conflicts_covers_rooms_and_double_booking():
    repository = InMemoryScheduleRepository()
    coordinate = {"time_slot_id": "s1", "day_of_week": "wed", "academic_year_id": "y2026"}
    repository.add_placement(assignment_id="a1", classroom_id="r1", **coordinate)
    repository.add_placement(assignment_id="a2", classroom_id="r1", **coordinate)
    repository.add_placement(assignment_id="a2", classroom_id="r2", **coordinate)

    report = detect_conflicts([], repository.placements.values())

    kinds = sorted(conflict.conflict_type for conflict in report.conflicts)
    assert kinds == ["assignment_double_booked", "room_conflict"]
    actions = sorted(item.action_type for item in report.suggested_resolutions)
    assert actions == ["change_room", "delete_placement"]


def test_detect_conflicts_on_clean_schedule_is_empty():
    repository = InMemoryScheduleRepository()
    _assignment(repository)
    _assignment(repository, teacher_id="t2", group_id="g2")

    report = detect_conflicts(repository.assignments.values())

    assert report.conflicts == []
    assert report.suggested_resolutions == []
