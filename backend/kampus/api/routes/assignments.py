from fastapi import APIRouter, Depends, Query, Response, status

from kampus.api.deps import get_ledger
from kampus.models.assignment import AssignmentStatus, DayOfWeek
from kampus.schemas.assignment import AssignmentCreate, AssignmentOut, AssignmentUpdate, TimetableEntryOut
from kampus.services.assignments import AssignmentLedger

router = APIRouter()


@router.get("/assignments", response_model=list[AssignmentOut])
def list_assignments(
    teacher_id: str | None = Query(default=None),
    subject_id: str | None = Query(default=None),
    group_id: str | None = Query(default=None),
    academic_year_id: str | None = Query(default=None),
    period_id: str | None = Query(default=None),
    day_of_week: DayOfWeek | None = Query(default=None),
    status_filter: AssignmentStatus | None = Query(default=None, alias="status"),
    ledger: AssignmentLedger = Depends(get_ledger),
) -> list[AssignmentOut]:
    return ledger.list_assignments(
        teacher_id=teacher_id,
        subject_id=subject_id,
        group_id=group_id,
        academic_year_id=academic_year_id,
        period_id=period_id,
        day_of_week=day_of_week,
        status=status_filter,
    )


@router.post("/assignments", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreate,
    ledger: AssignmentLedger = Depends(get_ledger),
) -> AssignmentOut:
    return ledger.create_assignment(**payload.model_dump())


@router.get("/assignments/{assignment_id}", response_model=AssignmentOut)
def get_assignment(assignment_id: str, ledger: AssignmentLedger = Depends(get_ledger)) -> AssignmentOut:
    return ledger.get(assignment_id)


@router.patch("/assignments/{assignment_id}", response_model=AssignmentOut)
def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdate,
    ledger: AssignmentLedger = Depends(get_ledger),
) -> AssignmentOut:
    return ledger.update_assignment(assignment_id, payload.model_dump(exclude_unset=True))


@router.post("/assignments/{assignment_id}/deactivate", response_model=AssignmentOut)
def deactivate_assignment(assignment_id: str, ledger: AssignmentLedger = Depends(get_ledger)) -> AssignmentOut:
    return ledger.deactivate_assignment(assignment_id)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(assignment_id: str, ledger: AssignmentLedger = Depends(get_ledger)) -> Response:
    ledger.delete_assignment(assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/teachers/{teacher_id}/timetable", response_model=list[TimetableEntryOut])
def teacher_timetable(
    teacher_id: str,
    academic_year_id: str | None = Query(default=None),
    ledger: AssignmentLedger = Depends(get_ledger),
) -> list[TimetableEntryOut]:
    return ledger.timetable(teacher_id=teacher_id, academic_year_id=academic_year_id)


@router.get("/groups/{group_id}/timetable", response_model=list[TimetableEntryOut])
def group_timetable(
    group_id: str,
    academic_year_id: str | None = Query(default=None),
    ledger: AssignmentLedger = Depends(get_ledger),
) -> list[TimetableEntryOut]:
    return ledger.timetable(group_id=group_id, academic_year_id=academic_year_id)
