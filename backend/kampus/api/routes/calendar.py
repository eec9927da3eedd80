from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from kampus.api.deps import get_actor_id, get_db, get_institution_id
from kampus.schemas.calendar import (
    AcademicYearCreate,
    AcademicYearOut,
    AcademicYearUpdate,
    PeriodCreate,
    PeriodOut,
    PeriodUpdate,
)
from kampus.services import calendar as calendar_service

router = APIRouter()


@router.get("/academic-years", response_model=list[AcademicYearOut])
def list_academic_years(
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
) -> list[AcademicYearOut]:
    return calendar_service.list_academic_years(db, institution_id)


@router.post("/academic-years", response_model=AcademicYearOut, status_code=status.HTTP_201_CREATED)
def create_academic_year(
    payload: AcademicYearCreate,
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> AcademicYearOut:
    return calendar_service.create_academic_year(
        db, institution_id=institution_id, payload=payload, actor_id=actor_id
    )


@router.get("/academic-years/{academic_year_id}", response_model=AcademicYearOut)
def get_academic_year(
    academic_year_id: str,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
) -> AcademicYearOut:
    return calendar_service.get_academic_year(db, institution_id, academic_year_id)


@router.patch("/academic-years/{academic_year_id}", response_model=AcademicYearOut)
def update_academic_year(
    academic_year_id: str,
    payload: AcademicYearUpdate,
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> AcademicYearOut:
    year = calendar_service.get_academic_year(db, institution_id, academic_year_id)
    return calendar_service.update_academic_year(
        db, year, payload.model_dump(exclude_unset=True), actor_id=actor_id
    )


@router.delete("/academic-years/{academic_year_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_academic_year(
    academic_year_id: str,
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> Response:
    year = calendar_service.get_academic_year(db, institution_id, academic_year_id)
    calendar_service.delete_academic_year(db, year, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/academic-years/{academic_year_id}/periods", response_model=list[PeriodOut])
def list_periods(
    academic_year_id: str,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
) -> list[PeriodOut]:
    year = calendar_service.get_academic_year(db, institution_id, academic_year_id)
    return calendar_service.list_periods(db, year)


@router.post(
    "/academic-years/{academic_year_id}/periods",
    response_model=PeriodOut,
    status_code=status.HTTP_201_CREATED,
)
def create_period(
    academic_year_id: str,
    payload: PeriodCreate,
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> PeriodOut:
    year = calendar_service.get_academic_year(db, institution_id, academic_year_id)
    return calendar_service.create_period(db, year, payload, actor_id=actor_id)


@router.patch("/periods/{period_id}", response_model=PeriodOut)
def update_period(
    period_id: str,
    payload: PeriodUpdate,
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> PeriodOut:
    period = calendar_service.get_period(db, institution_id, period_id)
    return calendar_service.update_period(db, period, payload.model_dump(exclude_unset=True), actor_id=actor_id)


@router.delete("/periods/{period_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_period(
    period_id: str,
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> Response:
    period = calendar_service.get_period(db, institution_id, period_id)
    calendar_service.delete_period(db, period, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
