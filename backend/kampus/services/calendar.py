"""Academic years and their periods.

A period sits inside its year's date range and never overlaps a sibling.
Overlap uses half-open ranges, so a period may start on the day the
previous one ends.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from kampus.core.exceptions import PeriodScopeError, ResourceInUseError, ResourceNotFoundError, ValidationError
from kampus.models.academic_year import AcademicYear
from kampus.models.assignment import Assignment
from kampus.models.period import Period
from kampus.models.placement import Placement
from kampus.schemas.calendar import AcademicYearCreate, PeriodCreate
from kampus.services.audit import log_activity

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    return start_a < end_b and start_b < end_a


def get_academic_year(db: Session, institution_id: str, academic_year_id: str) -> AcademicYear:
    year = db.get(AcademicYear, academic_year_id)
    if year is None or year.institution_id != institution_id or year.deleted_at is not None:
        raise ResourceNotFoundError("AcademicYear", academic_year_id)
    return year


def list_academic_years(db: Session, institution_id: str) -> list[AcademicYear]:
    stmt = (
        select(AcademicYear)
        .where(AcademicYear.institution_id == institution_id, AcademicYear.deleted_at.is_(None))
        .order_by(AcademicYear.start_date)
    )
    return list(db.execute(stmt).scalars())


def _ensure_unique_year_name(db: Session, institution_id: str, name: str, exclude_id: str | None = None) -> None:
    stmt = select(AcademicYear.id).where(
        AcademicYear.institution_id == institution_id,
        AcademicYear.name == name,
    )
    if exclude_id is not None:
        stmt = stmt.where(AcademicYear.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise ValidationError("Academic year name already exists", details={"field": "name", "value": name})


def create_academic_year(
    db: Session, *, institution_id: str, payload: AcademicYearCreate, actor_id: str | None = None
) -> AcademicYear:
    _ensure_unique_year_name(db, institution_id, payload.name)
    year = AcademicYear(institution_id=institution_id, **payload.model_dump())
    db.add(year)
    db.flush()
    log_activity(
        db,
        institution_id=institution_id,
        actor_id=actor_id,
        action="academic_year.created",
        entity_type="academic_year",
        entity_id=year.id,
        details={"name": year.name},
    )
    db.commit()
    db.refresh(year)
    return year


def update_academic_year(
    db: Session, year: AcademicYear, changes: dict, *, actor_id: str | None = None
) -> AcademicYear:
    start_date = changes.get("start_date") or year.start_date
    end_date = changes.get("end_date") or year.end_date
    if end_date <= start_date:
        raise ValidationError("end_date must be after start_date", details={"field": "end_date"})
    if changes.get("name"):
        _ensure_unique_year_name(db, year.institution_id, changes["name"], exclude_id=year.id)

    for period in list_periods(db, year):
        if period.start_date < start_date or period.end_date > end_date:
            raise ValidationError(
                f'Period "{period.name}" would fall outside the academic year',
                details={"field": "start_date" if period.start_date < start_date else "end_date", "period_id": period.id},
            )

    for key, value in changes.items():
        if value is not None:
            setattr(year, key, value)
    log_activity(
        db,
        institution_id=year.institution_id,
        actor_id=actor_id,
        action="academic_year.updated",
        entity_type="academic_year",
        entity_id=year.id,
        details=changes,
    )
    db.commit()
    db.refresh(year)
    return year


def delete_academic_year(db: Session, year: AcademicYear, *, actor_id: str | None = None) -> None:
    """Soft-delete the year together with its live assignments and placements."""
    now = _utc_now()
    year.deleted_at = now
    retired_assignments = db.execute(
        update(Assignment)
        .where(Assignment.academic_year_id == year.id, Assignment.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session="fetch")
    ).rowcount or 0
    retired_placements = db.execute(
        update(Placement)
        .where(Placement.academic_year_id == year.id, Placement.deleted_at.is_(None))
        .values(deleted_at=now)
        .execution_options(synchronize_session="fetch")
    ).rowcount or 0
    log_activity(
        db,
        institution_id=year.institution_id,
        actor_id=actor_id,
        action="academic_year.deleted",
        entity_type="academic_year",
        entity_id=year.id,
        details={"retired_assignments": retired_assignments, "retired_placements": retired_placements},
    )
    db.commit()
    logger.info(
        "Academic year %s soft-deleted, %d assignment(s) and %d placement(s) retired",
        year.id,
        retired_assignments,
        retired_placements,
    )


def list_periods(db: Session, year: AcademicYear) -> list[Period]:
    stmt = select(Period).where(Period.academic_year_id == year.id).order_by(Period.start_date)
    return list(db.execute(stmt).scalars())


def get_period(db: Session, institution_id: str, period_id: str) -> Period:
    period = db.get(Period, period_id)
    if period is None:
        raise ResourceNotFoundError("Period", period_id)
    year = db.get(AcademicYear, period.academic_year_id)
    if year is None or year.institution_id != institution_id or year.deleted_at is not None:
        raise ResourceNotFoundError("Period", period_id)
    return period


def validate_period_window(
    db: Session,
    year: AcademicYear,
    *,
    start_date: date,
    end_date: date,
    exclude_period_id: str | None = None,
) -> None:
    if end_date <= start_date:
        raise ValidationError("end_date must be after start_date", details={"field": "end_date"})
    if start_date < year.start_date:
        raise ValidationError(
            f"The period cannot start before its academic year ({year.start_date.isoformat()})",
            details={"field": "start_date"},
        )
    if end_date > year.end_date:
        raise ValidationError(
            f"The period cannot end after its academic year ({year.end_date.isoformat()})",
            details={"field": "end_date"},
        )
    for sibling in list_periods(db, year):
        if sibling.id == exclude_period_id:
            continue
        if ranges_overlap(start_date, end_date, sibling.start_date, sibling.end_date):
            raise ValidationError(
                f'The period overlaps "{sibling.name}" '
                f"({sibling.start_date.isoformat()} to {sibling.end_date.isoformat()})",
                details={"field": "start_date", "period_id": sibling.id},
            )


def create_period(
    db: Session, year: AcademicYear, payload: PeriodCreate, *, actor_id: str | None = None
) -> Period:
    validate_period_window(db, year, start_date=payload.start_date, end_date=payload.end_date)
    period = Period(academic_year_id=year.id, **payload.model_dump())
    db.add(period)
    db.flush()
    log_activity(
        db,
        institution_id=year.institution_id,
        actor_id=actor_id,
        action="period.created",
        entity_type="period",
        entity_id=period.id,
        details={"academic_year_id": year.id, "name": period.name},
    )
    db.commit()
    db.refresh(period)
    return period


def update_period(db: Session, period: Period, changes: dict, *, actor_id: str | None = None) -> Period:
    year = db.get(AcademicYear, period.academic_year_id)
    validate_period_window(
        db,
        year,
        start_date=changes.get("start_date") or period.start_date,
        end_date=changes.get("end_date") or period.end_date,
        exclude_period_id=period.id,
    )
    for key, value in changes.items():
        if value is not None:
            setattr(period, key, value)
    log_activity(
        db,
        institution_id=year.institution_id,
        actor_id=actor_id,
        action="period.updated",
        entity_type="period",
        entity_id=period.id,
        details=changes,
    )
    db.commit()
    db.refresh(period)
    return period


def delete_period(db: Session, period: Period, *, actor_id: str | None = None) -> None:
    references = db.execute(
        select(func.count())
        .select_from(Assignment)
        .where(Assignment.period_id == period.id, Assignment.deleted_at.is_(None))
    ).scalar_one()
    if references:
        raise ResourceInUseError("Period", period.id, references)

    year = db.get(AcademicYear, period.academic_year_id)
    log_activity(
        db,
        institution_id=year.institution_id,
        actor_id=actor_id,
        action="period.deleted",
        entity_type="period",
        entity_id=period.id,
        details={"academic_year_id": year.id, "name": period.name},
    )
    db.delete(period)
    db.commit()
    logger.info("Period %s deleted", period.id)


def require_period_in_year(db: Session, period_id: str, academic_year_id: str) -> Period:
    period = db.get(Period, period_id)
    if period is None:
        raise ValidationError(
            f"Period {period_id} does not exist",
            details={"field": "period_id", "id": period_id},
        )
    if period.academic_year_id != academic_year_id:
        raise PeriodScopeError(period_id, academic_year_id)
    return period
