from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from kampus.core.exceptions import ResourceNotFoundError
from kampus.db.session import SessionLocal
from kampus.models.institution import Institution
from kampus.services.assignments import AssignmentLedger
from kampus.services.placements import PlacementEngine


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_institution_id(institution_id: str, db: Session = Depends(get_db)) -> str:
    if db.get(Institution, institution_id) is None:
        raise ResourceNotFoundError("Institution", institution_id)
    return institution_id


def get_actor_id(x_actor_id: str | None = Header(default=None, max_length=36)) -> str | None:
    # Authentication lives in front of this service; the caller only forwards who acted.
    return x_actor_id


def get_ledger(
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> AssignmentLedger:
    return AssignmentLedger(db, institution_id, actor_id=actor_id)


def get_placement_engine(
    institution_id: str = Depends(get_institution_id),
    actor_id: str | None = Depends(get_actor_id),
    db: Session = Depends(get_db),
) -> PlacementEngine:
    return PlacementEngine(db, institution_id, actor_id=actor_id)
