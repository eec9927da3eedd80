from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kampus.api.deps import get_db
from kampus.core.exceptions import DuplicateResourceError, ResourceNotFoundError
from kampus.models.institution import Institution
from kampus.schemas.catalog import InstitutionCreate, InstitutionOut

router = APIRouter()


@router.get("/", response_model=list[InstitutionOut])
def list_institutions(db: Session = Depends(get_db)) -> list[InstitutionOut]:
    return list(db.execute(select(Institution).order_by(Institution.name)).scalars())


@router.post("/", response_model=InstitutionOut, status_code=status.HTTP_201_CREATED)
def create_institution(payload: InstitutionCreate, db: Session = Depends(get_db)) -> InstitutionOut:
    institution = Institution(**payload.model_dump())
    db.add(institution)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateResourceError("Institution", details={"name": payload.name}) from exc
    db.refresh(institution)
    return institution


@router.get("/{institution_id}", response_model=InstitutionOut)
def get_institution(institution_id: str, db: Session = Depends(get_db)) -> InstitutionOut:
    institution = db.get(Institution, institution_id)
    if institution is None:
        raise ResourceNotFoundError("Institution", institution_id)
    return institution
