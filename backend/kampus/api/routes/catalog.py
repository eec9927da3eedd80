"""Registration of the reference data schedules point at, always inside one institution."""
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kampus.api.deps import get_db, get_institution_id
from kampus.core.exceptions import DuplicateResourceError
from kampus.models.classroom import Classroom
from kampus.models.group import Group
from kampus.models.institution import GradeLevel, Site
from kampus.models.subject import Subject
from kampus.models.teacher import Teacher
from kampus.models.time_slot import TimeSlot
from kampus.schemas.catalog import (
    ClassroomCreate,
    ClassroomOut,
    GradeLevelCreate,
    GradeLevelOut,
    GroupCreate,
    GroupOut,
    SiteCreate,
    SiteOut,
    SubjectCreate,
    SubjectOut,
    TeacherCreate,
    TeacherOut,
    TimeSlotCreate,
    TimeSlotOut,
)
from kampus.services.catalog import CatalogLookup

router = APIRouter()


def _persist(db: Session, row, resource_type: str, details: dict):
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateResourceError(resource_type, details=details) from exc
    db.refresh(row)
    return row


def _list(db: Session, model, institution_id: str, *order_by):
    stmt = select(model).where(model.institution_id == institution_id).order_by(*order_by)
    return list(db.execute(stmt).scalars())


@router.get("/sites", response_model=list[SiteOut])
def list_sites(institution_id: str = Depends(get_institution_id), db: Session = Depends(get_db)):
    return _list(db, Site, institution_id, Site.name)


@router.post("/sites", response_model=SiteOut, status_code=status.HTTP_201_CREATED)
def create_site(
    payload: SiteCreate,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
):
    site = Site(institution_id=institution_id, **payload.model_dump())
    return _persist(db, site, "Site", {"name": payload.name})


@router.get("/grade-levels", response_model=list[GradeLevelOut])
def list_grade_levels(institution_id: str = Depends(get_institution_id), db: Session = Depends(get_db)):
    return _list(db, GradeLevel, institution_id, GradeLevel.level, GradeLevel.name)


@router.post("/grade-levels", response_model=GradeLevelOut, status_code=status.HTTP_201_CREATED)
def create_grade_level(
    payload: GradeLevelCreate,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
):
    grade_level = GradeLevel(institution_id=institution_id, **payload.model_dump())
    return _persist(db, grade_level, "Grade level", {"name": payload.name})


@router.get("/teachers", response_model=list[TeacherOut])
def list_teachers(institution_id: str = Depends(get_institution_id), db: Session = Depends(get_db)):
    return _list(db, Teacher, institution_id, Teacher.name)


@router.post("/teachers", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
):
    teacher = Teacher(institution_id=institution_id, **payload.model_dump())
    return _persist(db, teacher, "Teacher", {"name": payload.name})


@router.get("/subjects", response_model=list[SubjectOut])
def list_subjects(institution_id: str = Depends(get_institution_id), db: Session = Depends(get_db)):
    return _list(db, Subject, institution_id, Subject.name)


@router.post("/subjects", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
):
    subject = Subject(institution_id=institution_id, **payload.model_dump())
    return _persist(db, subject, "Subject", {"name": payload.name})


@router.get("/groups", response_model=list[GroupOut])
def list_groups(institution_id: str = Depends(get_institution_id), db: Session = Depends(get_db)):
    return _list(db, Group, institution_id, Group.name)


@router.post("/groups", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
):
    catalog = CatalogLookup(db, institution_id)
    catalog.require_site(payload.site_id)
    catalog.require_grade_level(payload.grade_level_id)
    group = Group(institution_id=institution_id, **payload.model_dump())
    return _persist(db, group, "Group", {"name": payload.name})


@router.get("/classrooms", response_model=list[ClassroomOut])
def list_classrooms(institution_id: str = Depends(get_institution_id), db: Session = Depends(get_db)):
    return _list(db, Classroom, institution_id, Classroom.name)


@router.post("/classrooms", response_model=ClassroomOut, status_code=status.HTTP_201_CREATED)
def create_classroom(
    payload: ClassroomCreate,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
):
    classroom = Classroom(institution_id=institution_id, **payload.model_dump())
    return _persist(db, classroom, "Classroom", {"name": payload.name})


@router.get("/time-slots", response_model=list[TimeSlotOut])
def list_time_slots(institution_id: str = Depends(get_institution_id), db: Session = Depends(get_db)):
    return _list(db, TimeSlot, institution_id, TimeSlot.start_time)


@router.post("/time-slots", response_model=TimeSlotOut, status_code=status.HTTP_201_CREATED)
def create_time_slot(
    payload: TimeSlotCreate,
    institution_id: str = Depends(get_institution_id),
    db: Session = Depends(get_db),
):
    time_slot = TimeSlot(institution_id=institution_id, **payload.model_dump())
    return _persist(
        db,
        time_slot,
        "Time slot",
        {"start_time": payload.start_time, "end_time": payload.end_time},
    )
