from __future__ import annotations

from sqlalchemy.orm import Session

from kampus.core.exceptions import ValidationError
from kampus.models.academic_year import AcademicYear
from kampus.models.classroom import Classroom
from kampus.models.group import Group
from kampus.models.institution import GradeLevel, Site
from kampus.models.subject import Subject
from kampus.models.teacher import Teacher
from kampus.models.time_slot import TimeSlot, TimeSlotStatus


class CatalogLookup:
    """Institution-scoped existence checks for the reference data a schedule points at.

    A row that exists but belongs to another institution is reported exactly
    like a missing one.
    """

    def __init__(self, db: Session, institution_id: str):
        self.db = db
        self.institution_id = institution_id

    def find(self, model, entity_id: str):
        row = self.db.get(model, entity_id)
        if row is None or row.institution_id != self.institution_id:
            return None
        return row

    def _require(self, model, entity_id: str, field: str, label: str):
        row = self.find(model, entity_id)
        if row is None:
            raise ValidationError(
                f"{label} {entity_id} does not exist in this institution",
                details={"field": field, "id": entity_id},
            )
        return row

    def require_teacher(self, teacher_id: str) -> Teacher:
        return self._require(Teacher, teacher_id, "teacher_id", "Teacher")

    def require_subject(self, subject_id: str) -> Subject:
        return self._require(Subject, subject_id, "subject_id", "Subject")

    def require_group(self, group_id: str) -> Group:
        return self._require(Group, group_id, "group_id", "Group")

    def require_site(self, site_id: str) -> Site:
        return self._require(Site, site_id, "site_id", "Site")

    def require_grade_level(self, grade_level_id: str) -> GradeLevel:
        return self._require(GradeLevel, grade_level_id, "grade_level_id", "Grade level")

    def require_classroom(self, classroom_id: str) -> Classroom:
        return self._require(Classroom, classroom_id, "classroom_id", "Classroom")

    def require_time_slot(self, time_slot_id: str) -> TimeSlot:
        slot = self._require(TimeSlot, time_slot_id, "time_slot_id", "Time slot")
        if slot.status != TimeSlotStatus.active:
            raise ValidationError(
                f"Time slot {time_slot_id} is inactive",
                details={"field": "time_slot_id", "id": time_slot_id},
            )
        return slot

    def require_academic_year(self, academic_year_id: str) -> AcademicYear:
        year = self._require(AcademicYear, academic_year_id, "academic_year_id", "Academic year")
        if year.deleted_at is not None:
            raise ValidationError(
                f"Academic year {academic_year_id} does not exist in this institution",
                details={"field": "academic_year_id", "id": academic_year_id},
            )
        return year
