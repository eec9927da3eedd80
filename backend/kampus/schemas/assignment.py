from datetime import datetime

from pydantic import BaseModel, Field

from kampus.models.assignment import AssignmentStatus, DayOfWeek


class AssignmentCreate(BaseModel):
    teacher_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    group_id: str = Field(min_length=1, max_length=36)
    time_slot_id: str = Field(min_length=1, max_length=36)
    day_of_week: DayOfWeek
    academic_year_id: str = Field(min_length=1, max_length=36)
    period_id: str | None = Field(default=None, max_length=36)


class AssignmentUpdate(BaseModel):
    teacher_id: str | None = Field(default=None, min_length=1, max_length=36)
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    group_id: str | None = Field(default=None, min_length=1, max_length=36)
    time_slot_id: str | None = Field(default=None, min_length=1, max_length=36)
    day_of_week: DayOfWeek | None = None
    academic_year_id: str | None = Field(default=None, min_length=1, max_length=36)
    period_id: str | None = Field(default=None, max_length=36)
    status: AssignmentStatus | None = None


class AssignmentOut(BaseModel):
    id: str
    teacher_id: str
    subject_id: str
    group_id: str
    time_slot_id: str
    day_of_week: DayOfWeek
    academic_year_id: str
    period_id: str | None = None
    status: AssignmentStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class TimetableEntryOut(BaseModel):
    assignment_id: str
    day_of_week: DayOfWeek
    time_slot_id: str
    start_time: str
    end_time: str
    teacher_id: str
    subject_id: str
    group_id: str
    period_id: str | None = None
    classroom_ids: list[str] = Field(default_factory=list)
