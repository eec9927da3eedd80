from pydantic import BaseModel, Field, field_validator, model_validator

from kampus.models.classroom import ClassroomType
from kampus.models.time_slot import TimeSlotStatus
from kampus.schemas.common import TIME_PATTERN, parse_time_to_minutes


class InstitutionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    code: str | None = Field(default=None, max_length=50)


class InstitutionOut(InstitutionCreate):
    id: str

    model_config = {"from_attributes": True}


class SiteCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str | None = Field(default=None, max_length=500)


class SiteOut(SiteCreate):
    id: str
    institution_id: str

    model_config = {"from_attributes": True}


class GradeLevelCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    level: int = Field(default=0, ge=0, le=20)


class GradeLevelOut(GradeLevelCreate):
    id: str
    institution_id: str

    model_config = {"from_attributes": True}


class TeacherCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    specialty: str | None = Field(default=None, max_length=200)


class TeacherOut(TeacherCreate):
    id: str
    institution_id: str

    model_config = {"from_attributes": True}


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str | None = Field(default=None, max_length=50)
    weekly_hours: int = Field(default=0, ge=0, le=60)


class SubjectOut(SubjectCreate):
    id: str
    institution_id: str

    model_config = {"from_attributes": True}


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    site_id: str = Field(min_length=1, max_length=36)
    grade_level_id: str = Field(min_length=1, max_length=36)


class GroupOut(GroupCreate):
    id: str
    institution_id: str

    model_config = {"from_attributes": True}


class ClassroomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: ClassroomType = ClassroomType.classroom
    capacity: int = Field(default=30, ge=1, le=1000)


class ClassroomOut(ClassroomCreate):
    id: str
    institution_id: str

    model_config = {"from_attributes": True}


class TimeSlotCreate(BaseModel):
    start_time: str
    end_time: str
    name: str | None = Field(default=None, max_length=100)
    status: TimeSlotStatus = TimeSlotStatus.active

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "TimeSlotCreate":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class TimeSlotOut(BaseModel):
    id: str
    institution_id: str
    start_time: str
    end_time: str
    name: str | None = None
    status: TimeSlotStatus

    model_config = {"from_attributes": True}
