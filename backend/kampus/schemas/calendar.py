from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from kampus.models.academic_year import AcademicYearStatus


def _strip_name(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Name cannot be empty")
    return trimmed


class AcademicYearCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    start_date: date
    end_date: date
    status: AcademicYearStatus = AcademicYearStatus.active

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        return _strip_name(value)

    @model_validator(mode="after")
    def validate_range(self) -> "AcademicYearCreate":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AcademicYearUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    status: AcademicYearStatus | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        return _strip_name(value)


class AcademicYearOut(BaseModel):
    id: str
    institution_id: str
    name: str
    start_date: date
    end_date: date
    status: AcademicYearStatus
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PeriodCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    start_date: date
    end_date: date

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        return _strip_name(value)

    @model_validator(mode="after")
    def validate_range(self) -> "PeriodCreate":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class PeriodUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        return _strip_name(value)


class PeriodOut(BaseModel):
    id: str
    academic_year_id: str
    name: str
    start_date: date
    end_date: date

    model_config = {"from_attributes": True}
