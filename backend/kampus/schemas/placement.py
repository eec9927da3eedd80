from datetime import datetime

from pydantic import BaseModel, Field

from kampus.models.assignment import DayOfWeek


class PlacementCreate(BaseModel):
    assignment_id: str = Field(min_length=1, max_length=36)
    classroom_id: str = Field(min_length=1, max_length=36)
    time_slot_id: str = Field(min_length=1, max_length=36)
    day_of_week: DayOfWeek
    academic_year_id: str = Field(min_length=1, max_length=36)


class PlacementMove(BaseModel):
    classroom_id: str = Field(min_length=1, max_length=36)


class PlacementOut(BaseModel):
    id: str
    assignment_id: str
    classroom_id: str
    time_slot_id: str
    day_of_week: DayOfWeek
    academic_year_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
