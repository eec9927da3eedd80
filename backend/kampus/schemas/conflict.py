from typing import List, Literal

from pydantic import BaseModel

from kampus.models.assignment import DayOfWeek


class ConflictDetail(BaseModel):
    id: str
    conflict_type: Literal[
        "teacher_conflict",
        "group_conflict",
        "room_conflict",
        "assignment_double_booked",
    ]
    description: str
    day_of_week: DayOfWeek
    time_slot_id: str
    academic_year_id: str
    affected_ids: List[str]  # assignment ids, or placement ids for room/double-booking conflicts


class ResolutionAction(BaseModel):
    action_type: Literal["move_slot", "change_room", "deactivate_assignment", "delete_placement"]
    description: str
    target_id: str
    parameters: dict


class ConflictReport(BaseModel):
    conflicts: List[ConflictDetail]
    suggested_resolutions: List[ResolutionAction]
