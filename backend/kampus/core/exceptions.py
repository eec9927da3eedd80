class AppError(Exception):
    """Base class for all application exceptions."""
    code = "APP_ERROR"

    def __init__(self, message: str, status_code: int = 500, details: dict = None, code: str = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        if code is not None:
            self.code = code
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised for malformed input or a reference to an unknown or out-of-scope id."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    code = "NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class PeriodScopeError(AppError):
    """Raised when a period does not belong to the academic year it is used with."""
    code = "PERIOD_SCOPE"

    def __init__(self, period_id: str, academic_year_id: str):
        super().__init__(
            "The selected period does not belong to the given academic year",
            status_code=409,
            details={"period_id": period_id, "academic_year_id": academic_year_id},
        )


class SchedulingConflictError(AppError):
    """A business-rule rejection: some actor or resource is already claimed at a coordinate.

    Always carries the coordinate (day, slot, year) so callers can report it.
    """
    code = "SCHEDULING_CONFLICT"
    subject_field = "subject_id"
    default_message = "Scheduling conflict"

    def __init__(
        self,
        subject_id: str,
        *,
        day_of_week: str,
        time_slot_id: str,
        academic_year_id: str,
        message: str | None = None,
    ):
        self.subject_id = subject_id
        self.day_of_week = day_of_week
        self.time_slot_id = time_slot_id
        self.academic_year_id = academic_year_id
        super().__init__(
            message or self.default_message,
            status_code=409,
            details={
                self.subject_field: subject_id,
                "day_of_week": day_of_week,
                "time_slot_id": time_slot_id,
                "academic_year_id": academic_year_id,
            },
        )


class TeacherConflictError(SchedulingConflictError):
    code = "TEACHER_CONFLICT"
    subject_field = "teacher_id"
    default_message = "The teacher already has an assignment at this time"


class GroupConflictError(SchedulingConflictError):
    code = "GROUP_CONFLICT"
    subject_field = "group_id"
    default_message = "The group already has an assignment at this time"


class RoomConflictError(SchedulingConflictError):
    code = "ROOM_CONFLICT"
    subject_field = "classroom_id"
    default_message = "The classroom is already occupied at this time"


class AssignmentDoubleBookedError(SchedulingConflictError):
    code = "ASSIGNMENT_DOUBLE_BOOKED"
    subject_field = "assignment_id"
    default_message = "The assignment is already placed in a classroom at this time"


class SlotMismatchError(SchedulingConflictError):
    code = "SLOT_MISMATCH"
    subject_field = "assignment_id"
    default_message = "A placement must use the day, time slot and academic year of its assignment"


class AssignmentInactiveError(AppError):
    code = "ASSIGNMENT_INACTIVE"

    def __init__(self, assignment_id: str):
        super().__init__(
            "Only active assignments can be placed",
            status_code=409,
            details={"assignment_id": assignment_id},
        )


class ConcurrencyConflictError(AppError):
    """Raised when a uniqueness index rejects a write that passed its checks."""
    code = "CONCURRENCY_CONFLICT"

    def __init__(self, message: str = "A concurrent change claimed the same coordinate", details: dict = None):
        super().__init__(message, status_code=409, details=details)


class DuplicateResourceError(AppError):
    code = "DUPLICATE"

    def __init__(self, resource_type: str, details: dict = None):
        super().__init__(f"{resource_type} already exists", status_code=409, details=details)


class ResourceInUseError(AppError):
    """Raised when deleting a resource that scheduled rows still reference."""
    code = "IN_USE"

    def __init__(self, resource_type: str, resource_id: str, references: int):
        super().__init__(
            f"{resource_type} {resource_id} is still referenced by {references} assignment(s)",
            status_code=409,
            details={"resource_type": resource_type, "resource_id": resource_id, "references": references},
        )
