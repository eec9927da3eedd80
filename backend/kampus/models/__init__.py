from kampus.models.academic_year import AcademicYear, AcademicYearStatus  # noqa: F401
from kampus.models.activity_log import ActivityLog  # noqa: F401
from kampus.models.assignment import Assignment, AssignmentStatus, DayOfWeek  # noqa: F401
from kampus.models.classroom import Classroom, ClassroomType  # noqa: F401
from kampus.models.group import Group  # noqa: F401
from kampus.models.institution import GradeLevel, Institution, Site  # noqa: F401
from kampus.models.period import Period  # noqa: F401
from kampus.models.placement import Placement  # noqa: F401
from kampus.models.subject import Subject  # noqa: F401
from kampus.models.teacher import Teacher  # noqa: F401
from kampus.models.time_slot import TimeSlot, TimeSlotStatus  # noqa: F401
