from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.class_session import (  # noqa: F401
    ClassSession,
    SessionCategory,
    SessionStatus,
    SessionType,
)
from app.models.course_class import ClassStatus, CourseClass  # noqa: F401
from app.models.course_registration import CourseRegistration, RegistrationStatus  # noqa: F401
from app.models.room import Room  # noqa: F401
from app.models.semester import Semester, SemesterStatus  # noqa: F401
from app.models.student import Student  # noqa: F401
from app.models.student_schedule import StudentSchedule, StudentScheduleStatus  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.time_slot import DayOfWeek, TimeSlot  # noqa: F401
