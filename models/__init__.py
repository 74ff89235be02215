from models.course import Course, PreferredTimeSlot
from models.teacher import Teacher
from models.group import Group, build_exclusion_map
from models.subject import Subject
from models.school_class import SchoolClass
from models.lesson import Lesson, make_lesson_id
from models.schedule import Schedule, ScheduleStatus
from models.assignment import Assignment
from models.timeslot import TimeSlot
from models.school_data import SchoolData, FeasibilityReport

__all__ = [
    "Course",
    "PreferredTimeSlot",
    "Teacher",
    "Group",
    "build_exclusion_map",
    "Subject",
    "SchoolClass",
    "Lesson",
    "make_lesson_id",
    "Schedule",
    "ScheduleStatus",
    "Assignment",
    "TimeSlot",
    "SchoolData",
    "FeasibilityReport",
]
