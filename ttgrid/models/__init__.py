# Re-export common types
from .class_section import ClassSection
from .conflict import Conflict
from .context import GridContext
from .period import Period, PeriodGroup
from .slot import TeacherRef, TimetableSlot
from .subject import Subject
from .timetable import Timetable

__all__ = [
    "ClassSection",
    "Conflict",
    "GridContext",
    "Period",
    "PeriodGroup",
    "Subject",
    "TeacherRef",
    "TimetableSlot",
    "Timetable",
]
