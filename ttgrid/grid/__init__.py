from .conflicts import ConflictReporter
from .dragdrop import DragDropController, DropDecision
from .editor import TeacherEditor
from .roster import ClassRosterResolver
from .slots import SaveReport, SlotGrid
from .store import PeriodGroupStore
from .teacher_view import TeacherTimetable
from .workspace import ClassTimetableWorkspace

__all__ = [
    "ClassRosterResolver",
    "ClassTimetableWorkspace",
    "ConflictReporter",
    "DragDropController",
    "DropDecision",
    "PeriodGroupStore",
    "SaveReport",
    "SlotGrid",
    "TeacherEditor",
    "TeacherTimetable",
]
