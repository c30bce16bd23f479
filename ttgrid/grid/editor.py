from __future__ import annotations

import logging
from typing import List, Set

from ..api.errors import ApiError, GridStateError, TeacherConflictError, TransportError
from ..data.teachers import StaffDirectory, StaffRecord
from ..models.conflict import Conflict
from .conflicts import ConflictReporter
from .slots import SlotGrid

logger = logging.getLogger(__name__)


class TeacherEditor:
    """Teacher picker for one occupied cell (the editing modal).

    ``save`` closes the editor only when the server accepted the teacher
    set. A conflict or error leaves it open with the previous selection and
    the reason in ``message``.
    """

    def __init__(self, grid: SlotGrid, reporter: ConflictReporter | None = None):
        self.grid = grid
        self.reporter = reporter or ConflictReporter()
        self.directory = StaffDirectory([])
        self.candidates: List[StaffRecord] = []
        self.query: str = ""
        self.selected: Set[str] = set()
        self.day: str | None = None
        self.period_order: int | None = None
        self.is_open = False
        self.message: str | None = None
        self.conflicts: List[Conflict] = []

    def open(self, day: str, period_order: int) -> None:
        slot = self.grid.get(day, period_order)
        if slot is None or not slot.occupied:
            raise GridStateError(f"No subject at {day} period {period_order}")
        self.directory = StaffDirectory(self.grid.backend.staff())
        subject_name = slot.subject.name if slot.subject else None
        self.candidates = self.directory.teaching_staff(subject_name)
        self.selected = set(slot.teacher_ids)
        self.day, self.period_order = day, period_order
        self.query = ""
        self.message = None
        self.conflicts = []
        self.is_open = True

    def visible(self) -> List[StaffRecord]:
        return self.directory.search(self.query, self.candidates)

    def search(self, query: str) -> List[StaffRecord]:
        self.query = query
        return self.visible()

    def toggle(self, teacher_id: str) -> None:
        if teacher_id in self.selected:
            self.selected.discard(teacher_id)
        else:
            self.selected.add(teacher_id)

    def ordered_selection(self) -> List[str]:
        # Keep the directory's order so the first pick is stable
        known = [r.id for r in self.directory.records if r.id in self.selected]
        return known + sorted(self.selected - set(known))

    def save(self) -> bool:
        if not self.is_open or self.day is None or self.period_order is None:
            raise GridStateError("Teacher editor is not open")
        try:
            self.grid.assign_teachers(self.day, self.period_order, self.ordered_selection())
        except TeacherConflictError as exc:
            self.conflicts = list(exc.conflicts)
            self.message = self.reporter.render(exc)
            return False
        except ApiError as exc:
            self.message = exc.message or "Failed to save teachers. Please try again."
            return False
        except TransportError as exc:
            logger.error(f"Teacher save failed: {exc}")
            self.message = "Failed to save teachers. Please try again."
            return False
        self.close()
        return True

    def close(self) -> None:
        self.is_open = False
        self.day = self.period_order = None
        self.message = None
        self.conflicts = []
