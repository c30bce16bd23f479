from __future__ import annotations

import logging
from typing import List

from ..api.base import TimetableBackend
from ..models.period import PeriodGroup
from ..models.slot import TimetableSlot

logger = logging.getLogger(__name__)


class TeacherTimetable:
    """Read-only week of one teacher across every class they teach."""

    def __init__(self, backend: TimetableBackend, group: PeriodGroup, teacher_id: str):
        self.backend = backend
        self.group = group
        self.teacher_id = teacher_id
        self.slots: List[TimetableSlot] = []

    def load(self) -> List[TimetableSlot]:
        rows = self.backend.slots(teacher_id=self.teacher_id)
        self.slots = [TimetableSlot.from_api(r) for r in rows]
        logger.info(f"Teacher {self.teacher_id} has {len(self.slots)} assigned slot(s)")
        return self.slots

    def cell(self, day: str, period_order: int) -> TimetableSlot | None:
        for s in self.slots:
            if s.day != day:
                continue
            if s.period_order == period_order or s.legacy_period == str(period_order):
                return s
        return None

    @property
    def empty(self) -> bool:
        return not self.slots
