from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .slot import TimetableSlot


Key = Tuple[str, int]  # (day, period_order)


@dataclass
class Timetable:
    """Sparse (day, period_order) matrix of one class's slots."""

    cells: Dict[Key, TimetableSlot] = field(default_factory=dict)
    unpositioned: List[TimetableSlot] = field(default_factory=list)

    @classmethod
    def from_slots(cls, slots: Iterable[TimetableSlot]) -> "Timetable":
        tt = cls()
        for s in slots:
            tt.place(s)
        return tt

    def place(self, s: TimetableSlot) -> None:
        if s.period_order is None:
            self.unpositioned.append(s)
            return
        key = (s.day, s.period_order)
        held = self.cells.get(key)
        # First occupied row wins; an empty duplicate never hides it
        if held is None or (s.occupied and not held.occupied):
            self.cells[key] = s

    def get(self, day: str, period_order: int) -> TimetableSlot | None:
        return self.cells.get((day, period_order))

    def occupied(self, day: str, period_order: int) -> bool:
        s = self.get(day, period_order)
        return s is not None and s.occupied

    def remove(self, day: str, period_order: int) -> TimetableSlot | None:
        return self.cells.pop((day, period_order), None)

    def populated(self) -> List[TimetableSlot]:
        return [s for s in self.cells.values() if s.occupied]

    def __len__(self) -> int:
        return len(self.cells)
