from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple


class OccupancyLedger:
    """School-wide record of which classes hold each teacher per day/period."""

    def __init__(self) -> None:
        # (teacher, day, period_order) -> class ids holding that teacher
        self.teacher_busy: Dict[Tuple[str, str, int], Set[str]] = defaultdict(set)

    def conflicts_for(
        self, teachers: Iterable[str], class_id: str, day: str, period_order: int
    ) -> List[Tuple[str, str]]:
        out: List[Tuple[str, str]] = []
        for t in teachers:
            for other in sorted(self.teacher_busy.get((t, day, period_order), ())):
                if other != class_id and (t, other) not in out:
                    out.append((t, other))
        return out

    def place(self, teachers: Iterable[str], class_id: str, day: str, period_order: int) -> None:
        for t in teachers:
            self.teacher_busy[(t, day, period_order)].add(class_id)

    def remove(self, teachers: Iterable[str], class_id: str, day: str, period_order: int) -> None:
        for t in teachers:
            holders = self.teacher_busy.get((t, day, period_order))
            if holders is None:
                continue
            holders.discard(class_id)
            if not holders:
                del self.teacher_busy[(t, day, period_order)]
