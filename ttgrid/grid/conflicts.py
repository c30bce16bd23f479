from __future__ import annotations

from typing import Iterable, List, Tuple

from ..api.errors import TeacherConflictError
from ..models.conflict import Conflict

HEADER = "TEACHER CONFLICT DETECTED!"
FOOTER = [
    "Cannot save. This would create a scheduling conflict.",
    "Please resolve the conflict first:",
    "1. Remove the teacher from the conflicting class",
    "2. Choose a different teacher",
    "3. Change the time slot",
]


class ConflictReporter:
    """Client-side rendering of the server's teacher double-booking verdicts."""

    @staticmethod
    def pairs(conflicts: Iterable[Conflict]) -> List[Tuple[str, str]]:
        out: List[Tuple[str, str]] = []
        for c in conflicts:
            pair = (c.teacher_name, c.class_name)
            if pair not in out:
                out.append(pair)
        return out

    def lines(self, conflicts: Iterable[Conflict]) -> List[str]:
        return [f"- {t} is already assigned to {k}" for t, k in self.pairs(conflicts)]

    def render(self, error: TeacherConflictError) -> str:
        body = self.lines(error.conflicts) or ["- One or more teachers have conflicts"]
        return "\n".join([HEADER, ""] + body + [""] + FOOTER)
