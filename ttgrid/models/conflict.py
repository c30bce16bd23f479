from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Conflict:
    teacher_name: str
    class_name: str
    teacher_id: str | None = None
    class_id: str | None = None

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "Conflict":
        # Backend emits both camelCase and snake_case shapes
        return cls(
            teacher_name=row.get("teacher_name") or row.get("teacherName") or "Unknown Teacher",
            class_name=row.get("class_name") or row.get("className") or "Unknown Class",
            teacher_id=row.get("teacher_id") or row.get("teacherId"),
            class_id=row.get("class_id") or row.get("classId"),
        )

    def describe(self) -> str:
        return f"{self.teacher_name} is already assigned to {self.class_name}"
