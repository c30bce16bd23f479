from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ClassSection:
    id: str
    name: str
    section: str
    academic_year: str | None = None

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "ClassSection":
        return cls(
            id=str(row["id"]),
            name=str(row.get("class") or ""),
            section=str(row.get("section") or ""),
            academic_year=row.get("academic_year"),
        )

    @property
    def label(self) -> str:
        return f"{self.name}-{self.section}" if self.section else self.name
