from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_COLOR = "#6366f1"


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    color: str = DEFAULT_COLOR

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "Subject":
        return cls(id=str(row["id"]), name=row.get("name") or "", color=row.get("color") or DEFAULT_COLOR)
