from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class Period:
    id: str
    name: str
    duration_minutes: int
    start: str
    end: str
    period_order: int
    is_break: bool = False

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "Period":
        return cls(
            id=str(row.get("id", "")),
            name=row.get("period_name") or row.get("name") or "",
            duration_minutes=int(row.get("period_duration_minutes") or 0),
            start=row.get("period_start_time") or "",
            end=row.get("period_end_time") or "",
            period_order=int(row["period_order"]),
            is_break=bool(row.get("is_break", False)),
        )

    @property
    def label(self) -> str:
        if self.name:
            return f"{self.name} ({self.start} - {self.end})"
        return f"Period {self.period_order}"


@dataclass(frozen=True)
class PeriodGroup:
    id: str
    name: str
    periods: Tuple[Period, ...]
    selected_days: Tuple[str, ...]
    is_active: bool = False
    class_start_time: str | None = None
    _by_order: Dict[int, Period] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.periods, key=lambda p: p.period_order))
        by_order: Dict[int, Period] = {}
        for p in ordered:
            if p.period_order in by_order:
                raise ValueError(f"Duplicate period_order {p.period_order} in group {self.name!r}")
            by_order[p.period_order] = p
        object.__setattr__(self, "periods", ordered)
        object.__setattr__(self, "_by_order", by_order)

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "PeriodGroup":
        return cls(
            id=str(row["id"]),
            name=row.get("group_name") or row.get("name") or "",
            periods=tuple(Period.from_api(p) for p in row.get("periods") or []),
            selected_days=tuple(row.get("selected_days") or []),
            is_active=bool(row.get("is_active", False)),
            class_start_time=row.get("class_start_time"),
        )

    def period_at(self, period_order: int) -> Period | None:
        return self._by_order.get(period_order)

    def is_teaching(self, period_order: int) -> bool:
        p = self.period_at(period_order)
        return p is not None and not p.is_break

    def teaching_periods(self) -> List[Period]:
        return [p for p in self.periods if not p.is_break]

    def total_cells(self) -> int:
        # Every (day, teaching period) coordinate of the week
        return len(self.selected_days) * len(self.teaching_periods())
