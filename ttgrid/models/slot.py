from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .subject import Subject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeacherRef:
    id: str
    full_name: str
    staff_id: str | None = None

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "TeacherRef":
        return cls(id=str(row["id"]), full_name=row.get("full_name") or "", staff_id=row.get("staff_id"))


@dataclass
class TimetableSlot:
    day: str
    period_order: int | None
    subject_id: str | None = None
    subject: Subject | None = None
    teacher_ids: List[str] = field(default_factory=list)
    teachers: List[TeacherRef] = field(default_factory=list)
    id: str | None = None
    class_id: str | None = None
    class_label: str | None = None
    legacy_period: str | None = None

    @property
    def occupied(self) -> bool:
        return self.subject_id is not None

    def teacher_names(self) -> List[str]:
        if self.teachers:
            return [t.full_name for t in self.teachers]
        return list(self.teacher_ids)

    @classmethod
    def from_api(cls, row: Dict[str, Any], *, accept_legacy_period: bool = True) -> "TimetableSlot":
        legacy = row.get("period")
        order = _as_order(row.get("period_order"))
        if order is None and legacy is not None and accept_legacy_period:
            order = _as_order(legacy)
            if order is not None:
                logger.debug(f"Coerced legacy period {legacy!r} -> period_order {order} ({row.get('day')})")
        teacher_ids = list(row.get("teacher_ids") or [])
        if not teacher_ids and row.get("teacher_id"):
            teacher_ids = [row["teacher_id"]]
        subject = row.get("subject")
        class_ref = row.get("class_reference") or row.get("class")
        class_label = None
        if isinstance(class_ref, dict):
            name = class_ref.get("class") or ""
            section = class_ref.get("section") or ""
            class_label = f"{name}-{section}" if section else name
        return cls(
            day=row.get("day") or "",
            period_order=order,
            subject_id=row.get("subject_id") or None,
            subject=Subject.from_api(subject) if isinstance(subject, dict) and subject.get("id") else None,
            teacher_ids=teacher_ids,
            teachers=[TeacherRef.from_api(t) for t in row.get("teachers") or []],
            id=str(row["id"]) if row.get("id") is not None else None,
            class_id=row.get("class_id"),
            class_label=class_label,
            legacy_period=str(legacy) if legacy is not None else None,
        )


def _as_order(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        order = int(str(value).strip())
    except ValueError:
        return None
    return order if order > 0 else None
