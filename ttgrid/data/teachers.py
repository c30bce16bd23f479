from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

TEACHING_ROLE_WORDS = ("teacher", "principal", "head", "vice")


@dataclass
class StaffRecord:
    id: str
    full_name: str
    staff_id: str | None = None
    role: str | None = None
    department: str | None = None
    designation: str | None = None

    def matches(self, query: str) -> bool:
        q = query.lower()
        return any(q in (v or "").lower() for v in (self.full_name, self.staff_id, self.role, self.department))


class StaffDirectory:
    def __init__(self, rows: Iterable[Dict[str, object]]):
        self.records: List[StaffRecord] = []
        for s in rows:
            self.records.append(
                StaffRecord(
                    id=str(s.get("id")),
                    full_name=str(s.get("full_name") or ""),
                    staff_id=s.get("staff_id"),
                    role=s.get("role"),
                    department=s.get("department"),
                    designation=s.get("designation"),
                )
            )

    def teaching_staff(self, subject_name: str | None = None) -> List[StaffRecord]:
        out: List[StaffRecord] = []
        for r in self.records:
            role = (r.role or "").lower()
            if any(w in role for w in TEACHING_ROLE_WORDS):
                out.append(r)
            elif subject_name and (r.designation or "").lower() == subject_name.lower():
                out.append(r)
            elif "teaching" in (r.department or "").lower():
                out.append(r)
        # Nobody flagged as teaching: offer everyone
        return out or list(self.records)

    def search(self, query: str, pool: List[StaffRecord] | None = None) -> List[StaffRecord]:
        pool = self.records if pool is None else pool
        if not query.strip():
            return list(pool)
        return [r for r in pool if r.matches(query.strip())]
