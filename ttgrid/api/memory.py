from __future__ import annotations

import copy
import csv
import io
import logging
import threading
import uuid
from typing import Any, Dict, List, Tuple

from ..data.registry import OccupancyLedger
from ..models.conflict import Conflict
from .base import Row, TimetableBackend
from .errors import TEACHER_CONFLICT, ApiError, TeacherConflictError

logger = logging.getLogger(__name__)

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
MIN_PERIOD = 1
MAX_PERIOD = 20


class InMemoryBackend(TimetableBackend):
    """Reference server for the timetable API held entirely in memory.

    Honours the same contract as the HTTP service: replace-not-merge
    upserts, soft clearing, and school-wide teacher conflict rejection.
    Every call is appended to ``audit`` so callers can see exactly which
    requests a grid issued.
    """

    def __init__(self, fixture: Dict[str, Any]):
        self.school_code: str = fixture.get("school_code", "")
        self._groups: List[Row] = copy.deepcopy(fixture.get("period_groups", []))
        self._classes: Dict[str, Row] = {c["id"]: dict(c) for c in fixture.get("classes", [])}
        self._group_classes: Dict[str, List[str]] = {
            g: list(ids) for g, ids in fixture.get("group_classes", {}).items()
        }
        self._subjects: Dict[str, Row] = {s["id"]: dict(s) for s in fixture.get("subjects", [])}
        self._staff: Dict[str, Row] = {s["id"]: dict(s) for s in fixture.get("staff", [])}
        self._rows: List[Row] = []
        self._lock = threading.Lock()
        self.ledger = OccupancyLedger()
        self.audit: List[str] = []
        for row in fixture.get("slots", []):
            row = dict(row)
            row.setdefault("id", _new_id())
            self._rows.append(row)
            order = _row_order(row)
            if row.get("class_id") and order is not None and row.get("subject_id"):
                self.ledger.place(row.get("teacher_ids") or [], row["class_id"], row["day"], order)

    def _log(self, entry: str) -> None:
        self.audit.append(entry)
        logger.debug(f"memory backend: {entry}")

    # Reads

    def period_groups(self) -> List[Row]:
        with self._lock:
            self._log("GET period-groups")
            return copy.deepcopy(self._groups)

    def group_classes(self, group_id: str) -> List[Row]:
        with self._lock:
            self._log(f"GET period-groups/classes group_id={group_id}")
            ids = self._group_classes.get(group_id, [])
            return [dict(self._classes[c]) for c in ids if c in self._classes]

    def classes(self) -> List[Row]:
        with self._lock:
            self._log("GET classes")
            return [dict(c) for c in self._classes.values()]

    def subjects(self, class_id: str | None = None) -> List[Row]:
        with self._lock:
            self._log(f"GET subjects class_id={class_id}")
            out = []
            for s in self._subjects.values():
                scope = s.get("class_ids")
                if class_id is not None and scope and class_id not in scope:
                    continue
                out.append({"id": s["id"], "name": s.get("name"), "color": s.get("color")})
            return out

    def slots(self, class_id: str | None = None, teacher_id: str | None = None) -> List[Row]:
        with self._lock:
            self._log(f"GET slots class_id={class_id} teacher_id={teacher_id}")
            if class_id is not None:
                picked = [r for r in self._rows if r.get("class_id") == class_id]
            elif teacher_id is not None:
                picked = [
                    r
                    for r in self._rows
                    if r.get("class_id") and r.get("subject_id") and teacher_id in (r.get("teacher_ids") or [])
                ]
            else:
                picked = [r for r in self._rows if not r.get("class_id")]
            picked = sorted(picked, key=_sort_key)
            return [self._enrich(r, with_class=teacher_id is not None) for r in picked]

    def staff(self) -> List[Row]:
        with self._lock:
            self._log("GET staff")
            return [dict(s) for s in self._staff.values()]

    def download(self, class_id: str) -> bytes:
        with self._lock:
            self._log(f"GET download class_id={class_id}")
            if class_id not in self._classes:
                raise ApiError(404, "Class not found")
            buf = io.StringIO()
            writer = csv.writer(buf)
            writer.writerow(["Day", "Period", "Subject", "Teachers"])
            for r in sorted((r for r in self._rows if r.get("class_id") == class_id), key=_sort_key):
                subj = self._subjects.get(r.get("subject_id") or "", {}).get("name", "")
                names = [self._staff.get(t, {}).get("full_name", t) for t in r.get("teacher_ids") or []]
                writer.writerow([r.get("day"), _row_order(r), subj, "; ".join(names)])
            return buf.getvalue().encode("utf-8")

    # Writes

    def upsert_slot(self, payload: Row) -> Row:
        with self._lock:
            self._log(f"POST slots {payload.get('day')} {payload.get('period_order')} class_id={payload.get('class_id')}")
            day, order = self._validate(payload)
            class_id = payload.get("class_id")
            teacher_ids = list(payload.get("teacher_ids") or [])
            if teacher_ids and class_id:
                clashes = self.ledger.conflicts_for(teacher_ids, class_id, day, order)
                if clashes:
                    conflicts = [self._conflict_row(t, other) for t, other in clashes]
                    names = "\n".join(Conflict.from_api(c).describe() for c in conflicts)
                    logger.warning(f"Teacher conflict on {day} P{order}: {names}")
                    raise TeacherConflictError(
                        409,
                        "Teacher conflict detected",
                        [Conflict.from_api(c) for c in conflicts],
                        details="One or more teachers are already assigned to other classes at this time slot",
                        code=TEACHER_CONFLICT,
                    )
            existing = self._find(class_id, day, order)
            if existing is not None:
                self.ledger.remove(existing.get("teacher_ids") or [], class_id or "", day, order)
                row = existing
            else:
                row = {"id": _new_id(), "class_id": class_id, "day": day}
                self._rows.append(row)
            row.update(
                {
                    "period_order": order,
                    "period": str(order),
                    "subject_id": payload.get("subject_id") or None,
                    "teacher_ids": teacher_ids,
                    "teacher_id": teacher_ids[0] if teacher_ids else None,
                }
            )
            if "period_group_id" in payload:
                row["period_group_id"] = payload.get("period_group_id") or None
            if class_id and row["subject_id"]:
                self.ledger.place(teacher_ids, class_id, day, order)
            return {"data": self._enrich(row)}

    def clear_slot(self, class_id: str, day: str, period_order: int) -> Row:
        with self._lock:
            self._log(f"DELETE slots {day} {period_order} class_id={class_id}")
            if not day or not period_order:
                raise ApiError(400, "School code, day, and period (or period_order) are required")
            row = self._find(class_id, day, int(period_order))
            if row is None:
                return {"success": True, "message": "Slot already cleared"}
            self.ledger.remove(row.get("teacher_ids") or [], class_id, day, int(period_order))
            row.update({"subject_id": None, "teacher_ids": [], "teacher_id": None})
            return {"success": True}

    def dump(self) -> Dict[str, Any]:
        with self._lock:
            classes = list(self._classes.values())
            return {
                "school_code": self.school_code,
                "period_groups": copy.deepcopy(self._groups),
                "classes": copy.deepcopy(classes),
                "group_classes": copy.deepcopy(self._group_classes),
                "subjects": copy.deepcopy(list(self._subjects.values())),
                "staff": copy.deepcopy(list(self._staff.values())),
                "slots": copy.deepcopy(self._rows),
            }

    # Helpers

    def _validate(self, payload: Row) -> Tuple[str, int]:
        if payload.get("school_code") and payload["school_code"] != self.school_code:
            raise ApiError(404, "School not found")
        day = payload.get("day")
        order = _row_order(payload)
        if not day or order is None:
            raise ApiError(400, "School code, day, and period (or period_order) are required")
        if day not in DAYS:
            raise ApiError(400, f"Day must be one of: {', '.join(DAYS)}")
        if not MIN_PERIOD <= order <= MAX_PERIOD:
            raise ApiError(400, f"Period must be between {MIN_PERIOD} and {MAX_PERIOD}")
        group_id = payload.get("period_group_id")
        if group_id and not any(g.get("id") == group_id for g in self._groups):
            raise ApiError(400, "Period group not found or does not belong to this school")
        subject_id = payload.get("subject_id")
        if subject_id and subject_id not in self._subjects:
            raise ApiError(400, "Subject not found or does not belong to this school")
        class_id = payload.get("class_id")
        if class_id and class_id not in self._classes:
            raise ApiError(400, "Class not found or does not belong to this school")
        return day, order

    def _find(self, class_id: str | None, day: str, order: int) -> Row | None:
        for r in self._rows:
            if r.get("class_id") == class_id and r.get("day") == day and _row_order(r) == order:
                return r
        return None

    def _class_label(self, class_id: str) -> str:
        c = self._classes.get(class_id)
        if c is None:
            return "Unknown Class"
        return f"{c.get('class', '')}-{c.get('section', '')}"

    def _conflict_row(self, teacher_id: str, class_id: str) -> Row:
        return {
            "teacher_id": teacher_id,
            "teacher_name": self._staff.get(teacher_id, {}).get("full_name", "Unknown Teacher"),
            "class_id": class_id,
            "class_name": self._class_label(class_id),
        }

    def _enrich(self, row: Row, with_class: bool = False) -> Row:
        out = dict(row)
        out["teacher_ids"] = list(row.get("teacher_ids") or [])
        subj = self._subjects.get(row.get("subject_id") or "")
        if subj is not None:
            out["subject"] = {"id": subj["id"], "name": subj.get("name"), "color": subj.get("color")}
        out["teachers"] = [
            {
                "id": t,
                "full_name": self._staff.get(t, {}).get("full_name", ""),
                "staff_id": self._staff.get(t, {}).get("staff_id"),
            }
            for t in out["teacher_ids"]
        ]
        if with_class and row.get("class_id") in self._classes:
            c = self._classes[row["class_id"]]
            out["class_reference"] = {
                "class_id": c["id"],
                "class": c.get("class"),
                "section": c.get("section"),
                "academic_year": c.get("academic_year"),
            }
        return out


def _row_order(row: Row) -> int | None:
    for key in ("period_order", "period"):
        value = row.get(key)
        if value is None or value == "":
            continue
        try:
            return int(str(value))
        except ValueError:
            continue
    return None


def _sort_key(row: Row) -> Tuple[int, int]:
    day = row.get("day")
    order = _row_order(row)
    return (DAYS.index(day) if day in DAYS else len(DAYS), order if order is not None else MAX_PERIOD + 1)


def _new_id() -> str:
    return f"slot-{uuid.uuid4().hex[:12]}"
