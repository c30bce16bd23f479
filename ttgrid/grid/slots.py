from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from ..api.base import TimetableBackend
from ..api.errors import ApiError, GridStateError, TeacherConflictError, TransportError
from ..models.class_section import ClassSection
from ..models.conflict import Conflict
from ..models.context import GridContext
from ..models.period import PeriodGroup
from ..models.slot import TeacherRef, TimetableSlot
from ..models.timetable import Timetable

logger = logging.getLogger(__name__)

CLEAR_PROMPT = "Are you sure you want to remove this subject from the timetable?"

Confirm = Callable[[str], bool]


def cell_key(day: str, period_order: int) -> str:
    return f"{day}-{period_order}"


@dataclass
class SaveReport:
    class_label: str
    attempted: int
    saved: int
    missing: int
    conflicts: List[Tuple[str, Conflict]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        # Conflicts and unassigned periods do not block a partial save
        return not self.errors


class SlotGrid:
    """In-memory week grid of one class under one period group.

    The server is the only source of truth: every mutation is followed by a
    fresh read, and a failed read leaves the grid empty rather than showing a
    locally computed guess.
    """

    def __init__(
        self,
        backend: TimetableBackend,
        ctx: GridContext,
        group: PeriodGroup,
        klass: ClassSection,
        *,
        accept_legacy_period: bool = True,
        max_workers: int = 8,
    ):
        self.backend = backend
        self.ctx = ctx
        self.group = group
        self.klass = klass
        self.accept_legacy_period = accept_legacy_period
        self.max_workers = max_workers
        self.timetable = Timetable()
        self.rows: List[TimetableSlot] = []
        self.saving: str | None = None

    # Reads

    def load(self) -> Timetable:
        raw = self.backend.slots(class_id=self.klass.id)
        self.rows = [TimetableSlot.from_api(r, accept_legacy_period=self.accept_legacy_period) for r in raw]
        self.timetable = Timetable.from_slots(self.rows)
        if self.timetable.unpositioned:
            logger.warning(
                f"{len(self.timetable.unpositioned)} slot(s) of {self.klass.label} have no usable period order"
            )
        logger.info(f"Loaded {len(self.rows)} slot(s) for {self.klass.label}")
        return self.timetable

    def refresh(self) -> None:
        try:
            self.load()
        except (ApiError, TransportError) as exc:
            logger.error(f"Could not reload slots for {self.klass.label}: {exc}")
            self.rows = []
            self.timetable = Timetable()

    def get(self, day: str, period_order: int) -> TimetableSlot | None:
        return self.timetable.get(day, period_order)

    def missing_count(self) -> int:
        return self.group.total_cells() - len(self.timetable.populated())

    # Mutations

    def assign(self, day: str, period_order: int, subject_id: str) -> bool:
        """Drop ``subject_id`` on a cell, replacing whatever it held.

        Returns False without any request when the cell is a break or not a
        period of the active group.
        """
        if not self.group.is_teaching(period_order):
            logger.debug(f"Ignored drop on {cell_key(day, period_order)}: not a teaching period")
            return False
        payload = self._payload(day, period_order, subject_id)
        self.saving = cell_key(day, period_order)
        try:
            self.backend.upsert_slot(payload)
        except TransportError:
            self.refresh()
            raise
        except ApiError as exc:
            logger.error(f"Failed to save slot {self.saving}: {exc.describe()}")
            self.refresh()
            raise
        finally:
            self.saving = None
        logger.info(f"Assigned subject {subject_id} to {self.klass.label} {day} P{period_order}")
        self.refresh()
        return True

    def clear(self, day: str, period_order: int, confirm: Confirm) -> bool:
        if not confirm(CLEAR_PROMPT):
            return False
        self.saving = cell_key(day, period_order)
        self.timetable.remove(day, period_order)
        try:
            self.backend.clear_slot(self.klass.id, day, period_order)
            logger.info(f"Cleared {self.klass.label} {day} P{period_order}")
        except (ApiError, TransportError) as exc:
            logger.error(f"Failed to clear slot {self.saving}: {exc}")
            raise
        finally:
            self.saving = None
            self.refresh()
        return True

    def assign_teachers(self, day: str, period_order: int, teacher_ids: List[str]) -> TimetableSlot:
        slot = self.get(day, period_order)
        if slot is None or not slot.occupied:
            raise GridStateError(f"No subject at {day} period {period_order}; drop a subject first")
        payload = self._payload(day, period_order, slot.subject_id, teacher_ids)
        self.saving = cell_key(day, period_order)
        try:
            body = self.backend.upsert_slot(payload)
        except TeacherConflictError as exc:
            logger.warning(f"Teacher conflict at {self.saving}: {[c.describe() for c in exc.conflicts]}")
            raise
        except TransportError:
            self.refresh()
            raise
        finally:
            self.saving = None
        echoed = (body.get("data") or {}).get("teachers") or []
        slot.teacher_ids = list(teacher_ids)
        slot.teachers = [TeacherRef.from_api(t) for t in echoed]
        logger.info(f"Assigned {len(teacher_ids)} teacher(s) to {self.klass.label} {day} P{period_order}")
        return slot

    def save_all(self) -> SaveReport:
        """Re-submit every subject-bearing cell concurrently and summarise."""
        todo = self.timetable.populated()
        if not todo:
            raise GridStateError("No subjects assigned to save. Please add subjects to the timetable first.")
        report = SaveReport(
            class_label=self.klass.label,
            attempted=len(todo),
            saved=0,
            missing=self.group.total_cells() - len(todo),
        )
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            outcomes = list(pool.map(self._save_cell, todo))
        transport = [o for o in outcomes if isinstance(o, TransportError)]
        if transport:
            logger.error(f"Save of {self.klass.label} aborted: {len(transport)} cell(s) unreachable")
            self.refresh()
            raise TransportError("Failed to save timetable. Please check your connection and try again.", transport[0])
        for slot, outcome in zip(todo, outcomes):
            where = f"{slot.day}, Period {slot.period_order}"
            if isinstance(outcome, TeacherConflictError):
                found = outcome.conflicts or [Conflict(teacher_name="Unknown", class_name=where)]
                report.conflicts.extend((where, c) for c in found)
            elif isinstance(outcome, ApiError):
                report.errors.append(f"{where}: {outcome.message}")
            else:
                report.saved += 1
                for c in outcome.get("conflicts") or []:
                    report.conflicts.append((where, Conflict.from_api(c)))
        logger.info(
            f"Saved {report.saved}/{report.attempted} cell(s) for {report.class_label}; "
            f"{len(report.conflicts)} conflict(s), {len(report.errors)} error(s), {report.missing} unassigned"
        )
        self.refresh()
        return report

    # Helpers

    def _save_cell(self, slot: TimetableSlot) -> Dict[str, Any] | ApiError | TransportError:
        payload = self._payload(slot.day, slot.period_order, slot.subject_id, slot.teacher_ids)
        try:
            return self.backend.upsert_slot(payload)
        except (ApiError, TransportError) as exc:
            return exc

    def _payload(
        self, day: str, period_order: int, subject_id: str | None, teacher_ids: List[str] | None = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "school_code": self.ctx.school_code,
            "class_id": self.klass.id,
            "day": day,
            "period_order": period_order,
            "subject_id": subject_id,
            "period_group_id": self.group.id,
        }
        if teacher_ids is not None:
            payload["teacher_ids"] = list(teacher_ids)
        return payload
