from __future__ import annotations

import logging
from enum import Enum
from typing import Tuple

from .slots import SlotGrid, cell_key

logger = logging.getLogger(__name__)


class DropDecision(Enum):
    ACCEPT = "accept"
    REJECT = "reject"


def parse_target(target_id: str) -> Tuple[str, int] | None:
    # Droppable ids are "<day>-<period_order>"
    day, sep, order = str(target_id).rpartition("-")
    if not sep or not day:
        return None
    try:
        return day, int(order)
    except ValueError:
        return None


class DragDropController:
    """Maps drag gestures onto SlotGrid.assign; holds no business rules."""

    def __init__(self, grid: SlotGrid):
        self.grid = grid
        self.active_id: str | None = None

    def target_id(self, day: str, period_order: int) -> str:
        return cell_key(day, period_order)

    def on_drop_target(self, day: str, period_order: int) -> DropDecision:
        if self.grid.group.is_teaching(period_order):
            return DropDecision.ACCEPT
        return DropDecision.REJECT

    def drag_start(self, subject_id: str) -> None:
        self.active_id = subject_id

    def drag_end(self, target_id: str | None) -> bool:
        subject_id, self.active_id = self.active_id, None
        if subject_id is None or target_id is None:
            return False
        parsed = parse_target(target_id)
        if parsed is None:
            logger.debug(f"Ignored drop on unknown target {target_id!r}")
            return False
        day, order = parsed
        if self.on_drop_target(day, order) is DropDecision.REJECT:
            return False
        return self.grid.assign(day, order, subject_id)

    def drop(self, subject_id: str, target_id: str) -> bool:
        self.drag_start(subject_id)
        return self.drag_end(target_id)
