from __future__ import annotations

import logging
from typing import Callable, List

from ..api.base import TimetableBackend
from ..api.errors import GridStateError
from ..models.period import PeriodGroup

logger = logging.getLogger(__name__)

Listener = Callable[[PeriodGroup | None], None]


class PeriodGroupStore:
    """Holds the school's period groups and the single active one."""

    def __init__(self, backend: TimetableBackend):
        self.backend = backend
        self.groups: List[PeriodGroup] = []
        self.active: PeriodGroup | None = None
        self._listeners: List[Listener] = []

    def subscribe(self, fn: Listener) -> None:
        self._listeners.append(fn)

    def load(self) -> PeriodGroup | None:
        self.groups = [PeriodGroup.from_api(r) for r in self.backend.period_groups()]
        logger.info(f"Loaded {len(self.groups)} period group(s)")
        if not self.groups:
            self._set(None)
            return None
        chosen = next((g for g in self.groups if g.is_active), self.groups[0])
        self._set(chosen)
        return chosen

    def select(self, group_id: str) -> PeriodGroup:
        for g in self.groups:
            if g.id == group_id or g.name == group_id:
                self._set(g)
                return g
        raise GridStateError(f"Unknown period group: {group_id}")

    def require(self) -> PeriodGroup:
        if self.active is None:
            raise GridStateError("No period group selected")
        return self.active

    def _set(self, group: PeriodGroup | None) -> None:
        self.active = group
        logger.info(f"Active period group: {group.name if group else None}")
        for fn in self._listeners:
            fn(group)
