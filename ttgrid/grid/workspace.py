from __future__ import annotations

import logging
from typing import List

from ..api.base import TimetableBackend
from ..api.errors import GridStateError
from ..data.loader import GridConfig
from ..models.class_section import ClassSection
from ..models.context import GridContext
from ..models.period import PeriodGroup
from ..models.subject import Subject
from .dragdrop import DragDropController
from .editor import TeacherEditor
from .roster import ClassRosterResolver
from .slots import SlotGrid
from .store import PeriodGroupStore

logger = logging.getLogger(__name__)


class ClassTimetableWorkspace:
    """Wires store, roster, subjects and grid together for one class page.

    Switching period group resets the class pick and drops the grid; a new
    SlotGrid is built and loaded every time the pick resolves to a class.
    """

    def __init__(self, backend: TimetableBackend, ctx: GridContext, config: GridConfig | None = None):
        self.backend = backend
        self.ctx = ctx
        self.config = config or GridConfig(school_code=ctx.school_code, staff_id=ctx.staff_id)
        self.store = PeriodGroupStore(backend)
        self.roster = ClassRosterResolver(backend)
        self.subjects: List[Subject] = []
        self.grid: SlotGrid | None = None
        self.dragdrop: DragDropController | None = None
        self.store.subscribe(self._on_group)

    def open(self) -> PeriodGroup | None:
        return self.store.load()

    def select_group(self, group_id: str) -> PeriodGroup:
        return self.store.select(group_id)

    def select_class(self, class_name: str, section: str) -> ClassSection | None:
        self.roster.select_class_name(class_name)
        self.roster.select_section(section)
        return self._on_class()

    def select_initial(
        self, class_id: str | None = None, class_name: str | None = None, section: str | None = None
    ) -> ClassSection | None:
        if self.roster.select_initial(class_id, class_name, section) is None:
            return None
        return self._on_class()

    def require_grid(self) -> SlotGrid:
        if self.grid is None:
            raise GridStateError("Please select a class first")
        return self.grid

    def editor(self) -> TeacherEditor:
        return TeacherEditor(self.require_grid())

    def refresh_subjects(self) -> List[Subject]:
        klass = self.roster.resolved
        rows = self.backend.subjects(klass.id if klass else None)
        self.subjects = [Subject.from_api(r) for r in rows]
        return self.subjects

    def subject_by_name(self, name: str) -> Subject | None:
        for s in self.subjects:
            if s.id == name or s.name.lower() == name.lower():
                return s
        return None

    def _on_group(self, group: PeriodGroup | None) -> None:
        self._drop_grid()
        self.roster.load_for_group(group)
        if group is not None:
            self.refresh_subjects()

    def _on_class(self) -> ClassSection | None:
        self._drop_grid()
        klass = self.roster.resolved
        group = self.store.active
        if klass is None or group is None:
            logger.info("Class pick unresolved; grid disabled")
            return klass
        self.grid = SlotGrid(
            self.backend,
            self.ctx,
            group,
            klass,
            accept_legacy_period=self.config.accept_legacy_period,
            max_workers=self.config.max_workers,
        )
        self.dragdrop = DragDropController(self.grid)
        self.refresh_subjects()
        self.grid.load()
        return klass

    def _drop_grid(self) -> None:
        self.grid = None
        self.dragdrop = None
