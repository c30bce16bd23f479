from __future__ import annotations

import logging
from typing import List

from ..api.base import TimetableBackend
from ..models.class_section import ClassSection
from ..models.period import PeriodGroup

logger = logging.getLogger(__name__)


class ClassRosterResolver:
    """Turns a (class name, section) pick into one ClassSection of the roster.

    The roster is the set of classes assigned to the active period group, or
    every class of the school when no group is active. Changing the roster
    always drops the current pick.
    """

    def __init__(self, backend: TimetableBackend):
        self.backend = backend
        self.classes: List[ClassSection] = []
        self.class_name: str = ""
        self.section: str = ""

    def load_for_group(self, group: PeriodGroup | None) -> List[ClassSection]:
        rows = self.backend.group_classes(group.id) if group is not None else self.backend.classes()
        self.classes = [ClassSection.from_api(r) for r in rows]
        self.reset()
        logger.info(f"Roster has {len(self.classes)} class(es) for group {group.name if group else '*'}")
        return self.classes

    def reset(self) -> None:
        self.class_name = ""
        self.section = ""

    def class_names(self) -> List[str]:
        seen: List[str] = []
        for c in self.classes:
            if c.name not in seen:
                seen.append(c.name)
        return seen

    def sections_for(self, class_name: str) -> List[str]:
        return sorted({c.section for c in self.classes if c.name == class_name and c.section})

    def select_class_name(self, class_name: str) -> None:
        self.class_name = class_name
        self.section = ""

    def select_section(self, section: str) -> ClassSection | None:
        self.section = section
        return self.resolved

    @property
    def resolved(self) -> ClassSection | None:
        if not self.class_name or not self.section:
            return None
        for c in self.classes:
            if c.name == self.class_name and c.section == self.section:
                return c
        return None

    def select_initial(
        self,
        class_id: str | None = None,
        class_name: str | None = None,
        section: str | None = None,
    ) -> ClassSection | None:
        """Apply a requested class up front, widening to the whole school if needed."""
        if not class_id and not (class_name and section):
            return None
        found = self._find(self.classes, class_id, class_name, section)
        if found is None:
            everyone = [ClassSection.from_api(r) for r in self.backend.classes()]
            found = self._find(everyone, class_id, class_name, section)
            if found is not None:
                logger.info(f"Class {found.label} is outside the group roster; using the school list")
                self.classes = everyone
        if found is None:
            logger.warning(f"Requested class not found (id={class_id}, class={class_name}, section={section})")
            return None
        self.class_name = found.name
        self.section = found.section
        return self.resolved

    @staticmethod
    def _find(
        pool: List[ClassSection], class_id: str | None, class_name: str | None, section: str | None
    ) -> ClassSection | None:
        if class_id:
            for c in pool:
                if c.id == class_id:
                    return c
        if class_name and section:
            for c in pool:
                if c.name == class_name and c.section == section:
                    return c
        return None
