from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List

Row = Dict[str, Any]


class TimetableBackend(ABC):
    """JSON contract of the timetable API, as consumed by the grid.

    Read methods return the ``data`` rows of the response. ``upsert_slot``
    returns the whole success body so callers can see echoed teachers and
    any ``conflicts`` warnings. Failures raise ``ApiError`` subclasses or
    ``TransportError``.
    """

    @abstractmethod
    def period_groups(self) -> List[Row]: ...

    @abstractmethod
    def group_classes(self, group_id: str) -> List[Row]: ...

    @abstractmethod
    def classes(self) -> List[Row]: ...

    @abstractmethod
    def subjects(self, class_id: str | None = None) -> List[Row]: ...

    @abstractmethod
    def slots(self, class_id: str | None = None, teacher_id: str | None = None) -> List[Row]: ...

    @abstractmethod
    def upsert_slot(self, payload: Row) -> Row: ...

    @abstractmethod
    def clear_slot(self, class_id: str, day: str, period_order: int) -> Row: ...

    @abstractmethod
    def staff(self) -> List[Row]: ...

    @abstractmethod
    def download(self, class_id: str) -> bytes: ...
