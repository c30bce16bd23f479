from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GridContext:
    """Acting school and staff member for every request the grid issues."""

    school_code: str
    staff_id: str | None = None
