from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict

import pytest

from ttgrid.api.memory import InMemoryBackend
from ttgrid.data.loader import load_fixture
from ttgrid.grid.workspace import ClassTimetableWorkspace
from ttgrid.models.context import GridContext

ROOT = Path(__file__).resolve().parents[1]
_FIXTURE = load_fixture(ROOT)


def two_day_fixture() -> Dict[str, Any]:
    """Mon/Tue, two teaching periods with a break after period 1."""
    return {
        "school_code": "S1",
        "period_groups": [
            {
                "id": "pg",
                "group_name": "Main",
                "is_active": True,
                "selected_days": ["Monday", "Tuesday"],
                "periods": [
                    {"id": "p1", "period_name": "P1", "period_order": 1, "period_start_time": "08:00", "period_end_time": "08:45"},
                    {"id": "b", "period_name": "Break", "period_order": 2, "is_break": True, "period_start_time": "08:45", "period_end_time": "09:00"},
                    {"id": "p2", "period_name": "P2", "period_order": 3, "period_start_time": "09:00", "period_end_time": "09:45"},
                ],
            }
        ],
        "classes": [
            {"id": "A", "class": "5", "section": "A"},
            {"id": "B", "class": "5", "section": "B"},
        ],
        "group_classes": {"pg": ["A", "B"]},
        "subjects": [{"id": "math", "name": "Math", "color": "#111111"}, {"id": "art", "name": "Art"}],
        "staff": [{"id": "T", "full_name": "Teacher T", "role": "Teacher"}],
        "slots": [],
    }


@pytest.fixture
def fixture_data() -> Dict[str, Any]:
    return copy.deepcopy(_FIXTURE)


@pytest.fixture
def backend(fixture_data: Dict[str, Any]) -> InMemoryBackend:
    return InMemoryBackend(fixture_data)


@pytest.fixture
def ctx() -> GridContext:
    return GridContext(school_code=_FIXTURE["school_code"], staff_id="admin-1")


@pytest.fixture
def workspace(backend: InMemoryBackend, ctx: GridContext) -> ClassTimetableWorkspace:
    ws = ClassTimetableWorkspace(backend, ctx)
    ws.open()
    ws.select_class("10", "A")
    return ws


@pytest.fixture
def small_backend() -> InMemoryBackend:
    return InMemoryBackend(two_day_fixture())


@pytest.fixture
def small_workspace(small_backend: InMemoryBackend) -> ClassTimetableWorkspace:
    ws = ClassTimetableWorkspace(small_backend, GridContext(school_code="S1"))
    ws.open()
    ws.select_class("5", "A")
    return ws
