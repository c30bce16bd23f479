from __future__ import annotations

import pytest

from ttgrid.api.errors import GridStateError, TransportError
from ttgrid.api.memory import InMemoryBackend
from ttgrid.grid.workspace import ClassTimetableWorkspace


def test_editor_lists_teaching_staff_and_existing_pick(workspace: ClassTimetableWorkspace) -> None:
    ed = workspace.editor()
    ed.open("Monday", 1)
    assert ed.is_open
    assert ed.selected == {"t-anita"}
    names = [r.full_name for r in ed.visible()]
    assert "Mark Mossie" not in names
    assert "Isaac Appiah" in names


def test_editor_search(workspace: ClassTimetableWorkspace) -> None:
    ed = workspace.editor()
    ed.open("Monday", 1)
    assert [r.id for r in ed.search("emp002")] == ["t-cyril"]
    assert [r.id for r in ed.search("LANGUAGES")] == ["t-harriet"]
    assert len(ed.search("  ")) == 4


def test_editor_needs_occupied_cell(workspace: ClassTimetableWorkspace) -> None:
    with pytest.raises(GridStateError):
        workspace.editor().open("Friday", 5)


def test_successful_save_closes_editor(workspace: ClassTimetableWorkspace) -> None:
    ed = workspace.editor()
    ed.open("Monday", 1)
    ed.toggle("t-isaac")
    assert ed.save() is True
    assert not ed.is_open
    assert workspace.grid.get("Monday", 1).teacher_ids == ["t-anita", "t-isaac"]


def test_conflict_keeps_editor_open_and_cell_unchanged(backend: InMemoryBackend, ctx) -> None:
    ws = ClassTimetableWorkspace(backend, ctx)
    ws.open()
    ws.select_class("10", "B")
    ed = ws.editor()
    ed.open("Monday", 2)
    ed.toggle("t-harriet")
    assert ed.save() is False
    assert ed.is_open
    assert [(c.teacher_name, c.class_name) for c in ed.conflicts] == [("Harriet Akasraku", "10-A")]
    assert "Harriet Akasraku is already assigned to 10-A" in ed.message
    assert ws.grid.get("Monday", 2).teacher_ids == ["t-cyril"]


def test_transport_failure_keeps_editor_open(workspace: ClassTimetableWorkspace, backend: InMemoryBackend, monkeypatch) -> None:
    ed = workspace.editor()
    ed.open("Monday", 1)

    def down(payload):
        raise TransportError("offline")

    monkeypatch.setattr(backend, "upsert_slot", down)
    assert ed.save() is False
    assert ed.is_open
    assert ed.message == "Failed to save teachers. Please try again."
