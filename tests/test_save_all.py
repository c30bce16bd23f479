from __future__ import annotations

import pytest

from ttgrid.api.errors import ApiError, GridStateError, TeacherConflictError, TransportError
from ttgrid.api.memory import InMemoryBackend
from ttgrid.grid.workspace import ClassTimetableWorkspace
from ttgrid.models.conflict import Conflict
from ttgrid.validate.report import format_save_report


def test_clean_save_counts_saved_and_missing(workspace: ClassTimetableWorkspace) -> None:
    grid = workspace.require_grid()
    report = grid.save_all()
    # 5 days x 4 teaching periods, two populated cells
    assert report.success
    assert (report.attempted, report.saved, report.missing) == (2, 2, 18)
    assert report.conflicts == [] and report.errors == []
    text = format_save_report(report)
    assert "Timetable for class 10-A is saved" in text
    assert "18 period(s) are not yet assigned" in text


def test_save_with_nothing_assigned_is_refused(small_workspace: ClassTimetableWorkspace) -> None:
    with pytest.raises(GridStateError):
        small_workspace.require_grid().save_all()


def test_partial_failure_and_conflicts_are_reported_separately(
    workspace: ClassTimetableWorkspace, backend: InMemoryBackend, monkeypatch
) -> None:
    grid = workspace.require_grid()
    grid.assign("Tuesday", 1, "sub-sci")
    real = backend.upsert_slot

    def flaky(payload):
        if payload["day"] == "Monday" and payload["period_order"] == 2:
            raise TeacherConflictError(409, "Teacher conflict detected", [Conflict("Harriet Akasraku", "10-B")])
        if payload["day"] == "Tuesday":
            raise ApiError(500, "Failed to update timetable slot")
        return real(payload)

    monkeypatch.setattr(backend, "upsert_slot", flaky)
    report = grid.save_all()
    assert not report.success
    assert report.saved == 1
    assert report.errors == ["Tuesday, Period 1: Failed to update timetable slot"]
    assert [(w, c.teacher_name) for w, c in report.conflicts] == [("Monday, Period 2", "Harriet Akasraku")]
    text = format_save_report(report)
    assert text.startswith("Some slots failed to save:")
    assert "Harriet Akasraku is already assigned to 10-B" in text


def test_conflicts_alone_still_count_as_success(workspace: ClassTimetableWorkspace, backend: InMemoryBackend, monkeypatch) -> None:
    grid = workspace.require_grid()

    def conflicted(payload):
        raise TeacherConflictError(409, "Teacher conflict detected", [])

    monkeypatch.setattr(backend, "upsert_slot", conflicted)
    report = grid.save_all()
    assert report.success and report.saved == 0
    assert len(report.conflicts) == 2
    assert all(c.teacher_name == "Unknown" for _, c in report.conflicts)


def test_transport_failure_aborts_and_reloads(workspace: ClassTimetableWorkspace, backend: InMemoryBackend, monkeypatch) -> None:
    grid = workspace.require_grid()
    real = backend.upsert_slot

    def half_down(payload):
        if payload["period_order"] == 2:
            raise TransportError("offline")
        return real(payload)

    monkeypatch.setattr(backend, "upsert_slot", half_down)
    with pytest.raises(TransportError):
        grid.save_all()
    assert grid.timetable.occupied("Monday", 1) and grid.timetable.occupied("Monday", 2)


def test_save_resubmits_teacher_sets(workspace: ClassTimetableWorkspace, backend: InMemoryBackend, monkeypatch) -> None:
    grid = workspace.require_grid()
    seen = []
    real = backend.upsert_slot

    def spy(payload):
        seen.append((payload["day"], payload["period_order"], tuple(payload["teacher_ids"])))
        return real(payload)

    monkeypatch.setattr(backend, "upsert_slot", spy)
    grid.save_all()
    assert sorted(seen) == [("Monday", 1, ("t-anita",)), ("Monday", 2, ("t-harriet",))]


def _reads(backend: InMemoryBackend) -> int:
    return sum(1 for a in backend.audit if a.startswith("GET slots"))


def test_failed_save_still_reloads_from_server(
    workspace: ClassTimetableWorkspace, backend: InMemoryBackend, monkeypatch
) -> None:
    grid = workspace.require_grid()
    real = backend.upsert_slot

    def partly_broken(payload):
        if payload["period_order"] == 2:
            raise ApiError(500, "Failed to update timetable slot")
        # Server links a teacher on its own while saving
        return real({**payload, "teacher_ids": ["t-isaac"]})

    monkeypatch.setattr(backend, "upsert_slot", partly_broken)
    reads = _reads(backend)
    report = grid.save_all()
    assert not report.success
    assert _reads(backend) == reads + 1
    assert grid.get("Monday", 1).teacher_ids == ["t-isaac"]


def test_accepted_save_with_conflict_warnings(
    workspace: ClassTimetableWorkspace, backend: InMemoryBackend, monkeypatch
) -> None:
    grid = workspace.require_grid()
    real = backend.upsert_slot

    def warned(payload):
        body = real(payload)
        if payload["period_order"] == 1:
            body["conflicts"] = [{"teacher_name": "Anita Rao", "class_name": "10-B"}]
        return body

    monkeypatch.setattr(backend, "upsert_slot", warned)
    report = grid.save_all()
    assert report.success and report.saved == 2
    assert [(w, c.describe()) for w, c in report.conflicts] == [
        ("Monday, Period 1", "Anita Rao is already assigned to 10-B")
    ]
    text = format_save_report(report)
    assert "Anita Rao is already assigned to 10-B at the same time (Monday, Period 1)" in text
