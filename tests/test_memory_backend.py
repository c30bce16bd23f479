from __future__ import annotations

import pytest

from ttgrid.api.errors import ApiError, TeacherConflictError
from ttgrid.api.memory import InMemoryBackend


def _post(backend: InMemoryBackend, **kw):
    payload = {"school_code": backend.school_code, "period_group_id": "pg-senior"}
    payload.update(kw)
    return backend.upsert_slot(payload)


def test_upsert_without_teachers_replaces_teacher_set(backend: InMemoryBackend) -> None:
    _post(backend, class_id="c-10a", day="Monday", period_order=1, subject_id="sub-sci")
    row = next(r for r in backend.slots(class_id="c-10a") if r["period_order"] == 1 and r["day"] == "Monday")
    assert row["subject_id"] == "sub-sci"
    assert row["teacher_ids"] == []


def test_teacher_conflict_across_classes(backend: InMemoryBackend) -> None:
    _post(backend, class_id="c-10b", day="Monday", period_order=1, subject_id="sub-eng")
    with pytest.raises(TeacherConflictError) as info:
        _post(backend, class_id="c-10b", day="Monday", period_order=1, subject_id="sub-eng", teacher_ids=["t-anita"])
    assert [(c.teacher_name, c.class_name) for c in info.value.conflicts] == [("Anita Rao", "10-A")]
    row = next(r for r in backend.slots(class_id="c-10b") if r["day"] == "Monday" and r["period_order"] == 1)
    assert row["teacher_ids"] == []


def test_same_teacher_same_class_is_not_a_conflict(backend: InMemoryBackend) -> None:
    body = _post(backend, class_id="c-10a", day="Monday", period_order=1, subject_id="sub-math", teacher_ids=["t-anita"])
    assert body["data"]["teachers"][0]["full_name"] == "Anita Rao"


def test_clear_keeps_row_but_empties_it(backend: InMemoryBackend) -> None:
    backend.clear_slot("c-10a", "Monday", 1)
    row = next(r for r in backend.slots(class_id="c-10a") if r["day"] == "Monday" and r["period_order"] == 1)
    assert row["subject_id"] is None and row["teacher_ids"] == []
    # Teacher is free again for other classes
    assert backend.ledger.conflicts_for(["t-anita"], "c-10b", "Monday", 1) == []


def test_clear_missing_slot_succeeds(backend: InMemoryBackend) -> None:
    assert backend.clear_slot("c-9a", "Friday", 5)["success"] is True


@pytest.mark.parametrize(
    "kw, message",
    [
        ({"day": "Sunday", "period_order": 1}, "Day must be one of"),
        ({"day": "Monday", "period_order": 21}, "Period must be between"),
        ({"day": "Monday", "period_order": 1, "subject_id": "nope"}, "Subject not found"),
        ({"day": "Monday", "period_order": 1, "period_group_id": "nope"}, "Period group not found"),
    ],
)
def test_upsert_validation(backend: InMemoryBackend, kw, message) -> None:
    with pytest.raises(ApiError) as info:
        _post(backend, class_id="c-10a", **kw)
    assert info.value.status == 400
    assert message in info.value.message


def test_teacher_slots_carry_class_reference(backend: InMemoryBackend) -> None:
    rows = backend.slots(teacher_id="t-anita")
    assert [(r["day"], r["period_order"]) for r in rows] == [("Monday", 1)]
    assert rows[0]["class_reference"]["section"] == "A"


def test_subjects_scoped_to_class(backend: InMemoryBackend) -> None:
    names_9a = {s["name"] for s in backend.subjects("c-9a")}
    names_all = {s["name"] for s in backend.subjects()}
    assert "Computer Science" not in names_9a
    assert "Computer Science" in names_all


def test_dump_round_trips_state(backend: InMemoryBackend) -> None:
    _post(backend, class_id="c-9a", day="Friday", period_order=5, subject_id="sub-hist")
    again = InMemoryBackend(backend.dump())
    rows = again.slots(class_id="c-9a")
    assert [(r["day"], r["period_order"], r["subject_id"]) for r in rows] == [("Friday", 5, "sub-hist")]
