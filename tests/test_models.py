from __future__ import annotations

import pytest

from ttgrid.models import ClassSection, Conflict, PeriodGroup, Timetable, TimetableSlot


def _group(periods):
    return PeriodGroup.from_api(
        {"id": "g", "group_name": "G", "selected_days": ["Monday", "Tuesday"], "periods": periods}
    )


def test_period_group_sorts_and_counts_teaching_cells() -> None:
    g = _group(
        [
            {"id": "c", "period_order": 3},
            {"id": "a", "period_order": 1},
            {"id": "b", "period_order": 2, "is_break": True},
        ]
    )
    assert [p.period_order for p in g.periods] == [1, 2, 3]
    assert g.is_teaching(1) and not g.is_teaching(2) and not g.is_teaching(9)
    assert g.total_cells() == 4


def test_period_group_rejects_duplicate_order() -> None:
    with pytest.raises(ValueError):
        _group([{"id": "a", "period_order": 1}, {"id": "b", "period_order": 1}])


def test_legacy_period_is_coerced() -> None:
    s = TimetableSlot.from_api({"day": "Monday", "period": "4", "subject_id": "x"})
    assert s.period_order == 4
    assert s.occupied


def test_legacy_period_can_be_refused() -> None:
    s = TimetableSlot.from_api({"day": "Monday", "period": "4"}, accept_legacy_period=False)
    assert s.period_order is None


def test_unusable_order_is_kept_but_unpositioned() -> None:
    s = TimetableSlot.from_api({"day": "Monday", "period": "after lunch", "subject_id": "x"})
    tt = Timetable.from_slots([s])
    assert len(tt) == 0
    assert tt.unpositioned == [s]


def test_single_teacher_id_becomes_teacher_set() -> None:
    s = TimetableSlot.from_api({"day": "Monday", "period_order": 1, "teacher_id": "t1"})
    assert s.teacher_ids == ["t1"]
    assert not s.occupied


def test_conflict_accepts_both_payload_shapes() -> None:
    a = Conflict.from_api({"teacherId": "t", "teacherName": "T", "className": "5-A"})
    b = Conflict.from_api({"teacher_id": "t", "teacher_name": "T", "class_id": "A", "class_name": "5-A"})
    assert (a.teacher_name, a.class_name) == (b.teacher_name, b.class_name)
    assert b.describe() == "T is already assigned to 5-A"


def test_class_label() -> None:
    assert ClassSection.from_api({"id": "1", "class": "10", "section": "B"}).label == "10-B"
    assert ClassSection.from_api({"id": "1", "class": "Nursery"}).label == "Nursery"


def test_empty_duplicate_row_does_not_hide_subject() -> None:
    rows = [
        TimetableSlot.from_api({"day": "Monday", "period_order": 1, "subject_id": "math"}),
        TimetableSlot.from_api({"day": "Monday", "period": "1", "subject_id": None}),
    ]
    tt = Timetable.from_slots(rows)
    assert tt.get("Monday", 1).subject_id == "math"
    assert [s.subject_id for s in tt.populated()] == ["math"]


def test_occupied_row_replaces_earlier_empty_one() -> None:
    rows = [
        TimetableSlot.from_api({"day": "Monday", "period_order": 1, "subject_id": None}),
        TimetableSlot.from_api({"day": "Monday", "period_order": 1, "subject_id": "art"}),
        TimetableSlot.from_api({"day": "Monday", "period_order": 1, "subject_id": "math"}),
    ]
    tt = Timetable.from_slots(rows)
    assert tt.get("Monday", 1).subject_id == "art"
    assert len(tt) == 1
