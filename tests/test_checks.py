from __future__ import annotations

import json
from pathlib import Path

from ttgrid.models.period import PeriodGroup
from ttgrid.models.slot import TimetableSlot
from ttgrid.validate.checks import check_grid
from ttgrid.validate.report import format_grid_report, write_report


def _group() -> PeriodGroup:
    return PeriodGroup.from_api(
        {
            "id": "g",
            "group_name": "G",
            "selected_days": ["Monday", "Tuesday"],
            "periods": [
                {"id": "1", "period_order": 1},
                {"id": "2", "period_order": 2, "is_break": True},
                {"id": "3", "period_order": 3},
            ],
        }
    )


def _slot(day, order, subject="m", teachers=(), period=None):
    return TimetableSlot(day=day, period_order=order, subject_id=subject, teacher_ids=list(teachers), legacy_period=period)


def test_clean_grid_reports_only_missing_cells() -> None:
    report = check_grid([_slot("Monday", 1), _slot("Tuesday", 3)], _group())
    assert report["total_cells"] == 4
    assert report["assigned_cells"] == 2
    assert report["missing_cells"] == ["Monday P3", "Tuesday P1"]
    assert report["violations_by_rule"] == {}


def test_violations_are_grouped_by_rule(tmp_path: Path) -> None:
    rows = [
        _slot("Monday", 2),
        _slot("Monday", 1, teachers=["T"]),
        _slot("Monday", 1, teachers=["T"]),
        _slot("Sunday", 3),
        _slot("Tuesday", None, period="late"),
    ]
    report = check_grid(rows, _group())
    v = report["violations_by_rule"]
    assert v["subject_on_break"] == ["Monday P2"]
    assert v["duplicate_cell"] == ["Monday P1 x2"]
    assert v["teacher_double_booked"] == ["T Monday P1"]
    assert v["day_outside_group"] == ["Sunday P3"]
    assert v["unpositioned"] == ["Tuesday period='late'"]
    text = format_grid_report(report)
    assert "  - subject_on_break: 1" in text
    path = write_report(report, tmp_path)
    assert json.loads(path.read_text(encoding="utf-8"))["total_cells"] == 4
