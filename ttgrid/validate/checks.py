from __future__ import annotations

from collections import Counter, defaultdict
from typing import Dict, List

from ..models.period import PeriodGroup
from ..models.slot import TimetableSlot


def check_grid(rows: List[TimetableSlot], group: PeriodGroup) -> Dict[str, object]:
    """Local consistency report for the slots of one class."""
    report: Dict[str, object] = {}
    violations: Dict[str, List[str]] = defaultdict(list)
    days = set(group.selected_days)

    coords: Counter = Counter()
    teacher_cells: Counter = Counter()
    for s in rows:
        if s.period_order is None:
            violations["unpositioned"].append(f"{s.day} period={s.legacy_period!r}")
            continue
        where = f"{s.day} P{s.period_order}"
        coords[(s.day, s.period_order)] += 1
        if not s.occupied:
            continue
        period = group.period_at(s.period_order)
        if period is None:
            violations["unknown_period"].append(where)
        elif period.is_break:
            violations["subject_on_break"].append(where)
        if s.day not in days:
            violations["day_outside_group"].append(where)
        for t in set(s.teacher_ids):
            teacher_cells[(t, s.day, s.period_order)] += 1

    for (day, order), n in coords.items():
        if n > 1:
            violations["duplicate_cell"].append(f"{day} P{order} x{n}")
    for (t, day, order), n in teacher_cells.items():
        if n > 1:
            violations["teacher_double_booked"].append(f"{t} {day} P{order}")

    occupied = {(s.day, s.period_order) for s in rows if s.occupied and s.period_order is not None}
    missing: List[str] = []
    for day in group.selected_days:
        for p in group.teaching_periods():
            if (day, p.period_order) not in occupied:
                missing.append(f"{day} P{p.period_order}")

    report["total_cells"] = group.total_cells()
    report["assigned_cells"] = group.total_cells() - len(missing)
    report["missing_cells"] = missing
    report["violations_by_rule"] = dict(violations)
    return report
