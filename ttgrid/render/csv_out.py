from __future__ import annotations

from pathlib import Path
from typing import List

from ..grid.teacher_view import TeacherTimetable
from ..models.class_section import ClassSection
from ..models.period import PeriodGroup
from ..models.timetable import Timetable

HEADER = "Class,Day,PeriodStart,PeriodEnd,Subject,Teachers"
TEACHER_HEADER = "Teacher,Day,PeriodStart,PeriodEnd,Subject,Class"


def _cell(text: str) -> str:
    # Teacher names may carry commas or quotes
    if any(ch in text for ch in ',"\n'):
        return '"' + text.replace('"', '""') + '"'
    return text


def csv_blocks(tt: Timetable, group: PeriodGroup, klass: ClassSection) -> str:
    lines: List[str] = [HEADER]
    for d in group.selected_days:
        for p in group.periods:
            prefix = f"{klass.label},{d},{p.start},{p.end}"
            if p.is_break:
                lines.append(f"{prefix},Break,")
                continue
            s = tt.get(d, p.period_order)
            if s is None or not s.occupied:
                # Leave empty if not placed
                lines.append(f"{prefix},,")
                continue
            subject = s.subject.name if s.subject else s.subject_id
            teachers = "; ".join(s.teacher_names())
            lines.append(f"{prefix},{_cell(subject or '')},{_cell(teachers)}")
    lines.append("")
    return "\n".join(lines)


def teacher_csv_blocks(view: TeacherTimetable, teacher_label: str) -> str:
    lines: List[str] = [TEACHER_HEADER]
    group = view.group
    for d in group.selected_days:
        for p in group.periods:
            prefix = f"{_cell(teacher_label)},{d},{p.start},{p.end}"
            if p.is_break:
                lines.append(f"{prefix},Break,")
                continue
            s = view.cell(d, p.period_order)
            if s is None:
                lines.append(f"{prefix},,")
                continue
            subject = s.subject.name if s.subject else (s.subject_id or "")
            lines.append(f"{prefix},{_cell(subject)},{_cell(s.class_label or '')}")
    lines.append("")
    return "\n".join(lines)


def write_csv_blocks(text: str, outputs_dir: Path, name: str = "timetable.csv") -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / name
    with path.open("w", encoding="utf-8") as f:
        f.write(text)
    return path
