from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from ..grid.slots import SaveReport


def write_report(report: Dict[str, object], outputs_dir: Path, name: str = "grid_check.json") -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / name
    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    return path


def format_grid_report(report: Dict[str, object]) -> str:
    lines: list[str] = []
    lines.append(f"assigned_cells: {report.get('assigned_cells')}/{report.get('total_cells')}")
    missing = report.get("missing_cells", [])
    lines.append(f"missing_cells: {len(missing) if isinstance(missing, list) else 0}")
    violations = report.get("violations_by_rule", {})
    lines.append("violations_by_rule:")
    if isinstance(violations, dict):
        for k, v in violations.items():
            lines.append(f"  - {k}: {len(v)}")
            for item in v:
                lines.append(f"      {item}")
    return "\n".join(lines)


def format_save_report(report: SaveReport) -> str:
    conflict_lines = [
        f"{c.teacher_name} is already assigned to {c.class_name} at the same time ({where})"
        for where, c in report.conflicts
    ]
    if report.success:
        lines = [f"Timetable for class {report.class_label} is saved"]
        if report.missing > 0:
            lines += ["", f"Note: {report.missing} period(s) are not yet assigned."]
        if conflict_lines:
            lines += ["", "Conflicts detected:"] + conflict_lines
        return "\n".join(lines)
    lines = ["Some slots failed to save:"] + report.errors
    if conflict_lines:
        lines += ["", "Conflicts detected:"] + conflict_lines
    if report.missing > 0:
        lines += ["", f"Note: {report.missing} period(s) are not yet assigned."]
    return "\n".join(lines)
