from pathlib import Path
import sys

# Ensure project root on sys.path for direct script execution
root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from ttgrid.api.errors import TeacherConflictError
from ttgrid.api.memory import InMemoryBackend
from ttgrid.data.loader import load_fixture
from ttgrid.grid.conflicts import ConflictReporter
from ttgrid.grid.workspace import ClassTimetableWorkspace
from ttgrid.models.context import GridContext
from ttgrid.render.csv_out import csv_blocks
from ttgrid.validate.report import format_save_report


def main() -> None:
    fixture = load_fixture(root)
    backend = InMemoryBackend(fixture)
    ws = ClassTimetableWorkspace(backend, GridContext(fixture["school_code"], "demo-admin"))
    ws.open()
    ws.select_class("10", "B")
    grid = ws.require_grid()
    ws.dragdrop.drop("sub-math", "Monday-1")
    try:
        grid.assign_teachers("Monday", 1, ["t-anita"])
    except TeacherConflictError as exc:
        print(ConflictReporter().render(exc))
    print(csv_blocks(grid.timetable, grid.group, grid.klass))
    print(format_save_report(grid.save_all()))


if __name__ == "__main__":
    main()
