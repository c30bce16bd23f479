from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from ..api.base import TimetableBackend
from ..api.client import TimetableClient
from ..api.errors import ApiError, GridError, TeacherConflictError
from ..api.memory import InMemoryBackend
from ..data.loader import GridConfig, load_config, load_fixture, load_json
from ..grid.conflicts import ConflictReporter
from ..grid.teacher_view import TeacherTimetable
from ..grid.workspace import ClassTimetableWorkspace
from ..render.csv_out import csv_blocks, teacher_csv_blocks, write_csv_blocks
from ..validate.checks import check_grid
from ..validate.report import format_grid_report, format_save_report, write_report

ROOT = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)


def _setup_logging(project_root: Path, log_dir: str = "logs", level: int = logging.INFO) -> None:
    logs_dir = project_root / log_dir
    logs_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(logs_dir / "ttgrid.log", encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
    logging.getLogger().setLevel(level)


class Runtime:
    """Per-invocation settings shared by every command."""

    def __init__(self, config: GridConfig, offline: bool, state_path: Path, root: Path):
        self.config = config
        self.offline = offline
        self.state_path = state_path
        self.root = root
        self._backend: TimetableBackend | None = None

    @property
    def backend(self) -> TimetableBackend:
        if self._backend is None:
            self._backend = build_backend(self.config, self.offline, self.state_path, self.root)
        return self._backend

    def persist(self) -> None:
        if isinstance(self._backend, InMemoryBackend):
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            with self.state_path.open("w", encoding="utf-8") as f:
                json.dump(self._backend.dump(), f, indent=2)

    def close(self) -> None:
        if isinstance(self._backend, TimetableClient):
            self._backend.close()


def build_backend(config: GridConfig, offline: bool, state_path: Path, root: Path) -> TimetableBackend:
    if offline:
        fixture = load_json(state_path) if state_path.exists() else load_fixture(root)
        if not config.school_code:
            config.school_code = fixture.get("school_code", "")
        return InMemoryBackend(fixture)
    if not config.school_code:
        raise GridError("school_code is required (config file, TTGRID_SCHOOL_CODE or --school)")
    return TimetableClient(
        config.context(), config.base_url, timeout=config.timeout, pool_size=config.max_workers
    )


def open_workspace(
    rt: Runtime,
    group: str | None = None,
    class_name: str | None = None,
    section: str | None = None,
    class_id: str | None = None,
) -> ClassTimetableWorkspace:
    ws = ClassTimetableWorkspace(rt.backend, rt.config.context(), rt.config)
    if ws.open() is None:
        raise GridError("No period group found for this school")
    if group:
        ws.select_group(group)
    if class_id or (class_name and section):
        if ws.select_initial(class_id, class_name, section) is None:
            raise GridError(f"Class not found: {class_id or f'{class_name}-{section}'}")
    return ws


app = typer.Typer(add_completion=False, help="Class timetable grid client")

GroupOpt = typer.Option(None, "--group", "-g", help="Period group id or name (default: active group)")
ClassOpt = typer.Option(None, "--class-name", "-c", help="Class name, e.g. 10")
SectionOpt = typer.Option(None, "--section", "-s", help="Section name, e.g. A")
ClassIdOpt = typer.Option(None, "--class-id", help="Class id (instead of class name/section)")


def _rt(ctx: typer.Context) -> Runtime:
    return ctx.obj


def _fail(exc: GridError) -> NoReturn:
    if isinstance(exc, TeacherConflictError):
        typer.echo(ConflictReporter().render(exc), err=True)
    elif isinstance(exc, ApiError):
        typer.echo(exc.describe(), err=True)
    else:
        typer.echo(str(exc), err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="JSON config file"),
    school: Optional[str] = typer.Option(None, "--school", help="School code"),
    staff: Optional[str] = typer.Option(None, "--staff", help="Acting staff id"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="API base URL"),
    offline: bool = typer.Option(False, "--offline", help="Use the in-memory demo school"),
    state: Optional[Path] = typer.Option(None, "--state", help="Offline state file"),
    log_level: str = typer.Option("INFO", help="Log level"),
) -> None:
    cfg = load_config(config)
    if school:
        cfg.school_code = school
    if staff:
        cfg.staff_id = staff
    if base_url:
        cfg.base_url = base_url
    _setup_logging(ROOT, cfg.log_dir, getattr(logging, log_level.upper(), logging.INFO))
    rt = Runtime(cfg, offline, state or ROOT / "outputs" / "offline_state.json", ROOT)
    ctx.obj = rt
    ctx.call_on_close(rt.close)


@app.command("groups")
def cli_groups(ctx: typer.Context) -> None:
    rt = _rt(ctx)
    try:
        ws = ClassTimetableWorkspace(rt.backend, rt.config.context(), rt.config)
        ws.open()
    except GridError as exc:
        _fail(exc)
    for g in ws.store.groups:
        mark = "*" if ws.store.active and g.id == ws.store.active.id else " "
        days = ",".join(g.selected_days)
        typer.echo(f"{mark} {g.id}\t{g.name}\t{days}\t{len(g.teaching_periods())} teaching period(s)")


@app.command("classes")
def cli_classes(ctx: typer.Context, group: Optional[str] = GroupOpt) -> None:
    try:
        ws = open_workspace(_rt(ctx), group)
    except GridError as exc:
        _fail(exc)
    for name in ws.roster.class_names():
        typer.echo(f"{name}: {', '.join(ws.roster.sections_for(name)) or '-'}")


@app.command("subjects")
def cli_subjects(
    ctx: typer.Context,
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
) -> None:
    try:
        ws = open_workspace(_rt(ctx), group, class_name, section)
    except GridError as exc:
        _fail(exc)
    for s in ws.subjects:
        typer.echo(f"{s.id}\t{s.name}\t{s.color}")


@app.command("show")
def cli_show(
    ctx: typer.Context,
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    try:
        ws = open_workspace(_rt(ctx), group, class_name, section, class_id)
        grid = ws.require_grid()
    except GridError as exc:
        _fail(exc)
    typer.echo(csv_blocks(grid.timetable, grid.group, grid.klass))


@app.command("assign")
def cli_assign(
    ctx: typer.Context,
    day: str,
    period: int,
    subject: str,
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    """Drop SUBJECT (id or name) on DAY/PERIOD."""
    rt = _rt(ctx)
    try:
        ws = open_workspace(rt, group, class_name, section, class_id)
        grid = ws.require_grid()
        subj = ws.subject_by_name(subject)
        if subj is None:
            raise GridError(f"Unknown subject: {subject}")
        accepted = ws.dragdrop.drop(subj.id, ws.dragdrop.target_id(day, period))
    except GridError as exc:
        rt.persist()
        _fail(exc)
    rt.persist()
    if not accepted:
        typer.echo(f"{day} period {period} is not a teaching period; nothing saved")
        return
    typer.echo(csv_blocks(grid.timetable, grid.group, grid.klass))


@app.command("clear")
def cli_clear(
    ctx: typer.Context,
    day: str,
    period: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    rt = _rt(ctx)
    confirm = (lambda _msg: True) if yes else (lambda msg: typer.confirm(msg, default=False))
    try:
        ws = open_workspace(rt, group, class_name, section, class_id)
        grid = ws.require_grid()
        done = grid.clear(day, period, confirm)
    except GridError as exc:
        rt.persist()
        _fail(exc)
    rt.persist()
    if done:
        typer.echo(csv_blocks(grid.timetable, grid.group, grid.klass))


@app.command("teachers")
def cli_teachers(
    ctx: typer.Context,
    day: str,
    period: int,
    teacher_ids: List[str] = typer.Argument(None, help="Teacher ids; omit to list candidates"),
    search: str = typer.Option("", "--search", help="Filter candidates by name, staff id, role or department"),
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    """Set the full teacher set of an occupied cell."""
    rt = _rt(ctx)
    try:
        ws = open_workspace(rt, group, class_name, section, class_id)
        editor = ws.editor()
        editor.open(day, period)
    except GridError as exc:
        _fail(exc)
    if not teacher_ids:
        for r in editor.search(search):
            mark = "x" if r.id in editor.selected else " "
            typer.echo(f"[{mark}] {r.id}\t{r.full_name}\t{r.role or ''}\t{r.department or ''}")
        return
    editor.selected = set(teacher_ids)
    saved = editor.save()
    rt.persist()
    if not saved:
        typer.echo(editor.message or "Failed to save teachers.", err=True)
        raise typer.Exit(code=1)
    grid = editor.grid
    typer.echo(csv_blocks(grid.timetable, grid.group, grid.klass))


@app.command("save-all")
def cli_save_all(
    ctx: typer.Context,
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    rt = _rt(ctx)
    try:
        ws = open_workspace(rt, group, class_name, section, class_id)
        report = ws.require_grid().save_all()
    except GridError as exc:
        rt.persist()
        _fail(exc)
    rt.persist()
    typer.echo(format_save_report(report))
    if not report.success:
        raise typer.Exit(code=1)


@app.command("export-csv")
def cli_export_csv(
    ctx: typer.Context,
    out: Path = typer.Option(ROOT / "outputs", "--out", help="Output directory"),
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    try:
        ws = open_workspace(_rt(ctx), group, class_name, section, class_id)
        grid = ws.require_grid()
    except GridError as exc:
        _fail(exc)
    text = csv_blocks(grid.timetable, grid.group, grid.klass)
    path = write_csv_blocks(text, out, f"timetable_{grid.klass.label}.csv")
    typer.echo(str(path))


@app.command("download")
def cli_download(
    ctx: typer.Context,
    out: Path = typer.Option(Path("."), "--out", help="Output directory"),
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    """Save the server-rendered spreadsheet of the class timetable."""
    rt = _rt(ctx)
    try:
        ws = open_workspace(rt, group, class_name, section, class_id)
        klass = ws.require_grid().klass
        payload = rt.backend.download(klass.id)
    except GridError as exc:
        _fail(exc)
    out.mkdir(parents=True, exist_ok=True)
    path = out / f"timetable_{klass.label}_{date.today().isoformat()}.xlsx"
    path.write_bytes(payload)
    logger.info(f"Downloaded {len(payload)} byte(s) to {path}")
    typer.echo(str(path))


@app.command("teacher-view")
def cli_teacher_view(ctx: typer.Context, teacher_id: str, group: Optional[str] = GroupOpt) -> None:
    rt = _rt(ctx)
    try:
        ws = open_workspace(rt, group)
        view = TeacherTimetable(rt.backend, ws.store.require(), teacher_id)
        view.load()
    except GridError as exc:
        _fail(exc)
    if view.empty:
        typer.echo("No timetable available: this teacher has not been assigned yet")
        return
    typer.echo(teacher_csv_blocks(view, teacher_id))


@app.command("check")
def cli_check(
    ctx: typer.Context,
    out: Optional[Path] = typer.Option(None, "--out", help="Also write the report as JSON here"),
    group: Optional[str] = GroupOpt,
    class_name: Optional[str] = ClassOpt,
    section: Optional[str] = SectionOpt,
    class_id: Optional[str] = ClassIdOpt,
) -> None:
    try:
        ws = open_workspace(_rt(ctx), group, class_name, section, class_id)
        grid = ws.require_grid()
    except GridError as exc:
        _fail(exc)
    report = check_grid(grid.rows, grid.group)
    if out is not None:
        write_report(report, out, f"grid_check_{grid.klass.label}.json")
    typer.echo(format_grid_report(report))


if __name__ == "__main__":  # pragma: no cover
    app()
