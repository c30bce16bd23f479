from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from ..models.context import GridContext

ENV_OVERRIDES = {
    "TTGRID_BASE_URL": "base_url",
    "TTGRID_SCHOOL_CODE": "school_code",
    "TTGRID_STAFF_ID": "staff_id",
    "TTGRID_TIMEOUT": "timeout",
}


@dataclass
class GridConfig:
    base_url: str = "http://localhost:3000"
    school_code: str = ""
    staff_id: str | None = None
    timeout: float = 15.0
    max_workers: int = 8
    accept_legacy_period: bool = True
    log_dir: str = "logs"

    def context(self) -> GridContext:
        return GridContext(school_code=self.school_code, staff_id=self.staff_id or None)


def load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_config(path: Path | None = None, env: Dict[str, str] | None = None) -> GridConfig:
    values: Dict[str, Any] = {}
    if path is not None and path.exists():
        values.update(load_json(path))
    env = os.environ if env is None else env
    for var, key in ENV_OVERRIDES.items():
        if env.get(var):
            values[key] = env[var]
    known = {f.name for f in fields(GridConfig)}
    cfg = GridConfig(**{k: v for k, v in values.items() if k in known})
    cfg.timeout = float(cfg.timeout)
    cfg.max_workers = max(1, int(cfg.max_workers))
    if isinstance(cfg.accept_legacy_period, str):
        cfg.accept_legacy_period = cfg.accept_legacy_period.strip().lower() in {"1", "true", "yes", "on"}
    return cfg


def load_fixture(root: Path, name: str = "demo_school.json") -> Dict[str, Any]:
    return load_json(root / "data" / name)
