from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests
from requests.adapters import HTTPAdapter

from ..models.context import GridContext
from .base import Row, TimetableBackend
from .errors import TransportError, error_from_response

logger = logging.getLogger(__name__)

SLOTS_PATH = "/api/timetable/slots"


class TimetableClient(TimetableBackend):
    """``requests`` implementation of the timetable HTTP API."""

    def __init__(
        self,
        ctx: GridContext,
        base_url: str,
        *,
        timeout: float = 15.0,
        pool_size: int = 8,
        session: requests.Session | None = None,
    ):
        self.ctx = ctx
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session
        if ctx.staff_id:
            self.session.headers["X-Staff-Id"] = ctx.staff_id

    def close(self) -> None:
        self.session.close()

    def _send(self, method: str, path: str, **kw: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url} params={kw.get('params')} json={kw.get('json')}")
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kw)
        except requests.RequestException as exc:
            logger.warning(f"{method} {path} failed: {exc}")
            raise TransportError(f"Could not reach {self.base_url}", exc) from exc
        if not resp.ok:
            body = _json_or_empty(resp)
            err = error_from_response(resp.status_code, body)
            logger.warning(f"{method} {path} -> {resp.status_code}: {err.message}")
            raise err
        return resp

    def _json(self, method: str, path: str, **kw: Any) -> Dict[str, Any]:
        resp = self._send(method, path, **kw)
        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportError(f"Unparsable response from {path} ({resp.status_code})", exc) from exc
        if not isinstance(body, dict):
            raise TransportError(f"Unexpected response shape from {path}")
        return body

    def _rows(self, path: str, **params: Any) -> List[Row]:
        query = {"school_code": self.ctx.school_code}
        query.update({k: v for k, v in params.items() if v is not None})
        body = self._json("GET", path, params=query)
        return list(body.get("data") or [])

    def period_groups(self) -> List[Row]:
        return self._rows("/api/timetable/period-groups")

    def group_classes(self, group_id: str) -> List[Row]:
        rows = self._rows("/api/timetable/period-groups/classes", group_id=group_id)
        # Assignment rows wrap the class record
        return [r["class"] for r in rows if isinstance(r, dict) and r.get("class")]

    def classes(self) -> List[Row]:
        return self._rows("/api/classes")

    def subjects(self, class_id: str | None = None) -> List[Row]:
        return self._rows("/api/timetable/subjects", class_id=class_id)

    def slots(self, class_id: str | None = None, teacher_id: str | None = None) -> List[Row]:
        return self._rows(SLOTS_PATH, class_id=class_id, teacher_id=teacher_id)

    def upsert_slot(self, payload: Row) -> Row:
        body = dict(payload)
        body["school_code"] = self.ctx.school_code
        return self._json("POST", SLOTS_PATH, json=body)

    def clear_slot(self, class_id: str, day: str, period_order: int) -> Row:
        body = {
            "school_code": self.ctx.school_code,
            "class_id": class_id,
            "day": day,
            "period_order": period_order,
        }
        return self._json("DELETE", SLOTS_PATH, json=body)

    def staff(self) -> List[Row]:
        return self._rows("/api/staff")

    def download(self, class_id: str) -> bytes:
        params = {"school_code": self.ctx.school_code, "class_id": class_id}
        return self._send("GET", "/api/timetable/download", params=params).content


def _json_or_empty(resp: requests.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {"error": resp.text[:500] or resp.reason}
    return body if isinstance(body, dict) else {}
