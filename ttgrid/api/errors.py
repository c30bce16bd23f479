from __future__ import annotations

from typing import Any, Dict, List

from ..models.conflict import Conflict

TEACHER_CONFLICT = "TEACHER_CONFLICT"


class GridError(Exception):
    """Base class for everything the grid reports to its operator."""


class GridStateError(GridError):
    """Operation is not allowed in the grid's current state."""


class TransportError(GridError):
    """The request never produced a usable response."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class ApiError(GridError):
    def __init__(
        self,
        status: int,
        message: str,
        *,
        details: str | None = None,
        code: str | None = None,
        hint: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details
        self.code = code
        self.hint = hint

    def describe(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.code:
            parts.append(f"Code: {self.code}")
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


class TeacherConflictError(ApiError):
    def __init__(self, status: int, message: str, conflicts: List[Conflict], **kw: Any):
        super().__init__(status, message, **kw)
        self.conflicts = conflicts


def is_conflict_payload(status: int, body: Dict[str, Any]) -> bool:
    return status == 409 or body.get("code") == TEACHER_CONFLICT or bool(body.get("conflicts"))


def error_from_response(status: int, body: Dict[str, Any]) -> ApiError:
    message = body.get("error") or body.get("message") or f"HTTP {status}"
    kw = dict(details=body.get("details") or body.get("message"), code=body.get("code"), hint=body.get("hint"))
    if is_conflict_payload(status, body):
        conflicts = [Conflict.from_api(c) for c in body.get("conflicts") or [] if isinstance(c, dict)]
        return TeacherConflictError(status, message, conflicts, **kw)
    return ApiError(status, message, **kw)
