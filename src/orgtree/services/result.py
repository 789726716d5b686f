"""Result types returned by every service method.

Services never raise for expected failures (unknown ids, invalid
snapshots, unreadable database). They return a :class:`ServiceResult`
with ``ok=False`` and an :class:`ErrorCode`; the CLI maps that to
stderr and exit status 1.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    NO_DEFAULT_TREE = "NO_DEFAULT_TREE"
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
    STORE_ERROR = "STORE_ERROR"


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``op`` names the operation (``tree_structure``, ``list_trees``,
    ``position_fields``, ``import_snapshot``) and selects the renderer.
    ``warnings`` carry non-fatal diagnostics; ``meta`` holds telemetry
    when ``--verbose`` is on.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any],
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data, warnings=warnings or [])

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode,
        message: str,
        **detail: Any,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=str(code), message=message, detail=detail),
        )
