"""Diagnostics — what resolution and tree building skipped, and why.

Referential inconsistencies never raise. They degrade (field omitted,
position bucketed) and leave a Diagnostic behind so callers and tests can
see exactly which ids were dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from orgtree.domain.types import DiagnosticCode


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding."""

    code: DiagnosticCode
    message: str
    position_id: int | None = None
    ref_id: str | None = None  # field id, value id, or level field key

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": str(self.code),
            "message": self.message,
            "position_id": self.position_id,
            "ref_id": self.ref_id,
        }
