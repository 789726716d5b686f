"""ImportService — load a validated JSON snapshot into the store.

The payload is validated as a whole against :class:`Snapshot` before a
single row is written; a rejected snapshot leaves the store untouched.
Writes happen in one transaction.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from orgtree.infrastructure.store import StoreError
from orgtree.services.base import BaseService
from orgtree.services.contracts import Snapshot
from orgtree.services.result import ErrorCode, ServiceResult
from orgtree.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_OP = "import_snapshot"


def _invalid(message: str, errors: list[dict[str, Any]] | None = None) -> ServiceResult:
    if errors:
        return ServiceResult.failure(_OP, ErrorCode.INVALID_SNAPSHOT, message, errors=errors)
    return ServiceResult.failure(_OP, ErrorCode.INVALID_SNAPSHOT, message)


class ImportService(BaseService):
    """Imports custom fields, positions, and tree definitions."""

    def import_file(self, path: Path, *, replace: bool = False) -> ServiceResult:
        """Read *path* as JSON and import it (see :meth:`import_snapshot`)."""
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            return _invalid(f"Cannot read {path}: {exc}")
        except json.JSONDecodeError as exc:
            return _invalid(f"Invalid JSON in {path}: {exc}")
        if not isinstance(payload, dict):
            return _invalid(f"Snapshot in {path} must be a JSON object")
        return self.import_snapshot(payload, replace=replace)

    @traced
    def import_snapshot(self, payload: dict[str, Any], *, replace: bool = False) -> ServiceResult:
        """Validate *payload* and write it to the store.

        Args:
            payload: Mapping with ``custom_fields``, ``positions``, ``trees``.
            replace: Delete all existing rows first.
        """
        try:
            snapshot = Snapshot.model_validate(payload)
        except ValidationError as exc:
            errors = [
                {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                for err in exc.errors()
            ]
            return _invalid(f"Snapshot rejected ({len(errors)} errors)", errors)

        position_ids: list[int] = []
        try:
            with trace_span("write"), self._store.transaction() as txn:
                if replace:
                    txn.clear()
                for field in snapshot.custom_fields:
                    for value in field.values:
                        txn.insert_value(
                            value.id,
                            value.text,
                            linked_field_ids=[link.field_id for link in value.linked],
                            linked_value_ids=[v for link in value.linked for v in link.value_ids],
                        )
                    txn.insert_field(
                        field.id,
                        field.key,
                        field.label,
                        [value.id for value in field.values],
                    )
                for position in snapshot.positions:
                    position_ids.append(
                        txn.insert_position(
                            position.name,
                            position_id=position.id,
                            description=position.description,
                            field_ids=position.field_ids,
                            value_ids=position.value_ids,
                            employee_full_name=position.employee_full_name,
                            employee_external_id=position.employee_external_id,
                            employee_profile_url=position.employee_profile_url,
                        )
                    )
                for tree in snapshot.trees:
                    txn.insert_tree(tree)
        except StoreError as exc:
            return self._store_failure(_OP, exc)

        logger.info(
            "Imported %d fields, %d positions, %d trees",
            len(snapshot.custom_fields),
            len(position_ids),
            len(snapshot.trees),
        )
        return ServiceResult.success(
            _OP,
            {
                "fields": len(snapshot.custom_fields),
                "values": sum(len(f.values) for f in snapshot.custom_fields),
                "positions": len(position_ids),
                "position_ids": position_ids,
                "trees": len(snapshot.trees),
                "replaced": replace,
            },
        )
