"""PositionService — resolved custom fields of a single position."""

from __future__ import annotations

from orgtree.domain.resolver import resolve
from orgtree.infrastructure.store import StoreError
from orgtree.services.base import BaseService
from orgtree.services.contracts import PositionFieldsData, dump_validated
from orgtree.services.result import ServiceResult
from orgtree.services.telemetry import traced


class PositionService(BaseService):
    """Handles per-position queries."""

    @traced
    def custom_fields(self, position_id: int) -> ServiceResult:
        """Resolve the custom fields (with linked fields) of *position_id*."""
        op = "position_fields"
        try:
            position = self._store.get_position(position_id)
            if position is None:
                return self._not_found(op, "Position", position_id)
            catalog = self._store.load_catalog()
        except StoreError as exc:
            return self._store_failure(op, exc)

        resolution = resolve(
            position.field_ids,
            position.value_ids,
            catalog,
            position_id=position.id,
        )
        data = {
            "id": position.id,
            "name": position.name,
            "employee_full_name": position.employee_full_name,
            "count": len(resolution.fields),
            "custom_fields": [entry.to_dict() for entry in resolution.fields],
            "diagnostics": [d.to_dict() for d in resolution.diagnostics],
        }
        return ServiceResult.success(
            op,
            dump_validated(PositionFieldsData, data),
            warnings=[d.message for d in resolution.diagnostics],
        )
