"""Typed contracts for data entering and leaving the service layer.

Inbound: :class:`Snapshot` validates an import payload (fields, values,
positions, trees) before anything reaches the store, so the domain only
ever sees well-typed values.

Outbound: payload models validate operation results before they leave
the service layer so key regressions fail fast in tests.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from orgtree.domain.trees import TreeDefinition

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


# ---------------------------------------------------------------------------
# Inbound: import snapshot
# ---------------------------------------------------------------------------


class SnapshotLink(BaseModel):
    """A linked field declared on a value, with the legal linked value ids."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field_id: str = Field(min_length=1)
    value_ids: list[str] = Field(min_length=1)


class SnapshotValue(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(min_length=1)
    text: str
    linked: list[SnapshotLink] = Field(default_factory=list)


class SnapshotField(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(min_length=1)
    key: str = Field(min_length=1)
    label: str
    values: list[SnapshotValue] = Field(default_factory=list)


class SnapshotPosition(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int | None = Field(default=None, gt=0)
    name: str = Field(min_length=1)
    description: str | None = None
    field_ids: list[str] = Field(default_factory=list)
    value_ids: list[str] = Field(default_factory=list)
    employee_full_name: str | None = None
    employee_external_id: str | None = None
    employee_profile_url: str | None = None


class Snapshot(BaseModel):
    """A complete import payload.

    Cross-record rules checked on validation:
    field ids and keys are unique, a value id belongs to one field only,
    linked declarations point at existing fields and at values of those
    fields, a position selects at most one value per field, and at most
    one tree is the default.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    custom_fields: list[SnapshotField] = Field(default_factory=list)
    positions: list[SnapshotPosition] = Field(default_factory=list)
    trees: list[TreeDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> Snapshot:
        owners: dict[str, str] = {}
        keys: set[str] = set()
        for field in self.custom_fields:
            if field.key in keys:
                raise ValueError(f"Duplicate custom field key '{field.key}'")
            keys.add(field.key)
            for value in field.values:
                if value.id in owners:
                    raise ValueError(
                        f"Value '{value.id}' declared by both '{owners[value.id]}' and '{field.id}'"
                    )
                owners[value.id] = field.id

        field_ids = {field.id for field in self.custom_fields}
        if len(field_ids) != len(self.custom_fields):
            raise ValueError("Duplicate custom field id")

        for field in self.custom_fields:
            for value in field.values:
                for link in value.linked:
                    if link.field_id not in field_ids:
                        raise ValueError(
                            f"Value '{value.id}' links unknown field '{link.field_id}'"
                        )
                    stray = [v for v in link.value_ids if owners.get(v) != link.field_id]
                    if stray:
                        raise ValueError(
                            f"Value '{value.id}' links values {stray} "
                            f"that do not belong to field '{link.field_id}'"
                        )

        for position in self.positions:
            per_field: dict[str, str] = {}
            for value_id in position.value_ids:
                owner = owners.get(value_id)
                if owner is None:
                    continue
                if owner in per_field and per_field[owner] != value_id:
                    raise ValueError(
                        f"Position '{position.name}' selects several values "
                        f"of field '{owner}': '{per_field[owner]}', '{value_id}'"
                    )
                per_field[owner] = value_id

        defaults = [tree.id for tree in self.trees if tree.is_default]
        if len(defaults) > 1:
            raise ValueError(f"Several default trees: {defaults}")
        return self


# ---------------------------------------------------------------------------
# Outbound: operation payloads
# ---------------------------------------------------------------------------


class DiagnosticItem(BaseModel):
    code: str
    message: str
    position_id: int | None = None
    ref_id: str | None = None


class TreeStructureData(BaseModel):
    """Payload contract for ``TreeService.structure``."""

    model_config = ConfigDict(extra="allow")

    tree_id: str
    name: str
    levels: list[dict[str, Any]]
    root: dict[str, Any]
    position_count: int
    diagnostics: list[DiagnosticItem]


class TreeListItem(BaseModel):
    id: str
    name: str
    description: str | None = None
    is_default: bool
    levels: list[dict[str, Any]]


class TreeListData(BaseModel):
    """Payload contract for ``TreeService.list_trees``."""

    count: int
    items: list[TreeListItem]


class PositionFieldsData(BaseModel):
    """Payload contract for ``PositionService.custom_fields``."""

    id: int
    name: str
    employee_full_name: str | None = None
    count: int
    custom_fields: list[dict[str, Any]]
    diagnostics: list[DiagnosticItem]
