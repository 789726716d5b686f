"""FieldResolver — turn a raw id selection into resolved custom fields.

Pure functions over a :class:`Catalog`. Unknown ids are skipped, never
fatal: a broken reference degrades to "field omitted" and is reported as
a :class:`Diagnostic`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from orgtree.domain.catalog import LinkedValue
from orgtree.domain.diagnostics import Diagnostic
from orgtree.domain.types import DiagnosticCode

if TYPE_CHECKING:
    from orgtree.domain.catalog import AllowedValue, Catalog
    from orgtree.domain.positions import Position


class ResolvedLinkedField(BaseModel):
    """A linked field together with the linked values actually selected."""

    model_config = {"frozen": True}

    id: str
    key: str
    label: str
    values: tuple[LinkedValue, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "label": self.label,
            "values": [{"id": v.id, "text": v.text} for v in self.values],
        }


class ResolvedField(BaseModel):
    """One resolved field entry of a position."""

    model_config = {"frozen": True}

    field_id: str
    key: str
    label: str
    value_id: str
    value_text: str
    linked_fields: tuple[ResolvedLinkedField, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "field_id": self.field_id,
            "key": self.key,
            "label": self.label,
            "value_id": self.value_id,
            "value_text": self.value_text,
            "linked_fields": [lf.to_dict() for lf in self.linked_fields],
        }


@dataclass(frozen=True)
class Resolution:
    """Output of :func:`resolve`."""

    fields: tuple[ResolvedField, ...]
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class ResolvedPosition:
    """A position paired with its resolved custom-field map."""

    position: Position
    fields: tuple[ResolvedField, ...] = ()

    @cached_property
    def _details(self) -> dict[str, ResolvedField]:
        details: dict[str, ResolvedField] = {}
        for entry in self.fields:
            details.setdefault(entry.key, entry)
        return details

    @property
    def id(self) -> int:
        return self.position.id

    def detail(self, field_key: str) -> ResolvedField | None:
        """Return the resolved entry for *field_key* (first one wins)."""
        return self._details.get(field_key)

    def value_for(self, field_key: str) -> str | None:
        """Return the chosen value text for *field_key*.

        An empty string counts as unset.
        """
        entry = self._details.get(field_key)
        if entry is None or entry.value_text == "":
            return None
        return entry.value_text

    def field_map(self) -> dict[str, str]:
        """``field key -> value text`` for every field with a non-empty value."""
        return {key: e.value_text for key, e in self._details.items() if e.value_text != ""}


def _resolve_linked(
    value: AllowedValue,
    selected: set[str],
) -> tuple[ResolvedLinkedField, ...]:
    """Keep declared linked fields that have at least one selected legal value."""
    resolved: list[ResolvedLinkedField] = []
    for linked in value.linked_fields:
        chosen = tuple(lv for lv in linked.values if lv.id in selected)
        if not chosen:
            continue
        resolved.append(
            ResolvedLinkedField(
                id=linked.id,
                key=linked.key,
                label=linked.label,
                values=chosen,
            )
        )
    return tuple(resolved)


def resolve(
    selected_field_ids: Iterable[str],
    selected_value_ids: Iterable[str],
    catalog: Catalog,
    *,
    position_id: int | None = None,
) -> Resolution:
    """Resolve a raw selection into an ordered list of field entries.

    For each selected field, the first selected value owned by that field
    becomes the chosen value. Fields without a selected value contribute
    nothing. Linked fields are surfaced only when at least one of their
    legal values is also selected.

    Args:
        selected_field_ids: Top-level field ids, in store order.
        selected_value_ids: Chosen value ids (primary and linked), in store order.
        catalog: Field definitions snapshot.
        position_id: Only used to tag diagnostics.
    """
    values: Sequence[str] = tuple(selected_value_ids)
    selected = set(values)
    diagnostics: list[Diagnostic] = []
    fields: list[ResolvedField] = []
    seen: set[str] = set()

    for field_id in selected_field_ids:
        if field_id in seen:
            continue
        seen.add(field_id)

        field = catalog.field(field_id)
        if field is None:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.UNKNOWN_FIELD,
                    message=f"Field '{field_id}' is not defined",
                    position_id=position_id,
                    ref_id=field_id,
                )
            )
            continue

        candidates = list(dict.fromkeys(v for v in values if catalog.owner_of(v) == field.id))
        if not candidates:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.NO_VALUE,
                    message=f"Field '{field.key}' has no selected value",
                    position_id=position_id,
                    ref_id=field_id,
                )
            )
            continue
        if len(candidates) > 1:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.AMBIGUOUS_VALUE,
                    message=(
                        f"Field '{field.key}' has {len(candidates)} selected values, "
                        f"using '{candidates[0]}'"
                    ),
                    position_id=position_id,
                    ref_id=field_id,
                )
            )

        value = catalog.value(candidates[0])
        if value is None:
            continue
        fields.append(
            ResolvedField(
                field_id=field.id,
                key=field.key,
                label=field.label,
                value_id=value.id,
                value_text=value.text,
                linked_fields=_resolve_linked(value, selected),
            )
        )

    for value_id in dict.fromkeys(values):
        if catalog.owner_of(value_id) is None:
            diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.UNKNOWN_VALUE,
                    message=f"Value '{value_id}' belongs to no field",
                    position_id=position_id,
                    ref_id=value_id,
                )
            )

    return Resolution(fields=tuple(fields), diagnostics=tuple(diagnostics))


def resolve_positions(
    positions: Iterable[Position],
    catalog: Catalog,
) -> tuple[list[ResolvedPosition], list[Diagnostic]]:
    """Resolve every position against *catalog*, preserving input order."""
    resolved: list[ResolvedPosition] = []
    diagnostics: list[Diagnostic] = []
    for position in positions:
        resolution = resolve(
            position.field_ids,
            position.value_ids,
            catalog,
            position_id=position.id,
        )
        resolved.append(ResolvedPosition(position=position, fields=resolution.fields))
        diagnostics.extend(resolution.diagnostics)
    return resolved, diagnostics
