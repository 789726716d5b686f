"""Custom-field catalog — field definitions, allowed values, linked declarations.

The catalog is a read-only snapshot loaded fresh for every build. Lookup
maps are built once at construction and never change afterwards, so a
Catalog can be handed to any number of resolvers and builders.

INVARIANT: A value id belongs to exactly one field's value set. If a
malformed snapshot declares the same value id under two fields, the first
declaration wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class LinkedValue(BaseModel):
    """One legal value of a linked field."""

    model_config = {"frozen": True}

    id: str
    text: str


class LinkedField(BaseModel):
    """A field unlocked by an allowed value, restricted to *values*."""

    model_config = {"frozen": True}

    id: str
    key: str
    label: str
    values: tuple[LinkedValue, ...] = ()


class AllowedValue(BaseModel):
    """One legal value of a custom field, optionally gating linked fields."""

    model_config = {"frozen": True}

    id: str
    text: str
    linked_fields: tuple[LinkedField, ...] = ()

    @property
    def has_linked_fields(self) -> bool:
        return bool(self.linked_fields)


class CustomField(BaseModel):
    """An administrator-defined attribute type, e.g. ``department``."""

    model_config = {"frozen": True}

    id: str
    key: str
    label: str
    values: tuple[AllowedValue, ...] = ()


class Catalog:
    """Lookup structure over a snapshot of custom-field definitions."""

    def __init__(self, fields: Iterable[CustomField] = ()) -> None:
        self._fields: tuple[CustomField, ...] = tuple(fields)
        self._by_id: dict[str, CustomField] = {}
        self._by_key: dict[str, CustomField] = {}
        self._values: dict[str, AllowedValue] = {}
        self._owners: dict[str, str] = {}  # value id -> field id

        for field in self._fields:
            self._by_id.setdefault(field.id, field)
            self._by_key.setdefault(field.key, field)
            for value in field.values:
                if value.id in self._owners:
                    continue
                self._owners[value.id] = field.id
                self._values[value.id] = value

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[CustomField]:
        return iter(self._fields)

    @property
    def fields(self) -> tuple[CustomField, ...]:
        return self._fields

    def field(self, field_id: str) -> CustomField | None:
        """Return the field with *field_id*, or None."""
        return self._by_id.get(field_id)

    def field_by_key(self, key: str) -> CustomField | None:
        """Return the field whose stable machine name is *key*, or None."""
        return self._by_key.get(key)

    def value(self, value_id: str) -> AllowedValue | None:
        """Return the allowed value with *value_id*, or None."""
        return self._values.get(value_id)

    def owner_of(self, value_id: str) -> str | None:
        """Return the id of the field whose value set contains *value_id*."""
        return self._owners.get(value_id)
