"""Store — repository over positions, custom fields, and tree definitions.

The Store is the single dependency injected into every service. It reads
fresh snapshots on every call (no caching across calls; the database is
authoritative) and exposes a :meth:`transaction` for bulk writes.

Data-access failures (database errors, malformed JSON columns, rows that
fail model validation) raise :class:`StoreError`. Dangling references
inside otherwise well-formed rows are skipped and logged at DEBUG.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError

from orgtree.domain.catalog import AllowedValue, Catalog, CustomField, LinkedField, LinkedValue
from orgtree.domain.positions import Position
from orgtree.domain.trees import TreeDefinition
from orgtree.infrastructure.database.engine import init_database
from orgtree.infrastructure.database.schema import (
    custom_fields,
    custom_fields_values,
    positions,
    tree_definitions,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

    from orgtree.config.settings import OrgtreeSettings

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A data-access failure. Aborts the operation that triggered it."""


def _load_json(raw: str | None, *, table: str, column: str, row_id: Any) -> Any:
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Malformed JSON in {table}.{column} for id {row_id}: {exc}"
        raise StoreError(msg) from exc


def _load_ids(raw: str | None, *, table: str, column: str, row_id: Any) -> list[str]:
    """Decode a JSON array of id strings; None/empty decodes to []."""
    data = _load_json(raw, table=table, column=column, row_id=row_id)
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        msg = f"Expected a JSON array of ids in {table}.{column} for id {row_id}"
        raise StoreError(msg)
    return data


def _dump_ids(ids: Sequence[str]) -> str:
    return json.dumps(list(ids))


# ---------------------------------------------------------------------------
# StoreTransaction: yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active write transaction with helpers for each table."""

    conn: Connection
    today: str

    def clear(self) -> None:
        """Delete every row from every table (for full snapshot replacement)."""
        for table in (positions, tree_definitions, custom_fields_values, custom_fields):
            self.conn.execute(delete(table))

    def insert_field(self, field_id: str, key: str, label: str, value_ids: Sequence[str]) -> None:
        self.conn.execute(
            insert(custom_fields).values(
                id=field_id,
                key=key,
                label=label,
                allowed_values_ids=_dump_ids(value_ids),
                created=self.today,
                modified=self.today,
            )
        )

    def insert_value(
        self,
        value_id: str,
        text: str,
        *,
        linked_field_ids: Sequence[str] = (),
        linked_value_ids: Sequence[str] = (),
    ) -> None:
        self.conn.execute(
            insert(custom_fields_values).values(
                id=value_id,
                value=text,
                linked_custom_fields_ids=_dump_ids(linked_field_ids),
                linked_custom_fields_values_ids=_dump_ids(linked_value_ids),
                created=self.today,
                modified=self.today,
            )
        )

    def insert_position(
        self,
        name: str,
        *,
        position_id: int | None = None,
        description: str | None = None,
        field_ids: Sequence[str] = (),
        value_ids: Sequence[str] = (),
        employee_full_name: str | None = None,
        employee_external_id: str | None = None,
        employee_profile_url: str | None = None,
    ) -> int:
        """Insert a position and return its id."""
        values: dict[str, Any] = {
            "name": name,
            "description": description,
            "custom_fields_ids": _dump_ids(field_ids),
            "custom_fields_values_ids": _dump_ids(value_ids),
            "employee_full_name": employee_full_name,
            "employee_external_id": employee_external_id,
            "employee_profile_url": employee_profile_url,
            "created": self.today,
            "modified": self.today,
        }
        if position_id is not None:
            values["id"] = position_id
        result = self.conn.execute(insert(positions).values(**values))
        return int(result.inserted_primary_key[0])

    def insert_tree(self, tree: TreeDefinition) -> None:
        if tree.is_default:
            self.conn.execute(tree_definitions.update().values(is_default=0))
        self.conn.execute(
            insert(tree_definitions).values(
                id=tree.id,
                name=tree.name,
                description=tree.description,
                is_default=1 if tree.is_default else 0,
                levels=json.dumps([level.model_dump() for level in tree.levels]),
                created=self.today,
                modified=self.today,
            )
        )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class Store:
    """Repository encapsulating all database access.

    Constructed once per CLI invocation from :class:`OrgtreeSettings`.
    Services receive the Store via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: OrgtreeSettings) -> None:
        self._settings = settings
        try:
            self._engine: Engine = init_database(settings.db_path)
        except (OSError, SQLAlchemyError) as exc:
            msg = f"Cannot open database at {settings.db_path}: {exc}"
            raise StoreError(msg) from exc

    @property
    def settings(self) -> OrgtreeSettings:
        """The resolved settings for this store."""
        return self._settings

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def path(self) -> Path:
        return self._settings.db_path

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _reading(self) -> Iterator[Connection]:
        """Read connection that converts driver failures into StoreError."""
        try:
            with self._engine.connect() as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise StoreError(f"Database read failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def list_positions(self) -> list[Position]:
        """All positions in creation order (ascending id)."""
        with self._reading() as conn:
            rows = conn.execute(select(positions).order_by(positions.c.id)).all()
        return [self._position_from_row(row) for row in rows]

    def get_position(self, position_id: int) -> Position | None:
        with self._reading() as conn:
            row = conn.execute(select(positions).where(positions.c.id == position_id)).first()
        return None if row is None else self._position_from_row(row)

    @staticmethod
    def _position_from_row(row: Row[Any]) -> Position:
        try:
            return Position(
                id=row.id,
                name=row.name,
                description=row.description,
                field_ids=tuple(
                    _load_ids(
                        row.custom_fields_ids,
                        table="positions",
                        column="custom_fields_ids",
                        row_id=row.id,
                    )
                ),
                value_ids=tuple(
                    _load_ids(
                        row.custom_fields_values_ids,
                        table="positions",
                        column="custom_fields_values_ids",
                        row_id=row.id,
                    )
                ),
                employee_full_name=row.employee_full_name,
                employee_external_id=row.employee_external_id,
                employee_profile_url=row.employee_profile_url,
            )
        except ValidationError as exc:
            raise StoreError(f"Invalid position row {row.id}: {exc}") from exc

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def load_catalog(self) -> Catalog:
        """Assemble a Catalog snapshot from fields and values tables.

        A linked field is declared on a value only if it exists and at
        least one of the declared linked value ids belongs to it.
        """
        with self._reading() as conn:
            field_rows = conn.execute(select(custom_fields).order_by(custom_fields.c.key)).all()
            value_rows = conn.execute(select(custom_fields_values)).all()

        field_info: dict[str, tuple[str, str]] = {}
        field_values: dict[str, list[str]] = {}
        for row in field_rows:
            field_info[row.id] = (row.key, row.label)
            field_values[row.id] = _load_ids(
                row.allowed_values_ids,
                table="custom_fields",
                column="allowed_values_ids",
                row_id=row.id,
            )

        texts: dict[str, str] = {}
        linked_decls: dict[str, tuple[list[str], list[str]]] = {}
        for row in value_rows:
            texts[row.id] = row.value
            linked_decls[row.id] = (
                _load_ids(
                    row.linked_custom_fields_ids,
                    table="custom_fields_values",
                    column="linked_custom_fields_ids",
                    row_id=row.id,
                ),
                _load_ids(
                    row.linked_custom_fields_values_ids,
                    table="custom_fields_values",
                    column="linked_custom_fields_values_ids",
                    row_id=row.id,
                ),
            )

        fields: list[CustomField] = []
        for field_id, (key, label) in field_info.items():
            allowed: list[AllowedValue] = []
            for value_id in field_values[field_id]:
                if value_id not in texts:
                    logger.debug("Skipping dangling value %s of field %s", value_id, key)
                    continue
                linked_field_ids, linked_value_ids = linked_decls[value_id]
                allowed.append(
                    AllowedValue(
                        id=value_id,
                        text=texts[value_id],
                        linked_fields=self._linked_fields(
                            linked_field_ids,
                            linked_value_ids,
                            field_info,
                            field_values,
                            texts,
                        ),
                    )
                )
            fields.append(CustomField(id=field_id, key=key, label=label, values=tuple(allowed)))
        return Catalog(fields)

    @staticmethod
    def _linked_fields(
        linked_field_ids: Sequence[str],
        linked_value_ids: Sequence[str],
        field_info: dict[str, tuple[str, str]],
        field_values: dict[str, list[str]],
        texts: dict[str, str],
    ) -> tuple[LinkedField, ...]:
        declared: list[LinkedField] = []
        for linked_id in linked_field_ids:
            info = field_info.get(linked_id)
            if info is None:
                logger.debug("Skipping dangling linked field %s", linked_id)
                continue
            legal = set(field_values.get(linked_id, ()))
            values = tuple(
                LinkedValue(id=vid, text=texts[vid])
                for vid in linked_value_ids
                if vid in legal and vid in texts
            )
            if not values:
                continue
            declared.append(LinkedField(id=linked_id, key=info[0], label=info[1], values=values))
        return tuple(declared)

    # ------------------------------------------------------------------
    # Tree definitions
    # ------------------------------------------------------------------

    def get_tree(self, tree_id: str) -> TreeDefinition | None:
        with self._reading() as conn:
            row = conn.execute(
                select(tree_definitions).where(tree_definitions.c.id == tree_id)
            ).first()
        return None if row is None else self._tree_from_row(row)

    def list_trees(self) -> list[TreeDefinition]:
        """All tree definitions, default first, then by name."""
        with self._reading() as conn:
            rows = conn.execute(
                select(tree_definitions).order_by(
                    tree_definitions.c.is_default.desc(), tree_definitions.c.name
                )
            ).all()
        return [self._tree_from_row(row) for row in rows]

    def default_tree(self) -> TreeDefinition | None:
        with self._reading() as conn:
            row = conn.execute(
                select(tree_definitions)
                .where(tree_definitions.c.is_default == 1)
                .order_by(tree_definitions.c.name)
            ).first()
        return None if row is None else self._tree_from_row(row)

    @staticmethod
    def _tree_from_row(row: Row[Any]) -> TreeDefinition:
        levels = _load_json(row.levels, table="tree_definitions", column="levels", row_id=row.id)
        try:
            return TreeDefinition(
                id=row.id,
                name=row.name,
                description=row.description,
                is_default=bool(row.is_default),
                levels=levels or (),
            )
        except ValidationError as exc:
            raise StoreError(f"Invalid tree definition {row.id}: {exc}") from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Write transaction: commits on success, rolls back on any error.

        Usage::

            with store.transaction() as txn:
                txn.insert_value("v1", "Engineering")
                txn.insert_field("f1", "department", "Department", ["v1"])
        """
        today = datetime.now(UTC).strftime("%Y-%m-%d")
        try:
            with self._engine.begin() as conn:
                yield StoreTransaction(conn=conn, today=today)
        except SQLAlchemyError as exc:
            raise StoreError(f"Database write failed: {exc}") from exc
