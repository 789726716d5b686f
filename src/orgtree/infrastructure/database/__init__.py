"""SQLite database engine and schema via SQLAlchemy Core."""

from orgtree.infrastructure.database.engine import create_db_engine, init_database
from orgtree.infrastructure.database.schema import (
    custom_fields,
    custom_fields_values,
    metadata,
    positions,
    tree_definitions,
)

__all__ = [
    "create_db_engine",
    "custom_fields",
    "custom_fields_values",
    "init_database",
    "metadata",
    "positions",
    "tree_definitions",
]
