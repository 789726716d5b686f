"""SQLAlchemy Core table definitions for the orgtree database.

Id sets (allowed values, linked declarations, position selections, tree
levels) are stored as JSON text columns and decoded by the Store.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text

metadata = MetaData()

custom_fields = Table(
    "custom_fields",
    metadata,
    Column("id", Text, primary_key=True),
    Column("key", Text, nullable=False, unique=True),
    Column("label", Text, nullable=False),
    Column("allowed_values_ids", Text),  # JSON array of custom_fields_values.id
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

custom_fields_values = Table(
    "custom_fields_values",
    metadata,
    Column("id", Text, primary_key=True),
    Column("value", Text, nullable=False),
    Column("linked_custom_fields_ids", Text),  # JSON array of custom_fields.id
    Column("linked_custom_fields_values_ids", Text),  # JSON array of values.id
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

positions = Table(
    "positions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("custom_fields_ids", Text),  # JSON array of selected field ids
    Column("custom_fields_values_ids", Text),  # JSON array of selected value ids
    Column("employee_full_name", Text),
    Column("employee_external_id", Text),
    Column("employee_profile_url", Text),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

tree_definitions = Table(
    "tree_definitions",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("is_default", Integer, default=0, server_default="0"),
    Column("levels", Text),  # JSON array of {order, field_key}
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

Index("ix_tree_definitions_default", tree_definitions.c.is_default)
