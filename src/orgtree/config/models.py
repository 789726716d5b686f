"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, orgtree.toml only contains overrides.
A fresh project needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- orgtree.toml sections ---


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    filename: str = "orgtree.db"


class TreeConfig(BaseModel):
    """[tree] section."""

    model_config = {"frozen": True}

    out_of_structure_label: str = "Out of structure"
    label_separator: str = " - "
    default_tree: str = ""


class OrgtreeConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    tree: TreeConfig = Field(default_factory=TreeConfig)
