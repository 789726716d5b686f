"""Shared pytest fixtures and test helpers for orgtree tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from orgtree.config.settings import OrgtreeSettings
from orgtree.domain.catalog import AllowedValue, Catalog, CustomField, LinkedField, LinkedValue
from orgtree.domain.positions import Position
from orgtree.domain.resolver import ResolvedPosition, resolve
from orgtree.infrastructure.store import Store
from orgtree.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_ambient_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ORGTREE_* environment out of the tests."""
    monkeypatch.delenv("ORGTREE_CONFIG", raising=False)
    monkeypatch.delenv("ORGTREE_TREE__DEFAULT_TREE", raising=False)
    disable_telemetry()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Temporary project directory holding an empty orgtree.toml."""
    (tmp_path / "orgtree.toml").write_text("", encoding="utf-8")
    return tmp_path


@pytest.fixture
def store(project_root: Path) -> Store:
    """Store backed by a fresh SQLite database under *project_root*."""
    settings = OrgtreeSettings.from_cli(project_root=project_root)
    s = Store(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def seeded_store(store: Store) -> Store:
    """Store populated with :data:`SNAPSHOT`."""
    from orgtree.services.importer import ImportService

    result = ImportService(store).import_snapshot(SNAPSHOT)
    assert result.ok, result.error
    return store


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD into the temp project so the CLI finds its orgtree.toml.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.chdir(project_root)


# ---------------------------------------------------------------------------
# Shared catalog
#
# department: Eng, Sales
# team:       Backend, Frontend
# seniority:  Senior (links specialization: Backend, Frontend), Junior
# specialization: Backend, Frontend
# ---------------------------------------------------------------------------


def make_catalog() -> Catalog:
    specialization = LinkedField(
        id="f-spec",
        key="specialization",
        label="Specialization",
        values=(
            LinkedValue(id="v-spec-be", text="Backend"),
            LinkedValue(id="v-spec-fe", text="Frontend"),
        ),
    )
    return Catalog(
        [
            CustomField(
                id="f-dept",
                key="department",
                label="Department",
                values=(
                    AllowedValue(id="v-eng", text="Eng"),
                    AllowedValue(id="v-sales", text="Sales"),
                ),
            ),
            CustomField(
                id="f-team",
                key="team",
                label="Team",
                values=(
                    AllowedValue(id="v-backend", text="Backend"),
                    AllowedValue(id="v-frontend", text="Frontend"),
                ),
            ),
            CustomField(
                id="f-sen",
                key="seniority",
                label="Seniority",
                values=(
                    AllowedValue(id="v-senior", text="Senior", linked_fields=(specialization,)),
                    AllowedValue(id="v-junior", text="Junior"),
                ),
            ),
            CustomField(
                id="f-spec",
                key="specialization",
                label="Specialization",
                values=(
                    AllowedValue(id="v-spec-be", text="Backend"),
                    AllowedValue(id="v-spec-fe", text="Frontend"),
                ),
            ),
        ]
    )


def make_position(
    catalog: Catalog,
    position_id: int,
    *value_ids: str,
    fields: list[str] | None = None,
    name: str | None = None,
    **kwargs: Any,
) -> Position:
    """Build a Position selecting *value_ids*.

    Field ids default to the owners of the values, in value order.
    """
    if fields is None:
        owners = (catalog.owner_of(v) for v in value_ids)
        fields = list(dict.fromkeys(o for o in owners if o is not None))
    return Position(
        id=position_id,
        name=name or f"Position {position_id}",
        field_ids=tuple(fields),
        value_ids=tuple(value_ids),
        **kwargs,
    )


def make_resolved(
    catalog: Catalog,
    position_id: int,
    *value_ids: str,
    fields: list[str] | None = None,
    **kwargs: Any,
) -> ResolvedPosition:
    position = make_position(catalog, position_id, *value_ids, fields=fields, **kwargs)
    resolution = resolve(position.field_ids, position.value_ids, catalog, position_id=position_id)
    return ResolvedPosition(position=position, fields=resolution.fields)


def leaf_ids(node: dict[str, Any]) -> list[str]:
    """Position ids of every leaf under a serialized node, depth-first."""
    if node["type"] == "position":
        return [node["positionId"]]
    out: list[str] = []
    for child in node["children"]:
        out.extend(leaf_ids(child))
    return out


def labels(node: dict[str, Any]) -> list[str | None]:
    """Labels (or position ids for leaves) of a serialized node's children."""
    return [
        child["positionId"] if child["type"] == "position" else child["label"]
        for child in node["children"]
    ]


# Import payload mirroring make_catalog(), plus positions and two trees.
SNAPSHOT: dict[str, Any] = {
    "custom_fields": [
        {
            "id": "f-dept",
            "key": "department",
            "label": "Department",
            "values": [{"id": "v-eng", "text": "Eng"}, {"id": "v-sales", "text": "Sales"}],
        },
        {
            "id": "f-team",
            "key": "team",
            "label": "Team",
            "values": [
                {"id": "v-backend", "text": "Backend"},
                {"id": "v-frontend", "text": "Frontend"},
            ],
        },
        {
            "id": "f-sen",
            "key": "seniority",
            "label": "Seniority",
            "values": [
                {
                    "id": "v-senior",
                    "text": "Senior",
                    "linked": [{"field_id": "f-spec", "value_ids": ["v-spec-be", "v-spec-fe"]}],
                },
                {"id": "v-junior", "text": "Junior"},
            ],
        },
        {
            "id": "f-spec",
            "key": "specialization",
            "label": "Specialization",
            "values": [
                {"id": "v-spec-be", "text": "Backend"},
                {"id": "v-spec-fe", "text": "Frontend"},
            ],
        },
    ],
    "positions": [
        {
            "id": 1,
            "name": "Backend Lead",
            "field_ids": ["f-dept", "f-team", "f-sen"],
            "value_ids": ["v-eng", "v-backend", "v-senior", "v-spec-be"],
            "employee_full_name": "Ada Lovelace",
        },
        {
            "id": 2,
            "name": "Frontend Dev",
            "field_ids": ["f-dept", "f-team", "f-sen"],
            "value_ids": ["v-eng", "v-frontend", "v-junior"],
        },
        {
            "id": 3,
            "name": "Platform Engineer",
            "field_ids": ["f-dept"],
            "value_ids": ["v-eng"],
        },
        {
            "id": 4,
            "name": "Office Manager",
        },
    ],
    "trees": [
        {
            "id": "by-department",
            "name": "By department",
            "is_default": True,
            "levels": [
                {"order": 1, "field_key": "team"},
                {"order": 0, "field_key": "department"},
            ],
        },
        {
            "id": "by-seniority",
            "name": "By seniority",
            "levels": [{"order": 0, "field_key": "seniority"}],
        },
    ],
}
