"""Tests for the per-op Rich renderers."""

from __future__ import annotations

from typing import Any

from orgtree.output.renderers import render_quiet, render_result
from orgtree.services.result import ServiceError, ServiceResult


def _tree_result() -> ServiceResult:
    def leaf(pid: str, name: str, employee: str | None = None) -> dict[str, Any]:
        node: dict[str, Any] = {
            "type": "position",
            "positionId": pid,
            "positionName": name,
            "children": [],
        }
        if employee:
            node["employeeFullName"] = employee
        return node

    def group(label: str, key: str | None, *children: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": "group",
            "label": label,
            "levelOrder": 0 if key else None,
            "customFieldId": "f" if key else None,
            "customFieldKey": key,
            "customFieldValue": label,
            "linkedCustomFields": [],
            "children": list(children),
        }

    root = {
        "type": "root",
        "children": [
            group("Eng", "department", leaf("1", "Backend Lead", "Ada Lovelace"), leaf("3", "Ops")),
            group("Out of structure", None, leaf("4", "Office Manager")),
        ],
    }
    return ServiceResult(
        ok=True,
        op="tree_structure",
        data={
            "tree_id": "by-department",
            "name": "By department",
            "levels": [{"order": 0, "field_key": "department"}],
            "root": root,
            "position_count": 3,
            "diagnostics": [],
        },
    )


class TestTreeStructure:
    def test_renders_hierarchy(self) -> None:
        output = render_result(_tree_result())
        assert "By department" in output
        assert "Eng" in output
        assert "(2)" in output
        assert "#1 Backend Lead" in output
        assert "Ada Lovelace" in output
        assert "Out of structure" in output
        assert "positions: 3" in output

    def test_quiet_lists_leaf_ids(self) -> None:
        assert render_quiet(_tree_result()) == "1\n3\n4"


class TestListTrees:
    def test_table(self) -> None:
        result = ServiceResult(
            ok=True,
            op="list_trees",
            data={
                "count": 1,
                "items": [
                    {
                        "id": "by-department",
                        "name": "By department",
                        "description": None,
                        "is_default": True,
                        "levels": [
                            {"order": 0, "field_key": "department"},
                            {"order": 1, "field_key": "team"},
                        ],
                    }
                ],
            },
        )
        output = render_result(result)
        assert "by-department" in output
        assert "department > team" in output

    def test_empty(self) -> None:
        result = ServiceResult(ok=True, op="list_trees", data={"count": 0, "items": []})
        assert "count: 0" in render_result(result)


class TestPositionFields:
    def test_table_with_linked(self) -> None:
        result = ServiceResult(
            ok=True,
            op="position_fields",
            data={
                "id": 1,
                "name": "Backend Lead",
                "employee_full_name": None,
                "count": 1,
                "custom_fields": [
                    {
                        "field_id": "f-sen",
                        "key": "seniority",
                        "label": "Seniority",
                        "value_id": "v-senior",
                        "value_text": "Senior",
                        "linked_fields": [
                            {
                                "id": "f-spec",
                                "key": "specialization",
                                "label": "Specialization",
                                "values": [{"id": "v-spec-be", "text": "Backend"}],
                            }
                        ],
                    }
                ],
                "diagnostics": [],
            },
        )
        output = render_result(result)
        assert "Backend Lead" in output
        assert "Senior" in output
        assert "Specialization: Backend" in output
        assert render_quiet(result) == "seniority=Senior"


class TestErrors:
    def test_error_line(self) -> None:
        result = ServiceResult(
            ok=False,
            op="tree_structure",
            error=ServiceError(code="NOT_FOUND", message="Tree 'x' not found"),
        )
        output = render_result(result)
        assert output.startswith("ERROR")
        assert "tree_structure" in output
        assert "Tree 'x' not found" in output

    def test_validation_errors_listed(self) -> None:
        result = ServiceResult(
            ok=False,
            op="import_snapshot",
            error=ServiceError(
                code="INVALID_SNAPSHOT",
                message="Snapshot rejected (1 errors)",
                detail={"errors": [{"loc": "positions.0.name", "msg": "Field required"}]},
            ),
        )
        assert "positions.0.name: Field required" in render_result(result)

    def test_verbose_meta_shows_spans(self) -> None:
        result = ServiceResult(
            ok=True,
            op="import_snapshot",
            data={"fields": 0},
            meta={"telemetry": {"name": "ImportService.import_snapshot", "duration_ms": 1.5}},
        )
        output = render_result(result, verbose=True)
        assert "ImportService.import_snapshot" in output
        assert "1.50ms" in output
