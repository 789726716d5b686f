"""Tests for the tree and position CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from orgtree.cli import cli
from tests.conftest import SNAPSHOT, labels


def _seed(runner: CliRunner, project_root: Path) -> None:
    path = project_root / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    result = runner.invoke(cli, ["import", str(path)])
    assert result.exit_code == 0, result.output


@pytest.mark.usefixtures("_isolated_project")
class TestImportCommand:
    def test_import_reports_counts(self, cli_runner: CliRunner, project_root: Path) -> None:
        path = project_root / "snapshot.json"
        path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "import", str(path)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["op"] == "import_snapshot"
        assert data["data"]["positions"] == 4

    def test_invalid_snapshot_exits_1(self, cli_runner: CliRunner, project_root: Path) -> None:
        path = project_root / "bad.json"
        path.write_text(json.dumps({"positions": [{"id": 1}]}), encoding="utf-8")
        result = cli_runner.invoke(cli, ["import", str(path)])
        assert result.exit_code == 1
        assert "Snapshot rejected" in result.output
        assert "positions.0.name" in result.output

    def test_missing_file_is_usage_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["import", "absent.json"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_project")
class TestTreeCommands:
    def test_show_default_json(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["--json", "tree", "show"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["data"]["tree_id"] == "by-department"
        assert labels(data["data"]["root"]) == ["Eng", "Out of structure"]

    def test_show_named_tree(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["tree", "show", "by-seniority"])
        assert result.exit_code == 0
        assert "Senior - Backend" in result.output
        assert "Junior" in result.output

    def test_show_quiet_prints_leaf_ids(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["-q", "tree", "show"])
        assert result.output.split() == ["1", "2", "3", "4"]

    def test_show_unknown_tree(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["tree", "show", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_show_without_trees(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["tree", "show"])
        assert result.exit_code == 1
        assert "no default tree" in result.output

    def test_list_quiet(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["-q", "tree", "list"])
        assert result.output.split() == ["by-department", "by-seniority"]

    def test_verbose_shows_spans(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["-v", "tree", "show"])
        assert result.exit_code == 0
        assert "TreeService.structure" in result.output

    def test_config_flag(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        custom = project_root / "custom.toml"
        custom.write_text('[tree]\nout_of_structure_label = "Unassigned"\n', encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "-c", str(custom), "tree", "show"])
        data = json.loads(result.output)
        assert labels(data["data"]["root"])[-1] == "Unassigned"


@pytest.mark.usefixtures("_isolated_project")
class TestPositionCommands:
    def test_fields_json(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["--json", "position", "fields", "1"])
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert [f["key"] for f in data["custom_fields"]] == ["department", "team", "seniority"]

    def test_fields_rich(self, cli_runner: CliRunner, project_root: Path) -> None:
        _seed(cli_runner, project_root)
        result = cli_runner.invoke(cli, ["position", "fields", "1"])
        assert "Backend Lead" in result.output
        assert "Specialization: Backend" in result.output

    def test_unknown_position(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["position", "fields", "42"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_rejects_non_positive_id(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["position", "fields", "0"])
        assert result.exit_code == 2
