"""Tests for OrgtreeSettings — CLI flags, env vars, and TOML in one object."""

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from orgtree.config.settings import OrgtreeSettings


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = OrgtreeSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.database.filename == "orgtree.db"
        assert settings.tree.out_of_structure_label == "Out of structure"
        assert settings.tree.label_separator == " - "
        assert settings.tree.default_tree == ""

    def test_db_path(self, tmp_path: Path) -> None:
        settings = OrgtreeSettings.from_cli(project_root=tmp_path)
        assert settings.db_path == tmp_path / ".orgtree" / "orgtree.db"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = OrgtreeSettings.from_cli(project_root=tmp_path)
        with pytest.raises(ValidationError):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_sparse_override(self, tmp_path: Path) -> None:
        (tmp_path / "orgtree.toml").write_text('[tree]\nlabel_separator = " / "\n')
        settings = OrgtreeSettings.from_cli(project_root=tmp_path)
        assert settings.tree.label_separator == " / "
        assert settings.tree.out_of_structure_label == "Out of structure"

    def test_project_root_from_config_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "orgtree.toml").write_text('[database]\nfilename = "hr.db"\n')
        child = tmp_path / "sub"
        child.mkdir()
        monkeypatch.chdir(child)
        settings = OrgtreeSettings.from_cli()
        assert settings.project_root == tmp_path
        assert settings.db_path == tmp_path / ".orgtree" / "hr.db"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "custom.toml"
        custom.parent.mkdir()
        custom.write_text('[tree]\ndefault_tree = "by-team"\n')
        settings = OrgtreeSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.tree.default_tree == "by-team"
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "orgtree.toml").write_text("[tree\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            OrgtreeSettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "orgtree.toml").write_text('[tree]\ndefault_tree = "from-toml"\n')
        monkeypatch.setenv("ORGTREE_TREE__DEFAULT_TREE", "from-env")
        settings = OrgtreeSettings.from_cli(project_root=tmp_path)
        assert settings.tree.default_tree == "from-env"

    def test_cli_flags_override_toml(self, tmp_path: Path) -> None:
        (tmp_path / "orgtree.toml").write_text("verbose = true\n")
        settings = OrgtreeSettings.from_cli(project_root=tmp_path, verbose=False)
        assert settings.verbose is False
