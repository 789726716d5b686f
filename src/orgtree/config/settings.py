"""OrgtreeSettings — one frozen object for CLI flags, env vars, and TOML.

Precedence, highest first: keyword arguments (CLI flags), ``ORGTREE_*``
environment variables (``__`` separates nested keys, e.g.
``ORGTREE_TREE__DEFAULT_TREE``), the discovered ``orgtree.toml``, and
the defaults in :mod:`orgtree.config.models`.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from orgtree.config.discovery import find_config
from orgtree.config.models import DatabaseConfig, TreeConfig

# TOML file chosen by from_cli(), read by settings_customise_sources().
_toml_file: ContextVar[Path | None] = ContextVar("_toml_file", default=None)


class OrgtreeSettings(BaseSettings):
    """Resolved settings for one CLI invocation.

    Attributes:
        project_root: Directory holding ``orgtree.toml`` (cwd when there
            is none). The database lives under ``{project_root}/.orgtree/``.
        config_path: The TOML file actually read, if any.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="ORGTREE_",
        env_nested_delimiter="__",
    )

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    tree: TreeConfig = Field(default_factory=TreeConfig)

    @property
    def db_path(self) -> Path:
        return self.project_root / ".orgtree" / self.database.filename

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        toml_file = _toml_file.get()
        if toml_file is not None:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_file))
        return tuple(sources)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> OrgtreeSettings:
        """Build settings for a CLI run.

        *config_path* (``--config``) wins over discovery; a path that is not
        a file means "no config". Without an explicit *project_root* the
        config file's directory becomes the project root.
        """
        if config_path:
            explicit = Path(config_path)
            toml_file = explicit if explicit.is_file() else None
        else:
            toml_file = find_config(project_root)

        if project_root is None:
            project_root = toml_file.parent if toml_file else Path.cwd()

        token = _toml_file.set(toml_file)
        try:
            return cls(project_root=project_root, config_path=toml_file, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {toml_file}: {exc}") from exc
        finally:
            _toml_file.reset(token)
