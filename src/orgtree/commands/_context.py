"""AppContext — the object every subcommand receives via ``@click.pass_obj``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.config.logging import configure_logging
from orgtree.output.formatters import OutputSettings, format_result
from orgtree.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from orgtree.config.settings import OrgtreeSettings
    from orgtree.infrastructure.store import Store
    from orgtree.services.result import ServiceResult


class AppContext:
    """Settings plus a lazily opened :class:`Store`.

    The store is only created on first access so ``--help`` and
    ``--examples`` never touch the database.
    """

    def __init__(self, settings: OrgtreeSettings) -> None:
        self.settings = settings
        self._store: Store | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def store(self) -> Store:
        if self._store is None:
            from orgtree.infrastructure.store import Store, StoreError

            try:
                self._store = Store(self.settings)
            except StoreError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and exit 1 on failure.

        Success goes to stdout with warnings on stderr (JSON mode keeps
        them in the payload). Failures go to stderr.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output and not settings.quiet:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
