"""The ``orgtree`` entry point: global flags, then the subcommands."""

from __future__ import annotations

import click

from orgtree import __version__
from orgtree.commands import register_commands
from orgtree.commands._context import AppContext
from orgtree.config.settings import OrgtreeSettings


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="orgtree")
@click.option("--json", "json_output", is_flag=True, help="Print the full result as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Ids only.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs, diagnostics, and timings.")
@click.option("--log-json", is_flag=True, help="Log to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", help="Use this orgtree.toml.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: bool) -> None:
    """Build organizational trees from position custom fields."""
    app = AppContext(OrgtreeSettings.from_cli(config_path=config_path, **flags))
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
