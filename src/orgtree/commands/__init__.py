"""Subcommands of the ``orgtree`` CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every group and standalone command to the root group."""
    from orgtree.commands.import_cmd import import_cmd
    from orgtree.commands.position import position
    from orgtree.commands.tree import tree

    cli.add_command(tree)
    cli.add_command(position)
    cli.add_command(import_cmd)
