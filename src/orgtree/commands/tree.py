"""Command group: tree definitions and tree structures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.commands._base import OrgGroup
from orgtree.services.tree import TreeService

if TYPE_CHECKING:
    from orgtree.commands._context import AppContext

_TREE_EXAMPLES = """\
  orgtree tree list
  orgtree tree show
  orgtree tree show by-department
  orgtree --json tree show by-department"""


@click.group(cls=OrgGroup, examples=_TREE_EXAMPLES)
def tree() -> None:
    """List tree definitions and build position trees."""


@tree.command(
    "list",
    examples="""\
  orgtree tree list
  orgtree -q tree list
  orgtree --json tree list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List tree definitions, default first."""
    app.emit(TreeService(app.store).list_trees())


@tree.command(
    examples="""\
  orgtree tree show
  orgtree tree show by-department
  orgtree -v tree show by-department""",
)
@click.argument("tree_id", required=False)
@click.pass_obj
def show(app: AppContext, tree_id: str | None) -> None:
    """Build the tree TREE_ID (or the default tree)."""
    app.emit(TreeService(app.store).structure(tree_id))
