"""Command group: position queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from orgtree.commands._base import OrgGroup
from orgtree.services.position import PositionService

if TYPE_CHECKING:
    from orgtree.commands._context import AppContext


@click.group(cls=OrgGroup)
def position() -> None:
    """Inspect individual positions."""


@position.command(
    examples="""\
  orgtree position fields 12
  orgtree --json position fields 12""",
)
@click.argument("position_id", type=click.IntRange(min=1))
@click.pass_obj
def fields(app: AppContext, position_id: int) -> None:
    """Show the resolved custom fields of POSITION_ID."""
    app.emit(PositionService(app.store).custom_fields(position_id))
