"""Command: import a JSON snapshot (named import_cmd to avoid the keyword)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from orgtree.commands._base import OrgCommand
from orgtree.services.importer import ImportService

if TYPE_CHECKING:
    from orgtree.commands._context import AppContext

_IMPORT_EXAMPLES = """\
  orgtree import snapshot.json
  orgtree import snapshot.json --replace
  orgtree --json import snapshot.json"""


@click.command("import", cls=OrgCommand, examples=_IMPORT_EXAMPLES)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", is_flag=True, help="Delete existing data before importing.")
@click.pass_obj
def import_cmd(app: AppContext, file: Path, replace: bool) -> None:
    """Import custom fields, positions, and trees from FILE."""
    app.emit(ImportService(app.store).import_file(file, replace=replace))
