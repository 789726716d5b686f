"""Click command/group classes accepting ``examples=`` in the decorator.

``--help`` stays short; ``--examples`` prints a few ready-to-run
invocations and exits before any argument is validated.
"""

from __future__ import annotations

from typing import Any

import click


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n\n{examples}")
    ctx.exit(0)


class _ExamplesMixin:
    examples: str | None

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(  # type: ignore[attr-defined]
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    is_eager=True,
                    expose_value=False,
                    callback=_print_examples,
                    help="Show usage examples.",
                )
            )


class OrgCommand(_ExamplesMixin, click.Command):
    pass


class OrgGroup(_ExamplesMixin, click.Group):
    """Group whose ``@group.command`` subcommands are :class:`OrgCommand`."""

    command_class = OrgCommand
