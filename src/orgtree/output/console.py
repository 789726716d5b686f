"""Rich Console factory and theme.

Consoles render into a StringIO buffer so renderers return plain strings;
Rich drops color codes automatically when not writing to a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ORGTREE_THEME = Theme(
    {
        "org.ok": "bold green",
        "org.error": "bold red",
        "org.warning": "bold yellow",
        "org.op": "bold cyan",
        "org.key": "dim",
        "org.id": "bold blue",
        "org.title": "bold",
        "org.group": "bold magenta",
        "org.bucket": "italic yellow",
        "org.linked": "cyan",
        "org.position": "green",
        "org.employee": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=ORGTREE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Return everything rendered so far on a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
