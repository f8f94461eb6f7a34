"""Rich Console factory and theme for quotectl output.

Consoles render to a StringIO buffer so renderers keep a ``-> str``
contract. In non-TTY environments (tests, pipes) Rich drops colors.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

QUOTE_THEME = Theme(
    {
        "qt.ok": "bold green",
        "qt.error": "bold red",
        "qt.warning": "bold yellow",
        "qt.op": "bold cyan",
        "qt.key": "dim",
        "qt.id": "bold blue",
        "qt.money": "bold",
        "qt.negative": "red",
        "qt.type.chapter": "bold magenta",
        "qt.type.section": "magenta",
        "qt.type.discount": "red",
        "qt.status.draft": "yellow",
        "qt.status.sent": "cyan",
        "qt.status.accepted": "green",
        "qt.status.rejected": "red",
        "qt.status.expired": "dim",
        "qt.status.cancelled": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=QUOTE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_type(item_type: str) -> str:
    """Rich style for an item type ("" for priced leaves)."""
    return f"qt.type.{item_type}" if item_type in {"chapter", "section", "discount"} else ""


def style_for_status(status: str) -> str:
    return f"qt.status.{status}"
