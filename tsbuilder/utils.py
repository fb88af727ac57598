"""Shared utility functions for the builder generator.

Provides Rich-based console reporting, file-system helpers used by the
output writer, and the small naming helpers the synthesizer relies on.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_WORD = re.compile(r"[A-Za-z0-9]+")


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def is_identifier(name: str) -> bool:
    """Return ``True`` if *name* can be written as a bare TypeScript property."""
    return bool(_IDENTIFIER.match(name))


def capitalize_first(name: str) -> str:
    """Upper-case the first character only.

    Examples::

        capitalize_first("firstName") -> "FirstName"
        capitalize_first("_id")       -> "_id"
    """
    return name[:1].upper() + name[1:]


def to_pascal(name: str) -> str:
    """Convert an arbitrary property name to a PascalCase identifier.

    Identifiers are only capitalised; anything else is split on non-alphanumeric
    runs and the words joined.  A leading digit gets an underscore prefix.

    Examples::

        to_pascal("createdAt")     -> "CreatedAt"
        to_pascal("content-type")  -> "ContentType"
        to_pascal("2fa code")      -> "_2faCode"
    """
    if is_identifier(name):
        return capitalize_first(name)
    result = "".join(capitalize_first(word) for word in _WORD.findall(name))
    if not result:
        return "_"
    if result[0].isdigit():
        result = "_" + result
    return result


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Args:
        path: Directory path.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


async def write_text(path: str | Path, content: str) -> Path:
    """Write *content* to *path* off the event loop.

    Parent directories are created automatically.

    Returns:
        The path that was written.
    """
    file_path = Path(path)
    await asyncio.to_thread(_write_file, file_path, content)
    return file_path


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(0.25)  -> "0.2s"
        format_duration(65.2)  -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
