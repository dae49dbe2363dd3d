"""Shared Rich console and table helpers for release-curator.

Provides a global Rich console instance and helpers for consistent
output formatting across all CLI commands.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from release_curator.models import ReleaseCandidate
from release_curator.release_calendar import TYPE_LABELS, release_label

# Global console instance (initialized in CLI)
_console: Console | None = None


def get_console() -> Console:
    """Get the global Rich console instance.

    Returns:
        The global Console instance

    Raises:
        RuntimeError: If console not initialized (should only happen in tests)
    """
    if _console is None:
        raise RuntimeError("Console not initialized. Call set_console() first.")
    return _console


def set_console(console: Console) -> None:
    """Set the global Rich console instance."""
    global _console
    _console = console


def print(*args: Any, **kwargs: Any) -> None:
    """Print to the global console.

    Wrapper around console.print() that uses the global console instance.
    """
    get_console().print(*args, **kwargs)


def print_error(message: str) -> None:
    get_console().print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    get_console().print(f"[yellow]Warning: {escape(message)}[/yellow]")


def release_table(
    items: Iterable[ReleaseCandidate],
    today: date | str | None = None,
    title: str | None = None,
) -> Table:
    """Build a table of releases; adds a relative-date column when today is given."""
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Type")
    table.add_column("Release Date")
    if today is not None:
        table.add_column("When")
    table.add_column("Region")

    for index, item in enumerate(items, start=1):
        row: list[str | Text] = [str(index), Text(item.title), TYPE_LABELS[item.type], item.release_date]
        if today is not None:
            row.append(release_label(item.release_date, today))
        row.append(Text(item.region or "-"))
        table.add_row(*row)
    return table
