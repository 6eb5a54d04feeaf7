"""Shared utility functions for goback.

Provides Rich-based console output and progress helpers, logging setup and
the identifier-case conversions used by both the templates and the CLI.
"""

from __future__ import annotations

import logging
import re

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    """Route the ``goback`` loggers to a ``RichHandler`` on the shared console.

    Args:
        verbose: Log at DEBUG when ``True``, WARNING otherwise.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger("goback")
    root.handlers.clear()
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------

_WORD_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATOR_RE = re.compile(r"[^a-zA-Z0-9]+")


def _words(value: str) -> list[str]:
    spaced = _WORD_BOUNDARY_RE.sub(r"\1 \2", str(value))
    return [w for w in _SEPARATOR_RE.split(spaced) if w]


def snake_case(value: str) -> str:
    """Convert an identifier to ``snake_case``.

    Examples::

        snake_case("My Project") -> "my_project"
        snake_case("userID-list") -> "user_id_list"
    """
    return "_".join(w.lower() for w in _words(value))


def kebab_case(value: str) -> str:
    """Convert an identifier to ``kebab-case``.

    Examples::

        kebab_case("My_Project") -> "my-project"
    """
    return "-".join(w.lower() for w in _words(value))


def title_case(value: str) -> str:
    """Capitalise every word, splitting on separators and case changes.

    Examples::

        title_case("my-backend api") -> "My Backend Api"
    """
    return " ".join(w[:1].upper() + w[1:] for w in _words(value))


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column label/value table on the shared console.

    Args:
        data: Label to value; values are stringified.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def create_progress() -> Progress:
    """Create a Rich progress bar configured for generation stages.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    )
