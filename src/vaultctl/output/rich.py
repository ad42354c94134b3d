"""Rich console helpers shared by all commands."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[bold red]error:[/bold red] {escape(message)}", soft_wrap=True)


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    err_console.print(f"[yellow]warning:[/yellow] {escape(message)}", soft_wrap=True)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{escape(message)}[/green]", soft_wrap=True)


def print_plain(message: str) -> None:
    """Print text as-is: no markup, no highlighting, no wrapping."""
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def setup_logging(debug: bool = False) -> None:
    """Send log records to stderr, at DEBUG level when debugging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
