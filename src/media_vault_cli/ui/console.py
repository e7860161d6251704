"""Rich console utilities for output formatting."""

from __future__ import annotations

import logging
import platform

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape


def create_console() -> Console:
    """Create a configured Rich console."""
    # Windows-specific console settings
    if platform.system() == "Windows":
        return Console(legacy_windows=True, emoji=False)
    return Console()


def setup_logging(console: Console, verbose: bool = False) -> None:
    """Route the package logger through Rich; DEBUG when verbose."""
    logger = logging.getLogger("media_vault_cli")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False, markup=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def print_success(console: Console, message: str) -> None:
    """Print a success message."""
    console.print(f"[green]Success: {escape(message)}[/green]", highlight=False, soft_wrap=True)


def print_warning(console: Console, message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]", highlight=False, soft_wrap=True)


def print_error(console: Console, message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {escape(message)}[/red]", highlight=False, soft_wrap=True)
