"""UI components for console output."""

from __future__ import annotations

from .console import create_console, print_error, print_success, print_warning, setup_logging

__all__ = ["create_console", "print_error", "print_success", "print_warning", "setup_logging"]
