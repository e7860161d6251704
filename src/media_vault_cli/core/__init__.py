"""Core protect/unprotect functionality."""

from __future__ import annotations

from .dispatcher import MediaVaultCommand
from .operations import protect_media, unprotect_media

__all__ = ["MediaVaultCommand", "protect_media", "unprotect_media"]
