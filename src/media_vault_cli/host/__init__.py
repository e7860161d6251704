"""Filesystem-backed implementations of the host collaborators."""

from __future__ import annotations

from .library import LibraryStore
from .vault import FilesystemVault

__all__ = ["LibraryStore", "FilesystemVault"]
