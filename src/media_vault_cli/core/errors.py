"""Errors raised by the protect/unprotect commands."""

from __future__ import annotations

from typing import Optional


class MediaVaultError(Exception):
    """Base error for every fatal command failure."""

    pass


class PreconditionError(MediaVaultError):
    """The Media Vault plugin is not active."""

    pass


class UsageError(MediaVaultError):
    """Neither an attachment id nor --all was given."""

    pass


class ValidationError(MediaVaultError):
    """The id does not reference an attachment."""

    pass


class EmptyCollectionError(MediaVaultError):
    """A bulk run found no attachments."""

    pass


class OperationError(MediaVaultError):
    """A move delegated to the vault failed."""

    def __init__(self, attachment_id: int, cause: Exception) -> None:
        super().__init__(str(cause))
        self.attachment_id = attachment_id
        self.cause: Optional[Exception] = cause


class HostError(Exception):
    """Error raised by a host adapter (vault or library)."""

    pass


class VaultError(HostError):
    """A file could not be moved in or out of protected storage."""

    pass


class LibraryError(HostError):
    """The attachment library could not be read or written."""

    pass
