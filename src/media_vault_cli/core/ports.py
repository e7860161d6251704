"""Interfaces of the collaborators the commands delegate to.

The command layer only depends on these protocols. The bundled
filesystem adapters in ``media_vault_cli.host`` implement them, and tests
supply in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from media_vault_cli.core.models import Attachment, PermissionDefinition


class VaultPlugin(Protocol):
    """The Media Vault plugin: file relocation and permission catalogue.

    Move methods raise ``VaultError`` on failure.
    """

    def is_active(self) -> bool: ...

    def move_to_protected(self, attachment_id: int) -> None: ...

    def move_from_protected(self, attachment_id: int) -> None: ...

    def get_permissions(self) -> Mapping[str, PermissionDefinition]: ...


class Datastore(Protocol):
    """Record access on the host content-management system."""

    def get_record(self, record_id: int) -> Optional[Attachment]: ...

    def get_record_type(self, record_id: int) -> Optional[str]: ...

    def query_records(
        self, record_type: str, status: str = "any", unpaged: bool = True
    ) -> Sequence[Attachment]: ...

    def set_metadata(self, record_id: int, key: str, value: Any) -> None: ...

    def delete_metadata(self, record_id: int, key: str) -> None: ...


__all__ = ["VaultPlugin", "Datastore"]
