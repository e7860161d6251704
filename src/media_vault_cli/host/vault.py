"""Media Vault plugin implemented on two directories of the local disk."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path, PurePosixPath
from typing import Mapping

from media_vault_cli.core.errors import VaultError
from media_vault_cli.core.models import Attachment, PermissionDefinition
from media_vault_cli.host.library import LibraryStore

logger = logging.getLogger(__name__)


def resolve_inside(root: Path, relative: str) -> Path:
    """Join a library-relative path onto a storage root, refusing escapes."""
    rel = PurePosixPath(relative)
    if rel.is_absolute() or ".." in rel.parts or not rel.parts:
        raise VaultError(f"Refusing to move file outside the storage root: {relative}")
    return root.joinpath(*rel.parts)


def attachment_files(attachment: Attachment) -> list[str]:
    """Relative paths of the original file and its resized variants."""
    if not attachment.file:
        return []
    directory = PurePosixPath(attachment.file).parent
    return [attachment.file] + [str(directory / name) for name in attachment.sizes]


class FilesystemVault:
    """
    Moves attachment files between a public and a protected directory.

    Every file of an attachment is checked before any of them moves, so a
    missing or conflicting file leaves the attachment untouched. Files
    already at the destination are skipped, which makes repeated moves
    harmless.
    """

    def __init__(
        self,
        library: LibraryStore,
        uploads_dir: Path,
        protected_dir: Path,
        permissions: Mapping[str, PermissionDefinition],
        active: bool = True,
    ):
        self.library = library
        self.uploads_dir = uploads_dir
        self.protected_dir = protected_dir
        self.permissions = dict(permissions)
        self.active = active

    def is_active(self) -> bool:
        return self.active

    def get_permissions(self) -> Mapping[str, PermissionDefinition]:
        return self.permissions

    def move_to_protected(self, attachment_id: int) -> None:
        self._move(attachment_id, self.uploads_dir, self.protected_dir)

    def move_from_protected(self, attachment_id: int) -> None:
        self._move(attachment_id, self.protected_dir, self.uploads_dir)

    def _move(self, attachment_id: int, source_root: Path, dest_root: Path) -> None:
        attachment = self.library.get_record(attachment_id)
        if attachment is None or not attachment.is_attachment:
            raise VaultError(f"Attachment {attachment_id} does not exist.")

        files = attachment_files(attachment)
        if not files:
            raise VaultError(f"Attachment {attachment_id} has no file.")

        pending: list[tuple[Path, Path]] = []
        for relative in files:
            source = resolve_inside(source_root, relative)
            dest = resolve_inside(dest_root, relative)

            if source.exists() and dest.exists():
                raise VaultError(f"A file already exists at {dest}.")
            if not source.exists():
                if dest.exists():
                    continue  # Already moved
                raise VaultError(f"The file {relative} of attachment {attachment_id} is missing.")
            pending.append((source, dest))

        for source, dest in pending:
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(source), str(dest))
            except OSError as e:
                raise VaultError(f"Could not move {source} to {dest}: {e}") from e
            logger.debug("Moved %s -> %s", source, dest)
