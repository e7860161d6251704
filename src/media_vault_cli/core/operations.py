"""Single-attachment protect and unprotect operations."""

from __future__ import annotations

import logging

from media_vault_cli.core.errors import HostError, OperationError
from media_vault_cli.core.models import DEFAULT_PERMISSION, PERMISSION_META_KEY, Attachment
from media_vault_cli.core.ports import Datastore, VaultPlugin

logger = logging.getLogger(__name__)


def protect_media(attachment: Attachment, vault: VaultPlugin, datastore: Datastore) -> None:
    """
    Move an attachment into protected storage and record its permission.

    The metadata is only touched once the move succeeded. A selector that
    is "default" or unknown to the vault falls back to the site default by
    removing the stored permission.

    Args:
        attachment: Attachment to protect
        vault: Media Vault plugin performing the move
        datastore: Host datastore holding the attachment metadata

    Raises:
        OperationError: If the vault refused or failed the move
    """
    try:
        vault.move_to_protected(attachment.id)
    except HostError as e:
        raise OperationError(attachment.id, e) from e

    selector = attachment.permission_select
    permissions = vault.get_permissions()
    if selector == DEFAULT_PERMISSION or selector not in permissions:
        logger.debug("Attachment %d uses the default permission", attachment.id)
        datastore.delete_metadata(attachment.id, PERMISSION_META_KEY)
    else:
        logger.debug("Attachment %d permission set to %s", attachment.id, selector)
        datastore.set_metadata(attachment.id, PERMISSION_META_KEY, selector)


def unprotect_media(attachment: Attachment, vault: VaultPlugin, datastore: Datastore) -> None:
    """
    Move an attachment back to public storage and drop its permission.

    Raises:
        OperationError: If the vault refused or failed the move
    """
    try:
        vault.move_from_protected(attachment.id)
    except HostError as e:
        raise OperationError(attachment.id, e) from e

    datastore.delete_metadata(attachment.id, PERMISSION_META_KEY)
