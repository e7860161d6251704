"""Routing of protect/unprotect invocations to single or bulk execution."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from media_vault_cli.core.errors import (
    EmptyCollectionError,
    HostError,
    OperationError,
    PreconditionError,
    UsageError,
    ValidationError,
)
from media_vault_cli.core.models import ATTACHMENT_TYPE, Action, Attachment, BatchResult, ItemOutcome
from media_vault_cli.core.operations import protect_media, unprotect_media
from media_vault_cli.core.ports import Datastore, VaultPlugin
from media_vault_cli.ui.console import print_error, print_success, print_warning

logger = logging.getLogger(__name__)

Operation = Callable[[Attachment, VaultPlugin, Datastore], None]

OPERATIONS: dict[Action, Operation] = {
    "protect": protect_media,
    "unprotect": unprotect_media,
}

PAST_TENSE: dict[Action, str] = {
    "protect": "protected",
    "unprotect": "unprotected",
}

PROGRESS_LABELS: dict[Action, str] = {
    "protect": "Protecting medias",
    "unprotect": "Unprotecting medias",
}


class MediaVaultCommand:
    """Runs protect/unprotect against injected vault and datastore."""

    def __init__(
        self,
        vault: VaultPlugin,
        datastore: Datastore,
        console: Optional[Console] = None,
        show_progress: bool = True,
    ):
        self.vault = vault
        self.datastore = datastore
        self.console = console or Console()
        self.show_progress = show_progress

    def run(
        self, action: Action, attachment_id: Optional[int] = None, all_items: bool = False
    ) -> Optional[BatchResult]:
        """
        Execute an action on one attachment or on the whole library.

        Args:
            action: "protect" or "unprotect"
            attachment_id: Attachment to act on; takes precedence over all_items
            all_items: Act on every attachment when no id is given

        Returns:
            The BatchResult of a bulk run, None for a single attachment

        Raises:
            PreconditionError: If the vault plugin is not active
            UsageError: If neither an id nor all_items was given
            ValidationError: If the id is not an attachment
            OperationError: If a single-attachment move failed
            EmptyCollectionError: If a bulk run found no attachments
        """
        if not self.vault.is_active():
            raise PreconditionError("Media Vault should be activated.")

        if attachment_id is not None:
            self.run_single(action, attachment_id)
            return None

        if not all_items:
            raise UsageError(
                f"You need to specify an attachment id or --all param to {action} every file."
            )

        return self.run_bulk(action)

    def run_single(self, action: Action, attachment_id: int) -> None:
        """Act on one attachment; any failure is fatal."""
        attachment = self.datastore.get_record(attachment_id)
        if attachment is None or self.datastore.get_record_type(attachment_id) != ATTACHMENT_TYPE:
            raise ValidationError("The file must be an attachment.")

        logger.debug("Running %s on attachment %d", action, attachment_id)
        OPERATIONS[action](attachment, self.vault, self.datastore)
        print_success(self.console, f"Attachment {attachment_id} {PAST_TENSE[action]}")

    def run_bulk(self, action: Action) -> BatchResult:
        """
        Act on every attachment, whatever its status.

        Per-item failures are printed and collected; the run always reaches
        the last attachment.
        """
        attachments = self.datastore.query_records(ATTACHMENT_TYPE, status="any", unpaged=True)
        if not attachments:
            raise EmptyCollectionError("No media into your library.")

        count = len(attachments)
        print_warning(self.console, f"{count} medias.")

        operation = OPERATIONS[action]
        result = BatchResult(action=action)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self.console,
            disable=not self.show_progress,
        ) as progress:
            task = progress.add_task(PROGRESS_LABELS[action], total=count)

            for attachment in attachments:
                try:
                    operation(attachment, self.vault, self.datastore)
                    result.outcomes.append(ItemOutcome(attachment.id))
                except (OperationError, HostError) as e:
                    logger.debug("Attachment %d failed: %s", attachment.id, e)
                    result.outcomes.append(ItemOutcome(attachment.id, e))
                    print_error(self.console, str(e))

                progress.advance(task)

        self._print_summary(result)
        return result

    def _print_summary(self, result: BatchResult) -> None:
        done = len(result.succeeded)
        failed = len(result.failed)

        self.console.print()
        if done > 0:
            print_success(
                self.console,
                f"Successfully {PAST_TENSE[result.action]} {done} of {result.total} medias",
            )
        if failed > 0:
            self.console.print(f"[red]Failed to {result.action} {failed} medias[/red]")
