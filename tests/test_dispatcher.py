"""Tests for MediaVaultCommand routing and bulk runs."""

from __future__ import annotations

import pytest
from rich.console import Console

from media_vault_cli.core.dispatcher import MediaVaultCommand
from media_vault_cli.core.errors import (
    EmptyCollectionError,
    LibraryError,
    OperationError,
    PreconditionError,
    UsageError,
    ValidationError,
)
from media_vault_cli.core.models import PERMISSION_META_KEY, Attachment

from conftest import FakeDatastore, FakeVault


class BrokenMetadataStore(FakeDatastore):
    """Datastore whose metadata writes fail for one record."""

    def __init__(self, records: list[Attachment], broken_id: int):
        super().__init__(records)
        self.broken_id = broken_id

    def set_metadata(self, record_id: int, key: str, value) -> None:
        if record_id == self.broken_id:
            raise LibraryError(f"Cannot write record {record_id}")
        super().set_metadata(record_id, key, value)


def make_command(vault: FakeVault, datastore: FakeDatastore, console: Console) -> MediaVaultCommand:
    return MediaVaultCommand(vault=vault, datastore=datastore, console=console, show_progress=False)


def output(console: Console) -> str:
    return console.file.getvalue()


class TestPreconditions:
    """Tests for checks made before any work."""

    @pytest.mark.parametrize("action", ["protect", "unprotect"])
    def test_inactive_vault_touches_nothing(
        self, action, datastore: FakeDatastore, console: Console
    ):
        vault = FakeVault(active=False)
        command = make_command(vault, datastore, console)

        with pytest.raises(PreconditionError, match="Media Vault should be activated."):
            command.run(action, attachment_id=10)

        assert datastore.calls == []
        assert vault.calls == []

    def test_missing_id_and_all(self, vault: FakeVault, datastore: FakeDatastore, console: Console):
        command = make_command(vault, datastore, console)

        with pytest.raises(UsageError, match="attachment id or --all param to protect"):
            command.run("protect")

        assert datastore.calls == []

    def test_unprotect_usage_message(
        self, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = make_command(vault, datastore, console)

        with pytest.raises(UsageError, match="to unprotect every file"):
            command.run("unprotect")


class TestSingleAttachment:
    """Tests for the single-id path."""

    def test_protect_scenario(self, vault: FakeVault, datastore: FakeDatastore, console: Console):
        command = make_command(vault, datastore, console)

        result = command.run("protect", attachment_id=10)

        assert result is None
        assert vault.calls == [("move_to_protected", 10)]
        assert datastore.mutations == [("delete_metadata", 10, PERMISSION_META_KEY)]
        assert "Attachment 10 protected" in output(console)

    def test_unprotect_success_message(
        self, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = make_command(vault, datastore, console)

        command.run("unprotect", attachment_id=11)

        assert vault.calls == [("move_from_protected", 11)]
        assert "Attachment 11 unprotected" in output(console)

    @pytest.mark.parametrize("attachment_id", [5, 999])
    def test_non_attachment_rejected(
        self, attachment_id: int, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = make_command(vault, datastore, console)

        with pytest.raises(ValidationError, match="The file must be an attachment."):
            command.run("protect", attachment_id=attachment_id)

        assert vault.calls == []
        assert datastore.mutations == []

    def test_move_failure_is_fatal(self, datastore: FakeDatastore, console: Console):
        vault = FakeVault(failing=(10,))
        command = make_command(vault, datastore, console)

        with pytest.raises(OperationError):
            command.run("protect", attachment_id=10)

        assert datastore.mutations == []
        assert "protected" not in output(console)

    def test_id_takes_precedence_over_all(
        self, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = make_command(vault, datastore, console)

        command.run("protect", attachment_id=11, all_items=True)

        assert vault.calls == [("move_to_protected", 11)]


class TestBulkRun:
    """Tests for --all runs."""

    def test_empty_library(self, vault: FakeVault, console: Console):
        datastore = FakeDatastore([Attachment(id=5, type="page")])
        command = make_command(vault, datastore, console)

        with pytest.raises(EmptyCollectionError, match="No media into your library."):
            command.run("protect", all_items=True)

        assert vault.calls == []
        assert datastore.mutations == []

    def test_queries_every_status_unpaged(
        self, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = make_command(vault, datastore, console)

        command.run("protect", all_items=True)

        assert ("query_records", "attachment", "any", True) in datastore.calls

    def test_protects_in_query_order(
        self, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = make_command(vault, datastore, console)

        result = command.run("protect", all_items=True)

        assert [c[1] for c in vault.calls] == [10, 11, 12]
        assert result is not None
        assert [o.attachment_id for o in result.outcomes] == [10, 11, 12]
        assert "3 medias." in output(console)

    def test_unprotect_all_moves_out_of_vault(
        self, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = make_command(vault, datastore, console)

        command.run("unprotect", all_items=True)

        assert {name for name, _ in vault.calls} == {"move_from_protected"}
        assert all(c[0] == "delete_metadata" for c in datastore.mutations)

    def test_partial_failures_continue(self, datastore: FakeDatastore, console: Console):
        vault = FakeVault(failing=(10, 12))
        command = make_command(vault, datastore, console)

        result = command.run("protect", all_items=True)

        assert result is not None
        assert result.total == 3
        assert [o.attachment_id for o in result.failed] == [10, 12]
        assert [o.attachment_id for o in result.succeeded] == [11]
        assert datastore.mutations == [("set_metadata", 11, PERMISSION_META_KEY, "admin")]

        text = output(console)
        assert text.count("Error: ") == 2
        assert "Unable to move attachment 12." in text
        assert "Successfully protected 1 of 3 medias" in text
        assert "Failed to protect 2 medias" in text

    def test_metadata_failure_counts_against_item(self, vault: FakeVault, console: Console):
        datastore = BrokenMetadataStore(
            [
                Attachment(id=10),
                Attachment(id=11, permission_select="admin"),
                Attachment(id=12, permission_select="logged-in"),
            ],
            broken_id=11,
        )
        command = make_command(vault, datastore, console)

        result = command.run("protect", all_items=True)

        assert result is not None
        assert [o.attachment_id for o in result.failed] == [11]
        assert isinstance(result.failed[0].error, LibraryError)
        assert [o.attachment_id for o in result.succeeded] == [10, 12]
        assert datastore.records[12].meta == {PERMISSION_META_KEY: "logged-in"}
        assert [c[1] for c in vault.calls] == [10, 11, 12]
        assert "Cannot write record 11" in output(console)

    def test_progress_bar_does_not_change_outcome(
        self, vault: FakeVault, datastore: FakeDatastore, console: Console
    ):
        command = MediaVaultCommand(vault=vault, datastore=datastore, console=console)

        result = command.run("protect", all_items=True)

        assert result is not None
        assert len(result.succeeded) == 3
