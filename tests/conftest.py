"""Pytest configuration and fixtures."""

from __future__ import annotations

import io
import json
import tempfile
from pathlib import Path
from typing import Any, Optional

import pytest
from rich.console import Console

from media_vault_cli.core.errors import VaultError
from media_vault_cli.core.models import Attachment, PermissionDefinition


class FakeDatastore:
    """In-memory host datastore recording every call."""

    def __init__(self, records: list[Attachment]):
        self.records = {r.id: r for r in records}
        self.calls: list[tuple[Any, ...]] = []

    def get_record(self, record_id: int) -> Optional[Attachment]:
        self.calls.append(("get_record", record_id))
        return self.records.get(record_id)

    def get_record_type(self, record_id: int) -> Optional[str]:
        self.calls.append(("get_record_type", record_id))
        record = self.records.get(record_id)
        return record.type if record else None

    def query_records(self, record_type: str, status: str = "any", unpaged: bool = True):
        self.calls.append(("query_records", record_type, status, unpaged))
        return [r for r in self.records.values() if r.type == record_type]

    def set_metadata(self, record_id: int, key: str, value: Any) -> None:
        self.calls.append(("set_metadata", record_id, key, value))
        self.records[record_id].meta[key] = value

    def delete_metadata(self, record_id: int, key: str) -> None:
        self.calls.append(("delete_metadata", record_id, key))
        self.records[record_id].meta.pop(key, None)

    @property
    def mutations(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] in ("set_metadata", "delete_metadata")]


class FakeVault:
    """In-memory Media Vault plugin; ids in ``failing`` refuse to move."""

    def __init__(self, active: bool = True, failing: tuple[int, ...] = ()):
        self.active = active
        self.failing = set(failing)
        self.calls: list[tuple[str, int]] = []
        self.permissions = {
            "admin": PermissionDefinition("admin", "Administrators only", logged_in=True),
            "logged-in": PermissionDefinition("logged-in", "Logged-in users", logged_in=True),
        }

    def is_active(self) -> bool:
        return self.active

    def move_to_protected(self, attachment_id: int) -> None:
        self._move("move_to_protected", attachment_id)

    def move_from_protected(self, attachment_id: int) -> None:
        self._move("move_from_protected", attachment_id)

    def get_permissions(self):
        return self.permissions

    def _move(self, name: str, attachment_id: int) -> None:
        self.calls.append((name, attachment_id))
        if attachment_id in self.failing:
            raise VaultError(f"Unable to move attachment {attachment_id}.")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def records() -> list[Attachment]:
    """A page, and attachments with default, known and unknown selectors."""
    return [
        Attachment(id=5, type="page", status="publish"),
        Attachment(id=10, file="2024/01/photo.jpg"),
        Attachment(id=11, file="2024/01/report.pdf", permission_select="admin"),
        Attachment(id=12, file="2024/02/clip.mp4", permission_select="retired-policy"),
    ]


@pytest.fixture
def datastore(records: list[Attachment]) -> FakeDatastore:
    return FakeDatastore(records)


@pytest.fixture
def vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def console() -> Console:
    """Console writing to an in-memory buffer."""
    return Console(file=io.StringIO(), width=200, force_terminal=False)


def write_library(path: Path, records: list[dict[str, Any]]) -> Path:
    path.write_text(json.dumps({"records": records}, indent=2))
    return path


@pytest.fixture
def site(temp_dir: Path):
    """Create an uploads tree, a library index and a config file."""
    uploads = temp_dir / "uploads"
    (uploads / "2024" / "01").mkdir(parents=True)
    (uploads / "2024" / "01" / "photo.jpg").write_bytes(b"\xff\xd8 photo")
    (uploads / "2024" / "01" / "photo-150x150.jpg").write_bytes(b"\xff\xd8 thumb")
    (uploads / "2024" / "01" / "report.pdf").write_bytes(b"%PDF report")

    write_library(
        temp_dir / "library.json",
        [
            {"id": 5, "type": "page", "status": "publish"},
            {
                "id": 10,
                "type": "attachment",
                "file": "2024/01/photo.jpg",
                "sizes": ["photo-150x150.jpg"],
                "permission_select": "default",
                "meta": {"_permission": "admin"},
            },
            {
                "id": 11,
                "type": "attachment",
                "file": "2024/01/report.pdf",
                "permission_select": "admin",
            },
        ],
    )

    (temp_dir / "mediavault.toml").write_text(
        '[vault]\nactive = true\nuploads_dir = "uploads"\nprotected_dir = "uploads/_mediavault"\n\n'
        '[library]\npath = "library.json"\n\n[output]\nprogress = false\n'
    )

    yield temp_dir
