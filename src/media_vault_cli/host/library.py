"""Attachment library stored as a JSON index file."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

from media_vault_cli.core.errors import LibraryError
from media_vault_cli.core.models import Attachment

logger = logging.getLogger(__name__)

# Statuses left out of an "any" query
EXCLUDED_FROM_ANY = frozenset({"trash", "auto-draft"})

# Records returned by a paged query
PAGE_SIZE = 10


def _record_from_dict(data: dict[str, Any]) -> Attachment:
    """Build a record from its JSON form, ignoring unknown keys."""
    try:
        record_id = int(data["id"])
    except (KeyError, TypeError, ValueError) as e:
        raise LibraryError(f"Invalid record id: {data.get('id')!r}") from e

    sizes = data.get("sizes", [])
    if not isinstance(sizes, list):
        raise LibraryError(f"Invalid sizes for record {record_id}: expected a list")
    meta = data.get("meta", {})
    if not isinstance(meta, dict):
        raise LibraryError(f"Invalid meta for record {record_id}: expected an object")

    return Attachment(
        id=record_id,
        type=str(data.get("type", "attachment")),
        status=str(data.get("status", "inherit")),
        file=str(data.get("file", "")),
        sizes=[str(s) for s in sizes],
        permission_select=str(data.get("permission_select", "default")),
        meta=dict(meta),
    )


class LibraryStore:
    """
    Host datastore backed by a JSON file.

    The file holds ``{"records": [...]}``; each record carries ``id``,
    ``type``, ``status``, ``file``, ``sizes``, ``permission_select`` and a
    ``meta`` object. Every metadata write is saved immediately.
    """

    def __init__(self, path: Path):
        self.path = path
        self._records: Optional[dict[int, Attachment]] = None

    @property
    def records(self) -> dict[int, Attachment]:
        if self._records is None:
            self._records = self._load()
        return self._records

    def _load(self) -> dict[int, Attachment]:
        if not self.path.exists():
            raise LibraryError(f"Library file not found: {self.path}")

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise LibraryError(f"Invalid JSON in {self.path}: {e}") from e
        except OSError as e:
            raise LibraryError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("records", []), list):
            raise LibraryError(f"Invalid library format in {self.path}")

        records: dict[int, Attachment] = {}
        for item in data.get("records", []):
            if not isinstance(item, dict):
                raise LibraryError(f"Invalid record in {self.path}: {item!r}")
            record = _record_from_dict(item)
            records[record.id] = record

        logger.debug("Loaded %d records from %s", len(records), self.path)
        return records

    def save(self) -> None:
        """Write the library back atomically."""
        payload = {"records": [asdict(r) for r in self.records.values()]}

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise LibraryError(f"Cannot write {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise LibraryError(f"Cannot write {self.path}: {e}") from e

    def get_record(self, record_id: int) -> Optional[Attachment]:
        return self.records.get(record_id)

    def get_record_type(self, record_id: int) -> Optional[str]:
        record = self.records.get(record_id)
        return record.type if record else None

    def query_records(
        self, record_type: str, status: str = "any", unpaged: bool = True
    ) -> list[Attachment]:
        """
        Return records of a type, in library order.

        Args:
            record_type: Record type to match
            status: A status to match, or "any" for everything but trashed
                and auto-draft records
            unpaged: Return every match instead of the first page
        """
        matches = [
            r
            for r in self.records.values()
            if r.type == record_type
            and (r.status not in EXCLUDED_FROM_ANY if status == "any" else r.status == status)
        ]
        return matches if unpaged else matches[:PAGE_SIZE]

    def set_metadata(self, record_id: int, key: str, value: Any) -> None:
        record = self._require(record_id)
        record.meta[key] = value
        logger.debug("Record %d: set %s=%r", record_id, key, value)
        self.save()

    def delete_metadata(self, record_id: int, key: str) -> None:
        record = self._require(record_id)
        if key in record.meta:
            del record.meta[key]
            logger.debug("Record %d: deleted %s", record_id, key)
            self.save()

    def _require(self, record_id: int) -> Attachment:
        record = self.records.get(record_id)
        if record is None:
            raise LibraryError(f"Record {record_id} does not exist")
        return record
