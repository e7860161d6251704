"""Data types shared by the commands and the host adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

ATTACHMENT_TYPE = "attachment"
DEFAULT_PERMISSION = "default"
PERMISSION_META_KEY = "_permission"

Action = Literal["protect", "unprotect"]


@dataclass
class PermissionDefinition:
    """An access policy selectable for a protected attachment."""

    key: str
    description: str = ""
    logged_in: bool = False


@dataclass
class Attachment:
    """A record of the host datastore."""

    id: int
    type: str = ATTACHMENT_TYPE
    status: str = "inherit"
    file: str = ""
    sizes: list[str] = field(default_factory=list)
    permission_select: str = DEFAULT_PERMISSION
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def is_attachment(self) -> bool:
        return self.type == ATTACHMENT_TYPE


@dataclass
class ItemOutcome:
    """Result of one protect/unprotect call inside a bulk run."""

    attachment_id: int
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Accumulated outcomes of a bulk run, in processing order."""

    action: Action
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.ok]
