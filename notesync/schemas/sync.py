"""
Sync Result Schemas.

Structured outcome of a reconciliation attempt. Callers (the controller,
the CLI, a retry scheduler) decide how to surface or retry from these.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from notesync.schemas.base import ErrorDetail


class SyncStatus(str, Enum):
    SYNCED = "synced"
    DEFERRED = "deferred"
    FAILED = "failed"
    SUPERSEDED = "superseded"
    SKIPPED = "skipped"


class SyncOperation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SyncResult(BaseModel):
    """Outcome of reconciling one note."""

    note_id: str
    status: SyncStatus
    operation: SyncOperation | None = Field(
        default=None,
        description="Remote operation chosen, if the attempt got that far",
    )
    updated_at: datetime | None = Field(
        default=None,
        description="The updated_at value this attempt carried",
    )
    error: ErrorDetail | None = None

    @property
    def ok(self) -> bool:
        """True unless the attempt failed. Deferred and skipped are not failures."""
        return self.status is not SyncStatus.FAILED
