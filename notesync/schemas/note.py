"""
Note Schemas.

The note value passed between the controller, the reconciler and the
local store, plus its JSON form for the remote service.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from notesync.core.utils import to_wire_timestamp, utc_now


class NoteRecord(BaseModel):
    """Immutable snapshot of a note. Derive changed copies with model_copy()."""

    id: str = Field(description="Client-generated identifier, never changes")
    title: str = Field(default="", description="Note title, may be empty")
    content: str = Field(default="", description="Note body, may be empty")
    updated_at: datetime = Field(description="Naive UTC time of the last local mutation")
    synced: bool = Field(default=False, description="Local copy matches the remote copy")
    remote_known: bool = Field(
        default=False,
        description="Some version of this note was accepted by the remote service",
    )

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @classmethod
    def new(cls, note_id: str | None = None) -> "NoteRecord":
        """Create an empty, unsynced note with a fresh identifier."""
        return cls(id=note_id or str(uuid4()), updated_at=utc_now())

    def to_wire(self, synced: bool = True) -> dict[str, Any]:
        """
        JSON body for create/update calls.

        The remote copy is stored with `synced` set, since it is only sent
        as part of a successful reconciliation.
        """
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "updatedAt": to_wire_timestamp(self.updated_at),
            "synced": synced,
        }

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match over title and content."""
        haystack = f"{self.title} {self.content}".lower()
        return term.lower() in haystack
