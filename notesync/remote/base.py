"""
Remote Notes Interface.

The contract the sync reconciler uses to talk to the remote note service.
Implementations raise RemoteCallFailure for any failed call; the existence
check raises AmbiguousExistenceResult when it cannot give a clean answer.
"""

from abc import ABC, abstractmethod

from notesync.schemas.note import NoteRecord


class RemoteNotes(ABC):
    """
    Base class for remote note service clients.

    exists/update/delete are idempotent from the caller's side. create is
    not and must never be retried blindly.
    """

    @abstractmethod
    async def exists(self, note_id: str) -> bool:
        """Return whether the remote service holds a record with this id."""
        ...

    @abstractmethod
    async def create(self, note: NoteRecord) -> None:
        """Create the remote record from the full note body."""
        ...

    @abstractmethod
    async def update(self, note: NoteRecord) -> None:
        """Replace the remote record with the full note body."""
        ...

    @abstractmethod
    async def delete(self, note_id: str) -> None:
        """Delete the remote record. A missing record is not an error."""
        ...

    async def ping(self) -> bool:
        """Best-effort reachability check. Defaults to reachable."""
        return True

    async def close(self) -> None:
        """Release transport resources."""
        return None
