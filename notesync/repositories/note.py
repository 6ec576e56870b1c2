"""
Note Repository.

Data access layer for the local note table.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notesync.models.note import Note
from notesync.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds the sync-specific queries.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_unsynced(self) -> list[Note]:
        """Get notes whose latest local version has not reached the remote service."""
        result = await self.session.execute(
            select(Note)
            .where(Note.synced == False)  # noqa: E712
            .order_by(Note.updated_at.asc())
        )
        return list(result.scalars().all())

    async def mark_synced(self, id: str, updated_at: datetime) -> bool:
        """
        Flag a note as synced, but only if it still carries `updated_at`.

        A newer local edit (different updated_at) or a deletion makes this
        a no-op, so a late reconciliation never overwrites newer content
        with a stale synced flag.

        Returns:
            True if the row was updated
        """
        result = await self.session.execute(
            update(Note)
            .where(Note.id == id)
            .where(Note.updated_at == updated_at)
            .values(synced=True, remote_known=True)
        )
        return result.rowcount == 1
