"""
Local Note Store.

Durable key-value persistence for notes, keyed by note id and queryable
by full scan. Callers sort and filter; the store does neither.

Same-id calls never interleave inside SQLite: each operation is its own
transaction and the last committed put wins.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notesync.repositories.note import NoteRepository
from notesync.schemas.note import NoteRecord
from notesync.services.base import BaseService


class LocalNoteStore(BaseService):
    """Local store operations: put, get, delete, list, mark_synced."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory)

    async def put(self, note: NoteRecord) -> NoteRecord:
        """Upsert a note by id."""

        async def op(session: AsyncSession) -> None:
            await NoteRepository(session).upsert(**note.model_dump())

        await self._execute_db_operation("put_note", op)
        self._log_debug("Note stored", note_id=note.id, synced=note.synced)
        return note

    async def get(self, note_id: str) -> NoteRecord | None:
        """Read one note, or None if it does not exist."""

        async def op(session: AsyncSession) -> NoteRecord | None:
            row = await NoteRepository(session).get_by_id_or_none(note_id)
            return NoteRecord.model_validate(row) if row is not None else None

        return await self._execute_db_operation("get_note", op)

    async def delete(self, note_id: str) -> bool:
        """Delete a note. Returns whether it existed."""

        async def op(session: AsyncSession) -> bool:
            return await NoteRepository(session).delete_if_exists(note_id)

        removed = await self._execute_db_operation("delete_note", op)
        self._log_operation("Note deleted locally", note_id=note_id, existed=removed)
        return removed

    async def list_unsynced(self) -> list[NoteRecord]:
        """Return notes with synced=false, oldest edit first."""

        async def op(session: AsyncSession) -> list[NoteRecord]:
            rows = await NoteRepository(session).get_unsynced()
            return [NoteRecord.model_validate(row) for row in rows]

        return await self._execute_db_operation("list_unsynced_notes", op)

    async def mark_synced(self, note_id: str, updated_at: datetime) -> bool:
        """
        Set synced=true if the stored note still carries `updated_at`.

        Returns:
            False when a newer edit or a deletion got there first
        """

        async def op(session: AsyncSession) -> bool:
            return await NoteRepository(session).mark_synced(note_id, updated_at)

        return await self._execute_db_operation("mark_note_synced", op)

    # Keep last: the name shadows the builtin for annotations below it.
    async def list(self) -> list[NoteRecord]:
        """Return every stored note, in no particular order."""

        async def op(session: AsyncSession) -> list[NoteRecord]:
            rows = await NoteRepository(session).get_all()
            return [NoteRecord.model_validate(row) for row in rows]

        return await self._execute_db_operation("list_notes", op)
