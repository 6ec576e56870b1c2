"""
Integration Tests for the Local Note Store.

Runs against a real SQLite file so durability across engine restarts and
the conditional synced update are exercised end to end.
"""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from notesync.core.database import create_session_factory
from notesync.core.exceptions import LocalPersistenceError
from notesync.services.local_store import LocalNoteStore


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


class TestCrud:
    async def test_put_then_get(self, store, make_note):
        note = make_note("n1", title="Groceries", content="milk")

        await store.put(note)

        assert await store.get("n1") == note

    async def test_get_missing_returns_none(self, store):
        assert await store.get("missing") is None

    async def test_put_overwrites_by_id(self, store, make_note):
        await store.put(make_note("n1", title="v1"))
        await store.put(make_note("n1", title="v2", minutes=1))

        notes = await store.list()
        assert len(notes) == 1
        assert notes[0].title == "v2"

    async def test_delete_reports_existence(self, store, make_note):
        await store.put(make_note("n1"))

        assert await store.delete("n1") is True
        assert await store.delete("n1") is False
        assert await store.get("n1") is None

    async def test_list_returns_everything(self, store, make_note):
        for i in range(3):
            await store.put(make_note(f"n{i}", minutes=i))

        assert {note.id for note in await store.list()} == {"n0", "n1", "n2"}

    async def test_empty_fields_round_trip(self, store, make_note):
        await store.put(make_note("n1", title="", content=""))
        note = await store.get("n1")
        assert note.title == ""
        assert note.content == ""

    async def test_microsecond_timestamps_survive(self, store, make_note):
        note = make_note("n1")
        note = note.model_copy(update={"updated_at": note.updated_at + timedelta(microseconds=7)})

        await store.put(note)

        assert (await store.get("n1")).updated_at == note.updated_at


class TestConcurrentWrites:
    async def test_concurrent_puts_of_a_new_id_all_succeed(self, store, make_note):
        await asyncio.gather(*(
            store.put(make_note("n1", title=f"v{i}", minutes=i)) for i in range(5)
        ))

        notes = await store.list()
        assert len(notes) == 1
        assert notes[0].title in {f"v{i}" for i in range(5)}

    async def test_put_overwrites_every_field(self, store, make_note):
        await store.put(make_note("n1", title="old", synced=True, remote_known=True))
        await store.put(make_note("n1", title="new", minutes=1))

        stored = await store.get("n1")
        assert stored.title == "new"
        assert stored.synced is False
        assert stored.remote_known is False


class TestSyncBookkeeping:
    async def test_list_unsynced_oldest_first(self, store, make_note):
        await store.put(make_note("late", minutes=5))
        await store.put(make_note("early", minutes=1))
        await store.put(make_note("done", minutes=3, synced=True))

        assert [note.id for note in await store.list_unsynced()] == ["early", "late"]

    async def test_mark_synced_matching_version(self, store, make_note):
        note = make_note("n1")
        await store.put(note)

        assert await store.mark_synced("n1", note.updated_at) is True

        stored = await store.get("n1")
        assert stored.synced is True
        assert stored.remote_known is True

    async def test_mark_synced_ignores_stale_version(self, store, make_note):
        old = make_note("n1", title="old")
        new = make_note("n1", title="new", minutes=1)
        await store.put(old)
        await store.put(new)

        assert await store.mark_synced("n1", old.updated_at) is False

        stored = await store.get("n1")
        assert stored.synced is False
        assert stored.title == "new"

    async def test_mark_synced_after_delete_is_a_no_op(self, store, make_note):
        note = make_note("n1")
        await store.put(note)
        await store.delete("n1")

        assert await store.mark_synced("n1", note.updated_at) is False
        assert await store.get("n1") is None


class TestDurability:
    async def test_notes_survive_engine_restart(self, db_engine, db_path, store, make_note):
        await store.put(make_note("n1", title="persisted"))
        await db_engine.dispose()

        engine = create_async_engine(sqlite_url(db_path))
        try:
            reopened = LocalNoteStore(create_session_factory(engine))
            note = await reopened.get("n1")
        finally:
            await engine.dispose()

        assert note is not None
        assert note.title == "persisted"
        assert note.synced is False


class TestErrors:
    async def test_database_error_becomes_local_persistence_error(self, tmp_path, make_note):
        # No init_db: the notes table does not exist.
        engine = create_async_engine(sqlite_url(tmp_path / "empty.db"))
        store = LocalNoteStore(create_session_factory(engine))
        try:
            with pytest.raises(LocalPersistenceError) as exc_info:
                await store.put(make_note("n1"))
        finally:
            await engine.dispose()

        assert exc_info.value.code == "SYS_LOCAL_PERSISTENCE_ERROR"
