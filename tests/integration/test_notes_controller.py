"""
Integration Tests for the Notes Controller.

Drives the controller the way a UI would (create, type, switch, delete,
lose and regain connectivity) against the real SQLite store and the real
HTTP client talking to the in-memory note service.
"""

import asyncio

import pytest

from notesync.core.exceptions import NotFoundError, ValidationError
from notesync.schemas.sync import SyncOperation, SyncStatus
from notesync.services.notes import NotesController

DEBOUNCE = 0.05


async def settle() -> None:
    """Wait past the debounce quiet period and let the save finish."""
    await asyncio.sleep(DEBOUNCE * 4)


class TestEditing:
    async def test_typing_burst_produces_one_remote_write(self, controller, remote_service, store):
        note = await controller.create_note()

        for text in ("m", "mi", "mil", "milk"):
            controller.edit(content=text)
            await asyncio.sleep(DEBOUNCE / 5)
        await settle()

        assert remote_service.count("POST") == 1
        assert remote_service.count("PUT") == 0
        assert remote_service.records[note.id]["content"] == "milk"
        stored = await store.get(note.id)
        assert stored.content == "milk"
        assert stored.synced is True
        assert controller.current.synced is True
        assert controller.last_result.status is SyncStatus.SYNCED

    async def test_second_burst_updates(self, controller, remote_service):
        note = await controller.create_note()
        controller.edit(title="v1")
        await controller.save_now()

        controller.edit(title="v2")
        result = await controller.save_now()

        assert result.operation is SyncOperation.UPDATE
        assert remote_service.records[note.id]["title"] == "v2"

    async def test_save_now_skips_quiet_period(self, controller, store):
        note = await controller.create_note()
        controller.edit(title="Urgent")

        result = await controller.save_now()

        assert result.status is SyncStatus.SYNCED
        assert (await store.get(note.id)).title == "Urgent"
        assert controller.save_pending is False

    async def test_edit_without_open_note(self, controller):
        with pytest.raises(ValidationError):
            controller.edit(title="nowhere")

    async def test_open_unknown_note(self, controller):
        with pytest.raises(NotFoundError):
            await controller.open_note("missing")

    async def test_switching_notes_drops_pending_save(self, controller, store):
        first = await controller.create_note()
        second = await controller.create_note()

        await controller.open_note(first.id)
        controller.edit(title="unsaved")
        await controller.open_note(second.id)
        await settle()

        assert (await store.get(first.id)).title == ""

    async def test_close_note_can_keep_pending_save(self, controller, store):
        note = await controller.create_note()
        controller.edit(title="kept")

        await controller.close_note(save_pending=True)

        assert controller.current is None
        assert (await store.get(note.id)).title == "kept"


class TestListing:
    async def test_visible_notes_newest_first(self, controller):
        ids = []
        for title in ("first", "second", "third"):
            note = await controller.create_note()
            controller.edit(title=title)
            await controller.save_now()
            ids.append(note.id)

        assert [note.id for note in controller.visible_notes()] == list(reversed(ids))

    async def test_search_filters_title_and_content(self, controller):
        await controller.create_note()
        controller.edit(title="Groceries", content="milk")
        await controller.save_now()
        await controller.create_note()
        controller.edit(title="Work", content="quarterly report")
        await controller.save_now()

        assert [n.title for n in controller.set_search("MILK")] == ["Groceries"]
        assert [n.title for n in controller.set_search("report")] == ["Work"]
        assert len(controller.set_search("")) == 2


class TestOffline:
    async def test_offline_edit_syncs_after_reconnect(self, controller, connectivity, remote_service, store):
        connectivity.set_online(False)
        note = await controller.create_note()
        controller.edit(title="Written on the train")

        result = await controller.save_now()

        assert result.status is SyncStatus.DEFERRED
        assert remote_service.requests == []
        assert (await store.get(note.id)).synced is False

        connectivity.set_online(True)
        results = await controller.sync_pending()

        assert [r.status for r in results] == [SyncStatus.SYNCED]
        assert remote_service.records[note.id]["title"] == "Written on the train"
        assert (await store.get(note.id)).synced is True

    async def test_remote_outage_leaves_note_unsynced(self, controller, remote_service, store):
        remote_service.down = True
        note = await controller.create_note()
        controller.edit(title="during outage")

        result = await controller.save_now()

        assert result.status is SyncStatus.FAILED
        assert result.error.code == "SYNC_AMBIGUOUS_EXISTENCE"
        assert controller.last_error is None
        assert (await store.get(note.id)).title == "during outage"

        remote_service.down = False
        assert [r.status for r in await controller.sync_pending()] == [SyncStatus.SYNCED]

    async def test_reconnect_triggers_sync_when_enabled(
        self, store, sync_reconciler, connectivity, remote_service,
    ):
        controller = NotesController(
            store,
            sync_reconciler,
            connectivity,
            debounce_seconds=DEBOUNCE,
            reconcile_on_reconnect=True,
        )
        connectivity.set_online(False)
        note = await controller.create_note()
        controller.edit(title="queued")
        await controller.save_now()

        connectivity.set_online(True)
        await connectivity.stop()

        assert note.id in remote_service.records
        assert (await store.get(note.id)).synced is True
        await controller.shutdown()

    async def test_reconnect_does_nothing_by_default(self, controller, connectivity, remote_service):
        connectivity.set_online(False)
        await controller.create_note()
        controller.edit(title="queued")
        await controller.save_now()

        connectivity.set_online(True)
        await connectivity.stop()

        assert remote_service.requests == []


class TestDelete:
    async def test_delete_synced_note_reaches_remote(self, controller, remote_service, store):
        note = await controller.create_note()
        controller.edit(title="temporary")
        await controller.save_now()

        result = await controller.delete_note(note.id)

        assert result.status is SyncStatus.SYNCED
        assert note.id not in remote_service.records
        assert await store.get(note.id) is None
        assert controller.current is None
        assert controller.notes == []

    async def test_delete_unsynced_note_stays_local(self, controller, remote_service):
        note = await controller.create_note()

        result = await controller.delete_note(note.id)

        assert result.status is SyncStatus.SKIPPED
        assert remote_service.count("DELETE") == 0

    async def test_delete_drops_pending_edit(self, controller, remote_service, store):
        note = await controller.create_note()
        controller.edit(title="never saved")

        await controller.delete_note(note.id)
        await settle()

        assert await store.get(note.id) is None
        assert remote_service.records == {}
