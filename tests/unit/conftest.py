"""
Unit Test Fixtures.

Fixtures for unit tests - the local store and the remote service are
replaced with in-memory fakes. Unit tests should be fast and isolated,
never touching a real database or network.
"""

import asyncio
from datetime import datetime

import pytest

from notesync.core.exceptions import LocalPersistenceError, RemoteCallFailure
from notesync.remote.base import RemoteNotes
from notesync.schemas.note import NoteRecord
from notesync.sync.connectivity import ConnectivityMonitor
from notesync.sync.reconciler import SyncReconciler


# =============================================================================
# Local Store Fake
# =============================================================================


class FakeStore:
    """Dict-backed stand-in for LocalNoteStore."""

    def __init__(self) -> None:
        self.notes: dict[str, NoteRecord] = {}
        self.fail_writes = False

    def _check_writable(self) -> None:
        if self.fail_writes:
            raise LocalPersistenceError("disk full")

    async def put(self, note: NoteRecord) -> NoteRecord:
        self._check_writable()
        self.notes[note.id] = note
        return note

    async def get(self, note_id: str) -> NoteRecord | None:
        return self.notes.get(note_id)

    async def delete(self, note_id: str) -> bool:
        self._check_writable()
        return self.notes.pop(note_id, None) is not None

    async def list_unsynced(self) -> list[NoteRecord]:
        pending = [note for note in self.notes.values() if not note.synced]
        return sorted(pending, key=lambda note: note.updated_at)

    async def mark_synced(self, note_id: str, updated_at: datetime) -> bool:
        note = self.notes.get(note_id)
        if note is None or note.updated_at != updated_at:
            return False
        self.notes[note_id] = note.model_copy(update={"synced": True, "remote_known": True})
        return True

    # Keep last: the name shadows the builtin for annotations below it.
    async def list(self) -> list[NoteRecord]:
        return list(self.notes.values())


# =============================================================================
# Remote Service Fake
# =============================================================================


class FakeRemote(RemoteNotes):
    """
    In-memory remote note service that records every call.

    Set `failures[operation]` to make that operation raise. Set `gate` to an
    unset asyncio.Event to hold create/update calls until it is set;
    `entered` is set as soon as a held call starts.
    """

    def __init__(self) -> None:
        self.records: dict[str, NoteRecord] = {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[str, RemoteCallFailure] = {}
        self.gate: asyncio.Event | None = None
        self.entered = asyncio.Event()

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    async def _enter(self, operation: str, note_id: str) -> None:
        self.calls.append((operation, note_id))
        if operation in self.failures:
            raise self.failures[operation]

    async def _hold(self) -> None:
        if self.gate is not None:
            self.entered.set()
            await self.gate.wait()

    async def exists(self, note_id: str) -> bool:
        await self._enter("exists", note_id)
        return note_id in self.records

    async def create(self, note: NoteRecord) -> None:
        await self._enter("create", note.id)
        await self._hold()
        self.records[note.id] = note

    async def update(self, note: NoteRecord) -> None:
        await self._enter("update", note.id)
        await self._hold()
        self.records[note.id] = note

    async def delete(self, note_id: str) -> None:
        await self._enter("delete", note_id)
        self.records.pop(note_id, None)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def online() -> ConnectivityMonitor:
    """Connectivity monitor that reports reachable."""
    return ConnectivityMonitor(initial=True)


@pytest.fixture
def reconciler(
    fake_store: FakeStore,
    fake_remote: FakeRemote,
    online: ConnectivityMonitor,
) -> SyncReconciler:
    return SyncReconciler(fake_store, fake_remote, online)
