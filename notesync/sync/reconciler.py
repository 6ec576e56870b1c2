"""
Sync Reconciler.

Resolves local note mutations against the remote note service.

reconcile(note):
    1. Stamp updated_at (strictly increasing), set synced=False, persist
       locally. Local durability never waits on the network.
    2. Offline → deferred. The note stays unsynced.
    3. Online → under the note's lock, re-read it. A newer local version
       (or a deletion) supersedes this attempt.
    4. Existence probe decides create vs update. The decision is made
       again on every attempt; the remote service is the authority.
    5. On success, mark synced only if the stored note still carries the
       updated_at that was sent.
    6. Remote failures become a failed SyncResult. No automatic retry.

Per-note state (conceptual):
    NEW → DIRTY → SYNCING → SYNCED, any edit → DIRTY, delete → DELETED.
    SYNCING exists only inside _push.
"""

import asyncio
import weakref
from collections.abc import Callable
from datetime import datetime

from notesync.core.exceptions import RemoteCallFailure, RemoteUnreachable
from notesync.core.logging import get_logger, log_with_source
from notesync.core.utils import advance_timestamp, utc_now
from notesync.remote.base import RemoteNotes
from notesync.schemas.base import ErrorDetail
from notesync.schemas.note import NoteRecord
from notesync.schemas.sync import SyncOperation, SyncResult, SyncStatus
from notesync.services.local_store import LocalNoteStore
from notesync.sync.connectivity import ConnectivityMonitor

logger = get_logger(__name__)

LockTable = weakref.WeakValueDictionary[str, asyncio.Lock]


class SyncReconciler:
    """
    Create/update/delete propagation with synced-flag bookkeeping.

    Two per-note asyncio.Locks, held only while in use:

    - the save lock covers read, stamp and put, so concurrent saves of one
      note get distinct, increasing updated_at values;
    - the push lock serializes remote attempts, so they reach the remote
      service in the order the edits were committed locally.

    Saves never wait on the push lock. Different notes reconcile concurrently.
    """

    def __init__(
        self,
        store: LocalNoteStore,
        remote: RemoteNotes,
        connectivity: ConnectivityMonitor,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.remote = remote
        self.connectivity = connectivity
        self._clock = clock
        self._save_locks: LockTable = weakref.WeakValueDictionary()
        self._push_locks: LockTable = weakref.WeakValueDictionary()
        # Ids the remote service accepted during this process whose synced
        # flag may not have landed locally (e.g. deleted mid-flight).
        self._pushed: set[str] = set()

    @staticmethod
    def _lock_for(locks: LockTable, note_id: str) -> asyncio.Lock:
        # Entries vanish once no task holds or awaits the lock.
        lock = locks.get(note_id)
        if lock is None:
            lock = locks[note_id] = asyncio.Lock()
        return lock

    async def save_local(self, note: NoteRecord) -> NoteRecord:
        """
        Persist a local mutation: fresh updated_at, synced=False.

        Raises:
            LocalPersistenceError: If the store write fails
        """
        async with self._lock_for(self._save_locks, note.id):
            stored = await self.store.get(note.id)
            previous = note.updated_at
            remote_known = note.remote_known
            if stored is not None:
                previous = max(previous, stored.updated_at)
                remote_known = remote_known or stored.remote_known

            stamped = note.model_copy(
                update={
                    "updated_at": advance_timestamp(self._clock(), previous),
                    "synced": False,
                    "remote_known": remote_known,
                },
            )
            await self.store.put(stamped)
        return stamped

    async def reconcile(self, note: NoteRecord) -> SyncResult:
        """
        Save a locally mutated note and propagate it if online.

        Raises:
            LocalPersistenceError: If a local write fails. Remote failures
                never raise; they are reported in the result.
        """
        stamped = await self.save_local(note)
        return await self._push(stamped)

    async def reconcile_pending(self) -> list[SyncResult]:
        """
        Push every unsynced note as stored, without re-stamping it.

        This is the catch-up pass for edits made offline or whose earlier
        attempt failed. It is only run when explicitly requested.
        """
        pending = await self.store.list_unsynced()
        if not pending:
            return []

        log_with_source(logger, "sync", "info", "Reconciling pending notes", count=len(pending))
        return list(await asyncio.gather(*(self._push(note) for note in pending)))

    async def _push(self, stamped: NoteRecord) -> SyncResult:
        if not self.connectivity.online:
            return self._deferred(stamped.id, stamped.updated_at)

        async with self._lock_for(self._push_locks, stamped.id):
            # Connectivity may have dropped while waiting for the lock.
            if not self.connectivity.online:
                return self._deferred(stamped.id, stamped.updated_at)

            current = await self.store.get(stamped.id)
            if current is None or current.updated_at != stamped.updated_at:
                log_with_source(
                    logger,
                    "sync",
                    "debug",
                    "Sync attempt superseded before remote call",
                    note_id=stamped.id,
                )
                return SyncResult(
                    note_id=stamped.id,
                    status=SyncStatus.SUPERSEDED,
                    updated_at=stamped.updated_at,
                )

            operation: SyncOperation | None = None
            try:
                operation = await self._decide_operation(stamped.id)
                if operation is SyncOperation.CREATE:
                    await self.remote.create(stamped)
                else:
                    await self.remote.update(stamped)
            except RemoteCallFailure as e:
                return self._failed(stamped.id, stamped.updated_at, operation, e)

            self._pushed.add(stamped.id)
            marked = await self.store.mark_synced(stamped.id, stamped.updated_at)

        if not marked:
            log_with_source(
                logger,
                "sync",
                "info",
                "Remote accepted a version that is no longer current",
                note_id=stamped.id,
                operation=operation.value,
            )
            return SyncResult(
                note_id=stamped.id,
                status=SyncStatus.SUPERSEDED,
                operation=operation,
                updated_at=stamped.updated_at,
            )

        log_with_source(
            logger,
            "sync",
            "info",
            "Note synced",
            note_id=stamped.id,
            operation=operation.value,
        )
        return SyncResult(
            note_id=stamped.id,
            status=SyncStatus.SYNCED,
            operation=operation,
            updated_at=stamped.updated_at,
        )

    async def _decide_operation(self, note_id: str) -> SyncOperation:
        """
        Create-vs-update decision point: ask the remote service.

        Raises:
            AmbiguousExistenceResult: If the probe gives no clean answer;
                the attempt is deferred rather than guessed.
        """
        if await self.remote.exists(note_id):
            return SyncOperation.UPDATE
        return SyncOperation.CREATE

    async def reconcile_delete(self, note_id: str) -> SyncResult:
        """
        Delete a note locally, and remotely when a remote copy can exist.

        The local deletion always stands, even if the remote call fails.
        The remote decision waits for any in-flight push of the same note,
        so a create that lands mid-delete is still cleaned up.

        Raises:
            LocalPersistenceError: If the local delete fails
        """
        async with self._lock_for(self._save_locks, note_id):
            existing = await self.store.get(note_id)
            await self.store.delete(note_id)

        async with self._lock_for(self._push_locks, note_id):
            result = await self._delete_remote(note_id, existing)

        if result.status in (SyncStatus.SKIPPED, SyncStatus.SYNCED):
            self._pushed.discard(note_id)
        return result

    async def _delete_remote(self, note_id: str, existing: NoteRecord | None) -> SyncResult:
        remote_copy = note_id in self._pushed or (
            existing is not None and (existing.synced or existing.remote_known)
        )
        if not remote_copy:
            return SyncResult(
                note_id=note_id,
                status=SyncStatus.SKIPPED,
                operation=SyncOperation.DELETE,
            )

        if not self.connectivity.online:
            log_with_source(
                logger,
                "sync",
                "warning",
                "Deleted offline; remote copy left in place",
                note_id=note_id,
            )
            return self._deferred(note_id, None, SyncOperation.DELETE)

        try:
            await self.remote.delete(note_id)
        except RemoteCallFailure as e:
            return self._failed(note_id, None, SyncOperation.DELETE, e)

        log_with_source(logger, "sync", "info", "Note deleted remotely", note_id=note_id)
        return SyncResult(
            note_id=note_id,
            status=SyncStatus.SYNCED,
            operation=SyncOperation.DELETE,
        )

    def _deferred(
        self,
        note_id: str,
        updated_at: datetime | None,
        operation: SyncOperation | None = None,
    ) -> SyncResult:
        return SyncResult(
            note_id=note_id,
            status=SyncStatus.DEFERRED,
            operation=operation,
            updated_at=updated_at,
            error=ErrorDetail.from_exception(RemoteUnreachable()),
        )

    def _failed(
        self,
        note_id: str,
        updated_at: datetime | None,
        operation: SyncOperation | None,
        error: RemoteCallFailure,
    ) -> SyncResult:
        log_with_source(
            logger,
            "sync",
            "warning",
            "Remote sync failed, note left unsynced",
            note_id=note_id,
            operation=operation.value if operation else None,
            error_code=error.code,
            error=error.message,
        )
        return SyncResult(
            note_id=note_id,
            status=SyncStatus.FAILED,
            operation=operation,
            updated_at=updated_at,
            error=ErrorDetail.from_exception(error),
        )
