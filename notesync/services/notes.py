"""
Notes Controller.

Owns the application state a notes UI works against: the note list, the
note being edited, the search term and the outcome of the last sync.
Every mutation goes through a method here; nothing is held in module
globals.

Edits are debounced: edit() only updates the in-memory note and re-arms
the save timer. When the quiet period elapses, the latest version is
handed to the SyncReconciler.
"""

from collections.abc import Awaitable

from notesync.core.exceptions import NotFoundError, ValidationError
from notesync.core.logging import get_logger, log_with_source
from notesync.schemas.note import NoteRecord
from notesync.schemas.sync import SyncResult
from notesync.services.local_store import LocalNoteStore
from notesync.sync.connectivity import ConnectivityMonitor
from notesync.sync.debounce import DebounceScheduler
from notesync.sync.reconciler import SyncReconciler

logger = get_logger(__name__)


class NotesController:
    """
    Application state and the operations that mutate it.

    Attributes:
        notes: Last snapshot read from the local store
        current: The open note, including edits not yet saved
        search_term: Active search filter
        last_result: Outcome of the most recent save or delete
    """

    def __init__(
        self,
        store: LocalNoteStore,
        reconciler: SyncReconciler,
        connectivity: ConnectivityMonitor,
        debounce_seconds: float = 0.5,
        reconcile_on_reconnect: bool = False,
    ) -> None:
        self.store = store
        self.reconciler = reconciler
        self.connectivity = connectivity
        self.reconcile_on_reconnect = reconcile_on_reconnect

        self.notes: list[NoteRecord] = []
        self.current: NoteRecord | None = None
        self.search_term: str = ""
        self.last_result: SyncResult | None = None

        self._debounce: DebounceScheduler[NoteRecord] = DebounceScheduler(
            debounce_seconds, self._save,
        )
        self._unsubscribe = connectivity.subscribe(self._on_connectivity_change)

    @property
    def online(self) -> bool:
        """Online/offline indicator."""
        return self.connectivity.online

    @property
    def save_pending(self) -> bool:
        return self._debounce.pending

    @property
    def last_error(self) -> BaseException | None:
        """Exception raised by the last debounced save, if it failed locally."""
        return self._debounce.last_error

    async def load(self) -> list[NoteRecord]:
        """Re-read every note from the local store."""
        self.notes = await self.store.list()
        return self.notes

    def set_search(self, term: str) -> list[NoteRecord]:
        self.search_term = term
        return self.visible_notes()

    def visible_notes(self) -> list[NoteRecord]:
        """Notes matching the search term, most recently updated first."""
        matching = [note for note in self.notes if note.matches(self.search_term)]
        return sorted(matching, key=lambda note: note.updated_at, reverse=True)

    async def create_note(self) -> NoteRecord:
        """Create an empty unsynced note, store it, and open it."""
        self._debounce.cancel()
        note = NoteRecord.new()
        await self.store.put(note)
        log_with_source(logger, "internal", "info", "Note created", note_id=note.id)
        self.current = note
        await self.load()
        return note

    async def open_note(self, note_id: str) -> NoteRecord:
        """
        Open a stored note for editing. Drops any pending save of the
        previously open note.

        Raises:
            NotFoundError: If the note does not exist
        """
        note = await self.store.get(note_id)
        if note is None:
            raise NotFoundError(f"Note {note_id} not found")
        self._debounce.cancel()
        self.current = note
        return note

    def edit(self, title: str | None = None, content: str | None = None) -> NoteRecord:
        """
        Apply an edit to the open note and schedule a debounced save.

        Raises:
            ValidationError: If no note is open
        """
        if self.current is None:
            raise ValidationError("No note is open for editing")

        changes: dict[str, str] = {}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content

        self.current = self.current.model_copy(update=changes)
        self._debounce.schedule(self.current)
        return self.current

    async def save_now(self) -> SyncResult | None:
        """
        Run the pending save immediately.

        Raises:
            LocalPersistenceError: If the local write fails
        """
        return await self._debounce.flush()

    async def close_note(self, save_pending: bool = False) -> None:
        """Close the open note, either saving or discarding a pending save."""
        if save_pending:
            await self._debounce.flush()
        else:
            self._debounce.cancel()
        self.current = None

    async def delete_note(self, note_id: str) -> SyncResult:
        """
        Delete a note locally, and remotely when it was synced.

        Confirmation is the caller's job.
        """
        if self.current is not None and self.current.id == note_id:
            self._debounce.cancel()
            await self._debounce.wait()
            self.current = None

        result = await self.reconciler.reconcile_delete(note_id)
        self.last_result = result
        await self.load()
        return result

    async def sync_pending(self) -> list[SyncResult]:
        """Push every unsynced note to the remote service."""
        results = await self.reconciler.reconcile_pending()
        await self.load()
        return results

    async def _save(self, note: NoteRecord) -> SyncResult:
        result = await self.reconciler.reconcile(note)
        self.last_result = result

        stored = await self.store.get(note.id)
        if stored is not None and self.current is not None and self.current.id == note.id:
            self.current = self.current.model_copy(
                update={
                    "updated_at": stored.updated_at,
                    "synced": stored.synced,
                    "remote_known": stored.remote_known,
                },
            )
        await self.load()
        return result

    def _on_connectivity_change(self, online: bool) -> Awaitable[list[SyncResult]] | None:
        if online and self.reconcile_on_reconnect:
            return self.sync_pending()
        return None

    async def shutdown(self) -> None:
        """Drop pending saves and detach from the connectivity monitor."""
        self._debounce.cancel()
        await self._debounce.wait()
        self._unsubscribe()
