"""
Integration Test Fixtures.

Fixtures for integration tests - a real SQLite store (from the root
conftest.py) and the real RemoteNotesClient talking to an in-memory note
service through httpx.MockTransport.
"""

import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest

from notesync.core.resilience import create_circuit_breaker
from notesync.remote.client import RemoteNotesClient
from notesync.services.local_store import LocalNoteStore
from notesync.services.notes import NotesController
from notesync.sync.connectivity import ConnectivityMonitor
from notesync.sync.reconciler import SyncReconciler

REMOTE_URL = "http://remote.test"
DEBOUNCE = 0.05


# =============================================================================
# Remote Note Service
# =============================================================================


class InMemoryNoteService:
    """
    REST note service backed by a dict, served through httpx.MockTransport.

    Set `down` to answer every request with 503.
    """

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, str]] = []
        self.down = False

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.requests if m == method)

    def handle(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.requests.append((method, path))

        if self.down:
            return httpx.Response(503)
        if path == "/health":
            return httpx.Response(200, json={"status": "ok"})
        if method == "POST" and path == "/notes":
            body = json.loads(request.content)
            if body["id"] in self.records:
                return httpx.Response(409)
            self.records[body["id"]] = body
            return httpx.Response(201, json=body)

        note_id = path.removeprefix("/notes/")
        if method == "GET":
            if note_id in self.records:
                return httpx.Response(200, json=self.records[note_id])
            return httpx.Response(404)
        if method == "PUT":
            if note_id not in self.records:
                return httpx.Response(404)
            self.records[note_id] = json.loads(request.content)
            return httpx.Response(200, json=self.records[note_id])
        if method == "DELETE":
            if self.records.pop(note_id, None) is None:
                return httpx.Response(404)
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture
def remote_service() -> InMemoryNoteService:
    return InMemoryNoteService()


@pytest.fixture
async def remote_client(remote_service: InMemoryNoteService) -> AsyncGenerator[RemoteNotesClient, None]:
    client = RemoteNotesClient(
        base_url=REMOTE_URL,
        timeout=1.0,
        breaker=create_circuit_breaker("remote_notes_test", fail_max=100),
        transport=httpx.MockTransport(remote_service.handle),
    )
    yield client
    await client.close()


# =============================================================================
# Sync Engine Fixtures
# =============================================================================


@pytest.fixture
def connectivity() -> ConnectivityMonitor:
    return ConnectivityMonitor(initial=True)


@pytest.fixture
def sync_reconciler(
    store: LocalNoteStore,
    remote_client: RemoteNotesClient,
    connectivity: ConnectivityMonitor,
) -> SyncReconciler:
    return SyncReconciler(store, remote_client, connectivity)


@pytest.fixture
async def controller(
    store: LocalNoteStore,
    sync_reconciler: SyncReconciler,
    connectivity: ConnectivityMonitor,
) -> AsyncGenerator[NotesController, None]:
    """
    Notes controller wired to the real store and remote client.

    Usage:
        async def test_edit(controller):
            await controller.create_note()
            controller.edit(title="Groceries")
            await controller.save_now()
    """
    notes_controller = NotesController(
        store,
        sync_reconciler,
        connectivity,
        debounce_seconds=DEBOUNCE,
    )
    await notes_controller.load()
    yield notes_controller
    await notes_controller.shutdown()
    await connectivity.stop()
