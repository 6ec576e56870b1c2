"""
Application Entry Point.

Wires the local store, remote client, connectivity monitor, reconciler and
notes controller from configuration.

Usage:
    from notesync.main import create_app

    async with create_app() as app:
        note = await app.controller.create_note()
        app.controller.edit(title="Groceries")
        await app.controller.save_now()
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from notesync.core.concurrency import clear_semaphores
from notesync.core.config import get_app_config
from notesync.core.database import dispose_engine, get_session_factory, init_db
from notesync.core.logging import get_logger
from notesync.remote.base import RemoteNotes
from notesync.remote.client import RemoteNotesClient
from notesync.services.local_store import LocalNoteStore
from notesync.services.notes import NotesController
from notesync.sync.connectivity import ConnectivityMonitor
from notesync.sync.reconciler import SyncReconciler

logger = get_logger(__name__)


@dataclass
class NotesApp:
    """Everything a front end needs, built once per process."""

    store: LocalNoteStore
    remote: RemoteNotes
    connectivity: ConnectivityMonitor
    reconciler: SyncReconciler
    controller: NotesController


@asynccontextmanager
async def create_app(
    remote: RemoteNotes | None = None,
    probe: bool = True,
    monitor: bool = False,
) -> AsyncGenerator[NotesApp, None]:
    """
    Build the application and tear it down on exit.

    Args:
        remote: Remote client override. Defaults to RemoteNotesClient from config.
        probe: Probe the remote service once at startup to seed connectivity.
        monitor: Keep probing in the background while the app is open.
    """
    app_config = get_app_config()
    sync_config = app_config.sync

    await init_db()
    store = LocalNoteStore(get_session_factory())
    remote = remote or RemoteNotesClient()
    connectivity = ConnectivityMonitor(
        initial=False,
        probe=remote.ping,
        interval=sync_config.probe_interval_seconds,
    )
    reconciler = SyncReconciler(store, remote, connectivity)
    controller = NotesController(
        store,
        reconciler,
        connectivity,
        debounce_seconds=sync_config.debounce_seconds,
        reconcile_on_reconnect=sync_config.reconcile_on_reconnect,
    )

    if probe:
        await connectivity.probe()
    if monitor:
        connectivity.start()

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
            "online": connectivity.online,
        },
    )
    await controller.load()

    try:
        yield NotesApp(store, remote, connectivity, reconciler, controller)
    finally:
        await controller.shutdown()
        await connectivity.stop()
        await remote.close()
        await dispose_engine()
        clear_semaphores()
        logger.info("Application shutting down")
