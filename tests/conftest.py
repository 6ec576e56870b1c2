"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Test Database Configuration:
    Tests use a SQLite file under pytest's tmp_path, one per test, so a
    test can dispose its engine and reopen the same file to check
    durability. Concurrent sessions against the same file behave like the
    real application, which an in-memory StaticPool database would not.
"""

from collections.abc import AsyncGenerator, Callable, Generator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from notesync.core.concurrency import clear_semaphores
from notesync.core.config import get_app_config, get_settings
from notesync.core.database import create_session_factory, init_db
from notesync.schemas.note import NoteRecord
from notesync.services.local_store import LocalNoteStore


# =============================================================================
# Global State Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_process_state() -> Generator[None, None, None]:
    """Semaphores bind to an event loop and config is cached; reset both."""
    clear_semaphores()
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    clear_semaphores()
    get_settings.cache_clear()
    get_app_config.cache_clear()


# =============================================================================
# Database Fixtures
# =============================================================================


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Location of the per-test SQLite file."""
    return tmp_path / "notes.db"


@pytest.fixture
async def db_engine(db_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create the test engine with the notes table in place."""
    engine = create_async_engine(sqlite_url(db_path), echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest.fixture
def store(db_session_factory: async_sessionmaker[AsyncSession]) -> LocalNoteStore:
    """Local note store backed by the test database."""
    return LocalNoteStore(db_session_factory)


# =============================================================================
# Note Fixtures
# =============================================================================


BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def make_note() -> Callable[..., NoteRecord]:
    """
    Factory for NoteRecord values with predictable timestamps.

    Usage:
        def test_something(make_note):
            note = make_note("n1", title="Groceries", minutes=5)
    """

    def _make(
        note_id: str = "note-1",
        title: str = "",
        content: str = "",
        minutes: int = 0,
        **kwargs: Any,
    ) -> NoteRecord:
        return NoteRecord(
            id=note_id,
            title=title,
            content=content,
            updated_at=BASE_TIME + timedelta(minutes=minutes),
            **kwargs,
        )

    return _make
