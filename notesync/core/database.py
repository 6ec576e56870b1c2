"""
Database Configuration.

SQLAlchemy async engine and session management for the local SQLite store.
Uses lazy initialization so importing the package never touches the disk.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from notesync.core.logging import get_logger
from notesync.models.base import Base

logger = get_logger(__name__)

# Module-level state for lazy initialization
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _create_engine() -> AsyncEngine:
    """Create async SQLAlchemy engine for the configured SQLite file."""
    from notesync.core.config import get_app_config, get_database_path, get_database_url

    db_path = get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(
        get_database_url(),
        echo=get_app_config().database.echo,
    )
    logger.debug("Database engine created", extra={"path": str(db_path)})
    return engine


def get_engine() -> AsyncEngine:
    """
    Get the database engine, creating it on first use.

    Returns:
        SQLAlchemy async engine instance
    """
    global _engine
    if _engine is None:
        _engine = _create_engine()
    return _engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to `engine`."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory, creating it on first use.

    Returns:
        SQLAlchemy async session factory
    """
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = create_session_factory(get_engine())
    return _async_session_factory


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create the local store schema if it does not exist yet."""
    target = engine or get_engine()
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Database schema ready")


async def dispose_engine() -> None:
    """Dispose the engine and forget the cached factory."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None
