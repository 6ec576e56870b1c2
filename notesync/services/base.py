"""
Base Service.

Base class for services that own a unit of work against the local store.
Every operation opens its own session and commits before returning, so a
successful call is durable.

Usage:
    from notesync.services.base import BaseService

    class LocalNoteStore(BaseService):
        async def get(self, note_id: str) -> NoteRecord | None:
            async def op(session):
                ...
            return await self._execute_db_operation("get_note", op)
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notesync.core.exceptions import LocalPersistenceError
from notesync.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Session-per-operation transactions
    - Logging context
    - Error wrapping for database operations
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize the service with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory for the local store
        """
        self._session_factory = session_factory
        self._logger = get_logger(self.__class__.__module__)

    async def _execute_db_operation(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """
        Run `work` in a fresh session and commit it.

        Converts SQLAlchemy exceptions to LocalPersistenceError. Local
        durability is the baseline guarantee, so the error always
        propagates.

        Args:
            operation: Description of the operation for logging
            work: Coroutine function receiving the session

        Returns:
            Result of `work`

        Raises:
            LocalPersistenceError: For any database error
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    return await work(session)
        except SQLAlchemyError as e:
            self._logger.error(
                "Local store error",
                extra={"operation": operation, "error": str(e)},
            )
            raise LocalPersistenceError(f"Local store operation failed: {operation}") from e

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
