"""
Base Repository.

Base class for all repositories with common CRUD operations.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from notesync.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class NoteRepository(BaseRepository[Note]):
            model = Note
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        """Get a single record by ID, returning None if not found."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_all(self) -> list[ModelType]:
        """Get all records."""
        result = await self.session.execute(select(self.model))
        return list(result.scalars().all())

    async def upsert(self, **kwargs: Any) -> None:
        """
        Insert a record, or overwrite the one with the same primary key.

        A single INSERT .. ON CONFLICT DO UPDATE, so two writers racing on
        a new id both succeed and the later one wins.
        """
        keys = [column.name for column in self.model.__table__.primary_key]
        stmt = insert(self.model).values(**kwargs)
        stmt = stmt.on_conflict_do_update(
            index_elements=keys,
            set_={name: stmt.excluded[name] for name in kwargs if name not in keys},
        )
        await self.session.execute(stmt)

    async def delete_if_exists(self, id: str) -> bool:
        """Delete a record by ID. Returns whether a record was removed."""
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            return False
        await self.session.delete(instance)
        await self.session.flush()
        return True

