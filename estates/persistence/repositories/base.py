"""Base repository with common CRUD queries."""

from typing import Generic, TypeVar, Type

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from estates.core.errors import PersistenceError
from estates.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common query methods."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """Initialize repository with model and session."""
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        """Get entity by ID."""
        stmt = select(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        **filters
    ) -> list[ModelType]:
        """List entities matching equality filters."""
        stmt = select(self.model)

        for key, value in filters.items():
            if hasattr(self.model, key):
                stmt = stmt.where(getattr(self.model, key) == value)

        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add(self, **data) -> ModelType:
        """Stage a new entity and flush it so it gets an ID, without committing."""
        instance = self.model(**data)
        self.session.add(instance)
        await self.flush()
        return instance

    async def create(self, **data) -> ModelType:
        """Create and commit a new entity."""
        instance = self.model(**data)
        self.session.add(instance)
        await self.commit()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: int, **data) -> ModelType | None:
        """Update entity."""
        instance = await self.get_by_id(id)
        if instance is None:
            return None

        for key, value in data.items():
            setattr(instance, key, value)

        await self.commit()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> bool:
        """Delete entity."""
        instance = await self.get_by_id(id)
        if instance is None:
            return False

        await self.session.delete(instance)
        await self.commit()
        return True

    async def flush(self) -> None:
        """Flush pending changes, mapping store failures to PersistenceError."""
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(f"Failed to write {self.model.__tablename__}") from e

    async def commit(self) -> None:
        """Commit the session, mapping store failures to PersistenceError."""
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(f"Failed to save {self.model.__tablename__}") from e
