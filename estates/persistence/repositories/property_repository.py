"""Property repository."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from estates.persistence.models.property import Property
from estates.persistence.repositories.base import BaseRepository


class PropertyRepository(BaseRepository[Property]):
    """Repository for Property entities."""

    def __init__(self, session: AsyncSession):
        """Initialize property repository."""
        super().__init__(Property, session)

    async def get_by_slug(self, slug: str) -> Property | None:
        """Get property by slug."""
        stmt = select(Property).where(Property.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
