"""User repository."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from estates.persistence.models.user import User, UserRole
from estates.persistence.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entities."""

    def __init__(self, session: AsyncSession):
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active_admins(self) -> list[User]:
        """Get every active admin user, oldest first."""
        stmt = (
            select(User)
            .where(User.role == UserRole.ADMIN, User.is_active.is_(True))
            .order_by(User.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
