"""Notification repository."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select, update

from estates.core.clock import utcnow
from estates.persistence.models.notification import Notification
from estates.persistence.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for in-app Notification entities."""

    def __init__(self, session: AsyncSession):
        """Initialize notification repository."""
        super().__init__(Notification, session)

    async def create_many(self, rows: list[dict]) -> list[Notification]:
        """Insert one notification per row in a single commit.

        Args:
            rows: Column values for each notification

        Returns:
            The created notifications (empty when rows is empty)
        """
        if not rows:
            return []
        instances = [Notification(**row) for row in rows]
        self.session.add_all(instances)
        await self.commit()
        return instances

    async def list_for_recipient(
        self, recipient_id: int, limit: int = 20, unread_only: bool = False
    ) -> list[Notification]:
        """Newest notifications of one recipient."""
        stmt = select(Notification).where(Notification.recipient_id == recipient_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_unread(self, recipient_id: int) -> int:
        """Count unread notifications of one recipient."""
        stmt = select(func.count(Notification.id)).where(
            Notification.recipient_id == recipient_id,
            Notification.read.is_(False),
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def get_for_recipient(self, notification_id: int, recipient_id: int) -> Notification | None:
        """Get a notification only if it belongs to the recipient."""
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_all_read(self, recipient_id: int) -> int:
        """Mark every unread notification of a recipient as read. Returns rows changed."""
        now = utcnow()
        stmt = (
            update(Notification)
            .where(Notification.recipient_id == recipient_id, Notification.read.is_(False))
            .values(read=True, read_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.commit()
        return result.rowcount or 0
