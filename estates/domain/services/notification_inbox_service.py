"""In-app notification inbox for the signed-in admin."""

from sqlalchemy.ext.asyncio import AsyncSession

from estates.core.errors import NotFoundError
from estates.persistence.models.notification import Notification
from estates.persistence.repositories.notification_repository import NotificationRepository

MAX_LIMIT = 50
DEFAULT_LIMIT = 20


class NotificationInboxService:
    """Read and acknowledge a user's own notifications."""

    def __init__(self, session: AsyncSession) -> None:
        self.notification_repo = NotificationRepository(session)

    async def list_notifications(
        self, user_id: int, limit: int = DEFAULT_LIMIT, unread_only: bool = False
    ) -> tuple[list[Notification], int]:
        """Newest notifications first, plus the user's total unread count."""
        limit = min(MAX_LIMIT, max(1, limit))
        notifications = await self.notification_repo.list_for_recipient(user_id, limit, unread_only)
        unread_count = await self.notification_repo.count_unread(user_id)
        return notifications, unread_count

    async def mark_read(self, user_id: int, notification_id: int) -> Notification:
        """Mark one of the user's notifications read.

        Raises:
            NotFoundError: If it does not exist or belongs to someone else
        """
        notification = await self.notification_repo.get_for_recipient(notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        if not notification.read:
            notification.mark_as_read()
            await self.notification_repo.commit()
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        return await self.notification_repo.mark_all_read(user_id)
