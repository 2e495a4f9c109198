"""Repository implementations."""

from estates.persistence.repositories.base import BaseRepository
from estates.persistence.repositories.follow_up_repository import FollowUpRepository
from estates.persistence.repositories.lead_repository import LeadRepository
from estates.persistence.repositories.notification_repository import NotificationRepository
from estates.persistence.repositories.property_repository import PropertyRepository
from estates.persistence.repositories.query_repository import QueryRepository
from estates.persistence.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PropertyRepository",
    "QueryRepository",
    "LeadRepository",
    "FollowUpRepository",
    "NotificationRepository",
]
