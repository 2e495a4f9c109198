"""Database models."""

from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.models.notification import Notification, NotificationType
from estates.persistence.models.property import Property
from estates.persistence.models.query import Query
from estates.persistence.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Property",
    "Query",
    "Lead",
    "LeadFollowUp",
    "Notification",
    "NotificationType",
]
