"""Notification model for in-app notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from estates.core.clock import utcnow
from estates.persistence.database import Base


class Notification(Base):
    """In-app notification. One row per admin per event, so read state is per admin."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Notification type: "new_lead", "new_enquiry", "follow_up_due"
    type = Column(String(50), nullable=False)

    # Content
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Correlation ids for deep links: lead_id, follow_up_id, query_id
    data = Column(JSON, nullable=True)

    # Status
    read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    recipient = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index("ix_notifications_recipient_read_created", "recipient_id", "read", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, recipient_id={self.recipient_id}, type={self.type}, read={self.read})>"

    def mark_as_read(self) -> None:
        """Mark notification as read."""
        self.read = True
        self.read_at = utcnow()


# Notification types
class NotificationType:
    """Notification type constants."""
    NEW_LEAD = "new_lead"
    NEW_ENQUIRY = "new_enquiry"
    FOLLOW_UP_DUE = "follow_up_due"
