"""Query model for raw contact-form submissions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from estates.core.clock import utcnow
from estates.persistence.database import Base


class Query(Base):
    """Inbound enquiry as submitted by a site visitor."""

    __tablename__ = "queries"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    subject = Column(String(255), nullable=True)
    source = Column(String(50), nullable=False, default="contact_page", index=True)
    interested_property = Column(String(255), nullable=True)

    # Workflow
    status = Column(String(50), nullable=False, default="new", index=True)
    priority = Column(String(20), nullable=False, default="medium")
    notes = Column(Text, nullable=True)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    tags = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    assignee = relationship("User", foreign_keys=[assigned_to])

    def __repr__(self) -> str:
        return f"<Query(id={self.id}, email={self.email}, status={self.status})>"


QUERY_SOURCES = ("contact_page", "lead_form", "property_detail", "mobile_app", "other")
QUERY_STATUSES = ("new", "in_progress", "resolved", "closed")
PRIORITIES = ("low", "medium", "high", "urgent")
