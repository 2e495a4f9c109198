"""Lead and follow-up models."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from estates.core.clock import utcnow
from estates.persistence.database import Base


class Lead(Base):
    """Sales lead, usually spawned from a query that carried property context.

    ``next_follow_up_at`` is derived: it always equals the earliest ``due_at``
    among the lead's incomplete follow-ups, or NULL when there are none.
    Only FollowUpService writes it.
    """

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    source = Column(String(50), nullable=False, default="lead_form")

    # Property context (denormalized so the lead survives property deletion)
    property_id = Column(Integer, nullable=True, index=True)
    property_slug = Column(String(255), nullable=True)
    property_name = Column(String(255), nullable=True)

    # Pipeline
    status = Column(String(50), nullable=False, default="new", index=True)
    priority = Column(String(20), nullable=False, default="medium")
    notes = Column(Text, nullable=True)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    next_follow_up_at = Column(DateTime, nullable=True, index=True)
    query_id = Column(Integer, ForeignKey("queries.id", ondelete="SET NULL"), nullable=True)
    tags = Column(JSON, nullable=True)

    # Deal metadata
    estimated_value = Column(Float, nullable=True)
    currency = Column(String(10), nullable=False, default="AED")
    budget = Column(Float, nullable=True)
    budget_max = Column(Float, nullable=True)
    preferred_area = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    last_contact_mode = Column(String(50), nullable=True)
    contact_history = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    assignee = relationship("User", foreign_keys=[assigned_to])
    follow_ups = relationship(
        "LeadFollowUp",
        back_populates="lead",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="LeadFollowUp.due_at",
    )

    __table_args__ = (
        Index("ix_leads_status_next_follow_up", "status", "next_follow_up_at"),
        Index("ix_leads_assigned_next_follow_up", "assigned_to", "next_follow_up_at"),
    )

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, email={self.email}, status={self.status}, next_follow_up_at={self.next_follow_up_at})>"


class LeadFollowUp(Base):
    """Follow-up task bound to exactly one lead.

    Completion is one-way and ``email_reminder_sent_at`` is never cleared.
    """

    __tablename__ = "lead_follow_ups"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    due_at = Column(DateTime, nullable=False, index=True)
    type = Column(String(50), nullable=False, default="call")
    title = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime, nullable=True, index=True)
    completed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    email_reminder_sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    lead = relationship("Lead", back_populates="follow_ups")
    completed_by_user = relationship("User", foreign_keys=[completed_by])

    __table_args__ = (
        Index("ix_lead_follow_ups_lead_due", "lead_id", "due_at"),
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self) -> str:
        return f"<LeadFollowUp(id={self.id}, lead_id={self.lead_id}, due_at={self.due_at}, completed_at={self.completed_at})>"


LEAD_SOURCES = ("contact_page", "lead_form", "property_detail", "mobile_app", "whatsapp", "other")
LEAD_STATUSES = ("new", "contacted", "qualified", "proposal", "negotiation", "won", "lost", "nurturing")
CONTACT_MODES = ("call", "email", "whatsapp", "meeting", "site_visit", "other")
FOLLOW_UP_TYPES = ("call", "email", "meeting", "whatsapp", "site_visit", "document", "other")
