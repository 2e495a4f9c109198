"""Lead and follow-up schemas."""

from datetime import datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from estates.api.schemas.common import Pagination, UserSummary


class FollowUpCreate(BaseModel):
    """Follow-up creation request. Required fields are checked by the service."""

    due_at: datetime | None = None
    type: str | None = None
    title: str | None = None
    notes: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class FollowUpResponse(BaseModel):
    """Follow-up response."""

    id: int
    lead_id: int
    due_at: datetime
    type: str
    title: str
    notes: str | None
    completed_at: datetime | None
    completed_by: int | None
    email_reminder_sent_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True


class LeadCreate(BaseModel):
    """Manual lead creation request."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    source: str | None = None
    property_id: str | int | None = None
    property_slug: str | None = None
    property_name: str | None = None
    budget: float | None = None
    budget_max: float | None = None
    preferred_area: str | None = None
    address: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LeadUpdate(BaseModel):
    """Lead update request. The next follow-up time is not editable here."""

    status: str | None = None
    priority: str | None = None
    notes: str | None = None
    assigned_to: int | None = None
    budget: float | None = None
    budget_max: float | None = None
    estimated_value: float | None = None
    preferred_area: str | None = None
    address: str | None = None
    last_contact_mode: str | None = None
    contact_history: str | None = None
    tags: list[str] | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LeadResponse(BaseModel):
    """Lead response."""

    id: int
    name: str
    email: str
    phone: str
    message: str
    source: str
    property_id: int | None
    property_slug: str | None
    property_name: str | None
    status: str
    priority: str
    notes: str | None
    assigned_to: int | None
    assignee: UserSummary | None = None
    next_follow_up_at: datetime | None
    query_id: int | None
    tags: list[str] | None
    estimated_value: float | None
    currency: str
    budget: float | None
    budget_max: float | None
    preferred_area: str | None
    address: str | None
    last_contact_mode: str | None
    contact_history: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadDetailResponse(LeadResponse):
    """Lead with its follow-ups, soonest first."""

    follow_ups: list[FollowUpResponse]


class LeadsListResponse(BaseModel):
    """Leads list response."""

    leads: list[LeadResponse]
    pagination: Pagination


class FollowUpWithLeadResponse(FollowUpResponse):
    """Follow-up carrying its parent lead."""

    lead: LeadResponse


class FollowUpAlertsResponse(BaseModel):
    """Overdue and due-soon work."""

    overdue_leads: list[LeadResponse]
    upcoming_leads: list[LeadResponse]
    follow_ups_due: list[FollowUpWithLeadResponse]


class ReminderRunResponse(BaseModel):
    """Outcome of a due-reminder run."""

    success: bool = True
    message: str
    sent: int


class LeadStatsResponse(BaseModel):
    """Dashboard counters."""

    total: int
    by_status: dict[str, int]
    overdue_follow_ups: int
    due_today: int
