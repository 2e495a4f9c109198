"""Lead service for admin lead management."""

import logging
from datetime import datetime, time, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from estates.core.clock import utcnow
from estates.core.errors import NotFoundError, ValidationError
from estates.core.phone import normalize_phone
from estates.domain.services.contact_intake_service import parse_positive_int
from estates.persistence.models.lead import CONTACT_MODES, LEAD_SOURCES, LEAD_STATUSES, Lead
from estates.persistence.models.query import PRIORITIES
from estates.persistence.repositories.follow_up_repository import FollowUpRepository
from estates.persistence.repositories.lead_repository import LeadRepository
from estates.persistence.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

MANUAL_LEAD_MESSAGE = "Manual lead from admin"

_TEXT_FIELDS = ("notes", "preferred_area", "address", "contact_history")
_NUMBER_FIELDS = ("budget", "budget_max", "estimated_value")


def _text(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid number: {value}")


class LeadService:
    """Service for lead management.

    ``next_follow_up_at`` is never written here; FollowUpService owns it.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize lead service."""
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.follow_up_repo = FollowUpRepository(session)
        self.user_repo = UserRepository(session)

    async def create_lead(self, data: dict[str, Any]) -> Lead:
        """Create a lead by hand. Manual leads start without follow-ups.

        Args:
            data: Lead fields (name, email and phone required)

        Returns:
            Created lead with assignee loaded

        Raises:
            ValidationError: If name, email or phone is missing
        """
        name = _text(data.get("name"))
        email = _text(data.get("email"))
        phone = _text(data.get("phone"))
        if not (name and email and phone):
            raise ValidationError("Name, email and phone are required")

        source = data.get("source")
        lead = await self.lead_repo.add(
            name=name,
            email=email.lower(),
            phone=normalize_phone(phone),
            message=_text(data.get("message")) or MANUAL_LEAD_MESSAGE,
            source=source if source in LEAD_SOURCES else "lead_form",
            property_id=parse_positive_int(data.get("property_id")),
            property_slug=_text(data.get("property_slug")),
            property_name=_text(data.get("property_name")),
            budget=_number(data.get("budget")),
            budget_max=_number(data.get("budget_max")),
            preferred_area=_text(data.get("preferred_area")),
            address=_text(data.get("address")),
        )
        await self.lead_repo.commit()
        logger.info(f"Manual lead created: lead_id={lead.id}")
        return await self.lead_repo.get_with_assignee(lead.id)

    async def list_leads(
        self,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        status: str | None = None,
        assigned_to: int | str | None = None,
        overdue: bool = False,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Lead], int]:
        """List leads with filters and pagination.

        Returns:
            Tuple of (page of leads, total matching count)
        """
        page = max(1, page)
        limit = min(100, max(1, limit))
        return await self.lead_repo.search(
            skip=(page - 1) * limit,
            limit=limit,
            search=search.strip() if search else None,
            status=status if status in LEAD_STATUSES else None,
            assigned_to=assigned_to,
            overdue_before=utcnow() if overdue else None,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    async def get_lead(self, lead_id: int) -> Lead:
        """Get a lead with its follow-ups ordered by due time.

        Raises:
            NotFoundError: If the lead does not exist
        """
        lead = await self.lead_repo.get_with_follow_ups(lead_id)
        if lead is None:
            raise NotFoundError("Lead not found")
        return lead

    async def update_lead(self, lead_id: int, changes: dict[str, Any]) -> Lead:
        """Apply admin edits to a lead.

        Enumerated fields with unknown values are ignored. ``next_follow_up_at``
        is not editable and is dropped if present.

        Raises:
            NotFoundError: If the lead does not exist
            ValidationError: If the assignee does not exist or a number is malformed
        """
        lead = await self.lead_repo.get_by_id(lead_id)
        if lead is None:
            raise NotFoundError("Lead not found")

        if changes.get("status") in LEAD_STATUSES:
            lead.status = changes["status"]
        if changes.get("priority") in PRIORITIES:
            lead.priority = changes["priority"]
        if changes.get("last_contact_mode") in CONTACT_MODES:
            lead.last_contact_mode = changes["last_contact_mode"]
        if "assigned_to" in changes:
            lead.assigned_to = await self._resolve_assignee(changes["assigned_to"])
        for key in _TEXT_FIELDS:
            if key in changes:
                setattr(lead, key, _text(changes[key]))
        for key in _NUMBER_FIELDS:
            if key in changes:
                setattr(lead, key, _number(changes[key]))
        if "tags" in changes:
            lead.tags = [str(t).strip() for t in changes["tags"] or [] if str(t).strip()]

        await self.lead_repo.commit()
        logger.info(f"Lead {lead_id} updated: fields={sorted(changes)}")
        return await self.lead_repo.get_with_assignee(lead_id)

    async def _resolve_assignee(self, value: Any) -> int | None:
        user_id = parse_positive_int(value)
        if user_id is None:
            return None
        if await self.user_repo.get_by_id(user_id) is None:
            raise ValidationError("Assigned user not found")
        return user_id

    async def delete_lead(self, lead_id: int) -> None:
        """Delete a lead and all its follow-ups in one transaction.

        Raises:
            NotFoundError: If the lead does not exist
        """
        lead = await self.lead_repo.get_by_id(lead_id)
        if lead is None:
            raise NotFoundError("Lead not found")

        removed = await self.follow_up_repo.delete_for_lead(lead_id)
        await self.session.delete(lead)
        await self.lead_repo.commit()
        logger.info(f"Lead {lead_id} deleted with {removed} follow-ups")

    async def get_stats(self, now: datetime | None = None) -> dict[str, Any]:
        """Dashboard counters: total, by status, overdue and due today."""
        now = now or utcnow()
        start_of_day = datetime.combine(now.date(), time.min)
        return {
            "total": await self.lead_repo.count(),
            "by_status": await self.lead_repo.count_by("status"),
            "overdue_follow_ups": await self.lead_repo.count_next_follow_up_between(None, now),
            "due_today": await self.lead_repo.count_next_follow_up_between(
                start_of_day, start_of_day + timedelta(days=1)
            ),
        }
