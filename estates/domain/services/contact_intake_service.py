"""Contact intake: turn a public enquiry into a query and, with property context, a lead."""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from estates.core.clock import utcnow
from estates.core.errors import ValidationError
from estates.core.phone import is_valid_phone, normalize_phone
from estates.infrastructure.email_templates import render_query_confirmation
from estates.infrastructure.notifications import new_enquiry_alert, new_lead_alert
from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.models.query import QUERY_SOURCES, Query
from estates.persistence.repositories.follow_up_repository import FollowUpRepository
from estates.persistence.repositories.lead_repository import LeadRepository
from estates.persistence.repositories.property_repository import PropertyRepository
from estates.persistence.repositories.query_repository import QueryRepository
from estates.settings import settings
from estates.workers.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

FIRST_FOLLOW_UP_TITLE = "First follow-up – new lead"


@dataclass
class Enquiry:
    """Raw enquiry as submitted from the public site."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    message: str | None = None
    subject: str | None = None
    source: str | None = None
    interested_property: str | None = None
    property_slug: str | None = None
    property_id: str | int | None = None
    property_name: str | None = None


@dataclass
class IntakeResult:
    """Records written for one enquiry."""

    query: Query
    lead: Lead | None = None
    follow_up: LeadFollowUp | None = None


def _clean(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_positive_int(value: str | int | None) -> int | None:
    """Return the value as an ID if it is a positive integer, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    value = str(value).strip()
    if value.isdigit() and int(value) > 0:
        return int(value)
    return None


class ContactIntakeService:
    """Service for accepting public enquiries."""

    def __init__(self, session: AsyncSession, dispatcher: NotificationDispatcher) -> None:
        """Initialize contact intake service.

        Args:
            session: Database session for the request
            dispatcher: Background executor for alerts and confirmation email
        """
        self.session = session
        self.dispatcher = dispatcher
        self.query_repo = QueryRepository(session)
        self.lead_repo = LeadRepository(session)
        self.follow_up_repo = FollowUpRepository(session)
        self.property_repo = PropertyRepository(session)

    async def submit(self, enquiry: Enquiry) -> IntakeResult:
        """Store an enquiry, spawn a lead when it carries property context, and notify.

        Args:
            enquiry: Submitted enquiry

        Returns:
            The query, plus the lead and first follow-up when one was created

        Raises:
            ValidationError: If a required field is missing or the phone is invalid
        """
        name = _clean(enquiry.name)
        email = _clean(enquiry.email)
        phone = _clean(enquiry.phone)
        message = _clean(enquiry.message)
        if not (name and email and phone and message):
            raise ValidationError("Name, email, phone and message are required")

        phone = normalize_phone(phone)
        if not is_valid_phone(phone):
            raise ValidationError("Please provide a valid phone number (8 to 15 digits, with country code).")

        source = enquiry.source if enquiry.source in QUERY_SOURCES else "contact_page"
        interested_property = _clean(enquiry.interested_property) or _clean(enquiry.property_name)
        property_slug = _clean(enquiry.property_slug)
        property_id = parse_positive_int(enquiry.property_id)
        property_name = _clean(enquiry.property_name) or interested_property

        query = await self.query_repo.add(
            name=name,
            email=email.lower(),
            phone=phone,
            message=message,
            subject=_clean(enquiry.subject),
            source=source,
            interested_property=interested_property,
        )

        result = IntakeResult(query=query)
        if property_slug or property_id or property_name:
            result.lead, result.follow_up = await self._create_lead(
                query, source, property_id, property_slug, property_name
            )

        await self.query_repo.commit()
        logger.info(
            f"Enquiry stored: query_id={query.id}, "
            f"lead_id={result.lead.id if result.lead else None}, source={source}"
        )

        self._notify(result)
        return result

    async def _create_lead(
        self,
        query: Query,
        source: str,
        property_id: int | None,
        property_slug: str | None,
        property_name: str | None,
    ) -> tuple[Lead, LeadFollowUp]:
        # Fill in whatever the form did not send from the property record
        listing = None
        if property_id:
            listing = await self.property_repo.get_by_id(property_id)
        elif property_slug:
            listing = await self.property_repo.get_by_slug(property_slug)
        if listing is not None:
            property_id = property_id or listing.id
            property_slug = property_slug or listing.slug
            property_name = property_name or listing.name

        due_at = utcnow() + timedelta(hours=settings.first_follow_up_hours)
        lead = await self.lead_repo.add(
            name=query.name,
            email=query.email,
            phone=query.phone,
            message=query.message,
            source="mobile_app" if source == "mobile_app" else "property_detail",
            property_id=property_id,
            property_slug=property_slug,
            property_name=property_name,
            query_id=query.id,
            next_follow_up_at=due_at,
        )
        follow_up = await self.follow_up_repo.add(
            lead_id=lead.id,
            due_at=due_at,
            type="call",
            title=FIRST_FOLLOW_UP_TITLE,
            notes=f"Lead from property: {property_name or 'N/A'}. Contact to discuss interest.",
        )
        return lead, follow_up

    def _notify(self, result: IntakeResult) -> None:
        query = result.query
        try:
            if result.lead is not None:
                alert = new_lead_alert(query, result.lead)
            else:
                alert = new_enquiry_alert(query)
            recipient = query.email
            confirmation = render_query_confirmation(
                name=query.name,
                message=query.message,
                source=query.source,
                interested_property=query.interested_property,
            )
            self.dispatcher.dispatch(f"{alert.type} alert", lambda svc: svc.notify_admins(alert))
            self.dispatcher.dispatch(
                "query confirmation email",
                lambda svc: svc.send_confirmation(recipient, confirmation),
            )
        except Exception as e:
            logger.error(f"Failed to schedule notifications for query {query.id}: {e}", exc_info=True)
