"""Notification fan-out for admin alerts and assignee reminders (email + in-app)."""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from estates.domain.services.admin_recipients import AdminRecipientResolver
from estates.infrastructure.email_templates import (
    EmailContent,
    render_assignee_reminder,
    render_follow_up_due_alert,
    render_new_enquiry_alert,
    render_new_lead_alert,
)
from estates.infrastructure.sendgrid_client import SendGridClient, get_sendgrid_client
from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.models.notification import NotificationType
from estates.persistence.models.query import Query
from estates.persistence.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


@dataclass
class AdminAlert:
    """One event to fan out to every admin: an email each plus an in-app row each."""

    type: str
    title: str
    message: str
    email: EmailContent
    data: dict[str, int] = field(default_factory=dict)


@dataclass
class AssigneeReminder:
    """Reminder for the owner of a lead about one follow-up."""

    email: str | None
    user_id: int | None
    title: str
    message: str
    content: EmailContent
    data: dict[str, int] = field(default_factory=dict)


def new_lead_alert(query: Query, lead: Lead) -> AdminAlert:
    """Alert for a lead created from an enquiry."""
    return AdminAlert(
        type=NotificationType.NEW_LEAD,
        title="New lead received",
        message=f"{lead.name} – {lead.property_name or 'Property'}",
        email=render_new_lead_alert(
            lead_id=lead.id,
            name=lead.name,
            email=lead.email,
            phone=lead.phone,
            message=lead.message,
            property_name=lead.property_name,
        ),
        data={"lead_id": lead.id, "query_id": query.id},
    )


def new_enquiry_alert(query: Query) -> AdminAlert:
    """Alert for an enquiry without property context."""
    return AdminAlert(
        type=NotificationType.NEW_ENQUIRY,
        title="New enquiry received",
        message=f"{query.name} – {query.email}",
        email=render_new_enquiry_alert(
            name=query.name,
            email=query.email,
            phone=query.phone,
            message=query.message,
            source=query.source,
            interested_property=query.interested_property,
        ),
        data={"query_id": query.id},
    )


def _follow_up_message(follow_up: LeadFollowUp, lead: Lead) -> str:
    suffix = f" ({lead.property_name})" if lead.property_name else ""
    return f"{follow_up.title} – {lead.name}{suffix}"


def follow_up_due_alert(follow_up: LeadFollowUp, lead: Lead) -> AdminAlert:
    """Alert for a follow-up that is overdue or due within the alert window."""
    return AdminAlert(
        type=NotificationType.FOLLOW_UP_DUE,
        title="Follow-up due",
        message=_follow_up_message(follow_up, lead),
        email=render_follow_up_due_alert(
            lead_id=lead.id,
            lead_name=lead.name,
            lead_email=lead.email,
            lead_phone=lead.phone,
            follow_up_title=follow_up.title,
            follow_up_type=follow_up.type,
            due_at=follow_up.due_at,
            property_name=lead.property_name,
        ),
        data={"lead_id": lead.id, "follow_up_id": follow_up.id},
    )


def assignee_reminder(
    follow_up: LeadFollowUp, lead: Lead, fallback_email: str | None = None
) -> AssigneeReminder:
    """Reminder for the lead's assignee, or for the fallback mailbox when unassigned.

    The lead's ``assignee`` relationship must already be loaded.
    """
    assignee = lead.assignee
    return AssigneeReminder(
        email=assignee.email if assignee else fallback_email,
        user_id=assignee.id if assignee else None,
        title="Follow-up due",
        message=_follow_up_message(follow_up, lead),
        content=render_assignee_reminder(
            assignee_name=assignee.name if assignee else "Team",
            lead_id=lead.id,
            lead_name=lead.name,
            lead_email=lead.email,
            lead_phone=lead.phone,
            follow_up_title=follow_up.title,
            due_at=follow_up.due_at,
            property_name=lead.property_name,
        ),
        data={"lead_id": lead.id, "follow_up_id": follow_up.id},
    )


class NotificationService:
    """Service for sending admin and assignee notifications.

    Delivery failures are logged and counted, never raised: callers treat
    notification as best effort.
    """

    def __init__(
        self,
        session: AsyncSession,
        email_client: SendGridClient | None = None,
        resolver: AdminRecipientResolver | None = None,
    ) -> None:
        """Initialize notification service.

        Args:
            session: Database session used for recipient lookup and in-app rows
            email_client: Email transport; None means email is not configured
            resolver: Admin recipient resolver (defaults to one built from settings)
        """
        self.session = session
        self.email_client = email_client
        self.resolver = resolver or AdminRecipientResolver.from_settings(session)
        self.notification_repo = NotificationRepository(session)

    async def notify_admins(self, alert: AdminAlert) -> dict[str, Any]:
        """Notify all admins of an event.

        Args:
            alert: Event content

        Returns:
            Dictionary with the number of in-app rows and email outcomes
        """
        in_app = await self._create_admin_notifications(alert)
        sent, failed = await self._email_admins(alert)
        logger.info(
            f"Admin alert fanned out: type={alert.type}, in_app={in_app}, "
            f"emails_sent={sent}, emails_failed={failed}"
        )
        return {"in_app": in_app, "emails_sent": sent, "emails_failed": failed}

    async def notify_assignee(
        self, reminder: AssigneeReminder, skip_in_app_for: set[int] | None = None
    ) -> bool:
        """Email the lead owner, and add an in-app row for them unless already covered.

        Args:
            reminder: Reminder content and recipient
            skip_in_app_for: User IDs that already get an in-app row for this event

        Returns:
            True if the reminder email was sent
        """
        if reminder.user_id is not None and reminder.user_id not in (skip_in_app_for or set()):
            try:
                await self.notification_repo.create_many([{
                    "recipient_id": reminder.user_id,
                    "type": NotificationType.FOLLOW_UP_DUE,
                    "title": reminder.title,
                    "message": reminder.message,
                    "data": reminder.data,
                }])
            except Exception as e:
                logger.error(
                    f"Failed to create assignee notification for user {reminder.user_id}: {e}",
                    exc_info=True,
                )

        if not reminder.email:
            logger.info("No assignee or fallback email for reminder, skipping email")
            return False
        return await self._send(reminder.email, reminder.content)

    async def send_confirmation(self, to: str, content: EmailContent) -> bool:
        """Send a best-effort email to the person who submitted an enquiry."""
        if self.email_client is None:
            logger.debug("Email not configured, skipping confirmation email")
            return False
        return await self._send(to, content)

    async def _create_admin_notifications(self, alert: AdminAlert) -> int:
        try:
            admins = await self.resolver.resolve_admin_users()
            rows = [
                {
                    "recipient_id": admin.id,
                    "type": alert.type,
                    "title": alert.title,
                    "message": alert.message,
                    "data": alert.data,
                }
                for admin in admins
            ]
            created = await self.notification_repo.create_many(rows)
        except Exception as e:
            logger.error(f"Failed to create in-app notifications for {alert.type}: {e}", exc_info=True)
            return 0
        return len(created)

    async def _email_admins(self, alert: AdminAlert) -> tuple[int, int]:
        if self.email_client is None:
            logger.debug(f"Email not configured, skipping admin emails for {alert.type}")
            return 0, 0
        try:
            emails = await self.resolver.resolve_admin_emails()
        except Exception as e:
            logger.error(f"Failed to resolve admin emails: {e}", exc_info=True)
            return 0, 0

        sent = failed = 0
        for email in emails:
            if await self._send(email, alert.email):
                sent += 1
            else:
                failed += 1
        return sent, failed

    async def _send(self, to: str, content: EmailContent) -> bool:
        if self.email_client is None:
            return False
        try:
            await self.email_client.send_email(
                to_email=to,
                subject=content.subject,
                html_content=content.html,
                text_content=content.text,
            )
        except Exception as e:
            logger.error(f"Failed to send email to {to}: {e}", exc_info=True)
            return False
        return True


def build_notification_service(session: AsyncSession) -> NotificationService:
    """Notification service wired to the configured email transport."""
    return NotificationService(session, email_client=get_sendgrid_client())
