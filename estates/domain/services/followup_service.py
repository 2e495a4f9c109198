"""Follow-up service for scheduling lead follow-ups, alerts and due reminders."""

import asyncio
import logging
import weakref
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from estates.core.clock import to_naive_utc, utcnow
from estates.core.errors import NotFoundError, ValidationError
from estates.infrastructure.notifications import (
    NotificationService,
    assignee_reminder,
    build_notification_service,
    follow_up_due_alert,
)
from estates.persistence.models.lead import FOLLOW_UP_TYPES, Lead, LeadFollowUp
from estates.persistence.repositories.follow_up_repository import FollowUpRepository
from estates.persistence.repositories.lead_repository import LeadRepository
from estates.settings import settings

logger = logging.getLogger(__name__)

# One lock per lead while a follow-up write on it is in flight
_lead_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lead_lock(lead_id: int) -> asyncio.Lock:
    lock = _lead_locks.get(lead_id)
    if lock is None:
        lock = asyncio.Lock()
        _lead_locks[lead_id] = lock
    return lock


class FollowUpService:
    """Service for managing lead follow-ups.

    Every write that changes a lead's set of incomplete follow-ups also
    rewrites ``Lead.next_follow_up_at`` in the same transaction, under a
    per-lead lock and a row lock on the lead.
    """

    def __init__(
        self,
        session: AsyncSession,
        notifier: NotificationService | None = None,
    ) -> None:
        """Initialize follow-up service.

        Args:
            session: Database session
            notifier: Notification fan-out used by due reminders
        """
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.follow_up_repo = FollowUpRepository(session)
        self._notifier = notifier

    @property
    def notifier(self) -> NotificationService:
        if self._notifier is None:
            self._notifier = build_notification_service(self.session)
        return self._notifier

    async def add_follow_up(
        self,
        lead_id: int,
        due_at: datetime | None,
        title: str | None,
        type: str | None = None,
        notes: str | None = None,
    ) -> LeadFollowUp:
        """Add a follow-up to a lead.

        Args:
            lead_id: Owning lead ID
            due_at: When the follow-up is due
            title: Short task title
            type: Channel; unknown values fall back to "call"
            notes: Optional notes

        Returns:
            The created follow-up

        Raises:
            ValidationError: If due_at or title is missing
            NotFoundError: If the lead does not exist
        """
        title = (title or "").strip()
        if due_at is None or not title:
            raise ValidationError("dueAt and title are required")

        async with _lead_lock(lead_id):
            lead = await self.lead_repo.lock_for_update(lead_id)
            if lead is None:
                raise NotFoundError("Lead not found")

            follow_up = await self.follow_up_repo.add(
                lead_id=lead.id,
                due_at=to_naive_utc(due_at),
                type=type if type in FOLLOW_UP_TYPES else "call",
                title=title,
                notes=notes.strip() if notes and notes.strip() else None,
            )
            await self._recompute_next_follow_up(lead)
            await self.follow_up_repo.commit()

        logger.info(
            f"Follow-up {follow_up.id} added to lead {lead_id}, "
            f"next_follow_up_at={lead.next_follow_up_at}"
        )
        return follow_up

    async def complete_follow_up(
        self, lead_id: int, follow_up_id: int, completed_by: int | None
    ) -> LeadFollowUp:
        """Mark a follow-up complete and move the lead's pointer on.

        Completing an already completed follow-up keeps the original
        completion time and user.

        Raises:
            NotFoundError: If the follow-up does not exist under that lead
        """
        async with _lead_lock(lead_id):
            lead = await self.lead_repo.lock_for_update(lead_id)
            follow_up = await self.follow_up_repo.get_for_lead(lead_id, follow_up_id)
            if lead is None or follow_up is None:
                raise NotFoundError("Follow-up not found")

            if follow_up.completed_at is None:
                follow_up.completed_at = utcnow()
                follow_up.completed_by = completed_by
            else:
                logger.info(f"Follow-up {follow_up_id} already completed, keeping original completion")

            await self._recompute_next_follow_up(lead)
            await self.follow_up_repo.commit()

        logger.info(
            f"Follow-up {follow_up_id} completed on lead {lead_id}, "
            f"next_follow_up_at={lead.next_follow_up_at}"
        )
        return await self.follow_up_repo.get_for_lead(lead_id, follow_up_id)

    async def _recompute_next_follow_up(self, lead: Lead) -> None:
        await self.follow_up_repo.flush()
        lead.next_follow_up_at = await self.follow_up_repo.min_incomplete_due(lead.id)

    async def list_alerts(
        self, assigned_to: int | str | None = None, now: datetime | None = None
    ) -> dict[str, list]:
        """Overdue and due-soon work inside the alert window.

        Args:
            assigned_to: User ID or "unassigned" to narrow to one owner
            now: Reference time (defaults to the current time)

        Returns:
            Dictionary with overdue_leads, upcoming_leads and follow_ups_due
        """
        now = now or utcnow()
        window_end = now + timedelta(hours=settings.follow_up_alert_window_hours)

        leads = await self.lead_repo.list_follow_up_window(window_end, assigned_to)
        follow_ups_due = await self.follow_up_repo.list_due_within(window_end, assigned_to)
        return {
            "overdue_leads": [lead for lead in leads if lead.next_follow_up_at < now],
            "upcoming_leads": [lead for lead in leads if lead.next_follow_up_at >= now],
            "follow_ups_due": follow_ups_due,
        }

    async def send_due_reminders(self, now: datetime | None = None) -> dict[str, int]:
        """Remind assignees and admins about follow-ups due within the alert window.

        Each follow-up is claimed by stamping ``email_reminder_sent_at`` before
        anything is sent, so it is reminded at most once even if two runs
        overlap. A failure on one follow-up is logged and the batch moves on.

        Returns:
            Dictionary with the number of follow-ups claimed and processed,
            counting items whose notifications failed
        """
        now = now or utcnow()
        window_end = now + timedelta(hours=settings.follow_up_alert_window_hours)
        follow_up_ids = await self.follow_up_repo.list_ids_pending_reminder(window_end)
        if not follow_up_ids:
            return {"sent": 0}

        try:
            admin_ids = {admin.id for admin in await self.notifier.resolver.resolve_admin_users()}
        except Exception as e:
            logger.error(f"Failed to resolve admin users for reminders: {e}", exc_info=True)
            admin_ids = set()

        fallback_email = settings.reminder_fallback_email or settings.sendgrid_from_email
        sent = 0
        for follow_up_id in follow_up_ids:
            try:
                if not await self.follow_up_repo.claim_reminder(follow_up_id, utcnow()):
                    continue
                follow_up = await self.follow_up_repo.get_with_lead(follow_up_id)
                if follow_up is None or follow_up.lead is None:
                    continue
                lead = follow_up.lead
                sent += 1

                await self.notifier.notify_assignee(
                    assignee_reminder(follow_up, lead, fallback_email),
                    skip_in_app_for=admin_ids,
                )
                await self.notifier.notify_admins(follow_up_due_alert(follow_up, lead))
            except Exception as e:
                await self.session.rollback()
                logger.error(f"Failed to process reminder for follow-up {follow_up_id}: {e}", exc_info=True)

        logger.info(f"Due follow-up reminders processed: {sent}")
        return {"sent": sent}
