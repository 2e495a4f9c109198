"""Lead follow-up repository."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import selectinload

from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.repositories.base import BaseRepository
from estates.persistence.repositories.lead_repository import assignee_condition


class FollowUpRepository(BaseRepository[LeadFollowUp]):
    """Repository for LeadFollowUp entities."""

    def __init__(self, session: AsyncSession):
        """Initialize follow-up repository."""
        super().__init__(LeadFollowUp, session)

    async def get_for_lead(self, lead_id: int, follow_up_id: int) -> LeadFollowUp | None:
        """Get a follow-up only if it belongs to the given lead."""
        stmt = (
            select(LeadFollowUp)
            .where(LeadFollowUp.id == follow_up_id, LeadFollowUp.lead_id == lead_id)
            .options(selectinload(LeadFollowUp.completed_by_user))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def min_incomplete_due(self, lead_id: int) -> datetime | None:
        """Earliest due_at among the lead's incomplete follow-ups, or None."""
        stmt = select(func.min(LeadFollowUp.due_at)).where(
            LeadFollowUp.lead_id == lead_id,
            LeadFollowUp.completed_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_due_within(
        self, window_end: datetime, assigned_to: int | str | None = None
    ) -> list[LeadFollowUp]:
        """Incomplete follow-ups due at or before window_end, with their lead."""
        stmt = (
            select(LeadFollowUp)
            .join(Lead, Lead.id == LeadFollowUp.lead_id)
            .where(LeadFollowUp.completed_at.is_(None), LeadFollowUp.due_at <= window_end)
            .options(selectinload(LeadFollowUp.lead).selectinload(Lead.assignee))
            .order_by(LeadFollowUp.due_at.asc(), LeadFollowUp.id)
        )
        owner = assignee_condition(Lead.assigned_to, assigned_to)
        if owner is not None:
            stmt = stmt.where(owner)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_ids_pending_reminder(self, window_end: datetime) -> list[int]:
        """IDs of incomplete follow-ups due by window_end that have not been reminded."""
        stmt = (
            select(LeadFollowUp.id)
            .where(
                LeadFollowUp.completed_at.is_(None),
                LeadFollowUp.email_reminder_sent_at.is_(None),
                LeadFollowUp.due_at <= window_end,
            )
            .order_by(LeadFollowUp.due_at.asc(), LeadFollowUp.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def claim_reminder(self, follow_up_id: int, sent_at: datetime) -> bool:
        """Stamp email_reminder_sent_at if still unset. Returns False if already claimed."""
        stmt = (
            update(LeadFollowUp)
            .where(
                LeadFollowUp.id == follow_up_id,
                LeadFollowUp.email_reminder_sent_at.is_(None),
            )
            .values(email_reminder_sent_at=sent_at, updated_at=sent_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.commit()
        return (result.rowcount or 0) == 1

    async def get_with_lead(self, follow_up_id: int) -> LeadFollowUp | None:
        """Get a follow-up with its lead and the lead's assignee loaded."""
        stmt = (
            select(LeadFollowUp)
            .where(LeadFollowUp.id == follow_up_id)
            .options(selectinload(LeadFollowUp.lead).selectinload(Lead.assignee))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_lead(self, lead_id: int) -> list[LeadFollowUp]:
        """All follow-ups of a lead ordered by due time."""
        stmt = (
            select(LeadFollowUp)
            .where(LeadFollowUp.lead_id == lead_id)
            .order_by(LeadFollowUp.due_at.asc(), LeadFollowUp.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_lead(self, lead_id: int) -> int:
        """Delete every follow-up of a lead without committing. Returns rows removed."""
        stmt = delete(LeadFollowUp).where(LeadFollowUp.lead_id == lead_id)
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def count_created(
        self, created_from: datetime, created_to: datetime, completed_only: bool = False
    ) -> int:
        """Count follow-ups created in a window, optionally only completed ones."""
        stmt = select(func.count(LeadFollowUp.id)).where(
            LeadFollowUp.created_at >= created_from,
            LeadFollowUp.created_at <= created_to,
        )
        if completed_only:
            stmt = stmt.where(LeadFollowUp.completed_at.isnot(None))
        return (await self.session.execute(stmt)).scalar_one()

    async def count_overdue(self, now: datetime) -> int:
        """Count incomplete follow-ups already past due."""
        stmt = select(func.count(LeadFollowUp.id)).where(
            LeadFollowUp.completed_at.is_(None),
            LeadFollowUp.due_at < now,
        )
        return (await self.session.execute(stmt)).scalar_one()
