"""Lead repository."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import selectinload

from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.repositories.base import BaseRepository

# Sentinel accepted wherever an assignee filter is taken
UNASSIGNED = "unassigned"

SORTABLE_FIELDS = {
    "created_at": Lead.created_at,
    "updated_at": Lead.updated_at,
    "name": Lead.name,
    "email": Lead.email,
    "status": Lead.status,
    "priority": Lead.priority,
    "next_follow_up_at": Lead.next_follow_up_at,
}


def parse_assignee_filter(value: str | int | None) -> int | str | None:
    """Turn a raw assignee filter into a user ID, the unassigned sentinel, or None.

    Values that are neither are ignored (treated as no filter).
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    value = value.strip()
    if value == UNASSIGNED:
        return UNASSIGNED
    if value.isdigit() and int(value) > 0:
        return int(value)
    return None


def assignee_condition(column, assigned_to: int | str | None):
    """Build the WHERE clause for an assignee filter, or None for no filter."""
    if assigned_to is None or assigned_to == "":
        return None
    if assigned_to == UNASSIGNED:
        return column.is_(None)
    return column == int(assigned_to)


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead entities."""

    def __init__(self, session: AsyncSession):
        """Initialize lead repository."""
        super().__init__(Lead, session)

    async def get_with_follow_ups(self, lead_id: int) -> Lead | None:
        """Get a lead with its assignee and follow-ups loaded.

        Args:
            lead_id: Lead ID

        Returns:
            Lead or None if not found
        """
        stmt = (
            select(Lead)
            .where(Lead.id == lead_id)
            .options(
                selectinload(Lead.assignee),
                selectinload(Lead.follow_ups).selectinload(LeadFollowUp.completed_by_user),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_assignee(self, lead_id: int) -> Lead | None:
        """Get a lead with its assignee loaded."""
        stmt = (
            select(Lead)
            .where(Lead.id == lead_id)
            .options(selectinload(Lead.assignee))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_for_update(self, lead_id: int) -> Lead | None:
        """Select the lead row FOR UPDATE so follow-up writes on it serialize."""
        stmt = select(Lead).where(Lead.id == lead_id).with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self,
        skip: int = 0,
        limit: int = 20,
        search: str | None = None,
        status: str | None = None,
        assigned_to: int | str | None = None,
        overdue_before: datetime | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Lead], int]:
        """Filter, sort and page leads.

        Args:
            skip: Number of rows to skip
            limit: Page size
            search: Case-insensitive substring over contact and property fields
            status: Exact status filter
            assigned_to: User ID, or "unassigned" for leads without an owner
            overdue_before: Keep only leads whose next follow-up is at or before this time
            sort_by: Public field name; unknown names sort by creation time
            sort_order: "asc" or "desc"

        Returns:
            Tuple of (page of leads, total matching count)
        """
        conditions = []
        if status:
            conditions.append(Lead.status == status)
        owner = assignee_condition(Lead.assigned_to, assigned_to)
        if owner is not None:
            conditions.append(owner)
        if overdue_before is not None:
            conditions.append(
                and_(Lead.next_follow_up_at.isnot(None), Lead.next_follow_up_at <= overdue_before)
            )
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(Lead.name).like(pattern),
                    func.lower(Lead.email).like(pattern),
                    func.lower(Lead.phone).like(pattern),
                    func.lower(Lead.message).like(pattern),
                    func.lower(func.coalesce(Lead.property_name, "")).like(pattern),
                    func.lower(func.coalesce(Lead.property_slug, "")).like(pattern),
                )
            )

        count_stmt = select(func.count(Lead.id)).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        column = SORTABLE_FIELDS.get(sort_by, Lead.created_at)
        if sort_by not in SORTABLE_FIELDS:
            sort_order = "desc"
        order = column.asc() if sort_order == "asc" else column.desc()
        stmt = (
            select(Lead)
            .where(*conditions)
            .options(selectinload(Lead.assignee))
            .order_by(order, Lead.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_follow_up_window(
        self, window_end: datetime, assigned_to: int | str | None = None
    ) -> list[Lead]:
        """Leads with a next follow-up at or before window_end, soonest first."""
        stmt = (
            select(Lead)
            .where(Lead.next_follow_up_at.isnot(None), Lead.next_follow_up_at <= window_end)
            .options(selectinload(Lead.assignee))
            .order_by(Lead.next_follow_up_at.asc(), Lead.id)
        )
        owner = assignee_condition(Lead.assigned_to, assigned_to)
        if owner is not None:
            stmt = stmt.where(owner)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, created_from: datetime | None = None, created_to: datetime | None = None) -> int:
        """Count leads, optionally within a creation window."""
        stmt = select(func.count(Lead.id))
        if created_from is not None:
            stmt = stmt.where(Lead.created_at >= created_from)
        if created_to is not None:
            stmt = stmt.where(Lead.created_at <= created_to)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_by(
        self, field: str, created_from: datetime | None = None, created_to: datetime | None = None
    ) -> dict[str, int]:
        """Group lead counts by a column (status or source)."""
        column = getattr(Lead, field)
        stmt = select(column, func.count(Lead.id)).group_by(column)
        if created_from is not None:
            stmt = stmt.where(Lead.created_at >= created_from)
        if created_to is not None:
            stmt = stmt.where(Lead.created_at <= created_to)
        result = await self.session.execute(stmt)
        return {key: count for key, count in result.all()}

    async def count_next_follow_up_between(
        self, start: datetime | None, end: datetime, inclusive_end: bool = False
    ) -> int:
        """Count leads whose next follow-up falls in [start, end)."""
        stmt = select(func.count(Lead.id)).where(Lead.next_follow_up_at.isnot(None))
        if start is not None:
            stmt = stmt.where(Lead.next_follow_up_at >= start)
        if inclusive_end:
            stmt = stmt.where(Lead.next_follow_up_at <= end)
        else:
            stmt = stmt.where(Lead.next_follow_up_at < end)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_per_day(self, created_from: datetime, created_to: datetime) -> list[tuple[str, int]]:
        """Lead counts per creation day (YYYY-MM-DD), oldest first."""
        day = func.date(Lead.created_at)
        stmt = (
            select(day, func.count(Lead.id))
            .where(Lead.created_at >= created_from, Lead.created_at <= created_to)
            .group_by(day)
            .order_by(day)
        )
        result = await self.session.execute(stmt)
        return [(str(d), count) for d, count in result.all()]

    async def top_properties(
        self, created_from: datetime, created_to: datetime, limit: int = 10
    ) -> list[tuple[str, str | None, int]]:
        """Property names ranked by number of leads created in the window."""
        count = func.count(Lead.id)
        stmt = (
            select(Lead.property_name, func.max(Lead.property_slug), count)
            .where(
                Lead.created_at >= created_from,
                Lead.created_at <= created_to,
                Lead.property_name.isnot(None),
                Lead.property_name != "",
            )
            .group_by(Lead.property_name)
            .order_by(count.desc(), Lead.property_name)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(name, slug, n) for name, slug, n in result.all()]
