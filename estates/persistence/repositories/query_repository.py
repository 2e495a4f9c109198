"""Query repository."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, or_, select, update

from estates.core.clock import utcnow
from estates.persistence.models.query import Query
from estates.persistence.repositories.base import BaseRepository

SORTABLE_FIELDS = {
    "created_at": Query.created_at,
    "updated_at": Query.updated_at,
    "name": Query.name,
    "email": Query.email,
    "status": Query.status,
    "priority": Query.priority,
    "source": Query.source,
}


class QueryRepository(BaseRepository[Query]):
    """Repository for Query entities."""

    def __init__(self, session: AsyncSession):
        """Initialize query repository."""
        super().__init__(Query, session)

    async def search(
        self,
        skip: int = 0,
        limit: int = 10,
        search: str | None = None,
        status: str | None = None,
        source: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Query], int]:
        """Filter, sort and page queries.

        Args:
            skip: Number of rows to skip
            limit: Page size
            search: Case-insensitive substring over name, email, phone, message
                and interested property
            status: Exact status filter
            source: Exact source filter
            sort_by: Public field name; unknown names sort by creation time
            sort_order: "asc" or "desc"

        Returns:
            Tuple of (page of queries, total matching count)
        """
        conditions = []
        if status:
            conditions.append(Query.status == status)
        if source:
            conditions.append(Query.source == source)
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(Query.name).like(pattern),
                    func.lower(Query.email).like(pattern),
                    func.lower(Query.phone).like(pattern),
                    func.lower(Query.message).like(pattern),
                    func.lower(func.coalesce(Query.interested_property, "")).like(pattern),
                )
            )

        count_stmt = select(func.count(Query.id)).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        column = SORTABLE_FIELDS.get(sort_by, Query.created_at)
        order = column.asc() if sort_order == "asc" else column.desc()
        stmt = (
            select(Query)
            .where(*conditions)
            .order_by(order, Query.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def bulk_update_status(self, ids: list[int], status: str) -> int:
        """Set status on every listed query. Returns the number of rows changed."""
        stmt = (
            update(Query)
            .where(Query.id.in_(ids))
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.commit()
        return result.rowcount or 0
