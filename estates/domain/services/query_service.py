"""Query service for admin review of enquiries."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from estates.core.errors import NotFoundError, ValidationError
from estates.domain.services.contact_intake_service import parse_positive_int
from estates.persistence.models.query import PRIORITIES, QUERY_SOURCES, QUERY_STATUSES, Query
from estates.persistence.repositories.query_repository import QueryRepository
from estates.persistence.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class QueryService:
    """Service for listing and updating enquiries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize query service."""
        self.session = session
        self.query_repo = QueryRepository(session)
        self.user_repo = UserRepository(session)

    async def list_queries(
        self,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        status: str | None = None,
        source: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Query], int]:
        """List queries with filters and pagination.

        Returns:
            Tuple of (page of queries, total matching count)
        """
        page = max(1, page)
        limit = min(100, max(1, limit))
        return await self.query_repo.search(
            skip=(page - 1) * limit,
            limit=limit,
            search=search.strip() if search else None,
            status=status if status in QUERY_STATUSES else None,
            source=source if source in QUERY_SOURCES else None,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    async def get_query(self, query_id: int) -> Query:
        query = await self.query_repo.get_by_id(query_id)
        if query is None:
            raise NotFoundError("Query not found")
        return query

    async def update_query(self, query_id: int, changes: dict[str, Any]) -> Query:
        """Update status, notes, assignee or priority. Unknown enum values are ignored."""
        query = await self.get_query(query_id)

        if changes.get("status") in QUERY_STATUSES:
            query.status = changes["status"]
        if changes.get("priority") in PRIORITIES:
            query.priority = changes["priority"]
        if "notes" in changes:
            query.notes = str(changes["notes"]).strip() if changes["notes"] is not None else None
        if "assigned_to" in changes:
            user_id = parse_positive_int(changes["assigned_to"])
            if user_id is not None and await self.user_repo.get_by_id(user_id) is None:
                raise ValidationError("Assigned user not found")
            query.assigned_to = user_id

        await self.query_repo.commit()
        await self.session.refresh(query)
        logger.info(f"Query {query_id} updated: fields={sorted(changes)}")
        return query

    async def delete_query(self, query_id: int) -> None:
        if not await self.query_repo.delete(query_id):
            raise NotFoundError("Query not found")
        logger.info(f"Query {query_id} deleted")

    async def bulk_update_status(self, ids: list[int], status: str) -> int:
        """Set the same status on many queries.

        Raises:
            ValidationError: If ids is empty or the status is unknown
        """
        if not ids:
            raise ValidationError("Query IDs are required")
        if status not in QUERY_STATUSES:
            raise ValidationError("Invalid status")
        modified = await self.query_repo.bulk_update_status(ids, status)
        logger.info(f"Bulk status update: status={status}, modified={modified}")
        return modified
