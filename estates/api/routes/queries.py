"""Admin query (enquiry) endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from estates.api.deps import require_admin
from estates.api.schemas.common import MessageResponse, Pagination
from estates.domain.services.query_service import QueryService
from estates.persistence.database import get_db
from estates.persistence.models.user import User

router = APIRouter()


class QueryResponse(BaseModel):
    """Query response model."""

    id: int
    name: str
    email: str
    phone: str
    message: str
    subject: str | None
    source: str
    interested_property: str | None
    status: str
    priority: str
    notes: str | None
    assigned_to: int | None
    tags: list[str] | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QueriesListResponse(BaseModel):
    """Queries list response."""

    queries: list[QueryResponse]
    pagination: Pagination


class QueryUpdate(BaseModel):
    """Query update request."""

    status: str | None = None
    notes: str | None = None
    assigned_to: int | None = None
    priority: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class BulkStatusUpdate(BaseModel):
    """Bulk status update request."""

    ids: list[int]
    status: str


class BulkStatusResponse(BaseModel):
    """Bulk status update result."""

    success: bool = True
    modified_count: int


@router.get("", response_model=QueriesListResponse)
async def list_queries(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(None),
    status: str | None = Query(None),
    source: str | None = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
) -> QueriesListResponse:
    """List enquiries with search, filters and pagination."""
    queries, total = await QueryService(db).list_queries(
        page=page, limit=limit, search=search, status=status,
        source=source, sort_by=sort_by, sort_order=sort_order,
    )
    return QueriesListResponse(
        queries=[QueryResponse.model_validate(q) for q in queries],
        pagination=Pagination.build(page, limit, total),
    )


@router.patch("/bulk/status", response_model=BulkStatusResponse)
async def bulk_update_status(
    payload: BulkStatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> BulkStatusResponse:
    """Set one status on many enquiries."""
    modified = await QueryService(db).bulk_update_status(payload.ids, payload.status)
    return BulkStatusResponse(modified_count=modified)


@router.get("/{query_id}", response_model=QueryResponse)
async def get_query(
    query_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> QueryResponse:
    """Get a single enquiry."""
    return QueryResponse.model_validate(await QueryService(db).get_query(query_id))


@router.patch("/{query_id}", response_model=QueryResponse)
async def update_query(
    query_id: int,
    payload: QueryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> QueryResponse:
    """Update status, notes, assignee or priority of an enquiry."""
    query = await QueryService(db).update_query(query_id, payload.model_dump(exclude_unset=True))
    return QueryResponse.model_validate(query)


@router.delete("/{query_id}", response_model=MessageResponse)
async def delete_query(
    query_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MessageResponse:
    """Delete an enquiry."""
    await QueryService(db).delete_query(query_id)
    return MessageResponse(message="Query deleted successfully")
