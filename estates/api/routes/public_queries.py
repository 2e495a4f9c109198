"""Public enquiry submission."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from estates.api.deps import get_notification_dispatcher
from estates.domain.services.contact_intake_service import ContactIntakeService, Enquiry
from estates.persistence.database import get_db
from estates.workers.notification_dispatcher import NotificationDispatcher

router = APIRouter()


class QuerySubmitRequest(BaseModel):
    """Enquiry form payload. Required fields are checked by the intake service."""

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

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SubmittedQueryResponse(BaseModel):
    """Stored enquiry."""

    id: int
    name: str
    email: str
    phone: str
    message: str
    subject: str | None
    source: str
    interested_property: str | None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class QuerySubmitResponse(BaseModel):
    """Result of an enquiry submission."""

    success: bool = True
    message: str = "Query submitted successfully"
    query: SubmittedQueryResponse
    lead_id: int | None = None
    follow_up_id: int | None = None


@router.post("", response_model=QuerySubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_query(
    payload: QuerySubmitRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    dispatcher: Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)],
) -> QuerySubmitResponse:
    """Submit an enquiry from the public site.

    Enquiries with property context also create a lead and its first
    follow-up. Admin alerts and the confirmation email go out in the
    background.
    """
    service = ContactIntakeService(db, dispatcher)
    result = await service.submit(Enquiry(**payload.model_dump()))
    return QuerySubmitResponse(
        query=SubmittedQueryResponse.model_validate(result.query),
        lead_id=result.lead.id if result.lead else None,
        follow_up_id=result.follow_up.id if result.follow_up else None,
    )
