"""In-app notification endpoints for the signed-in admin."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from estates.api.deps import require_admin
from estates.domain.services.notification_inbox_service import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    NotificationInboxService,
)
from estates.persistence.database import get_db
from estates.persistence.models.user import User

router = APIRouter()


class NotificationResponse(BaseModel):
    """Notification response model."""

    id: int
    type: str
    title: str
    message: str
    data: dict | None
    read: bool
    read_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationsListResponse(BaseModel):
    """Notifications list with the unread badge count."""

    notifications: list[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    """Mark-all-read result."""

    success: bool = True
    modified_count: int


@router.get("", response_model=NotificationsListResponse)
async def list_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    unread_only: bool = Query(False),
) -> NotificationsListResponse:
    """List the current user's notifications, newest first."""
    notifications, unread_count = await NotificationInboxService(db).list_notifications(
        current_user.id, limit=limit, unread_only=unread_only
    )
    return NotificationsListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread_count,
    )


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MarkAllReadResponse:
    """Mark every notification of the current user as read."""
    modified = await NotificationInboxService(db).mark_all_read(current_user.id)
    return MarkAllReadResponse(modified_count=modified)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> NotificationResponse:
    """Mark one notification as read."""
    notification = await NotificationInboxService(db).mark_read(current_user.id, notification_id)
    return NotificationResponse.model_validate(notification)
