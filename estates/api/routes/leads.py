"""Leads API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from estates.api.deps import require_admin
from estates.api.schemas.common import MessageResponse, Pagination
from estates.api.schemas.lead import (
    FollowUpAlertsResponse,
    FollowUpCreate,
    FollowUpResponse,
    FollowUpWithLeadResponse,
    LeadCreate,
    LeadDetailResponse,
    LeadResponse,
    LeadsListResponse,
    LeadStatsResponse,
    LeadUpdate,
    ReminderRunResponse,
)
from estates.domain.services.followup_service import FollowUpService
from estates.domain.services.lead_report_service import LeadReportService
from estates.domain.services.lead_service import LeadService
from estates.persistence.database import get_db
from estates.persistence.models.user import User
from estates.persistence.repositories.lead_repository import parse_assignee_filter

router = APIRouter()


@router.get("/reports")
async def get_lead_reports(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    period: str = Query("30d", pattern="^(7d|30d|90d)$"),
) -> dict[str, Any]:
    """Lead KPIs, breakdowns and follow-up performance for a period."""
    return await LeadReportService(db).get_report(period)


@router.get("/stats", response_model=LeadStatsResponse)
async def get_lead_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> LeadStatsResponse:
    """Dashboard counters for leads."""
    return LeadStatsResponse(**await LeadService(db).get_stats())


@router.get("/alerts", response_model=FollowUpAlertsResponse)
async def get_follow_up_alerts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    assigned_to: str | None = Query(None),
) -> FollowUpAlertsResponse:
    """Overdue leads, leads due soon and the raw follow-ups due in the alert window."""
    alerts = await FollowUpService(db).list_alerts(parse_assignee_filter(assigned_to))
    return FollowUpAlertsResponse(
        overdue_leads=[LeadResponse.model_validate(l) for l in alerts["overdue_leads"]],
        upcoming_leads=[LeadResponse.model_validate(l) for l in alerts["upcoming_leads"]],
        follow_ups_due=[FollowUpWithLeadResponse.model_validate(f) for f in alerts["follow_ups_due"]],
    )


@router.post("/remind", response_model=ReminderRunResponse)
async def send_due_reminders(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> ReminderRunResponse:
    """Send reminders for follow-ups due now or within the alert window."""
    result = await FollowUpService(db).send_due_reminders()
    return ReminderRunResponse(message=f"Reminder emails sent: {result['sent']}", sent=result["sent"])


@router.get("", response_model=LeadsListResponse)
async def list_leads(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(None),
    status: str | None = Query(None),
    assigned_to: str | None = Query(None),
    overdue: bool = Query(False),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
) -> LeadsListResponse:
    """List leads with search, filters and pagination."""
    leads, total = await LeadService(db).list_leads(
        page=page,
        limit=limit,
        search=search,
        status=status,
        assigned_to=parse_assignee_filter(assigned_to),
        overdue=overdue,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return LeadsListResponse(
        leads=[LeadResponse.model_validate(l) for l in leads],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=LeadResponse, status_code=201)
async def create_lead(
    payload: LeadCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> LeadResponse:
    """Create a lead by hand."""
    lead = await LeadService(db).create_lead(payload.model_dump())
    return LeadResponse.model_validate(lead)


@router.get("/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(
    lead_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> LeadDetailResponse:
    """Get a lead with its follow-ups."""
    return LeadDetailResponse.model_validate(await LeadService(db).get_lead(lead_id))


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> LeadResponse:
    """Update status, assignment, notes and deal details of a lead."""
    lead = await LeadService(db).update_lead(lead_id, payload.model_dump(exclude_unset=True))
    return LeadResponse.model_validate(lead)


@router.delete("/{lead_id}", response_model=MessageResponse)
async def delete_lead(
    lead_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MessageResponse:
    """Delete a lead and its follow-ups."""
    await LeadService(db).delete_lead(lead_id)
    return MessageResponse(message="Lead deleted successfully")


@router.post("/{lead_id}/follow-ups", response_model=FollowUpResponse, status_code=201)
async def add_follow_up(
    lead_id: int,
    payload: FollowUpCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> FollowUpResponse:
    """Schedule a follow-up on a lead."""
    follow_up = await FollowUpService(db).add_follow_up(
        lead_id,
        due_at=payload.due_at,
        title=payload.title,
        type=payload.type,
        notes=payload.notes,
    )
    return FollowUpResponse.model_validate(follow_up)


@router.patch("/{lead_id}/follow-ups/{follow_up_id}/complete", response_model=FollowUpResponse)
async def complete_follow_up(
    lead_id: int,
    follow_up_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> FollowUpResponse:
    """Mark a follow-up as done."""
    follow_up = await FollowUpService(db).complete_follow_up(lead_id, follow_up_id, current_user.id)
    return FollowUpResponse.model_validate(follow_up)
