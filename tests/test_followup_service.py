"""Tests for follow-up scheduling, alerts and due reminders."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from estates.core.clock import utcnow
from estates.core.errors import NotFoundError, ValidationError
from estates.domain.services.admin_recipients import ActiveAdminResolver, AdminRecipientResolver
from estates.domain.services.followup_service import FollowUpService
from estates.infrastructure.notifications import NotificationService
from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.models.notification import Notification
from estates.persistence.models.user import UserRole
from estates.settings import settings


async def reload_lead(session_factory, lead_id: int) -> Lead:
    async with session_factory() as session:
        return await session.get(Lead, lead_id)


async def follow_up_ids(session, lead_id: int) -> list[int]:
    result = await session.execute(
        select(LeadFollowUp.id).where(LeadFollowUp.lead_id == lead_id).order_by(LeadFollowUp.due_at)
    )
    return list(result.scalars().all())


@pytest.fixture
def notifier(db_session, email_client):
    return NotificationService(
        db_session, email_client, AdminRecipientResolver(ActiveAdminResolver(db_session))
    )


class TestAddFollowUp:
    """Tests for FollowUpService.add_follow_up."""

    @pytest.mark.asyncio
    async def test_first_follow_up_sets_pointer(self, db_session, session_factory, make_lead):
        lead = await make_lead()
        due = utcnow() + timedelta(days=2)

        follow_up = await FollowUpService(db_session).add_follow_up(lead.id, due, "Send brochure", "email")

        assert follow_up.type == "email"
        assert follow_up.completed_at is None
        stored = await reload_lead(session_factory, lead.id)
        assert stored.next_follow_up_at == follow_up.due_at

    @pytest.mark.asyncio
    async def test_earlier_follow_up_moves_pointer_back(self, db_session, session_factory, make_lead):
        """Test that the pointer tracks the earliest incomplete due time."""
        lead = await make_lead(follow_up_offsets=[timedelta(days=3)])
        earlier = utcnow() + timedelta(hours=5)

        await FollowUpService(db_session).add_follow_up(lead.id, earlier, "Quick call")

        stored = await reload_lead(session_factory, lead.id)
        assert abs(stored.next_follow_up_at - earlier) < timedelta(seconds=1)

    @pytest.mark.asyncio
    async def test_later_follow_up_keeps_pointer(self, db_session, session_factory, make_lead):
        lead = await make_lead(follow_up_offsets=[timedelta(hours=2)])
        original = lead.next_follow_up_at

        await FollowUpService(db_session).add_follow_up(lead.id, utcnow() + timedelta(days=9), "Viewing", "site_visit")

        stored = await reload_lead(session_factory, lead.id)
        assert stored.next_follow_up_at == original

    @pytest.mark.asyncio
    async def test_unknown_type_defaults_to_call(self, db_session, make_lead):
        lead = await make_lead()

        follow_up = await FollowUpService(db_session).add_follow_up(
            lead.id, utcnow() + timedelta(days=1), "Ping", "carrier_pigeon"
        )

        assert follow_up.type == "call"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("due_in,title", [(None, "Call"), (timedelta(days=1), ""), (timedelta(days=1), "   ")])
    async def test_missing_due_or_title_rejected(self, db_session, make_lead, due_in, title):
        lead = await make_lead()
        due_at = utcnow() + due_in if due_in else None

        with pytest.raises(ValidationError):
            await FollowUpService(db_session).add_follow_up(lead.id, due_at, title)

        assert await follow_up_ids(db_session, lead.id) == []

    @pytest.mark.asyncio
    async def test_unknown_lead(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await FollowUpService(db_session).add_follow_up(9999, utcnow(), "Call")
        assert exc_info.value.message == "Lead not found"


class TestCompleteFollowUp:
    """Tests for FollowUpService.complete_follow_up."""

    @pytest.mark.asyncio
    async def test_completion_advances_pointer(self, db_session, session_factory, make_lead, admin_user):
        lead = await make_lead(follow_up_offsets=[timedelta(hours=1), timedelta(days=2)])
        first_id, second_id = await follow_up_ids(db_session, lead.id)
        second_due = (await db_session.get(LeadFollowUp, second_id)).due_at

        follow_up = await FollowUpService(db_session).complete_follow_up(lead.id, first_id, admin_user.id)

        assert follow_up.completed_at is not None
        assert follow_up.completed_by == admin_user.id
        stored = await reload_lead(session_factory, lead.id)
        assert stored.next_follow_up_at == second_due

    @pytest.mark.asyncio
    async def test_completing_last_clears_pointer(self, db_session, session_factory, make_lead, admin_user):
        """Test that a lead with no incomplete follow-ups has no next follow-up."""
        lead = await make_lead(follow_up_offsets=[timedelta(hours=1)])
        (only_id,) = await follow_up_ids(db_session, lead.id)

        await FollowUpService(db_session).complete_follow_up(lead.id, only_id, admin_user.id)

        stored = await reload_lead(session_factory, lead.id)
        assert stored.next_follow_up_at is None

    @pytest.mark.asyncio
    async def test_recompleting_keeps_original_completion(self, db_session, make_lead, make_user):
        first = await make_user("first@example.com")
        second = await make_user("second@example.com")
        lead = await make_lead(follow_up_offsets=[timedelta(hours=1)])
        (only_id,) = await follow_up_ids(db_session, lead.id)
        service = FollowUpService(db_session)

        done = await service.complete_follow_up(lead.id, only_id, first.id)
        completed_at = done.completed_at
        again = await service.complete_follow_up(lead.id, only_id, second.id)

        assert again.completed_at == completed_at
        assert again.completed_by == first.id

    @pytest.mark.asyncio
    async def test_follow_up_of_another_lead(self, db_session, make_lead, admin_user):
        """Test that a follow-up cannot be completed through the wrong lead."""
        lead = await make_lead(follow_up_offsets=[timedelta(hours=1)])
        other = await make_lead(name="Omar Ali")
        (follow_up_id,) = await follow_up_ids(db_session, lead.id)

        with pytest.raises(NotFoundError) as exc_info:
            await FollowUpService(db_session).complete_follow_up(other.id, follow_up_id, admin_user.id)

        assert exc_info.value.message == "Follow-up not found"


class TestListAlerts:
    """Tests for FollowUpService.list_alerts."""

    @pytest.mark.asyncio
    async def test_window_split(self, db_session, make_lead):
        """Test overdue vs upcoming inside the window, and leads past the window left out."""
        now = utcnow()
        overdue = await make_lead(name="Overdue Lead", follow_up_offsets=[timedelta(hours=-1)])
        upcoming = await make_lead(name="Upcoming Lead", follow_up_offsets=[timedelta(hours=23)])
        await make_lead(name="Later Lead", follow_up_offsets=[timedelta(hours=25)])
        await make_lead(name="Idle Lead")

        alerts = await FollowUpService(db_session).list_alerts(now=now)

        assert [l.id for l in alerts["overdue_leads"]] == [overdue.id]
        assert [l.id for l in alerts["upcoming_leads"]] == [upcoming.id]
        assert [f.lead_id for f in alerts["follow_ups_due"]] == [overdue.id, upcoming.id]

    @pytest.mark.asyncio
    async def test_completed_follow_ups_excluded(self, db_session, make_lead, admin_user):
        lead = await make_lead(follow_up_offsets=[timedelta(hours=-2)])
        (follow_up_id,) = await follow_up_ids(db_session, lead.id)
        service = FollowUpService(db_session)
        await service.complete_follow_up(lead.id, follow_up_id, admin_user.id)

        alerts = await service.list_alerts()

        assert alerts == {"overdue_leads": [], "upcoming_leads": [], "follow_ups_due": []}

    @pytest.mark.asyncio
    async def test_assignee_filter(self, db_session, make_lead, make_user):
        agent = await make_user("agent@example.com", role=UserRole.USER)
        mine = await make_lead(name="Mine Lead", follow_up_offsets=[timedelta(hours=-1)], assigned_to=agent.id)
        nobody = await make_lead(name="Nobody Lead", follow_up_offsets=[timedelta(hours=2)])
        service = FollowUpService(db_session)

        by_agent = await service.list_alerts(assigned_to=agent.id)
        unassigned = await service.list_alerts(assigned_to="unassigned")

        assert [l.id for l in by_agent["overdue_leads"]] == [mine.id]
        assert by_agent["upcoming_leads"] == []
        assert [f.lead_id for f in by_agent["follow_ups_due"]] == [mine.id]
        assert [l.id for l in unassigned["upcoming_leads"]] == [nobody.id]
        assert unassigned["overdue_leads"] == []


class TestSendDueReminders:
    """Tests for FollowUpService.send_due_reminders."""

    @pytest.mark.asyncio
    async def test_reminds_assignee_and_admins_once(
        self, db_session, session_factory, make_lead, make_user, notifier, email_client
    ):
        """Test that a due follow-up is reminded once and only once."""
        admin = await make_user("admin@example.com")
        agent = await make_user("agent@example.com", role=UserRole.USER)
        lead = await make_lead(follow_up_offsets=[timedelta(hours=2)], assigned_to=agent.id)
        await make_lead(name="Later Lead", follow_up_offsets=[timedelta(days=3)])
        service = FollowUpService(db_session, notifier)

        first = await service.send_due_reminders()
        second = await service.send_due_reminders()

        assert first == {"sent": 1}
        assert second == {"sent": 0}
        recipients = sorted(c.kwargs["to_email"] for c in email_client.send_email.await_args_list)
        assert recipients == ["admin@example.com", "agent@example.com"]

        async with session_factory() as session:
            rows = (await session.execute(select(Notification))).scalars().all()
            stamped = (await session.execute(
                select(LeadFollowUp).where(LeadFollowUp.lead_id == lead.id)
            )).scalar_one()
        assert sorted(r.recipient_id for r in rows) == sorted([admin.id, agent.id])
        assert stamped.email_reminder_sent_at is not None

    @pytest.mark.asyncio
    async def test_unassigned_lead_uses_fallback(
        self, db_session, make_lead, notifier, email_client, monkeypatch
    ):
        monkeypatch.setattr(settings, "reminder_fallback_email", "team@example.com")
        await make_lead(follow_up_offsets=[timedelta(hours=-3)])

        result = await FollowUpService(db_session, notifier).send_due_reminders()

        assert result == {"sent": 1}
        recipients = [c.kwargs["to_email"] for c in email_client.send_email.await_args_list]
        assert recipients == ["team@example.com"]

    @pytest.mark.asyncio
    async def test_admin_assignee_gets_single_in_app_row(
        self, db_session, session_factory, make_lead, admin_user, notifier
    ):
        await make_lead(follow_up_offsets=[timedelta(hours=1)], assigned_to=admin_user.id)
        admin_id = admin_user.id

        await FollowUpService(db_session, notifier).send_due_reminders()

        async with session_factory() as session:
            rows = (await session.execute(select(Notification))).scalars().all()
        assert [r.recipient_id for r in rows] == [admin_id]

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_batch(
        self, db_session, session_factory, make_lead, notifier
    ):
        """Test that a failing item stays claimed and counted while the rest are reminded."""
        first = await make_lead(name="First Lead", follow_up_offsets=[timedelta(hours=1)])
        second = await make_lead(name="Second Lead", follow_up_offsets=[timedelta(hours=2)])
        first_id, second_id = first.id, second.id
        notifier.notify_assignee = AsyncMock(side_effect=[RuntimeError("boom"), True])

        result = await FollowUpService(db_session, notifier).send_due_reminders()

        assert result == {"sent": 2}
        assert notifier.notify_assignee.await_count == 2
        async with session_factory() as session:
            stamps = dict((await session.execute(
                select(LeadFollowUp.lead_id, LeadFollowUp.email_reminder_sent_at)
            )).all())
        assert stamps[first_id] is not None
        assert stamps[second_id] is not None

    @pytest.mark.asyncio
    async def test_nothing_due(self, db_session, make_lead, notifier, email_client):
        await make_lead(follow_up_offsets=[timedelta(days=5)])

        assert await FollowUpService(db_session, notifier).send_due_reminders() == {"sent": 0}
        email_client.send_email.assert_not_awaited()
