"""Tests for public enquiry intake."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from estates.core.clock import utcnow
from estates.core.errors import ValidationError
from estates.domain.services.contact_intake_service import (
    FIRST_FOLLOW_UP_TITLE,
    ContactIntakeService,
    Enquiry,
    parse_positive_int,
)
from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.models.notification import Notification, NotificationType
from estates.persistence.models.property import Property
from estates.persistence.models.query import Query


def make_enquiry(**overrides) -> Enquiry:
    data = {
        "name": "Sara Khan",
        "email": "Sara@Example.com",
        "phone": "+971 50 123 4567",
        "message": "Is the apartment still available?",
    }
    data.update(overrides)
    return Enquiry(**data)


async def count(session, model) -> int:
    return (await session.execute(select(func.count(model.id)))).scalar_one()


class TestParsePositiveInt:
    """Tests for parse_positive_int."""

    @pytest.mark.parametrize("value,expected", [
        ("42", 42),
        (" 7 ", 7),
        (3, 3),
        ("0", None),
        (-1, None),
        ("abc", None),
        ("12abc", None),
        ("", None),
        (None, None),
        (True, None),
    ])
    def test_parse(self, value, expected):
        assert parse_positive_int(value) == expected


class TestContactIntakeService:
    """Tests for ContactIntakeService.submit."""

    @pytest.mark.asyncio
    async def test_general_enquiry_creates_only_a_query(self, db_session, dispatcher):
        """Test that an enquiry without property context creates no lead."""
        service = ContactIntakeService(db_session, dispatcher)

        result = await service.submit(make_enquiry(source="contact_page"))
        await dispatcher.drain()

        assert result.lead is None
        assert result.follow_up is None
        assert result.query.email == "sara@example.com"
        assert result.query.phone == "+971501234567"
        assert result.query.status == "new"
        assert await count(db_session, Query) == 1
        assert await count(db_session, Lead) == 0

    @pytest.mark.asyncio
    async def test_property_enquiry_creates_lead_and_first_follow_up(self, db_session, dispatcher):
        """Test that property context yields a lead with one follow-up a day out."""
        service = ContactIntakeService(db_session, dispatcher)
        before = utcnow()

        result = await service.submit(make_enquiry(
            source="property_detail",
            property_slug="marina-heights",
            property_name="Marina Heights",
        ))
        await dispatcher.drain()

        lead, follow_up = result.lead, result.follow_up
        assert lead.query_id == result.query.id
        assert lead.source == "property_detail"
        assert lead.status == "new"
        assert lead.property_slug == "marina-heights"
        assert lead.property_name == "Marina Heights"
        assert follow_up.lead_id == lead.id
        assert follow_up.title == FIRST_FOLLOW_UP_TITLE
        assert follow_up.type == "call"
        assert follow_up.completed_at is None
        assert follow_up.notes == "Lead from property: Marina Heights. Contact to discuss interest."
        assert lead.next_follow_up_at == follow_up.due_at
        expected = before + timedelta(hours=24)
        assert abs(follow_up.due_at - expected) < timedelta(minutes=1)
        assert await count(db_session, LeadFollowUp) == 1

    @pytest.mark.asyncio
    async def test_mobile_app_source_is_kept_on_lead(self, db_session, dispatcher):
        service = ContactIntakeService(db_session, dispatcher)

        result = await service.submit(make_enquiry(source="mobile_app", property_name="Palm Villa"))
        await dispatcher.drain()

        assert result.query.source == "mobile_app"
        assert result.lead.source == "mobile_app"

    @pytest.mark.asyncio
    async def test_unknown_source_becomes_contact_page(self, db_session, dispatcher):
        service = ContactIntakeService(db_session, dispatcher)

        result = await service.submit(make_enquiry(source="billboard"))
        await dispatcher.drain()

        assert result.query.source == "contact_page"

    @pytest.mark.asyncio
    async def test_property_record_fills_missing_context(self, db_session, dispatcher):
        """Test that a property id is resolved to its name and slug."""
        listing = Property(name="Downtown Loft", slug="downtown-loft")
        db_session.add(listing)
        await db_session.commit()
        service = ContactIntakeService(db_session, dispatcher)

        result = await service.submit(make_enquiry(property_id=str(listing.id)))
        await dispatcher.drain()

        assert result.lead.property_id == listing.id
        assert result.lead.property_slug == "downtown-loft"
        assert result.lead.property_name == "Downtown Loft"

    @pytest.mark.asyncio
    async def test_invalid_property_id_is_ignored(self, db_session, dispatcher):
        """Test that a malformed id neither fails the submit nor creates a lead on its own."""
        service = ContactIntakeService(db_session, dispatcher)

        result = await service.submit(make_enquiry(property_id="not-an-id"))
        await dispatcher.drain()

        assert result.lead is None
        assert await count(db_session, Query) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["name", "email", "phone", "message"])
    async def test_missing_field_writes_nothing(self, db_session, dispatcher, missing):
        service = ContactIntakeService(db_session, dispatcher)

        with pytest.raises(ValidationError) as exc_info:
            await service.submit(make_enquiry(**{missing: "  "}, property_slug="marina-heights"))

        assert "required" in exc_info.value.message
        assert dispatcher.pending == 0
        assert await count(db_session, Query) == 0
        assert await count(db_session, Lead) == 0

    @pytest.mark.asyncio
    async def test_invalid_phone_rejected(self, db_session, dispatcher):
        service = ContactIntakeService(db_session, dispatcher)

        with pytest.raises(ValidationError) as exc_info:
            await service.submit(make_enquiry(phone="12345"))

        assert "phone" in exc_info.value.message
        assert await count(db_session, Query) == 0

    @pytest.mark.asyncio
    async def test_admins_notified_in_background(
        self, db_session, session_factory, dispatcher, make_user, email_client
    ):
        """Test one new_lead notification per active admin plus the confirmation email."""
        admins = [await make_user("admin1@example.com"), await make_user("admin2@example.com")]
        await make_user("retired@example.com", is_active=False)
        service = ContactIntakeService(db_session, dispatcher)

        result = await service.submit(make_enquiry(property_name="Marina Heights"))
        await dispatcher.drain()

        async with session_factory() as session:
            rows = (await session.execute(
                select(Notification).order_by(Notification.recipient_id)
            )).scalars().all()
        assert [r.recipient_id for r in rows] == [a.id for a in admins]
        assert all(r.type == NotificationType.NEW_LEAD for r in rows)
        assert rows[0].data == {"lead_id": result.lead.id, "query_id": result.query.id}

        recipients = sorted(c.kwargs["to_email"] for c in email_client.send_email.await_args_list)
        assert recipients == ["admin1@example.com", "admin2@example.com", "sara@example.com"]

    @pytest.mark.asyncio
    async def test_general_enquiry_sends_new_enquiry_alert(
        self, db_session, session_factory, dispatcher, admin_user
    ):
        service = ContactIntakeService(db_session, dispatcher)

        await service.submit(make_enquiry())
        await dispatcher.drain()

        async with session_factory() as session:
            row = (await session.execute(select(Notification))).scalar_one()
        assert row.type == NotificationType.NEW_ENQUIRY
        assert row.message == "Sara Khan – sara@example.com"

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_submit(
        self, db_session, session_factory, dispatcher, admin_user, email_client
    ):
        """Test that a broken email provider leaves the stored records and in-app alerts intact."""
        email_client.send_email = AsyncMock(side_effect=RuntimeError("provider down"))
        service = ContactIntakeService(db_session, dispatcher)

        result = await service.submit(make_enquiry(property_slug="marina-heights"))
        await dispatcher.drain()

        assert result.lead is not None
        async with session_factory() as session:
            assert await count(session, Lead) == 1
            assert await count(session, Notification) == 1
