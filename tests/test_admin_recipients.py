"""Tests for admin recipient resolution."""

import pytest

from estates.domain.services.admin_recipients import (
    ActiveAdminResolver,
    AdminRecipientResolver,
    StaticAdminEmailResolver,
    parse_email_list,
)
from estates.persistence.models.user import UserRole


class TestParseEmailList:
    """Tests for the ADMIN_EMAIL parser."""

    def test_trims_lowercases_and_drops_blanks(self):
        assert parse_email_list(" Ops@Example.com, ,sales@example.com ,") == [
            "ops@example.com",
            "sales@example.com",
        ]

    def test_drops_repeats_keeping_first_position(self):
        assert parse_email_list("a@x.com,b@x.com,A@x.com") == ["a@x.com", "b@x.com"]

    def test_empty_values(self):
        assert parse_email_list(None) == []
        assert parse_email_list("   ") == []


class TestActiveAdminResolver:
    """Tests for the live user lookup."""

    @pytest.mark.asyncio
    async def test_only_active_admins(self, db_session, make_user):
        """Test that inactive admins and non-admin users are excluded."""
        await make_user("boss@example.com")
        await make_user("former@example.com", is_active=False)
        await make_user("agent@example.com", role=UserRole.USER)

        resolver = ActiveAdminResolver(db_session)

        assert await resolver.resolve_admin_emails() == ["boss@example.com"]
        users = await resolver.resolve_admin_users()
        assert [u.email for u in users] == ["boss@example.com"]
        assert users[0].name == "Boss"

    @pytest.mark.asyncio
    async def test_no_admins(self, db_session):
        resolver = ActiveAdminResolver(db_session)
        assert await resolver.resolve_admin_users() == []


class TestAdminRecipientResolver:
    """Tests for override-then-live precedence."""

    @pytest.mark.asyncio
    async def test_override_wins_for_emails(self, db_session, make_user):
        """Test that a configured list short-circuits the user lookup for emails."""
        await make_user("boss@example.com")
        resolver = AdminRecipientResolver(
            ActiveAdminResolver(db_session),
            StaticAdminEmailResolver("alerts@example.com"),
        )

        assert await resolver.resolve_admin_emails() == ["alerts@example.com"]

    @pytest.mark.asyncio
    async def test_identities_ignore_override(self, db_session, make_user):
        """Test that in-app identities always come from active admin users."""
        await make_user("boss@example.com")
        resolver = AdminRecipientResolver(
            ActiveAdminResolver(db_session),
            StaticAdminEmailResolver("alerts@example.com"),
        )

        users = await resolver.resolve_admin_users()
        assert [u.email for u in users] == ["boss@example.com"]

    @pytest.mark.asyncio
    async def test_blank_override_falls_back_to_live(self, db_session, make_user):
        await make_user("boss@example.com")
        resolver = AdminRecipientResolver(
            ActiveAdminResolver(db_session),
            StaticAdminEmailResolver(" , "),
        )

        assert await resolver.resolve_admin_emails() == ["boss@example.com"]

    @pytest.mark.asyncio
    async def test_from_settings_uses_admin_email(self, db_session, monkeypatch):
        from estates.settings import settings

        monkeypatch.setattr(settings, "admin_email", "Ops@Example.com")
        resolver = AdminRecipientResolver.from_settings(db_session)

        assert await resolver.resolve_admin_emails() == ["ops@example.com"]
