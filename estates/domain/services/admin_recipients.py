"""Resolve who receives admin alerts.

Two sources exist: a static list of addresses from ADMIN_EMAIL, and the
live set of active admin users. Emails prefer the static list; in-app
notifications always need real user identities, so they always come from
the live set. The two can disagree when ADMIN_EMAIL names addresses that
are not active admin users.
"""

import logging
from typing import NamedTuple, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from estates.persistence.repositories.user_repository import UserRepository
from estates.settings import settings

logger = logging.getLogger(__name__)


class AdminRecipient(NamedTuple):
    """Admin identity used for in-app fan-out."""

    id: int
    email: str
    name: str


class AdminEmailSource(Protocol):
    """Anything that can produce a list of admin email addresses."""

    async def resolve_admin_emails(self) -> list[str]: ...


def parse_email_list(raw: str | None) -> list[str]:
    """Split a comma-separated list, trimming, lower-casing and dropping blanks and repeats."""
    if not raw or not raw.strip():
        return []
    emails: list[str] = []
    for part in raw.split(","):
        email = part.strip().lower()
        if email and email not in emails:
            emails.append(email)
    return emails


class StaticAdminEmailResolver:
    """Admin emails from a fixed, configured list."""

    def __init__(self, raw: str | None) -> None:
        self.emails = parse_email_list(raw)

    async def resolve_admin_emails(self) -> list[str]:
        return list(self.emails)


class ActiveAdminResolver:
    """Admin emails and identities from the user table (role=admin, is_active)."""

    def __init__(self, session: AsyncSession) -> None:
        self.user_repo = UserRepository(session)

    async def resolve_admin_users(self) -> list[AdminRecipient]:
        admins = await self.user_repo.list_active_admins()
        return [AdminRecipient(id=u.id, email=u.email, name=u.name) for u in admins]

    async def resolve_admin_emails(self) -> list[str]:
        return [admin.email for admin in await self.resolve_admin_users()]


class AdminRecipientResolver:
    """Prefer the static override for emails, fall back to the live lookup.

    ``resolve_admin_users`` never consults the override.
    """

    def __init__(
        self,
        live: ActiveAdminResolver,
        override: StaticAdminEmailResolver | None = None,
    ) -> None:
        self.live = live
        self.override = override

    @classmethod
    def from_settings(cls, session: AsyncSession) -> "AdminRecipientResolver":
        """Build the resolver from ADMIN_EMAIL and the given session."""
        override = StaticAdminEmailResolver(settings.admin_email) if settings.admin_email else None
        return cls(ActiveAdminResolver(session), override)

    async def resolve_admin_emails(self) -> list[str]:
        if self.override is not None:
            emails = await self.override.resolve_admin_emails()
            if emails:
                return emails
        return await self.live.resolve_admin_emails()

    async def resolve_admin_users(self) -> list[AdminRecipient]:
        return await self.live.resolve_admin_users()
