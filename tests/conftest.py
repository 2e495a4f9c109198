"""Pytest configuration and fixtures."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from estates.api.deps import get_notification_dispatcher
from estates.core.auth import create_access_token
from estates.core.clock import utcnow
from estates.core.password import hash_password
from estates.domain.services.admin_recipients import ActiveAdminResolver, AdminRecipientResolver
from estates.infrastructure.notifications import NotificationService
from estates.persistence.database import Base, get_db
from estates.persistence.models import *  # noqa: F401, F403
from estates.persistence.models.lead import Lead, LeadFollowUp
from estates.persistence.models.user import User, UserRole
from estates.workers.notification_dispatcher import NotificationDispatcher


@pytest.fixture
async def engine(tmp_path):
    """Create a file-backed SQLite engine so background jobs see committed rows."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def email_client():
    """Email transport double; every send succeeds unless a test says otherwise."""
    client = MagicMock()
    client.send_email = AsyncMock(return_value={"status": "success"})
    return client


@pytest.fixture
def notification_service_factory(email_client):
    """Build notification services that use the mock transport and live admins only."""
    def factory(session: AsyncSession) -> NotificationService:
        return NotificationService(
            session,
            email_client=email_client,
            resolver=AdminRecipientResolver(ActiveAdminResolver(session)),
        )
    return factory


@pytest.fixture
def dispatcher(session_factory, notification_service_factory):
    """Notification dispatcher wired to the test database and mock transport."""
    return NotificationDispatcher(session_factory, service_factory=notification_service_factory)


@pytest.fixture
def make_user(db_session):
    """Factory for persisted users."""
    async def _make_user(
        email: str,
        role: str = UserRole.ADMIN,
        is_active: bool = True,
        name: str | None = None,
        password: str = "secret123",
    ) -> User:
        user = User(
            name=name or email.split("@")[0].title(),
            email=email,
            hashed_password=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user
    return _make_user


@pytest.fixture
async def admin_user(make_user):
    """An active admin."""
    return await make_user("admin@example.com")


@pytest.fixture
def make_lead(db_session):
    """Factory for persisted leads, optionally with follow-ups.

    ``next_follow_up_at`` is set from the incomplete follow-ups so the
    fixture data already satisfies the lead's pointer invariant.
    """
    async def _make_lead(
        name: str = "Sara Khan",
        follow_up_offsets: list[timedelta] | None = None,
        assigned_to: int | None = None,
        **fields,
    ) -> Lead:
        now = utcnow()
        due_times = [now + offset for offset in follow_up_offsets or []]
        lead = Lead(
            name=name,
            email=f"{name.split()[0].lower()}@example.com",
            phone="+971501234567",
            message="Interested in a two bedroom",
            source="property_detail",
            assigned_to=assigned_to,
            next_follow_up_at=min(due_times) if due_times else None,
            **fields,
        )
        db_session.add(lead)
        await db_session.flush()
        for due_at in due_times:
            db_session.add(LeadFollowUp(lead_id=lead.id, due_at=due_at, type="call", title="Call back"))
        await db_session.commit()
        return lead
    return _make_lead


@pytest.fixture
async def client(session_factory, dispatcher):
    """Create a test HTTP client against the FastAPI app."""
    from estates.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    await dispatcher.drain()
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer header for a user."""
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(data={"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers
