"""Tests for enquiry management and the notification inbox."""

import pytest

from estates.core.errors import NotFoundError, ValidationError
from estates.domain.services.notification_inbox_service import NotificationInboxService
from estates.domain.services.query_service import QueryService
from estates.persistence.models.notification import Notification, NotificationType
from estates.persistence.models.query import Query


@pytest.fixture
def make_query(db_session):
    async def _make_query(name: str = "Sara Khan", **fields) -> Query:
        query = Query(
            name=name,
            email=f"{name.split()[0].lower()}@example.com",
            phone="+971501234567",
            message="Looking for a villa",
            **fields,
        )
        db_session.add(query)
        await db_session.commit()
        return query
    return _make_query


class TestQueryService:
    """Tests for QueryService."""

    @pytest.mark.asyncio
    async def test_list_filters_by_source_and_search(self, db_session, make_query):
        await make_query("Sara Khan", source="mobile_app")
        await make_query("Omar Ali", source="contact_page")

        app_queries, total = await QueryService(db_session).list_queries(source="mobile_app")
        found, _ = await QueryService(db_session).list_queries(search="omar")

        assert total == 1
        assert [q.name for q in app_queries] == ["Sara Khan"]
        assert [q.name for q in found] == ["Omar Ali"]

    @pytest.mark.asyncio
    async def test_update_ignores_unknown_status(self, db_session, make_query):
        query = await make_query()

        updated = await QueryService(db_session).update_query(
            query.id, {"status": "exploded", "priority": "high", "notes": " called "}
        )

        assert updated.status == "new"
        assert updated.priority == "high"
        assert updated.notes == "called"

    @pytest.mark.asyncio
    async def test_bulk_status(self, db_session, make_query):
        first = await make_query("Sara Khan")
        second = await make_query("Omar Ali")

        modified = await QueryService(db_session).bulk_update_status([first.id, second.id, 999], "in_progress")

        assert modified == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ids,status", [([], "contacted"), ([1], "exploded")])
    async def test_bulk_status_validation(self, db_session, ids, status):
        with pytest.raises(ValidationError):
            await QueryService(db_session).bulk_update_status(ids, status)

    @pytest.mark.asyncio
    async def test_delete(self, db_session, make_query):
        query = await make_query()
        service = QueryService(db_session)

        await service.delete_query(query.id)

        with pytest.raises(NotFoundError):
            await service.get_query(query.id)


class TestNotificationInbox:
    """Tests for NotificationInboxService."""

    async def seed(self, db_session, recipient_id: int, count: int) -> list[Notification]:
        rows = [
            Notification(
                recipient_id=recipient_id,
                type=NotificationType.NEW_ENQUIRY,
                title="New enquiry received",
                message=f"Enquiry {i}",
            )
            for i in range(count)
        ]
        db_session.add_all(rows)
        await db_session.commit()
        return rows

    @pytest.mark.asyncio
    async def test_list_and_unread_count(self, db_session, admin_user, make_user):
        other = await make_user("other@example.com")
        await self.seed(db_session, admin_user.id, 3)
        await self.seed(db_session, other.id, 2)

        items, unread = await NotificationInboxService(db_session).list_notifications(admin_user.id, limit=2)

        assert len(items) == 2
        assert unread == 3
        assert all(n.recipient_id == admin_user.id for n in items)

    @pytest.mark.asyncio
    async def test_mark_read_and_all(self, db_session, admin_user):
        first, *_ = await self.seed(db_session, admin_user.id, 3)
        service = NotificationInboxService(db_session)

        read = await service.mark_read(admin_user.id, first.id)
        changed = await service.mark_all_read(admin_user.id)
        _, unread = await service.list_notifications(admin_user.id)

        assert read.read is True and read.read_at is not None
        assert changed == 2
        assert unread == 0

    @pytest.mark.asyncio
    async def test_cannot_read_someone_elses(self, db_session, admin_user, make_user):
        other = await make_user("other@example.com")
        (row,) = await self.seed(db_session, other.id, 1)

        with pytest.raises(NotFoundError):
            await NotificationInboxService(db_session).mark_read(admin_user.id, row.id)
