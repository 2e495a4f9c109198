"""Detached executor for notification side effects.

Requests hand notification work to the dispatcher and return immediately.
Each job gets its own database session and its own error handling, so a
slow or failing email provider never delays or fails the request that
triggered it.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from estates.infrastructure.notifications import NotificationService, build_notification_service

logger = logging.getLogger(__name__)

NotificationJob = Callable[[NotificationService], Awaitable[Any]]


class NotificationDispatcher:
    """Run notification jobs as background asyncio tasks."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        service_factory: Callable[[AsyncSession], NotificationService] = build_notification_service,
    ) -> None:
        """Initialize dispatcher.

        Args:
            session_factory: Factory for the per-job database session
            service_factory: Builds the notification service for a job's session
        """
        self.session_factory = session_factory
        self.service_factory = service_factory
        # Strong references so pending tasks are not garbage collected
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of jobs still running."""
        return len(self._tasks)

    def dispatch(self, description: str, job: NotificationJob) -> asyncio.Task:
        """Schedule a job and return without waiting for it.

        Args:
            description: Short label used in logs
            job: Coroutine function receiving a NotificationService

        Returns:
            The background task
        """
        task = asyncio.create_task(self._run(description, job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, description: str, job: NotificationJob) -> None:
        try:
            async with self.session_factory() as session:
                result = await job(self.service_factory(session))
            logger.info(f"Notification job {description} completed: {result}")
        except Exception as exc:
            logger.exception(f"Notification job {description} failed: {exc}")

    async def drain(self) -> None:
        """Wait until every dispatched job has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
