#!/usr/bin/env python
"""Send follow-up reminders once. Meant for cron or Cloud Scheduler.

Usage:
    python scripts/send_due_reminders.py
"""

import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from estates.domain.services.followup_service import FollowUpService
from estates.logging_config import setup_logging
from estates.persistence.database import AsyncSessionLocal, engine

logger = logging.getLogger("estates.scripts.send_due_reminders")


async def main() -> int:
    """Run one reminder pass and report how many follow-ups were processed."""
    async with AsyncSessionLocal() as session:
        result = await FollowUpService(session).send_due_reminders()
    await engine.dispose()
    logger.info(f"Reminder run finished: sent={result['sent']}")
    return result["sent"]


if __name__ == "__main__":
    setup_logging()
    sent = asyncio.run(main())
    print(f"Reminder emails sent: {sent}")
