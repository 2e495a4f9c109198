"""Lead reports for the admin dashboard."""

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from estates.core.clock import utcnow
from estates.persistence.repositories.follow_up_repository import FollowUpRepository
from estates.persistence.repositories.lead_repository import LeadRepository

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_PERIOD = "30d"


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0


class LeadReportService:
    """Aggregate lead and follow-up performance over a period."""

    def __init__(self, session: AsyncSession) -> None:
        self.lead_repo = LeadRepository(session)
        self.follow_up_repo = FollowUpRepository(session)

    async def get_report(self, period: str | None = None, now: datetime | None = None) -> dict[str, Any]:
        """Build the report for "7d", "30d" or "90d" (anything else means 30d)."""
        period = period if period in PERIOD_DAYS else DEFAULT_PERIOD
        end = now or utcnow()
        start = end - timedelta(days=PERIOD_DAYS[period])

        by_status = await self.lead_repo.count_by("status", start, end)
        in_period = sum(by_status.values())
        won = by_status.get("won", 0)
        lost = by_status.get("lost", 0)

        follow_ups_total = await self.follow_up_repo.count_created(start, end)
        follow_ups_completed = await self.follow_up_repo.count_created(start, end, completed_only=True)

        return {
            "period": period,
            "date_range": {"start": start, "end": end},
            "summary": {
                "total_leads": await self.lead_repo.count(),
                "leads_in_period": in_period,
                "won": won,
                "lost": lost,
                "conversion_rate": _rate(won, in_period),
                "active_leads": in_period - won - lost,
            },
            "by_status": by_status,
            "by_source": await self.lead_repo.count_by("source", start, end),
            "leads_over_time": [
                {"date": day, "leads": count}
                for day, count in await self.lead_repo.count_per_day(start, end)
            ],
            "follow_up": {
                "total": follow_ups_total,
                "completed": follow_ups_completed,
                "overdue": await self.follow_up_repo.count_overdue(end),
                "completion_rate": _rate(follow_ups_completed, follow_ups_total),
            },
            "top_properties_by_leads": [
                {"property_name": name, "property_slug": slug or "", "leads": count}
                for name, slug, count in await self.lead_repo.top_properties(start, end)
            ],
        }
