"""Per-owner tour counters for the dashboard."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tourify.models.tour import TourStatus
from tourify.schemas.analytics import AnalyticsSummary
from tourify.services.tour_repository import TourRepository

logger = logging.getLogger(__name__)


class AnalyticsService:
    async def summary(self, db: AsyncSession, owner_id: str) -> AnalyticsSummary:
        repo = TourRepository(db)
        by_status = await repo.count_by_status(owner_id)
        children = await repo.count_children(owner_id)

        summary = AnalyticsSummary(
            total_tours=sum(by_status.values()),
            published_tours=by_status.get(TourStatus.PUBLISHED.value, 0),
            draft_tours=by_status.get(TourStatus.DRAFT.value, 0),
            private_tours=by_status.get(TourStatus.PRIVATE.value, 0),
            total_steps=children["steps"],
            total_annotations=children["annotations"],
        )
        logger.debug("Analytics for %s: %s", owner_id, summary)
        return summary


analytics_service = AnalyticsService()
