"""Dashboard counters for the requester's tours."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tourify.auth import get_requester_id
from tourify.database import get_db_session
from tourify.schemas.analytics import AnalyticsSummary
from tourify.services.analytics_service import analytics_service

router = APIRouter(prefix="/api", tags=["Analytics"])


@router.get("/analytics", response_model=AnalyticsSummary, summary="Tour counters")
async def get_analytics(
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> AnalyticsSummary:
    return await analytics_service.summary(db=db, owner_id=requester_id)
