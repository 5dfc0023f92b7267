"""
Insights API - AI tips for the viewed week

POST starts a refresh in the background and returns immediately; GET reports
the latest published tips. A newer POST supersedes one still in flight.
"""

import logging

from fastapi import APIRouter, Depends, status

from core.ai_service import InsightCoordinator
from core.tracker import HabitTracker
from shared.models import InsightsState
from ..dependencies import get_insights, get_tracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/insights", tags=["insights"])

@router.get("", response_model=InsightsState)
async def get_insights_state(coordinator: InsightCoordinator = Depends(get_insights)):
    return coordinator.to_dict()

@router.post("", status_code=status.HTTP_202_ACCEPTED, response_model=InsightsState)
async def refresh_insights(
    tracker: HabitTracker = Depends(get_tracker),
    coordinator: InsightCoordinator = Depends(get_insights)
):
    summaries = tracker.insight_summaries()
    coordinator.request(summaries)
    logger.info(f"Insight refresh #{coordinator.generation} requested for {len(summaries)} habits")
    return coordinator.to_dict()

@router.get("/stats")
async def insight_stats(coordinator: InsightCoordinator = Depends(get_insights)):
    return coordinator.service.get_stats()
