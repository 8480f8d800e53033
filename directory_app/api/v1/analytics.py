from typing import Optional

from fastapi import APIRouter, Depends, Query

from directory_app.analytics.aggregator import ALL_CATEGORIES, SortKey
from directory_app.dependencies import get_actor_id, get_analytics_service
from directory_app.schemas.analytics import Dashboard
from directory_app.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(
    category: str = Query(ALL_CATEGORIES, description="Category name, or 'all'"),
    sort: str = Query(SortKey.TOTAL.value, description="total, recent or users"),
    actor_id: Optional[str] = Depends(get_actor_id),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
):
    """Click analytics for administrators"""
    return await analytics_service.get_dashboard(actor_id, category=category, sort=sort)
