from typing import Any

from fastapi import APIRouter, Depends

from app import models, schemas
from app.analytics.service import AnalyticsService
from app.api import deps

router = APIRouter()


@router.get("/analytics", response_model=schemas.AnalyticsSnapshotResponse)
def read_dashboard_analytics(
    service: AnalyticsService = Depends(deps.get_analytics_service),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Engagement statistics and recent activity for the dashboard.

    Never fails because a record store is down: unavailable sources count
    as empty and are listed in ``warnings``.
    """
    snapshot = service.get_snapshot(current_user.id, current_user.email)
    return schemas.AnalyticsSnapshotResponse(
        streak_days=snapshot.streak_days,
        weekly_mood_average=round(snapshot.weekly_mood_average, 2),
        completed_sessions=snapshot.completed_sessions,
        total_engagement_minutes=snapshot.total_engagement_minutes,
        recent_activity=[schemas.ActivityItem.model_validate(item) for item in snapshot.recent_activity],
        has_placeholder_activity=snapshot.has_placeholder_activity,
        warnings=list(snapshot.warnings),
        generated_at=snapshot.generated_at,
    )
