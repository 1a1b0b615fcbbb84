from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict


class ActivityItem(BaseModel):
    kind: str
    description: str
    occurred_at: datetime
    is_placeholder: bool = False

    model_config = ConfigDict(from_attributes=True)


class AnalyticsSnapshotResponse(BaseModel):
    streak_days: int
    weekly_mood_average: float
    completed_sessions: int
    total_engagement_minutes: int
    recent_activity: List[ActivityItem]
    has_placeholder_activity: bool
    warnings: List[str] = []
    generated_at: datetime

    model_config = ConfigDict(from_attributes=True)
