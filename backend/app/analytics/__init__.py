"""Engagement and mood analytics.

This package contains:
- Canonical in-memory record types the engine works on
- A small, explicit engine: streak, mood average, session statistics and the
  recent-activity feed, all pure functions over their inputs
- Repository adapters that read/write the record store and normalize rows
- A service that assembles the read-only dashboard snapshot

Nothing here caches derived state; every snapshot is recomputed from the
collections fetched for that request.
"""

from .records import ActivityItem, AnalyticsSnapshot, MoodEntryRecord, SessionRecordItem
from .engine import (
    build_snapshot,
    calculate_streak,
    count_completed_sessions,
    merge_recent_activity,
    total_engagement_minutes,
    weekly_mood_average,
)
