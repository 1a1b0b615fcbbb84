from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import StorageUnavailable
from app.core.metrics import analytics_snapshots_total
from app.utils.timezone import now_local, to_utc_naive
from .engine import build_snapshot
from .records import AnalyticsSnapshot, MoodEntryRecord, SessionRecordItem
from .repository import MoodEntryRepository, SessionRecordRepository

logger = logging.getLogger(__name__)

MOOD_UNAVAILABLE_WARNING = "Mood history is temporarily unavailable; statistics may be incomplete."
SESSIONS_UNAVAILABLE_WARNING = "Session history is temporarily unavailable; statistics may be incomplete."


class AnalyticsService:
    """Builds the dashboard snapshot for one user.

    Both sources are fetched independently. A source whose store is
    unreachable is treated as empty and reported through ``warnings``
    so the dashboard still renders.
    """

    def __init__(
        self,
        mood_repository: MoodEntryRepository,
        session_repository: SessionRecordRepository,
        config: Optional[Settings] = None,
    ):
        self.mood_repository = mood_repository
        self.session_repository = session_repository
        self.config = config or default_settings

    def _load_mood_entries(self, user_id: int) -> Tuple[List[MoodEntryRecord], Optional[str]]:
        try:
            return self.mood_repository.fetch_mood_entries(user_id), None
        except StorageUnavailable as e:
            logger.warning(f"Analytics for user {user_id} degraded: {e}")
            return [], MOOD_UNAVAILABLE_WARNING

    def _load_sessions(self, user_email: str) -> Tuple[List[SessionRecordItem], Optional[str]]:
        try:
            return self.session_repository.fetch_session_records(user_email), None
        except StorageUnavailable as e:
            logger.warning(f"Analytics for {user_email} degraded: {e}")
            return [], SESSIONS_UNAVAILABLE_WARNING

    def get_snapshot(self, user_id: int, user_email: str, now: Optional[datetime] = None) -> AnalyticsSnapshot:
        local_now = now or now_local()
        mood_entries, mood_warning = self._load_mood_entries(user_id)
        sessions, session_warning = self._load_sessions(user_email)
        warnings = [w for w in (mood_warning, session_warning) if w]

        cfg = self.config
        streak_as_of = local_now.date() if cfg.ANALYTICS_STREAK_REQUIRES_RECENT_CHECKIN else None
        snapshot = build_snapshot(
            mood_entries,
            sessions,
            now=to_utc_naive(local_now),
            mood_window_days=cfg.ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS,
            streak_as_of=streak_as_of,
            mood_limit=cfg.ANALYTICS_MOOD_FEED_LIMIT,
            session_limit=cfg.ANALYTICS_SESSION_FEED_LIMIT,
            activity_limit=cfg.ANALYTICS_ACTIVITY_FEED_LIMIT,
            minutes_per_session=cfg.ANALYTICS_SESSION_DURATION_MINUTES,
            scale_max=cfg.MOOD_SCALE_MAX,
            warnings=warnings,
        )

        analytics_snapshots_total.labels(placeholder=str(snapshot.has_placeholder_activity).lower()).inc()
        logger.info(
            f"Analytics snapshot for user {user_id}: streak={snapshot.streak_days} "
            f"avg={snapshot.weekly_mood_average:.2f} completed={snapshot.completed_sessions} "
            f"activity={len(snapshot.recent_activity)} placeholder={snapshot.has_placeholder_activity}"
        )
        return snapshot
