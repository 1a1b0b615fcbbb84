from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Sequence

from .records import (
    ACTIVITY_MOOD,
    ACTIVITY_SESSION,
    ActivityItem,
    AnalyticsSnapshot,
    MoodEntryRecord,
    SessionRecordItem,
)

MOOD_FEED_LIMIT = 3
SESSION_FEED_LIMIT = 2
ACTIVITY_FEED_LIMIT = 5
SESSION_DURATION_MINUTES = 50
MOOD_SCALE_MAX = 4

COMPLETED = "completed"

# (kind, description, days before the reference time)
PLACEHOLDER_ACTIVITIES = (
    ("breathing", "Completed a 5-minute breathing exercise", 1),
    ("chat", "Chatted with the AI therapy bot", 2),
    ("resources", "Read an article on mindfulness", 3),
)


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _day_start(d: date) -> datetime:
    return datetime(d.year, d.month, d.day)


def sort_entries_desc(entries: Sequence[MoodEntryRecord]) -> List[MoodEntryRecord]:
    return sorted(entries, key=lambda e: e.entry_date, reverse=True)


def sort_sessions_desc(sessions: Sequence[SessionRecordItem]) -> List[SessionRecordItem]:
    return sorted(sessions, key=lambda s: _as_naive(s.scheduled_date), reverse=True)


def calculate_streak(entries: Sequence[MoodEntryRecord], as_of: Optional[date] = None) -> int:
    """Count consecutive calendar days ending at the most recent entry.

    Input order is not trusted; entries are sorted newest first before
    walking. Same-day duplicates are skipped and the first gap of more
    than one day ends the streak.

    When ``as_of`` is given, a most-recent entry older than the day before
    ``as_of`` yields 0 instead of a streak that ended in the past.
    """
    if not entries:
        return 0

    ordered = sort_entries_desc(entries)
    cursor = ordered[0].entry_date
    if as_of is not None and (as_of - cursor).days > 1:
        return 0

    streak = 1
    for entry in ordered[1:]:
        diff_days = (cursor - entry.entry_date).days
        if diff_days == 0:
            continue
        if diff_days == 1:
            streak += 1
            cursor = entry.entry_date
        else:
            break
    return streak


def entries_within_window(
    entries: Sequence[MoodEntryRecord], days: int, end: Optional[date] = None
) -> List[MoodEntryRecord]:
    """Entries dated in the ``days``-long window ending at ``end`` (inclusive).

    ``end`` defaults to the most recent entry's date.
    """
    if not entries:
        return []
    if end is None:
        end = max(e.entry_date for e in entries)
    start = end - timedelta(days=days - 1)
    return [e for e in entries if start <= e.entry_date <= end]


def weekly_mood_average(entries: Sequence[MoodEntryRecord]) -> float:
    """Arithmetic mean of ``mood`` over exactly the entries given; 0.0 when empty.

    Windowing is the caller's job (see ``entries_within_window``).
    """
    if not entries:
        return 0.0
    return sum(e.mood for e in entries) / float(len(entries))


def count_completed_sessions(sessions: Sequence[SessionRecordItem]) -> int:
    return sum(1 for s in sessions if s.status == COMPLETED)


def total_engagement_minutes(
    completed_sessions: int, minutes_per_session: int = SESSION_DURATION_MINUTES
) -> int:
    # Approximation: a flat duration per completed session, not measured time
    return completed_sessions * minutes_per_session


def placeholder_activity(now: Optional[datetime] = None) -> List[ActivityItem]:
    now = _as_naive(now) if now else _utc_now_naive()
    return [
        ActivityItem(
            kind=kind,
            description=description,
            occurred_at=now - timedelta(days=days_ago),
            is_placeholder=True,
        )
        for kind, description, days_ago in PLACEHOLDER_ACTIVITIES
    ]


def mood_activity(entry: MoodEntryRecord, scale_max: int = MOOD_SCALE_MAX) -> ActivityItem:
    return ActivityItem(
        kind=ACTIVITY_MOOD,
        description=f"Logged a mood of {entry.mood_label} ({entry.mood}/{scale_max})",
        occurred_at=_day_start(entry.entry_date),
    )


def session_activity(session: SessionRecordItem) -> ActivityItem:
    return ActivityItem(
        kind=ACTIVITY_SESSION,
        description=f"Session with {session.therapist_name} - {session.status}",
        occurred_at=_as_naive(session.scheduled_date),
    )


def merge_recent_activity(
    mood_entries: Sequence[MoodEntryRecord],
    sessions: Sequence[SessionRecordItem],
    mood_limit: int = MOOD_FEED_LIMIT,
    session_limit: int = SESSION_FEED_LIMIT,
    limit: int = ACTIVITY_FEED_LIMIT,
    now: Optional[datetime] = None,
    scale_max: int = MOOD_SCALE_MAX,
) -> List[ActivityItem]:
    """Newest-first feed of the latest mood entries and sessions.

    Takes up to ``mood_limit`` most recent entries and ``session_limit``
    most recent sessions, orders them by ``occurred_at`` descending and
    keeps ``limit`` items. If nothing real remains, the fixed placeholder
    sequence (flagged ``is_placeholder``) is returned instead.
    """
    items = [mood_activity(e, scale_max) for e in sort_entries_desc(mood_entries)[:mood_limit]]
    items += [session_activity(s) for s in sort_sessions_desc(sessions)[:session_limit]]
    items.sort(key=lambda item: item.occurred_at, reverse=True)
    items = items[:limit]
    if not items:
        return placeholder_activity(now)
    return items


def build_snapshot(
    mood_entries: Sequence[MoodEntryRecord],
    sessions: Sequence[SessionRecordItem],
    *,
    now: Optional[datetime] = None,
    mood_window_days: Optional[int] = 7,
    streak_as_of: Optional[date] = None,
    mood_limit: int = MOOD_FEED_LIMIT,
    session_limit: int = SESSION_FEED_LIMIT,
    activity_limit: int = ACTIVITY_FEED_LIMIT,
    minutes_per_session: int = SESSION_DURATION_MINUTES,
    scale_max: int = MOOD_SCALE_MAX,
    warnings: Sequence[str] = (),
) -> AnalyticsSnapshot:
    now = _as_naive(now) if now else _utc_now_naive()

    if mood_window_days is None:
        averaged = list(mood_entries)
    else:
        averaged = entries_within_window(mood_entries, mood_window_days)

    completed = count_completed_sessions(sessions)
    activity = merge_recent_activity(
        mood_entries,
        sessions,
        mood_limit=mood_limit,
        session_limit=session_limit,
        limit=activity_limit,
        now=now,
        scale_max=scale_max,
    )
    return AnalyticsSnapshot(
        streak_days=calculate_streak(mood_entries, as_of=streak_as_of),
        weekly_mood_average=weekly_mood_average(averaged),
        completed_sessions=completed,
        total_engagement_minutes=total_engagement_minutes(completed, minutes_per_session),
        recent_activity=tuple(activity),
        generated_at=now,
        warnings=tuple(warnings),
    )
