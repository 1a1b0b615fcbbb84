from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

MOOD_LABELS: Tuple[str, ...] = ("Struggling", "Low", "Okay", "Good", "Great")
ENERGY_LABELS: Tuple[str, ...] = ("Exhausted", "Tired", "Neutral", "Energetic", "Vibrant")

SUGGESTED_TAGS: Tuple[str, ...] = (
    "anxious", "stressed", "grateful", "accomplished", "lonely",
    "excited", "overwhelmed", "peaceful", "motivated", "tired",
)

ACTIVITY_MOOD = "mood"
ACTIVITY_SESSION = "session"


def level_label(labels: Tuple[str, ...], value: int) -> str:
    if 0 <= value < len(labels):
        return labels[value]
    return str(value)


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Trim, lower-case and de-duplicate tags, keeping first-seen order."""
    seen = []
    for tag in tags or []:
        if tag is None:
            continue
        cleaned = str(tag).strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


@dataclass(frozen=True)
class MoodEntryRecord:
    id: int
    entry_date: date
    mood: int
    energy: int
    note: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @property
    def mood_label(self) -> str:
        return level_label(MOOD_LABELS, self.mood)

    @property
    def energy_label(self) -> str:
        return level_label(ENERGY_LABELS, self.energy)


@dataclass(frozen=True)
class SessionRecordItem:
    id: int
    therapist_name: str
    scheduled_date: datetime
    session_type: str
    status: str


@dataclass(frozen=True)
class ActivityItem:
    kind: str
    description: str
    occurred_at: datetime
    is_placeholder: bool = False


@dataclass(frozen=True)
class AnalyticsSnapshot:
    streak_days: int
    weekly_mood_average: float
    completed_sessions: int
    total_engagement_minutes: int
    recent_activity: Tuple[ActivityItem, ...]
    generated_at: datetime
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_placeholder_activity(self) -> bool:
        return any(item.is_placeholder for item in self.recent_activity)
