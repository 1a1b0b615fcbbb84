from .mood_entry import MoodEntryCreate, MoodEntryResponse, MoodEntryUpsertResponse, MoodScaleResponse
from .session_record import SessionRecordCreate, SessionRecordResponse
from .analytics import ActivityItem, AnalyticsSnapshotResponse
from .conversation import (
    Conversation,
    ConversationCreate,
    ConversationMessage,
    ConversationMessageCreate,
    ConversationReply,
)
from .token import TokenPayload
from .user import UserCreate
