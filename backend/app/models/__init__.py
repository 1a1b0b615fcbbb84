from .user import User
from .mood_entry import MoodEntry
from .session_record import SessionRecord, SESSION_STATUSES
from .conversation import Conversation, ConversationMessage
