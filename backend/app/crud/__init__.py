from .user import user
from .mood_entry import mood_entry
from .session_record import session_record
from .conversation import conversation, conversation_message

__all__ = [
    "user", "mood_entry", "session_record", "conversation", "conversation_message",
]
