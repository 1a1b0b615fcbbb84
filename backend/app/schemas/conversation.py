from typing import List, Literal, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ConversationCreate(BaseModel):
    title: str = "Therapy Session"


class ConversationMessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=4000)


class ConversationMessage(BaseModel):
    id: int
    conversation_id: int
    role: Literal["user", "assistant"]
    content: str
    is_fallback: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Conversation(BaseModel):
    id: int
    user_id: int
    title: str
    created_at: Optional[datetime] = None
    last_message_at: Optional[datetime] = None
    message_count: Optional[int] = 0
    messages: List[ConversationMessage] = []

    model_config = ConfigDict(from_attributes=True)


class ConversationReply(BaseModel):
    """A user turn together with the assistant turn it produced."""
    user_message: ConversationMessage
    assistant_message: ConversationMessage
