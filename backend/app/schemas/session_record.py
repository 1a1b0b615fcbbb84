from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

SessionStatus = Literal["upcoming", "completed", "cancelled"]


# Shared properties
class SessionRecordBase(BaseModel):
    therapist_name: str = Field(min_length=1, max_length=255)
    scheduled_date: datetime
    scheduled_time: Optional[str] = Field(default=None, max_length=16)
    session_type: str = "Individual Therapy"
    status: SessionStatus = "upcoming"
    notes: Optional[str] = None


# Properties to receive on creation (from the booking subsystem)
class SessionRecordCreate(SessionRecordBase):
    pass


# Properties to return to client
class SessionRecordResponse(SessionRecordBase):
    id: int
    user_email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
