from sqlalchemy import Column, Integer, String, DateTime, Text
from app.db.base import Base
from datetime import datetime

SESSION_STATUSES = ("upcoming", "completed", "cancelled")


class SessionRecord(Base):
    __tablename__ = "session_records"

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String, nullable=False, index=True)

    therapist_name = Column(String, nullable=False)
    scheduled_date = Column(DateTime, nullable=False)
    scheduled_time = Column(String(16), nullable=True)  # display slot, e.g. "2:00 PM"
    session_type = Column(String, nullable=False, default="Individual Therapy")

    # upcoming, completed, cancelled; transitions belong to the booking subsystem
    status = Column(String, nullable=False, default="upcoming")
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
