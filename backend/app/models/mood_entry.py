from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.analytics.records import ENERGY_LABELS, MOOD_LABELS, level_label


class MoodEntry(Base):
    """One daily check-in per user per calendar date; resubmission replaces it."""

    __tablename__ = "mood_entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    entry_date = Column(Date, nullable=False)

    mood = Column(Integer, nullable=False)    # 0 (struggling) .. 4 (great)
    energy = Column(Integer, nullable=False)  # 0 (exhausted) .. 4 (vibrant)
    note = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)  # display order preserved

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="mood_entries")

    __table_args__ = (
        UniqueConstraint("user_id", "entry_date", name="uq_mood_entries_user_date"),
        Index("idx_mood_entries_user_date", "user_id", "entry_date"),
    )

    @property
    def mood_label(self) -> str:
        return level_label(MOOD_LABELS, self.mood)

    @property
    def energy_label(self) -> str:
        return level_label(ENERGY_LABELS, self.energy)
