from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from .base import CRUDBase
from app.models.mood_entry import MoodEntry
from app.schemas.mood_entry import MoodEntryCreate


class CRUDMoodEntry(CRUDBase[MoodEntry, MoodEntryCreate, MoodEntryCreate]):
    def get_by_user_date(self, db: Session, *, user_id: int, entry_date: date) -> Optional[MoodEntry]:
        return (
            db.query(MoodEntry)
            .filter(MoodEntry.user_id == user_id)
            .filter(MoodEntry.entry_date == entry_date)
            .first()
        )

    def get_by_user(self, db: Session, *, user_id: int, limit: Optional[int] = None) -> List[MoodEntry]:
        query = (
            db.query(MoodEntry)
            .filter(MoodEntry.user_id == user_id)
            .order_by(MoodEntry.entry_date.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def upsert_by_date(
        self,
        db: Session,
        *,
        user_id: int,
        entry_date: date,
        mood: int,
        energy: int,
        note: Optional[str],
        tags: List[str],
    ) -> Tuple[MoodEntry, bool]:
        """Insert, or fully replace the entry already stored for (user, date).

        Returns the stored row and whether an existing row was replaced.
        """
        existing = self.get_by_user_date(db, user_id=user_id, entry_date=entry_date)
        if existing:
            # Full replace, not merge: omitted note/tags clear the previous values
            existing.mood = mood
            existing.energy = energy
            existing.note = note
            existing.tags = list(tags)
            db.add(existing)
            db.commit()
            db.refresh(existing)
            return existing, True

        db_obj = MoodEntry(
            user_id=user_id,
            entry_date=entry_date,
            mood=mood,
            energy=energy,
            note=note,
            tags=list(tags),
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj, False


mood_entry = CRUDMoodEntry(MoodEntry)
