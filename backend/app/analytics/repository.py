import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.core.config import settings
from app.core.exceptions import EntryValidationError, StorageUnavailable
from app.core.metrics import mood_entries_rejected_total, mood_entries_upserted_total, storage_unavailable_total
from app.models.mood_entry import MoodEntry
from app.models.session_record import SessionRecord
from app.schemas.session_record import SessionRecordCreate
from .records import MoodEntryRecord, SessionRecordItem, normalize_tags

logger = logging.getLogger(__name__)

MOOD_SOURCE = "mood_entries"
SESSION_SOURCE = "session_records"


def to_mood_record(row: MoodEntry) -> MoodEntryRecord:
    return MoodEntryRecord(
        id=row.id,
        entry_date=row.entry_date,
        mood=int(row.mood),
        energy=int(row.energy),
        note=row.note,
        tags=tuple(normalize_tags(row.tags)),
    )


def to_session_item(row: SessionRecord) -> SessionRecordItem:
    return SessionRecordItem(
        id=row.id,
        therapist_name=row.therapist_name,
        scheduled_date=row.scheduled_date,
        session_type=row.session_type,
        status=(row.status or "").strip().lower(),
    )


def validate_level(field: str, value, scale_min: int, scale_max: int) -> int:
    # bool is an int subclass; a checkbox value is not a mood level
    if isinstance(value, bool) or not isinstance(value, int):
        raise EntryValidationError(field, f"{field} must be an integer between {scale_min} and {scale_max}")
    if value < scale_min or value > scale_max:
        raise EntryValidationError(field, f"{field} must be between {scale_min} and {scale_max}, got {value}")
    return value


def _storage_failure(db: Session, source: str, exc: SQLAlchemyError) -> StorageUnavailable:
    logger.error(f"{source} store operation failed: {exc}")
    try:
        db.rollback()
    except SQLAlchemyError as rollback_error:
        logger.error(f"Rollback after {source} failure also failed: {rollback_error}")
    storage_unavailable_total.labels(source=source).inc()
    return StorageUnavailable(source)


class MoodEntryRepository:
    """Reads and upserts one user's daily mood entries.

    Reads return canonical ``MoodEntryRecord`` values ordered by date
    descending. Writes replace any entry already stored for the same
    (user, date). Driver errors surface as ``StorageUnavailable``.
    """

    def __init__(self, db: Session, scale_min: Optional[int] = None, scale_max: Optional[int] = None):
        self.db = db
        self.scale_min = settings.MOOD_SCALE_MIN if scale_min is None else scale_min
        self.scale_max = settings.MOOD_SCALE_MAX if scale_max is None else scale_max

    def fetch_mood_entries(self, user_id: int, limit: Optional[int] = None) -> List[MoodEntryRecord]:
        try:
            rows = crud.mood_entry.get_by_user(self.db, user_id=user_id, limit=limit)
        except SQLAlchemyError as e:
            raise _storage_failure(self.db, MOOD_SOURCE, e) from e
        records = [to_mood_record(r) for r in rows]
        records.sort(key=lambda r: r.entry_date, reverse=True)
        return records

    def get_entry_for_date(self, user_id: int, entry_date: date) -> Optional[MoodEntry]:
        try:
            return crud.mood_entry.get_by_user_date(self.db, user_id=user_id, entry_date=entry_date)
        except SQLAlchemyError as e:
            raise _storage_failure(self.db, MOOD_SOURCE, e) from e

    def validate(self, entry_date: Optional[date], mood, energy) -> None:
        try:
            if entry_date is None:
                raise EntryValidationError("entry_date", "entry_date is required")
            validate_level("mood", mood, self.scale_min, self.scale_max)
            validate_level("energy", energy, self.scale_min, self.scale_max)
        except EntryValidationError as e:
            mood_entries_rejected_total.labels(field=e.field).inc()
            raise

    def upsert_mood_entry(
        self,
        user_id: int,
        *,
        entry_date: date,
        mood: int,
        energy: int,
        note: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Tuple[MoodEntry, bool]:
        """Insert the entry, or fully replace the one already stored for that date."""
        self.validate(entry_date, mood, energy)
        clean_tags = normalize_tags(tags)
        kwargs = dict(
            user_id=user_id, entry_date=entry_date, mood=mood, energy=energy, note=note, tags=clean_tags
        )
        try:
            try:
                row, replaced = crud.mood_entry.upsert_by_date(self.db, **kwargs)
            except IntegrityError:
                # A concurrent submission inserted the same (user, date) first; ours lands last
                self.db.rollback()
                logger.info(f"Concurrent mood entry insert for user {user_id} on {entry_date}; replacing")
                row, replaced = crud.mood_entry.upsert_by_date(self.db, **kwargs)
        except SQLAlchemyError as e:
            raise _storage_failure(self.db, MOOD_SOURCE, e) from e

        mood_entries_upserted_total.labels(outcome="replaced" if replaced else "inserted").inc()
        logger.info(
            f"Mood entry {'replaced' if replaced else 'inserted'} for user {user_id} on {entry_date}"
        )
        return row, replaced


class SessionRecordRepository:
    """Read access to session records keyed by the user's email."""

    def __init__(self, db: Session):
        self.db = db

    def fetch_session_records(self, user_email: str, limit: Optional[int] = None) -> List[SessionRecordItem]:
        try:
            rows = crud.session_record.get_by_email(self.db, user_email=user_email, limit=limit)
        except SQLAlchemyError as e:
            raise _storage_failure(self.db, SESSION_SOURCE, e) from e
        return [to_session_item(r) for r in rows]

    def list_rows(self, user_email: str, skip: int = 0, limit: int = 100) -> List[SessionRecord]:
        try:
            return crud.session_record.get_by_email(self.db, user_email=user_email, skip=skip, limit=limit)
        except SQLAlchemyError as e:
            raise _storage_failure(self.db, SESSION_SOURCE, e) from e

    def record_session(self, user_email: str, obj_in: SessionRecordCreate) -> SessionRecord:
        try:
            return crud.session_record.create_for_email(self.db, obj_in=obj_in, user_email=user_email)
        except SQLAlchemyError as e:
            raise _storage_failure(self.db, SESSION_SOURCE, e) from e
