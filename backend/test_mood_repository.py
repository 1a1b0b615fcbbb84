"""
Tests for the record-store adapters: upsert-by-date, ordering, write-boundary
validation and translation of driver errors.
"""

from datetime import date, datetime
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app import crud
from app.analytics.repository import MoodEntryRepository, SessionRecordRepository
from app.core.exceptions import EntryValidationError, StorageUnavailable
from app.schemas.session_record import SessionRecordCreate


def broken_session():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    return db


def test_upsert_inserts_then_replaces(db, user):
    repo = MoodEntryRepository(db)
    day = date(2024, 1, 10)

    first, replaced = repo.upsert_mood_entry(user.id, entry_date=day, mood=1, energy=2, note="rough", tags=["Tired"])
    assert replaced is False

    second, replaced = repo.upsert_mood_entry(user.id, entry_date=day, mood=4, energy=3)
    assert replaced is True
    assert second.id == first.id

    records = repo.fetch_mood_entries(user.id)
    assert len(records) == 1
    assert records[0].mood == 4
    assert records[0].energy == 3
    # Full replace: the earlier note and tags are gone
    assert records[0].note is None
    assert records[0].tags == ()


def test_upsert_keeps_other_dates(db, user):
    repo = MoodEntryRepository(db)
    repo.upsert_mood_entry(user.id, entry_date=date(2024, 1, 9), mood=2, energy=2)
    repo.upsert_mood_entry(user.id, entry_date=date(2024, 1, 10), mood=3, energy=2)
    repo.upsert_mood_entry(user.id, entry_date=date(2024, 1, 10), mood=1, energy=1)

    records = repo.fetch_mood_entries(user.id)
    assert [r.entry_date for r in records] == [date(2024, 1, 10), date(2024, 1, 9)]
    assert [r.mood for r in records] == [1, 2]


def test_entries_are_per_user(db, user):
    other = crud.user.create(db, email="sam@example.com")
    repo = MoodEntryRepository(db)
    repo.upsert_mood_entry(user.id, entry_date=date(2024, 1, 10), mood=3, energy=2)
    repo.upsert_mood_entry(other.id, entry_date=date(2024, 1, 10), mood=0, energy=0)

    assert [r.mood for r in repo.fetch_mood_entries(user.id)] == [3]
    assert [r.mood for r in repo.fetch_mood_entries(other.id)] == [0]


def test_fetch_orders_newest_first_and_limits(db, user):
    repo = MoodEntryRepository(db)
    for day in (5, 1, 9, 3):
        repo.upsert_mood_entry(user.id, entry_date=date(2024, 2, day), mood=2, energy=2)

    records = repo.fetch_mood_entries(user.id)
    assert [r.entry_date.day for r in records] == [9, 5, 3, 1]
    assert [r.entry_date.day for r in repo.fetch_mood_entries(user.id, limit=2)] == [9, 5]


def test_tags_are_normalized(db, user):
    repo = MoodEntryRepository(db)
    row, _ = repo.upsert_mood_entry(
        user.id, entry_date=date(2024, 1, 10), mood=2, energy=2, tags=[" Anxious", "anxious", "", "Grateful"]
    )
    assert row.tags == ["anxious", "grateful"]


@pytest.mark.parametrize(
    "mood, energy, field",
    [(5, 2, "mood"), (-1, 2, "mood"), (2, 7, "energy"), (True, 2, "mood"), (2.5, 2, "mood"), (None, 2, "mood")],
)
def test_out_of_scale_values_never_reach_the_store(mood, energy, field):
    db = MagicMock()
    repo = MoodEntryRepository(db)

    with pytest.raises(EntryValidationError) as exc_info:
        repo.upsert_mood_entry(1, entry_date=date(2024, 1, 10), mood=mood, energy=energy)

    assert exc_info.value.field == field
    db.add.assert_not_called()
    db.commit.assert_not_called()


def test_missing_date_is_rejected():
    repo = MoodEntryRepository(MagicMock())
    with pytest.raises(EntryValidationError) as exc_info:
        repo.upsert_mood_entry(1, entry_date=None, mood=2, energy=2)
    assert exc_info.value.field == "entry_date"


def test_scale_bounds_are_configurable(db, user):
    repo = MoodEntryRepository(db, scale_min=1, scale_max=10)
    row, _ = repo.upsert_mood_entry(user.id, entry_date=date(2024, 1, 10), mood=9, energy=10)
    assert row.mood == 9
    with pytest.raises(EntryValidationError):
        repo.upsert_mood_entry(user.id, entry_date=date(2024, 1, 11), mood=0, energy=5)


def test_concurrent_insert_is_retried_as_replace(db, user):
    repo = MoodEntryRepository(db)
    stored = MagicMock(id=7)
    conflict = IntegrityError("INSERT", {}, Exception("uq_mood_entries_user_date"))

    with patch.object(crud.mood_entry, "upsert_by_date", side_effect=[conflict, (stored, True)]) as upsert:
        row, replaced = repo.upsert_mood_entry(user.id, entry_date=date(2024, 1, 10), mood=3, energy=3)

    assert row is stored
    assert replaced is True
    assert upsert.call_count == 2


def test_read_failure_raises_storage_unavailable():
    db = broken_session()
    with pytest.raises(StorageUnavailable) as exc_info:
        MoodEntryRepository(db).fetch_mood_entries(1)
    assert exc_info.value.source == "mood_entries"
    db.rollback.assert_called_once()


def test_write_failure_raises_storage_unavailable():
    db = broken_session()
    with pytest.raises(StorageUnavailable):
        MoodEntryRepository(db).upsert_mood_entry(1, entry_date=date(2024, 1, 10), mood=2, energy=2)


def test_session_records_by_email(db, user):
    repo = SessionRecordRepository(db)
    repo.record_session(
        user.email,
        SessionRecordCreate(therapist_name="Dr. Michael Chen", scheduled_date=datetime(2024, 1, 3, 14), status="completed"),
    )
    repo.record_session(
        user.email,
        SessionRecordCreate(therapist_name="Dr. Emily Rodriguez", scheduled_date=datetime(2024, 1, 17, 10)),
    )
    repo.record_session(
        "someone.else@example.com",
        SessionRecordCreate(therapist_name="Dr. Michael Chen", scheduled_date=datetime(2024, 1, 5, 9)),
    )

    items = repo.fetch_session_records(user.email)
    assert [i.therapist_name for i in items] == ["Dr. Emily Rodriguez", "Dr. Michael Chen"]
    assert [i.status for i in items] == ["upcoming", "completed"]


def test_session_read_failure_raises_storage_unavailable():
    with pytest.raises(StorageUnavailable) as exc_info:
        SessionRecordRepository(broken_session()).fetch_session_records("alex@example.com")
    assert exc_info.value.source == "session_records"
