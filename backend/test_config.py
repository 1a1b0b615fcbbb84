import pytest
from pydantic import ValidationError

from app.core.config import Settings


def make_settings(**overrides):
    values = {"SECRET_KEY": "k", "SQLALCHEMY_DATABASE_URI": "sqlite://"}
    values.update(overrides)
    return Settings(**values)


def test_database_uri_is_derived_from_postgres_parts():
    cfg = make_settings(
        SQLALCHEMY_DATABASE_URI=None,
        POSTGRES_SERVER="db",
        POSTGRES_USER="mind ease",
        POSTGRES_PASSWORD="p@ss",
        POSTGRES_DB="wellness",
    )
    assert cfg.SQLALCHEMY_DATABASE_URI == "postgresql://mind+ease:p%40ss@db:5432/wellness"
    assert cfg.uses_sqlite is False


def test_missing_database_settings_fail():
    with pytest.raises(ValidationError):
        make_settings(SQLALCHEMY_DATABASE_URI=None, POSTGRES_SERVER=None, POSTGRES_USER=None, POSTGRES_DB=None)


def test_safety_thresholds_are_normalized_and_completed():
    cfg = make_settings(ASSISTANT_SAFETY_THRESHOLDS={" Harassment ": "BLOCK_ONLY_HIGH"})
    assert cfg.ASSISTANT_SAFETY_THRESHOLDS == {
        "harassment": "block_only_high",
        "hate_speech": "block_medium_and_above",
        "sexually_explicit": "block_medium_and_above",
        "dangerous_content": "block_medium_and_above",
    }


@pytest.mark.parametrize(
    "overrides",
    [
        {"ASSISTANT_SAFETY_THRESHOLDS": {"spam": "block_none"}},
        {"ASSISTANT_SAFETY_THRESHOLDS": {"harassment": "block_everything"}},
        {"MOOD_SCALE_MIN": 4, "MOOD_SCALE_MAX": 4},
        {"ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS": 0},
        {"ANALYTICS_ACTIVITY_FEED_LIMIT": -1},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ValidationError):
        make_settings(**overrides)


def test_full_history_average_is_allowed():
    assert make_settings(ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS=None).ANALYTICS_MOOD_AVERAGE_WINDOW_DAYS is None
