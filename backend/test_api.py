#!/usr/bin/env python3
"""
HTTP-level tests for the mood, session, dashboard and chat endpoints.
"""

from datetime import timedelta
from unittest.mock import patch

from app.analytics.repository import MoodEntryRepository
from app.core.config import settings
from app.core.exceptions import GenerationFailed, StorageUnavailable
from app.core.security import create_access_token
from app.utils.timezone import today_local

API = settings.API_V1_STR


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


def test_requires_bearer_token(client):
    response = client.get(f"{API}/mood-entries/")
    assert response.status_code == 403
    assert response.json()["error"] is True


def test_rejects_bad_token(client):
    response = client.get(f"{API}/mood-entries/", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403


def test_unknown_user(client, db):
    headers = {"Authorization": f"Bearer {create_access_token(9999)}"}
    assert client.get(f"{API}/mood-entries/", headers=headers).status_code == 404


def test_submit_defaults_to_today_and_replaces(client, auth_headers):
    first = client.post(
        f"{API}/mood-entries/",
        json={"mood": 1, "energy": 1, "note": "Long day", "tags": ["Tired"]},
        headers=auth_headers,
    )
    assert first.status_code == 200
    body = first.json()
    assert body["replaced"] is False
    assert body["entry"]["entry_date"] == today_local().isoformat()
    assert body["entry"]["mood_label"] == "Low"
    assert body["entry"]["energy_label"] == "Tired"
    assert body["entry"]["tags"] == ["tired"]

    second = client.post(f"{API}/mood-entries/", json={"mood": 3, "energy": 4}, headers=auth_headers)
    assert second.json()["replaced"] is True
    assert second.json()["entry"]["id"] == body["entry"]["id"]

    today = client.get(f"{API}/mood-entries/today", headers=auth_headers).json()
    assert today["mood"] == 3
    assert today["note"] is None

    history = client.get(f"{API}/mood-entries/", headers=auth_headers).json()
    assert len(history) == 1


def test_today_is_404_without_checkin(client, auth_headers):
    response = client.get(f"{API}/mood-entries/today", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "No check-in recorded today"


def test_out_of_scale_mood_is_422(client, auth_headers):
    for payload in ({"mood": 5, "energy": 2}, {"mood": 2, "energy": -1}, {"mood": True, "energy": 2}):
        response = client.post(f"{API}/mood-entries/", json=payload, headers=auth_headers)
        assert response.status_code == 422
    assert client.get(f"{API}/mood-entries/", headers=auth_headers).json() == []


def test_history_is_newest_first(client, auth_headers):
    today = today_local()
    for days_ago, mood in ((2, 1), (0, 4), (1, 2)):
        client.post(
            f"{API}/mood-entries/",
            json={"mood": mood, "energy": 2, "entry_date": (today - timedelta(days=days_ago)).isoformat()},
            headers=auth_headers,
        )

    history = client.get(f"{API}/mood-entries/", headers=auth_headers).json()
    assert [e["mood"] for e in history] == [4, 2, 1]
    assert len(client.get(f"{API}/mood-entries/?limit=2", headers=auth_headers).json()) == 2


def test_scale_lists_labels_and_tags(client):
    body = client.get(f"{API}/mood-entries/scale").json()
    assert [level["label"] for level in body["mood_levels"]] == ["Struggling", "Low", "Okay", "Good", "Great"]
    assert body["energy_levels"][4] == {"value": 4, "label": "Vibrant"}
    assert "grateful" in body["suggested_tags"]


def test_sessions_roundtrip(client, auth_headers):
    created = client.post(
        f"{API}/sessions/",
        json={
            "therapist_name": "Dr. Sarah Johnson",
            "scheduled_date": "2024-01-09T14:00:00",
            "scheduled_time": "2:00 PM",
            "status": "completed",
        },
        headers=auth_headers,
    )
    assert created.status_code == 200
    assert created.json()["user_email"] == "alex@example.com"

    sessions = client.get(f"{API}/sessions/", headers=auth_headers).json()
    assert [s["therapist_name"] for s in sessions] == ["Dr. Sarah Johnson"]


def test_unknown_session_status_is_rejected(client, auth_headers):
    response = client.post(
        f"{API}/sessions/",
        json={"therapist_name": "Dr. Sarah Johnson", "scheduled_date": "2024-01-09T14:00:00", "status": "missed"},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_dashboard_for_new_user_shows_placeholders(client, auth_headers):
    body = client.get(f"{API}/dashboard/analytics", headers=auth_headers).json()
    assert body["streak_days"] == 0
    assert body["weekly_mood_average"] == 0.0
    assert body["has_placeholder_activity"] is True
    assert all(item["is_placeholder"] for item in body["recent_activity"])
    assert body["warnings"] == []


def test_dashboard_reflects_checkins_and_sessions(client, auth_headers):
    today = today_local()
    for days_ago, mood in ((0, 3), (1, 2), (2, 4)):
        client.post(
            f"{API}/mood-entries/",
            json={"mood": mood, "energy": 2, "entry_date": (today - timedelta(days=days_ago)).isoformat()},
            headers=auth_headers,
        )
    client.post(
        f"{API}/sessions/",
        json={"therapist_name": "Dr. Michael Chen", "scheduled_date": "2024-01-03T10:00:00", "status": "completed"},
        headers=auth_headers,
    )

    body = client.get(f"{API}/dashboard/analytics", headers=auth_headers).json()

    assert body["streak_days"] == 3
    assert body["weekly_mood_average"] == 3.0
    assert body["completed_sessions"] == 1
    assert body["total_engagement_minutes"] == 50
    assert [i["kind"] for i in body["recent_activity"]] == ["mood", "mood", "mood", "session"]
    assert body["has_placeholder_activity"] is False


def test_dashboard_survives_storage_outage(client, auth_headers):
    with patch.object(MoodEntryRepository, "fetch_mood_entries", side_effect=StorageUnavailable("mood_entries")):
        response = client.get(f"{API}/dashboard/analytics", headers=auth_headers)

    assert response.status_code == 200
    assert len(response.json()["warnings"]) == 1


def test_history_outage_is_503(client, auth_headers):
    with patch.object(MoodEntryRepository, "fetch_mood_entries", side_effect=StorageUnavailable("mood_entries")):
        response = client.get(f"{API}/mood-entries/", headers=auth_headers)

    assert response.status_code == 503
    assert response.json()["source"] == "mood_entries"


def test_chat_flow(client, auth_headers, fake_assistant):
    created = client.post(f"{API}/chat/conversations", headers=auth_headers)
    assert created.status_code == 200
    conversation = created.json()
    assert conversation["messages"][0]["content"] == settings.ASSISTANT_GREETING

    fake_assistant.replies = ["That sounds exhausting. 💙", GenerationFailed(GenerationFailed.BLOCKED)]
    url = f"{API}/chat/conversations/{conversation['id']}/messages"

    reply = client.post(url, json={"content": "Work has been a lot lately"}, headers=auth_headers).json()
    assert reply["user_message"]["content"] == "Work has been a lot lately"
    assert reply["assistant_message"]["content"] == "That sounds exhausting. 💙"

    blocked = client.post(url, json={"content": "..."}, headers=auth_headers).json()
    assert blocked["assistant_message"]["is_fallback"] is True
    assert blocked["assistant_message"]["content"] == settings.ASSISTANT_FALLBACK_MESSAGE

    messages = client.get(url, headers=auth_headers).json()
    assert [m["role"] for m in messages] == ["assistant", "user", "assistant", "user", "assistant"]


def test_chat_rejects_empty_message(client, auth_headers):
    conversation = client.post(f"{API}/chat/conversations", headers=auth_headers).json()
    url = f"{API}/chat/conversations/{conversation['id']}/messages"
    assert client.post(url, json={"content": ""}, headers=auth_headers).status_code == 422


def test_cannot_read_someone_elses_conversation(client, db, auth_headers):
    from app import crud

    other = crud.user.create(db, email="sam@example.com")
    other_headers = {"Authorization": f"Bearer {create_access_token(other.id)}"}
    conversation = client.post(f"{API}/chat/conversations", headers=other_headers).json()

    response = client.get(f"{API}/chat/conversations/{conversation['id']}/messages", headers=auth_headers)
    assert response.status_code == 404


def test_metrics_exposes_domain_counters(client, auth_headers):
    client.post(f"{API}/mood-entries/", json={"mood": 2, "energy": 2}, headers=auth_headers)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "mood_entries_upserted_total" in response.text
