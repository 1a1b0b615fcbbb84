import os

# Settings are read at import time; point them at an in-memory database first
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ["ASSISTANT_LOG_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = "test-key"

from dotenv import load_dotenv

# Local overrides (never replaces the values above)
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))

import pytest
from fastapi.testclient import TestClient

from app import crud
from app.api import deps
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app


class FakeAssistant:
    """Stands in for AssistantClient; replies are queued per test."""

    def __init__(self):
        self.replies = []
        self.calls = []

    async def generate_reply(self, turns, conversation_id=None):
        self.calls.append(list(turns))
        reply = self.replies.pop(0) if self.replies else "That sounds hard. I'm here with you."
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user(db):
    return crud.user.create(db, email="alex@example.com", full_name="Alex Rivera")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def fake_assistant():
    return FakeAssistant()


@pytest.fixture
def client(db, fake_assistant):
    app.dependency_overrides[deps.get_assistant] = lambda: fake_assistant
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
