from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app import crud, models, schemas
from app.analytics.repository import MoodEntryRepository, SessionRecordRepository
from app.analytics.service import AnalyticsService
from app.core import security
from app.db.session import SessionLocal
from app.services.assistant import AssistantClient, ConversationService

reusable_bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    try:
        db = SessionLocal()
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(reusable_bearer),
) -> models.User:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authenticated",
        )
    try:
        payload = security.decode_access_token(credentials.credentials)
        token_data = schemas.TokenPayload(**payload)
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    user = crud.user.get(db, id=token_data.sub)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_current_active_user(
    current_user: models.User = Depends(get_current_user),
) -> models.User:
    if not crud.user.is_active(current_user):
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user


def get_mood_repository(db: Session = Depends(get_db)) -> MoodEntryRepository:
    return MoodEntryRepository(db)


def get_session_repository(db: Session = Depends(get_db)) -> SessionRecordRepository:
    return SessionRecordRepository(db)


def get_analytics_service(
    mood_repository: MoodEntryRepository = Depends(get_mood_repository),
    session_repository: SessionRecordRepository = Depends(get_session_repository),
) -> AnalyticsService:
    return AnalyticsService(mood_repository, session_repository)


_assistant: AssistantClient = None


def get_assistant() -> AssistantClient:
    global _assistant
    if _assistant is None:
        _assistant = AssistantClient()
    return _assistant


def get_conversation_service(
    db: Session = Depends(get_db),
    assistant: AssistantClient = Depends(get_assistant),
) -> ConversationService:
    return ConversationService(db, assistant)
