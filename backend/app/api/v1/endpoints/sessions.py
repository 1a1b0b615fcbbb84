from typing import Any, List

from fastapi import APIRouter, Depends

from app import models, schemas
from app.analytics.repository import SessionRecordRepository
from app.api import deps
from app.utils.timezone import to_utc_naive

router = APIRouter()


@router.get("/", response_model=List[schemas.SessionRecordResponse])
def read_sessions(
    skip: int = 0,
    limit: int = 100,
    repository: SessionRecordRepository = Depends(deps.get_session_repository),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Retrieve the current user's therapy sessions, most recent first.
    """
    return repository.list_rows(current_user.email, skip=skip, limit=limit)


@router.post("/", response_model=schemas.SessionRecordResponse)
def create_session(
    *,
    session_in: schemas.SessionRecordCreate,
    repository: SessionRecordRepository = Depends(deps.get_session_repository),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Record a booked session for the current user.
    """
    # Normalize incoming datetime to UTC-naive for storage
    session_in = session_in.model_copy(update={"scheduled_date": to_utc_naive(session_in.scheduled_date)})
    return repository.record_session(current_user.email, session_in)
