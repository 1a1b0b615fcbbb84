from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app import models, schemas
from app.analytics.records import ENERGY_LABELS, MOOD_LABELS, SUGGESTED_TAGS
from app.analytics.repository import MoodEntryRepository
from app.api import deps
from app.core.config import settings
from app.utils.timezone import today_local

router = APIRouter()


@router.post("/", response_model=schemas.MoodEntryUpsertResponse)
def submit_mood_entry(
    *,
    entry_in: schemas.MoodEntryCreate,
    repository: MoodEntryRepository = Depends(deps.get_mood_repository),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Record today's check-in (or the given date's).

    A second submission for the same date replaces the first.
    """
    entry_date = entry_in.entry_date or today_local()
    row, replaced = repository.upsert_mood_entry(
        current_user.id,
        entry_date=entry_date,
        mood=entry_in.mood,
        energy=entry_in.energy,
        note=entry_in.note,
        tags=entry_in.tags,
    )
    return {"entry": row, "replaced": replaced}


@router.get("/", response_model=List[schemas.MoodEntryResponse])
def read_mood_entries(
    limit: Optional[int] = Query(default=None, ge=1, le=366),
    repository: MoodEntryRepository = Depends(deps.get_mood_repository),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Mood history for the current user, newest first.
    """
    records = repository.fetch_mood_entries(current_user.id, limit=limit)
    return [
        schemas.MoodEntryResponse(
            id=r.id,
            user_id=current_user.id,
            entry_date=r.entry_date,
            mood=r.mood,
            energy=r.energy,
            note=r.note,
            tags=list(r.tags),
            mood_label=r.mood_label,
            energy_label=r.energy_label,
        )
        for r in records
    ]


@router.get("/today", response_model=schemas.MoodEntryResponse)
def read_todays_entry(
    repository: MoodEntryRepository = Depends(deps.get_mood_repository),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    entry = repository.get_entry_for_date(current_user.id, today_local())
    if not entry:
        raise HTTPException(status_code=404, detail="No check-in recorded today")
    return entry


@router.get("/scale", response_model=schemas.MoodScaleResponse)
def read_mood_scale() -> Any:
    """
    Labels for each level of the mood and energy scales, plus suggested tags.
    """
    levels = range(settings.MOOD_SCALE_MIN, settings.MOOD_SCALE_MAX + 1)
    return {
        "mood_levels": [{"value": v, "label": MOOD_LABELS[v] if v < len(MOOD_LABELS) else str(v)} for v in levels],
        "energy_levels": [{"value": v, "label": ENERGY_LABELS[v] if v < len(ENERGY_LABELS) else str(v)} for v in levels],
        "suggested_tags": list(SUGGESTED_TAGS),
    }
