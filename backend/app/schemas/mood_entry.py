from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings


class MoodEntryBase(BaseModel):
    mood: int = Field(ge=settings.MOOD_SCALE_MIN, le=settings.MOOD_SCALE_MAX, strict=True)
    energy: int = Field(ge=settings.MOOD_SCALE_MIN, le=settings.MOOD_SCALE_MAX, strict=True)
    note: Optional[str] = Field(default=None, max_length=2000)
    tags: List[str] = []


class MoodEntryCreate(MoodEntryBase):
    # Defaults to today in DEFAULT_TIMEZONE when omitted
    entry_date: Optional[date] = None

    @field_validator("note")
    @classmethod
    def _blank_note_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class MoodEntryResponse(MoodEntryBase):
    id: int
    user_id: int
    entry_date: date
    mood_label: str
    energy_label: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MoodEntryUpsertResponse(BaseModel):
    entry: MoodEntryResponse
    replaced: bool


class LabeledLevel(BaseModel):
    value: int
    label: str


class MoodScaleResponse(BaseModel):
    mood_levels: List[LabeledLevel]
    energy_levels: List[LabeledLevel]
    suggested_tags: List[str]
