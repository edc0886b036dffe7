# mood models: mood logging payloads and entry responses

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.models.sentiment import SentimentResult

EMOTION_MAX_LENGTH = 50


def _check_emotions(emotions: Optional[list[str]]) -> Optional[list[str]]:
    if emotions is None:
        return emotions
    cleaned = [e.strip() for e in emotions]
    for emotion in cleaned:
        if not emotion or len(emotion) > EMOTION_MAX_LENGTH:
            raise ValueError(f"Each emotion must be between 1 and {EMOTION_MAX_LENGTH} characters")
    return cleaned


class MoodCreate(BaseModel):
    mood: int = Field(..., ge=1, le=10, description="mood rating 1-10")
    emotions: list[str] = Field(default_factory=list, max_length=10)
    notes: Optional[str] = Field(None, max_length=1000)
    voice_transcript: Optional[str] = Field(None, alias="voiceTranscript", max_length=5000)

    model_config = {"populate_by_name": True}

    normalize_emotions = field_validator("emotions")(_check_emotions)


class MoodUpdate(BaseModel):
    mood: Optional[int] = Field(None, ge=1, le=10)
    emotions: Optional[list[str]] = Field(None, max_length=10)
    notes: Optional[str] = Field(None, max_length=1000)
    voice_transcript: Optional[str] = Field(None, alias="voiceTranscript", max_length=5000)

    model_config = {"populate_by_name": True}

    normalize_emotions = field_validator("emotions")(_check_emotions)


class MoodEntryResponse(BaseModel):
    id: str
    user_id: str = Field(..., alias="userId")
    mood: int
    emotions: list[str] = Field(default_factory=list)
    notes: Optional[str] = None
    voice_transcript: Optional[str] = Field(None, alias="voiceTranscript")
    sentiment: Optional[SentimentResult] = None
    timestamp: datetime

    model_config = {"populate_by_name": True}


class DailyMood(BaseModel):
    """one calendar day of the mood trends endpoint"""
    date: str
    average_mood: float = Field(..., alias="averageMood")
    entry_count: int = Field(..., alias="entryCount")

    model_config = {"populate_by_name": True}


class MoodTrends(BaseModel):
    trends: list[DailyMood] = Field(default_factory=list)
    period: str
