# journal models: entry creation, update and response schemas

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.models.analytics import SentimentDistribution, ThemeCount
from app.models.sentiment import SentimentResult


class JournalCreate(BaseModel):
    content: str = Field(..., min_length=10, max_length=10000, description="journal entry text")
    mood: Optional[int] = Field(None, ge=1, le=10, description="mood rating 1-10")


class JournalUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=10, max_length=10000)
    mood: Optional[int] = Field(None, ge=1, le=10)


class JournalEntryResponse(BaseModel):
    id: str
    user_id: str = Field(..., alias="userId")
    content: str
    mood: Optional[int] = None
    sentiment: Optional[SentimentResult] = None
    ai_prompt: Optional[str] = Field(None, alias="aiPrompt")
    tags: list[str] = Field(default_factory=list)
    timestamp: datetime

    model_config = {"populate_by_name": True}


class AIPromptResponse(BaseModel):
    prompt: str


class ThemesResponse(BaseModel):
    themes: list[ThemeCount] = Field(default_factory=list)
    period: str


class SentimentDistributionResponse(BaseModel):
    distribution: SentimentDistribution
    period: str

