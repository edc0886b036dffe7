# coping strategy models: catalogue entries, ratings and suggestions

from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field

CopingType = Literal["mindfulness", "cbt", "gratitude", "breathing", "grounding"]
COPING_TYPES: tuple[str, ...] = ("mindfulness", "cbt", "gratitude", "breathing", "grounding")


class CopingStrategyResponse(BaseModel):
    id: str
    title: str = Field(..., max_length=100)
    description: str = Field(..., max_length=500)
    type: CopingType
    steps: list[str] = Field(default_factory=list)
    duration: int = Field(..., ge=1, le=60, description="minutes")
    rating: float = Field(0, ge=0, le=5)
    rating_count: int = Field(0, alias="ratingCount")
    personalized: bool = False
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True}


class RatingRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)


class CopingTypeInfo(BaseModel):
    id: CopingType
    name: str
    description: str
    icon: str


class PersonalizedSuggestions(BaseModel):
    ai_suggestions: list[str] = Field(default_factory=list, alias="aiSuggestions")
    strategies: list[CopingStrategyResponse] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class TypeStats(BaseModel):
    type: CopingType
    count: int
    average_rating: float = Field(0, alias="averageRating")

    model_config = {"populate_by_name": True}


class CopingStats(BaseModel):
    total_strategies: int = Field(0, alias="totalStrategies")
    average_rating: float = Field(0, alias="averageRating")
    type_stats: list[TypeStats] = Field(default_factory=list, alias="typeStats")

    model_config = {"populate_by_name": True}
