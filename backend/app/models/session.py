# wellness session models: the guided 8-minute session and its steps

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


class SessionStep(BaseModel):
    id: str
    title: str
    description: str
    duration: int = Field(..., description="minutes")
    completed: bool = False
    data: Optional[Any] = None


class SessionResponse(BaseModel):
    id: str
    user_id: str = Field(..., alias="userId")
    start_time: datetime = Field(..., alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    steps: list[SessionStep] = Field(default_factory=list)
    overall_mood: Optional[int] = Field(None, alias="overallMood")
    summary: Optional[str] = None
    completed: bool = False
    completion_percentage: int = Field(0, alias="completionPercentage")

    model_config = {"populate_by_name": True}


class StepUpdate(BaseModel):
    data: Optional[Any] = None


class SessionComplete(BaseModel):
    overall_mood: Optional[int] = Field(None, alias="overallMood", ge=1, le=10)
    summary: Optional[str] = Field(None, max_length=1000)

    model_config = {"populate_by_name": True}


class TemplateStep(BaseModel):
    id: str
    title: str
    description: str
    duration: int


class SessionTemplate(BaseModel):
    id: str
    title: str
    description: str
    duration: int
    steps: list[TemplateStep]


class MoodRange(BaseModel):
    min: float = 0
    max: float = 0


class DailySessionStats(BaseModel):
    date: str
    session_count: int = Field(0, alias="sessionCount")
    completed_count: int = Field(0, alias="completedCount")

    model_config = {"populate_by_name": True}


class StepStats(BaseModel):
    id: str
    title: str
    completed_count: int = Field(0, alias="completedCount")
    total_count: int = Field(0, alias="totalCount")
    completion_rate: float = Field(0, alias="completionRate")

    model_config = {"populate_by_name": True}


class SessionAnalytics(BaseModel):
    total_sessions: int = Field(0, alias="totalSessions")
    completed_sessions: int = Field(0, alias="completedSessions")
    completion_rate: float = Field(0, alias="completionRate")
    average_mood: float = Field(0, alias="averageMood")
    mood_range: MoodRange = Field(default_factory=MoodRange, alias="moodRange")
    daily_stats: list[DailySessionStats] = Field(default_factory=list, alias="dailyStats")
    step_stats: list[StepStats] = Field(default_factory=list, alias="stepStats")
    period: str

    model_config = {"populate_by_name": True}


class SessionInsights(BaseModel):
    insights: list[str] = Field(default_factory=list)
    total_sessions: int = Field(0, alias="totalSessions")
    period: str

    model_config = {"populate_by_name": True}
