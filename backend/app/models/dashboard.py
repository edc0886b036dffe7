# dashboard models: profile dashboard, stats, activity and export views

from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field

from app.models.analytics import Insights, JournalAnalytics, MoodAnalytics
from app.models.user import Goal, Preferences, UserResponse


class RecentActivity(BaseModel):
    """one line of the dashboard activity feed"""
    type: Literal["mood", "journal", "session", "chat"]
    message: str
    timestamp: datetime


class DashboardUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    preferences: Preferences


class Dashboard(BaseModel):
    user: DashboardUser
    insights: Insights
    recent_activity: list[RecentActivity] = Field(default_factory=list, alias="recentActivity")

    model_config = {"populate_by_name": True}


class SessionStats(BaseModel):
    total_sessions: int = Field(0, alias="totalSessions")
    completed_sessions: int = Field(0, alias="completedSessions")
    average_mood: float = Field(0, alias="averageMood")

    model_config = {"populate_by_name": True}


class UserStats(BaseModel):
    mood_analytics: MoodAnalytics = Field(..., alias="moodAnalytics")
    journal_analytics: JournalAnalytics = Field(..., alias="journalAnalytics")
    session_stats: SessionStats = Field(..., alias="sessionStats")
    period: str

    model_config = {"populate_by_name": True}


class ActivitySummary(BaseModel):
    mood_entries: int = Field(0, alias="moodEntries")
    journal_entries: int = Field(0, alias="journalEntries")
    chat_messages: int = Field(0, alias="chatMessages")
    completed_sessions: int = Field(0, alias="completedSessions")
    total_days: int = Field(0, alias="totalDays")
    active_days: int = Field(0, alias="activeDays")

    model_config = {"populate_by_name": True}


class ActivityResponse(BaseModel):
    summary: ActivitySummary
    period: str


class PreferencesResponse(BaseModel):
    preferences: Preferences


class DataExport(BaseModel):
    """everything stored for a user, as plain json documents"""
    user: UserResponse
    mood_entries: list[dict[str, Any]] = Field(default_factory=list, alias="moodEntries")
    journal_entries: list[dict[str, Any]] = Field(default_factory=list, alias="journalEntries")
    chat_sessions: list[dict[str, Any]] = Field(default_factory=list, alias="chatSessions")
    chat_messages: list[dict[str, Any]] = Field(default_factory=list, alias="chatMessages")
    wellness_sessions: list[dict[str, Any]] = Field(default_factory=list, alias="wellnessSessions")
    goals: list[Goal] = Field(default_factory=list)
    exported_at: datetime = Field(..., alias="exportedAt")

    model_config = {"populate_by_name": True}
