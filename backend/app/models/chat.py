# chat models: ai chat sessions and messages

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    session_id: Optional[str] = Field(None, alias="sessionId")

    model_config = {"populate_by_name": True}


class ChatMessageResponse(BaseModel):
    id: str
    session_id: str = Field(..., alias="sessionId")
    content: str
    is_user: bool = Field(..., alias="isUser")
    suggestions: list[str] = Field(default_factory=list)
    timestamp: datetime

    model_config = {"populate_by_name": True}


class ChatReply(BaseModel):
    message: ChatMessageResponse
    session_id: str = Field(..., alias="sessionId")

    model_config = {"populate_by_name": True}


class ChatSessionResponse(BaseModel):
    id: str
    start_time: datetime = Field(..., alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    message_count: int = Field(0, alias="messageCount")

    model_config = {"populate_by_name": True}


class SuggestionsResponse(BaseModel):
    suggestions: list[str]


class DailyMessageCount(BaseModel):
    date: str
    message_count: int = Field(..., alias="messageCount")

    model_config = {"populate_by_name": True}


class ChatAnalytics(BaseModel):
    total_sessions: int = Field(0, alias="totalSessions")
    total_messages: int = Field(0, alias="totalMessages")
    average_messages_per_session: int = Field(0, alias="averageMessagesPerSession")
    most_active_days: list[DailyMessageCount] = Field(default_factory=list, alias="mostActiveDays")
    period: str

    model_config = {"populate_by_name": True}


class ChatInsights(BaseModel):
    insights: list[str] = Field(default_factory=list)
    message_count: int = Field(0, alias="messageCount")
    period: str

    model_config = {"populate_by_name": True}
