# analytics models: aggregated mood / journal analytics and insights
# computed on demand from a user's entries, never persisted

from pydantic import BaseModel, Field


class WeekdayMood(BaseModel):
    """average mood for one weekday across the whole window"""
    day: str
    mood: float
    count: int


class EmotionCount(BaseModel):
    emotion: str
    count: int


class MoodAnalytics(BaseModel):
    average_mood: float = Field(0, alias="averageMood")
    # 7 slots, index 0 is the most recent 24 hours
    mood_trend: list[float] = Field(default_factory=list, alias="moodTrend")
    weekly_data: list[WeekdayMood] = Field(default_factory=list, alias="weeklyData")
    emotion_frequency: list[EmotionCount] = Field(default_factory=list, alias="emotionFrequency")

    model_config = {"populate_by_name": True}


class SentimentDistribution(BaseModel):
    positive: int = 0
    negative: int = 0
    neutral: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral


class ThemeCount(BaseModel):
    theme: str
    count: int


class WeeklySummary(BaseModel):
    """entries grouped by the sunday that starts their week"""
    week: str
    entries: int
    average_sentiment: float = Field(..., alias="averageSentiment")

    model_config = {"populate_by_name": True}


class JournalAnalytics(BaseModel):
    total_entries: int = Field(0, alias="totalEntries")
    average_length: int = Field(0, alias="averageLength")
    sentiment_distribution: SentimentDistribution = Field(
        default_factory=SentimentDistribution, alias="sentimentDistribution"
    )
    common_themes: list[ThemeCount] = Field(default_factory=list, alias="commonThemes")
    weekly_summary: list[WeeklySummary] = Field(default_factory=list, alias="weeklySummary")

    model_config = {"populate_by_name": True}


class Insights(BaseModel):
    mood_insights: list[str] = Field(default_factory=list, alias="moodInsights")
    journal_insights: list[str] = Field(default_factory=list, alias="journalInsights")
    recommendations: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class MoodInsightsResponse(BaseModel):
    mood_insights: list[str] = Field(default_factory=list, alias="moodInsights")
    recommendations: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class JournalInsightsResponse(BaseModel):
    journal_insights: list[str] = Field(default_factory=list, alias="journalInsights")
    recommendations: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class EmotionsResponse(BaseModel):
    frequency: list[EmotionCount] = Field(default_factory=list)
    period: str
