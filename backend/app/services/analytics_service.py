# analytics service: mood and journal aggregation
# pure compute_* functions over already-fetched entries, plus thin async
# fetchers that scope by owner and time window before aggregating.
#
# rounding mirrors the client charts: half-up, not python's banker's rounding.
# all calendar math (weekday, week start, day keys) is done in utc.

import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from app.models.analytics import (
    EmotionCount,
    Insights,
    JournalAnalytics,
    MoodAnalytics,
    SentimentDistribution,
    ThemeCount,
    WeekdayMood,
    WeeklySummary,
)
from app.config import settings
from app.models.mood import DailyMood
from app.services.db import Database
from app.services.insights import generate_insights

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
TREND_DAYS = 7
TOP_N = 10
SENTIMENT_LABELS = ("positive", "negative", "neutral")

ONE_DAY = timedelta(days=1)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def as_utc(ts) -> datetime:
    """normalize a stored timestamp (aware, naive or iso string) to aware utc"""
    if isinstance(ts, str):
        ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def weekday_from_sunday(dt: datetime) -> int:
    """0 = sunday .. 6 = saturday"""
    return (dt.weekday() + 1) % 7


def week_start(dt: datetime) -> str:
    """iso date of the sunday that starts dt's week"""
    start = dt.date() - timedelta(days=weekday_from_sunday(dt))
    return start.isoformat()


def _top_counts(values: Iterable[str], limit: Optional[int]) -> list[tuple[str, int]]:
    # most_common is stable, so ties keep first-encounter order
    return Counter(values).most_common(limit)


# mood

def compute_emotion_frequency(entries: list[dict], limit: Optional[int] = TOP_N) -> list[EmotionCount]:
    emotions = (emotion for entry in entries for emotion in entry.get("emotions", []))
    return [EmotionCount(emotion=e, count=c) for e, c in _top_counts(emotions, limit)]


def compute_mood_trend(entries: list[dict], now: datetime) -> list[float]:
    """per-day average for the last 7 days, index 0 = the 24h ending at now"""
    sums = [0] * TREND_DAYS
    counts = [0] * TREND_DAYS
    for entry in entries:
        day_index = math.floor((now - as_utc(entry["timestamp"])) / ONE_DAY)
        if 0 <= day_index < TREND_DAYS:
            sums[day_index] += entry["mood"]
            counts[day_index] += 1
    return [
        round_half_up(sums[i] / counts[i], 1) if counts[i] else 0
        for i in range(TREND_DAYS)
    ]


def compute_weekly_data(entries: list[dict]) -> list[WeekdayMood]:
    sums = [0] * 7
    counts = [0] * 7
    for entry in entries:
        day = weekday_from_sunday(as_utc(entry["timestamp"]))
        sums[day] += entry["mood"]
        counts[day] += 1
    return [
        WeekdayMood(
            day=DAY_NAMES[i],
            mood=round_half_up(sums[i] / counts[i], 1) if counts[i] else 0,
            count=counts[i],
        )
        for i in range(7)
    ]


def compute_mood_analytics(entries: list[dict], now: datetime) -> MoodAnalytics:
    """aggregate mood entries already filtered to the requested window"""
    if not entries:
        return MoodAnalytics()

    moods = [entry["mood"] for entry in entries]
    return MoodAnalytics(
        average_mood=round_half_up(sum(moods) / len(moods), 1),
        mood_trend=compute_mood_trend(entries, now),
        weekly_data=compute_weekly_data(entries),
        emotion_frequency=compute_emotion_frequency(entries),
    )


def compute_daily_moods(entries: list[dict]) -> list[DailyMood]:
    """calendar-day (utc) averages, ascending by date"""
    buckets: dict[str, list[int]] = {}
    for entry in entries:
        key = as_utc(entry["timestamp"]).date().isoformat()
        buckets.setdefault(key, []).append(entry["mood"])
    return [
        DailyMood(
            date=key,
            average_mood=round_half_up(sum(moods) / len(moods), 1),
            entry_count=len(moods),
        )
        for key, moods in sorted(buckets.items())
    ]


# journal

def _sentiment_of(entry: dict) -> dict:
    return entry.get("sentiment") or {"score": 0, "label": "neutral"}


def compute_sentiment_distribution(entries: list[dict]) -> SentimentDistribution:
    counts = dict.fromkeys(SENTIMENT_LABELS, 0)
    for entry in entries:
        label = _sentiment_of(entry).get("label", "neutral")
        if label not in counts:
            raise ValueError(f"Unknown sentiment label: {label!r}")
        counts[label] += 1
    return SentimentDistribution(**counts)


def compute_weekly_summary(entries: list[dict]) -> list[WeeklySummary]:
    weeks: dict[str, list[float]] = {}
    for entry in entries:
        key = week_start(as_utc(entry["timestamp"]))
        weeks.setdefault(key, []).append(_sentiment_of(entry).get("score", 0))
    return [
        WeeklySummary(
            week=key,
            entries=len(scores),
            average_sentiment=round_half_up(sum(scores) / len(scores), 2),
        )
        for key, scores in sorted(weeks.items())
    ]


def compute_themes(entries: list[dict], limit: Optional[int] = TOP_N) -> list[ThemeCount]:
    tags = (tag for entry in entries for tag in entry.get("tags", []))
    return [ThemeCount(theme=t, count=c) for t, c in _top_counts(tags, limit)]


def compute_journal_analytics(entries: list[dict]) -> JournalAnalytics:
    if not entries:
        return JournalAnalytics()

    total = len(entries)
    total_length = sum(len(entry.get("content", "")) for entry in entries)
    return JournalAnalytics(
        total_entries=total,
        average_length=int(round_half_up(total_length / total)),
        sentiment_distribution=compute_sentiment_distribution(entries),
        common_themes=compute_themes(entries),
        weekly_summary=compute_weekly_summary(entries),
    )


# fetchers

async def fetch_window(collection, user_id: str, days: int, now: Optional[datetime] = None) -> list[dict]:
    """a user's entries with timestamp >= now - days, oldest first"""
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=days)
    cursor = collection.find({"user_id": user_id, "timestamp": {"$gte": since}}).sort("timestamp", 1)
    entries = []
    async for doc in cursor:
        entries.append(doc)
    return entries


async def get_mood_analytics(
    db: Database, user_id: str, days: int = 30, now: Optional[datetime] = None
) -> MoodAnalytics:
    now = now or datetime.now(timezone.utc)
    entries = await fetch_window(db.mood_entries, user_id, days, now)
    return compute_mood_analytics(entries, now)


async def get_journal_analytics(
    db: Database, user_id: str, days: int = 30, now: Optional[datetime] = None
) -> JournalAnalytics:
    entries = await fetch_window(db.journal_entries, user_id, days, now)
    return compute_journal_analytics(entries)


async def get_insights(
    db: Database, user_id: str, days: Optional[int] = None, now: Optional[datetime] = None
) -> Insights:
    """mood + journal analytics over the window, run through the insight rules.

    the window defaults to the configured INSIGHTS_WINDOW_DAYS.
    """
    days = days or settings.INSIGHTS_WINDOW_DAYS
    now = now or datetime.now(timezone.utc)
    mood = await get_mood_analytics(db, user_id, days, now)
    journal = await get_journal_analytics(db, user_id, days, now)
    logger.info(
        f"Insights computed for user {user_id}: avg mood {mood.average_mood}, "
        f"{journal.total_entries} journal entries"
    )
    return generate_insights(mood, journal)
