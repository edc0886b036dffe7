# mood router: log, browse, edit and analyze mood entries
# sentiment runs synchronously on notes / voice transcript, neutral on failure

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status, Query

from app.models.analytics import EmotionsResponse, MoodAnalytics, MoodInsightsResponse
from app.models.common import ApiResponse, PaginatedResponse, Pagination
from app.models.mood import MoodCreate, MoodEntryResponse, MoodTrends, MoodUpdate
from app.models.sentiment import SentimentResult
from app.services import analytics_service
from app.services.db import Database, get_db
from app.services.sentiment_service import SentimentClassifier, get_sentiment_classifier
from app.dependencies import get_current_user, parse_object_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mood", tags=["mood"])

NOT_FOUND = "Mood entry not found"


def _doc_to_mood(doc: dict) -> MoodEntryResponse:
    """convert a mongodb mood document to response model"""
    return MoodEntryResponse(
        id=str(doc["_id"]),
        userId=doc["user_id"],
        mood=doc["mood"],
        emotions=doc.get("emotions", []),
        notes=doc.get("notes"),
        voiceTranscript=doc.get("voice_transcript"),
        sentiment=doc.get("sentiment"),
        timestamp=doc["timestamp"],
    )


async def _entry_sentiment(
    notes: str | None, voice_transcript: str | None, classifier: SentimentClassifier
) -> SentimentResult:
    """notes win over the transcript, no text at all is neutral"""
    text = notes or voice_transcript
    if not text:
        return SentimentResult.neutral()
    return await classifier.analyze(text)


async def _get_owned_entry(entry_id: str, user_id: str, db: Database) -> dict:
    oid = parse_object_id(entry_id, NOT_FOUND)
    doc = await db.mood_entries.find_one({"_id": oid, "user_id": user_id})
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return doc


@router.post("/log", response_model=ApiResponse[MoodEntryResponse], status_code=status.HTTP_201_CREATED)
async def log_mood(
    body: MoodCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    classifier: SentimentClassifier = Depends(get_sentiment_classifier),
):
    """log a mood entry. notes (or the voice transcript) are sentiment-tagged."""
    sentiment = await _entry_sentiment(body.notes, body.voice_transcript, classifier)

    doc = {
        "user_id": current_user["id"],
        "mood": body.mood,
        "emotions": body.emotions,
        "notes": body.notes,
        "voice_transcript": body.voice_transcript,
        "sentiment": sentiment.model_dump(),
        "timestamp": datetime.now(timezone.utc),
    }
    result = await db.mood_entries.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info(f"Mood logged: {result.inserted_id} by user {current_user['id']}")
    return ApiResponse(message="Mood logged successfully", data=_doc_to_mood(doc))


@router.get("/entries", response_model=PaginatedResponse[MoodEntryResponse])
async def list_mood_entries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """list the user's mood entries, newest first"""
    query = {"user_id": current_user["id"]}
    total = await db.mood_entries.count_documents(query)

    cursor = db.mood_entries.find(query).sort("timestamp", -1).skip((page - 1) * limit).limit(limit)
    entries = []
    async for doc in cursor:
        entries.append(_doc_to_mood(doc))

    return PaginatedResponse(
        message="Mood entries retrieved successfully",
        data=entries,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/analytics", response_model=ApiResponse[MoodAnalytics])
async def mood_analytics(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    analytics = await analytics_service.get_mood_analytics(db, current_user["id"], days)
    return ApiResponse(message="Mood analytics retrieved successfully", data=analytics)


@router.get("/insights", response_model=ApiResponse[MoodInsightsResponse])
async def mood_insights(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    insights = await analytics_service.get_insights(db, current_user["id"])
    return ApiResponse(
        message="Mood insights retrieved successfully",
        data=MoodInsightsResponse(
            mood_insights=insights.mood_insights,
            recommendations=insights.recommendations,
        ),
    )


@router.get("/trends", response_model=ApiResponse[MoodTrends])
async def mood_trends(
    days: int = Query(7, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """daily average mood over the last `days` days"""
    entries = await analytics_service.fetch_window(db.mood_entries, current_user["id"], days)
    return ApiResponse(
        message="Mood trends retrieved successfully",
        data=MoodTrends(trends=analytics_service.compute_daily_moods(entries), period=f"{days} days"),
    )


@router.get("/emotions", response_model=ApiResponse[EmotionsResponse])
async def emotion_frequency(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """every emotion logged in the window, most frequent first"""
    entries = await analytics_service.fetch_window(db.mood_entries, current_user["id"], days)
    frequency = analytics_service.compute_emotion_frequency(entries, limit=None)
    return ApiResponse(
        message="Emotion frequency retrieved successfully",
        data=EmotionsResponse(frequency=frequency, period=f"{days} days"),
    )


@router.get("/{entry_id}", response_model=ApiResponse[MoodEntryResponse])
async def get_mood_entry(
    entry_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned_entry(entry_id, current_user["id"], db)
    return ApiResponse(message="Mood entry retrieved successfully", data=_doc_to_mood(doc))


@router.put("/{entry_id}", response_model=ApiResponse[MoodEntryResponse])
async def update_mood_entry(
    entry_id: str,
    body: MoodUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    classifier: SentimentClassifier = Depends(get_sentiment_classifier),
):
    """update a mood entry. changing notes or the transcript re-runs sentiment."""
    doc = await _get_owned_entry(entry_id, current_user["id"], db)

    changes = body.model_dump(exclude_unset=True)
    update_fields = {k: v for k, v in changes.items() if not (k in ("mood", "emotions") and v is None)}

    if "notes" in changes or "voice_transcript" in changes:
        # classify the entry as it reads after the update
        merged = {**doc, **update_fields}
        sentiment = await _entry_sentiment(merged.get("notes"), merged.get("voice_transcript"), classifier)
        update_fields["sentiment"] = sentiment.model_dump()

    if update_fields:
        update_fields["updated_at"] = datetime.now(timezone.utc)
        await db.mood_entries.update_one({"_id": doc["_id"]}, {"$set": update_fields})
        doc.update(update_fields)

    logger.info(f"Mood entry updated: {entry_id} by user {current_user['id']}")
    return ApiResponse(message="Mood entry updated successfully", data=_doc_to_mood(doc))


@router.delete("/{entry_id}", response_model=ApiResponse[None])
async def delete_mood_entry(
    entry_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned_entry(entry_id, current_user["id"], db)
    await db.mood_entries.delete_one({"_id": doc["_id"]})

    logger.info(f"Mood entry deleted: {entry_id} by user {current_user['id']}")
    return ApiResponse(message="Mood entry deleted successfully")
