# journal router: write, browse, search and analyze journal entries
# every write derives sentiment and keyword tags from the content

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query

from app.models.analytics import JournalAnalytics, JournalInsightsResponse
from app.models.common import ApiResponse, PaginatedResponse, Pagination
from app.models.journal import (
    AIPromptResponse,
    JournalCreate,
    JournalEntryResponse,
    JournalUpdate,
    SentimentDistributionResponse,
    ThemesResponse,
)
from app.services import analytics_service
from app.services.ai_service import AIService, get_ai_service
from app.services.db import Database, get_db
from app.services.sentiment_service import SentimentClassifier, get_sentiment_classifier
from app.services.tagging import extract_tags
from app.dependencies import get_current_user, parse_object_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/journal", tags=["journal"])

NOT_FOUND = "Journal entry not found"
AI_PROMPT_MAX_LENGTH = 500
# characters of each earlier entry handed to the prompt generator
PREVIEW_LENGTH = 200


def _doc_to_journal(doc: dict) -> JournalEntryResponse:
    """convert a mongodb journal document to response model"""
    return JournalEntryResponse(
        id=str(doc["_id"]),
        userId=doc["user_id"],
        content=doc["content"],
        mood=doc.get("mood"),
        sentiment=doc.get("sentiment"),
        aiPrompt=doc.get("ai_prompt"),
        tags=doc.get("tags", []),
        timestamp=doc["timestamp"],
    )


async def _get_owned_entry(entry_id: str, user_id: str, db: Database) -> dict:
    oid = parse_object_id(entry_id, NOT_FOUND)
    doc = await db.journal_entries.find_one({"_id": oid, "user_id": user_id})
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return doc


async def _recent_contents(user_id: str, db: Database, count: int) -> list[str]:
    """previews of the user's latest entries, newest first"""
    cursor = db.journal_entries.find({"user_id": user_id}).sort("timestamp", -1).limit(count)
    previews = []
    async for doc in cursor:
        previews.append(doc["content"][:PREVIEW_LENGTH])
    return previews


@router.post("/create", response_model=ApiResponse[JournalEntryResponse], status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    body: JournalCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    classifier: SentimentClassifier = Depends(get_sentiment_classifier),
    ai: AIService = Depends(get_ai_service),
):
    """create a journal entry with sentiment, tags and a follow-up ai prompt"""
    user_id = current_user["id"]

    sentiment = await classifier.analyze(body.content)
    previous = await _recent_contents(user_id, db, 3)
    ai_prompt = await ai.journal_prompt(body.mood, previous)

    doc = {
        "user_id": user_id,
        "content": body.content,
        "mood": body.mood,
        "sentiment": sentiment.model_dump(),
        "ai_prompt": ai_prompt[:AI_PROMPT_MAX_LENGTH],
        "tags": extract_tags(body.content),
        "timestamp": datetime.now(timezone.utc),
    }
    result = await db.journal_entries.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info(f"Journal entry created: {result.inserted_id} by user {user_id}")
    return ApiResponse(message="Journal entry created successfully", data=_doc_to_journal(doc))


@router.get("/entries", response_model=PaginatedResponse[JournalEntryResponse])
async def list_journal_entries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """list the user's journal entries, newest first"""
    query = {"user_id": current_user["id"]}
    total = await db.journal_entries.count_documents(query)

    cursor = db.journal_entries.find(query).sort("timestamp", -1).skip((page - 1) * limit).limit(limit)
    entries = []
    async for doc in cursor:
        entries.append(_doc_to_journal(doc))

    return PaginatedResponse(
        message="Journal entries retrieved successfully",
        data=entries,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/analytics", response_model=ApiResponse[JournalAnalytics])
async def journal_analytics(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    analytics = await analytics_service.get_journal_analytics(db, current_user["id"], days)
    return ApiResponse(message="Journal analytics retrieved successfully", data=analytics)


@router.get("/insights", response_model=ApiResponse[JournalInsightsResponse])
async def journal_insights(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    insights = await analytics_service.get_insights(db, current_user["id"])
    return ApiResponse(
        message="Journal insights retrieved successfully",
        data=JournalInsightsResponse(
            journal_insights=insights.journal_insights,
            recommendations=insights.recommendations,
        ),
    )


@router.get("/themes", response_model=ApiResponse[ThemesResponse])
async def journal_themes(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    entries = await analytics_service.fetch_window(db.journal_entries, current_user["id"], days)
    return ApiResponse(
        message="Journal themes retrieved successfully",
        data=ThemesResponse(themes=analytics_service.compute_themes(entries), period=f"{days} days"),
    )


@router.get("/sentiment", response_model=ApiResponse[SentimentDistributionResponse])
async def journal_sentiment(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    entries = await analytics_service.fetch_window(db.journal_entries, current_user["id"], days)
    return ApiResponse(
        message="Sentiment analysis retrieved successfully",
        data=SentimentDistributionResponse(
            distribution=analytics_service.compute_sentiment_distribution(entries),
            period=f"{days} days",
        ),
    )


@router.get("/search", response_model=PaginatedResponse[JournalEntryResponse])
async def search_journal_entries(
    q: Optional[str] = Query(None, description="text to look for in entry content"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """case-insensitive substring search over the user's entries"""
    if not q or not q.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Search query is required")

    query = {
        "user_id": current_user["id"],
        "content": {"$regex": re.escape(q.strip()), "$options": "i"},
    }
    total = await db.journal_entries.count_documents(query)

    cursor = db.journal_entries.find(query).sort("timestamp", -1).skip((page - 1) * limit).limit(limit)
    entries = []
    async for doc in cursor:
        entries.append(_doc_to_journal(doc))

    return PaginatedResponse(
        message="Search results retrieved successfully",
        data=entries,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/ai-prompt", response_model=ApiResponse[AIPromptResponse])
async def journal_ai_prompt(
    mood: Optional[int] = Query(None, ge=1, le=10),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """a fresh writing prompt based on mood and the last few entries"""
    previous = await _recent_contents(current_user["id"], db, 5)
    prompt = await ai.journal_prompt(mood, previous)
    return ApiResponse(message="AI prompt generated successfully", data=AIPromptResponse(prompt=prompt))


@router.get("/{entry_id}", response_model=ApiResponse[JournalEntryResponse])
async def get_journal_entry(
    entry_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned_entry(entry_id, current_user["id"], db)
    return ApiResponse(message="Journal entry retrieved successfully", data=_doc_to_journal(doc))


@router.put("/{entry_id}", response_model=ApiResponse[JournalEntryResponse])
async def update_journal_entry(
    entry_id: str,
    body: JournalUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    classifier: SentimentClassifier = Depends(get_sentiment_classifier),
):
    """update an entry. new content replaces sentiment and tags wholesale."""
    doc = await _get_owned_entry(entry_id, current_user["id"], db)

    update_fields = {}
    if body.content is not None:
        sentiment = await classifier.analyze(body.content)
        update_fields["content"] = body.content
        update_fields["sentiment"] = sentiment.model_dump()
        update_fields["tags"] = extract_tags(body.content)
    if "mood" in body.model_fields_set:
        update_fields["mood"] = body.mood

    if update_fields:
        update_fields["updated_at"] = datetime.now(timezone.utc)
        await db.journal_entries.update_one({"_id": doc["_id"]}, {"$set": update_fields})
        doc.update(update_fields)

    logger.info(f"Journal entry updated: {entry_id} by user {current_user['id']}")
    return ApiResponse(message="Journal entry updated successfully", data=_doc_to_journal(doc))


@router.delete("/{entry_id}", response_model=ApiResponse[None])
async def delete_journal_entry(
    entry_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned_entry(entry_id, current_user["id"], db)
    await db.journal_entries.delete_one({"_id": doc["_id"]})

    logger.info(f"Journal entry deleted: {entry_id} by user {current_user['id']}")
    return ApiResponse(message="Journal entry deleted successfully")
