# coping router: strategy catalogue, ratings and personalized suggestions

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from pymongo import ReturnDocument

from app.models.common import ApiResponse, PaginatedResponse, Pagination
from app.models.coping import (
    COPING_TYPES,
    CopingStats,
    CopingStrategyResponse,
    CopingType,
    CopingTypeInfo,
    PersonalizedSuggestions,
    RatingRequest,
    TypeStats,
)
from app.services.ai_service import AIService, get_ai_service
from app.services.analytics_service import round_half_up
from app.services.db import Database, get_db
from app.dependencies import get_current_user, parse_object_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/coping", tags=["coping"])

NOT_FOUND = "Coping strategy not found"
# strategy types offered next to ai suggestions
SUGGESTED_TYPES = ["mindfulness", "breathing", "grounding"]

TYPE_INFO = [
    CopingTypeInfo(id="mindfulness", name="Mindfulness",
                   description="Present-moment awareness and meditation techniques", icon="🧘"),
    CopingTypeInfo(id="cbt", name="Cognitive Behavioral Therapy",
                   description="Thought challenging and behavior modification techniques", icon="🧠"),
    CopingTypeInfo(id="gratitude", name="Gratitude Practice",
                   description="Focusing on positive aspects and appreciation", icon="🙏"),
    CopingTypeInfo(id="breathing", name="Breathing Exercises",
                   description="Controlled breathing techniques for relaxation", icon="🫁"),
    CopingTypeInfo(id="grounding", name="Grounding Techniques",
                   description="Methods to stay present and connected to reality", icon="🌱"),
]


def _doc_to_strategy(doc: dict) -> CopingStrategyResponse:
    return CopingStrategyResponse(
        id=str(doc["_id"]),
        title=doc["title"],
        description=doc["description"],
        type=doc["type"],
        steps=doc.get("steps", []),
        duration=doc["duration"],
        rating=doc.get("rating", 0),
        ratingCount=doc.get("rating_count", 0),
        personalized=doc.get("personalized", False),
        createdAt=doc.get("created_at"),
    )


async def _paginate(db: Database, query: dict, page: int, limit: int, message: str):
    total = await db.coping_strategies.count_documents(query)
    cursor = db.coping_strategies.find(query).sort("rating", -1).skip((page - 1) * limit).limit(limit)
    strategies = []
    async for doc in cursor:
        strategies.append(_doc_to_strategy(doc))
    return PaginatedResponse(
        message=message,
        data=strategies,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/strategies", response_model=PaginatedResponse[CopingStrategyResponse])
async def list_strategies(
    strategy_type: Optional[CopingType] = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """all strategies, best rated first, optionally filtered by type"""
    query = {"type": strategy_type} if strategy_type else {}
    return await _paginate(db, query, page, limit, "Coping strategies retrieved successfully")


@router.get("/strategies/types", response_model=ApiResponse[list[CopingTypeInfo]])
async def strategy_types(current_user: dict = Depends(get_current_user)):
    return ApiResponse(message="Coping strategy types retrieved successfully", data=TYPE_INFO)


@router.get("/strategies/popular", response_model=ApiResponse[list[CopingStrategyResponse]])
async def popular_strategies(
    limit: int = Query(5, ge=1, le=50),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    cursor = db.coping_strategies.find({}).sort("rating", -1).limit(limit)
    strategies = []
    async for doc in cursor:
        strategies.append(_doc_to_strategy(doc))
    return ApiResponse(message="Popular coping strategies retrieved successfully", data=strategies)


@router.get("/strategies/search", response_model=PaginatedResponse[CopingStrategyResponse])
async def search_strategies(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    if not q or not q.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Search query is required")

    pattern = {"$regex": re.escape(q.strip()), "$options": "i"}
    query = {"$or": [{"title": pattern}, {"description": pattern}]}
    return await _paginate(db, query, page, limit, "Coping strategies retrieved successfully")


@router.get("/strategies/type/{strategy_type}", response_model=PaginatedResponse[CopingStrategyResponse])
async def strategies_by_type(
    strategy_type: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    if strategy_type not in COPING_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid coping strategy type")
    return await _paginate(db, {"type": strategy_type}, page, limit, "Coping strategies retrieved successfully")


@router.get("/strategies/stats", response_model=ApiResponse[CopingStats])
async def strategy_stats(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """per-type counts and average ratings across the catalogue"""
    by_type: dict[str, list[float]] = {}
    cursor = db.coping_strategies.find({})
    async for doc in cursor:
        by_type.setdefault(doc["type"], []).append(doc.get("rating", 0))

    all_ratings = [r for ratings in by_type.values() for r in ratings]
    type_stats = [
        TypeStats(type=t, count=len(ratings), average_rating=round_half_up(sum(ratings) / len(ratings), 2))
        for t, ratings in by_type.items()
    ]
    type_stats.sort(key=lambda s: s.count, reverse=True)

    return ApiResponse(
        message="Coping strategy statistics retrieved successfully",
        data=CopingStats(
            total_strategies=len(all_ratings),
            average_rating=round_half_up(sum(all_ratings) / len(all_ratings), 2) if all_ratings else 0,
            type_stats=type_stats,
        ),
    )


@router.get("/suggestions", response_model=ApiResponse[PersonalizedSuggestions])
async def personalized_suggestions(
    mood: Optional[int] = Query(None, ge=1, le=10),
    emotions: Optional[str] = Query(None, description="comma separated emotion labels"),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """ai suggestions for the given mood and emotions plus calming strategies"""
    emotion_list = [e.strip() for e in (emotions or "").split(",") if e.strip()]
    if mood is None or not emotion_list:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Mood and emotions are required")

    language = (current_user.get("preferences") or {}).get("language", "en")
    ai_suggestions = await ai.coping_suggestions(mood, emotion_list, language)

    cursor = db.coping_strategies.find({"type": {"$in": SUGGESTED_TYPES}}).limit(5)
    strategies = []
    async for doc in cursor:
        strategies.append(_doc_to_strategy(doc))

    return ApiResponse(
        message="Personalized coping suggestions retrieved successfully",
        data=PersonalizedSuggestions(ai_suggestions=ai_suggestions, strategies=strategies),
    )


@router.get("/{strategy_id}", response_model=ApiResponse[CopingStrategyResponse])
async def get_strategy(
    strategy_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    oid = parse_object_id(strategy_id, NOT_FOUND)
    doc = await db.coping_strategies.find_one({"_id": oid})
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return ApiResponse(message="Coping strategy retrieved successfully", data=_doc_to_strategy(doc))


@router.post("/{strategy_id}/rate", response_model=ApiResponse[CopingStrategyResponse])
async def rate_strategy(
    strategy_id: str,
    body: RatingRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """fold a 1-5 rating into the running average"""
    oid = parse_object_id(strategy_id, NOT_FOUND)

    # one atomic update, the average is folded from the stored values
    count = {"$ifNull": ["$rating_count", 0]}
    average = [{"$set": {
        "rating": {"$divide": [
            {"$add": [{"$multiply": [{"$ifNull": ["$rating", 0]}, count]}, body.rating]},
            {"$add": [count, 1]},
        ]},
        "rating_count": {"$add": [count, 1]},
    }}]
    doc = await db.coping_strategies.find_one_and_update(
        {"_id": oid}, average, return_document=ReturnDocument.AFTER
    )
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)

    logger.info(f"Coping strategy {strategy_id} rated {body.rating} by user {current_user['id']}")
    return ApiResponse(message="Coping strategy rated successfully", data=_doc_to_strategy(doc))
