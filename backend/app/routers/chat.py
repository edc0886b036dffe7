# chat router: ai assistant conversations
# sessions are created on the first message and keep a running message count

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status, Query

from app.models.chat import (
    ChatAnalytics,
    ChatInsights,
    ChatMessageResponse,
    ChatReply,
    ChatRequest,
    ChatSessionResponse,
    DailyMessageCount,
    SuggestionsResponse,
)
from app.models.common import ApiResponse, PaginatedResponse, Pagination
from app.limiter import AI_CHAT_LIMIT, AI_CHAT_MESSAGE, limiter, user_or_ip
from app.services.ai_service import AIService, get_ai_service
from app.services.analytics_service import as_utc
from app.services.db import Database, get_db
from app.dependencies import get_current_user, parse_object_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ai/chat", tags=["chat"])

NOT_FOUND = "Chat session not found"
CONTEXT_MESSAGES = 10


def _doc_to_session(doc: dict) -> ChatSessionResponse:
    return ChatSessionResponse(
        id=str(doc["_id"]),
        startTime=doc["start_time"],
        endTime=doc.get("end_time"),
        messageCount=doc.get("message_count", 0),
    )


def _doc_to_message(doc: dict) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=str(doc["_id"]),
        sessionId=str(doc["session_id"]),
        content=doc["content"],
        isUser=doc["is_user"],
        suggestions=doc.get("suggestions", []),
        timestamp=doc["timestamp"],
    )


def _language(user: dict) -> str:
    return (user.get("preferences") or {}).get("language", "en")


async def _get_owned_session(session_id: str, user_id: str, db: Database) -> dict:
    oid = parse_object_id(session_id, NOT_FOUND)
    session = await db.chat_sessions.find_one({"_id": oid, "user_id": user_id})
    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return session


@router.post("", response_model=ApiResponse[ChatReply])
@limiter.limit(AI_CHAT_LIMIT, key_func=user_or_ip, error_message=AI_CHAT_MESSAGE)
async def send_message(
    request: Request,
    body: ChatRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """send a message and get the assistant's reply"""
    user_id = current_user["id"]
    now = datetime.now(timezone.utc)

    if body.session_id:
        session = await _get_owned_session(body.session_id, user_id, db)
    else:
        session = {"user_id": user_id, "start_time": now, "end_time": None, "message_count": 0}
        result = await db.chat_sessions.insert_one(session)
        session["_id"] = result.inserted_id
        logger.info(f"Chat session started: {result.inserted_id} by user {user_id}")

    session_id = session["_id"]
    await db.chat_messages.insert_one({
        "user_id": user_id,
        "session_id": session_id,
        "content": body.message,
        "is_user": True,
        "suggestions": [],
        "timestamp": now,
    })

    # last messages of the session, oldest first, as conversation context
    cursor = db.chat_messages.find({"session_id": session_id}).sort("timestamp", -1).limit(CONTEXT_MESSAGES)
    history = []
    async for doc in cursor:
        history.append(doc)
    context = "\n".join(
        f"{'User' if m['is_user'] else 'Assistant'}: {m['content']}" for m in reversed(history)
    )

    content, suggestions = await ai.chat_reply(body.message, context, _language(current_user))

    reply = {
        "user_id": user_id,
        "session_id": session_id,
        "content": content,
        "is_user": False,
        "suggestions": suggestions,
        "timestamp": datetime.now(timezone.utc),
    }
    result = await db.chat_messages.insert_one(reply)
    reply["_id"] = result.inserted_id

    await db.chat_sessions.update_one(
        {"_id": session_id},
        {"$inc": {"message_count": 2}},
    )

    return ApiResponse(
        message="Message sent successfully",
        data=ChatReply(message=_doc_to_message(reply), session_id=str(session_id)),
    )


@router.get("/sessions", response_model=PaginatedResponse[ChatSessionResponse])
async def list_sessions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    query = {"user_id": current_user["id"]}
    total = await db.chat_sessions.count_documents(query)

    cursor = db.chat_sessions.find(query).sort("start_time", -1).skip((page - 1) * limit).limit(limit)
    sessions = []
    async for doc in cursor:
        sessions.append(_doc_to_session(doc))

    return PaginatedResponse(
        message="Chat sessions retrieved successfully",
        data=sessions,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/sessions/{session_id}", response_model=ApiResponse[list[ChatMessageResponse]])
async def chat_history(
    session_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    session = await _get_owned_session(session_id, current_user["id"], db)

    cursor = db.chat_messages.find({"session_id": session["_id"], "user_id": current_user["id"]}).sort("timestamp", 1)
    messages = []
    async for doc in cursor:
        messages.append(_doc_to_message(doc))

    return ApiResponse(message="Chat history retrieved successfully", data=messages)


@router.post("/sessions/{session_id}/end", response_model=ApiResponse[ChatSessionResponse])
async def end_session(
    session_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    session = await _get_owned_session(session_id, current_user["id"], db)
    if session.get("end_time"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Chat session already ended")

    end_time = datetime.now(timezone.utc)
    await db.chat_sessions.update_one({"_id": session["_id"]}, {"$set": {"end_time": end_time}})
    session["end_time"] = end_time

    logger.info(f"Chat session ended: {session_id}")
    return ApiResponse(message="Chat session ended successfully", data=_doc_to_session(session))


@router.delete("/sessions/{session_id}", response_model=ApiResponse[None])
async def delete_session(
    session_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """delete a session together with all of its messages"""
    session = await _get_owned_session(session_id, current_user["id"], db)
    await db.chat_sessions.delete_one({"_id": session["_id"]})
    result = await db.chat_messages.delete_many({"session_id": session["_id"]})

    logger.info(f"Chat session deleted: {session_id} ({result.deleted_count} messages)")
    return ApiResponse(message="Chat session deleted successfully")


@router.get("/suggestions", response_model=ApiResponse[SuggestionsResponse])
async def chat_suggestions(
    current_user: dict = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
):
    """conversation starters in the user's language"""
    return ApiResponse(
        message="Chat suggestions retrieved successfully",
        data=SuggestionsResponse(suggestions=ai.chat_starters(_language(current_user))),
    )


@router.get("/analytics", response_model=ApiResponse[ChatAnalytics])
async def chat_analytics(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    since = datetime.now(timezone.utc) - timedelta(days=days)
    user_id = current_user["id"]

    total_sessions = await db.chat_sessions.count_documents({"user_id": user_id, "start_time": {"$gte": since}})

    per_day = Counter()
    cursor = db.chat_messages.find({"user_id": user_id, "timestamp": {"$gte": since}})
    async for doc in cursor:
        per_day[as_utc(doc["timestamp"]).date().isoformat()] += 1
    total_messages = sum(per_day.values())

    return ApiResponse(
        message="Chat analytics retrieved successfully",
        data=ChatAnalytics(
            total_sessions=total_sessions,
            total_messages=total_messages,
            average_messages_per_session=round(total_messages / total_sessions) if total_sessions else 0,
            most_active_days=[
                DailyMessageCount(date=day, message_count=count) for day, count in per_day.most_common(7)
            ],
            period=f"{days} days",
        ),
    )


@router.get("/insights", response_model=ApiResponse[ChatInsights])
async def chat_insights(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """usage level plus the most common words of the user's recent messages"""
    since = datetime.now(timezone.utc) - timedelta(days=days)
    cursor = db.chat_messages.find(
        {"user_id": current_user["id"], "is_user": True, "timestamp": {"$gte": since}}
    ).sort("timestamp", -1).limit(20)
    messages = []
    async for doc in cursor:
        messages.append(doc["content"])

    if not messages:
        insights = ["You haven't used the chat feature recently. Consider reaching out when you need support."]
    elif len(messages) < 5:
        insights = ["You've been using the chat feature occasionally. It can be helpful to check in regularly."]
    else:
        insights = ["You've been actively using the chat feature. This is great for your mental health journey!"]

    words = Counter(w for m in messages for w in m.lower().split() if len(w) > 3)
    top_words = [w for w, _ in words.most_common(5)]
    if top_words:
        insights.append(f"Common topics in your recent chats: {', '.join(top_words)}")

    return ApiResponse(
        message="Chat insights retrieved successfully",
        data=ChatInsights(insights=insights, message_count=len(messages), period=f"{days} days"),
    )
