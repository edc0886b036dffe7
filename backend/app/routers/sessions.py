# sessions router: guided 8-minute wellness sessions
# start with four default steps, tick steps off, complete with an ai summary

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query

from app.models.common import ApiResponse, PaginatedResponse, Pagination
from app.models.session import (
    DailySessionStats,
    MoodRange,
    SessionAnalytics,
    SessionComplete,
    SessionInsights,
    SessionResponse,
    SessionStep,
    SessionTemplate,
    StepStats,
    StepUpdate,
    TemplateStep,
)
from app.services.ai_service import AIService, get_ai_service
from app.services.analytics_service import as_utc, round_half_up
from app.services.db import Database, get_db
from app.dependencies import get_current_user, parse_object_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/session", tags=["sessions"])

NOT_FOUND = "Session not found"
SUMMARY_MAX_LENGTH = 1000

DEFAULT_STEPS = [
    SessionStep(id="breathing", title="Deep Breathing",
                description="Take 5 deep breaths to center yourself", duration=2),
    SessionStep(id="mindfulness", title="Mindfulness Check-in",
                description="Notice how you feel in this moment", duration=2),
    SessionStep(id="gratitude", title="Gratitude Practice",
                description="Think of 3 things you're grateful for", duration=2),
    SessionStep(id="reflection", title="Gentle Reflection",
                description="Reflect on your day with kindness", duration=2),
]
STEP_NAMES = {step.id: step.title for step in DEFAULT_STEPS}

TEMPLATES = [
    SessionTemplate(
        id="mindfulness", title="Mindfulness Session", description="A calming mindfulness practice", duration=8,
        steps=[
            TemplateStep(id="breathing", title="Breathing Exercise",
                         description="Focus on your breath for 2 minutes", duration=2),
            TemplateStep(id="body-scan", title="Body Scan",
                         description="Notice sensations in your body", duration=3),
            TemplateStep(id="mindfulness", title="Present Moment Awareness",
                         description="Observe your thoughts without judgment", duration=3),
        ],
    ),
    SessionTemplate(
        id="gratitude", title="Gratitude Session", description="A positive reflection practice", duration=8,
        steps=[
            TemplateStep(id="breathing", title="Centering Breath",
                         description="Take 5 deep breaths to center yourself", duration=1),
            TemplateStep(id="gratitude", title="Gratitude Practice",
                         description="Think of 3 things you're grateful for", duration=3),
            TemplateStep(id="reflection", title="Positive Reflection",
                         description="Reflect on positive moments from your day", duration=4),
        ],
    ),
    SessionTemplate(
        id="stress-relief", title="Stress Relief Session",
        description="A calming practice for stress management", duration=8,
        steps=[
            TemplateStep(id="breathing", title="Deep Breathing",
                         description="Practice 4-7-8 breathing technique", duration=3),
            TemplateStep(id="progressive-relaxation", title="Progressive Relaxation",
                         description="Tense and release different muscle groups", duration=3),
            TemplateStep(id="visualization", title="Calming Visualization",
                         description="Imagine a peaceful place", duration=2),
        ],
    ),
]


def completion_percentage(steps: list[dict]) -> int:
    if not steps:
        return 0
    done = sum(1 for step in steps if step.get("completed"))
    return int(round_half_up(done / len(steps) * 100))


def _doc_to_session(doc: dict) -> SessionResponse:
    steps = doc.get("steps", [])
    return SessionResponse(
        id=str(doc["_id"]),
        userId=doc["user_id"],
        startTime=doc["start_time"],
        endTime=doc.get("end_time"),
        steps=steps,
        overallMood=doc.get("overall_mood"),
        summary=doc.get("summary"),
        completed=doc.get("completed", False),
        completionPercentage=completion_percentage(steps),
    )


async def _get_owned_session(session_id: str, user_id: str, db: Database) -> dict:
    oid = parse_object_id(session_id, NOT_FOUND)
    doc = await db.wellness_sessions.find_one({"_id": oid, "user_id": user_id})
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return doc


def _ensure_open(doc: dict):
    if doc.get("completed"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session already completed")


async def _sessions_since(db: Database, user_id: str, days: int, **filters) -> list[dict]:
    since = datetime.now(timezone.utc) - timedelta(days=days)
    query = {"user_id": user_id, "start_time": {"$gte": since}, **filters}
    cursor = db.wellness_sessions.find(query).sort("start_time", -1)
    sessions = []
    async for doc in cursor:
        sessions.append(doc)
    return sessions


@router.post("/start", response_model=ApiResponse[SessionResponse], status_code=status.HTTP_201_CREATED)
async def start_session(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = {
        "user_id": current_user["id"],
        "start_time": datetime.now(timezone.utc),
        "end_time": None,
        "steps": [step.model_dump() for step in DEFAULT_STEPS],
        "overall_mood": None,
        "summary": None,
        "completed": False,
    }
    result = await db.wellness_sessions.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info(f"Wellness session started: {result.inserted_id} by user {current_user['id']}")
    return ApiResponse(message="8-minute session started successfully", data=_doc_to_session(doc))


@router.get("/templates", response_model=ApiResponse[list[SessionTemplate]])
async def session_templates(current_user: dict = Depends(get_current_user)):
    return ApiResponse(message="Session templates retrieved successfully", data=TEMPLATES)


@router.get("/user-sessions", response_model=PaginatedResponse[SessionResponse])
async def list_sessions(
    completed: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    query = {"user_id": current_user["id"]}
    if completed is not None:
        query["completed"] = completed
    total = await db.wellness_sessions.count_documents(query)

    cursor = db.wellness_sessions.find(query).sort("start_time", -1).skip((page - 1) * limit).limit(limit)
    sessions = []
    async for doc in cursor:
        sessions.append(_doc_to_session(doc))

    return PaginatedResponse(
        message="Sessions retrieved successfully",
        data=sessions,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/analytics", response_model=ApiResponse[SessionAnalytics])
async def session_analytics(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """completion, mood and per-step statistics over the window"""
    sessions = await _sessions_since(db, current_user["id"], days)
    completed = [s for s in sessions if s.get("completed")]
    moods = [s["overall_mood"] for s in completed if s.get("overall_mood") is not None]

    daily: dict[str, DailySessionStats] = {}
    steps: dict[str, StepStats] = {}
    for session in sessions:
        day = as_utc(session["start_time"]).date().isoformat()
        stats = daily.setdefault(day, DailySessionStats(date=day))
        stats.session_count += 1
        stats.completed_count += 1 if session.get("completed") else 0

        for step in session.get("steps", []):
            step_stats = steps.setdefault(step["id"], StepStats(id=step["id"], title=step["title"]))
            step_stats.total_count += 1
            step_stats.completed_count += 1 if step.get("completed") else 0

    for step_stats in steps.values():
        step_stats.completion_rate = step_stats.completed_count / step_stats.total_count * 100
    step_list = sorted(steps.values(), key=lambda s: s.completion_rate, reverse=True)

    rate = len(completed) / len(sessions) * 100 if sessions else 0
    return ApiResponse(
        message="Session analytics retrieved successfully",
        data=SessionAnalytics(
            total_sessions=len(sessions),
            completed_sessions=len(completed),
            completion_rate=round_half_up(rate, 2),
            average_mood=sum(moods) / len(moods) if moods else 0,
            mood_range=MoodRange(min=min(moods), max=max(moods)) if moods else MoodRange(),
            daily_stats=[daily[d] for d in sorted(daily)],
            step_stats=step_list,
            period=f"{days} days",
        ),
    )


@router.get("/insights", response_model=ApiResponse[SessionInsights])
async def session_insights(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    # newest first
    sessions = await _sessions_since(db, current_user["id"], days, completed=True)

    if not sessions:
        insights = ["You haven't completed any 8-minute sessions recently. Consider starting one today!"]
    elif len(sessions) < 3:
        insights = ["You've completed a few sessions recently. Regular practice can help improve your wellbeing."]
    else:
        insights = ["Great job! You've been consistent with your 8-minute sessions. Keep up the excellent work!"]

    moods = [s["overall_mood"] for s in sessions if s.get("overall_mood")]
    if len(moods) > 1:
        recent = moods[:3]
        older = moods[-3:]
        recent_avg = sum(recent) / len(recent)
        older_avg = sum(older) / len(older)
        if recent_avg > older_avg + 1:
            insights.append("Your mood has been improving after completing sessions!")
        elif recent_avg < older_avg - 1:
            insights.append("Your mood has been lower recently. Consider trying different session types.")

    step_counts = Counter()
    for session in sessions:
        for step in session.get("steps", []):
            step_counts[step["id"]] += 1 if step.get("completed") else 0
    if step_counts:
        top_step, _ = step_counts.most_common(1)[0]
        insights.append(f"You complete the {STEP_NAMES.get(top_step, top_step)} step most often.")

    return ApiResponse(
        message="Session insights retrieved successfully",
        data=SessionInsights(insights=insights, total_sessions=len(sessions), period=f"{days} days"),
    )


@router.get("/{session_id}", response_model=ApiResponse[SessionResponse])
async def get_session(
    session_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned_session(session_id, current_user["id"], db)
    return ApiResponse(message="Session retrieved successfully", data=_doc_to_session(doc))


@router.put("/{session_id}/step/{step_id}", response_model=ApiResponse[SessionResponse])
async def update_step(
    session_id: str,
    step_id: str,
    body: StepUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """mark a step completed and attach whatever the client captured for it"""
    doc = await _get_owned_session(session_id, current_user["id"], db)
    _ensure_open(doc)

    steps = doc.get("steps", [])
    step = next((s for s in steps if s["id"] == step_id), None)
    if step is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Step not found")

    step["completed"] = True
    step["data"] = body.data
    await db.wellness_sessions.update_one({"_id": doc["_id"]}, {"$set": {"steps": steps}})

    return ApiResponse(message="Step updated successfully", data=_doc_to_session(doc))


@router.post("/{session_id}/complete", response_model=ApiResponse[SessionResponse])
async def complete_session(
    session_id: str,
    body: SessionComplete,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """finish a session. without a summary one is generated from completed steps."""
    doc = await _get_owned_session(session_id, current_user["id"], db)
    _ensure_open(doc)

    summary = body.summary
    if not summary:
        titles = [s["title"] for s in doc.get("steps", []) if s.get("completed")]
        language = (current_user.get("preferences") or {}).get("language", "en")
        summary = await ai.session_summary(titles, body.overall_mood, language)

    update_fields = {
        "end_time": datetime.now(timezone.utc),
        "completed": True,
        "summary": summary[:SUMMARY_MAX_LENGTH],
    }
    if body.overall_mood is not None:
        update_fields["overall_mood"] = body.overall_mood

    await db.wellness_sessions.update_one({"_id": doc["_id"]}, {"$set": update_fields})
    doc.update(update_fields)

    logger.info(f"Wellness session completed: {session_id} by user {current_user['id']}")
    return ApiResponse(message="Session completed successfully", data=_doc_to_session(doc))
