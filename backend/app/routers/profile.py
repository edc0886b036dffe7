# profile router: account settings, dashboard, stats, goals, export, deletion

import logging
from datetime import datetime, timedelta, timezone

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status, Query

from app.models.common import ApiResponse
from app.models.dashboard import (
    ActivityResponse,
    ActivitySummary,
    Dashboard,
    DashboardUser,
    DataExport,
    PreferencesResponse,
    RecentActivity,
    SessionStats,
    UserStats,
)
from app.models.user import (
    Goal,
    GoalUpdate,
    Preferences,
    PreferencesBody,
    ProfileUpdate,
    TrustedContact,
    UserEnvelope,
)
from app.routers.auth import user_to_response
from app.services import analytics_service
from app.services.analytics_service import as_utc
from app.services.db import Database, get_db
from app.services.email_service import EmailService, get_email_service
from app.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/profile", tags=["profile"])

GOALS_WINDOW_DAYS = 7
RECENT_ACTIVITY_LIMIT = 5

# goal id -> (title, description, target per week)
GOAL_DEFINITIONS = {
    "mood-tracking": ("Track mood daily", "Log your mood every day for better self-awareness", 7),
    "journal-writing": ("Write in journal", "Write in your journal at least 3 times a week", 3),
    "mindfulness-practice": ("Practice mindfulness", "Complete 8-minute sessions 3 times a week", 3),
}


def _merged_preferences(user: dict, changes: dict) -> dict:
    current = Preferences.model_validate(user.get("preferences") or {}).model_dump(by_alias=True)
    current.update(changes)
    # round-trip through the model so stored prefs stay valid
    return Preferences.model_validate(current).model_dump(by_alias=True)


async def _save_user_fields(user_id: str, fields: dict, db: Database):
    fields["updated_at"] = datetime.now(timezone.utc)
    result = await db.users.update_one({"_id": ObjectId(user_id)}, {"$set": fields})
    if not result.matched_count:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


async def _collect(cursor) -> list[dict]:
    docs = []
    async for doc in cursor:
        docs.append(doc)
    return docs


async def _find_since(collection, query: dict, field: str, since: datetime) -> list[dict]:
    return await _collect(collection.find({**query, field: {"$gte": since}}))


@router.get("", response_model=ApiResponse[UserEnvelope])
async def get_profile(current_user: dict = Depends(get_current_user)):
    return ApiResponse(
        message="Profile retrieved successfully",
        data=UserEnvelope(user=user_to_response(current_user)),
    )


@router.put("", response_model=ApiResponse[UserEnvelope])
async def update_profile(
    body: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    fields = {}
    if body.name is not None:
        fields["name"] = body.name
    if body.preferences is not None:
        fields["preferences"] = _merged_preferences(
            current_user, body.preferences.model_dump(by_alias=True, exclude_none=True)
        )

    if fields:
        await _save_user_fields(current_user["id"], fields, db)
        current_user.update(fields)

    logger.info(f"Profile updated for user {current_user['id']}")
    return ApiResponse(
        message="Profile updated successfully",
        data=UserEnvelope(user=user_to_response(current_user)),
    )


@router.put("/preferences", response_model=ApiResponse[PreferencesResponse])
async def update_preferences(
    body: PreferencesBody,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    preferences = _merged_preferences(current_user, body.preferences.model_dump(by_alias=True, exclude_none=True))
    await _save_user_fields(current_user["id"], {"preferences": preferences}, db)

    return ApiResponse(
        message="Preferences updated successfully",
        data=PreferencesResponse(preferences=Preferences.model_validate(preferences)),
    )


@router.post("/trusted-contact", response_model=ApiResponse[None])
async def set_trusted_contact(
    body: TrustedContact,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    preferences = _merged_preferences(current_user, {"trustedContact": body.model_dump()})
    await _save_user_fields(current_user["id"], {"preferences": preferences}, db)

    logger.info(f"Trusted contact set for user {current_user['id']}")
    return ApiResponse(message="Trusted contact set successfully")


@router.post("/trusted-contact/test", response_model=ApiResponse[None])
async def test_trusted_contact(
    current_user: dict = Depends(get_current_user),
    email_service: EmailService = Depends(get_email_service),
):
    """send the trusted contact a test notification"""
    preferences = Preferences.model_validate(current_user.get("preferences") or {})
    contact = preferences.trusted_contact
    if contact is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No trusted contact set")

    user_name = current_user.get("name") or current_user["email"]
    message = f"This is a test message from {user_name} to verify the trusted contact feature."
    sent = await email_service.send_trusted_contact_notification(
        contact.email, user_name, message, preferences.language
    )
    if not sent:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send test email")

    return ApiResponse(message="Test email sent successfully to trusted contact")


@router.get("/dashboard", response_model=ApiResponse[Dashboard])
async def get_dashboard(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """insights plus the latest things the user did"""
    user_id = current_user["id"]
    insights = await analytics_service.get_insights(db, user_id)

    sources = [
        (db.mood_entries, {"user_id": user_id}, "timestamp", "mood", "Logged your mood"),
        (db.journal_entries, {"user_id": user_id}, "timestamp", "journal", "Wrote a journal entry"),
        (db.wellness_sessions, {"user_id": user_id, "completed": True}, "end_time", "session",
         "Completed an 8-minute session"),
        (db.chat_messages, {"user_id": user_id, "is_user": True}, "timestamp", "chat", "Chatted with the AI assistant"),
    ]
    activity = []
    for collection, query, field, kind, message in sources:
        docs = await _collect(collection.find(query).sort(field, -1).limit(RECENT_ACTIVITY_LIMIT))
        activity.extend(
            RecentActivity(type=kind, message=message, timestamp=doc[field]) for doc in docs if doc.get(field)
        )
    activity.sort(key=lambda a: as_utc(a.timestamp), reverse=True)

    return ApiResponse(
        message="Dashboard data retrieved successfully",
        data=Dashboard(
            user=DashboardUser(
                id=user_id,
                name=current_user.get("name"),
                email=current_user["email"],
                preferences=Preferences.model_validate(current_user.get("preferences") or {}),
            ),
            insights=insights,
            recent_activity=activity[:RECENT_ACTIVITY_LIMIT],
        ),
    )


@router.get("/stats", response_model=ApiResponse[UserStats])
async def get_stats(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    user_id = current_user["id"]
    since = datetime.now(timezone.utc) - timedelta(days=days)

    sessions = await _find_since(db.wellness_sessions, {"user_id": user_id}, "start_time", since)
    completed = [s for s in sessions if s.get("completed")]
    moods = [s["overall_mood"] for s in completed if s.get("overall_mood") is not None]

    return ApiResponse(
        message="User statistics retrieved successfully",
        data=UserStats(
            mood_analytics=await analytics_service.get_mood_analytics(db, user_id, days),
            journal_analytics=await analytics_service.get_journal_analytics(db, user_id, days),
            session_stats=SessionStats(
                total_sessions=len(sessions),
                completed_sessions=len(completed),
                average_mood=analytics_service.round_half_up(sum(moods) / len(moods), 1) if moods else 0,
            ),
            period=f"{days} days",
        ),
    )


@router.get("/activity", response_model=ApiResponse[ActivityResponse])
async def get_activity(
    days: int = Query(7, ge=1, le=365),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """activity counts and the number of distinct days with any activity"""
    user_id = current_user["id"]
    since = datetime.now(timezone.utc) - timedelta(days=days)

    moods = await _find_since(db.mood_entries, {"user_id": user_id}, "timestamp", since)
    journals = await _find_since(db.journal_entries, {"user_id": user_id}, "timestamp", since)
    messages = await _find_since(db.chat_messages, {"user_id": user_id, "is_user": True}, "timestamp", since)
    sessions = await _find_since(db.wellness_sessions, {"user_id": user_id, "completed": True}, "start_time", since)

    active_days = {as_utc(d["timestamp"]).date() for d in moods + journals + messages}
    active_days.update(as_utc(s["start_time"]).date() for s in sessions)

    return ApiResponse(
        message="Activity summary retrieved successfully",
        data=ActivityResponse(
            summary=ActivitySummary(
                mood_entries=len(moods),
                journal_entries=len(journals),
                chat_messages=len(messages),
                completed_sessions=len(sessions),
                total_days=days,
                active_days=len(active_days),
            ),
            period=f"{days} days",
        ),
    )


async def _compute_goals(user: dict, db: Database) -> list[Goal]:
    """weekly goals with progress from the last 7 days, manual overrides win"""
    user_id = user["id"]
    since = datetime.now(timezone.utc) - timedelta(days=GOALS_WINDOW_DAYS)

    moods = await _find_since(db.mood_entries, {"user_id": user_id}, "timestamp", since)
    journals = await _find_since(db.journal_entries, {"user_id": user_id}, "timestamp", since)
    sessions = await _find_since(db.wellness_sessions, {"user_id": user_id, "completed": True}, "start_time", since)
    achieved = {
        "mood-tracking": len({as_utc(m["timestamp"]).date() for m in moods}),
        "journal-writing": len(journals),
        "mindfulness-practice": len(sessions),
    }

    overrides = user.get("goals") or {}
    goals = []
    for goal_id, (title, description, target) in GOAL_DEFINITIONS.items():
        progress = min(100, round(achieved[goal_id] / target * 100))
        goal = Goal(id=goal_id, title=title, description=description, completed=progress >= 100, progress=progress)
        goals.append(goal.model_copy(update=overrides.get(goal_id, {})))
    return goals


@router.get("/goals", response_model=ApiResponse[list[Goal]])
async def get_goals(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return ApiResponse(message="Goals retrieved successfully", data=await _compute_goals(current_user, db))


@router.put("/goals/{goal_id}", response_model=ApiResponse[Goal])
async def update_goal(
    goal_id: str,
    body: GoalUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    if goal_id not in GOAL_DEFINITIONS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")

    overrides = dict(current_user.get("goals") or {})
    overrides[goal_id] = {**overrides.get(goal_id, {}), **body.model_dump(exclude_none=True)}
    await _save_user_fields(current_user["id"], {"goals": overrides}, db)
    current_user["goals"] = overrides

    goals = await _compute_goals(current_user, db)
    goal = next(g for g in goals if g.id == goal_id)
    return ApiResponse(message="Goal updated successfully", data=goal)


def _exportable(doc: dict) -> dict:
    """drop owner fields and stringify object ids"""
    out = {}
    for key, value in doc.items():
        if key in ("user_id", "hashed_password"):
            continue
        if key == "_id":
            key = "id"
        out[key] = str(value) if isinstance(value, ObjectId) else value
    return out


@router.get("/export", response_model=ApiResponse[DataExport])
async def export_data(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """everything stored for the user in one json document"""
    user_id = current_user["id"]
    query = {"user_id": user_id}

    export = DataExport(
        user=user_to_response(current_user),
        mood_entries=[_exportable(d) for d in await _collect(db.mood_entries.find(query).sort("timestamp", 1))],
        journal_entries=[_exportable(d) for d in await _collect(db.journal_entries.find(query).sort("timestamp", 1))],
        chat_sessions=[_exportable(d) for d in await _collect(db.chat_sessions.find(query).sort("start_time", 1))],
        chat_messages=[_exportable(d) for d in await _collect(db.chat_messages.find(query).sort("timestamp", 1))],
        wellness_sessions=[
            _exportable(d) for d in await _collect(db.wellness_sessions.find(query).sort("start_time", 1))
        ],
        goals=await _compute_goals(current_user, db),
        exported_at=datetime.now(timezone.utc),
    )

    logger.info(f"Data exported for user {user_id}")
    return ApiResponse(message="Data export generated successfully", data=export)


@router.delete("/account", response_model=ApiResponse[None])
async def delete_account(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """delete the user and everything they own"""
    user_id = current_user["id"]
    for collection in (
        db.mood_entries, db.journal_entries, db.chat_messages, db.chat_sessions, db.wellness_sessions,
    ):
        await collection.delete_many({"user_id": user_id})
    await db.users.delete_one({"_id": ObjectId(user_id)})

    logger.info(f"Account deleted: {user_id}")
    return ApiResponse(message="Account deleted successfully")
