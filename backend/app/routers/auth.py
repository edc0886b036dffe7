# auth router: register, login, google sign-in, token verification, logout

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from app.models.common import ApiResponse
from app.limiter import AUTH_LIMIT, AUTH_MESSAGE, REGISTRATION_LIMIT, REGISTRATION_MESSAGE, limiter
from app.models.user import (
    AuthResponse,
    GoogleAuth,
    Preferences,
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserResponse,
)
from app.services.auth_service import create_access_token, hash_password, verify_password
from app.services.db import Database, get_db
from app.services.email_service import EmailService, get_email_service
from app.services.google_auth import GoogleTokenError, GoogleVerifier, get_google_verifier
from app.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])

DEFAULT_NAME = "User"


def user_to_response(user: dict) -> UserResponse:
    """convert a user document (raw or from get_current_user) to response model"""
    return UserResponse(
        id=user.get("id") or str(user["_id"]),
        email=user["email"],
        name=user.get("name"),
        preferences=Preferences.model_validate(user.get("preferences") or {}),
        createdAt=user.get("created_at"),
        lastLoginAt=user.get("last_login_at"),
        avatar=user.get("avatar"),
    )


def _issue_token(user_id: str, email: str) -> str:
    return create_access_token({"sub": user_id, "email": email})


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTRATION_LIMIT, error_message=REGISTRATION_MESSAGE)
async def register(
    request: Request,
    body: UserRegister,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """create an account and send a best-effort welcome email"""
    email = body.email.lower()

    existing = await db.users.find_one({"email": email})
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")

    now = datetime.now(timezone.utc)
    doc = {
        "email": email,
        "hashed_password": hash_password(body.password),
        "name": body.name or DEFAULT_NAME,
        "preferences": Preferences().model_dump(by_alias=True),
        "created_at": now,
        "updated_at": now,
        "last_login_at": None,
    }
    result = await db.users.insert_one(doc)
    user_id = str(result.inserted_id)
    doc["_id"] = result.inserted_id

    # never blocks or fails the registration
    background_tasks.add_task(email_service.send_welcome_email, email, doc["name"], "en")

    logger.info(f"User registered: {user_id}")
    return ApiResponse(
        message="Account created successfully",
        data=AuthResponse(user=user_to_response(doc), token=_issue_token(user_id, email)),
    )


@router.post("/login", response_model=ApiResponse[AuthResponse])
@limiter.limit(AUTH_LIMIT, error_message=AUTH_MESSAGE)
async def login(request: Request, body: UserLogin, db: Database = Depends(get_db)):
    email = body.email.lower()
    user = await db.users.find_one({"email": email})
    # google-only accounts have no password to check
    hashed = user.get("hashed_password") if user else None
    if not hashed or not verify_password(body.password, hashed):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    now = datetime.now(timezone.utc)
    await db.users.update_one({"_id": user["_id"]}, {"$set": {"last_login_at": now}})
    user["last_login_at"] = now

    user_id = str(user["_id"])
    logger.info(f"User logged in: {user_id}")
    return ApiResponse(
        message="Login successful",
        data=AuthResponse(user=user_to_response(user), token=_issue_token(user_id, email)),
    )


@router.post("/google", response_model=ApiResponse[AuthResponse])
@limiter.limit(AUTH_LIMIT, error_message=AUTH_MESSAGE)
async def google_auth(
    request: Request,
    body: GoogleAuth,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    verifier: GoogleVerifier = Depends(get_google_verifier),
):
    """sign in with google, linking or creating the account by email"""
    if not (body.google_id and body.email and body.first_name and body.last_name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Google authentication data is incomplete")
    if not verifier.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Google sign-in is not configured")

    try:
        claims = await verifier.verify(body.id_token)
    except GoogleTokenError as e:
        logger.warning(f"Google sign-in rejected: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")

    email = body.email.lower()
    if claims.get("sub") != body.google_id or str(claims.get("email", "")).lower() != email:
        logger.warning(f"Google sign-in claims do not match the submitted profile for {body.google_id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token")

    now = datetime.now(timezone.utc)
    user = await db.users.find_one({"$or": [{"google_id": body.google_id}, {"email": email}]})
    if user:
        if not user.get("google_id"):
            link = {"google_id": body.google_id, "avatar": body.avatar, "updated_at": now}
            await db.users.update_one({"_id": user["_id"]}, {"$set": link})
            user.update(link)
            logger.info(f"Linked Google account to user {user['_id']}")
    else:
        user = {
            "email": email,
            "google_id": body.google_id,
            "avatar": body.avatar,
            "name": f"{body.first_name} {body.last_name}",
            "preferences": Preferences().model_dump(by_alias=True),
            "created_at": now,
            "updated_at": now,
            "last_login_at": None,
        }
        result = await db.users.insert_one(user)
        user["_id"] = result.inserted_id
        background_tasks.add_task(email_service.send_welcome_email, email, user["name"], "en")
        logger.info(f"User registered with Google: {result.inserted_id}")

    await db.users.update_one({"_id": user["_id"]}, {"$set": {"last_login_at": now}})
    user["last_login_at"] = now

    user_id = str(user["_id"])
    logger.info(f"User logged in with Google: {user_id}")
    return ApiResponse(
        message="Google authentication successful",
        data=AuthResponse(user=user_to_response(user), token=_issue_token(user_id, user["email"])),
    )


@router.get("/verify", response_model=ApiResponse[UserEnvelope])
async def verify(current_user: dict = Depends(get_current_user)):
    return ApiResponse(message="Token is valid", data=UserEnvelope(user=user_to_response(current_user)))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(current_user: dict = Depends(get_current_user)):
    """tokens are stateless, the client drops its copy"""
    logger.info(f"User logged out: {current_user['id']}")
    return ApiResponse(message="Logout successful")
