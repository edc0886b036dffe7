# request rate limits
# one shared limiter: a global per-ip budget plus tighter limits on auth and ai chat

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings
from app.services.auth_service import decode_token

GENERAL_LIMIT = "100 per 15 minutes"
AUTH_LIMIT = "5 per 15 minutes"
REGISTRATION_LIMIT = "3 per 15 minutes"
AI_CHAT_LIMIT = "20 per hour"

GENERAL_MESSAGE = "Too many requests from this IP, please try again later."
AUTH_MESSAGE = "Too many authentication attempts, please try again later."
REGISTRATION_MESSAGE = "Too many registration attempts, please try again later."
AI_CHAT_MESSAGE = "AI chat rate limit exceeded, please try again later."


def user_or_ip(request: Request) -> str:
    """bearer token subject when the token decodes, client ip otherwise"""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        payload = decode_token(token)
        if payload and payload.get("sub"):
            return f"user:{payload['sub']}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[GENERAL_LIMIT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
