# lucidify backend api
# fastapi app with async mongodb, jwt auth, and gemini-powered insights

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from app.config import settings
from app.errors import register_exception_handlers
from app.limiter import limiter
from app.services.db import db
from app.routers import auth, profile, mood, journal, chat, coping, sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting Lucidify backend...")
    await db.connect()
    logger.info("Lucidify backend ready")
    yield
    logger.info("Shutting down Lucidify backend...")
    await db.close()


app = FastAPI(
    title="Lucidify API",
    description="Backend API for Lucidify: mood tracking, journaling, AI chat, wellness sessions and insights",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# cors: allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# register routers
app.include_router(auth.router, prefix="/api")
app.include_router(profile.router, prefix="/api")
app.include_router(mood.router, prefix="/api")
app.include_router(journal.router, prefix="/api")
app.include_router(chat.router, prefix="/api")
app.include_router(coping.router, prefix="/api")
app.include_router(sessions.router, prefix="/api")


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "lucidify-api", "message": "Lucidify API is running"}
