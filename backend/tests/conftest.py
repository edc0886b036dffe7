# shared fixtures for backend api tests
# provides mock db, test users, fake llm / email services, and httpx test clients

import copy
import math
import re
import pytest
import pytest_asyncio
from unittest.mock import MagicMock
from datetime import datetime, timezone, timedelta
from bson import ObjectId
from pymongo import ReturnDocument

from httpx import AsyncClient, ASGITransport
from langchain_core.language_models import FakeListChatModel

from app.main import app
from app.limiter import limiter
from app.models.user import Preferences
from app.services.ai_service import AIService, get_ai_service
from app.services.db import get_db
from app.services.email_service import EmailService, get_email_service
from app.services.auth_service import hash_password
from app.services.sentiment_service import SentimentClassifier, get_sentiment_classifier
from app.dependencies import get_current_user


# test ids (fixed so re-importing this module yields the same values)
USER_OID = ObjectId("65a1f0c2a1b2c3d4e5f60001")
OTHER_USER_OID = ObjectId("65a1f0c2a1b2c3d4e5f60002")
USER_ID = str(USER_OID)
OTHER_USER_ID = str(OTHER_USER_OID)

MOOD_OID = ObjectId("65a1f0c2a1b2c3d4e5f60101")
MOOD_2_OID = ObjectId("65a1f0c2a1b2c3d4e5f60102")
OTHER_MOOD_OID = ObjectId("65a1f0c2a1b2c3d4e5f60103")
JOURNAL_OID = ObjectId("65a1f0c2a1b2c3d4e5f60201")
OTHER_JOURNAL_OID = ObjectId("65a1f0c2a1b2c3d4e5f60202")
CHAT_SESSION_OID = ObjectId("65a1f0c2a1b2c3d4e5f60301")
OTHER_CHAT_SESSION_OID = ObjectId("65a1f0c2a1b2c3d4e5f60302")
BREATHING_OID = ObjectId("65a1f0c2a1b2c3d4e5f60401")
CBT_OID = ObjectId("65a1f0c2a1b2c3d4e5f60402")
GROUNDING_OID = ObjectId("65a1f0c2a1b2c3d4e5f60403")
OPEN_SESSION_OID = ObjectId("65a1f0c2a1b2c3d4e5f60501")
DONE_SESSION_OID = ObjectId("65a1f0c2a1b2c3d4e5f60502")

MISSING_ID = "65a1f0c2a1b2c3d4e5f6ffff"

USER_PASSWORD = "Calm#Mind2024"
NOW = datetime.now(timezone.utc)

POSITIVE_SENTIMENT_JSON = '{"score": 0.8, "label": "positive", "confidence": 0.9}'
AI_REPLY = "That sounds like a lot to carry. What has been weighing on you the most?"


# test user documents (as they'd appear from mongodb)

USER_DOC = {
    "_id": USER_OID,
    "email": "nimali.perera@email.com",
    "hashed_password": hash_password(USER_PASSWORD),
    "name": "Nimali Perera",
    "preferences": Preferences().model_dump(by_alias=True),
    "created_at": NOW - timedelta(days=60),
    "updated_at": NOW - timedelta(days=60),
    "last_login_at": NOW - timedelta(days=1),
}

OTHER_USER_DOC = {
    "_id": OTHER_USER_OID,
    "email": "kasun.silva@email.com",
    "hashed_password": hash_password(USER_PASSWORD),
    "name": "Kasun Silva",
    "preferences": Preferences(language="si").model_dump(by_alias=True),
    "created_at": NOW - timedelta(days=30),
    "updated_at": NOW - timedelta(days=30),
    "last_login_at": None,
}


# sample data

MOOD_ENTRY = {
    "_id": MOOD_OID,
    "user_id": USER_ID,
    "mood": 7,
    "emotions": ["happy", "calm"],
    "notes": "Had a relaxing walk in the park with a friend.",
    "voice_transcript": None,
    "sentiment": {"score": 0.6, "label": "positive", "confidence": 0.8},
    "timestamp": NOW - timedelta(hours=2),
}

MOOD_ENTRY_2 = {
    "_id": MOOD_2_OID,
    "user_id": USER_ID,
    "mood": 4,
    "emotions": ["anxiety", "tired"],
    "notes": None,
    "voice_transcript": None,
    "sentiment": {"score": 0.0, "label": "neutral", "confidence": 0.5},
    "timestamp": NOW - timedelta(days=2, hours=2),
}

OTHER_MOOD_ENTRY = {
    "_id": OTHER_MOOD_OID,
    "user_id": OTHER_USER_ID,
    "mood": 2,
    "emotions": ["sadness"],
    "notes": "Rough day.",
    "voice_transcript": None,
    "sentiment": {"score": -0.7, "label": "negative", "confidence": 0.9},
    "timestamp": NOW - timedelta(hours=5),
}

JOURNAL_ENTRY = {
    "_id": JOURNAL_OID,
    "user_id": USER_ID,
    "content": "Went for a long morning walk and felt grateful for the sunshine. The walk cleared my head.",
    "mood": 7,
    "sentiment": {"score": 0.7, "label": "positive", "confidence": 0.85},
    "ai_prompt": "What small moments made you feel grateful today?",
    "tags": ["walk", "went", "long", "morning", "felt"],
    "timestamp": NOW - timedelta(days=1),
}

OTHER_JOURNAL_ENTRY = {
    "_id": OTHER_JOURNAL_OID,
    "user_id": OTHER_USER_ID,
    "content": "Exams are coming up and I can't stop worrying about them.",
    "mood": 3,
    "sentiment": {"score": -0.5, "label": "negative", "confidence": 0.8},
    "ai_prompt": None,
    "tags": ["exams", "coming", "stop", "worrying", "about"],
    "timestamp": NOW - timedelta(days=1),
}

CHAT_SESSION = {
    "_id": CHAT_SESSION_OID,
    "user_id": USER_ID,
    "start_time": NOW - timedelta(hours=1),
    "end_time": None,
    "message_count": 2,
}

OTHER_CHAT_SESSION = {
    "_id": OTHER_CHAT_SESSION_OID,
    "user_id": OTHER_USER_ID,
    "start_time": NOW - timedelta(hours=3),
    "end_time": None,
    "message_count": 0,
}

CHAT_MESSAGES = [
    {
        "_id": ObjectId("65a1f0c2a1b2c3d4e5f60311"),
        "user_id": USER_ID,
        "session_id": CHAT_SESSION_OID,
        "content": "I have been feeling stressed about work deadlines",
        "is_user": True,
        "suggestions": [],
        "timestamp": NOW - timedelta(minutes=59),
    },
    {
        "_id": ObjectId("65a1f0c2a1b2c3d4e5f60312"),
        "user_id": USER_ID,
        "session_id": CHAT_SESSION_OID,
        "content": "Deadlines can feel overwhelming. Which one worries you most?",
        "is_user": False,
        "suggestions": ["How are you feeling right now?"],
        "timestamp": NOW - timedelta(minutes=58),
    },
]

COPING_STRATEGIES = [
    {
        "_id": BREATHING_OID,
        "title": "Box Breathing",
        "description": "Breathe in a steady four-count rhythm to calm the nervous system.",
        "type": "breathing",
        "steps": ["Inhale for 4", "Hold for 4", "Exhale for 4", "Hold for 4"],
        "duration": 5,
        "rating": 4.5,
        "rating_count": 2,
        "personalized": False,
        "created_at": NOW - timedelta(days=90),
    },
    {
        "_id": CBT_OID,
        "title": "Thought Record",
        "description": "Write down an upsetting thought and look for evidence for and against it.",
        "type": "cbt",
        "steps": ["Describe the situation", "Write the thought", "Weigh the evidence"],
        "duration": 15,
        "rating": 3.0,
        "rating_count": 1,
        "personalized": False,
        "created_at": NOW - timedelta(days=90),
    },
    {
        "_id": GROUNDING_OID,
        "title": "5-4-3-2-1 Grounding",
        "description": "Use your senses to bring yourself back to the present moment.",
        "type": "grounding",
        "steps": ["5 things you see", "4 things you touch", "3 things you hear"],
        "duration": 5,
        "rating": 0,
        "rating_count": 0,
        "personalized": False,
        "created_at": NOW - timedelta(days=90),
    },
]


def _steps(completed_ids=()):
    steps = [
        ("breathing", "Deep Breathing", "Take 5 deep breaths to center yourself"),
        ("mindfulness", "Mindfulness Check-in", "Notice how you feel in this moment"),
        ("gratitude", "Gratitude Practice", "Think of 3 things you're grateful for"),
        ("reflection", "Gentle Reflection", "Reflect on your day with kindness"),
    ]
    return [
        {"id": i, "title": t, "description": d, "duration": 2, "completed": i in completed_ids, "data": None}
        for i, t, d in steps
    ]


OPEN_SESSION = {
    "_id": OPEN_SESSION_OID,
    "user_id": USER_ID,
    "start_time": NOW - timedelta(minutes=30),
    "end_time": None,
    "steps": _steps(["breathing"]),
    "overall_mood": None,
    "summary": None,
    "completed": False,
}

DONE_SESSION = {
    "_id": DONE_SESSION_OID,
    "user_id": USER_ID,
    "start_time": NOW - timedelta(days=2),
    "end_time": NOW - timedelta(days=2) + timedelta(minutes=8),
    "steps": _steps(["breathing", "mindfulness", "gratitude", "reflection"]),
    "overall_mood": 8,
    "summary": "Lovely calm session.",
    "completed": True,
}


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor: supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = list(data or [])
        self._index = 0

    def sort(self, key, direction=1):
        # documents missing the key sort first, like mongodb nulls
        self._data.sort(
            key=lambda d: (d.get(key) is not None, d.get(key) if d.get(key) is not None else 0),
            reverse=direction == -1,
        )
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


def _evaluate(expr, doc):
    """tiny aggregation expression evaluator for update pipelines"""
    if isinstance(expr, str) and expr.startswith("$"):
        return doc.get(expr[1:])
    if not isinstance(expr, dict):
        return expr
    (op, args), = expr.items()
    values = [_evaluate(a, doc) for a in args]
    if op == "$ifNull":
        return values[0] if values[0] is not None else values[1]
    if op == "$add":
        return sum(values)
    if op == "$multiply":
        return math.prod(values)
    if op == "$divide":
        return values[0] / values[1]
    raise NotImplementedError(op)


class MockCollection:
    """mock for a motor collection with async methods"""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []

    def find(self, query=None, projection=None):
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock(results)

    async def find_one(self, query=None, projection=None):
        if not query:
            return self._data[0] if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return doc
        return None

    async def insert_one(self, doc):
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(doc)
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def count_documents(self, query=None):
        if not query:
            return len(self._data)
        return len([d for d in self._data if self._matches(d, query)])

    async def update_one(self, query, update, upsert=False):
        result = MagicMock()
        result.matched_count = 0
        result.modified_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                if "$set" in update:
                    doc.update(update["$set"])
                if "$inc" in update:
                    for key, val in update["$inc"].items():
                        doc[key] = doc.get(key, 0) + val
                result.matched_count = 1
                result.modified_count = 1
                break
        return result

    async def find_one_and_update(self, query, update, return_document=ReturnDocument.BEFORE):
        """update pipelines only: a list of $set stages over $add / $multiply / $divide / $ifNull"""
        for doc in self._data:
            if self._matches(doc, query):
                before = copy.deepcopy(doc)
                for stage in update:
                    computed = {key: _evaluate(expr, doc) for key, expr in stage["$set"].items()}
                    doc.update(computed)
                return doc if return_document == ReturnDocument.AFTER else before
        return None

    async def delete_one(self, query):
        result = MagicMock()
        result.deleted_count = 0
        for i, doc in enumerate(self._data):
            if self._matches(doc, query):
                del self._data[i]
                result.deleted_count = 1
                break
        return result

    async def delete_many(self, query):
        keep = [d for d in self._data if not self._matches(d, query)]
        result = MagicMock()
        result.deleted_count = len(self._data) - len(keep)
        self._data[:] = keep
        return result

    async def create_index(self, *args, **kwargs):
        return "mock_index"

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            if key == "$or":
                if not any(self._matches(doc, cond) for cond in value):
                    return False
                continue
            doc_val = doc.get(key)
            if isinstance(value, dict):
                if "$in" in value and doc_val not in value["$in"]:
                    return False
                if "$gte" in value and (doc_val is None or doc_val < value["$gte"]):
                    return False
                if "$lte" in value and (doc_val is None or doc_val > value["$lte"]):
                    return False
                if "$regex" in value:
                    flags = re.IGNORECASE if value.get("$options") == "i" else 0
                    if doc_val is None or not re.search(value["$regex"], str(doc_val), flags):
                        return False
            elif doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.users = MockCollection(copy.deepcopy([USER_DOC, OTHER_USER_DOC]))
        self.mood_entries = MockCollection(copy.deepcopy([MOOD_ENTRY, MOOD_ENTRY_2, OTHER_MOOD_ENTRY]))
        self.journal_entries = MockCollection(copy.deepcopy([JOURNAL_ENTRY, OTHER_JOURNAL_ENTRY]))
        self.chat_sessions = MockCollection(copy.deepcopy([CHAT_SESSION, OTHER_CHAT_SESSION]))
        self.chat_messages = MockCollection(copy.deepcopy(CHAT_MESSAGES))
        self.coping_strategies = MockCollection(copy.deepcopy(COPING_STRATEGIES))
        self.wellness_sessions = MockCollection(copy.deepcopy([OPEN_SESSION, DONE_SESSION]))

    async def connect(self):
        pass

    async def close(self):
        pass


# fake collaborators

def fake_llm_factory(*responses):
    """llm factory for AIService that always answers with the given responses"""
    def factory(**kwargs):
        return FakeListChatModel(responses=list(responses))
    return factory


class FakeEmailService(EmailService):
    """records outgoing mail instead of talking to an smtp server"""

    def __init__(self, result=True):
        super().__init__(host="localhost", port=25, user="", password="")
        self.result = result
        self.sent = []

    async def send_email(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})
        return self.result


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """each test starts with empty rate limit counters"""
    limiter.reset()


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def sentiment_classifier():
    """classifier backed by a fake llm that always answers positive"""
    return SentimentClassifier(llm=FakeListChatModel(responses=[POSITIVE_SENTIMENT_JSON]))


@pytest.fixture
def ai_service():
    return AIService(llm_factory=fake_llm_factory(AI_REPLY))


def _override_services(mock_db, sentiment_classifier, ai_service, email_service):
    async def override_get_db():
        return mock_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sentiment_classifier] = lambda: sentiment_classifier
    app.dependency_overrides[get_ai_service] = lambda: ai_service
    app.dependency_overrides[get_email_service] = lambda: email_service


@pytest_asyncio.fixture
async def client(mock_db, sentiment_classifier, ai_service, email_service):
    """httpx async test client with mocked services and real bearer auth"""
    _override_services(mock_db, sentiment_classifier, ai_service, email_service)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user_client(mock_db, sentiment_classifier, ai_service, email_service):
    """client authenticated as the test user"""
    _override_services(mock_db, sentiment_classifier, ai_service, email_service)

    async def override_get_current_user():
        # read through the mock db so profile changes persist between requests
        doc = dict(await mock_db.users.find_one({"_id": USER_OID}))
        doc["id"] = str(doc.pop("_id"))
        return doc

    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
