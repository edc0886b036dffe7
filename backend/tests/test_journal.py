# tests for journal router: create, browse, search, edit and analytics views
# tests for app/routers/journal.py

import pytest

from tests.conftest import JOURNAL_OID, OTHER_JOURNAL_OID, MISSING_ID, USER_ID, AI_REPLY, fake_llm_factory
from app.main import app
from app.services.ai_service import AIService, JOURNAL_PROMPT_FALLBACK, get_ai_service


ENTRY_TEXT = "Studying for exams all week. Exams make me nervous but studying with friends helps."


class TestCreateJournal:
    """create journal entries"""

    async def test_create_entry(self, user_client, mock_db):
        resp = await user_client.post("/api/journal/create", json={"content": ENTRY_TEXT, "mood": 5})
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Journal entry created successfully"
        entry = body["data"]
        assert entry["userId"] == USER_ID
        assert entry["mood"] == 5
        assert entry["sentiment"]["label"] == "positive"
        assert entry["aiPrompt"] == AI_REPLY
        assert entry["tags"] == ["studying", "exams", "week", "make", "nervous"]

        stored = mock_db.journal_entries.inserted[0]
        assert stored["ai_prompt"] == AI_REPLY

    async def test_create_entry_without_mood(self, user_client):
        resp = await user_client.post("/api/journal/create", json={"content": ENTRY_TEXT})
        assert resp.status_code == 201
        assert resp.json()["data"]["mood"] is None

    async def test_create_entry_prompt_truncated(self, user_client):
        long_prompt = "Reflect " * 100
        app.dependency_overrides[get_ai_service] = lambda: AIService(llm_factory=fake_llm_factory(long_prompt))

        resp = await user_client.post("/api/journal/create", json={"content": ENTRY_TEXT})
        assert resp.status_code == 201
        assert len(resp.json()["data"]["aiPrompt"]) == 500

    async def test_create_entry_prompt_fallback(self, user_client):
        def broken_factory(**kwargs):
            raise RuntimeError("gemini unavailable")
        app.dependency_overrides[get_ai_service] = lambda: AIService(llm_factory=broken_factory)

        resp = await user_client.post("/api/journal/create", json={"content": ENTRY_TEXT})
        assert resp.status_code == 201
        assert resp.json()["data"]["aiPrompt"] == JOURNAL_PROMPT_FALLBACK

    async def test_create_entry_too_short(self, user_client):
        resp = await user_client.post("/api/journal/create", json={"content": "Too short"})
        assert resp.status_code == 400
        assert resp.json()["field"] == "content"

    async def test_create_entry_missing_content(self, user_client):
        resp = await user_client.post("/api/journal/create", json={"mood": 4})
        assert resp.status_code == 400
        assert resp.json()["message"] == "content is required"


class TestListAndSearch:
    """listing and search"""

    async def test_list_own_entries(self, user_client):
        resp = await user_client.get("/api/journal/entries")
        assert resp.status_code == 200
        body = resp.json()
        assert [e["id"] for e in body["data"]] == [str(JOURNAL_OID)]
        assert body["pagination"]["total"] == 1

    async def test_search_case_insensitive(self, user_client):
        resp = await user_client.get("/api/journal/search?q=SUNSHINE")
        assert resp.status_code == 200
        assert [e["id"] for e in resp.json()["data"]] == [str(JOURNAL_OID)]

    async def test_search_only_own_entries(self, user_client):
        resp = await user_client.get("/api/journal/search?q=exams")
        assert resp.json()["data"] == []

    async def test_search_escapes_regex(self, user_client):
        resp = await user_client.get("/api/journal/search?q=.*")
        assert resp.status_code == 200
        assert resp.json()["data"] == []

    async def test_search_requires_query(self, user_client):
        resp = await user_client.get("/api/journal/search?q=%20%20")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Search query is required"

    async def test_search_missing_query(self, user_client):
        resp = await user_client.get("/api/journal/search")
        assert resp.status_code == 400


class TestJournalEntry:
    """single entry get / update / delete"""

    async def test_get_entry(self, user_client):
        resp = await user_client.get(f"/api/journal/{JOURNAL_OID}")
        assert resp.status_code == 200
        assert resp.json()["data"]["aiPrompt"] == "What small moments made you feel grateful today?"

    async def test_get_other_users_entry(self, user_client):
        resp = await user_client.get(f"/api/journal/{OTHER_JOURNAL_OID}")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Journal entry not found"

    async def test_update_content_replaces_tags_and_sentiment(self, user_client):
        resp = await user_client.put(f"/api/journal/{JOURNAL_OID}", json={"content": ENTRY_TEXT})
        assert resp.status_code == 200
        entry = resp.json()["data"]
        assert entry["content"] == ENTRY_TEXT
        assert entry["tags"] == ["studying", "exams", "week", "make", "nervous"]
        assert entry["sentiment"]["score"] == 0.8
        # untouched fields survive
        assert entry["mood"] == 7

    async def test_update_mood_only(self, user_client):
        resp = await user_client.put(f"/api/journal/{JOURNAL_OID}", json={"mood": 3})
        entry = resp.json()["data"]
        assert entry["mood"] == 3
        assert entry["tags"] == ["walk", "went", "long", "morning", "felt"]

    async def test_update_clears_mood(self, user_client):
        resp = await user_client.put(f"/api/journal/{JOURNAL_OID}", json={"mood": None})
        assert resp.json()["data"]["mood"] is None

    async def test_delete_entry(self, user_client, mock_db):
        resp = await user_client.delete(f"/api/journal/{JOURNAL_OID}")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Journal entry deleted successfully"
        assert await mock_db.journal_entries.count_documents({"user_id": USER_ID}) == 0

    async def test_delete_missing_entry(self, user_client):
        resp = await user_client.delete(f"/api/journal/{MISSING_ID}")
        assert resp.status_code == 404


class TestJournalAnalyticsRoutes:
    """analytics, themes, sentiment, insights and prompts"""

    async def test_analytics(self, user_client):
        resp = await user_client.get("/api/journal/analytics")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["totalEntries"] == 1
        assert data["averageLength"] == 90
        assert data["sentimentDistribution"] == {"positive": 1, "negative": 0, "neutral": 0}
        assert data["commonThemes"][0] == {"theme": "walk", "count": 1}
        assert len(data["weeklySummary"]) == 1
        assert data["weeklySummary"][0]["averageSentiment"] == 0.7

    async def test_themes(self, user_client):
        resp = await user_client.get("/api/journal/themes")
        data = resp.json()["data"]
        assert [t["theme"] for t in data["themes"]] == ["walk", "went", "long", "morning", "felt"]
        assert data["period"] == "30 days"

    async def test_sentiment(self, user_client, mock_db):
        mock_db.journal_entries._data.append({
            "user_id": USER_ID,
            "content": "An entry that was never classified.",
            "sentiment": None,
            "tags": [],
            "timestamp": mock_db.journal_entries._data[0]["timestamp"],
        })
        resp = await user_client.get("/api/journal/sentiment")
        data = resp.json()["data"]
        assert data["distribution"] == {"positive": 1, "negative": 0, "neutral": 1}

    async def test_insights(self, user_client):
        resp = await user_client.get("/api/journal/insights")
        data = resp.json()["data"]
        assert data["journalInsights"] == [
            "Consider journaling more regularly. Even a few minutes a day can help.",
            "Your journal entries tend to be quite positive. This is wonderful!",
        ]
        assert "Try journaling for 5-10 minutes each day to build a healthy habit." in data["recommendations"]

    async def test_ai_prompt(self, user_client):
        resp = await user_client.get("/api/journal/ai-prompt?mood=2")
        assert resp.status_code == 200
        assert resp.json()["data"]["prompt"] == AI_REPLY
