# tests for mood router: log, list, edit, delete and analytics views
# tests for app/routers/mood.py

import pytest
from langchain_core.language_models import FakeListChatModel

from tests.conftest import MOOD_OID, MOOD_2_OID, OTHER_MOOD_OID, MISSING_ID, USER_ID
from app.main import app
from app.services.sentiment_service import SentimentClassifier, get_sentiment_classifier
from app.models.sentiment import SentimentResult

NEUTRAL = {"score": 0.0, "label": "neutral", "confidence": 0.5}


class RecordingClassifier(SentimentClassifier):
    """remembers which text was classified, answers negative"""

    def __init__(self):
        super().__init__()
        self.texts = []

    async def analyze(self, text):
        self.texts.append(text)
        return SentimentResult(score=-0.4, label="negative", confidence=0.7)


class TestLogMood:
    """create mood entries"""

    async def test_log_mood_with_notes(self, user_client, mock_db):
        resp = await user_client.post("/api/mood/log", json={
            "mood": 8,
            "emotions": ["  happy ", "grateful"],
            "notes": "Finished my assignment early and went for a swim.",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Mood logged successfully"
        entry = body["data"]
        assert entry["userId"] == USER_ID
        assert entry["mood"] == 8
        assert entry["emotions"] == ["happy", "grateful"]
        assert entry["sentiment"] == {"score": 0.8, "label": "positive", "confidence": 0.9}

        stored = mock_db.mood_entries.inserted[0]
        assert stored["user_id"] == USER_ID
        assert stored["sentiment"]["label"] == "positive"

    async def test_log_mood_without_text_is_neutral(self, user_client, mock_db):
        classifier = RecordingClassifier()
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        resp = await user_client.post("/api/mood/log", json={"mood": 5})
        assert resp.status_code == 201
        entry = resp.json()["data"]
        assert entry["sentiment"] == NEUTRAL
        assert mock_db.mood_entries.inserted[0]["sentiment"] == NEUTRAL
        assert classifier.texts == []
        assert entry["emotions"] == []

    async def test_log_mood_uses_voice_transcript(self, user_client):
        resp = await user_client.post("/api/mood/log", json={
            "mood": 6,
            "voiceTranscript": "I am doing alright today, a bit tired but fine.",
        })
        assert resp.status_code == 201
        entry = resp.json()["data"]
        assert entry["voiceTranscript"].startswith("I am doing alright")
        assert entry["sentiment"]["label"] == "positive"

    async def test_log_mood_classifier_failure_falls_back_to_neutral(self, user_client):
        broken = SentimentClassifier(llm=FakeListChatModel(responses=["this is not json"]))
        app.dependency_overrides[get_sentiment_classifier] = lambda: broken

        resp = await user_client.post("/api/mood/log", json={"mood": 3, "notes": "Something happened."})
        assert resp.status_code == 201
        assert resp.json()["data"]["sentiment"] == {"score": 0.0, "label": "neutral", "confidence": 0.5}

    async def test_log_mood_out_of_range(self, user_client):
        resp = await user_client.post("/api/mood/log", json={"mood": 11})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["field"] == "mood"

    async def test_log_mood_missing_mood(self, user_client):
        resp = await user_client.post("/api/mood/log", json={"emotions": ["happy"]})
        assert resp.status_code == 400
        assert resp.json()["message"] == "mood is required"

    async def test_log_mood_blank_emotion(self, user_client):
        resp = await user_client.post("/api/mood/log", json={"mood": 5, "emotions": ["   "]})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Each emotion must be between 1 and 50 characters"

    async def test_log_mood_too_many_emotions(self, user_client):
        resp = await user_client.post("/api/mood/log", json={
            "mood": 5, "emotions": [f"e{i}" for i in range(11)],
        })
        assert resp.status_code == 400

    async def test_log_mood_requires_auth(self, client):
        resp = await client.post("/api/mood/log", json={"mood": 5})
        assert resp.status_code == 401


class TestListMood:
    """paginated listing"""

    async def test_list_own_entries_newest_first(self, user_client):
        resp = await user_client.get("/api/mood/entries")
        assert resp.status_code == 200
        body = resp.json()
        ids = [e["id"] for e in body["data"]]
        assert ids == [str(MOOD_OID), str(MOOD_2_OID)]
        assert str(OTHER_MOOD_OID) not in ids
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 2, "totalPages": 1}

    async def test_list_pagination(self, user_client):
        resp = await user_client.get("/api/mood/entries?page=2&limit=1")
        body = resp.json()
        assert [e["id"] for e in body["data"]] == [str(MOOD_2_OID)]
        assert body["pagination"]["totalPages"] == 2

    async def test_list_invalid_page(self, user_client):
        resp = await user_client.get("/api/mood/entries?page=0")
        assert resp.status_code == 400


class TestMoodEntry:
    """single entry get / update / delete"""

    async def test_get_entry(self, user_client):
        resp = await user_client.get(f"/api/mood/{MOOD_OID}")
        assert resp.status_code == 200
        assert resp.json()["data"]["mood"] == 7

    async def test_get_other_users_entry_is_not_found(self, user_client):
        resp = await user_client.get(f"/api/mood/{OTHER_MOOD_OID}")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Mood entry not found"

    async def test_get_malformed_id_is_not_found(self, user_client):
        resp = await user_client.get("/api/mood/not-an-id")
        assert resp.status_code == 404

    async def test_update_mood_keeps_sentiment(self, user_client):
        resp = await user_client.put(f"/api/mood/{MOOD_OID}", json={"mood": 9})
        assert resp.status_code == 200
        entry = resp.json()["data"]
        assert entry["mood"] == 9
        assert entry["notes"] == "Had a relaxing walk in the park with a friend."
        assert entry["sentiment"]["score"] == 0.6

    async def test_update_notes_reanalyzes(self, user_client, mock_db):
        resp = await user_client.put(f"/api/mood/{MOOD_2_OID}", json={"notes": "Feeling better now."})
        assert resp.status_code == 200
        assert resp.json()["data"]["sentiment"]["label"] == "positive"
        stored = await mock_db.mood_entries.find_one({"_id": MOOD_2_OID})
        assert stored["notes"] == "Feeling better now."
        assert "updated_at" in stored

    async def test_clearing_notes_reanalyzes_remaining_transcript(self, user_client, mock_db):
        stored = await mock_db.mood_entries.find_one({"_id": MOOD_OID})
        stored["voice_transcript"] = "It was an okay day overall."
        classifier = RecordingClassifier()
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        resp = await user_client.put(f"/api/mood/{MOOD_OID}", json={"notes": None})
        assert resp.status_code == 200
        entry = resp.json()["data"]
        assert entry["notes"] is None
        assert classifier.texts == ["It was an okay day overall."]
        assert entry["sentiment"]["label"] == "negative"

    async def test_clearing_all_text_resets_to_neutral(self, user_client, mock_db):
        classifier = RecordingClassifier()
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        resp = await user_client.put(f"/api/mood/{MOOD_OID}", json={"notes": None})
        assert resp.json()["data"]["sentiment"] == NEUTRAL
        assert classifier.texts == []
        stored = await mock_db.mood_entries.find_one({"_id": MOOD_OID})
        assert stored["sentiment"] == NEUTRAL

    async def test_new_transcript_keeps_notes_precedence(self, user_client):
        classifier = RecordingClassifier()
        app.dependency_overrides[get_sentiment_classifier] = lambda: classifier

        resp = await user_client.put(f"/api/mood/{MOOD_OID}", json={"voiceTranscript": "Long day at work."})
        assert resp.status_code == 200
        assert resp.json()["data"]["voiceTranscript"] == "Long day at work."
        assert classifier.texts == ["Had a relaxing walk in the park with a friend."]

    async def test_update_other_users_entry(self, user_client):
        resp = await user_client.put(f"/api/mood/{OTHER_MOOD_OID}", json={"mood": 9})
        assert resp.status_code == 404

    async def test_delete_entry(self, user_client, mock_db):
        resp = await user_client.delete(f"/api/mood/{MOOD_OID}")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Mood entry deleted successfully"
        assert await mock_db.mood_entries.find_one({"_id": MOOD_OID}) is None

    async def test_delete_missing_entry(self, user_client):
        resp = await user_client.delete(f"/api/mood/{MISSING_ID}")
        assert resp.status_code == 404


class TestMoodAnalyticsRoutes:
    """analytics, trends, emotions and insights"""

    async def test_analytics(self, user_client):
        resp = await user_client.get("/api/mood/analytics")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["averageMood"] == 5.5
        assert len(data["moodTrend"]) == 7
        assert data["moodTrend"][0] == 7
        assert data["moodTrend"][2] == 4
        assert len(data["weeklyData"]) == 7
        assert data["weeklyData"][0]["day"] == "Sunday"
        emotions = [e["emotion"] for e in data["emotionFrequency"]]
        assert emotions == ["happy", "calm", "anxiety", "tired"]

    async def test_analytics_empty_window(self, user_client, mock_db):
        mock_db.mood_entries._data = []
        resp = await user_client.get("/api/mood/analytics")
        data = resp.json()["data"]
        assert data == {"averageMood": 0, "moodTrend": [], "weeklyData": [], "emotionFrequency": []}

    async def test_trends(self, user_client):
        resp = await user_client.get("/api/mood/trends")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["period"] == "7 days"
        assert [t["entryCount"] for t in data["trends"]] == [1, 1]
        # ascending by date
        assert data["trends"][0]["date"] < data["trends"][1]["date"]

    async def test_emotions(self, user_client):
        resp = await user_client.get("/api/mood/emotions?days=1")
        data = resp.json()["data"]
        assert data["period"] == "1 days"
        assert [e["emotion"] for e in data["frequency"]] == ["happy", "calm"]

    async def test_insights(self, user_client):
        resp = await user_client.get("/api/mood/insights")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert "Your mood has been relatively stable. Consider what helps you feel your best." in data["moodInsights"]
        assert data["recommendations"][-1] == "Remember to be kind to yourself and celebrate small wins."
