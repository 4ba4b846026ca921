"""Tests for the HTTP API"""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from moodsnap.api.main import app
from moodsnap.config import Settings
from moodsnap.engine import InsightEngine
from moodsnap.moods.vocabulary import MOOD_COLOR_MAP
from moodsnap.providers.moods.system import SystemMoodSource
from moodsnap.providers.snapshot.memory import InMemorySnapshotStore

ROUTE_MODULES = (
    "moodsnap.api.routes.insights",
    "moodsnap.api.routes.moods",
    "moodsnap.api.routes.health",
)


@pytest.fixture
def engine(mock_generation_provider):
    return InsightEngine(
        settings=Settings(timezone="UTC", generation_timeout=2.0),
        store=InMemorySnapshotStore(),
        provider=mock_generation_provider,
        mood_source=SystemMoodSource(),
    )


@pytest.fixture
def client(engine):
    """Test client with every route module pointed at the test engine"""
    patches = [patch(f"{module}.get_engine", return_value=engine) for module in ROUTE_MODULES]
    for p in patches:
        p.start()
    yield TestClient(app)
    for p in patches:
        p.stop()


def payload(weekly_captures, **extra):
    return {
        "user_id": "alice",
        "date": "2025-02-05",
        "captures": [json.loads(c.model_dump_json()) for c in weekly_captures],
        **extra,
    }


class TestHealthEndpoints:
    """Ping and health"""

    def test_ping(self, client):
        assert client.get("/ping").json() == {"ok": True}
        assert client.get("/api/ping").json() == {"ok": True}

    def test_health(self, client):
        response = client.get("/api/health")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["providers"]["generation_provider"] == "MockGenerationProvider"
        assert data["providers"]["snapshot_store"] == "memory"
        assert data["providers"]["mood_source"] == "system"
        assert data["snapshot_store_reachable"] is True
        assert data["mood_cache_state"] == "uninitialized"

    def test_health_reports_mood_cache_state(self, client, engine):
        client.get("/api/moods")
        assert client.get("/health").json()["mood_cache_state"] == "ready"

        engine.invalidate_moods()
        assert client.get("/health").json()["mood_cache_state"] == "stale"

    def test_health_degraded_when_store_unreachable(self, client, engine):
        with patch.object(engine.store, "list_snapshots", side_effect=OSError("disk gone")):
            data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["snapshot_store_reachable"] is False
        assert data["providers"]["snapshot_store"] == "memory"

    def test_health_unhealthy(self):
        with patch("moodsnap.api.routes.health.get_engine", side_effect=RuntimeError("boom")):
            data = TestClient(app).get("/health").json()

        assert data == {"status": "unhealthy", "error": "Service initialization failed"}


class TestEnsureInsight:
    """POST /api/insights/{type}"""

    def test_weekly_generated_then_cached(self, client, weekly_captures):
        first = client.post("/api/insights/weekly", json=payload(weekly_captures))
        second = client.post("/api/insights/weekly", json=payload(weekly_captures))

        assert first.status_code == 200
        body = first.json()
        assert body["status"] == "generated"
        assert body["snapshot"]["type"] == "weekly"
        assert body["snapshot"]["start_date"] == "2025-02-02"
        assert body["snapshot"]["end_date"] == "2025-02-08"
        assert body["snapshot"]["content"] == "The week moved at an even pace."
        assert second.json()["status"] == "cached"

    def test_daily_fallback_on_prose(self, client, weekly_captures):
        response = client.post("/api/insights/daily", json=payload(weekly_captures, date="2025-02-03"))
        body = response.json()

        assert body["status"] == "fallback"
        assert body["snapshot"]["capture_ids"] == ["c1", "c2", "c3"]
        assert body["errors"][0].startswith("Parse error:")

    def test_empty_period(self, client, weekly_captures):
        body = client.post("/api/insights/daily", json=payload(weekly_captures, date="2025-02-09")).json()

        assert body["status"] == "empty"
        assert body["snapshot"] is None
        assert body["reason"] == "Nothing to summarize"

    def test_challenge_requires_title(self, client, weekly_captures):
        response = client.post("/api/insights/challenge", json=payload(weekly_captures))
        assert response.status_code == 422

    def test_unknown_type(self, client, weekly_captures):
        response = client.post("/api/insights/yearly", json=payload(weekly_captures))
        assert response.status_code == 422

    def test_missing_user(self, client):
        response = client.post("/api/insights/daily", json={"captures": []})
        assert response.status_code == 422

    def test_engine_failure_returns_500(self, weekly_captures):
        broken = MagicMock()
        broken.ensure_insight.side_effect = RuntimeError("store offline")
        with patch("moodsnap.api.routes.insights.get_engine", return_value=broken):
            response = TestClient(app).post("/api/insights/weekly", json=payload(weekly_captures))

        assert response.status_code == 500
        assert "store offline" in response.json()["detail"]


class TestReadInsights:
    """GET snapshot and archive"""

    def test_get_missing_snapshot(self, client):
        response = client.get("/api/insights/daily", params={"user_id": "alice", "date": "2025-02-03"})
        assert response.status_code == 404

    def test_get_by_any_day_in_period(self, client, weekly_captures):
        client.post("/api/insights/weekly", json=payload(weekly_captures))

        response = client.get("/api/insights/weekly", params={"user_id": "alice", "date": "2025-02-07"})
        assert response.status_code == 200
        assert response.json()["start_date"] == "2025-02-02"

    def test_archive(self, client, weekly_captures):
        for day in ("2025-02-03", "2025-02-04"):
            client.post("/api/insights/daily", json=payload(weekly_captures, date=day))

        body = client.get("/api/insights/daily/archive", params={"user_id": "alice"}).json()
        assert body["count"] == 2
        assert [s["start_date"] for s in body["snapshots"]] == ["2025-02-04", "2025-02-03"]

        limited = client.get("/api/insights/daily/archive", params={"user_id": "alice", "limit": 1}).json()
        assert limited["count"] == 1


class TestSignalsAndMoods:
    """Month signals and the mood dictionary"""

    def test_monthly_signals(self, client, weekly_captures):
        body = {
            "user_id": "alice",
            "as_of": "2025-02-28T23:59:59Z",
            "captures": [json.loads(c.model_dump_json()) for c in weekly_captures],
        }
        data = client.post("/api/signals/monthly", json=body).json()

        assert data["signals"]["dominant_mood_id"] == "calm"
        assert data["signals"]["total_captures"] == 9
        assert data["signals"]["active_days"] == 4
        assert data["energy_percentages"] == {"high": 22, "medium": 33, "low": 44}
        assert data["reasoning"].startswith("9 captures across 4 active days.")

    def test_monthly_signals_naive_as_of(self, client, weekly_captures):
        body = {
            "as_of": "2025-02-04T12:00:00",
            "captures": [json.loads(c.model_dump_json()) for c in weekly_captures],
        }
        response = client.post("/api/signals/monthly", json=body)

        assert response.status_code == 200
        assert response.json()["signals"]["total_captures"] == 4

    def test_list_moods(self, client):
        data = client.get("/api/moods", params={"user_id": "alice"}).json()

        assert data["count"] == len(MOOD_COLOR_MAP)
        assert data["cache_state"] == "ready"
        assert any(m["id"] == "calm" and m["name"] == "Calm" for m in data["moods"])

    def test_invalidate_moods(self, client, engine):
        client.get("/api/moods")
        assert client.post("/api/moods/invalidate").json() == {"success": True}
        assert engine.mood_cache.state.value == "stale"
