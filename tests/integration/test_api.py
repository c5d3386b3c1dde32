"""
Integration tests for the REST API.

Drives the FastAPI app in-process with TestClient against a tracker over
an in-memory store and a fixed clock.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from config import Settings
from mistake_tracker.api.main import create_app


@pytest.fixture
def client(tracker):
    app = create_app(settings=Settings(), tracker=tracker)
    return TestClient(app)


@pytest.fixture
def created(client):
    response = client.post(
        "/api/mistakes",
        json={
            "title": "Sign error",
            "description": "Dropped a minus when expanding brackets",
            "category": "conceptual",
            "rootCause": "Did it in my head",
            "correctedPrinciple": "Distribute the sign to every term",
        },
    )
    assert response.status_code == 201
    return response.json()


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json()["service"] == "mistake-tracker"

    def test_health(self, client, created):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["records"] == {"storage": "memory", "mistakes": 1, "retests": 3}

    def test_config_lists_categories(self, client):
        body = client.get("/config").json()
        assert body["categories"]["knowledge"]["retestDays"] == [1, 3, 7, 14]
        assert body["scheduling"]["mastery_streak"] == 3


class TestMistakes:
    def test_create_uses_camel_case(self, created, clock):
        assert set(created) == {
            "id",
            "title",
            "description",
            "category",
            "rootCause",
            "correctedPrinciple",
            "createdAt",
            "retestCount",
            "lastReviewedAt",
            "mastered",
        }
        assert created["rootCause"] == "Did it in my head"
        assert created["retestCount"] == 0
        assert created["mastered"] is False
        assert created["lastReviewedAt"] is None
        assert _parse(created["createdAt"]) == clock()

    def test_get_and_list(self, client, created, clock):
        clock.advance(minutes=1)
        newer = client.post(
            "/api/mistakes",
            json={"title": "Newer", "description": "d", "category": "careless"},
        ).json()

        assert client.get(f"/api/mistakes/{created['id']}").json()["title"] == "Sign error"
        assert [m["id"] for m in client.get("/api/mistakes").json()] == [newer["id"], created["id"]]

    def test_get_missing(self, client):
        response = client.get("/api/mistakes/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Mistake not found"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "", "description": "d", "category": "careless"},
            {"title": "t", "description": "d", "category": "sloppy"},
            {"title": "t", "category": "careless"},
            {"title": "t", "description": "   ", "category": "careless"},
        ],
    )
    def test_create_invalid_is_400(self, client, payload):
        response = client.post("/api/mistakes", json=payload)
        assert response.status_code == 400
        assert "error" in response.json()

    def test_update(self, client, created):
        response = client.put(
            f"/api/mistakes/{created['id']}",
            json={"title": "Sign slip", "description": "d", "category": "careless"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Sign slip"
        assert body["category"] == "careless"
        assert body["createdAt"] == created["createdAt"]
        # Schedule stays as created for the original category
        assert len(client.get(f"/api/mistakes/{created['id']}/retests").json()) == 3

    def test_update_errors(self, client, created):
        valid = {"title": "t", "description": "d", "category": "careless"}
        assert client.put("/api/mistakes/nope", json=valid).status_code == 404
        bad = {**valid, "title": ""}
        assert client.put(f"/api/mistakes/{created['id']}", json=bad).status_code == 400

    def test_delete_cascades(self, client, created):
        response = client.delete(f"/api/mistakes/{created['id']}")
        assert response.status_code == 204
        assert response.content == b""

        assert client.get(f"/api/mistakes/{created['id']}").status_code == 404
        assert client.get("/api/retests").json() == []
        assert client.delete(f"/api/mistakes/{created['id']}").status_code == 404


class TestRetests:
    def test_schedule_created_with_mistake(self, client, created, clock):
        retests = client.get("/api/retests").json()

        assert [_parse(r["scheduledDate"]) for r in retests] == [
            clock() + timedelta(days=d) for d in (1, 3, 7)
        ]
        assert set(retests[0]) == {"id", "mistakeId", "scheduledDate", "completed", "result", "completedAt"}
        assert all(r["mistakeId"] == created["id"] and r["completed"] is False for r in retests)

    def test_complete_incorrect_schedules_follow_up(self, client, created, clock):
        first = client.get("/api/retests").json()[0]
        now = clock.advance(days=1)

        response = client.put(f"/api/retests/{first['id']}/complete", json={"result": "incorrect"})

        assert response.status_code == 200
        body = response.json()
        assert body["completed"] is True
        assert body["result"] == "incorrect"
        assert _parse(body["completedAt"]) == now

        mistake = client.get(f"/api/mistakes/{created['id']}").json()
        assert mistake["retestCount"] == 1
        assert mistake["mastered"] is False

        retests = client.get("/api/retests").json()
        assert len(retests) == 4
        assert sum(_parse(r["scheduledDate"]) == now + timedelta(days=1) for r in retests) == 1

    def test_three_correct_masters(self, client, created, clock):
        for retest in client.get("/api/retests").json():
            clock.advance(days=1)
            client.put(f"/api/retests/{retest['id']}/complete", json={"result": "correct"})

        mistake = client.get(f"/api/mistakes/{created['id']}").json()
        assert mistake["mastered"] is True
        assert mistake["retestCount"] == 3

    def test_complete_errors(self, client, created):
        retest = client.get("/api/retests").json()[0]
        assert client.put("/api/retests/nope/complete", json={"result": "correct"}).status_code == 404
        assert client.put(f"/api/retests/{retest['id']}/complete", json={"result": "maybe"}).status_code == 400
        assert client.put(f"/api/retests/{retest['id']}/complete", json={}).status_code == 400

        assert client.put(f"/api/retests/{retest['id']}/complete", json={"result": "correct"}).status_code == 200
        again = client.put(f"/api/retests/{retest['id']}/complete", json={"result": "incorrect"})
        assert again.status_code == 400

    def test_get_retest(self, client, created):
        retest = client.get("/api/retests").json()[0]
        assert client.get(f"/api/retests/{retest['id']}").json() == retest
        assert client.get("/api/retests/nope").status_code == 404

    def test_agenda(self, client, created, clock):
        clock.advance(days=3)
        body = client.get("/api/retests/agenda").json()

        assert len(body["overdue"]) == 1
        assert len(body["today"]) == 1
        assert len(body["upcoming"]) == 1
        assert body["dueCount"] == 2
        assert body["today"][0]["mistake"]["id"] == created["id"]

    def test_retests_of_unknown_mistake(self, client):
        assert client.get("/api/mistakes/nope/retests").status_code == 404


class TestStatsAndQuiz:
    def test_weekly_stats_scenario(self, client, clock):
        ids = []
        for title, category in (("A", "careless"), ("B", "knowledge")):
            clock.advance(minutes=1)
            ids.append(
                client.post(
                    "/api/mistakes",
                    json={"title": title, "description": "d", "category": category},
                ).json()["id"]
            )

        retests = client.get("/api/retests").json()
        for retest, result in zip(retests[:3], ("correct", "correct", "incorrect")):
            clock.advance(minutes=5)
            client.put(f"/api/retests/{retest['id']}/complete", json={"result": result})

        stats = client.get("/api/stats").json()
        assert stats["totalMistakes"] == 2
        assert stats["totalRetests"] == 3
        assert stats["correctRetests"] == 2
        assert stats["topPatterns"] == [
            {"category": "careless", "count": 1},
            {"category": "knowledge", "count": 1},
        ]
        assert len(stats["recentActivity"]) == 7
        assert stats["recentActivity"][-1] == {
            "date": clock().date().isoformat(),
            "mistakes": 2,
            "retests": 3,
        }

    def test_quiz(self, client, created):
        questions = client.get("/api/quiz").json()
        assert questions == [
            {
                "mistakeId": created["id"],
                "question": "Sign error",
                "description": "Dropped a minus when expanding brackets",
                "category": "conceptual",
                "correctPrinciple": "Distribute the sign to every term",
            }
        ]
        assert client.get("/api/quiz?limit=0").status_code == 400


class TestUnexpectedErrors:
    def test_storage_failure_is_500(self, tracker, monkeypatch):
        def broken():
            raise RuntimeError("storage offline")

        monkeypatch.setattr(tracker.repository, "list_mistakes", broken)
        client = TestClient(create_app(settings=Settings(), tracker=tracker), raise_server_exceptions=False)

        response = client.get("/api/mistakes")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
