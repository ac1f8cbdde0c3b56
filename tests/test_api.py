"""
Integration tests for the FastAPI application.
Uses httpx.AsyncClient with the ASGI transport (no running server needed).
Fixtures are provided by tests/conftest.py.
"""

from __future__ import annotations

from datetime import datetime, timedelta

MONDAY = "2026-10-19T07:00:00"


def _payload(**overrides):
    body = {
        "now": MONDAY,
        "persist": False,
        "tasks": [
            {"id": "high", "title": "Exam prep", "priority": "high",
             "due_date": "2026-10-20T03:00:00", "estimated_duration": 60},
            {"id": "medium", "title": "Essay", "priority": "medium",
             "due_date": "2026-10-21T19:00:00", "estimated_duration": 120},
            {"id": "low", "title": "Reading", "priority": "low",
             "due_date": "2026-10-25T07:00:00", "estimated_duration": 60},
        ],
    }
    body.update(overrides)
    return body


class TestHealth:
    async def test_health_ok(self, client):
        r = await client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestGenerateSchedule:
    async def test_generate_returns_schedule(self, client):
        r = await client.post("/schedule", json=_payload())
        assert r.status_code == 200
        body = r.json()
        placed = {s["task_id"]: s["scheduled_start"] for s in body["schedule"]}
        assert placed == {
            "high": "2026-10-19T09:00:00",
            "low": "2026-10-19T10:00:00",
            "medium": "2026-10-20T09:00:00",
        }
        meta = body["metadata"]
        assert meta["total_tasks"] == 3
        assert meta["scheduled_tasks"] == 3
        assert meta["conflicts"] == 0
        assert 0.0 <= meta["confidence"] <= 1.0
        assert body["persisted"] == 0

    async def test_scheduled_task_fields(self, client):
        r = await client.post("/schedule", json=_payload())
        item = r.json()["schedule"][0]
        for key in ("title", "priority", "scheduled_end", "duration_minutes",
                    "confidence", "efficiency", "allocated_slots", "reasoning", "part", "parts"):
            assert key in item
        assert item["reasoning"].startswith("Scheduled during optimal productivity window")

    async def test_events_block_slots(self, client):
        events = [{"id": "e1", "title": "Lab",
                   "start_time": "2026-10-19T08:00:00", "end_time": "2026-10-19T12:00:00"}]
        r = await client.post("/schedule", json=_payload(events=events))
        starts = [s["scheduled_start"] for s in r.json()["schedule"]]
        assert "2026-10-19T09:00:00" not in starts
        assert "2026-10-19T10:00:00" not in starts

    async def test_explicit_patterns_are_used(self, client):
        r = await client.post("/schedule", json=_payload(
            tasks=[{"id": "a", "title": "A"}],
            patterns={"most_productive_hours": [15], "data_quality": 0.9},
        ))
        [item] = r.json()["schedule"]
        assert item["scheduled_start"] == "2026-10-19T15:00:00"

    async def test_empty_request(self, client):
        r = await client.post("/schedule", json={"now": MONDAY})
        assert r.status_code == 200
        body = r.json()
        assert body["schedule"] == []
        assert body["metadata"]["total_tasks"] == 0

    async def test_invalid_priority_returns_422(self, client):
        r = await client.post("/schedule", json=_payload(
            tasks=[{"id": "a", "title": "A", "priority": "urgent"}]))
        assert r.status_code == 422

    async def test_non_positive_duration_returns_422(self, client):
        r = await client.post("/schedule", json=_payload(
            tasks=[{"id": "a", "title": "A", "estimated_duration": 0}]))
        assert r.status_code == 422

    async def test_out_of_range_hour_returns_422(self, client):
        r = await client.post("/schedule", json=_payload(
            preferences={"available_study_hours": [9, 24]}))
        assert r.status_code == 422

    async def test_event_ending_before_start_returns_422(self, client):
        events = [{"id": "e1", "start_time": "2026-10-19T12:00:00", "end_time": "2026-10-19T08:00:00"}]
        r = await client.post("/schedule", json=_payload(events=events))
        assert r.status_code == 422


class TestStoredSchedule:
    async def _persist(self, client):
        r = await client.post("/schedule", json={
            "tasks": [{"id": "a", "title": "A"}, {"id": "b", "title": "B"}],
        })
        assert r.status_code == 200
        return r.json()

    async def test_persisted_schedule_is_current(self, client):
        body = await self._persist(client)
        assert body["persisted"] == len(body["schedule"]) == 2

        r = await client.get("/schedule/current")
        assert r.status_code == 200
        current = r.json()
        assert len(current) >= 1
        assert {c["task_id"] for c in current} <= {"a", "b"}
        assert all(c["was_rescheduled"] is False for c in current)

    async def test_progress_update(self, client):
        await self._persist(client)
        start = datetime.now()
        r = await client.patch("/schedule/tasks/a/progress", json={
            "actual_start": start.isoformat(),
            "actual_end": (start + timedelta(minutes=45)).isoformat(),
        })
        assert r.status_code == 200
        assert r.json() == {"status": "updated", "rows": 1}

    async def test_progress_for_unknown_task_returns_404(self, client):
        r = await client.patch("/schedule/tasks/nope/progress", json={"was_rescheduled": True})
        assert r.status_code == 404

    async def test_analytics(self, client):
        await self._persist(client)
        r = await client.get("/schedule/analytics", params={"days": 7})
        assert r.status_code == 200
        body = r.json()
        assert body["total_scheduled"] == 2
        assert body["reschedule_rate"] == 0.0

    async def test_analytics_rejects_bad_window(self, client):
        r = await client.get("/schedule/analytics", params={"days": 0})
        assert r.status_code == 422

    async def test_patterns(self, client):
        await self._persist(client)
        r = await client.get("/schedule/patterns")
        assert r.status_code == 200
        body = r.json()
        assert len(body["preferred_start_hours"]) >= 1
        assert body["average_session_minutes"] == 60.0
        assert body["subject_performance"]["Unknown"]["total"] == 2


class TestPreferencePaths:
    async def test_night_preference_without_patterns_schedules_tasks(self, client):
        r = await client.post("/schedule", json=_payload(preferences={"study_time_preference": "night"}))
        assert r.status_code == 200
        assert r.json()["metadata"]["scheduled_tasks"] == 3
