"""Endpoint tests for feedback submission, listing and dashboard stats."""
import uuid
from datetime import datetime

import pytest

from database.database import WriteSessionLocal
from database.feedback_store import FeedbackStore
from services.stats_state import stats_registry
from services.stats_worker import StatsWorker


@pytest.fixture
def owner():
    return f"api-{uuid.uuid4().hex[:8]}"


def _seed(owner, rows):
    session = WriteSessionLocal()
    try:
        store = FeedbackStore(session)
        for rating, when in rows:
            store.submit(rating=rating, comments=f"rated {rating}", owner_id=owner, created_at=when)
    finally:
        session.close()


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["database"] == "connected"


def test_submit_and_fetch_feedback(client, owner):
    res = client.post("/api/feedback", json={
        "name": "", "email": "ana@example.com", "rating": 5, "comments": "Great!", "owner_id": owner,
    })
    assert res.status_code == 201
    body = res.json()
    assert body["name"] is None
    assert body["rating"] == 5

    fetched = client.get(f"/api/feedback/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["comments"] == "Great!"


@pytest.mark.parametrize("payload", [
    {"rating": 0, "comments": "x"},
    {"rating": 6, "comments": "x"},
    {"rating": 3, "comments": ""},
    {"rating": 3, "comments": "   "},
    {"comments": "no rating"},
])
def test_submit_rejects_invalid_payloads(client, payload):
    res = client.post("/api/feedback", json=payload)
    assert res.status_code == 422
    assert res.json()["error"]["message"] == "Validation error"


def test_list_with_filters(client, owner):
    _seed(owner, [(5, datetime(2024, 1, 1, 9)), (2, datetime(2024, 1, 2, 9)), (4, datetime(2024, 1, 3, 9))])

    res = client.get("/api/feedback", params={"owner_id": owner, "min_rating": 4})
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 2
    assert [item["rating"] for item in body["items"]] == [4, 5]

    res = client.get("/api/feedback", params={"owner_id": owner, "limit": 1})
    assert res.json()["total"] == 3
    assert len(res.json()["items"]) == 1


def test_list_rejects_inverted_rating_range(client, owner):
    res = client.get("/api/feedback", params={"owner_id": owner, "min_rating": 5, "max_rating": 2})
    assert res.status_code == 400
    assert res.json()["error"]["details"]["field"] == "min_rating"


def test_delete_feedback(client, owner):
    created = client.post("/api/feedback", json={"rating": 3, "comments": "bye", "owner_id": owner}).json()
    assert client.delete(f"/api/feedback/{created['id']}").status_code == 204
    res = client.delete(f"/api/feedback/{created['id']}")
    assert res.status_code == 404
    assert "Feedback" in res.json()["error"]["message"]


def test_stats_for_owner(client, owner):
    _seed(owner, [
        (4, datetime(2024, 1, 1, 8)),
        (4, datetime(2024, 1, 1, 12)),
        (2, datetime(2024, 1, 1, 18)),
        (5, datetime(2024, 1, 2, 9)),
    ])
    res = client.get("/api/feedback/stats", params={"owner_id": owner})
    assert res.status_code == 200
    body = res.json()
    assert body["stale"] is False
    summary = body["summary"]
    assert summary["total_count"] == 4
    assert summary["average_rating"] == pytest.approx(3.75)
    assert summary["rating_histogram"] == {"1": 0, "2": 1, "3": 0, "4": 2, "5": 1}
    assert [e["date"] for e in summary["daily_trend"]] == ["2024-01-01", "2024-01-02"]
    assert summary["daily_trend"][0]["count"] == 3


def test_stats_for_owner_without_feedback(client, owner):
    summary = client.get("/api/feedback/stats", params={"owner_id": owner}).json()["summary"]
    assert summary["total_count"] == 0
    assert summary["average_rating"] == 0.0
    assert summary["daily_trend"] == []


def test_stats_respect_date_filter(client, owner):
    _seed(owner, [(1, datetime(2024, 3, 1, 9)), (5, datetime(2024, 3, 2, 9))])
    res = client.get("/api/feedback/stats", params={
        "owner_id": owner, "start_date": "2024-03-02T00:00:00", "end_date": "2024-03-02T23:59:59",
    })
    summary = res.json()["summary"]
    assert summary["total_count"] == 1
    assert summary["average_rating"] == 5.0


class _FailingWorker(StatsWorker):
    def submit(self, records):
        from concurrent.futures import Future
        from core.exceptions import StatsComputationError

        future = Future()
        future.set_exception(StatsComputationError("Statistics worker unavailable", cause="test"))
        return future


def test_stats_failure_returns_previous_summary_as_stale(client, owner):
    _seed(owner, [(5, datetime(2024, 1, 1, 9)), (3, datetime(2024, 1, 2, 9))])
    first = client.get("/api/feedback/stats", params={"owner_id": owner}).json()
    assert first["summary"]["total_count"] == 2

    holder = stats_registry.get(owner)
    original = holder.worker
    holder.worker = _FailingWorker()
    try:
        _seed(owner, [(1, datetime(2024, 1, 3, 9))])
        res = client.get("/api/feedback/stats", params={"owner_id": owner})
    finally:
        holder.worker = original

    assert res.status_code == 200
    body = res.json()
    assert body["stale"] is True
    assert body["error"] == "Statistics worker unavailable"
    assert body["summary"] == first["summary"]


def test_stale_fallback_only_uses_summary_for_the_same_filters(client, owner):
    _seed(owner, [(1, datetime(2024, 1, 1, 9)), (2, datetime(2024, 1, 1, 10)), (5, datetime(2024, 1, 2, 9))])
    top = client.get("/api/feedback/stats", params={"owner_id": owner, "min_rating": 5}).json()
    assert top["summary"]["total_count"] == 1
    everything = client.get("/api/feedback/stats", params={"owner_id": owner}).json()
    assert everything["summary"]["total_count"] == 3

    holder = stats_registry.get(owner, min_rating=5)
    original = holder.worker
    holder.worker = _FailingWorker()
    try:
        res = client.get("/api/feedback/stats", params={"owner_id": owner, "min_rating": 5})
    finally:
        holder.worker = original

    body = res.json()
    assert body["stale"] is True
    assert body["summary"] == top["summary"]
    assert body["summary"]["rating_histogram"] == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 1}


def test_stale_fallback_without_prior_summary_is_empty(client, owner):
    _seed(owner, [(1, datetime(2024, 1, 1, 9)), (5, datetime(2024, 1, 2, 9))])
    client.get("/api/feedback/stats", params={"owner_id": owner})

    holder = stats_registry.get(owner, max_rating=2)
    original = holder.worker
    holder.worker = _FailingWorker()
    try:
        body = client.get("/api/feedback/stats", params={"owner_id": owner, "max_rating": 2}).json()
    finally:
        holder.worker = original

    assert body["stale"] is True
    assert body["summary"]["total_count"] == 0
