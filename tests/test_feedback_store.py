"""Tests for feedback persistence and filtering."""
import uuid
from datetime import datetime, timezone

import pytest

from core.exceptions import NotFoundError, ValidationError, MalformedRecordError
from database import models
from database.feedback_store import FeedbackStore


@pytest.fixture
def owner():
    return f"owner-{uuid.uuid4().hex[:8]}"


@pytest.fixture
def store(db):
    return FeedbackStore(db)


def _seed(store, owner):
    rows = [
        (5, datetime(2024, 1, 1, 9, 0)),
        (3, datetime(2024, 1, 2, 9, 0)),
        (1, datetime(2024, 1, 3, 9, 0)),
        (4, datetime(2024, 1, 4, 9, 0)),
    ]
    return [
        store.submit(rating=rating, comments=f"rated {rating}", owner_id=owner, created_at=when)
        for rating, when in rows
    ]


def test_submit_assigns_id_and_utc_timestamp(store, owner):
    record = store.submit(rating=4, comments="Nice", owner_id=owner)
    assert record.id
    assert record.created_at.tzinfo is not None
    assert store.get(record.id) == record


def test_submit_rejects_invalid_rating(store, owner):
    with pytest.raises(ValidationError) as exc_info:
        store.submit(rating=7, comments="Too good", owner_id=owner)
    assert exc_info.value.details["field"] == "rating"


def test_list_is_newest_first_and_owner_scoped(store, owner):
    _seed(store, owner)
    store.submit(rating=2, comments="someone else", owner_id=f"{owner}-other")

    records = store.list_feedback(owner_id=owner)
    assert [r.rating for r in records] == [4, 1, 3, 5]
    assert all(r.owner_id == owner for r in records)


def test_rating_range_is_inclusive(store, owner):
    _seed(store, owner)
    records = store.list_feedback(owner_id=owner, min_rating=3, max_rating=4)
    assert sorted(r.rating for r in records) == [3, 4]


def test_date_range_is_inclusive_and_accepts_aware_datetimes(store, owner):
    _seed(store, owner)
    records = store.list_feedback(
        owner_id=owner,
        start_date=datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc),
        end_date=datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc),
    )
    assert sorted(r.rating for r in records) == [1, 3]


def test_limit_and_count(store, owner):
    _seed(store, owner)
    assert len(store.list_feedback(owner_id=owner, limit=2)) == 2
    assert store.count(owner_id=owner) == 4
    assert store.count(owner_id=owner, min_rating=4) == 2


def test_inverted_ranges_are_rejected(store, owner):
    with pytest.raises(ValidationError):
        store.list_feedback(owner_id=owner, min_rating=5, max_rating=1)
    with pytest.raises(ValidationError):
        store.list_feedback(owner_id=owner, start_date=datetime(2024, 2, 1), end_date=datetime(2024, 1, 1))


def test_malformed_rows_are_skipped_when_listing(store, db, owner):
    _seed(store, owner)
    db.add(models.Feedback(id=models.new_id(), rating=9, comments="bad", owner_id=owner,
                           created_at=datetime(2024, 1, 5)))
    db.commit()

    records = store.list_feedback(owner_id=owner)
    assert len(records) == 4
    assert all(1 <= r.rating <= 5 for r in records)


def test_malformed_row_raises_when_fetched(store, db, owner):
    bad_id = models.new_id()
    db.add(models.Feedback(id=bad_id, rating=0, comments="bad", owner_id=owner,
                           created_at=datetime(2024, 1, 5)))
    db.commit()
    with pytest.raises(MalformedRecordError):
        store.get(bad_id)


def test_delete(store, owner):
    record = store.submit(rating=3, comments="Delete me", owner_id=owner)
    store.delete(record.id)
    with pytest.raises(NotFoundError):
        store.get(record.id)
    with pytest.raises(NotFoundError):
        store.delete(record.id)
