"""Shared test setup.

Points the application at a throwaway SQLite file before any application
module reads its settings, and provides record and client fixtures.
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="feedback-tests-")
os.environ["WRITE_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ.pop("READ_DATABASE_URL", None)
os.environ["SEED_SAMPLE_DATA"] = "0"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")

import pytest  # noqa: E402

from database import init_db  # noqa: E402
from database.database import WriteSessionLocal  # noqa: E402
from schemas.feedback_schema import FeedbackRecord  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_db():
    """Create the schema once for the whole session."""
    init_db(seed=False)


@pytest.fixture
def db():
    session = WriteSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_record():
    """Factory for valid records; `created_at` accepts an ISO string."""
    counter = {"n": 0}

    def _make(rating=4, created_at="2024-01-01T10:00:00Z", **extra):
        counter["n"] += 1
        fields = dict(
            id=f"r{counter['n']}",
            rating=rating,
            comments=f"comment {counter['n']}",
            created_at=created_at,
        )
        fields.update(extra)
        return FeedbackRecord(**fields)

    return _make


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as test_client:
        yield test_client
