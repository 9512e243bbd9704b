"""Test error handling functionality.

Verifies that custom exceptions are properly raised and handled,
returning appropriate error responses.
"""
import json

import pytest
from database.database import ReadSessionLocal, WriteSessionLocal
from database.feedback_store import FeedbackStore
from database.survey_store import SurveyStore
from core.error_handlers import create_error_response
from core.exceptions import (
    InsufficientDataError,
    MalformedRecordError,
    NotFoundError,
    StatsComputationError,
    ValidationError,
)
from api.feedback import delete_feedback, get_feedback
from api.surveys import toggle_survey_active


def test_feedback_not_found_raises_404():
    """Test that deleting non-existent feedback raises NotFoundError."""
    db = WriteSessionLocal()
    try:
        with pytest.raises(NotFoundError) as exc_info:
            delete_feedback(feedback_id="does-not-exist", store=FeedbackStore(db))
        assert "Feedback" in str(exc_info.value.message)
        assert exc_info.value.status_code == 404
    finally:
        db.close()


def test_survey_not_found_raises_404():
    """Test that toggling a non-existent survey raises NotFoundError."""
    db = WriteSessionLocal()
    try:
        with pytest.raises(NotFoundError) as exc_info:
            toggle_survey_active(survey_id="does-not-exist", store=SurveyStore(db))
        assert "Survey" in str(exc_info.value.message)
    finally:
        db.close()


def test_get_feedback_unknown_id_raises_404():
    db = ReadSessionLocal()
    try:
        with pytest.raises(NotFoundError):
            get_feedback(feedback_id="missing", store=FeedbackStore(db))
    finally:
        db.close()


def test_exception_classes_have_proper_attributes():
    """Test that custom exception classes have expected attributes."""
    # Test NotFoundError
    exc = NotFoundError("Feedback", "abc123")
    assert exc.status_code == 404
    assert "Feedback" in exc.message
    assert "abc123" in exc.message

    # Test ValidationError
    exc = ValidationError("Invalid input", field="rating")
    assert exc.status_code == 400
    assert exc.message == "Invalid input"
    assert exc.details == {"field": "rating"}

    # Test MalformedRecordError
    exc = MalformedRecordError("bad rating", record_id="r1", field="rating")
    assert exc.status_code == 422
    assert exc.details == {"record_id": "r1", "field": "rating"}

    # Test StatsComputationError
    exc = StatsComputationError("Statistics computation failed", cause="boom")
    assert exc.status_code == 503
    assert exc.details == {"cause": "boom"}

    exc = InsufficientDataError("Nothing to export")
    assert exc.details == {}
    assert exc.status_code == 400


def test_error_envelope():
    res = create_error_response("Feedback with id 'x' not found", 404, details={"id": "x"}, request_id="req-1")
    body = json.loads(res.body)
    assert res.status_code == 404
    assert body == {"error": {
        "message": "Feedback with id 'x' not found",
        "status_code": 404,
        "details": {"id": "x"},
        "request_id": "req-1",
    }}


def test_error_envelope_echoes_request_id(client):
    res = client.get("/api/feedback/missing", headers={"X-Request-ID": "abc"})
    assert res.status_code == 404
    assert res.json()["error"]["request_id"] == "abc"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
