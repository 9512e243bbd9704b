"""Schemas for feedback records, submissions and responses.

`FeedbackRecord` is the validated, immutable form of a stored feedback row.
Anything read from storage (ORM rows, CSV imports, worker payloads) becomes a
`FeedbackRecord` through `from_storage`, which is the single place that
accepts legacy field spellings and rejects malformed data.
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from core.exceptions import MalformedRecordError

# legacy camelCase spellings accepted on read, never written
_LEGACY_KEYS = {
    "owner_id": "ownerId",
    "survey_id": "surveyId",
}


def _first_present(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None and key in _LEGACY_KEYS:
        value = data.get(_LEGACY_KEYS[key])
    return value


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def as_utc(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class FeedbackRecord(BaseModel):
    """A validated feedback entry.

    Attributes:
        id: Store-assigned identifier, None before the record is persisted.
        rating: Integer rating in the closed range 1-5.
        comments: Non-empty comment text.
        created_at: Submission time as an aware UTC datetime.
        owner_id: Account the feedback belongs to, used for tenant filtering.
        survey_id: Survey the feedback came from, if any.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    comments: str = Field(..., min_length=1)
    created_at: datetime
    owner_id: Optional[str] = None
    survey_id: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def _reject_bool_rating(cls, value):
        if isinstance(value, bool):
            raise ValueError("rating must be an integer, not a boolean")
        return value

    @field_validator("comments")
    @classmethod
    def _comments_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("comments must not be blank")
        return value

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @classmethod
    def from_storage(cls, data: Mapping[str, Any]) -> "FeedbackRecord":
        """Build a record from raw stored data.

        Accepts `owner_id`/`ownerId` and `survey_id`/`surveyId` (snake_case
        wins when both are set), integer ids, and ISO-8601 strings or
        datetimes for `created_at`.

        Raises:
            MalformedRecordError: If a required field is missing, the rating
                is outside 1-5, or the timestamp cannot be parsed.
        """
        raw_id = data.get("id")
        if isinstance(raw_id, bool):
            raw_id = None
        record_id = str(raw_id) if isinstance(raw_id, (str, int)) else None

        owner_id = _first_present(data, "owner_id")
        survey_id = _first_present(data, "survey_id")

        try:
            return cls(
                id=record_id,
                name=data.get("name"),
                email=data.get("email"),
                rating=data.get("rating"),
                comments=data.get("comments"),
                created_at=data.get("created_at"),
                owner_id=owner_id if isinstance(owner_id, str) else None,
                survey_id=survey_id if isinstance(survey_id, str) else None,
            )
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(loc) for loc in error["loc"])
            raise MalformedRecordError(
                f"Malformed feedback record: {field}: {error['msg']}",
                record_id=record_id,
                field=field,
            )

    def to_storage(self) -> dict:
        """Canonical snake_case mapping of plain primitives."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "rating": self.rating,
            "comments": self.comments,
            "created_at": self.created_at.isoformat(),
            "owner_id": self.owner_id,
            "survey_id": self.survey_id,
        }


class FeedbackCreateRequest(BaseModel):
    """Payload for submitting feedback through the general form or a survey flow."""

    name: Optional[str] = Field(None, examples=["Jane Doe"], description="Submitter name (optional)")
    email: Optional[str] = Field(None, examples=["jane@example.com"], description="Submitter email (optional)")
    rating: int = Field(..., ge=1, le=5, examples=[4], description="Rating from 1 (poor) to 5 (excellent)")
    comments: str = Field(..., min_length=1, examples=["Great service"], description="Feedback comments")
    owner_id: Optional[str] = Field(None, examples=["cafe-42"], description="Business account receiving the feedback")
    survey_id: Optional[str] = Field(None, description="Survey this feedback belongs to (optional)")

    @field_validator("name", "email")
    @classmethod
    def _strip_optional(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("comments")
    @classmethod
    def _strip_comments(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("comments must not be blank")
        return value


class FeedbackResponse(BaseModel):
    """Stored feedback returned by the API."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    rating: int
    comments: str
    created_at: str
    owner_id: Optional[str] = None
    survey_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: FeedbackRecord) -> "FeedbackResponse":
        return cls(**record.to_storage())


class FeedbackListResponse(BaseModel):
    """A filtered page of feedback, newest first."""

    total: int
    items: List[FeedbackResponse]
