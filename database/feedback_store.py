"""Feedback persistence.

`FeedbackStore` is the data-access boundary for feedback: every row it hands
out has been validated into a `FeedbackRecord`. Rows that fail validation
are logged and skipped when listing, and raise when fetched by id.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Query, Session

from core import config
from core.exceptions import MalformedRecordError, ValidationError
from core.logger import get_logger
from core.repository import BaseRepository
from database import models
from schemas.feedback_schema import FeedbackRecord, as_utc

logger = get_logger("database.feedback_store")

_COLUMNS = ("id", "name", "email", "rating", "comments", "created_at", "owner_id", "survey_id")


def record_from_row(row: models.Feedback) -> FeedbackRecord:
    """Validate an ORM row into a `FeedbackRecord`.

    Raises:
        MalformedRecordError: If the row does not hold a valid record.
    """
    return FeedbackRecord.from_storage({column: getattr(row, column) for column in _COLUMNS})


def _storage_time(value: datetime) -> datetime:
    # the table holds naive UTC
    return as_utc(value).replace(tzinfo=None)


class FeedbackStore(BaseRepository[models.Feedback]):
    """Reads and writes feedback for one session."""

    resource = "Feedback"

    def __init__(self, session: Session):
        super().__init__(models.Feedback, session)

    def submit(
        self,
        rating: int,
        comments: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        owner_id: Optional[str] = None,
        survey_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> FeedbackRecord:
        """Persist a new feedback entry stamped with the current UTC time.

        Raises:
            ValidationError: If the values do not form a valid record.
            DatabaseError: If the insert fails.
        """
        try:
            record = FeedbackRecord(
                name=name,
                email=email,
                rating=rating,
                comments=comments,
                created_at=created_at or models.utcnow(),
                owner_id=owner_id,
                survey_id=survey_id,
            )
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(loc) for loc in error["loc"])
            raise ValidationError(f"Invalid feedback: {field}: {error['msg']}", field=field)

        row = models.Feedback(
            id=models.new_id(),
            name=record.name,
            email=record.email,
            rating=record.rating,
            comments=record.comments,
            created_at=_storage_time(record.created_at),
            owner_id=record.owner_id,
            survey_id=record.survey_id,
        )
        row = self.create(row)
        logger.info("Feedback %s recorded: owner=%s rating=%s", row.id, row.owner_id, row.rating)
        return record_from_row(row)

    def _filtered(
        self,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        owner_id: Optional[str] = None,
    ) -> Query:
        if min_rating is not None and max_rating is not None and min_rating > max_rating:
            raise ValidationError("min_rating must not exceed max_rating", field="min_rating")
        if start_date is not None and end_date is not None and as_utc(start_date) > as_utc(end_date):
            raise ValidationError("start_date must not be after end_date", field="start_date")

        Feedback = models.Feedback
        query = self.session.query(Feedback)
        if min_rating is not None:
            query = query.filter(Feedback.rating >= min_rating)
        if max_rating is not None:
            query = query.filter(Feedback.rating <= max_rating)
        if start_date is not None:
            query = query.filter(Feedback.created_at >= _storage_time(start_date))
        if end_date is not None:
            query = query.filter(Feedback.created_at <= _storage_time(end_date))
        if owner_id is not None:
            query = query.filter(Feedback.owner_id == owner_id)
        return query

    def list_feedback(
        self,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        owner_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[FeedbackRecord]:
        """Return feedback matching every given filter, newest first.

        Rating and date bounds are inclusive. `limit` defaults to
        `DEFAULT_FEEDBACK_LIMIT`.
        """
        if limit is None:
            limit = config.DEFAULT_FEEDBACK_LIMIT
        rows = (
            self._filtered(min_rating, max_rating, start_date, end_date, owner_id)
            .order_by(models.Feedback.created_at.desc())
            .limit(limit)
            .all()
        )

        records = []
        for row in rows:
            try:
                records.append(record_from_row(row))
            except MalformedRecordError as exc:
                logger.warning("Skipping malformed feedback %s: %s", row.id, exc.message)
        logger.debug("Loaded %s feedback records (owner=%s)", len(records), owner_id)
        return records

    def count(
        self,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        owner_id: Optional[str] = None,
    ) -> int:
        """Count stored feedback matching the filters, without a limit."""
        return self._filtered(min_rating, max_rating, start_date, end_date, owner_id).count()

    def get(self, feedback_id: str) -> FeedbackRecord:
        return record_from_row(self.get_or_404(feedback_id))

    def delete(self, feedback_id: str) -> None:
        self.delete_by_id(feedback_id)
        logger.info("Feedback %s deleted", feedback_id)
