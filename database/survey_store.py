"""Survey and survey-response persistence.

Questions and answers are stored as JSON text on the row and decoded into
schema objects on the way out.
"""

import json
from typing import Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from core.exceptions import MalformedRecordError
from core.logger import get_logger
from core.repository import BaseRepository
from database import models
from schemas.survey_schema import (
    Question,
    SurveyAnswersRequest,
    SurveyAnswersResponse,
    SurveyRequest,
    SurveyResponse,
    extract_answers,
)

logger = get_logger("database.survey_store")


def survey_from_row(row: models.Survey) -> SurveyResponse:
    """Decode an ORM row into a `SurveyResponse`.

    Raises:
        MalformedRecordError: If a stored question does not validate.
    """
    try:
        raw_questions = json.loads(row.questions or "[]")
    except ValueError:
        logger.warning("Survey %s has unreadable questions, treating as empty", row.id)
        raw_questions = []
    try:
        questions = [Question.model_validate(q) for q in raw_questions if isinstance(q, dict)]
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(loc) for loc in error["loc"])
        raise MalformedRecordError(
            f"Malformed survey question: {field}: {error['msg']}",
            record_id=row.id,
            field=field,
        )
    return SurveyResponse(
        id=row.id,
        title=row.title or "Untitled Survey",
        is_active=bool(row.is_active),
        creator_id=row.creator_id,
        questions=questions,
        created_at=row.created_at.isoformat(),
    )


def _decodable(rows: Iterable[models.Survey]) -> List[SurveyResponse]:
    surveys = []
    for row in rows:
        try:
            surveys.append(survey_from_row(row))
        except MalformedRecordError as exc:
            logger.warning("Skipping malformed survey %s: %s", row.id, exc.message)
    return surveys


def response_from_row(row: models.SurveyResponse) -> SurveyAnswersResponse:
    try:
        stored = json.loads(row.answers or "{}")
    except ValueError:
        logger.warning("Survey response %s has unreadable answers, treating as empty", row.id)
        stored = {}
    return SurveyAnswersResponse(
        id=row.id,
        answers=extract_answers(stored) if isinstance(stored, dict) else {},
        owner_id=row.owner_id,
        survey_id=row.survey_id,
        user_name=row.user_name,
        user_email=row.user_email,
        submitted_at=row.submitted_at.isoformat(),
    )


def _dump_questions(questions: List[Question]) -> str:
    return json.dumps([q.model_dump(mode="json") for q in questions])


class SurveyStore(BaseRepository[models.Survey]):
    """Survey definitions. Each creator has at most one active survey."""

    resource = "Survey"

    def __init__(self, session: Session):
        super().__init__(models.Survey, session)

    def list_surveys(self, creator_id: Optional[str] = None) -> List[SurveyResponse]:
        query = self.session.query(models.Survey)
        if creator_id is not None:
            query = query.filter(models.Survey.creator_id == creator_id)
        rows = query.order_by(models.Survey.created_at.desc()).all()
        return _decodable(rows)

    def get(self, survey_id: str) -> SurveyResponse:
        return survey_from_row(self.get_or_404(survey_id))

    def save(self, payload: SurveyRequest, survey_id: Optional[str] = None) -> SurveyResponse:
        """Create a survey, or replace the one with `survey_id`.

        Saving a survey as active deactivates the creator's other surveys.
        """
        row = self.get_by_id(survey_id) if survey_id else None
        if row is None:
            row = models.Survey(id=survey_id or models.new_id())
            self.session.add(row)

        row.title = payload.title
        row.creator_id = payload.creator_id
        row.questions = _dump_questions(payload.questions)
        row.is_active = payload.is_active
        if payload.is_active:
            self._deactivate_others(row)

        row = self.update(row)
        logger.info("Survey %s saved (%s questions)", row.id, len(payload.questions))
        return survey_from_row(row)

    def delete(self, survey_id: str) -> None:
        self.delete_by_id(survey_id)
        logger.info("Survey %s deleted", survey_id)

    def toggle_active(self, survey_id: str) -> SurveyResponse:
        """Flip the active flag of a survey.

        Activating a survey deactivates every other survey of the same
        creator; toggling the active survey leaves the creator with none.
        """
        row = self.get_or_404(survey_id)
        row.is_active = not row.is_active
        if row.is_active:
            self._deactivate_others(row)
        row = self.update(row)
        logger.info("Survey %s is_active=%s", row.id, row.is_active)
        return survey_from_row(row)

    def get_active(self, creator_id: Optional[str] = None) -> Optional[SurveyResponse]:
        query = self.session.query(models.Survey).filter(models.Survey.is_active.is_(True))
        if creator_id is not None:
            query = query.filter(models.Survey.creator_id == creator_id)
        active = _decodable(query.order_by(models.Survey.created_at.desc()).all())
        return active[0] if active else None

    def _deactivate_others(self, row: models.Survey) -> None:
        others = self.session.query(models.Survey).filter(
            models.Survey.id != row.id,
            models.Survey.is_active.is_(True),
        )
        if row.creator_id is None:
            others = others.filter(models.Survey.creator_id.is_(None))
        else:
            others = others.filter(models.Survey.creator_id == row.creator_id)
        for other in others.all():
            other.is_active = False


class SurveyResponseStore(BaseRepository[models.SurveyResponse]):
    """Submitted survey answers."""

    resource = "SurveyResponse"

    def __init__(self, session: Session):
        super().__init__(models.SurveyResponse, session)

    def submit(self, payload: SurveyAnswersRequest) -> SurveyAnswersResponse:
        row = models.SurveyResponse(
            id=models.new_id(),
            owner_id=payload.owner_id,
            survey_id=payload.survey_id,
            user_name=payload.user_name,
            user_email=payload.user_email,
            answers=json.dumps({"answers": payload.answers}),
        )
        row = self.create(row)
        logger.info("Survey response %s recorded (owner=%s, %s answers)",
                    row.id, row.owner_id, len(payload.answers))
        return response_from_row(row)

    def list_responses(self, owner_id: Optional[str] = None) -> List[SurveyAnswersResponse]:
        query = self.session.query(models.SurveyResponse)
        if owner_id is not None:
            query = query.filter(models.SurveyResponse.owner_id == owner_id)
        rows = query.order_by(models.SurveyResponse.submitted_at.desc()).all()
        return [response_from_row(row) for row in rows]

    def delete(self, response_id: str) -> None:
        self.delete_by_id(response_id)
        logger.info("Survey response %s deleted", response_id)
