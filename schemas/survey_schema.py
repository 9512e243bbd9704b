"""Schemas for surveys, questions and survey responses."""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

# keys that describe a response rather than answer a question
RESPONSE_METADATA_FIELDS = {
    "id", "submittedAt", "submitted_at", "ownerId", "owner_id",
    "surveyId", "survey_id", "userName", "user_name", "userEmail", "user_email", "answers",
}


class QuestionType(str, Enum):
    """Kind of answer a question expects."""

    TEXT = "text"
    RATING = "rating"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"


_LEGACY_QUESTION_TYPES = {
    "singleChoice": QuestionType.SINGLE_CHOICE,
    "multipleChoice": QuestionType.MULTIPLE_CHOICE,
}


class Question(BaseModel):
    """A single survey question. Unknown types are read as free text."""

    id: str = Field(..., min_length=1, examples=["q1"])
    title: str = Field("", examples=["How was the food?"])
    type: QuestionType = QuestionType.TEXT
    options: List[str] = Field(default_factory=list, description="Choices for single/multiple choice questions")

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        if isinstance(value, QuestionType):
            return value
        if value in _LEGACY_QUESTION_TYPES:
            return _LEGACY_QUESTION_TYPES[value]
        try:
            return QuestionType(value)
        except ValueError:
            return QuestionType.TEXT

    @field_validator("options", mode="before")
    @classmethod
    def _none_options(cls, value):
        return [] if value is None else value


class SurveyRequest(BaseModel):
    """Payload for creating or replacing a survey."""

    title: str = Field("Untitled Survey", examples=["Lunch menu survey"])
    is_active: bool = False
    creator_id: Optional[str] = Field(None, examples=["cafe-42"])
    questions: List[Question] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _default_title(cls, value: str) -> str:
        return value.strip() or "Untitled Survey"


class SurveyResponse(BaseModel):
    """Stored survey returned by the API."""

    id: str
    title: str
    is_active: bool
    creator_id: Optional[str] = None
    questions: List[Question]
    created_at: str


class SurveyAnswersRequest(BaseModel):
    """Answers to a survey, keyed by question id."""

    answers: Dict[str, Any] = Field(..., examples=[{"q1": 5, "q2": "More vegan options"}])
    owner_id: Optional[str] = None
    survey_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None

    @field_validator("answers")
    @classmethod
    def _at_least_one_answer(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if not value:
            raise ValueError("Please answer at least one question")
        return value


class SurveyAnswersResponse(BaseModel):
    """Stored survey response returned by the API."""

    id: str
    answers: Dict[str, Any]
    owner_id: Optional[str] = None
    survey_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    submitted_at: str


def extract_answers(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the answers of a stored response.

    Answers are normally wrapped under ``answers``; older responses spread
    them across the top level next to the metadata fields.
    """
    wrapped = data.get("answers")
    if isinstance(wrapped, Mapping):
        return {str(key): value for key, value in wrapped.items()}
    return {
        str(key): value
        for key, value in data.items()
        if key not in RESPONSE_METADATA_FIELDS
    }
