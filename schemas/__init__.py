"""Pydantic schema package for records, requests and responses."""

from .feedback_schema import FeedbackRecord, FeedbackCreateRequest, FeedbackResponse, FeedbackListResponse
from .stats_schema import StatsSummary, TrendEntry, StatsResponse
from .survey_schema import Question, QuestionType, SurveyRequest, SurveyResponse
from .menu_schema import MenuDish, MenuSectionRequest, MenuSectionResponse

__all__ = [
    "FeedbackRecord",
    "FeedbackCreateRequest",
    "FeedbackResponse",
    "FeedbackListResponse",
    "StatsSummary",
    "TrendEntry",
    "StatsResponse",
    "Question",
    "QuestionType",
    "SurveyRequest",
    "SurveyResponse",
    "MenuDish",
    "MenuSectionRequest",
    "MenuSectionResponse",
]
