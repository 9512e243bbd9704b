"""CSV export of feedback and survey responses.

Builds pandas DataFrames with human-readable headers and renders them to CSV
text; quoting of commas, quotes and newlines is left to pandas.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from core.exceptions import InsufficientDataError
from core.logger import get_logger
from schemas.feedback_schema import FeedbackRecord
from schemas.survey_schema import SurveyAnswersResponse, SurveyResponse

logger = get_logger("services.csv_exporter")

FEEDBACK_COLUMNS = ["ID", "Name", "Email", "Rating", "Comments", "Date Created"]
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def export_filename(kind: str, now: datetime = None) -> str:
    """File name such as ``feedback_20240101_103000.csv``."""
    now = now or datetime.now()
    return f"{kind}_{now.strftime('%Y%m%d_%H%M%S')}.csv"


def feedback_frame(records: Sequence[FeedbackRecord]) -> pd.DataFrame:
    rows = [
        {
            "ID": record.id or "",
            "Name": record.name or "Anonymous",
            "Email": record.email or "",
            "Rating": record.rating,
            "Comments": record.comments,
            "Date Created": record.created_at.strftime(DATE_FORMAT),
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=FEEDBACK_COLUMNS)


def export_feedback_csv(records: Sequence[FeedbackRecord]) -> str:
    """Render feedback as CSV text.

    Raises:
        InsufficientDataError: If there is nothing to export.
    """
    if not records:
        raise InsufficientDataError("No feedback data to export")
    csv_text = feedback_frame(records).to_csv(index=False)
    logger.info("Exported %s feedback rows", len(records))
    return csv_text


def _question_titles(surveys: Iterable[SurveyResponse]) -> Dict[str, str]:
    titles = {}
    for survey in surveys:
        for question in survey.questions:
            titles[question.id] = question.title or question.id
    return titles


def _format_answer(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value)
    return str(value)


def survey_responses_frame(
    responses: Sequence[SurveyAnswersResponse],
    surveys: Iterable[SurveyResponse],
) -> pd.DataFrame:
    """One row per response, one column per question id seen in any response.

    Question columns keep first-seen order and are headed by the question
    title when a survey defines it, otherwise by the raw id.
    """
    titles = _question_titles(surveys)

    question_ids: List[str] = []
    for response in responses:
        for question_id in response.answers:
            if question_id not in question_ids:
                question_ids.append(question_id)

    rows = []
    for response in responses:
        row = {
            "Response ID": response.id,
            "Submitted Date": datetime.fromisoformat(response.submitted_at).strftime(DATE_FORMAT),
        }
        for question_id in question_ids:
            row[question_id] = _format_answer(response.answers.get(question_id))
        rows.append(row)

    frame = pd.DataFrame(rows, columns=["Response ID", "Submitted Date"] + question_ids)
    # titles may repeat; rows are keyed by question id
    frame.columns = ["Response ID", "Submitted Date"] + [titles.get(q, q) for q in question_ids]
    return frame


def export_survey_responses_csv(
    responses: Sequence[SurveyAnswersResponse],
    surveys: Iterable[SurveyResponse],
) -> str:
    """Render survey responses as CSV text.

    Raises:
        InsufficientDataError: If there are no responses.
    """
    if not responses:
        raise InsufficientDataError("No survey responses to export")
    csv_text = survey_responses_frame(responses, surveys).to_csv(index=False)
    logger.info("Exported %s survey responses", len(responses))
    return csv_text
