"""CSV export endpoints.

Returns feedback or survey responses as downloadable CSV attachments.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core import config
from core.logger import get_logger
from database.deps import get_db_read
from database.feedback_store import FeedbackStore
from database.survey_store import SurveyResponseStore, SurveyStore
from services.csv_exporter import export_feedback_csv, export_filename, export_survey_responses_csv

logger = get_logger("api.export")
router = APIRouter(prefix="/api/export", tags=["export"])


def _csv_attachment(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/feedback")
def export_feedback(
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    max_rating: Optional[int] = Query(None, ge=1, le=5),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    owner_id: Optional[str] = None,
    db: Session = Depends(get_db_read),
):
    """Download the filtered feedback as CSV.

    Raises:
        InsufficientDataError: If no feedback matches the filters.
    """
    records = FeedbackStore(db).list_feedback(
        min_rating=min_rating,
        max_rating=max_rating,
        start_date=start_date,
        end_date=end_date,
        owner_id=owner_id,
        limit=config.STATS_RECORD_LIMIT,
    )
    logger.info("Exporting %s feedback rows for owner=%s", len(records), owner_id)
    return _csv_attachment(export_feedback_csv(records), export_filename("feedback"))


@router.get("/survey-responses")
def export_survey_responses(owner_id: Optional[str] = None, db: Session = Depends(get_db_read)):
    """Download survey responses as CSV, with question titles as headers.

    Raises:
        InsufficientDataError: If there are no responses.
    """
    responses = SurveyResponseStore(db).list_responses(owner_id=owner_id)
    surveys = SurveyStore(db).list_surveys(creator_id=owner_id)
    return _csv_attachment(
        export_survey_responses_csv(responses, surveys),
        export_filename("survey_responses"),
    )
