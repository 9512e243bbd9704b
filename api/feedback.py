"""Feedback API router.

Endpoints to submit, list and delete feedback, and to read dashboard
statistics. Statistics are computed on the stats worker; when a refresh
fails, the last good summary for the same filters is returned marked as stale.
"""

import asyncio
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool

from core import config
from core.exceptions import StatsComputationError
from core.logger import get_logger
from database.deps import get_feedback_reader, get_feedback_store
from database.feedback_store import FeedbackStore
from schemas.feedback_schema import FeedbackCreateRequest, FeedbackListResponse, FeedbackResponse
from schemas.stats_schema import StatsResponse
from services.stats_state import stats_registry

logger = get_logger("api.feedback")
router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackResponse, status_code=201)
def submit_feedback(payload: FeedbackCreateRequest, store: FeedbackStore = Depends(get_feedback_store)):
    """Store a new feedback entry stamped with the current UTC time.

    Raises:
        ValidationError: If the entry does not form a valid record.
        DatabaseError: If the insert fails.
    """
    record = store.submit(
        rating=payload.rating,
        comments=payload.comments,
        name=payload.name,
        email=payload.email,
        owner_id=payload.owner_id,
        survey_id=payload.survey_id,
    )
    return FeedbackResponse.from_record(record)


@router.get("", response_model=FeedbackListResponse)
def list_feedback(
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    max_rating: Optional[int] = Query(None, ge=1, le=5),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    owner_id: Optional[str] = None,
    limit: int = Query(config.DEFAULT_FEEDBACK_LIMIT, ge=1, le=1000),
    store: FeedbackStore = Depends(get_feedback_reader),
):
    """Return feedback matching the filters, newest first.

    `total` counts every match; `items` holds at most `limit` of them.
    """
    filters = dict(
        min_rating=min_rating,
        max_rating=max_rating,
        start_date=start_date,
        end_date=end_date,
        owner_id=owner_id,
    )
    records = store.list_feedback(limit=limit, **filters)
    return FeedbackListResponse(
        total=store.count(**filters),
        items=[FeedbackResponse.from_record(r) for r in records],
    )


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    max_rating: Optional[int] = Query(None, ge=1, le=5),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    owner_id: Optional[str] = None,
    store: FeedbackStore = Depends(get_feedback_reader),
):
    """Return totals, rating histogram and daily trend for the filtered feedback.

    The records are loaded off the event loop and aggregated on the stats
    worker. If aggregation fails, the response carries the previous summary for
    the same filters with `stale` set instead of an error status.
    """
    filters = dict(
        min_rating=min_rating,
        max_rating=max_rating,
        start_date=start_date,
        end_date=end_date,
        owner_id=owner_id,
    )
    records = await run_in_threadpool(store.list_feedback, limit=config.STATS_RECORD_LIMIT, **filters)

    holder = stats_registry.get(**filters)
    try:
        summary = await asyncio.wrap_future(holder.refresh(records))
    except StatsComputationError as exc:
        logger.error("Stats refresh failed for owner=%s: %s", owner_id, exc.message)
        return StatsResponse(summary=holder.summary, stale=True, error=exc.message)

    logger.info("Stats computed for owner=%s: %s records", owner_id, summary.total_count)
    return StatsResponse(summary=summary)


@router.get("/{feedback_id}", response_model=FeedbackResponse)
def get_feedback(feedback_id: str, store: FeedbackStore = Depends(get_feedback_reader)):
    """Return one feedback entry.

    Raises:
        NotFoundError: If no feedback has this id.
        MalformedRecordError: If the stored row is not a valid record.
    """
    return FeedbackResponse.from_record(store.get(feedback_id))


@router.delete("/{feedback_id}", status_code=204)
def delete_feedback(feedback_id: str, store: FeedbackStore = Depends(get_feedback_store)):
    """Delete one feedback entry.

    Raises:
        NotFoundError: If no feedback has this id.
    """
    store.delete(feedback_id)
