"""FastAPI dependencies for database sessions and stores.

`get_db_write` / `get_db_read` yield sessions; the store helpers wrap a
session in the matching store so routes depend on stores directly.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_read_session, get_write_session
from .feedback_store import FeedbackStore
from .menu_store import MenuStore
from .survey_store import SurveyStore, SurveyResponseStore


def get_db_write():
    """Yield a write-capable DB session for FastAPI dependency injection."""
    yield from get_write_session()


def get_db_read():
    """Yield a read-only DB session for FastAPI dependency injection."""
    yield from get_read_session()


def get_feedback_store(db: Session = Depends(get_db_write)) -> FeedbackStore:
    return FeedbackStore(db)


def get_feedback_reader(db: Session = Depends(get_db_read)) -> FeedbackStore:
    return FeedbackStore(db)


def get_survey_store(db: Session = Depends(get_db_write)) -> SurveyStore:
    return SurveyStore(db)


def get_response_store(db: Session = Depends(get_db_write)) -> SurveyResponseStore:
    return SurveyResponseStore(db)


def get_menu_store(db: Session = Depends(get_db_write)) -> MenuStore:
    return MenuStore(db)


def get_menu_reader(db: Session = Depends(get_db_read)) -> MenuStore:
    return MenuStore(db)
