"""SQLAlchemy ORM models for the feedback collection service.

Defines the storage schema: Feedback, Survey, SurveyResponse and
MenuSection. Models stay behavior-free; conversion into validated records
happens in `schemas`. Timestamps are stored as naive UTC datetimes. Survey
questions, survey answers and menu dishes are stored as JSON-encoded text.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    """Return a fresh opaque string identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the storage convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Feedback(Base):
    """One submitted rating-plus-comment entry."""

    __tablename__ = "feedback"
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    rating = Column(Integer, nullable=False)  # 1-5
    comments = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    owner_id = Column(String, nullable=True, index=True)
    survey_id = Column(String, nullable=True)


class Survey(Base):
    """A survey definition owned by a creator; at most one active per creator."""

    __tablename__ = "surveys"
    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False, default="Untitled Survey")
    is_active = Column(Boolean, nullable=False, default=False)
    creator_id = Column(String, nullable=True, index=True)
    questions = Column(Text, nullable=False, default="[]")
    created_at = Column(DateTime, nullable=False, default=utcnow)


class SurveyResponse(Base):
    """A submitted set of answers keyed by question id."""

    __tablename__ = "survey_responses"
    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(String, nullable=True, index=True)
    survey_id = Column(String, nullable=True)
    user_name = Column(String, nullable=True)
    user_email = Column(String, nullable=True)
    answers = Column(Text, nullable=False, default="{}")
    submitted_at = Column(DateTime, nullable=False, default=utcnow)


class MenuSection(Base):
    """A titled menu section with an ordered list of dishes stored as JSON text."""

    __tablename__ = "menu_sections"
    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False, default="Untitled Menu")
    description = Column(Text, nullable=False, default="")
    dishes = Column(Text, nullable=False, default="[]")
    is_active = Column(Boolean, nullable=False, default=False)
    owner_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
