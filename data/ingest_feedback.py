"""Import feedback from CSV files into the application's database.

This module provides:
- parse_feedback_csv(csv_path): returns a list of validated `FeedbackRecord`
- seed_feedback_from_csv(csv_path, session): idempotently seeds the feedback table

Expected columns are `rating`, `comments` and `created_at`; `id`, `name`,
`email`, `owner_id` and `survey_id` are optional. Exports from older app
versions use `ownerId`/`surveyId`, `Date Created` and capitalised headers,
which are accepted too. Rows that do not validate are skipped with a warning.
"""
from __future__ import annotations

import math
from typing import Dict, List

import pandas as pd

from core.exceptions import MalformedRecordError
from core.logger import get_logger
from database.database import WriteSessionLocal
from database import models
from schemas.feedback_schema import FeedbackRecord, as_utc

logger = get_logger("data.ingest_feedback")

COLUMN_ALIASES = {
    "date created": "created_at",
    "createdat": "created_at",
    "created_at": "created_at",
    "ownerid": "ownerId",
    "owner_id": "owner_id",
    "surveyid": "surveyId",
    "survey_id": "survey_id",
}


def _normalize_column(name: str) -> str:
    key = name.strip()
    return COLUMN_ALIASES.get(key.lower(), key.lower())


def _clean(value):
    """Map pandas missing values to None and numpy scalars to Python ones."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value


def _row_to_mapping(row: pd.Series) -> Dict:
    data = {key: _clean(value) for key, value in row.items()}
    rating = data.get("rating")
    if isinstance(rating, float) and rating.is_integer():
        data["rating"] = int(rating)
    if data.get("name") == "Anonymous":
        data["name"] = None
    return data


def parse_feedback_csv(csv_path: str) -> List[FeedbackRecord]:
    """Parse a feedback CSV into validated records.

    Args:
        csv_path: Path to the CSV file.

    Returns:
        Records for every row that validated; invalid rows are logged and skipped.
    """
    logger.info("Parsing feedback CSV: %s", csv_path)
    df = pd.read_csv(csv_path, encoding="utf-8", engine="python", dtype={"id": str, "ID": str})
    df = df.rename(columns=_normalize_column)

    records = []
    for index, row in df.iterrows():
        try:
            records.append(FeedbackRecord.from_storage(_row_to_mapping(row)))
        except MalformedRecordError as exc:
            logger.warning("Skipping CSV row %s: %s", index + 2, exc.message)

    logger.info("Parsed %s feedback records from CSV", len(records))
    return records


def seed_feedback_from_csv(csv_path: str, session=None) -> int:
    """Idempotently seed the feedback table from a CSV file.

    Rows with an `id` already in the table are skipped; rows without an id
    get a new one and are matched on (owner, timestamp, comments) instead.

    Args:
        csv_path: Path to the CSV file.
        session: Optional SQLAlchemy session. If None, creates a new one.

    Returns:
        Number of rows added.
    """
    close_session = False
    if session is None:
        session = WriteSessionLocal()
        close_session = True
    try:
        added = 0
        for record in parse_feedback_csv(csv_path):
            created_at = as_utc(record.created_at).replace(tzinfo=None)
            if record.id is not None:
                existing = session.get(models.Feedback, record.id)
            else:
                existing = (
                    session.query(models.Feedback)
                    .filter(
                        models.Feedback.owner_id == record.owner_id,
                        models.Feedback.created_at == created_at,
                        models.Feedback.comments == record.comments,
                    )
                    .first()
                )
            if existing:
                continue
            session.add(models.Feedback(
                id=record.id or models.new_id(),
                name=record.name,
                email=record.email,
                rating=record.rating,
                comments=record.comments,
                created_at=created_at,
                owner_id=record.owner_id,
                survey_id=record.survey_id,
            ))
            session.flush()
            added += 1
        if added:
            session.commit()
        logger.info("Seeded %s new feedback rows into DB", added)
        return added
    finally:
        if close_session:
            session.close()


if __name__ == "__main__":
    import argparse

    p = argparse.ArgumentParser("Seed feedback from CSV into the DB")
    p.add_argument("csv_path", nargs="?", default="data/fixtures/feedback_export.csv")
    args = p.parse_args()
    seed_feedback_from_csv(args.csv_path)
    print("Done")
