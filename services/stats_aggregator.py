"""Feedback statistics aggregation.

`calculate_stats` turns a list of feedback records into totals, a rating
histogram and a per-day trend series. It is a pure function with no I/O, so
it can run on any worker. The encode/decode helpers convert records and
summaries to plain dicts for crossing a worker boundary, and
`calculate_stats_payload` is the picklable entry point run on the worker.
"""

from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Sequence

from schemas.feedback_schema import FeedbackRecord
from schemas.stats_schema import RATING_VALUES, StatsSummary, TrendEntry


def _day_key(record: FeedbackRecord) -> str:
    # created_at is UTC by construction
    return record.created_at.date().isoformat()


def calculate_stats(records: Sequence[FeedbackRecord]) -> StatsSummary:
    """Aggregate feedback into a `StatsSummary`.

    Args:
        records: Validated feedback in any order; may be empty.

    Returns:
        Summary with total count, mean rating (0.0 when empty), a histogram
        keyed 1-5 and one trend entry per UTC day sorted by date.
    """
    total = len(records)
    average = sum(r.rating for r in records) / total if total else 0.0

    counts = Counter(r.rating for r in records)
    histogram = {rating: counts.get(rating, 0) for rating in RATING_VALUES}

    by_day: Dict[str, List[int]] = defaultdict(list)
    for record in records:
        by_day[_day_key(record)].append(record.rating)

    trend = [
        TrendEntry(date=day, count=len(ratings), average_rating=sum(ratings) / len(ratings))
        for day, ratings in sorted(by_day.items())
    ]

    return StatsSummary(
        total_count=total,
        average_rating=average,
        rating_histogram=histogram,
        daily_trend=trend,
    )


def encode_records(records: Iterable[FeedbackRecord]) -> List[dict]:
    return [record.to_storage() for record in records]


def decode_records(payload: Iterable[dict]) -> List[FeedbackRecord]:
    return [FeedbackRecord.from_storage(item) for item in payload]


def encode_summary(summary: StatsSummary) -> dict:
    """Plain-dict form of a summary; histogram keys stay integers."""
    return {
        "total_count": summary.total_count,
        "average_rating": summary.average_rating,
        "rating_histogram": dict(summary.rating_histogram),
        "daily_trend": [entry.model_dump() for entry in summary.daily_trend],
    }


def decode_summary(payload: dict) -> StatsSummary:
    return StatsSummary.model_validate(payload)


def calculate_stats_payload(payload: List[dict]) -> dict:
    """Worker entry point: decode records, aggregate, encode the summary."""
    return encode_summary(calculate_stats(decode_records(payload)))
