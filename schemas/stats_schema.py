"""Schemas for dashboard statistics."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

RATING_VALUES = (1, 2, 3, 4, 5)


def empty_histogram() -> Dict[int, int]:
    return {rating: 0 for rating in RATING_VALUES}


class TrendEntry(BaseModel):
    """One UTC calendar day of feedback."""

    model_config = ConfigDict(frozen=True)

    date: str = Field(..., examples=["2024-01-01"], description="UTC calendar day, YYYY-MM-DD")
    count: int
    average_rating: float


class StatsSummary(BaseModel):
    """Totals, rating histogram and daily trend derived from a set of feedback."""

    model_config = ConfigDict(frozen=True)

    total_count: int = 0
    average_rating: float = 0.0
    rating_histogram: Dict[int, int] = Field(default_factory=empty_histogram)
    daily_trend: List[TrendEntry] = Field(default_factory=list)


class StatsResponse(BaseModel):
    """Statistics for the dashboard.

    When a refresh fails, `summary` holds the last good result, `stale` is
    true and `error` carries the failure message.
    """

    summary: StatsSummary
    stale: bool = False
    error: Optional[str] = None
