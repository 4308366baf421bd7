from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .journal import EntryModel
from .results import Failure


class TimelinePoint(BaseModel):
    date: str
    average_score: float
    entry_count: int = Field(..., ge=1)


class AnalyticsStats(BaseModel):
    total_entries: int
    average_score: float
    most_frequent_mood: str | None
    daily_average: float


class AnalyticsData(BaseModel):
    timeline: list[TimelinePoint]
    stats: AnalyticsStats
    entries: list[EntryModel]


class AnalyticsSuccess(BaseModel):
    success: Literal[True] = True
    data: AnalyticsData


AnalyticsResult = AnalyticsSuccess | Failure


class AnalyticsQuery(BaseModel):
    period: str = "30d"
