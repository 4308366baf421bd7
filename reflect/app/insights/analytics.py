from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..metrics import ANALYTICS_RESULTS
from ..schemas.analytics import (
    AnalyticsData,
    AnalyticsResult,
    AnalyticsStats,
    AnalyticsSuccess,
    TimelinePoint,
)
from ..schemas.journal import EntryModel
from ..schemas.results import Failure
from ..services.storage import StorageService

logger = logging.getLogger(__name__)

PERIOD_DAYS: dict[str, int] = {"7d": 7, "15d": 15, "30d": 30}
DEFAULT_WINDOW_DAYS = 30

_ONE_DECIMAL = Decimal("0.1")


def resolve_window_days(period: str | None) -> int:
    """Map a period code to its day count; unknown codes get the default window."""

    if period is None:
        return DEFAULT_WINDOW_DAYS
    return PERIOD_DAYS.get(period, DEFAULT_WINDOW_DAYS)


def round_one(value: float) -> float:
    """Round half away from zero to one decimal, on the shortest repr of ``value``."""

    return float(Decimal(repr(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def safe_average(total: float, count: int) -> float:
    if not count:
        return 0
    return round_one(total / count)


def entry_day(created_at: datetime) -> str:
    # Naive timestamps are stored in UTC.
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(UTC)
    return created_at.date().isoformat()


@dataclass
class DayBucket:
    total_score: float = 0
    count: int = 0


def bucket_by_day(entries: Iterable[Any]) -> dict[str, DayBucket]:
    buckets: dict[str, DayBucket] = {}
    for entry in entries:
        bucket = buckets.setdefault(entry_day(entry.created_at), DayBucket())
        bucket.total_score += entry.mood_score
        bucket.count += 1
    return buckets


def build_timeline(buckets: dict[str, DayBucket]) -> list[dict[str, object]]:
    return [
        {
            "date": day,
            "average_score": safe_average(bucket.total_score, bucket.count),
            "entry_count": bucket.count,
        }
        for day, bucket in buckets.items()
    ]


def most_frequent_mood(entries: Iterable[Any]) -> str | None:
    counter = Counter(entry.mood for entry in entries)
    # Ties keep first-encountered order.
    top = counter.most_common(1)
    return top[0][0] if top else None


def summarize(entries: Sequence[Any], days: int) -> dict[str, object]:
    total_entries = len(entries)
    total_score = sum(entry.mood_score for entry in entries)
    return {
        "total_entries": total_entries,
        "average_score": safe_average(total_score, total_entries),
        "most_frequent_mood": most_frequent_mood(entries),
        "daily_average": round_one(total_entries / days) if days else 0,
    }


def aggregate_entries(entries: Sequence[Any], days: int) -> dict[str, object]:
    return {
        "timeline": build_timeline(bucket_by_day(entries)),
        "stats": summarize(entries, days),
    }


class MoodAnalyticsEngine:
    """Recompute mood analytics for one user over a trailing window."""

    def __init__(
        self,
        storage: StorageService,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._storage = storage
        self._clock = clock or datetime.utcnow

    async def compute(self, external_id: str, period: str | None = None) -> AnalyticsResult:
        days = resolve_window_days(period)
        now = self._clock()
        since = now - timedelta(days=days)

        try:
            user = await self._storage.get_user_by_external_id(external_id)
            if user is None:
                ANALYTICS_RESULTS.labels(result="user_missing").inc()
                return Failure(error="User not found")
            entries = await self._storage.entries_since(user_id=user.id, since=since)
        except SQLAlchemyError as exc:
            logger.error("Error generating analytics: %s", exc)
            ANALYTICS_RESULTS.labels(result="error").inc()
            return Failure(error=str(exc))

        aggregate = aggregate_entries(entries, days)
        ANALYTICS_RESULTS.labels(result="ok").inc()
        return AnalyticsSuccess(
            data=AnalyticsData(
                timeline=[TimelinePoint.model_validate(p) for p in aggregate["timeline"]],
                stats=AnalyticsStats.model_validate(aggregate["stats"]),
                entries=[EntryModel.model_validate(e, from_attributes=True) for e in entries],
            )
        )


__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "DayBucket",
    "MoodAnalyticsEngine",
    "PERIOD_DAYS",
    "aggregate_entries",
    "bucket_by_day",
    "build_timeline",
    "entry_day",
    "most_frequent_mood",
    "resolve_window_days",
    "round_one",
    "summarize",
]
