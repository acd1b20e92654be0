"""Day-bucketed time series built from stargazer events."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Dict, Iterable

from .config import UTC
from .models import StarEvent

DAY_FORMAT = "%Y-%m-%d"

DailySeries = Dict[str, int]


def day_key(moment: datetime) -> str:
    """Return the ``YYYY-MM-DD`` bucket of a timestamp, normalised to UTC."""

    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime(DAY_FORMAT)


def bucket_by_day(events: Iterable[StarEvent]) -> DailySeries:
    """Count events per UTC calendar day."""

    return dict(Counter(day_key(event.occurred_at) for event in events))


def window_after(series: DailySeries, threshold: datetime) -> DailySeries:
    """Return the buckets dated strictly after ``threshold``'s day."""

    cutoff = _to_date(day_key(threshold))
    return {key: count for key, count in series.items() if _to_date(key) > cutoff}


def sorted_days(series: DailySeries) -> list[str]:
    return sorted(series)


def _to_date(key: str) -> date:
    return datetime.strptime(key, DAY_FORMAT).date()


__all__ = ["DailySeries", "DAY_FORMAT", "bucket_by_day", "day_key", "sorted_days", "window_after"]
