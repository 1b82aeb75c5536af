"""Weekly performance trends.

Weeks are keyed ``"{year}-W{month}-{week_of_month}"`` with
``week_of_month = ceil(day / 7)``, so the index restarts every calendar month.
Keys are sorted as plain strings. Records are bucketed by their calendar date
in the timezone passed as ``tz``, or in UTC when none is given.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from ..normalization import as_record_tuple, parse_timestamp
from .metrics import calculate_performance_metrics
from .records import EvaluationRecord, ProgressEntry, SessionRecord

WEEK_PERIOD = "week"


@dataclass(frozen=True)
class PerformanceTrend:
    period: str
    date: str
    attendance_rate: float
    average_rating: float
    completion_rate: float
    average_score: float


@dataclass
class _WeekBucket:
    sessions: list[SessionRecord] = field(default_factory=list)
    evaluations: list[EvaluationRecord] = field(default_factory=list)
    progress_entries: list[ProgressEntry] = field(default_factory=list)


def week_key(moment: datetime, tz: tzinfo | None = None) -> str:
    """Return the month-relative week key for ``moment``, read in ``tz``."""
    if tz is not None:
        moment = moment.astimezone(tz)
    return f"{moment.year}-W{moment.month}-{math.ceil(moment.day / 7)}"


def within(moment: datetime | None, start: datetime | None, end: datetime | None) -> bool:
    """Whether ``moment`` lies in ``[start, end]``; a missing moment never does."""
    if moment is None:
        return False
    if start is not None and moment < start:
        return False
    if end is not None and moment > end:
        return False
    return True


def generate_trends(
    sessions: object,
    evaluations: object,
    progress_entries: object,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    *,
    tz: tzinfo | None = None,
) -> list[PerformanceTrend]:
    """Bucket records by week and compute metrics for each populated week.

    Sessions are placed by ``start_time``; evaluations and progress entries by
    ``created_at``. Records without a timestamp, or outside the optional
    ``[start_date, end_date]`` bounds, are left out.
    """
    start = parse_timestamp(start_date)
    end = parse_timestamp(end_date)
    weeks: dict[str, _WeekBucket] = {}

    def bucket_for(moment: datetime | None) -> _WeekBucket | None:
        if moment is None or not within(moment, start, end):
            return None
        return weeks.setdefault(week_key(moment, tz), _WeekBucket())

    for session in as_record_tuple(sessions, SessionRecord):
        bucket = bucket_for(session.start_time)
        if bucket is not None:
            bucket.sessions.append(session)
    for evaluation in as_record_tuple(evaluations, EvaluationRecord):
        bucket = bucket_for(evaluation.created_at)
        if bucket is not None:
            bucket.evaluations.append(evaluation)
    for entry in as_record_tuple(progress_entries, ProgressEntry):
        bucket = bucket_for(entry.created_at)
        if bucket is not None:
            bucket.progress_entries.append(entry)

    trends: list[PerformanceTrend] = []
    for key in sorted(weeks):
        data = weeks[key]
        metrics = calculate_performance_metrics(
            data.sessions, data.evaluations, data.progress_entries
        )
        trends.append(
            PerformanceTrend(
                period=WEEK_PERIOD,
                date=key,
                attendance_rate=metrics.attendance.rate,
                average_rating=metrics.ratings.average,
                completion_rate=metrics.completion.rate,
                average_score=metrics.scores.average,
            )
        )
    return trends
