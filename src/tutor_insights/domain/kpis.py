"""Platform-wide KPI rankings and month-over-month trend directions.

Leaderboards are computed over ids; the application layer joins names.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from ..normalization import as_record_tuple, ensure_aware, mean, round_2dp
from .metrics import percentage
from .records import (
    ROLE_STUDENT,
    ROLE_TUTOR,
    EvaluationRecord,
    ProgressEntry,
    SessionRecord,
    UserRecord,
)

DEFAULT_LEADERBOARD_SIZE = 10

TrendDirection = Literal["increasing", "decreasing", "stable"]


@dataclass(frozen=True)
class LeaderboardEntry:
    entity_id: str
    value: float


@dataclass(frozen=True)
class OverallKpis:
    total_students: int
    total_tutors: int
    total_sessions: int
    average_attendance_rate: float
    average_rating: float
    completion_rate: float


@dataclass(frozen=True)
class KpiTrends:
    attendance_trend: TrendDirection
    rating_trend: TrendDirection
    completion_trend: TrendDirection


@dataclass(frozen=True)
class MonthWindows:
    """``[previous_start, last_start)`` is compared against ``[last_start, end)``."""

    previous_start: datetime
    last_start: datetime
    end: datetime


@dataclass(frozen=True)
class KpiRankings:
    overall: OverallKpis
    top_performers: tuple[LeaderboardEntry, ...]
    top_rated: tuple[LeaderboardEntry, ...]
    most_active: tuple[LeaderboardEntry, ...]
    trends: KpiTrends
    # Not derived yet; kept so the summary shape stays stable for callers.
    needs_attention: tuple[LeaderboardEntry, ...] = ()
    average_progress: float = 0.0


def trend_direction(current: float, previous: float) -> TrendDirection:
    if current > previous:
        return "increasing"
    if current < previous:
        return "decreasing"
    return "stable"


def _month_start(moment: datetime, months_back: int) -> datetime:
    index = moment.year * 12 + (moment.month - 1) - months_back
    year, month_index = divmod(index, 12)
    return moment.replace(
        year=year, month=month_index + 1, day=1, hour=0, minute=0, second=0, microsecond=0
    )


def month_windows(now: datetime) -> MonthWindows:
    """Windows for the month-over-month comparison anchored at ``now``."""
    now = ensure_aware(now)
    return MonthWindows(
        previous_start=_month_start(now, 2),
        last_start=_month_start(now, 1),
        end=now,
    )


def _in_window(moment: datetime | None, start: datetime, end: datetime) -> bool:
    return moment is not None and start <= moment < end


def _top_by_average(
    pairs: Iterable[tuple[str, float]], limit: int
) -> tuple[LeaderboardEntry, ...]:
    grouped: dict[str, list[float]] = {}
    for entity_id, value in pairs:
        grouped.setdefault(entity_id, []).append(value)
    averages = [(entity_id, mean(values)) for entity_id, values in grouped.items()]
    averages.sort(key=lambda item: item[1], reverse=True)
    return tuple(
        LeaderboardEntry(entity_id=entity_id, value=round_2dp(average))
        for entity_id, average in averages[:limit]
    )


def top_students_by_score(
    progress_entries: object, limit: int = DEFAULT_LEADERBOARD_SIZE
) -> tuple[LeaderboardEntry, ...]:
    """Students with the highest mean progress score (unscored entries ignored)."""
    entries = as_record_tuple(progress_entries, ProgressEntry)
    return _top_by_average(
        ((p.student_id, p.score) for p in entries if p.score is not None), limit
    )


def top_tutors_by_rating(
    evaluations: object, limit: int = DEFAULT_LEADERBOARD_SIZE
) -> tuple[LeaderboardEntry, ...]:
    """Tutors with the highest mean evaluation rating."""
    records = as_record_tuple(evaluations, EvaluationRecord)
    return _top_by_average(((e.tutor_id, e.rating) for e in records), limit)


def most_active_tutors(
    sessions: object, limit: int = DEFAULT_LEADERBOARD_SIZE
) -> tuple[LeaderboardEntry, ...]:
    """Tutors with the most sessions."""
    counts: dict[str, int] = {}
    for session in as_record_tuple(sessions, SessionRecord):
        counts[session.tutor_id] = counts.get(session.tutor_id, 0) + 1
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return tuple(LeaderboardEntry(entity_id=tid, value=count) for tid, count in ordered[:limit])


def month_over_month_trends(
    sessions: object, evaluations: object, *, now: datetime
) -> KpiTrends:
    """Compare the window since the start of last month with the month before it.

    The completion trend compares raw session counts.
    """
    windows = month_windows(now)
    session_list = as_record_tuple(sessions, SessionRecord)
    evaluation_list = as_record_tuple(evaluations, EvaluationRecord)

    recent = [s for s in session_list if _in_window(s.start_time, windows.last_start, windows.end)]
    earlier = [
        s
        for s in session_list
        if _in_window(s.start_time, windows.previous_start, windows.last_start)
    ]
    recent_ratings = [
        e.rating
        for e in evaluation_list
        if _in_window(e.created_at, windows.last_start, windows.end)
    ]
    earlier_ratings = [
        e.rating
        for e in evaluation_list
        if _in_window(e.created_at, windows.previous_start, windows.last_start)
    ]

    def attendance(items: list[SessionRecord]) -> float:
        return percentage(sum(1 for s in items if s.is_completed), len(items))

    return KpiTrends(
        attendance_trend=trend_direction(attendance(recent), attendance(earlier)),
        rating_trend=trend_direction(mean(recent_ratings), mean(earlier_ratings)),
        completion_trend=trend_direction(len(recent), len(earlier)),
    )


def compute_kpi_rankings(
    users: object,
    sessions: object,
    evaluations: object,
    progress_entries: object,
    *,
    now: datetime,
    limit: int = DEFAULT_LEADERBOARD_SIZE,
) -> KpiRankings:
    """Compute overall KPIs, the three leaderboards and month-over-month trends."""
    user_list = as_record_tuple(users, UserRecord)
    session_list = as_record_tuple(sessions, SessionRecord)
    evaluation_list = as_record_tuple(evaluations, EvaluationRecord)
    progress_list = as_record_tuple(progress_entries, ProgressEntry)

    total_sessions = len(session_list)
    completed = sum(1 for s in session_list if s.is_completed)
    rate = round_2dp(percentage(completed, total_sessions))

    overall = OverallKpis(
        total_students=sum(1 for u in user_list if u.role == ROLE_STUDENT),
        total_tutors=sum(1 for u in user_list if u.role == ROLE_TUTOR),
        total_sessions=total_sessions,
        average_attendance_rate=rate,
        average_rating=round_2dp(mean([e.rating for e in evaluation_list])),
        completion_rate=rate,
    )

    return KpiRankings(
        overall=overall,
        top_performers=top_students_by_score(progress_list, limit),
        top_rated=top_tutors_by_rating(evaluation_list, limit),
        most_active=most_active_tutors(session_list, limit),
        trends=month_over_month_trends(session_list, evaluation_list, now=now),
    )
