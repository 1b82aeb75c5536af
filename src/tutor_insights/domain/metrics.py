"""Performance metrics over sessions, evaluations and progress entries.

Usage example:
    from tutor_insights.domain.metrics import calculate_performance_metrics

    metrics = calculate_performance_metrics([], [], [])
    assert metrics.attendance.rate == 0.0
    assert [b.count for b in metrics.ratings.distribution] == [0, 0, 0, 0, 0]
"""

from __future__ import annotations

from dataclasses import dataclass

from ..normalization import as_record_tuple, mean, round_2dp
from .records import EvaluationRecord, ProgressEntry, SessionRecord

RATING_BUCKETS = (1, 2, 3, 4, 5)

# (label, inclusive min, inclusive max)
SCORE_RANGES = (
    ("0-2", 0, 2),
    ("3-5", 3, 5),
    ("6-7", 6, 7),
    ("8-9", 8, 9),
    ("10", 10, 10),
)


@dataclass(frozen=True)
class AttendanceMetrics:
    average: float
    total: int
    present: int
    absent: int
    rate: float


@dataclass(frozen=True)
class RatingBucket:
    rating: int
    count: int


@dataclass(frozen=True)
class RatingMetrics:
    average: float
    total: int
    distribution: tuple[RatingBucket, ...]


@dataclass(frozen=True)
class CompletionMetrics:
    """Completion shares its formula with attendance; both are reported separately."""

    rate: float
    completed: int
    total: int


@dataclass(frozen=True)
class ScoreBucket:
    range: str
    count: int


@dataclass(frozen=True)
class ScoreMetrics:
    average: float
    total: int
    distribution: tuple[ScoreBucket, ...]


@dataclass(frozen=True)
class PerformanceMetrics:
    """Aggregate attendance, rating, completion and score metrics."""

    attendance: AttendanceMetrics
    ratings: RatingMetrics
    completion: CompletionMetrics
    scores: ScoreMetrics


def percentage(part: int, whole: int) -> float:
    """Return ``part / whole * 100``, or 0.0 when ``whole`` is zero."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


def _attendance(sessions: tuple[SessionRecord, ...]) -> tuple[AttendanceMetrics, CompletionMetrics]:
    total = len(sessions)
    present = sum(1 for s in sessions if s.is_completed)
    rate = round_2dp(percentage(present, total))
    attendance = AttendanceMetrics(
        average=rate,
        total=total,
        present=present,
        absent=total - present,
        rate=rate,
    )
    completion = CompletionMetrics(rate=rate, completed=present, total=total)
    return attendance, completion


def _ratings(evaluations: tuple[EvaluationRecord, ...]) -> RatingMetrics:
    ratings = [e.rating for e in evaluations]
    # Exact equality only: fractional or out-of-range ratings land in no bucket.
    distribution = tuple(
        RatingBucket(rating=bucket, count=sum(1 for r in ratings if r == bucket))
        for bucket in RATING_BUCKETS
    )
    return RatingMetrics(
        average=round_2dp(mean(ratings)),
        total=len(ratings),
        distribution=distribution,
    )


def _scores(progress_entries: tuple[ProgressEntry, ...]) -> ScoreMetrics:
    scores = [p.score for p in progress_entries if p.score is not None]
    distribution = tuple(
        ScoreBucket(range=label, count=sum(1 for s in scores if low <= s <= high))
        for label, low, high in SCORE_RANGES
    )
    return ScoreMetrics(
        average=round_2dp(mean(scores)),
        total=len(scores),
        distribution=distribution,
    )


def calculate_performance_metrics(
    sessions: object,
    evaluations: object,
    progress_entries: object,
) -> PerformanceMetrics:
    """Aggregate the three record collections into a metrics summary.

    Non-sequence arguments count as empty collections. All rates and averages
    are rounded to two decimal places.
    """
    attendance, completion = _attendance(as_record_tuple(sessions, SessionRecord))
    return PerformanceMetrics(
        attendance=attendance,
        ratings=_ratings(as_record_tuple(evaluations, EvaluationRecord)),
        completion=completion,
        scores=_scores(as_record_tuple(progress_entries, ProgressEntry)),
    )
