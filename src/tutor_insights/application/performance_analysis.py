"""Performance analysis over a scoped slice of the platform records.

Usage example:
    >>> from tutor_insights.application.performance_analysis import (
    ...     AnalysisScope,
    ...     PlatformRecords,
    ...     generate_performance_analysis,
    ... )
    >>> analysis = generate_performance_analysis(
    ...     "tutor",
    ...     AnalysisScope(tutor_ids=("t1", "t2")),
    ...     PlatformRecords.from_store(store),
    ...     clock=clock,
    ...     lookup=lookup,
    ...     include_comparisons=True,
    ... )
    >>> analysis.comparisons[0].rank
    1
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..domain.comparisons import PerformanceComparison, attach_names, rank_entities
from ..domain.metrics import PerformanceMetrics, calculate_performance_metrics
from ..domain.records import (
    ENTITY_STUDENT,
    ENTITY_TUTOR,
    ENTITY_TYPES,
    EvaluationRecord,
    ProgressEntry,
    SessionRecord,
    UserRecord,
)
from ..domain.trends import PerformanceTrend, generate_trends, within
from ..exceptions import (
    ComparisonTooSmallError,
    InvalidAnalysisTypeError,
    InvalidEntityTypeError,
    InvalidTimeRangeError,
)
from ..normalization import as_id_tuple, ensure_aware, parse_timestamp
from ..observability import get_logger
from ..protocols import Clock, NameLookup, RecordStore
from .name_resolution import DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT_SECONDS, resolve_display_names

ANALYSIS_STUDENT = "student"
ANALYSIS_TUTOR = "tutor"
ANALYSIS_COMPARATIVE = "comparative"
ANALYSIS_OVERALL = "overall"
ANALYSIS_TYPES = (ANALYSIS_STUDENT, ANALYSIS_TUTOR, ANALYSIS_COMPARATIVE, ANALYSIS_OVERALL)

DEFAULT_WINDOW_DAYS = 30
MIN_COMPARISON_ENTITIES = 2

logger = get_logger("tutor_insights.performance_analysis")


@dataclass(frozen=True)
class TimeRange:
    """Inclusive ``[start, end]`` window."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class AnalysisScope:
    """Which records an analysis covers. Empty id/subject lists mean no filter."""

    student_ids: tuple[str, ...] = ()
    tutor_ids: tuple[str, ...] = ()
    subjects: tuple[str, ...] = ()
    time_range: TimeRange | None = None


@dataclass(frozen=True)
class PlatformRecords:
    """One read of the record collections an analysis works over."""

    sessions: tuple[SessionRecord, ...] = ()
    evaluations: tuple[EvaluationRecord, ...] = ()
    progress_entries: tuple[ProgressEntry, ...] = ()
    users: tuple[UserRecord, ...] = ()

    @classmethod
    def from_store(cls, store: RecordStore) -> PlatformRecords:
        return cls(
            sessions=tuple(store.sessions()),
            evaluations=tuple(store.evaluations()),
            progress_entries=tuple(store.progress_entries()),
            users=tuple(store.users()),
        )


@dataclass(frozen=True)
class PerformanceAnalysis:
    id: str
    type: str
    scope: AnalysisScope
    metrics: PerformanceMetrics
    trends: tuple[PerformanceTrend, ...]
    comparisons: tuple[PerformanceComparison, ...] | None
    created_at: datetime


@dataclass(frozen=True)
class ComparisonReport:
    comparisons: tuple[PerformanceComparison, ...]
    metrics: PerformanceMetrics


def new_analysis_id() -> str:
    return f"analysis_{uuid.uuid4().hex}"


def default_time_range(now: datetime, *, days: int = DEFAULT_WINDOW_DAYS) -> TimeRange:
    """The ``days`` ending at ``now``."""
    return TimeRange(start=now - timedelta(days=days), end=now)


def parse_time_range(
    start: str | None,
    end: str | None,
    *,
    now: datetime,
    days: int = DEFAULT_WINDOW_DAYS,
) -> TimeRange:
    """Build a time range from optional ISO-8601 bounds.

    A missing end is ``now``; a missing start is ``days`` before the end.

    Raises:
        InvalidTimeRangeError: If a bound cannot be parsed or the end precedes the start.
    """
    end_moment = now
    if end:
        parsed_end = parse_timestamp(end)
        if parsed_end is None:
            raise InvalidTimeRangeError(f"end {end!r} is not an ISO-8601 timestamp")
        end_moment = parsed_end
    start_moment = end_moment - timedelta(days=days)
    if start:
        parsed_start = parse_timestamp(start)
        if parsed_start is None:
            raise InvalidTimeRangeError(f"start {start!r} is not an ISO-8601 timestamp")
        start_moment = parsed_start
    if ensure_aware(end_moment) < ensure_aware(start_moment):
        raise InvalidTimeRangeError("end is before start")
    return TimeRange(start=start_moment, end=end_moment)


def scope_records(
    scope: AnalysisScope, records: PlatformRecords, time_range: TimeRange
) -> PlatformRecords:
    """Restrict ``records`` to ``scope``.

    Sessions are filtered by start time, then subjects, then shared student
    ids, then tutor ids. Evaluations and progress entries are filtered by
    creation time only.
    """
    start = parse_timestamp(time_range.start)
    end = parse_timestamp(time_range.end)

    sessions = [s for s in records.sessions if within(s.start_time, start, end)]
    if scope.subjects:
        subjects = set(scope.subjects)
        sessions = [s for s in sessions if s.subject in subjects]
    if scope.student_ids:
        student_ids = set(scope.student_ids)
        sessions = [s for s in sessions if student_ids.intersection(s.student_ids)]
    if scope.tutor_ids:
        tutor_ids = set(scope.tutor_ids)
        sessions = [s for s in sessions if s.tutor_id in tutor_ids]

    return PlatformRecords(
        sessions=tuple(sessions),
        evaluations=tuple(e for e in records.evaluations if within(e.created_at, start, end)),
        progress_entries=tuple(
            p for p in records.progress_entries if within(p.created_at, start, end)
        ),
        users=records.users,
    )


def generate_comparisons(
    entity_ids: object,
    entity_type: str,
    sessions: object,
    evaluations: object,
    progress_entries: object,
    *,
    lookup: NameLookup,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[PerformanceComparison]:
    """Rank entities by their metrics and attach display names.

    Raises:
        InvalidEntityTypeError: If ``entity_type`` is not ``student`` or ``tutor``.
    """
    ranked = rank_entities(entity_ids, entity_type, sessions, evaluations, progress_entries)
    names = resolve_display_names(
        [entry.entity_id for entry in ranked],
        lookup,
        max_workers=max_workers,
        timeout_seconds=timeout_seconds,
    )
    comparisons = attach_names(ranked, names)
    logger.info("Produced %s %s comparisons", len(comparisons), entity_type)
    return comparisons


def _comparison_target(analysis_type: str, scope: AnalysisScope) -> tuple[str, tuple[str, ...]]:
    if analysis_type == ANALYSIS_STUDENT or (
        analysis_type != ANALYSIS_TUTOR and scope.student_ids
    ):
        return ENTITY_STUDENT, scope.student_ids
    return ENTITY_TUTOR, scope.tutor_ids


def generate_performance_analysis(
    analysis_type: str,
    scope: AnalysisScope,
    records: PlatformRecords,
    *,
    clock: Clock,
    lookup: NameLookup,
    include_comparisons: bool = False,
    include_trends: bool = True,
    window_days: int = DEFAULT_WINDOW_DAYS,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    id_factory: Callable[[], str] = new_analysis_id,
) -> PerformanceAnalysis:
    """Compute metrics, weekly trends and optional comparisons for a scope.

    A scope without a time range covers the ``window_days`` ending now. Trend
    weeks follow the calendar of the clock's timezone.
    Comparisons are produced only when requested and the scope names ids.

    Raises:
        InvalidAnalysisTypeError: If ``analysis_type`` is not a supported kind.
    """
    if analysis_type not in ANALYSIS_TYPES:
        raise InvalidAnalysisTypeError(analysis_type)

    now = clock.now()
    time_range = scope.time_range or default_time_range(now, days=window_days)
    resolved_scope = AnalysisScope(
        student_ids=as_id_tuple(list(scope.student_ids)),
        tutor_ids=as_id_tuple(list(scope.tutor_ids)),
        subjects=tuple(scope.subjects),
        time_range=time_range,
    )
    scoped = scope_records(resolved_scope, records, time_range)
    logger.info(
        "Analysing %s sessions, %s evaluations, %s progress entries (%s)",
        len(scoped.sessions),
        len(scoped.evaluations),
        len(scoped.progress_entries),
        analysis_type,
    )

    metrics = calculate_performance_metrics(
        scoped.sessions, scoped.evaluations, scoped.progress_entries
    )

    trends: tuple[PerformanceTrend, ...] = ()
    if include_trends:
        trends = tuple(
            generate_trends(
                scoped.sessions,
                scoped.evaluations,
                scoped.progress_entries,
                time_range.start,
                time_range.end,
                tz=now.tzinfo,
            )
        )

    comparisons: tuple[PerformanceComparison, ...] | None = None
    if include_comparisons and (resolved_scope.student_ids or resolved_scope.tutor_ids):
        entity_type, entity_ids = _comparison_target(analysis_type, resolved_scope)
        comparisons = tuple(
            generate_comparisons(
                entity_ids,
                entity_type,
                scoped.sessions,
                scoped.evaluations,
                scoped.progress_entries,
                lookup=lookup,
                max_workers=max_workers,
                timeout_seconds=timeout_seconds,
            )
        )

    return PerformanceAnalysis(
        id=id_factory(),
        type=analysis_type,
        scope=resolved_scope,
        metrics=metrics,
        trends=trends,
        comparisons=comparisons,
        created_at=now,
    )


def compare_performance(
    entity_ids: Sequence[str],
    entity_type: str,
    records: PlatformRecords,
    *,
    time_range: TimeRange | None,
    clock: Clock,
    lookup: NameLookup,
    window_days: int = DEFAULT_WINDOW_DAYS,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> ComparisonReport:
    """Compare two or more students or tutors over a time range.

    Raises:
        InvalidEntityTypeError: If ``entity_type`` is not ``student`` or ``tutor``.
        ComparisonTooSmallError: If fewer than two ids are given.
    """
    if entity_type not in ENTITY_TYPES:
        raise InvalidEntityTypeError(entity_type)
    ids = as_id_tuple(list(entity_ids))
    if len(ids) < MIN_COMPARISON_ENTITIES:
        raise ComparisonTooSmallError(len(ids))

    scope = AnalysisScope(
        student_ids=ids if entity_type == ENTITY_STUDENT else (),
        tutor_ids=ids if entity_type == ENTITY_TUTOR else (),
        time_range=time_range,
    )
    analysis = generate_performance_analysis(
        ANALYSIS_COMPARATIVE,
        scope,
        records,
        clock=clock,
        lookup=lookup,
        include_comparisons=True,
        include_trends=False,
        window_days=window_days,
        max_workers=max_workers,
        timeout_seconds=timeout_seconds,
    )
    return ComparisonReport(comparisons=analysis.comparisons or (), metrics=analysis.metrics)

