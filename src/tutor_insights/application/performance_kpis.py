"""Platform KPI summary with display names joined onto the leaderboards.

Usage example:
    >>> kpis = get_performance_kpis(
    ...     PlatformRecords.from_store(store), clock=SystemClock(), lookup=lookup
    ... )
    >>> kpis.top_rated[0].name
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from ..domain.comparisons import UNKNOWN_NAME
from ..domain.kpis import (
    DEFAULT_LEADERBOARD_SIZE,
    KpiTrends,
    LeaderboardEntry,
    OverallKpis,
    compute_kpi_rankings,
)
from ..observability import get_logger
from ..protocols import Clock, NameLookup
from .name_resolution import DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT_SECONDS, resolve_display_names
from .performance_analysis import PlatformRecords

logger = get_logger("tutor_insights.performance_kpis")


@dataclass(frozen=True)
class NamedLeaderboardEntry:
    entity_id: str
    name: str
    value: float


@dataclass(frozen=True)
class PerformanceKpis:
    overall: OverallKpis
    top_performers: tuple[NamedLeaderboardEntry, ...]
    needs_attention: tuple[NamedLeaderboardEntry, ...]
    average_progress: float
    top_rated: tuple[NamedLeaderboardEntry, ...]
    most_active: tuple[NamedLeaderboardEntry, ...]
    trends: KpiTrends

    @property
    def tutor_average_rating(self) -> float:
        return self.overall.average_rating


def _named(
    entries: tuple[LeaderboardEntry, ...], names: Mapping[str, str]
) -> tuple[NamedLeaderboardEntry, ...]:
    return tuple(
        NamedLeaderboardEntry(
            entity_id=entry.entity_id,
            name=names.get(entry.entity_id) or UNKNOWN_NAME,
            value=entry.value,
        )
        for entry in entries
    )


def get_performance_kpis(
    records: PlatformRecords,
    *,
    clock: Clock,
    lookup: NameLookup,
    limit: int = DEFAULT_LEADERBOARD_SIZE,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> PerformanceKpis:
    """Compute the KPI summary and resolve every leaderboard name in one batch."""
    rankings = compute_kpi_rankings(
        records.users,
        records.sessions,
        records.evaluations,
        records.progress_entries,
        now=clock.now(),
        limit=limit,
    )
    leaderboard_ids = [
        entry.entity_id
        for board in (rankings.top_performers, rankings.top_rated, rankings.most_active)
        for entry in board
    ]
    names = resolve_display_names(
        leaderboard_ids, lookup, max_workers=max_workers, timeout_seconds=timeout_seconds
    )
    logger.info(
        "Computed KPIs over %s sessions (%s leaderboard entries)",
        rankings.overall.total_sessions,
        len(leaderboard_ids),
    )
    return PerformanceKpis(
        overall=rankings.overall,
        top_performers=_named(rankings.top_performers, names),
        needs_attention=_named(rankings.needs_attention, names),
        average_progress=rankings.average_progress,
        top_rated=_named(rankings.top_rated, names),
        most_active=_named(rankings.most_active, names),
        trends=rankings.trends,
    )
