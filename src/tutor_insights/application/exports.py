"""CSV exports of ranked results via pandas.

Usage example:
    >>> from pathlib import Path
    >>> from tutor_insights.application.exports import export_comparisons
    >>> export_comparisons(report.comparisons, Path("data/exports/compare.csv"), fs=fs)
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from ..domain.comparisons import PerformanceComparison
from ..domain.matching import MatchResult
from ..observability import get_logger
from ..protocols import FileSystem
from ..schemas import (
    COMPARISON_COLUMNS,
    MOST_ACTIVE_COLUMNS,
    TOP_PERFORMERS_COLUMNS,
    TOP_RATED_COLUMNS,
    TUTOR_MATCH_COLUMNS,
)
from .performance_kpis import NamedLeaderboardEntry, PerformanceKpis

TOP_PERFORMERS_FILE = "top_performers.csv"
TOP_RATED_FILE = "top_rated_tutors.csv"
MOST_ACTIVE_FILE = "most_active_tutors.csv"

logger = get_logger("tutor_insights.exports")


def matches_frame(results: Sequence[MatchResult], *, first_rank: int = 1) -> pd.DataFrame:
    rows = [
        {
            "rank": first_rank + index,
            "tutorId": result.tutor.id,
            "tutorName": result.tutor.name,
            "score": result.score,
            "subjectScore": result.breakdown.subject,
            "availabilityScore": result.breakdown.availability,
            "ratingScore": result.breakdown.rating,
            "profileScore": result.breakdown.profile,
            "reasons": "|".join(result.reasons),
        }
        for index, result in enumerate(results)
    ]
    return pd.DataFrame(rows, columns=list(TUTOR_MATCH_COLUMNS))


def comparisons_frame(comparisons: Sequence[PerformanceComparison]) -> pd.DataFrame:
    rows = [
        {
            "rank": c.rank,
            "entityId": c.entity_id,
            "entityName": c.entity_name,
            "percentile": c.percentile,
            "attendanceRate": c.metrics.attendance.rate,
            "averageRating": c.metrics.ratings.average,
            "completionRate": c.metrics.completion.rate,
            "averageScore": c.metrics.scores.average,
        }
        for c in comparisons
    ]
    return pd.DataFrame(rows, columns=list(COMPARISON_COLUMNS))


def leaderboard_frame(
    entries: Sequence[NamedLeaderboardEntry], columns: tuple[str, str, str]
) -> pd.DataFrame:
    """Frame a leaderboard as ``(id, name, value)`` columns."""
    id_column, name_column, value_column = columns
    rows = [
        {id_column: entry.entity_id, name_column: entry.name, value_column: entry.value}
        for entry in entries
    ]
    return pd.DataFrame(rows, columns=list(columns))


def export_matches(
    results: Sequence[MatchResult], path: Path, *, fs: FileSystem, first_rank: int = 1
) -> Path:
    fs.write_csv(matches_frame(results, first_rank=first_rank), path)
    logger.info("Wrote %s tutor matches to %s", len(results), path)
    return path


def export_comparisons(
    comparisons: Sequence[PerformanceComparison], path: Path, *, fs: FileSystem
) -> Path:
    fs.write_csv(comparisons_frame(comparisons), path)
    logger.info("Wrote %s comparisons to %s", len(comparisons), path)
    return path


def export_kpi_leaderboards(kpis: PerformanceKpis, output_dir: Path, *, fs: FileSystem) -> list[Path]:
    """Write the three KPI leaderboards as CSV files under ``output_dir``."""
    fs.mkdir(output_dir)
    outputs = [
        (kpis.top_performers, TOP_PERFORMERS_COLUMNS, output_dir / TOP_PERFORMERS_FILE),
        (kpis.top_rated, TOP_RATED_COLUMNS, output_dir / TOP_RATED_FILE),
        (kpis.most_active, MOST_ACTIVE_COLUMNS, output_dir / MOST_ACTIVE_FILE),
    ]
    paths: list[Path] = []
    for entries, columns, path in outputs:
        fs.write_csv(leaderboard_frame(entries, columns), path)
        paths.append(path)
    logger.info("Wrote %s KPI leaderboards to %s", len(paths), output_dir)
    return paths
