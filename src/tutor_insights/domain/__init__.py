"""Domain modules: tutor matching and performance analytics."""

from .comparisons import PerformanceComparison, rank_entities
from .kpis import KpiRankings, compute_kpi_rankings
from .matching import MatchResult, calculate_match_score, rank_tutors
from .metrics import PerformanceMetrics, calculate_performance_metrics
from .trends import PerformanceTrend, generate_trends

__all__ = [
    "KpiRankings",
    "MatchResult",
    "PerformanceComparison",
    "PerformanceMetrics",
    "PerformanceTrend",
    "calculate_match_score",
    "calculate_performance_metrics",
    "compute_kpi_rankings",
    "generate_trends",
    "rank_entities",
    "rank_tutors",
]
