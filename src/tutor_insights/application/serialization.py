"""Convert result records into camelCase JSON-ready payloads."""

from __future__ import annotations

from ..domain.comparisons import PerformanceComparison
from ..domain.matching import MatchResult
from ..domain.metrics import PerformanceMetrics
from ..domain.trends import PerformanceTrend
from ..types import (
    AnalysisPayload,
    ComparisonPayload,
    ComparisonReportPayload,
    KpisPayload,
    MatchPayload,
    MetricsPayload,
    ScopePayload,
    SearchPagePayload,
    StudentLeaderboardPayload,
    TrendPayload,
)
from .performance_analysis import AnalysisScope, ComparisonReport, PerformanceAnalysis
from .performance_kpis import NamedLeaderboardEntry, PerformanceKpis
from .tutor_search import TutorSearchPage


def match_to_payload(result: MatchResult) -> MatchPayload:
    tutor = result.tutor
    return {
        "tutor": {
            "id": tutor.id,
            "name": tutor.name,
            "specialties": list(tutor.specialties),
            "rating": tutor.rating,
            "status": tutor.status,
            "university": tutor.university,
        },
        "score": result.score,
        "reasons": list(result.reasons),
        "breakdown": {
            "subject": result.breakdown.subject,
            "availability": result.breakdown.availability,
            "rating": result.breakdown.rating,
            "profile": result.breakdown.profile,
        },
    }


def search_page_to_payload(page: TutorSearchPage) -> SearchPagePayload:
    return {
        "results": [match_to_payload(result) for result in page.results],
        "pagination": {
            "page": page.page,
            "limit": page.limit,
            "total": page.total,
            "totalPages": page.total_pages,
        },
    }


def metrics_to_payload(metrics: PerformanceMetrics) -> MetricsPayload:
    return {
        "attendance": {
            "average": metrics.attendance.average,
            "total": metrics.attendance.total,
            "present": metrics.attendance.present,
            "absent": metrics.attendance.absent,
            "rate": metrics.attendance.rate,
        },
        "ratings": {
            "average": metrics.ratings.average,
            "total": metrics.ratings.total,
            "distribution": [
                {"rating": bucket.rating, "count": bucket.count}
                for bucket in metrics.ratings.distribution
            ],
        },
        "completion": {
            "rate": metrics.completion.rate,
            "completed": metrics.completion.completed,
            "total": metrics.completion.total,
        },
        "scores": {
            "average": metrics.scores.average,
            "total": metrics.scores.total,
            "distribution": [
                {"range": bucket.range, "count": bucket.count}
                for bucket in metrics.scores.distribution
            ],
        },
    }


def trend_to_payload(trend: PerformanceTrend) -> TrendPayload:
    return {
        "period": trend.period,
        "date": trend.date,
        "attendanceRate": trend.attendance_rate,
        "averageRating": trend.average_rating,
        "completionRate": trend.completion_rate,
        "averageScore": trend.average_score,
    }


def comparison_to_payload(comparison: PerformanceComparison) -> ComparisonPayload:
    return {
        "entityId": comparison.entity_id,
        "entityName": comparison.entity_name,
        "metrics": metrics_to_payload(comparison.metrics),
        "rank": comparison.rank,
        "percentile": comparison.percentile,
    }


def scope_to_payload(scope: AnalysisScope) -> ScopePayload:
    time_range = scope.time_range
    return {
        "studentIds": list(scope.student_ids),
        "tutorIds": list(scope.tutor_ids),
        "subjects": list(scope.subjects),
        "timeRange": None
        if time_range is None
        else {
            "startDate": time_range.start.isoformat(),
            "endDate": time_range.end.isoformat(),
        },
    }


def analysis_to_payload(analysis: PerformanceAnalysis) -> AnalysisPayload:
    return {
        "id": analysis.id,
        "type": analysis.type,
        "scope": scope_to_payload(analysis.scope),
        "metrics": metrics_to_payload(analysis.metrics),
        "trends": [trend_to_payload(trend) for trend in analysis.trends],
        "comparisons": None
        if analysis.comparisons is None
        else [comparison_to_payload(c) for c in analysis.comparisons],
        "createdAt": analysis.created_at.isoformat(),
    }


def comparison_report_to_payload(report: ComparisonReport) -> ComparisonReportPayload:
    return {
        "comparisons": [comparison_to_payload(c) for c in report.comparisons],
        "metrics": metrics_to_payload(report.metrics),
    }


def _student_entry(entry: NamedLeaderboardEntry) -> StudentLeaderboardPayload:
    return {"studentId": entry.entity_id, "studentName": entry.name, "score": entry.value}


def kpis_to_payload(kpis: PerformanceKpis) -> KpisPayload:
    overall = kpis.overall
    return {
        "overall": {
            "totalStudents": overall.total_students,
            "totalTutors": overall.total_tutors,
            "totalSessions": overall.total_sessions,
            "averageAttendanceRate": overall.average_attendance_rate,
            "averageRating": overall.average_rating,
            "completionRate": overall.completion_rate,
        },
        "students": {
            "topPerformers": [_student_entry(entry) for entry in kpis.top_performers],
            "needsAttention": [_student_entry(entry) for entry in kpis.needs_attention],
            "averageProgress": kpis.average_progress,
        },
        "tutors": {
            "topRated": [
                {"tutorId": entry.entity_id, "tutorName": entry.name, "rating": entry.value}
                for entry in kpis.top_rated
            ],
            "mostActive": [
                {"tutorId": entry.entity_id, "tutorName": entry.name, "sessions": int(entry.value)}
                for entry in kpis.most_active
            ],
            "averageRating": kpis.tutor_average_rating,
        },
        "trends": {
            "attendanceTrend": kpis.trends.attendance_trend,
            "ratingTrend": kpis.trends.rating_trend,
            "completionTrend": kpis.trends.completion_trend,
        },
    }
