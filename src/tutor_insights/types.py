"""Typed JSON payload contracts produced for CLI output and exports."""

from __future__ import annotations

from typing import TypedDict


class BreakdownPayload(TypedDict):
    subject: float
    availability: float
    rating: float
    profile: float


class TutorPayload(TypedDict):
    id: str
    name: str
    specialties: list[str]
    rating: float
    status: str
    university: str | None


class MatchPayload(TypedDict):
    """One ranked tutor match."""

    tutor: TutorPayload
    score: float
    reasons: list[str]
    breakdown: BreakdownPayload


class PaginationPayload(TypedDict):
    page: int
    limit: int
    total: int
    totalPages: int


class SearchPagePayload(TypedDict):
    results: list[MatchPayload]
    pagination: PaginationPayload


class AttendancePayload(TypedDict):
    average: float
    total: int
    present: int
    absent: int
    rate: float


class RatingBucketPayload(TypedDict):
    rating: int
    count: int


class RatingsPayload(TypedDict):
    average: float
    total: int
    distribution: list[RatingBucketPayload]


class CompletionPayload(TypedDict):
    rate: float
    completed: int
    total: int


class ScoreBucketPayload(TypedDict):
    range: str
    count: int


class ScoresPayload(TypedDict):
    average: float
    total: int
    distribution: list[ScoreBucketPayload]


class MetricsPayload(TypedDict):
    """Performance metrics summary."""

    attendance: AttendancePayload
    ratings: RatingsPayload
    completion: CompletionPayload
    scores: ScoresPayload


class TrendPayload(TypedDict):
    period: str
    date: str
    attendanceRate: float
    averageRating: float
    completionRate: float
    averageScore: float


class ComparisonPayload(TypedDict):
    entityId: str
    entityName: str
    metrics: MetricsPayload
    rank: int
    percentile: int


class TimeRangePayload(TypedDict):
    startDate: str
    endDate: str


class ScopePayload(TypedDict):
    studentIds: list[str]
    tutorIds: list[str]
    subjects: list[str]
    timeRange: TimeRangePayload | None


class AnalysisPayload(TypedDict):
    """A complete performance analysis."""

    id: str
    type: str
    scope: ScopePayload
    metrics: MetricsPayload
    trends: list[TrendPayload]
    comparisons: list[ComparisonPayload] | None
    createdAt: str


class ComparisonReportPayload(TypedDict):
    comparisons: list[ComparisonPayload]
    metrics: MetricsPayload


class OverallKpisPayload(TypedDict):
    totalStudents: int
    totalTutors: int
    totalSessions: int
    averageAttendanceRate: float
    averageRating: float
    completionRate: float


class StudentLeaderboardPayload(TypedDict):
    studentId: str
    studentName: str
    score: float


class TutorRatingPayload(TypedDict):
    tutorId: str
    tutorName: str
    rating: float


class TutorActivityPayload(TypedDict):
    tutorId: str
    tutorName: str
    sessions: int


class StudentKpisPayload(TypedDict):
    topPerformers: list[StudentLeaderboardPayload]
    needsAttention: list[StudentLeaderboardPayload]
    averageProgress: float


class TutorKpisPayload(TypedDict):
    topRated: list[TutorRatingPayload]
    mostActive: list[TutorActivityPayload]
    averageRating: float


class KpiTrendsPayload(TypedDict):
    attendanceTrend: str
    ratingTrend: str
    completionTrend: str


class KpisPayload(TypedDict):
    """Platform KPI summary."""

    overall: OverallKpisPayload
    students: StudentKpisPayload
    tutors: TutorKpisPayload
    trends: KpiTrendsPayload
