"""Tests for platform KPI rankings."""

from tests.support.builders import at, evaluation, progress, session, user
from tutor_insights.domain.kpis import (
    compute_kpi_rankings,
    month_over_month_trends,
    month_windows,
    most_active_tutors,
    top_students_by_score,
    top_tutors_by_rating,
    trend_direction,
)

NOW = at(2024, 3, 15, hour=10)


class TestMonthWindows:
    def test_windows_start_on_month_boundaries(self) -> None:
        windows = month_windows(NOW)
        assert windows.previous_start == at(2024, 1, 1, hour=0)
        assert windows.last_start == at(2024, 2, 1, hour=0)
        assert windows.end == NOW

    def test_windows_cross_year_boundary(self) -> None:
        windows = month_windows(at(2024, 1, 10))
        assert windows.previous_start == at(2023, 11, 1, hour=0)
        assert windows.last_start == at(2023, 12, 1, hour=0)


class TestTrendDirection:
    def test_directions(self) -> None:
        assert trend_direction(2.0, 1.0) == "increasing"
        assert trend_direction(1.0, 2.0) == "decreasing"
        assert trend_direction(1.0, 1.0) == "stable"


class TestMonthOverMonthTrends:
    def test_compares_recent_window_with_the_month_before(self) -> None:
        sessions = [
            session("r1", start=at(2024, 2, 1, hour=0)),
            session("r2", start=at(2024, 3, 10)),
            session("e1", start=at(2024, 1, 5)),
            session("e2", start=at(2024, 1, 20), status="cancelled"),
            session("e3", start=at(2024, 1, 31)),
            session("old", start=at(2023, 12, 20)),
        ]
        evaluations = [
            evaluation("r", rating=4.0, created=at(2024, 2, 10)),
            evaluation("e", rating=4.0, created=at(2024, 1, 10)),
        ]

        trends = month_over_month_trends(sessions, evaluations, now=NOW)

        assert trends.attendance_trend == "increasing"
        assert trends.rating_trend == "stable"
        assert trends.completion_trend == "decreasing"

    def test_no_activity_is_stable(self) -> None:
        trends = month_over_month_trends([], [], now=NOW)
        assert (trends.attendance_trend, trends.rating_trend, trends.completion_trend) == (
            "stable",
            "stable",
            "stable",
        )

    def test_records_after_now_are_ignored(self) -> None:
        sessions = [session("future", start=at(2024, 3, 20))]
        trends = month_over_month_trends(sessions, [], now=NOW)
        assert trends.completion_trend == "stable"


class TestLeaderboards:
    def test_top_students_ignore_unscored_entries(self) -> None:
        entries = [
            progress("a", student_id="s1", score=6.0),
            progress("b", student_id="s1", score=8.0),
            progress("c", student_id="s2", score=9.0),
            progress("d", student_id="s3", score=None),
        ]
        board = top_students_by_score(entries)
        assert [(e.entity_id, e.value) for e in board] == [("s2", 9.0), ("s1", 7.0)]

    def test_top_tutors_respect_limit(self) -> None:
        evaluations = [
            evaluation("a", tutor_id="t1", rating=3.0),
            evaluation("b", tutor_id="t2", rating=5.0),
            evaluation("c", tutor_id="t3", rating=4.0),
        ]
        board = top_tutors_by_rating(evaluations, limit=2)
        assert [e.entity_id for e in board] == ["t2", "t3"]

    def test_most_active_counts_sessions(self) -> None:
        sessions = [
            session("a", tutor_id="t1"),
            session("b", tutor_id="t2"),
            session("c", tutor_id="t2"),
        ]
        board = most_active_tutors(sessions)
        assert [(e.entity_id, e.value) for e in board] == [("t2", 2), ("t1", 1)]


class TestComputeKpiRankings:
    def test_overall_counts(self) -> None:
        users = [
            user("s1", "Sam", "student"),
            user("s2", "Kim", "student"),
            user("t1", "Ada", "tutor"),
            user("x", "Admin", "admin"),
        ]
        sessions = [session("a"), session("b", status="cancelled")]
        evaluations = [evaluation("e1", rating=4.0), evaluation("e2", rating=5.0)]

        rankings = compute_kpi_rankings(users, sessions, evaluations, [], now=NOW)

        overall = rankings.overall
        assert (overall.total_students, overall.total_tutors, overall.total_sessions) == (2, 1, 2)
        assert overall.average_attendance_rate == 50.0
        assert overall.completion_rate == 50.0
        assert overall.average_rating == 4.5
        assert rankings.needs_attention == ()
        assert rankings.average_progress == 0.0

    def test_empty_platform(self) -> None:
        rankings = compute_kpi_rankings([], [], [], [], now=NOW)
        assert rankings.overall.total_sessions == 0
        assert rankings.overall.average_rating == 0.0
        assert rankings.top_performers == ()
        assert rankings.most_active == ()
