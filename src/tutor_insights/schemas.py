"""Column definitions for CSV exports.

These define the columns each export writes, so empty results still produce
a file with a header row.
"""

from __future__ import annotations

# Ranked tutor matches from a search
TUTOR_MATCH_COLUMNS = (
    "rank",
    "tutorId",
    "tutorName",
    "score",
    "subjectScore",
    "availabilityScore",
    "ratingScore",
    "profileScore",
    "reasons",  # pipe-separated
)

# Ranked entity comparisons
COMPARISON_COLUMNS = (
    "rank",
    "entityId",
    "entityName",
    "percentile",
    "attendanceRate",
    "averageRating",
    "completionRate",
    "averageScore",
)

# KPI leaderboards
TOP_PERFORMERS_COLUMNS = ("studentId", "studentName", "score")
TOP_RATED_COLUMNS = ("tutorId", "tutorName", "rating")
MOST_ACTIVE_COLUMNS = ("tutorId", "tutorName", "sessions")
