"""Tutor matching rules: a fixed weighted rubric over four sub-scores.

Usage example:
    from datetime import UTC, datetime

    from tutor_insights.domain.matching import rank_tutors
    from tutor_insights.domain.records import SearchCriteria, StudentProfile, TutorCandidate

    ranked = rank_tutors(
        [TutorCandidate(id="t1", specialties=("Calculus",), rating=4.5, status="available")],
        StudentProfile(id="s1", university="MIT"),
        SearchCriteria(subject="calculus", rating="4+", availability="available"),
        now=datetime(2024, 3, 4, tzinfo=UTC),
    )
    assert round(ranked[0].score, 4) == 0.925
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from ..exceptions import InvalidRatingFilterError
from ..normalization import as_record_tuple, text_or_none
from .records import (
    TUTOR_STATUS_AVAILABLE,
    WEEKDAYS,
    SearchCriteria,
    StudentProfile,
    TutorCandidate,
)

SUBJECT_WEIGHT = 0.40
AVAILABILITY_WEIGHT = 0.25
RATING_WEIGHT = 0.20
PROFILE_WEIGHT = 0.15

EXCELLENT_THRESHOLD = 0.8
GOOD_THRESHOLD = 0.6

NEUTRAL_SCORE = 0.5
MAX_TUTOR_RATING = 5.0

# Subject searched → specialty fragments that count as related
RELATED_SUBJECTS = {
    "mathematics": ("calculus", "algebra", "statistics"),
    "physics": ("mechanics", "thermodynamics", "quantum"),
    "chemistry": ("organic", "inorganic", "biochemistry"),
}

# Student major → majors whose names inside a tutor specialty signal a fit
RELATED_MAJORS = {
    "Computer Science": ("Mathematics", "Physics"),
    "Mathematics": ("Physics", "Computer Science"),
    "Physics": ("Mathematics", "Chemistry"),
}

SAME_UNIVERSITY_BONUS = 0.2
RELATED_MAJOR_BONUS = 0.3

AVAILABILITY_NOW = "available"
AVAILABILITY_TODAY = "today"
AVAILABILITY_WEEK = "week"

_RATING_FILTER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*\+?\s*$")

# (excellent reason, good reason) per sub-score, in reporting order
_REASONS = (
    ("Perfect subject match", "Good subject alignment"),
    ("Available at preferred times", "Good availability match"),
    ("Excellent ratings", "Good reviews"),
    ("Great fit for your learning style", "Good learning match"),
)


@dataclass(frozen=True)
class MatchBreakdown:
    """Transparent sub-scores, each in 0.0-1.0."""

    subject: float
    availability: float
    rating: float
    profile: float

    @property
    def total(self) -> float:
        raw = (
            SUBJECT_WEIGHT * self.subject
            + AVAILABILITY_WEIGHT * self.availability
            + RATING_WEIGHT * self.rating
            + PROFILE_WEIGHT * self.profile
        )
        return min(raw, 1.0)

    def reasons(self) -> tuple[str, ...]:
        out: list[str] = []
        scores = (self.subject, self.availability, self.rating, self.profile)
        for value, (excellent, good) in zip(scores, _REASONS, strict=True):
            if value > EXCELLENT_THRESHOLD:
                out.append(excellent)
            elif value > GOOD_THRESHOLD:
                out.append(good)
        return tuple(out)


@dataclass(frozen=True)
class MatchResult:
    """A scored tutor with its rationale."""

    tutor: TutorCandidate
    score: float
    reasons: tuple[str, ...]
    breakdown: MatchBreakdown


def parse_rating_filter(rating: str | None) -> float | None:
    """Parse a rating filter such as ``"4"`` or ``"4.5+"``.

    Returns None when the filter is absent or blank.

    Raises:
        InvalidRatingFilterError: If the filter is not numeric.
    """
    text = text_or_none(rating)
    if text is None:
        return None
    match = _RATING_FILTER_RE.match(text)
    if match is None:
        raise InvalidRatingFilterError(text)
    return float(match.group(1))


def score_subject_match(tutor: TutorCandidate, subject: str | None) -> float:
    """Score how well the tutor's specialties cover the searched subject."""
    wanted = text_or_none(subject)
    if wanted is None:
        return NEUTRAL_SCORE

    wanted = wanted.lower()
    specialties = [s.lower() for s in tutor.specialties]

    if any(s == wanted for s in specialties):
        return 1.0
    if any(wanted in s for s in specialties):
        return 0.8

    related = RELATED_SUBJECTS.get(wanted, ())
    if any(r in s for s in specialties for r in related):
        return 0.6

    return 0.2


def score_availability_match(
    tutor: TutorCandidate, availability: str | None, *, now: datetime
) -> float:
    """Score the tutor's availability against the requested window."""
    wanted = text_or_none(availability)
    if wanted is None:
        return NEUTRAL_SCORE

    if wanted == AVAILABILITY_NOW and tutor.status == TUTOR_STATUS_AVAILABLE:
        return 1.0

    if wanted == AVAILABILITY_TODAY and tutor.has_slots_on(WEEKDAYS[now.weekday()]):
        return 0.9

    if wanted == AVAILABILITY_WEEK:
        return 0.8 if tutor.has_any_slots() else 0.3

    return NEUTRAL_SCORE


def score_rating(tutor: TutorCandidate, required: float | None) -> float:
    """Score the tutor's rating, normalised or against a required minimum."""
    rating = tutor.rating or 0.0
    if required is None:
        return rating / MAX_TUTOR_RATING
    if rating >= required:
        return 1.0
    if rating >= required - 0.5:
        return 0.7
    return 0.3


def score_profile_match(student: StudentProfile, tutor: TutorCandidate) -> float:
    """Score the fit between the student's profile and the tutor."""
    score = NEUTRAL_SCORE

    if student.university and student.university == tutor.university:
        score += SAME_UNIVERSITY_BONUS

    related = RELATED_MAJORS.get(student.major or "", ())
    if any(major in specialty for major in related for specialty in tutor.specialties):
        score += RELATED_MAJOR_BONUS

    return min(score, 1.0)


def _score(
    student: StudentProfile,
    tutor: TutorCandidate,
    criteria: SearchCriteria,
    required_rating: float | None,
    now: datetime,
) -> MatchResult:
    breakdown = MatchBreakdown(
        subject=score_subject_match(tutor, criteria.subject),
        availability=score_availability_match(tutor, criteria.availability, now=now),
        rating=score_rating(tutor, required_rating),
        profile=score_profile_match(student, tutor),
    )
    return MatchResult(
        tutor=tutor,
        score=breakdown.total,
        reasons=breakdown.reasons(),
        breakdown=breakdown,
    )


def calculate_match_score(
    student: StudentProfile,
    tutor: TutorCandidate,
    criteria: SearchCriteria,
    *,
    now: datetime,
) -> MatchResult:
    """Score one tutor for a student under the given criteria.

    ``now`` pins the weekday used by the ``"today"`` availability filter.

    Raises:
        InvalidRatingFilterError: If ``criteria.rating`` is not numeric.
    """
    return _score(student, tutor, criteria, parse_rating_filter(criteria.rating), now)


def rank_tutors(
    candidates: object,
    student: StudentProfile,
    criteria: SearchCriteria,
    *,
    now: datetime,
) -> list[MatchResult]:
    """Score every candidate and sort by score, highest first.

    Ties keep their input order. Non-sequence input ranks nothing.

    Raises:
        InvalidRatingFilterError: If ``criteria.rating`` is not numeric.
    """
    tutors = as_record_tuple(candidates, TutorCandidate)
    required_rating = parse_rating_filter(criteria.rating)
    results = [_score(student, tutor, criteria, required_rating, now) for tutor in tutors]
    results.sort(key=lambda r: r.score, reverse=True)
    return results
