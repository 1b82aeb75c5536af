"""Filtered, ranked and paginated tutor search.

Usage example:
    >>> from tutor_insights.application.tutor_search import search_tutors
    >>> page = search_tutors(
    ...     store.tutors(),
    ...     student,
    ...     SearchCriteria(subject="calculus", rating="4+"),
    ...     now=clock.now(),
    ...     page=1,
    ...     limit=12,
    ... )
    >>> page.total_pages
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from ..domain.matching import AVAILABILITY_NOW, MatchResult, parse_rating_filter, rank_tutors
from ..domain.records import (
    TUTOR_STATUS_AVAILABLE,
    SearchCriteria,
    StudentProfile,
    TutorCandidate,
)
from ..exceptions import InvalidPaginationError
from ..normalization import as_record_tuple, text_or_none
from ..observability import get_logger

DEFAULT_PAGE_SIZE = 12

logger = get_logger("tutor_insights.tutor_search")


@dataclass(frozen=True)
class TutorSearchPage:
    """One page of ranked tutor matches."""

    results: tuple[MatchResult, ...]
    total: int
    page: int
    limit: int
    total_pages: int


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def filter_candidates(tutors: object, criteria: SearchCriteria) -> list[TutorCandidate]:
    """Apply the search pre-filters before ranking.

    Subject keeps tutors with a specialty containing it; rating keeps tutors
    at or above the threshold; availability ``"available"`` keeps tutors whose
    status is available; the free-text query matches specialties or bio.
    Subject and query comparisons are case-insensitive. The availability value
    is compared exactly, as the scorer compares it.

    Raises:
        InvalidRatingFilterError: If ``criteria.rating`` is not numeric.
    """
    candidates = list(as_record_tuple(tutors, TutorCandidate))

    subject = text_or_none(criteria.subject)
    if subject is not None:
        candidates = [t for t in candidates if any(_contains(s, subject) for s in t.specialties)]

    min_rating = parse_rating_filter(criteria.rating)
    if min_rating is not None:
        candidates = [t for t in candidates if t.rating >= min_rating]

    if text_or_none(criteria.availability) == AVAILABILITY_NOW:
        candidates = [t for t in candidates if t.status == TUTOR_STATUS_AVAILABLE]

    query = text_or_none(criteria.search_query)
    if query is not None:
        candidates = [
            t
            for t in candidates
            if any(_contains(s, query) for s in t.specialties) or _contains(t.bio, query)
        ]

    return candidates


def search_tutors(
    tutors: object,
    student: StudentProfile,
    criteria: SearchCriteria,
    *,
    now: datetime,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> TutorSearchPage:
    """Filter, rank and paginate tutors for one student.

    Raises:
        InvalidPaginationError: If ``page`` or ``limit`` is below 1.
        InvalidRatingFilterError: If ``criteria.rating`` is not numeric.
    """
    if page < 1:
        raise InvalidPaginationError("page", page)
    if limit < 1:
        raise InvalidPaginationError("limit", limit)

    candidates = filter_candidates(tutors, criteria)
    ranked = rank_tutors(candidates, student, criteria, now=now)
    total = len(ranked)
    offset = (page - 1) * limit

    logger.info(
        "Ranked %s tutor candidates for student %s (page %s of %s)",
        total,
        student.id,
        page,
        math.ceil(total / limit),
    )
    return TutorSearchPage(
        results=tuple(ranked[offset : offset + limit]),
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )
