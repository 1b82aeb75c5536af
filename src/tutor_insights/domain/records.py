"""Immutable value records consumed by the matching and analytics domain.

Records are built once at the IO boundary (see ``infrastructure.io.validation``)
and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

# Index matches ``datetime.weekday()`` (Monday == 0).
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

TUTOR_STATUS_AVAILABLE = "available"
TUTOR_STATUS_BUSY = "busy"
TUTOR_STATUS_OFFLINE = "offline"

SESSION_STATUS_COMPLETED = "completed"

ROLE_STUDENT = "student"
ROLE_TUTOR = "tutor"

ENTITY_STUDENT = "student"
ENTITY_TUTOR = "tutor"
ENTITY_TYPES = frozenset({ENTITY_STUDENT, ENTITY_TUTOR})


def _empty_availability() -> MappingProxyType[str, tuple[str, ...]]:
    return MappingProxyType({day: () for day in WEEKDAYS})


def build_availability(
    slots_by_day: Mapping[str, object] | None,
) -> MappingProxyType[str, tuple[str, ...]]:
    """Return a read-only mapping holding exactly the seven weekday keys.

    Unknown keys are dropped, missing days become empty, and non-sequence
    slot values are treated as no slots.
    """
    if not slots_by_day:
        return _empty_availability()
    out: dict[str, tuple[str, ...]] = {}
    for day in WEEKDAYS:
        raw = slots_by_day.get(day)
        if isinstance(raw, (list, tuple)):
            out[day] = tuple(str(slot) for slot in raw)
        else:
            out[day] = ()
    return MappingProxyType(out)


@dataclass(frozen=True)
class StudentProfile:
    """The searching student, used only for profile-fit scoring."""

    id: str
    name: str = ""
    university: str | None = None
    major: str | None = None


@dataclass(frozen=True)
class TutorCandidate:
    """A tutor that can be scored against a student and search criteria."""

    id: str
    name: str = ""
    specialties: tuple[str, ...] = ()
    rating: float = 0.0
    status: str = ""
    availability: MappingProxyType[str, tuple[str, ...]] = field(
        default_factory=_empty_availability
    )
    university: str | None = None
    bio: str = ""

    def has_slots_on(self, day: str) -> bool:
        return len(self.availability.get(day, ())) > 0

    def has_any_slots(self) -> bool:
        return any(len(slots) > 0 for slots in self.availability.values())


@dataclass(frozen=True)
class SearchCriteria:
    """Optional search filters; empty strings count as absent."""

    subject: str | None = None
    rating: str | None = None
    availability: str | None = None
    search_query: str | None = None


@dataclass(frozen=True)
class UserRecord:
    """A platform user as seen by the analytics layer."""

    id: str
    name: str = ""
    role: str = ""
    university: str | None = None
    major: str | None = None

    def as_student_profile(self) -> StudentProfile:
        return StudentProfile(
            id=self.id, name=self.name, university=self.university, major=self.major
        )


@dataclass(frozen=True)
class SessionRecord:
    """A tutoring session; ``start_time`` is None when the source had no usable timestamp."""

    id: str
    student_ids: tuple[str, ...] = ()
    tutor_id: str = ""
    subject: str = ""
    start_time: datetime | None = None
    status: str = ""

    @property
    def is_completed(self) -> bool:
        return self.status == SESSION_STATUS_COMPLETED


@dataclass(frozen=True)
class EvaluationRecord:
    """A student's rating (nominally 1-5) of a tutor."""

    id: str
    student_id: str = ""
    tutor_id: str = ""
    rating: float = 0.0
    created_at: datetime | None = None


@dataclass(frozen=True)
class ProgressEntry:
    """A tutor's progress note for a student, optionally scored 0-10."""

    id: str
    student_id: str = ""
    tutor_id: str = ""
    score: float | None = None
    created_at: datetime | None = None
