"""Pydantic-based validation of inbound JSON records.

Each ``parse_*`` function validates one decoded JSON object and returns the
matching immutable domain record, normalising the loose shapes the stored
files use (scalar-or-list ids, alternative field names, missing collections).
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import cache
from types import MappingProxyType
from typing import Any, TypedDict

from pydantic import TypeAdapter, ValidationError

from ...domain.records import (
    WEEKDAYS,
    EvaluationRecord,
    ProgressEntry,
    SessionRecord,
    TutorCandidate,
    UserRecord,
    build_availability,
)
from ...exceptions import IncomingDataError
from ...normalization import as_id_tuple, parse_timestamp, text_or_none


class UserInput(TypedDict, total=False):
    id: str
    name: str | None
    firstName: str | None
    lastName: str | None
    role: str | None
    university: str | None
    major: str | None


class TimeSlotInput(TypedDict, total=False):
    day: str | None
    startTime: str | None
    endTime: str | None


class TutorInput(TypedDict, total=False):
    id: str
    userId: str | None
    name: str | None
    specialties: list[str] | None
    subjects: list[str] | None
    rating: float | None
    status: str | None
    availability: dict[str, list[str] | None] | list[object] | None
    university: str | None
    bio: str | None


class SessionInput(TypedDict, total=False):
    id: str
    studentIds: list[str] | str | None
    studentId: str | None
    tutorId: str | None
    subject: str | None
    subjectId: str | None
    startTime: str | None
    scheduledAt: str | None
    status: str | None


class EvaluationInput(TypedDict, total=False):
    id: str
    studentId: str | None
    tutorId: str | None
    rating: float
    createdAt: str | None


class ProgressEntryInput(TypedDict, total=False):
    id: str
    studentId: str | None
    tutorId: str | None
    score: float | None
    createdAt: str | None


@cache
def _adapter_for(schema: Any) -> TypeAdapter[Any]:
    return TypeAdapter(schema)


def validate_as[SchemaT](schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return _adapter_for(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema.__name__}: {exc.errors()[0].get('msg', '')}"
        raise IncomingDataError(message) from exc


def validate_json_as[SchemaT](schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return _adapter_for(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema}."
        raise IncomingDataError(message) from exc


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _require_id(payload: Mapping[str, object], kind: str) -> str:
    raw_id = payload.get("id")
    record_id = text_or_none(raw_id) if isinstance(raw_id, str) else None
    if record_id is None:
        raise IncomingDataError(f"{kind} record is missing an id.")
    return record_id


def display_name(user: UserInput) -> str:
    """Return ``name``, falling back to ``firstName lastName``."""
    name = text_or_none(user.get("name"))
    if name is not None:
        return name
    parts = [text_or_none(user.get("firstName")), text_or_none(user.get("lastName"))]
    return " ".join(part for part in parts if part)


def _availability_from_slots(slots: list[object]) -> MappingProxyType[str, tuple[str, ...]]:
    by_day: dict[str, list[str]] = {day: [] for day in WEEKDAYS}
    for raw_slot in slots:
        if not isinstance(raw_slot, dict):
            continue
        slot = validate_as(TimeSlotInput, raw_slot)
        day = (slot.get("day") or "").strip().lower()
        if day in by_day:
            by_day[day].append(f"{_as_str(slot.get('startTime'))}-{_as_str(slot.get('endTime'))}")
    return build_availability(by_day)


def parse_user(payload: object) -> UserRecord:
    user = validate_as(UserInput, payload)
    return UserRecord(
        id=_require_id(user, "User"),
        name=display_name(user),
        role=(user.get("role") or "").strip().lower(),
        university=text_or_none(user.get("university")),
        major=text_or_none(user.get("major")),
    )


def parse_tutor(payload: object) -> TutorCandidate:
    tutor = validate_as(TutorInput, payload)
    specialties = tutor.get("specialties")
    if specialties is None:
        specialties = tutor.get("subjects") or []
    raw_availability = tutor.get("availability")
    if isinstance(raw_availability, dict):
        availability = build_availability(raw_availability)
    elif isinstance(raw_availability, list):
        availability = _availability_from_slots(raw_availability)
    else:
        availability = build_availability(None)
    return TutorCandidate(
        id=_require_id(tutor, "Tutor"),
        name=_as_str(tutor.get("name")),
        specialties=tuple(s for s in specialties if s),
        rating=float(tutor.get("rating") or 0.0),
        status=(tutor.get("status") or "").strip().lower(),
        availability=availability,
        university=text_or_none(tutor.get("university")),
        bio=_as_str(tutor.get("bio")),
    )


def parse_session(payload: object) -> SessionRecord:
    session = validate_as(SessionInput, payload)
    student_ids = session.get("studentIds")
    if student_ids is None:
        student_ids = session.get("studentId")
    return SessionRecord(
        id=_require_id(session, "Session"),
        student_ids=as_id_tuple(student_ids),
        tutor_id=_as_str(session.get("tutorId")),
        subject=_as_str(session.get("subject") or session.get("subjectId")),
        start_time=parse_timestamp(session.get("startTime") or session.get("scheduledAt")),
        status=(session.get("status") or "").strip().lower(),
    )


def parse_evaluation(payload: object) -> EvaluationRecord:
    evaluation = validate_as(EvaluationInput, payload)
    if "rating" not in evaluation:
        raise IncomingDataError("Evaluation record is missing a rating.")
    return EvaluationRecord(
        id=_require_id(evaluation, "Evaluation"),
        student_id=_as_str(evaluation.get("studentId")),
        tutor_id=_as_str(evaluation.get("tutorId")),
        rating=float(evaluation["rating"]),
        created_at=parse_timestamp(evaluation.get("createdAt")),
    )


def parse_progress_entry(payload: object) -> ProgressEntry:
    entry = validate_as(ProgressEntryInput, payload)
    score = entry.get("score")
    return ProgressEntry(
        id=_require_id(entry, "Progress entry"),
        student_id=_as_str(entry.get("studentId")),
        tutor_id=_as_str(entry.get("tutorId")),
        score=None if score is None else float(score),
        created_at=parse_timestamp(entry.get("createdAt")),
    )
