"""Boundary normalisation helpers shared by the domain entry points.

Every public domain function runs its arguments through these helpers once,
so the computations below them only ever see typed tuples.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import UTC, datetime


def as_record_tuple[RecordT](value: object, record_type: type[RecordT]) -> tuple[RecordT, ...]:
    """Return ``value`` as a tuple of ``record_type`` items.

    Anything that is not a list or tuple becomes an empty tuple; items of the
    wrong type are dropped.
    """
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, record_type))


def as_id_tuple(value: object) -> tuple[str, ...]:
    """Normalise an id or a sequence of ids to a tuple of non-empty strings.

    A single scalar id becomes a one-element tuple.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        text = value.strip()
        return (text,) if text else ()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (str(value),)
    if isinstance(value, Sequence):
        out: list[str] = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                out.append(text)
        return tuple(out)
    return ()


def text_or_none(value: str | None) -> str | None:
    """Treat blank strings as absent."""
    if value is None:
        return None
    text = value.strip()
    return text or None


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. Unparsable values return None.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str) and value.strip():
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def round_2dp(value: float) -> float:
    """Round to two decimal places, halves towards positive infinity."""
    return math.floor(value * 100 + 0.5) / 100


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def ensure_aware(moment: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values keep their own offset."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment
