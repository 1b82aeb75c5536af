"""Entity comparison ranking.

Ranking is pure and works on ids only; display names are joined on
afterwards with ``attach_names`` so lookups never sit inside the sort.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from ..exceptions import InvalidEntityTypeError
from ..normalization import as_id_tuple, as_record_tuple, round_half_up
from .metrics import PerformanceMetrics, calculate_performance_metrics
from .records import (
    ENTITY_STUDENT,
    ENTITY_TYPES,
    EvaluationRecord,
    ProgressEntry,
    SessionRecord,
)

UNKNOWN_NAME = "Unknown"


@dataclass(frozen=True)
class RankedEntity:
    entity_id: str
    metrics: PerformanceMetrics
    rank: int
    percentile: int


@dataclass(frozen=True)
class PerformanceComparison:
    entity_id: str
    entity_name: str
    metrics: PerformanceMetrics
    rank: int
    percentile: int


def percentile_for(index: int, size: int) -> int:
    """Percentile of the 0-based position ``index`` in a set of ``size``."""
    return round_half_up((size - index) / size * 100)


def _ranking_value(metrics: PerformanceMetrics, entity_type: str) -> float:
    if entity_type == ENTITY_STUDENT:
        return metrics.scores.average
    return metrics.ratings.average


def rank_entities(
    entity_ids: object,
    entity_type: str,
    sessions: object,
    evaluations: object,
    progress_entries: object,
) -> list[RankedEntity]:
    """Compute per-entity metrics and rank them.

    Students rank by average progress score, tutors by average evaluation
    rating, highest first. Equal values keep the order of ``entity_ids``.

    Raises:
        InvalidEntityTypeError: If ``entity_type`` is not ``student`` or ``tutor``.
    """
    if entity_type not in ENTITY_TYPES:
        raise InvalidEntityTypeError(entity_type)

    ids = as_id_tuple(entity_ids)
    session_list = as_record_tuple(sessions, SessionRecord)
    evaluation_list = as_record_tuple(evaluations, EvaluationRecord)
    progress_list = as_record_tuple(progress_entries, ProgressEntry)

    scored: list[tuple[str, PerformanceMetrics]] = []
    for entity_id in ids:
        if entity_type == ENTITY_STUDENT:
            metrics = calculate_performance_metrics(
                [s for s in session_list if entity_id in s.student_ids],
                [e for e in evaluation_list if e.student_id == entity_id],
                [p for p in progress_list if p.student_id == entity_id],
            )
        else:
            metrics = calculate_performance_metrics(
                [s for s in session_list if s.tutor_id == entity_id],
                [e for e in evaluation_list if e.tutor_id == entity_id],
                [p for p in progress_list if p.tutor_id == entity_id],
            )
        scored.append((entity_id, metrics))

    scored.sort(key=lambda item: _ranking_value(item[1], entity_type), reverse=True)

    size = len(scored)
    return [
        RankedEntity(
            entity_id=entity_id,
            metrics=metrics,
            rank=index + 1,
            percentile=percentile_for(index, size),
        )
        for index, (entity_id, metrics) in enumerate(scored)
    ]


def attach_names(
    ranked: list[RankedEntity], names: Mapping[str, str]
) -> list[PerformanceComparison]:
    """Join display names onto ranked entities, ``"Unknown"`` when missing."""
    return [
        PerformanceComparison(
            entity_id=entry.entity_id,
            entity_name=names.get(entry.entity_id) or UNKNOWN_NAME,
            metrics=entry.metrics,
            rank=entry.rank,
            percentile=entry.percentile,
        )
        for entry in ranked
    ]
