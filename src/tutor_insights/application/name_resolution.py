"""Batch display-name resolution.

Lookups for every distinct id are issued together on a thread pool and
awaited as a batch with one overall timeout. An id whose lookup raises,
returns nothing, or does not finish in time resolves to ``"Unknown"``.

Usage example:
    >>> from tutor_insights.application.name_resolution import resolve_display_names
    >>> names = resolve_display_names(["t1", "t2"], {"t1": "Ada"}.get)
    >>> names["t1"], names["t2"]
    ('Ada', 'Unknown')
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, wait

from ..domain.comparisons import UNKNOWN_NAME
from ..observability import get_logger
from ..protocols import NameLookup, RecordStore

DEFAULT_MAX_WORKERS = 8
DEFAULT_TIMEOUT_SECONDS = 5.0

logger = get_logger("tutor_insights.name_resolution")


def lookup_from_store(store: RecordStore) -> NameLookup:
    """Build a lookup that reads user display names from a record store."""

    def lookup(entity_id: str) -> str | None:
        user = store.find_user(entity_id)
        return None if user is None else user.name

    return lookup


def _name_from(future: Future[str | None], entity_id: str) -> str:
    if not future.done():
        logger.warning("Name lookup for %s timed out", entity_id)
        return UNKNOWN_NAME
    exc = future.exception()
    if exc is not None:
        logger.warning("Name lookup for %s failed: %s", entity_id, exc)
        return UNKNOWN_NAME
    name = future.result()
    if name is None or not name.strip():
        return UNKNOWN_NAME
    return name.strip()


def resolve_display_names(
    entity_ids: Iterable[str],
    lookup: NameLookup,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> dict[str, str]:
    """Resolve display names for ``entity_ids`` concurrently.

    Returns:
        Mapping of every distinct id to its name or ``"Unknown"``.
    """
    unique_ids = list(dict.fromkeys(entity_ids))
    if not unique_ids:
        return {}

    executor = ThreadPoolExecutor(max_workers=min(max_workers, len(unique_ids)))
    try:
        futures = {entity_id: executor.submit(lookup, entity_id) for entity_id in unique_ids}
        wait(futures.values(), timeout=timeout_seconds)
        names = {entity_id: _name_from(future, entity_id) for entity_id, future in futures.items()}
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    unresolved = sum(1 for name in names.values() if name == UNKNOWN_NAME)
    logger.info("Resolved %s names (%s unknown)", len(names), unresolved)
    return names
