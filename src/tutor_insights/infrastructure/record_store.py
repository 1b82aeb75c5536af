"""JSON-file backed record store.

Usage example:
    from pathlib import Path

    from tutor_insights.infrastructure.filesystem import LocalFileSystem
    from tutor_insights.infrastructure.record_store import JsonRecordStore

    store = JsonRecordStore(data_dir=Path("data"), fs=LocalFileSystem())
    tutors = store.tutors()

Each collection lives in its own file (``users.json``, ``tutors.json``,
``sessions.json``, ``evaluations.json``, ``progress.json``). A file holds
either a bare JSON array or an object wrapping the array under the
collection name, ``data`` or ``items``. A missing file is an empty
collection. Each file is read and parsed once per store instance, and users
are indexed by id on first lookup.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast, override

from ..domain.records import (
    EvaluationRecord,
    ProgressEntry,
    SessionRecord,
    TutorCandidate,
    UserRecord,
)
from ..exceptions import IncomingDataError, RecordFileError
from ..observability import get_logger
from ..protocols import FileSystem, RecordStore
from .io.validation import (
    parse_evaluation,
    parse_progress_entry,
    parse_session,
    parse_tutor,
    parse_user,
)

USERS_FILE = "users.json"
TUTORS_FILE = "tutors.json"
SESSIONS_FILE = "sessions.json"
EVALUATIONS_FILE = "evaluations.json"
PROGRESS_FILE = "progress.json"

_WRAPPER_KEYS = ("data", "items")

logger = get_logger("tutor_insights.record_store")


def _empty_cache() -> dict[str, list[object]]:
    return {}


def _empty_index() -> dict[str, UserRecord]:
    return {}


def unwrap_collection(payload: object, *, collection: str, path: Path) -> list[object]:
    """Return the record list from a bare array or a wrapping object."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in (collection, *_WRAPPER_KEYS):
            value = payload.get(key)
            if isinstance(value, list):
                return value
        raise RecordFileError(
            str(path), f"expected an array under '{collection}', 'data' or 'items'"
        )
    raise RecordFileError(str(path), "expected a JSON array or object")


@dataclass
class JsonRecordStore(RecordStore):
    """Read records from a directory of JSON files through an injected FileSystem."""

    data_dir: Path
    fs: FileSystem
    _cache: dict[str, list[object]] = field(default_factory=_empty_cache, repr=False)
    _parsed: dict[str, list[object]] = field(default_factory=_empty_cache, repr=False)
    _users_by_id: dict[str, UserRecord] = field(default_factory=_empty_index, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)

    def _raw_items(self, filename: str, collection: str) -> list[object]:
        if filename not in self._cache:
            path = self.data_dir / filename
            if not self.fs.exists(path):
                logger.info("No %s in %s; treating as empty", filename, self.data_dir)
                self._cache[filename] = []
            else:
                try:
                    payload = self.fs.read_json(path)
                except IncomingDataError as exc:
                    raise RecordFileError(str(path), "not valid JSON") from exc
                self._cache[filename] = unwrap_collection(
                    payload, collection=collection, path=path
                )
                logger.info("Loaded %s %s from %s", len(self._cache[filename]), collection, path)
        return self._cache[filename]

    def _load[RecordT](
        self, filename: str, collection: str, parse: Callable[[object], RecordT]
    ) -> list[RecordT]:
        with self._lock:
            if filename not in self._parsed:
                items = self._raw_items(filename, collection)
                try:
                    self._parsed[filename] = [parse(item) for item in items]
                except IncomingDataError as exc:
                    raise RecordFileError(str(self.data_dir / filename), str(exc)) from exc
            return cast(list[RecordT], list(self._parsed[filename]))

    @override
    def users(self) -> list[UserRecord]:
        return self._load(USERS_FILE, "users", parse_user)

    @override
    def tutors(self) -> list[TutorCandidate]:
        return self._load(TUTORS_FILE, "tutors", parse_tutor)

    @override
    def sessions(self) -> list[SessionRecord]:
        return self._load(SESSIONS_FILE, "sessions", parse_session)

    @override
    def evaluations(self) -> list[EvaluationRecord]:
        return self._load(EVALUATIONS_FILE, "evaluations", parse_evaluation)

    @override
    def progress_entries(self) -> list[ProgressEntry]:
        return self._load(PROGRESS_FILE, "progress", parse_progress_entry)

    @override
    def find_user(self, user_id: str) -> UserRecord | None:
        if not self._users_by_id:
            index: dict[str, UserRecord] = {}
            for user in self.users():
                index.setdefault(user.id, user)
            self._users_by_id = index
        return self._users_by_id.get(user_id)
