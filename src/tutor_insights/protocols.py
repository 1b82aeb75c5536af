"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces that the services depend on,
enabling isolated unit testing with in-memory implementations.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import pandas as pd

    from .domain.records import (
        EvaluationRecord,
        ProgressEntry,
        SessionRecord,
        TutorCandidate,
        UserRecord,
    )


@runtime_checkable
class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current time as an aware datetime."""
        ...


@runtime_checkable
class NameLookup(Protocol):
    """Resolve an entity id to a display name."""

    def __call__(self, entity_id: str) -> str | None:
        """Return the display name, or None when the entity is unknown."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Abstract filesystem for reading records and writing exports."""

    def read_text(self, path: Path) -> str:
        """Read text file."""
        ...

    def read_json(self, path: Path) -> object:
        """Read and decode a JSON document."""
        ...

    def write_csv(self, df: pd.DataFrame, path: Path) -> None:
        """Write DataFrame to CSV file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        ...

    def mkdir(self, path: Path, parents: bool = True) -> None:
        """Create directory."""
        ...


@runtime_checkable
class RecordStore(Protocol):
    """Read-only access to decoded platform records."""

    def users(self) -> list[UserRecord]:
        """Return every user."""
        ...

    def tutors(self) -> list[TutorCandidate]:
        """Return every tutor profile."""
        ...

    def sessions(self) -> list[SessionRecord]:
        """Return every session."""
        ...

    def evaluations(self) -> list[EvaluationRecord]:
        """Return every evaluation."""
        ...

    def progress_entries(self) -> list[ProgressEntry]:
        """Return every progress entry."""
        ...

    def find_user(self, user_id: str) -> UserRecord | None:
        """Return one user by id, or None."""
        ...
