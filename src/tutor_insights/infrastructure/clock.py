"""Clock implementations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import override

from ..normalization import ensure_aware
from ..protocols import Clock


class SystemClock(Clock):
    """Wall-clock time in the local timezone, as an aware datetime."""

    @override
    def now(self) -> datetime:
        return datetime.now().astimezone()


@dataclass(frozen=True)
class FixedClock(Clock):
    """A clock pinned to one moment (naive moments are read as UTC)."""

    moment: datetime

    @override
    def now(self) -> datetime:
        return ensure_aware(self.moment)
