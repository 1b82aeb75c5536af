"""Concrete infrastructure implementations."""

from .clock import FixedClock, SystemClock
from .filesystem import LocalFileSystem
from .record_store import JsonRecordStore

__all__ = [
    "FixedClock",
    "JsonRecordStore",
    "LocalFileSystem",
    "SystemClock",
]
