"""Exports for test fakes."""

from .filesystem import InMemoryFileSystem
from .records import FakeClock, FakeNameLookup, InMemoryRecordStore

__all__ = [
    "FakeClock",
    "FakeNameLookup",
    "InMemoryFileSystem",
    "InMemoryRecordStore",
]
