"""Composition root for wiring CLI dependencies."""

from __future__ import annotations

from pathlib import Path

from .application.name_resolution import lookup_from_store
from .cli import CliDependencies, create_app
from .config import InsightsConfig
from .infrastructure import JsonRecordStore, LocalFileSystem, SystemClock


def build_cli_dependencies(*, config: InsightsConfig) -> CliDependencies:
    """Build concrete dependencies for CLI commands.

    Args:
        config: Configuration (the data directory selects the record files).
    """
    fs = LocalFileSystem()
    store = JsonRecordStore(data_dir=Path(config.data_dir), fs=fs)
    return CliDependencies(
        fs=fs,
        store=store,
        clock=SystemClock(),
        lookup=lookup_from_store(store),
    )


app = create_app(build_cli_dependencies)
