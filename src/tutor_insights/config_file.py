"""Typed parsing and validation for tutor-insights config files."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError
from .observability.logging import UnknownLogLevelError, parse_log_level
from .protocols import FileSystem

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class InsightsConfigFile:
    """Validated config values loaded from a TOML file."""

    data_dir: str | None = None
    output_dir: str | None = None
    search_page_size: int | None = None
    analysis_window_days: int | None = None
    leaderboard_size: int | None = None
    name_lookup_workers: int | None = None
    name_lookup_timeout_seconds: float | None = None
    log_level: str | None = None


class _InsightsSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    data_dir: str | None = None
    output_dir: str | None = None
    search_page_size: int | None = None
    analysis_window_days: int | None = None
    leaderboard_size: int | None = None
    name_lookup_workers: int | None = None
    name_lookup_timeout_seconds: float | None = None
    log_level: str | None = None

    @field_validator("data_dir", "output_dir")
    @classmethod
    def _validate_non_empty_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator(
        "search_page_size", "analysis_window_days", "leaderboard_size", "name_lookup_workers"
    )
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1:
            raise ValueError
        return value

    @field_validator("name_lookup_timeout_seconds")
    @classmethod
    def _validate_positive_number(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if value <= 0:
            raise ValueError
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str | None) -> str | None:
        if value is None:
            return None
        level = value.strip().upper()
        try:
            parse_log_level(level)
        except UnknownLogLevelError as exc:
            raise ValueError(str(exc)) from exc
        return level


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    insights: _InsightsSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_insights_config_file(*, path: Path, fs: FileSystem) -> InsightsConfigFile:
    """Load and validate a tutor-insights TOML config file."""
    if not fs.exists(path):
        raise ConfigFileNotFoundError(str(path))

    raw_payload = fs.read_text(path)
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), _format_validation_error(exc)) from exc

    section = model.insights
    return InsightsConfigFile(
        data_dir=section.data_dir,
        output_dir=section.output_dir,
        search_page_size=section.search_page_size,
        analysis_window_days=section.analysis_window_days,
        leaderboard_size=section.leaderboard_size,
        name_lookup_workers=section.name_lookup_workers,
        name_lookup_timeout_seconds=section.name_lookup_timeout_seconds,
        log_level=section.log_level,
    )
