"""Centralised, injectable configuration for tutor-insights."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from .config_file import InsightsConfigFile
from .observability.logging import UnknownLogLevelError, parse_log_level


class PositiveIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


class PositiveNumberEnvVarError(ValueError):
    """Raised when an environment variable must be a positive number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive number.")


class LogLevelEnvVarError(ValueError):
    """Raised when an environment variable must name a log level."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be one of DEBUG, INFO, WARNING, ERROR.")


@dataclass(frozen=True)
class InsightsConfig:
    """Immutable configuration shared by the CLI and the services.

    Load from environment with `InsightsConfig.from_env()` or construct directly for testing.
    """

    # Storage
    data_dir: str = "data"
    output_dir: str = "data/exports"

    # Search and analysis
    search_page_size: int = 12
    analysis_window_days: int = 30
    leaderboard_size: int = 10

    # Name resolution
    name_lookup_workers: int = 8
    name_lookup_timeout_seconds: float = 5.0

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            InsightsConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            data_dir=os.getenv("TUTOR_INSIGHTS_DATA_DIR", "data").strip() or "data",
            output_dir=os.getenv("TUTOR_INSIGHTS_OUTPUT_DIR", "data/exports").strip()
            or "data/exports",
            search_page_size=_parse_positive_int(
                os.getenv("TUTOR_INSIGHTS_PAGE_SIZE", ""),
                env_name="TUTOR_INSIGHTS_PAGE_SIZE",
                default=12,
            ),
            analysis_window_days=_parse_positive_int(
                os.getenv("TUTOR_INSIGHTS_WINDOW_DAYS", ""),
                env_name="TUTOR_INSIGHTS_WINDOW_DAYS",
                default=30,
            ),
            leaderboard_size=_parse_positive_int(
                os.getenv("TUTOR_INSIGHTS_LEADERBOARD_SIZE", ""),
                env_name="TUTOR_INSIGHTS_LEADERBOARD_SIZE",
                default=10,
            ),
            name_lookup_workers=_parse_positive_int(
                os.getenv("TUTOR_INSIGHTS_LOOKUP_WORKERS", ""),
                env_name="TUTOR_INSIGHTS_LOOKUP_WORKERS",
                default=8,
            ),
            name_lookup_timeout_seconds=_parse_positive_float(
                os.getenv("TUTOR_INSIGHTS_LOOKUP_TIMEOUT", ""),
                env_name="TUTOR_INSIGHTS_LOOKUP_TIMEOUT",
                default=5.0,
            ),
            log_level=_parse_log_level(
                os.getenv("TUTOR_INSIGHTS_LOG_LEVEL", ""), env_name="TUTOR_INSIGHTS_LOG_LEVEL"
            ),
        )

    def with_overrides(
        self,
        *,
        data_dir: str | None = None,
        output_dir: str | None = None,
        search_page_size: int | None = None,
        analysis_window_days: int | None = None,
        log_level: str | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        return replace(
            self,
            data_dir=self.data_dir if data_dir is None else data_dir.strip(),
            output_dir=self.output_dir if output_dir is None else output_dir.strip(),
            search_page_size=self.search_page_size
            if search_page_size is None
            else search_page_size,
            analysis_window_days=self.analysis_window_days
            if analysis_window_days is None
            else analysis_window_days,
            log_level=self.log_level if log_level is None else log_level.strip().upper(),
        )

    def with_file_overrides(self, file_config: InsightsConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return replace(
            self,
            data_dir=self.data_dir if file_config.data_dir is None else file_config.data_dir,
            output_dir=self.output_dir
            if file_config.output_dir is None
            else file_config.output_dir,
            search_page_size=self.search_page_size
            if file_config.search_page_size is None
            else file_config.search_page_size,
            analysis_window_days=self.analysis_window_days
            if file_config.analysis_window_days is None
            else file_config.analysis_window_days,
            leaderboard_size=self.leaderboard_size
            if file_config.leaderboard_size is None
            else file_config.leaderboard_size,
            name_lookup_workers=self.name_lookup_workers
            if file_config.name_lookup_workers is None
            else file_config.name_lookup_workers,
            name_lookup_timeout_seconds=self.name_lookup_timeout_seconds
            if file_config.name_lookup_timeout_seconds is None
            else file_config.name_lookup_timeout_seconds,
            log_level=self.log_level if file_config.log_level is None else file_config.log_level,
        )


def _parse_positive_int(value: str, *, env_name: str, default: int) -> int:
    """Parse a positive integer from an environment variable, blank meaning default."""
    text = value.strip()
    if not text:
        return default
    try:
        parsed = int(text)
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed


def _parse_positive_float(value: str, *, env_name: str, default: float) -> float:
    """Parse a positive number from an environment variable, blank meaning default."""
    text = value.strip()
    if not text:
        return default
    try:
        parsed = float(text)
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed <= 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_log_level(value: str, *, env_name: str) -> str:
    text = value.strip().upper()
    if not text:
        return "INFO"
    try:
        parse_log_level(text)
    except UnknownLogLevelError as exc:
        raise LogLevelEnvVarError(env_name) from exc
    return text
