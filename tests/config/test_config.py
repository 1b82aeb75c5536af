"""Tests for InsightsConfig behaviour."""

import pytest

import tutor_insights.config as config_module
from tutor_insights.config import (
    InsightsConfig,
    LogLevelEnvVarError,
    PositiveIntegerEnvVarError,
    PositiveNumberEnvVarError,
)


def _patch_env(monkeypatch: pytest.MonkeyPatch, env: dict[str, str]) -> None:
    def fake_getenv(key: str, default: str = "") -> str:
        return env.get(key, default)

    def fake_load_dotenv(dotenv_path: str | None = None) -> bool:
        _ = dotenv_path
        return True

    monkeypatch.setattr(config_module.os, "getenv", fake_getenv)
    monkeypatch.setattr(config_module, "load_dotenv", fake_load_dotenv)


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_env(monkeypatch, {})

    assert InsightsConfig.from_env() == InsightsConfig()


def test_from_env_reads_every_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_env(
        monkeypatch,
        {
            "TUTOR_INSIGHTS_DATA_DIR": " fixtures ",
            "TUTOR_INSIGHTS_OUTPUT_DIR": "out",
            "TUTOR_INSIGHTS_PAGE_SIZE": "20",
            "TUTOR_INSIGHTS_WINDOW_DAYS": "7",
            "TUTOR_INSIGHTS_LEADERBOARD_SIZE": "5",
            "TUTOR_INSIGHTS_LOOKUP_WORKERS": "2",
            "TUTOR_INSIGHTS_LOOKUP_TIMEOUT": "0.5",
            "TUTOR_INSIGHTS_LOG_LEVEL": "debug",
        },
    )

    config = InsightsConfig.from_env()

    assert config.data_dir == "fixtures"
    assert config.output_dir == "out"
    assert config.search_page_size == 20
    assert config.analysis_window_days == 7
    assert config.leaderboard_size == 5
    assert config.name_lookup_workers == 2
    assert config.name_lookup_timeout_seconds == 0.5
    assert config.log_level == "DEBUG"


def test_from_env_blank_values_use_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_env(monkeypatch, {"TUTOR_INSIGHTS_DATA_DIR": "  ", "TUTOR_INSIGHTS_PAGE_SIZE": " "})

    config = InsightsConfig.from_env()

    assert config.data_dir == "data"
    assert config.search_page_size == 12


@pytest.mark.parametrize("value", ["zero", "0", "-3", "1.5"])
def test_from_env_rejects_non_positive_integers(
    monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    _patch_env(monkeypatch, {"TUTOR_INSIGHTS_PAGE_SIZE": value})

    with pytest.raises(PositiveIntegerEnvVarError, match="TUTOR_INSIGHTS_PAGE_SIZE"):
        InsightsConfig.from_env()


@pytest.mark.parametrize("value", ["soon", "0", "-1"])
def test_from_env_rejects_non_positive_timeout(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    _patch_env(monkeypatch, {"TUTOR_INSIGHTS_LOOKUP_TIMEOUT": value})

    with pytest.raises(PositiveNumberEnvVarError):
        InsightsConfig.from_env()


def test_from_env_rejects_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_env(monkeypatch, {"TUTOR_INSIGHTS_LOG_LEVEL": "LOUD"})

    with pytest.raises(LogLevelEnvVarError):
        InsightsConfig.from_env()


def test_from_env_passes_dotenv_path(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[str | None] = []

    def fake_load_dotenv(dotenv_path: str | None = None) -> bool:
        seen.append(dotenv_path)
        return True

    _patch_env(monkeypatch, {})
    monkeypatch.setattr(config_module, "load_dotenv", fake_load_dotenv)

    InsightsConfig.from_env(dotenv_path="custom.env")

    assert seen == ["custom.env"]


def test_with_overrides_preserves_fields() -> None:
    base = InsightsConfig(
        data_dir="data",
        output_dir="exports",
        search_page_size=12,
        analysis_window_days=30,
        leaderboard_size=3,
        name_lookup_workers=4,
        name_lookup_timeout_seconds=1.5,
        log_level="WARNING",
    )

    updated = base.with_overrides(data_dir=" other ", search_page_size=5, log_level="debug")

    assert updated.data_dir == "other"
    assert updated.search_page_size == 5
    assert updated.log_level == "DEBUG"
    assert updated.output_dir == base.output_dir
    assert updated.analysis_window_days == base.analysis_window_days
    assert updated.leaderboard_size == base.leaderboard_size
    assert updated.name_lookup_workers == base.name_lookup_workers
    assert updated.name_lookup_timeout_seconds == base.name_lookup_timeout_seconds


def test_with_overrides_without_values_is_unchanged() -> None:
    base = InsightsConfig(data_dir="x")
    assert base.with_overrides() == base
