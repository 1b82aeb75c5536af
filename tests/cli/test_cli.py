"""Tests for CLI wiring and overrides."""

import json
import re
from pathlib import Path
from typing import Any

import pytest
import typer
from click.testing import Result
from typer.testing import CliRunner

from tests.fakes import FakeClock, FakeNameLookup, InMemoryFileSystem, InMemoryRecordStore
from tests.support.builders import at, evaluation, progress, session, tutor, user
from tutor_insights import cli
from tutor_insights.application.exports import MOST_ACTIVE_FILE, TOP_PERFORMERS_FILE, TOP_RATED_FILE
from tutor_insights.cli import CliDependencies
from tutor_insights.config import InsightsConfig

runner = CliRunner()
_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

NOW = at(2024, 3, 15)


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE_RE.sub("", text)


def _json_output(result: Result) -> dict[str, Any]:
    text = _strip_ansi(result.stdout)
    payload = json.loads(text[text.index("{") :])
    assert isinstance(payload, dict)
    return payload


def _store() -> InMemoryRecordStore:
    return InMemoryRecordStore(
        user_records=[
            user("s1", "Sam", "student", university="MIT"),
            user("s2", "Kim", "student"),
            user("t1", "Ada", "tutor"),
            user("t2", "Grace", "tutor"),
        ],
        tutor_records=[
            tutor("t1", specialties=("Calculus",), rating=4.5, status="available", name="Ada"),
            tutor("t2", specialties=("Statistics",), rating=4.9, status="busy", name="Grace"),
            tutor("t3", specialties=("Calculus II",), rating=3.0, status="available", name="Lin"),
        ],
        session_records=[
            session("a", students=("s1",), tutor_id="t1", start=at(2024, 3, 1)),
            session("b", students=("s2",), tutor_id="t2", start=at(2024, 3, 5)),
            session("c", students=("s1", "s2"), tutor_id="t1", start=at(2024, 2, 20), status="cancelled"),
        ],
        evaluation_records=[
            evaluation("e1", student_id="s1", tutor_id="t1", rating=4.0, created=at(2024, 3, 2)),
            evaluation("e2", student_id="s2", tutor_id="t2", rating=5.0, created=at(2024, 3, 6)),
        ],
        progress_records=[
            progress("p1", student_id="s1", tutor_id="t1", score=6.0, created=at(2024, 3, 3)),
            progress("p2", student_id="s2", tutor_id="t2", score=9.0, created=at(2024, 3, 7)),
        ],
    )


def _dependencies(fs: InMemoryFileSystem | None = None) -> CliDependencies:
    store = _store()
    return CliDependencies(
        fs=fs or InMemoryFileSystem(),
        store=store,
        clock=FakeClock(NOW),
        lookup=FakeNameLookup(names={u.id: u.name for u in store.user_records}),
    )


def _build_app_with_dependencies(
    deps: CliDependencies, seen: list[InsightsConfig] | None = None
) -> typer.Typer:
    def build_with_shared_deps(*, config: InsightsConfig) -> CliDependencies:
        if seen is not None:
            seen.append(config)
        return deps

    return cli.create_app(build_with_shared_deps)


@pytest.fixture(autouse=True)
def default_env(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_from_env(cls: type[InsightsConfig], dotenv_path: str | None = None) -> InsightsConfig:
        _ = (cls, dotenv_path)
        return InsightsConfig()

    monkeypatch.setattr(cli.InsightsConfig, "from_env", classmethod(fake_from_env))


def test_cli_version_option_prints_package_version(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "__version__", "9.9.9", raising=False)

    result = runner.invoke(_build_app_with_dependencies(_dependencies()), ["--version"])

    assert result.exit_code == 0
    assert "9.9.9" in _strip_ansi(result.output)


def test_cli_search_ranks_tutors_for_student() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(
        app,
        [
            "search",
            "--student",
            "s1",
            "--subject",
            "calculus",
            "--rating",
            "4+",
            "--availability",
            "available",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = _json_output(result)
    assert payload["pagination"] == {"page": 1, "limit": 12, "total": 1, "totalPages": 1}
    results = payload["results"]
    assert isinstance(results, list)
    assert results[0]["tutor"]["id"] == "t1"
    assert results[0]["score"] == pytest.approx(0.925)
    assert results[0]["reasons"] == [
        "Perfect subject match",
        "Available at preferred times",
        "Excellent ratings",
    ]


def test_cli_search_paginates_with_limit_option() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["search", "-s", "s1", "--limit", "1", "--page", "2"])

    assert result.exit_code == 0, result.output
    payload = _json_output(result)
    assert payload["pagination"] == {"page": 2, "limit": 1, "total": 3, "totalPages": 3}


def test_cli_search_writes_csv(tmp_path: Path) -> None:
    fs = InMemoryFileSystem()
    app = _build_app_with_dependencies(_dependencies(fs))
    output = tmp_path / "matches.csv"

    result = runner.invoke(app, ["search", "-s", "s1", "-q", "calculus", "-o", str(output)])

    assert result.exit_code == 0, result.output
    df = fs.read_csv(output)
    assert sorted(df["tutorId"].tolist()) == ["t1", "t3"]
    assert df["rank"].tolist() == [1, 2]


def test_cli_search_rejects_invalid_rating_filter() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["search", "-s", "s1", "--rating", "abc"])

    assert result.exit_code == 1
    assert "not a number" in _strip_ansi(result.output)


def test_cli_search_rejects_page_zero() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["search", "-s", "s1", "--page", "0"])

    assert result.exit_code == 1
    assert "page must be a positive integer" in _strip_ansi(result.output)


def test_cli_analyse_with_tutor_comparisons() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(
        app,
        [
            "analyse",
            "--type",
            "tutor",
            "--tutors",
            "t1, t2",
            "--start",
            "2024-03-01T00:00:00Z",
            "--comparisons",
            "--no-trends",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = _json_output(result)
    assert payload["type"] == "tutor"
    assert payload["trends"] == []
    comparisons = payload["comparisons"]
    assert isinstance(comparisons, list)
    assert [(c["entityId"], c["entityName"], c["rank"]) for c in comparisons] == [
        ("t2", "Grace", 1),
        ("t1", "Ada", 2),
    ]
    assert payload["scope"]["tutorIds"] == ["t1", "t2"]


def test_cli_analyse_defaults_to_overall_window() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["analyse"])

    assert result.exit_code == 0, result.output
    payload = _json_output(result)
    assert payload["type"] == "overall"
    assert payload["comparisons"] is None
    assert payload["metrics"]["attendance"]["total"] == 3
    assert payload["createdAt"] == "2024-03-15T12:00:00+00:00"


def test_cli_analyse_rejects_unknown_type() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["analyse", "--type", "weekly"])

    assert result.exit_code == 1
    assert "weekly" in _strip_ansi(result.output)


def test_cli_analyse_rejects_bad_time_range() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["analyse", "--start", "2024-03-10", "--end", "2024-03-01"])

    assert result.exit_code == 1
    assert "Invalid time range" in _strip_ansi(result.output)


def test_cli_compare_students_and_export(tmp_path: Path) -> None:
    fs = InMemoryFileSystem()
    app = _build_app_with_dependencies(_dependencies(fs))
    output = tmp_path / "compare.csv"

    result = runner.invoke(
        app, ["compare", "--entity-type", "student", "--ids", "s1,s2", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    payload = _json_output(result)
    comparisons = payload["comparisons"]
    assert isinstance(comparisons, list)
    assert [(c["entityId"], c["percentile"]) for c in comparisons] == [("s2", 100), ("s1", 50)]
    assert fs.read_csv(output)["entityName"].tolist() == ["Kim", "Sam"]


def test_cli_compare_requires_two_ids() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["compare", "-e", "tutor", "--ids", "t1"])

    assert result.exit_code == 1
    assert "At least 2 entities" in _strip_ansi(result.output)


def test_cli_compare_rejects_unknown_entity_type() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["compare", "-e", "course", "--ids", "a,b"])

    assert result.exit_code == 1
    assert "course" in _strip_ansi(result.output)


def test_cli_kpis_prints_summary_and_writes_leaderboards() -> None:
    fs = InMemoryFileSystem()
    app = _build_app_with_dependencies(_dependencies(fs))

    result = runner.invoke(app, ["kpis", "--output-dir", "exports"])

    assert result.exit_code == 0, result.output
    payload = _json_output(result)
    assert payload["overall"]["totalSessions"] == 3
    assert payload["tutors"]["topRated"][0]["tutorName"] == "Grace"
    for name in (TOP_PERFORMERS_FILE, TOP_RATED_FILE, MOST_ACTIVE_FILE):
        assert fs.exists(Path("exports") / name)


def test_cli_kpis_export_uses_configured_output_dir() -> None:
    fs = InMemoryFileSystem()
    fs.put_text(
        'schema_version = 1\n\n[insights]\noutput_dir = "reports"\n', Path("insights.toml")
    )
    app = _build_app_with_dependencies(_dependencies(fs))

    result = runner.invoke(app, ["--config", "insights.toml", "kpis", "--export"])

    assert result.exit_code == 0, result.output
    assert fs.exists(Path("reports") / TOP_RATED_FILE)


def test_cli_global_config_file_overrides_env() -> None:
    fs = InMemoryFileSystem()
    fs.put_text(
        'schema_version = 1\n\n[insights]\ndata_dir = "file/data"\nanalysis_window_days = 7\n',
        Path("insights.toml"),
    )
    seen: list[InsightsConfig] = []
    app = _build_app_with_dependencies(_dependencies(fs), seen)

    result = runner.invoke(app, ["--config", "insights.toml", "analyse"])

    assert result.exit_code == 0, result.output
    assert seen[-1].data_dir == "file/data"
    assert seen[-1].analysis_window_days == 7


def test_cli_global_config_file_values_can_be_overridden_by_cli() -> None:
    fs = InMemoryFileSystem()
    fs.put_text(
        'schema_version = 1\n\n[insights]\ndata_dir = "file/data"\n', Path("insights.toml")
    )
    seen: list[InsightsConfig] = []
    app = _build_app_with_dependencies(_dependencies(fs), seen)

    result = runner.invoke(
        app, ["--config", "insights.toml", "--data-dir", "cli/data", "kpis"]
    )

    assert result.exit_code == 0, result.output
    assert seen[-1].data_dir == "cli/data"


def test_cli_global_config_file_missing_fails_fast() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["--config", "missing.toml", "kpis"])

    assert result.exit_code == 1
    assert "Config file not found" in _strip_ansi(result.output)


def test_cli_rejects_unknown_log_level() -> None:
    app = _build_app_with_dependencies(_dependencies())

    result = runner.invoke(app, ["--log-level", "LOUD", "kpis"])

    assert result.exit_code == 2
