"""CLI for tutor-insights.

Commands:
- search: Rank tutors for a student with optional filters
- analyse: Performance analysis over a scoped time range
- compare: Rank two or more students or tutors against each other
- kpis: Platform KPIs, leaderboards and month-over-month trends
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Protocol

import typer
from rich import print as rprint
from rich import print_json

from . import __version__
from .application.exports import export_comparisons, export_kpi_leaderboards, export_matches
from .application.performance_analysis import (
    ANALYSIS_OVERALL,
    AnalysisScope,
    PlatformRecords,
    compare_performance,
    generate_performance_analysis,
    parse_time_range,
)
from .application.performance_kpis import get_performance_kpis
from .application.serialization import (
    analysis_to_payload,
    comparison_report_to_payload,
    kpis_to_payload,
    search_page_to_payload,
)
from .application.tutor_search import search_tutors
from .config import InsightsConfig
from .config_file import load_insights_config_file
from .domain.records import SearchCriteria, StudentProfile
from .exceptions import TutorInsightsError
from .observability import set_log_level
from .protocols import Clock, FileSystem, NameLookup, RecordStore


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: InsightsConfig) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    fs: FileSystem
    store: RecordStore
    clock: Clock
    lookup: NameLookup


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: InsightsConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(self, *, config: InsightsConfig | None = None) -> CliDependencies:
        """Return dependencies using the configured builder."""
        return self.deps_builder(config=config or self.config)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the tutor-insights entry point.")


def _parse_list(value: str | None) -> tuple[str, ...]:
    """Parse comma-separated string into tuple of stripped values."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


@contextmanager
def _reported_errors() -> Iterator[None]:
    try:
        yield
    except TutorInsightsError as exc:
        rprint(f"[red]✗ {exc}[/red]")
        raise typer.Exit(code=1) from exc


def _version_callback(value: bool) -> None:
    if value:
        rprint(f"tutor-insights {__version__}")
        raise typer.Exit()


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Tutor matching and learning performance analytics.",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        config_path: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="TOML config file (overrides environment values)",
            ),
        ] = None,
        data_dir: Annotated[
            str | None,
            typer.Option("--data-dir", "-d", help="Directory holding the JSON record files"),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR"),
        ] = None,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=_version_callback,
                is_eager=True,
                help="Show the version and exit.",
            ),
        ] = False,
    ) -> None:
        """Initialise CLI context."""
        _ = version
        with _reported_errors():
            config = InsightsConfig.from_env()
            if config_path is not None:
                fs = deps_builder(config=config).fs
                config = config.with_file_overrides(
                    load_insights_config_file(path=config_path, fs=fs)
                )
            config = config.with_overrides(data_dir=data_dir, log_level=log_level)
        try:
            set_log_level(config.log_level)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
        ctx.obj = CliContext(config=config, deps_builder=deps_builder)

    @app.command()
    def search(
        ctx: typer.Context,
        student_id: Annotated[
            str, typer.Option("--student", "-s", help="Id of the student searching")
        ],
        subject: Annotated[str | None, typer.Option("--subject", help="Subject filter")] = None,
        rating: Annotated[
            str | None, typer.Option("--rating", help="Minimum rating, e.g. 4 or 4.5+")
        ] = None,
        availability: Annotated[
            str | None,
            typer.Option("--availability", help="available, today or week"),
        ] = None,
        query: Annotated[
            str | None, typer.Option("--query", "-q", help="Free-text search")
        ] = None,
        page: Annotated[int, typer.Option("--page", help="1-based page number")] = 1,
        limit: Annotated[
            int | None, typer.Option("--limit", help="Results per page")
        ] = None,
        output: Annotated[
            Path | None, typer.Option("--output", "-o", help="Write this page as CSV")
        ] = None,
    ) -> None:
        """Rank tutors for a student."""
        state = _get_context(ctx)
        config = state.config.with_overrides(search_page_size=limit)
        deps = state.build_dependencies(config=config)
        with _reported_errors():
            user = deps.store.find_user(student_id)
            student = StudentProfile(id=student_id) if user is None else user.as_student_profile()
            criteria = SearchCriteria(
                subject=subject, rating=rating, availability=availability, search_query=query
            )
            result = search_tutors(
                deps.store.tutors(),
                student,
                criteria,
                now=deps.clock.now(),
                page=page,
                limit=config.search_page_size,
            )
            if output is not None:
                export_matches(
                    result.results,
                    output,
                    fs=deps.fs,
                    first_rank=(result.page - 1) * result.limit + 1,
                )
                rprint(f"[green]✓ Wrote matches:[/green] {output}")
        print_json(data=search_page_to_payload(result))

    @app.command()
    def analyse(
        ctx: typer.Context,
        analysis_type: Annotated[
            str,
            typer.Option("--type", "-t", help="student, tutor, comparative or overall"),
        ] = ANALYSIS_OVERALL,
        students: Annotated[
            str | None, typer.Option("--students", help="Comma-separated student ids")
        ] = None,
        tutors: Annotated[
            str | None, typer.Option("--tutors", help="Comma-separated tutor ids")
        ] = None,
        subjects: Annotated[
            str | None, typer.Option("--subjects", help="Comma-separated subjects")
        ] = None,
        start: Annotated[str | None, typer.Option("--start", help="ISO-8601 start")] = None,
        end: Annotated[str | None, typer.Option("--end", help="ISO-8601 end")] = None,
        comparisons: Annotated[
            bool, typer.Option("--comparisons", help="Rank the scoped students or tutors")
        ] = False,
        trends: Annotated[
            bool, typer.Option("--trends/--no-trends", help="Include weekly trends")
        ] = True,
    ) -> None:
        """Analyse performance over a scoped time range."""
        state = _get_context(ctx)
        config = state.config
        deps = state.build_dependencies()
        with _reported_errors():
            now = deps.clock.now()
            scope = AnalysisScope(
                student_ids=_parse_list(students),
                tutor_ids=_parse_list(tutors),
                subjects=_parse_list(subjects),
                time_range=parse_time_range(
                    start, end, now=now, days=config.analysis_window_days
                ),
            )
            analysis = generate_performance_analysis(
                analysis_type,
                scope,
                PlatformRecords.from_store(deps.store),
                clock=deps.clock,
                lookup=deps.lookup,
                include_comparisons=comparisons,
                include_trends=trends,
                window_days=config.analysis_window_days,
                max_workers=config.name_lookup_workers,
                timeout_seconds=config.name_lookup_timeout_seconds,
            )
        print_json(data=analysis_to_payload(analysis))

    @app.command()
    def compare(
        ctx: typer.Context,
        entity_type: Annotated[
            str, typer.Option("--entity-type", "-e", help="student or tutor")
        ],
        ids: Annotated[str, typer.Option("--ids", help="Comma-separated ids (at least 2)")],
        start: Annotated[str | None, typer.Option("--start", help="ISO-8601 start")] = None,
        end: Annotated[str | None, typer.Option("--end", help="ISO-8601 end")] = None,
        output: Annotated[
            Path | None, typer.Option("--output", "-o", help="Write comparisons as CSV")
        ] = None,
    ) -> None:
        """Compare two or more students or tutors."""
        state = _get_context(ctx)
        config = state.config
        deps = state.build_dependencies()
        with _reported_errors():
            time_range = parse_time_range(
                start, end, now=deps.clock.now(), days=config.analysis_window_days
            )
            report = compare_performance(
                _parse_list(ids),
                entity_type,
                PlatformRecords.from_store(deps.store),
                time_range=time_range,
                clock=deps.clock,
                lookup=deps.lookup,
                window_days=config.analysis_window_days,
                max_workers=config.name_lookup_workers,
                timeout_seconds=config.name_lookup_timeout_seconds,
            )
            if output is not None:
                export_comparisons(report.comparisons, output, fs=deps.fs)
                rprint(f"[green]✓ Wrote comparisons:[/green] {output}")
        print_json(data=comparison_report_to_payload(report))

    @app.command()
    def kpis(
        ctx: typer.Context,
        output_dir: Annotated[
            Path | None,
            typer.Option("--output-dir", "-o", help="Write leaderboards as CSV files here"),
        ] = None,
        export: Annotated[
            bool,
            typer.Option("--export", help="Write leaderboards to the configured output dir"),
        ] = False,
    ) -> None:
        """Show platform KPIs, leaderboards and month-over-month trends."""
        state = _get_context(ctx)
        config = state.config
        deps = state.build_dependencies()
        with _reported_errors():
            summary = get_performance_kpis(
                PlatformRecords.from_store(deps.store),
                clock=deps.clock,
                lookup=deps.lookup,
                limit=config.leaderboard_size,
                max_workers=config.name_lookup_workers,
                timeout_seconds=config.name_lookup_timeout_seconds,
            )
            target_dir = output_dir or (Path(config.output_dir) if export else None)
            if target_dir is not None:
                for path in export_kpi_leaderboards(summary, target_dir, fs=deps.fs):
                    rprint(f"[green]✓ Wrote leaderboard:[/green] {path}")
        print_json(data=kpis_to_payload(summary))

    return app
