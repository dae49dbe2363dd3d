"""CLI for release-curator using Typer and Rich.

Runs the curation resolver and the calendar browser over a feed snapshot
stored as JSON (a list of records, or an object with an ``items`` list).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import date
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from release_curator.config import Config, CurationPolicy
from release_curator.console import (
    print as cprint,
)
from release_curator.console import (
    print_error,
    print_warning,
    release_table,
    set_console,
)
from release_curator.errors import CurationError, FeedShapeError
from release_curator.models import MediaType, ReleaseCandidate, parse_records
from release_curator.normalize import TitleNormalizer
from release_curator.release_calendar import CalendarQuery, build_filters, query_calendar
from release_curator.resolver import CurationResolver
from release_curator.safe_logging import configure_rich_logging


class OutputFormat(StrEnum):
    """Output format for CLI commands."""

    TEXT = "text"
    JSON = "json"


class ExitCode:
    """Standard exit codes for CLI commands."""

    SUCCESS = 0
    ERROR = 1
    NO_RESULTS = 2


app = typer.Typer(
    name="curate",
    help="Release curator: deduplicated, time-diversified picks from a release calendar feed",
    no_args_is_help=True,
    add_completion=False,
)


# Global state (set by callback)
class AppState:
    """Global application state passed between commands."""

    config: Config
    output_format: OutputFormat
    verbose: int


state = AppState()


def _load_feed(path: Path) -> list[Any]:
    """Read a feed snapshot; accepts a bare list or {"items": [...]}."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "items" in payload:
        payload = payload["items"]
    if not isinstance(payload, list):
        raise FeedShapeError(f"{path.name}: expected a list of release records")
    return payload


def _load_candidates(path: Path) -> list[ReleaseCandidate]:
    logger = logging.getLogger(__name__)
    candidates, problems = parse_records(_load_feed(path))
    for problem in problems:
        logger.warning(f"Dropping feed record {problem}")
    return candidates


def _fail(message: str) -> NoReturn:
    print_error(message)
    sys.exit(ExitCode.ERROR)


def _emit_json(payload: Any) -> None:
    cprint(
        json.dumps(payload, indent=2, ensure_ascii=False),
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


@app.callback()
def main(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Path to configuration TOML file", exists=True),
    ] = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", "-o", help="Output format"),
    ] = OutputFormat.TEXT,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity"),
    ] = 0,
    max_total: Annotated[
        int | None, typer.Option(help="Maximum number of releases to pick", min=0)
    ] = None,
    today_cap: Annotated[
        int | None, typer.Option(help="Hard cap on releases dated today", min=0)
    ] = None,
) -> None:
    """Release curator: deduplicated, time-diversified picks from a release feed."""
    logger = logging.getLogger(__name__)

    # Load config (TOML + env vars)
    cfg = Config.load(config_path)

    # CLI > Env > Config File > Defaults
    overrides: dict[str, int] = {}
    if max_total is not None:
        overrides["max_total"] = max_total
    if today_cap is not None:
        overrides["releasing_today_cap"] = today_cap
    if overrides:
        # Rebuilt so CLI values pass the same validation as TOML and env values
        cfg.curation = CurationPolicy.model_validate({**cfg.curation.model_dump(), **overrides})

    if verbose > 0:
        log_level = logging.DEBUG if verbose >= 2 else logging.INFO
    else:
        level_str = cfg.logging.level.upper()
        log_level = getattr(logging, level_str, logging.WARNING)

    console = configure_rich_logging(
        level=log_level,
        format_string=cfg.logging.format,
        truncate_length=cfg.logging.truncate_titles,
        show_time=verbose > 0,
    )
    set_console(console)

    if config_path:
        logger.info(f"Loaded config from {config_path}")
    logger.debug(f"Logging configured: level={logging.getLevelName(log_level)}")

    state.config = cfg
    state.output_format = output
    state.verbose = verbose


@app.command()
def pick(
    feed: Annotated[Path, typer.Argument(help="Feed snapshot (JSON)", exists=True, dir_okay=False)],
    today: Annotated[
        str | None, typer.Option(help="Reference date YYYY-MM-DD (default: local date)")
    ] = None,
    explain: Annotated[bool, typer.Option(help="Show how the picks were made")] = False,
) -> None:
    """Pick the releases for the upcoming-releases slot.

    Examples:
        curate pick releases.json
        curate pick releases.json --today 2025-01-15 --explain
        curate -o json pick releases.json
    """
    reference = today or date.today().isoformat()

    try:
        records = _load_feed(feed)
        result = CurationResolver(state.config.curation).resolve(records, reference)
    except (CurationError, json.JSONDecodeError, OSError) as e:
        _fail(str(e))

    if state.output_format == OutputFormat.JSON:
        output_dict: dict[str, Any] = {
            "today": result.trace.today,
            "items": result.to_records(),
            "stats": result.stats.to_dict(),
        }
        if explain:
            output_dict["trace"] = result.trace.to_dict()
        _emit_json(output_dict)
    else:
        if result.items:
            cprint(release_table(result.items, today=reference, title=f"Picks for {reference}"))
        else:
            print_warning(f"No releases qualify around {reference}")

        if explain:
            cprint("\n[bold]Curation Trace:[/bold]")
            cprint(result.trace.to_human_readable(), markup=False)

    sys.exit(ExitCode.SUCCESS if result.items else ExitCode.NO_RESULTS)


@app.command()
def calendar(
    feed: Annotated[Path, typer.Argument(help="Feed snapshot (JSON)", exists=True, dir_okay=False)],
    media_type: Annotated[MediaType | None, typer.Option("--type", help="movie or tv")] = None,
    region: Annotated[str | None, typer.Option(help="Region substring (全部 for all)")] = None,
    genre: Annotated[str | None, typer.Option(help="Genre substring (全部 for all)")] = None,
    date_from: Annotated[str | None, typer.Option("--from", help="Earliest date YYYY-MM-DD")] = None,
    date_to: Annotated[str | None, typer.Option("--to", help="Latest date YYYY-MM-DD")] = None,
    limit: Annotated[int | None, typer.Option(help="Page size", min=1)] = None,
    offset: Annotated[int, typer.Option(help="Page offset", min=0)] = 0,
) -> None:
    """Browse the full release calendar with filters.

    Examples:
        curate calendar releases.json --type tv --region 美国
        curate calendar releases.json --from 2025-02-01 --to 2025-02-28 --limit 20
    """
    try:
        candidates = _load_candidates(feed)
    except (CurationError, json.JSONDecodeError, OSError) as e:
        _fail(str(e))

    query = CalendarQuery(
        type=media_type,
        region=region,
        genre=genre,
        date_from=date_from,
        date_to=date_to,
        limit=limit or state.config.calendar.page_size,
        offset=offset,
    )
    page = query_calendar(candidates, query)

    if state.output_format == OutputFormat.JSON:
        _emit_json(
            {
                "items": [item.to_dict() for item in page.items],
                "total": page.total,
                "hasMore": page.has_more,
            }
        )
    else:
        cprint(release_table(page.items, title=f"Release calendar ({page.total} total)"))
        if page.has_more:
            cprint(f"[dim]More results after offset {offset + len(page.items)}[/dim]")

    sys.exit(ExitCode.SUCCESS if page.items else ExitCode.NO_RESULTS)


@app.command()
def filters(
    feed: Annotated[Path, typer.Argument(help="Feed snapshot (JSON)", exists=True, dir_okay=False)],
) -> None:
    """Show filter options (types, top regions, top genres) with counts."""
    try:
        candidates = _load_candidates(feed)
    except (CurationError, json.JSONDecodeError, OSError) as e:
        _fail(str(e))

    calendar_cfg = state.config.calendar
    facets = build_filters(candidates, calendar_cfg.region_facets, calendar_cfg.genre_facets)

    if state.output_format == OutputFormat.JSON:
        _emit_json(facets.to_dict())
        return

    for heading, group in (("Types", facets.types), ("Regions", facets.regions), ("Genres", facets.genres)):
        cprint(f"[bold]{heading}:[/bold]")
        for facet in group:
            cprint(f"  {facet.label}: {facet.count}", markup=False)


@app.command()
def normalize(
    titles: Annotated[list[str], typer.Argument(help="Titles to normalize")],
) -> None:
    """Show the grouping key and season-marker flag for titles."""
    normalizer = TitleNormalizer()
    results = [normalizer.normalize(title) for title in titles]

    if state.output_format == OutputFormat.JSON:
        _emit_json(
            [
                {"title": r.original, "key": r.key, "has_season_marker": r.has_season_marker}
                for r in results
            ]
        )
        return

    for r in results:
        marker = " [season]" if r.has_season_marker else ""
        cprint(f"{r.original} -> {r.key}{marker}", markup=False)


# ====================================================================
# ENTRY POINT
# ====================================================================


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
