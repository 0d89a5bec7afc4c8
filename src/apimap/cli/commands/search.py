"""
Search command: fuzzy or regex lookup of routes.
"""

from typing import Optional

import click
from loguru import logger

from apimap.cli.context import EXIT_USAGE, AppContext, fail
from apimap.cli.commands.common import load_index
from apimap.cli.display import echo_search
from apimap.exceptions import InvalidPatternError
from apimap.schemas.search import SearchMode
from apimap.search.engine import SearchEngine, parse_kind_filter


@click.command(name="search")
@click.argument("pattern", required=False, default="")
@click.option("-t", "--type", "kind", help="Record type: c/controller or e/endpoint")
@click.option("-m", "--method", help="HTTP method filter (implies endpoints)")
@click.option("-l", "--limit", type=click.IntRange(min=1), help="Maximum number of results")
@click.option("-r", "--regex", is_flag=True, help="Treat PATTERN as a case-insensitive regex")
@click.pass_obj
def search_command(app: AppContext, pattern: str, kind: Optional[str],
                   method: Optional[str], limit: Optional[int], regex: bool):
    """
    Search routes for PATTERN.

    Fuzzy mode scores paths segment by segment (e.g. "settings id" finds
    /api/settings/{id}); controllers and actions are matched by name.
    """
    try:
        kind_filter = parse_kind_filter(kind)
    except ValueError as e:
        fail(str(e), EXIT_USAGE)

    index = load_index(app)
    engine = SearchEngine.from_index(index, app.settings)
    mode = SearchMode.LITERAL if regex else SearchMode.FUZZY

    try:
        outcome = engine.search(pattern, kind=kind_filter, method=method, mode=mode, limit=limit)
    except InvalidPatternError as e:
        fail(str(e), EXIT_USAGE)

    logger.debug(f"{outcome.total_matches} match(es) for '{pattern}'")
    echo_search(outcome, app.settings.display_path_width)
