"""
Plain-text rendering of routes and search results.
"""

from typing import List, Sequence

import click

from apimap.schemas.route_index import RouteRecord
from apimap.schemas.search import SearchOutcome

MIN_METHOD_WIDTH = 6
MIN_PATH_WIDTH = 4


def truncate_path(path: str, width: int) -> str:
    """Cut a path to ``width`` characters, ending in "..." when shortened"""
    if len(path) <= width:
        return path
    return path[:width - 3] + "..."


def _method_width(routes: Sequence[RouteRecord]) -> int:
    return max([MIN_METHOD_WIDTH] + [len(r.method_name) for r in routes if r.method_name])


def format_search_lines(outcome: SearchOutcome, path_width: int = 50) -> List[str]:
    """One ``METHOD PATH  file:line`` line per result, paths truncated"""
    routes = outcome.routes
    if not routes:
        return []

    method_width = _method_width(routes)
    column = max(MIN_PATH_WIDTH, min(path_width, max(len(r.path) for r in routes)))

    lines = []
    for route in routes:
        method = (route.method_name or "").ljust(method_width)
        path = truncate_path(route.path, path_width).ljust(column)
        lines.append(f"{method} {path}  {route.source}")
    return lines


def format_list_lines(routes: Sequence[RouteRecord]) -> List[str]:
    """One ``METHOD  PATH  file:line`` line per route, no truncation"""
    if not routes:
        return []

    method_width = _method_width(routes)
    path_width = max([MIN_PATH_WIDTH] + [len(r.path) for r in routes])

    return [
        f"{(r.method_name or '').ljust(method_width)}  {r.path.ljust(path_width)}  {r.source}"
        for r in routes
    ]


def search_footer(outcome: SearchOutcome) -> str:
    if outcome.has_more:
        return (
            f"Showing {outcome.shown} of {outcome.total_matches} result(s) "
            f"(use --limit to see more)"
        )
    return f"Found {outcome.shown} result(s)"


def echo_search(outcome: SearchOutcome, path_width: int = 50) -> None:
    """Print search results with a summary footer"""
    if not outcome.results:
        click.echo("No matches found.")
        return

    for line in format_search_lines(outcome, path_width):
        click.echo(line.rstrip())
    click.echo()
    click.echo(search_footer(outcome))


def echo_list(routes: Sequence[RouteRecord]) -> None:
    """Print a route listing with a total"""
    if not routes:
        click.echo("No routes found.")
        return

    for line in format_list_lines(routes):
        click.echo(line.rstrip())
    click.echo()
    click.echo(f"Total: {len(routes)} route(s)")
