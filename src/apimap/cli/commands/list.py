"""
List command: unranked route listing with simple filters.
"""

from typing import Optional

import click

from apimap.cli.context import EXIT_USAGE, AppContext, fail
from apimap.cli.commands.common import load_index
from apimap.cli.display import echo_list
from apimap.search.engine import SearchEngine, parse_kind_filter


@click.command(name="list")
@click.option("-m", "--method", help="HTTP method filter")
@click.option("-p", "--path", "path_filter", help="Case-insensitive path substring")
@click.option("-t", "--type", "kind", help="Record type: c/controller or e/endpoint")
@click.pass_obj
def list_command(app: AppContext, method: Optional[str], path_filter: Optional[str],
                 kind: Optional[str]):
    """List indexed routes sorted by path and method."""
    try:
        kind_filter = parse_kind_filter(kind)
    except ValueError as e:
        fail(str(e), EXIT_USAGE)

    index = load_index(app)
    routes = SearchEngine.from_index(index, app.settings).list_routes(
        method=method, path=path_filter, kind=kind_filter
    )
    echo_list(routes)
