"""
Helpers shared by the query commands.
"""

import click

from apimap.cli.context import AppContext, fail
from apimap.exceptions import (
    CacheCorruptError,
    CacheWriteError,
    DiscoveryCancelledError,
    IndexNotFoundError,
)
from apimap.pipeline import load_or_discover
from apimap.schemas.route_index import RouteIndex


def load_index(app: AppContext) -> RouteIndex:
    """Load the cached index, discovering one interactively if missing; exit on failure"""
    try:
        return load_or_discover(app.store, app.registry, app.resolver, progress=click.echo)
    except CacheCorruptError as e:
        fail(f"{e}\nRun 'apimap rediscover' to rebuild the index.")
    except IndexNotFoundError:
        fail("No route index found. Run 'apimap discover' first.")
    except CacheWriteError as e:
        fail(f"Could not save route index: {e}")
    except DiscoveryCancelledError:
        fail("Discovery cancelled; index not saved")
