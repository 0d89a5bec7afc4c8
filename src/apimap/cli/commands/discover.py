"""
Discover and rediscover commands: (re)build the route index.
"""

from typing import Optional

import click
from loguru import logger

from apimap.cli.context import AppContext, fail
from apimap.exceptions import (
    CacheCorruptError,
    CacheWriteError,
    DiscoveryCancelledError,
    IndexNotFoundError,
    UnsupportedProjectTypeError,
)
from apimap.pipeline import discover_and_save, resolve_backend


def run_discovery(app: AppContext, project_type: Optional[str]) -> None:
    """Resolve a backend, discover routes and save the index."""
    try:
        backend = resolve_backend(app.registry, project_type, app.resolver)
    except UnsupportedProjectTypeError as e:
        fail(str(e))
    except IndexNotFoundError as e:
        fail(str(e))

    store = app.store
    try:
        index = discover_and_save(store, backend, progress=click.echo)
    except DiscoveryCancelledError:
        fail("Discovery cancelled; index not saved")
    except CacheWriteError as e:
        fail(f"Could not save route index: {e}")

    logger.debug(f"{backend!r} produced {len(index.routes)} routes")
    click.echo()
    click.echo(f"Index saved to: {store.index_path}")
    click.echo(f"Total routes: {len(index.routes)}")


@click.command(name="discover")
@click.option("-t", "--type", "project_type", help="Project type (e.g. aspnet, python)")
@click.pass_obj
def discover_command(app: AppContext, project_type: Optional[str]):
    """Discover routes and write the index."""
    run_discovery(app, project_type)


@click.command(name="rediscover")
@click.option("-t", "--type", "project_type", help="Project type (e.g. aspnet, python)")
@click.pass_obj
def rediscover_command(app: AppContext, project_type: Optional[str]):
    """
    Rebuild the index from scratch.

    Without --type, reuses the framework recorded in the existing index when
    it can be read.
    """
    if not project_type and app.store.exists():
        try:
            project_type = app.store.load().project.framework
        except CacheCorruptError as e:
            logger.debug(f"Existing index unreadable, prompting instead: {e}")

    run_discovery(app, project_type)
