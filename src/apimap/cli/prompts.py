"""
Interactive project-type selection used when no index is cached.
"""

from typing import Optional

import click
from loguru import logger

from apimap.discovery.base import DiscoveryBackend
from apimap.discovery.registry import BackendRegistry


def prompt_for_backend(registry: BackendRegistry) -> Optional[DiscoveryBackend]:
    """
    Ask the user which kind of project the repository is.

    Returns:
        Chosen backend, or None on invalid input or closed stdin
    """
    backends = registry.backends()

    click.echo()
    click.echo("No route index found.")
    click.echo("What type of project is this?")
    click.echo()
    for number, backend in enumerate(backends, start=1):
        click.echo(f"  [{number}] {backend.name}")
    click.echo()

    try:
        answer = click.prompt("Select option", default="", show_default=False)
    except click.Abort:
        logger.debug("Project type prompt aborted")
        return None

    answer = answer.strip()
    if answer.isdigit() and 1 <= int(answer) <= len(backends):
        return backends[int(answer) - 1]

    click.echo("Invalid selection.")
    return None
