"""
Shared state handed to every CLI command through ``ctx.obj``.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import NoReturn, Optional

import click
from loguru import logger

from apimap.config import Settings, settings as default_settings
from apimap.discovery.registry import BackendRegistry, default_registry
from apimap.index.store import IndexStore
from apimap.pipeline import MissingIndexResolver
from apimap.cli.prompts import prompt_for_backend

EXIT_FAILURE = 1
EXIT_USAGE = 2


@dataclass
class AppContext:
    """Registry, store and resolver for one invocation."""

    root: Path = field(default_factory=Path.cwd)
    settings: Settings = field(default_factory=lambda: default_settings)
    registry: Optional[BackendRegistry] = None
    resolver: MissingIndexResolver = prompt_for_backend

    def __post_init__(self):
        self.root = Path(self.root).resolve()
        if self.registry is None:
            self.registry = default_registry()

    @property
    def store(self) -> IndexStore:
        return IndexStore(self.root, self.settings)


def fail(message: str, code: int = EXIT_FAILURE) -> NoReturn:
    """Report an error on stderr and exit"""
    logger.debug(f"Exiting with status {code}: {message}")
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)
