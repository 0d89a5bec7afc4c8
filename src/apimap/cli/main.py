"""Main CLI entry point for apimap."""

from pathlib import Path
from typing import Optional

import click

from apimap import __version__
from apimap.cli.context import AppContext
from apimap.cli.commands.discover import discover_command, rediscover_command
from apimap.cli.commands.list import list_command
from apimap.cli.commands.search import search_command
from apimap.utils.logger import setup_logger


class DefaultSearchGroup(click.Group):
    """Group that treats an unknown first argument as a search pattern."""

    default_command = "search"

    def resolve_command(self, ctx, args):
        if args and self.get_command(ctx, args[0]) is None:
            return self.default_command, self.get_command(ctx, self.default_command), args
        return super().resolve_command(ctx, args)


@click.group(
    cls=DefaultSearchGroup,
    context_settings={"ignore_unknown_options": True, "help_option_names": ["-h", "--help"]}
)
@click.version_option(version=__version__)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository root (default: current directory)"
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, root: Optional[Path], verbose: bool):
    """Find HTTP routes in a codebase by fuzzy or regex search.

    \b
    apimap PATTERN        shorthand for 'apimap search PATTERN'
    """
    if verbose:
        setup_logger(level="DEBUG")

    if ctx.obj is None:
        ctx.obj = AppContext(root=root or Path.cwd())
    elif root is not None:
        ctx.obj.root = root.resolve()


@cli.command(name="help")
@click.pass_context
def help_command(ctx: click.Context):
    """Show this message."""
    click.echo(ctx.parent.get_help())


# Register commands
cli.add_command(search_command)
cli.add_command(list_command)
cli.add_command(discover_command)
cli.add_command(rediscover_command)


if __name__ == "__main__":
    cli()
