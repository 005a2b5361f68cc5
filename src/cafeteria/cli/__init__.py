"""Cafeteria CLI - manage the cafeteria drink store from the command line.

Command groups live in separate modules:
- database.py: init, migrate, status, history
- drinks.py: drinks list, show
- config.py: config set, get, show
- common.py: shared utilities
"""
from pathlib import Path
import click

from .. import __version__
from ..config import get_base_path
from .common import VERBOSITY_QUIET, VERBOSITY_NORMAL, VERBOSITY_VERBOSE
from .database import database_group
from .drinks import drinks_group
from .config import config_group


@click.group()
@click.version_option(version=__version__, prog_name="cafeteria")
@click.option('--data-dir', type=click.Path(), default=None, envvar='CAFETERIA_BASE_PATH',
              help='Base directory for cafeteria data (default: ~/.cafeteria)')
@click.option('--verbose', '-v', is_flag=True, default=False,
              help='Enable verbose output and debug logging')
@click.option('--quiet', '-q', is_flag=True, default=False,
              help='Suppress non-essential output')
@click.pass_context
def cli(ctx, data_dir, verbose, quiet):
    """Cafeteria - versioned SQLite store for the drink menu.

    \b
    Key Commands:
        init        Create (or upgrade) the store
        migrate     Apply or roll back schema migrations
        status      Show schema version and pending migrations
        history     List applied migrations
        drinks      Browse the menu
        config      Configuration management

    \b
    Examples:
        cafeteria init
        cafeteria status
        cafeteria drinks list
        cafeteria migrate --dry-run
    """
    ctx.ensure_object(dict)

    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")

    if quiet:
        ctx.obj['verbosity'] = VERBOSITY_QUIET
    elif verbose:
        ctx.obj['verbosity'] = VERBOSITY_VERBOSE
    else:
        ctx.obj['verbosity'] = VERBOSITY_NORMAL

    ctx.obj['data_dir'] = Path(data_dir) if data_dir else None


cli.add_command(database_group.commands['init'])
cli.add_command(database_group.commands['migrate'])
cli.add_command(database_group.commands['status'])
cli.add_command(database_group.commands['history'])

cli.add_command(drinks_group, name='drinks')
cli.add_command(config_group, name='config')


def main():
    """Entry point for the CLI."""
    cli()


__all__ = [
    '__version__',
    'cli',
    'main',
    'get_base_path',
]
