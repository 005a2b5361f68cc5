"""Shared utilities for cafeteria CLI commands."""
import logging
import sys

import click

from ..config import get_base_path, load_config, CONFIG_FILENAME
from ..helper import DatabaseHelper, get_database_path

# Verbosity levels
VERBOSITY_QUIET = 0
VERBOSITY_NORMAL = 1
VERBOSITY_VERBOSE = 2

NOT_INITIALIZED = "Error: Cafeteria store not initialized. Run 'cafeteria init' first."


def should_print(verbosity: int, message_level: int) -> bool:
    return verbosity >= message_level


def echo_verbose(message: str, verbosity: int) -> None:
    """Print a message only in verbose mode."""
    if should_print(verbosity, VERBOSITY_VERBOSE):
        click.echo(message, err=False)


def echo_normal(message: str, verbosity: int) -> None:
    """Print a message in normal and verbose modes."""
    if should_print(verbosity, VERBOSITY_NORMAL):
        click.echo(message, err=False)


def echo_quiet(message: str, verbosity: int) -> None:
    """Print a message that is shown even in quiet mode."""
    click.echo(message, err=False)


def fail(message: str, verbosity: int) -> None:
    echo_quiet(click.style(message, fg="red"), verbosity)
    sys.exit(1)


def configure_logging(verbosity: int, level_name: str) -> None:
    """Route library logging to stderr; --verbose forces DEBUG."""
    level = logging.DEBUG if verbosity >= VERBOSITY_VERBOSE else getattr(
        logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True,
    )
    logging.getLogger("cafeteria").setLevel(level)


def require_store(ctx):
    """Return (base_path, config, db_path) or exit if the store is missing."""
    base_path = get_base_path(ctx.obj.get('data_dir'))
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)

    if not (base_path / CONFIG_FILENAME).exists():
        fail(NOT_INITIALIZED, verbosity)

    try:
        config = load_config(base_path)
    except Exception as e:
        fail(f"Error: Failed to read config: {e}", verbosity)

    db_path = get_database_path(base_path, config.db_name)
    if not db_path.exists():
        fail(NOT_INITIALIZED, verbosity)

    configure_logging(verbosity, config.log_level)
    return base_path, config, db_path


def build_helper(config, db_path, allow_downgrade=None) -> DatabaseHelper:
    return DatabaseHelper(
        db_path,
        enable_wal=config.wal,
        allow_downgrade=config.allow_downgrade if allow_downgrade is None else allow_downgrade,
    )
