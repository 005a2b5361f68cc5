"""Configuration management commands for the cafeteria CLI."""
import click
import yaml

from ..config import get_base_path, get_config_value, set_config_value, CONFIG_FILENAME
from .common import echo_quiet, echo_normal, fail, NOT_INITIALIZED


@click.group()
def config_group():
    """Configuration management commands."""
    pass


def _config_path(ctx):
    base_path = get_base_path(ctx.obj.get('data_dir'))
    verbosity = ctx.obj.get('verbosity', 1)
    if not (base_path / CONFIG_FILENAME).exists():
        fail(NOT_INITIALIZED, verbosity)
    return base_path, verbosity


@config_group.command('set')
@click.argument('key')
@click.argument('value')
@click.pass_context
def config_set(ctx, key: str, value: str) -> None:
    """Set a configuration value.

    \b
    Examples:
        cafeteria config set database.wal true
        cafeteria config set logging.level INFO
    """
    base_path, verbosity = _config_path(ctx)
    try:
        stored = set_config_value(base_path, key, value)
    except (yaml.YAMLError, ValueError) as e:
        fail(f"Error: Failed to set config: {e}", verbosity)
    echo_normal(click.style(f"✓ Set {key} = {stored}", fg="green"), verbosity)


@config_group.command('get')
@click.argument('key')
@click.pass_context
def config_get(ctx, key: str) -> None:
    """Get a configuration value.

    \b
    Examples:
        cafeteria config get database.name
    """
    base_path, verbosity = _config_path(ctx)
    try:
        value = get_config_value(base_path, key)
    except KeyError:
        echo_quiet(click.style(f"Key '{key}' not found", fg="yellow"), verbosity)
        raise SystemExit(1)
    except (yaml.YAMLError, ValueError) as e:
        fail(f"Error: Failed to get config: {e}", verbosity)
    echo_quiet(value, verbosity)


@config_group.command('show')
@click.pass_context
def config_show(ctx) -> None:
    """Display full configuration."""
    base_path, verbosity = _config_path(ctx)
    echo_normal(click.style("Current configuration:", fg="cyan", bold=True), verbosity)
    echo_quiet((base_path / CONFIG_FILENAME).read_text(), verbosity)
