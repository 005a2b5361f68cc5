"""Read-only drink commands."""
import json
import sqlite3

import click

from ..drinks import get_drink, list_drinks
from .common import echo_normal, echo_quiet, fail, require_store, build_helper, VERBOSITY_NORMAL


def _format_favorite(favorite) -> str:
    if favorite is None:
        return "-"
    return "★" if favorite else "☆"


@click.group()
def drinks_group():
    """Browse the drink menu."""
    pass


@drinks_group.command('list')
@click.option('--favorites', is_flag=True, default=False, help='Only favorite drinks')
@click.option('--json', 'as_json', is_flag=True, default=False, help='Output as JSON')
@click.pass_context
def drinks_list(ctx, favorites: bool, as_json: bool) -> None:
    """List drinks on the menu."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    _, config, db_path = require_store(ctx)

    try:
        with build_helper(config, db_path) as helper:
            rows = list_drinks(helper.open(), favorites_only=favorites)
    except (sqlite3.Error, ValueError) as e:
        fail(f"Error: {e}", verbosity)

    if as_json:
        echo_quiet(json.dumps([d.to_dict() for d in rows], indent=2), verbosity)
        return

    if not rows:
        echo_normal("No drinks found.", verbosity)
        return

    for drink in rows:
        echo_quiet(f"{drink.id:>3}  {_format_favorite(drink.favorite)}  "
                   f"{drink.name:<12} {drink.description}", verbosity)


@drinks_group.command('show')
@click.argument('drink_id', type=int)
@click.pass_context
def drinks_show(ctx, drink_id: int) -> None:
    """Show one drink by id."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    _, config, db_path = require_store(ctx)

    try:
        with build_helper(config, db_path) as helper:
            drink = get_drink(helper.open(), drink_id)
    except (sqlite3.Error, ValueError) as e:
        fail(f"Error: {e}", verbosity)

    if drink is None:
        fail(f"Error: Drink {drink_id} not found", verbosity)

    echo_quiet(click.style(drink.name, fg="cyan", bold=True), verbosity)
    echo_quiet(f"  Description: {drink.description}", verbosity)
    echo_quiet(f"  Image:       {drink.image_resource_id}", verbosity)
    echo_quiet(f"  Favorite:    {_format_favorite(drink.favorite)}", verbosity)
