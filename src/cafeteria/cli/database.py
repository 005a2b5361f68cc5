"""Store lifecycle commands: init, migrate, status, history."""
import json
import sqlite3

import click

from ..config import get_base_path, load_config, write_default_config
from ..drinks import count_drinks
from ..helper import get_database_path
from ..migrations import MigrationManager
from .common import (
    echo_normal,
    echo_quiet,
    echo_verbose,
    fail,
    configure_logging,
    require_store,
    build_helper,
    VERBOSITY_NORMAL,
)


@click.group()
@click.pass_context
def database_group(ctx):
    """Store lifecycle commands."""
    ctx.ensure_object(dict)


@database_group.command("init")
@click.pass_context
def init(ctx) -> None:
    """Initialize the cafeteria store.

    \b
    Creates:
    - the data directory (~/.cafeteria by default)
    - config.yaml with default settings
    - the SQLite store, seeded with the default menu
    """
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    base_path = get_base_path(ctx.obj.get('data_dir'))

    echo_normal(click.style("Initializing cafeteria store...", fg="cyan", bold=True), verbosity)

    base_path.mkdir(parents=True, exist_ok=True)
    echo_normal(f" ✓ Data directory: {base_path}", verbosity)

    config_path = base_path / "config.yaml"
    if write_default_config(base_path):
        echo_normal(f" ✓ Created config: {config_path}", verbosity)
    else:
        echo_normal(f" ⚠ Config exists: {config_path}", verbosity)

    try:
        config = load_config(base_path)
        configure_logging(verbosity, config.log_level)
        db_path = get_database_path(base_path, config.db_name)
        existed = db_path.exists()
        with build_helper(config, db_path) as helper:
            helper.open()
            version = helper.get_version()
    except (sqlite3.Error, ValueError) as e:
        fail(f"Error: Failed to initialize store: {e}", verbosity)

    if existed:
        echo_normal(f" ⚠ Store exists: {db_path} (schema v{version})", verbosity)
    else:
        echo_normal(f" ✓ Created store: {db_path} (schema v{version})", verbosity)

    echo_normal(click.style("\nCafeteria store ready.", fg="green", bold=True), verbosity)


@database_group.command("migrate")
@click.option('--target', type=int, default=None,
              help='Schema version to reach (default: latest)')
@click.option('--dry-run', is_flag=True, default=False,
              help='Show the plan without changing the store')
@click.option('--allow-downgrade', is_flag=True, default=False,
              help='Permit rolling back to a lower version')
@click.pass_context
def migrate(ctx, target, dry_run, allow_downgrade) -> None:
    """Upgrade (or, when allowed, downgrade) the store schema.

    \b
    Examples:
        cafeteria migrate
        cafeteria migrate --dry-run
        cafeteria migrate --target 1 --allow-downgrade
    """
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    _, config, db_path = require_store(ctx)

    manager = MigrationManager(db_path, enable_wal=config.wal)
    current = manager.get_schema_version()
    latest = manager.registry.get_latest_version()
    if target is None:
        target = latest

    try:
        if target < current:
            if not (allow_downgrade or config.allow_downgrade):
                fail(f"Error: Can't downgrade database from version {current} to {target}. "
                     f"Pass --allow-downgrade to roll back.", verbosity)
            plan = manager.rollback(target, dry_run=dry_run)
            verb = "roll back"
        else:
            plan = manager.migrate(target, dry_run=dry_run)
            verb = "apply"
    except (sqlite3.Error, ValueError) as e:
        fail(f"Error: {e}", verbosity)

    if not plan:
        echo_normal(click.style(f"Store already at version {current}.", fg="green"), verbosity)
        return

    prefix = "Would" if dry_run else "Did"
    echo_normal(click.style(f"{prefix} {verb} {len(plan)} migration(s):", fg="cyan", bold=True),
                verbosity)
    for migration in plan:
        echo_normal(f"  v{migration.version:03d}  {migration.description}", verbosity)

    if not dry_run:
        echo_quiet(click.style(f"✓ Schema version {current} → {target}", fg="green"), verbosity)


@database_group.command("status")
@click.pass_context
def status(ctx) -> None:
    """Show schema version, pending migrations and drink count."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    base_path, config, db_path = require_store(ctx)

    manager = MigrationManager(db_path, enable_wal=config.wal)
    current = manager.get_schema_version()
    latest = manager.registry.get_latest_version()
    pending = manager.get_pending_migrations()

    echo_normal(click.style("Cafeteria Status Report", fg="cyan", bold=True), verbosity)
    echo_normal("=" * 50, verbosity)
    echo_normal(f"Base Path:      {base_path}", verbosity)
    echo_normal(f"Store:          {db_path.name}", verbosity)
    echo_verbose(f"  Size: {db_path.stat().st_size / 1024:.1f} KB", verbosity)
    echo_quiet(f"Schema version: {current} (latest {latest})", verbosity)

    if pending:
        echo_normal(click.style(f"Pending:        {len(pending)} migration(s)", fg="yellow"),
                    verbosity)
        for migration in pending:
            echo_normal(f"  v{migration.version:03d}  {migration.description}", verbosity)
    else:
        echo_normal(click.style("Pending:        none", fg="green"), verbosity)

    if current > 0:
        try:
            with sqlite3.connect(db_path) as conn:
                echo_normal(f"Drinks:         {count_drinks(conn)}", verbosity)
        except sqlite3.Error as e:
            fail(f"Error: {e}", verbosity)


@database_group.command("history")
@click.option('--json', 'as_json', is_flag=True, default=False, help='Output as JSON')
@click.pass_context
def history(ctx, as_json) -> None:
    """List applied migrations."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    _, config, db_path = require_store(ctx)

    records = MigrationManager(db_path, enable_wal=config.wal).get_applied_migrations()

    if as_json:
        echo_quiet(json.dumps([r.to_dict() for r in records], indent=2), verbosity)
        return

    if not records:
        echo_normal("No migrations recorded.", verbosity)
        return

    for record in records:
        applied = record.applied_at.strftime("%Y-%m-%d %H:%M:%S") if record.applied_at else "?"
        line = f"v{record.version:03d}  {applied}  {record.description}"
        if record.duration_ms is not None:
            line += click.style(f"  ({record.duration_ms}ms)", dim=True)
        echo_normal(line, verbosity)
