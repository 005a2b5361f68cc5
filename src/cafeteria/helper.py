"""
Database helper: opens the cafeteria store and brings its schema to the
version this build expects.

On open the stored PRAGMA user_version decides what happens:
- 0               -> on_create()  (runs every migration from scratch)
- below version   -> on_upgrade()
- above version   -> on_downgrade() (refused unless allow_downgrade)
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

from .migrations import MigrationManager, MigrationRegistry

logger = logging.getLogger(__name__)

DB_NAME = "cafeteria"
DB_VERSION = 2


def get_database_path(base_path: Union[str, Path], name: str = DB_NAME) -> Path:
    """Location of the store file inside a data directory."""
    return Path(base_path) / f"{name}.sqlite"


class DatabaseHelper:
    """
    Owns the connection to one store and its create/upgrade lifecycle.

    Subclasses may override on_create, on_upgrade, on_downgrade and
    on_open; the defaults delegate to MigrationManager.

    Usage:
        with DatabaseHelper(get_database_path(base)) as helper:
            conn = helper.open()
            drinks = list_drinks(conn)
    """

    def __init__(self,
                 db_path: Union[str, Path],
                 version: int = DB_VERSION,
                 registry: Optional[MigrationRegistry] = None,
                 enable_wal: bool = False,
                 allow_downgrade: bool = False):
        if version < 1:
            raise ValueError(f"Version must be >= 1, was {version}")

        self.db_path = Path(db_path)
        self.version = version
        self.allow_downgrade = allow_downgrade
        self.manager = MigrationManager(self.db_path, enable_wal=enable_wal, registry=registry)
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> sqlite3.Connection:
        """
        Return the store connection, creating or migrating the schema first.

        Errors from the store propagate unchanged and leave the helper closed.
        """
        if self._conn is not None:
            return self._conn

        current = self.manager.get_schema_version()
        if current == 0:
            self.on_create()
        elif current < self.version:
            self.on_upgrade(current, self.version)
        elif current > self.version:
            self.on_downgrade(current, self.version)

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            self.on_open(conn)
        except Exception:
            conn.close()
            raise

        self._conn = conn
        return conn

    def on_create(self) -> None:
        """Called for a brand-new store: build everything from version 0."""
        logger.info(f"Creating store {self.db_path} at version {self.version}")
        self.manager.migrate(self.version)

    def on_upgrade(self, old_version: int, new_version: int) -> None:
        logger.info(f"Upgrading store {self.db_path} from {old_version} to {new_version}")
        self.manager.migrate(new_version)

    def on_downgrade(self, old_version: int, new_version: int) -> None:
        if not self.allow_downgrade:
            raise ValueError(
                f"Can't downgrade database from version {old_version} to {new_version}"
            )
        logger.info(f"Downgrading store {self.db_path} from {old_version} to {new_version}")
        self.manager.rollback(new_version)

    def on_open(self, conn: sqlite3.Connection) -> None:
        """Hook run on every successful open, after any migration."""

    def get_version(self) -> int:
        return self.manager.get_schema_version()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> 'DatabaseHelper':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
