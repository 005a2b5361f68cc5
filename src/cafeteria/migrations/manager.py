"""
Migration Manager for the cafeteria store
Tracks schema versions and migration history, and runs migrations.

- Current schema version lives in PRAGMA user_version (0 = fresh store)
- Every applied migration is recorded in the _migrations table
- migrate()/rollback() run a whole plan in one transaction
"""

import json
import logging
import sqlite3
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .migration_base import MigrationBase
from .registry import MigrationRegistry

logger = logging.getLogger(__name__)

HISTORY_TABLE = "_migrations"


@dataclass
class MigrationRecord:
    """A stored migration record."""
    id: int
    version: int
    description: str
    applied_at: datetime
    duration_ms: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def from_row(cls, row) -> 'MigrationRecord':
        return cls(
            id=row[0],
            version=row[1],
            description=row[2],
            applied_at=datetime.fromisoformat(row[3]) if row[3] else None,
            duration_ms=row[4],
            metadata=json.loads(row[5]) if row[5] else None
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "version": self.version,
            "description": self.description,
            "applied_at": self.applied_at.isoformat() if self.applied_at else None,
            "duration_ms": self.duration_ms,
            "metadata": self.metadata or {}
        }


def _create_history_table(conn: sqlite3.Connection) -> None:
    conn.executescript(f"""
        CREATE TABLE IF NOT EXISTS {HISTORY_TABLE} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            version INTEGER NOT NULL UNIQUE,
            description TEXT NOT NULL,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            duration_ms INTEGER,
            metadata TEXT  -- JSON
        );

        CREATE INDEX IF NOT EXISTS idx_migrations_applied_at ON {HISTORY_TABLE}(applied_at);
    """)


class MigrationManager:
    """
    Migration Manager - Schema version, history and migration runner

    Pattern: Schema version in PRAGMA user_version, history in _migrations
    Lifetime: One per store path; opens short-lived connections per call

    Example:
        manager = MigrationManager(db_path)
        applied = manager.migrate()           # up to the latest version
        manager.rollback(target_version=1)    # undo v2
    """

    _SELECT = (
        f"SELECT id, version, description, applied_at, duration_ms, metadata "
        f"FROM {HISTORY_TABLE}"
    )

    def __init__(self,
                 db_path: Path,
                 enable_wal: bool = False,
                 registry: Optional[MigrationRegistry] = None):
        """
        Args:
            db_path: Path to SQLite database file
            enable_wal: Switch the store to WAL journal mode
            registry: Migrations to run (default: the bundled versions package)
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.registry = registry if registry is not None else MigrationRegistry()
        self._enable_wal = enable_wal
        self._init_db()

    def _init_db(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            if self._enable_wal:
                conn.execute("PRAGMA journal_mode=WAL")
            _create_history_table(conn)
            conn.commit()

    # ==================== Schema version ====================

    def get_schema_version(self) -> int:
        """Current schema version (0 if uninitialized)."""
        with sqlite3.connect(self.db_path) as conn:
            return conn.execute("PRAGMA user_version").fetchone()[0]

    def set_schema_version(self, version: int) -> None:
        """
        Overwrite PRAGMA user_version without running any migration.

        Raises:
            ValueError: If version is negative
        """
        if version < 0:
            raise ValueError(f"Schema version must be >= 0, got {version}")

        with sqlite3.connect(self.db_path) as conn:
            # PRAGMA does not take bound parameters
            conn.execute(f"PRAGMA user_version = {int(version)}")
            conn.commit()

    # ==================== History ====================

    def record_migration(self,
                         version: int,
                         description: str,
                         duration_ms: Optional[int] = None,
                         metadata: Optional[Dict[str, Any]] = None) -> int:
        """
        Record a successfully applied migration.

        Returns:
            ID of the created history row

        Raises:
            sqlite3.IntegrityError: If the version is already recorded
        """
        with sqlite3.connect(self.db_path) as conn:
            record_id = self._insert_record(conn, version, description, duration_ms, metadata)
            conn.commit()
            return record_id

    @staticmethod
    def _insert_record(conn: sqlite3.Connection,
                       version: int,
                       description: str,
                       duration_ms: Optional[int],
                       metadata: Optional[Dict[str, Any]]) -> int:
        cursor = conn.execute(f"""
            INSERT INTO {HISTORY_TABLE} (version, description, applied_at, duration_ms, metadata)
            VALUES (?, ?, ?, ?, ?)
        """, (
            version,
            description,
            datetime.now().isoformat(),
            duration_ms,
            json.dumps(metadata) if metadata else None
        ))
        return cursor.lastrowid

    def get_migration_record(self, version: int) -> Optional[MigrationRecord]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(f"{self._SELECT} WHERE version = ?", (version,)).fetchone()
            return MigrationRecord.from_row(row) if row else None

    def get_applied_migrations(self) -> List[MigrationRecord]:
        """All recorded migrations, ascending by version."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(f"{self._SELECT} ORDER BY version ASC")
            return [MigrationRecord.from_row(row) for row in cursor]

    def get_last_migration(self) -> Optional[MigrationRecord]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(f"{self._SELECT} ORDER BY version DESC LIMIT 1").fetchone()
            return MigrationRecord.from_row(row) if row else None

    def is_migration_applied(self, version: int) -> bool:
        with sqlite3.connect(self.db_path) as conn:
            count = conn.execute(
                f"SELECT COUNT(*) FROM {HISTORY_TABLE} WHERE version = ?", (version,)
            ).fetchone()[0]
            return count > 0

    def get_migration_count(self) -> int:
        with sqlite3.connect(self.db_path) as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {HISTORY_TABLE}").fetchone()[0]

    def clear_history(self) -> None:
        """
        Delete all history rows. Leaves user_version and the schema alone.
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(f"DELETE FROM {HISTORY_TABLE}")
            conn.commit()

    # ==================== Running migrations ====================

    def get_pending_migrations(self, target_version: Optional[int] = None) -> List[MigrationBase]:
        return self.registry.get_pending_migrations(self.get_schema_version(), target_version)

    def migrate(self,
                target_version: Optional[int] = None,
                dry_run: bool = False) -> List[MigrationBase]:
        """
        Bring the store up to target_version.

        Only migrations with stored_version < version <= target_version run,
        ascending, each once. The whole plan is one transaction: if any step
        fails nothing is kept and the original exception is re-raised.

        Args:
            target_version: Version to reach (default: latest registered)
            dry_run: Return the plan without touching the store

        Returns:
            Migrations applied (or that would be applied on a dry run)

        Raises:
            ValueError: If target_version is below the stored version or
                        beyond the latest registered migration
        """
        latest = self.registry.get_latest_version()
        if target_version is None:
            target_version = latest
        if target_version > latest:
            raise ValueError(
                f"No migration reaches version {target_version} (latest is {latest})"
            )

        current = self.get_schema_version()
        if target_version < current:
            raise ValueError(
                f"Target version {target_version} is below current version {current}; "
                f"use rollback() to downgrade"
            )

        plan = self.registry.get_pending_migrations(current, target_version)
        if not plan:
            logger.debug(f"Store {self.db_path} already at version {current}")
            return []

        logger.debug(f"Migration plan {current} -> {target_version}: {plan}")
        if dry_run:
            return plan

        def apply(conn: sqlite3.Connection, migration: MigrationBase) -> None:
            started = time.perf_counter()
            migration.validate(conn)
            migration.up(conn)
            duration_ms = int((time.perf_counter() - started) * 1000)
            # user_version may have been reset below a recorded migration
            conn.execute(f"DELETE FROM {HISTORY_TABLE} WHERE version = ?", (migration.version,))
            self._insert_record(conn, migration.version, migration.description,
                                duration_ms, {"from_version": current})
            logger.info(f"Applied {migration} in {duration_ms}ms")

        self._run_plan(plan, target_version, apply)
        return plan

    def rollback(self, target_version: int, dry_run: bool = False) -> List[MigrationBase]:
        """
        Undo migrations down to target_version, newest first, in one transaction.

        Returns:
            Migrations rolled back (or that would be on a dry run)

        Raises:
            ValueError: If target_version is negative or above the stored
                        version, or the stored version is newer than any
                        registered migration
        """
        if target_version < 0:
            raise ValueError(f"Schema version must be >= 0, got {target_version}")

        current = self.get_schema_version()
        if target_version > current:
            raise ValueError(
                f"Target version {target_version} is above current version {current}; "
                f"use migrate() to upgrade"
            )

        latest = self.registry.get_latest_version()
        if current > latest:
            raise ValueError(
                f"Store is at version {current} but the latest known migration is {latest}; "
                f"no down() exists for versions above {latest}"
            )

        plan = self.registry.get_rollback_migrations(current, target_version)
        if not plan:
            return []

        logger.debug(f"Rollback plan {current} -> {target_version}: {plan}")
        if dry_run:
            return plan

        def undo(conn: sqlite3.Connection, migration: MigrationBase) -> None:
            migration.down(conn)
            conn.execute(f"DELETE FROM {HISTORY_TABLE} WHERE version = ?", (migration.version,))
            logger.info(f"Rolled back {migration}")

        self._run_plan(plan, target_version, undo)
        return plan

    def _run_plan(self, plan: List[MigrationBase], target_version: int, step) -> None:
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                for migration in plan:
                    step(conn, migration)
                conn.execute(f"PRAGMA user_version = {int(target_version)}")
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                logger.error(
                    f"Migration run on {self.db_path} failed; rolled back to previous version",
                    exc_info=True
                )
                raise
        finally:
            conn.close()
