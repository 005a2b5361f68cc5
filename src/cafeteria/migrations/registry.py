"""
Migration Registry

Discovers the migrations shipped in cafeteria.migrations.versions and
answers "what needs to run" questions for a given stored version.
"""

import importlib
import inspect
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .migration_base import MigrationBase

logger = logging.getLogger(__name__)

DEFAULT_VERSIONS_PACKAGE = "cafeteria.migrations.versions"


class MigrationRegistry:
    """
    Migration Registry - Discovers and orders available migrations

    Pattern: Auto-discovery from a versions package, validated as a gapless
    sequence starting at 1. Manual register() is available for tests.

    Example:
        registry = MigrationRegistry()
        for migration in registry.get_pending_migrations(current_version=1):
            print(f"Apply {migration}")
    """

    def __init__(self, versions_package: Optional[str] = DEFAULT_VERSIONS_PACKAGE):
        """
        Args:
            versions_package: Python package holding migration modules, or
                              None for a registry filled only by register()
        """
        self.versions_package = versions_package
        self._migrations: Dict[int, MigrationBase] = {}
        self._discovered = False

    def discover(self) -> None:
        """
        Import every migration module in the versions package and register
        the MigrationBase subclasses defined there.

        Raises:
            ImportError: If the versions package or one of its modules fails
                         to import
            ValueError: If a migration is malformed or the sequence is invalid
        """
        if self._discovered:
            return

        if self.versions_package is None:
            self._validate_sequence()
            self._discovered = True
            return

        package = importlib.import_module(self.versions_package)
        package_path = Path(package.__file__).parent

        for module_file in sorted(package_path.glob("*.py")):
            if module_file.name.startswith("_"):
                continue

            module_name = f"{self.versions_package}.{module_file.stem}"
            module = importlib.import_module(module_name)

            for name, obj in inspect.getmembers(module, inspect.isclass):
                if (issubclass(obj, MigrationBase) and
                        obj is not MigrationBase and
                        obj.__module__ == module_name):
                    try:
                        migration = obj()
                    except ValueError as e:
                        raise ValueError(
                            f"Failed to instantiate migration {name} in {module_name}: {e}"
                        ) from e
                    self.register(migration)

        self._validate_sequence()
        self._discovered = True
        logger.debug(
            f"Discovered {len(self._migrations)} migrations in {self.versions_package}"
        )

    def register(self, migration: MigrationBase) -> None:
        """
        Register a migration by hand.

        Raises:
            ValueError: If the version is already registered
        """
        if migration.version in self._migrations:
            existing = self._migrations[migration.version]
            raise ValueError(
                f"Duplicate migration version {migration.version}: "
                f"{migration} conflicts with {existing}"
            )

        self._migrations[migration.version] = migration

    def _validate_sequence(self) -> None:
        """Versions must start at 1 and be consecutive."""
        if not self._migrations:
            return

        versions = sorted(self._migrations.keys())

        if versions[0] != 1:
            raise ValueError(
                f"Migration versions must start at 1, found {versions[0]}"
            )

        for expected, version in enumerate(versions, start=1):
            if version != expected:
                raise ValueError(
                    f"Migration version gap detected: expected {expected}, found {version}"
                )

    def _ensure_discovered(self) -> None:
        if not self._discovered:
            self.discover()

    def get_migration(self, version: int) -> Optional[MigrationBase]:
        self._ensure_discovered()
        return self._migrations.get(version)

    def get_all_migrations(self) -> List[MigrationBase]:
        """All registered migrations, ascending by version."""
        self._ensure_discovered()
        return [self._migrations[v] for v in sorted(self._migrations)]

    def get_pending_migrations(self,
                               current_version: int,
                               target_version: Optional[int] = None) -> List[MigrationBase]:
        """
        Migrations that bring a store from current_version up to target_version.

        Args:
            current_version: Version stored in the database
            target_version: Version to reach (default: latest)

        Returns:
            Migrations with current_version < version <= target_version,
            ascending
        """
        self._ensure_discovered()
        if target_version is None:
            target_version = self.get_latest_version()

        return [
            self._migrations[v]
            for v in sorted(self._migrations)
            if current_version < v <= target_version
        ]

    def get_rollback_migrations(self,
                                current_version: int,
                                target_version: int) -> List[MigrationBase]:
        """
        Migrations to undo when going from current_version down to target_version.

        Returns:
            Migrations with target_version < version <= current_version,
            descending
        """
        self._ensure_discovered()
        return [
            self._migrations[v]
            for v in sorted(self._migrations, reverse=True)
            if target_version < v <= current_version
        ]

    def get_latest_version(self) -> int:
        """Highest registered version, or 0 when there are none."""
        self._ensure_discovered()
        if not self._migrations:
            return 0
        return max(self._migrations)

    def has_migrations(self) -> bool:
        self._ensure_discovered()
        return len(self._migrations) > 0

    def get_migration_count(self) -> int:
        self._ensure_discovered()
        return len(self._migrations)

    def clear(self) -> None:
        """Forget all registered migrations (mostly for tests)."""
        self._migrations.clear()
        self._discovered = False

    def __repr__(self) -> str:
        count = len(self._migrations)
        latest = max(self._migrations) if self._migrations else 0
        return f"<MigrationRegistry: {count} migrations, latest v{latest}>"
