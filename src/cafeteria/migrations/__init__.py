"""
Cafeteria Migration System

Moves a store's SQLite schema between versions.

Key Features:
- Schema version tracking via PRAGMA user_version
- Migration history in _migrations table
- Whole-plan transactions: a failed run leaves the store untouched
- Dry-run support
- Rollback through each migration's down()
"""

from .migration_base import MigrationBase
from .registry import MigrationRegistry
from .manager import MigrationManager, MigrationRecord

__all__ = ["MigrationBase", "MigrationRegistry", "MigrationManager", "MigrationRecord"]
