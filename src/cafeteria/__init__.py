"""
Cafeteria - a versioned SQLite store for a cafeteria drink menu.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .drinks import Drink, ImageResource, SEED_DRINKS, insert_drink, get_drink, list_drinks
from .helper import DatabaseHelper, DB_NAME, DB_VERSION, get_database_path
from .migrations import MigrationBase, MigrationManager, MigrationRegistry, MigrationRecord

__all__ = [
    "Drink",
    "ImageResource",
    "SEED_DRINKS",
    "insert_drink",
    "get_drink",
    "list_drinks",
    "DatabaseHelper",
    "DB_NAME",
    "DB_VERSION",
    "get_database_path",
    "MigrationBase",
    "MigrationManager",
    "MigrationRegistry",
    "MigrationRecord",
]
