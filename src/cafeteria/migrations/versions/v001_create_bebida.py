"""
Migration v001: Create the BEBIDA table and seed the menu

Runs on a fresh store (user_version 0). _id is the generated primary key;
AUTOINCREMENT keeps ids from being reused.
"""

import sqlite3

from cafeteria.drinks import SEED_DRINKS, TABLE, insert_drink
from cafeteria.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    """Create BEBIDA and insert the three seed drinks."""

    version = 1
    description = "Create BEBIDA table with seed drinks"

    def up(self, conn: sqlite3.Connection) -> None:
        conn.execute(f"""
            CREATE TABLE {TABLE} (
                _id INTEGER PRIMARY KEY AUTOINCREMENT,
                nome TEXT,
                descricao TEXT,
                imagem_resource_id INTEGER
            )
        """)

        for name, description, image in SEED_DRINKS:
            insert_drink(conn, name, description, image)

    def down(self, conn: sqlite3.Connection) -> None:
        conn.execute(f"DROP TABLE IF EXISTS {TABLE}")
