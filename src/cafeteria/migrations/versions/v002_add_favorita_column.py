"""
Migration v002: Add favorita column to BEBIDA

Adds a nullable NUMERIC flag marking a drink as a favorite. Existing rows
keep NULL.
"""

import sqlite3

from cafeteria.drinks import TABLE
from cafeteria.migrations.migration_base import MigrationBase


class Migration(MigrationBase):
    """
    Add favorita to BEBIDA.

    Stores upgraded by older builds may already carry the column while
    still reporting version 1, so up() checks table_info first.
    """

    version = 2
    description = "Add favorita column to BEBIDA"

    def _columns(self, conn: sqlite3.Connection):
        return [row[1] for row in conn.execute(f"PRAGMA table_info({TABLE})")]

    def validate(self, conn: sqlite3.Connection) -> None:
        if not self._columns(conn):
            raise sqlite3.OperationalError(f"no such table: {TABLE}")

    def up(self, conn: sqlite3.Connection) -> None:
        if 'favorita' not in self._columns(conn):
            conn.execute(f"ALTER TABLE {TABLE} ADD COLUMN favorita NUMERIC")

    def down(self, conn: sqlite3.Connection) -> None:
        """
        Drop favorita by rebuilding the table; ids and rows are kept.
        """
        if 'favorita' not in self._columns(conn):
            return

        conn.execute(f"""
            CREATE TABLE {TABLE}_backup (
                _id INTEGER PRIMARY KEY AUTOINCREMENT,
                nome TEXT,
                descricao TEXT,
                imagem_resource_id INTEGER
            )
        """)
        conn.execute(f"""
            INSERT INTO {TABLE}_backup (_id, nome, descricao, imagem_resource_id)
            SELECT _id, nome, descricao, imagem_resource_id FROM {TABLE}
        """)
        conn.execute(f"DROP TABLE {TABLE}")
        conn.execute(f"ALTER TABLE {TABLE}_backup RENAME TO {TABLE}")
