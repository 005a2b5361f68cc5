"""
Drink records stored in the BEBIDA table.

Column names follow the stored schema (nome, descricao, imagem_resource_id,
favorita); the Python side uses English attribute names.
"""

import sqlite3
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional

TABLE = "BEBIDA"


class ImageResource(IntEnum):
    """Bundled drink images referenced by imagem_resource_id."""
    LATTE = 1
    CAPPUCCINO = 2
    FILTRADO = 3


@dataclass(frozen=True)
class Drink:
    """One row of BEBIDA. favorite is None until set (or on v1 stores)."""
    id: int
    name: str
    description: str
    image_resource_id: int
    favorite: Optional[bool] = None

    @classmethod
    def from_row(cls, row) -> 'Drink':
        favorita = row["favorita"] if "favorita" in row.keys() else None
        return cls(
            id=row["_id"],
            name=row["nome"],
            description=row["descricao"],
            image_resource_id=row["imagem_resource_id"],
            favorite=None if favorita is None else bool(favorita),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_resource_id": self.image_resource_id,
            "favorite": self.favorite,
        }


# Inserted once, by the migration that creates BEBIDA
SEED_DRINKS = (
    ("Latte", "Um cafe com leite", ImageResource.LATTE),
    ("Cappuccino", "Um Cappuccino", ImageResource.CAPPUCCINO),
    ("Filtrado", "Um cafe filtrado", ImageResource.FILTRADO),
)


def insert_drink(conn: sqlite3.Connection,
                 name: str,
                 description: str,
                 image_resource_id: int) -> int:
    """Insert a drink and return its generated _id."""
    cursor = conn.execute(
        f"INSERT INTO {TABLE} (nome, descricao, imagem_resource_id) VALUES (?, ?, ?)",
        (name, description, int(image_resource_id)),
    )
    return cursor.lastrowid


def _has_favorite_column(conn: sqlite3.Connection) -> bool:
    columns = [row[1] for row in conn.execute(f"PRAGMA table_info({TABLE})")]
    return "favorita" in columns


def _query(conn: sqlite3.Connection, sql: str, params=()) -> List[Drink]:
    # Row objects give Drink.from_row column access by name regardless of
    # the connection's own row_factory.
    cursor = conn.cursor()
    cursor.row_factory = sqlite3.Row
    return [Drink.from_row(row) for row in cursor.execute(sql, params)]


def get_drink(conn: sqlite3.Connection, drink_id: int) -> Optional[Drink]:
    rows = _query(conn, f"SELECT * FROM {TABLE} WHERE _id = ?", (drink_id,))
    return rows[0] if rows else None


def list_drinks(conn: sqlite3.Connection, favorites_only: bool = False) -> List[Drink]:
    """
    All drinks in _id order.

    With favorites_only, only rows whose favorita is non-zero. A store that
    predates the favorita column has no favorites.
    """
    if favorites_only:
        if not _has_favorite_column(conn):
            return []
        return _query(conn, f"SELECT * FROM {TABLE} WHERE favorita != 0 ORDER BY _id")
    return _query(conn, f"SELECT * FROM {TABLE} ORDER BY _id")


def count_drinks(conn: sqlite3.Connection) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {TABLE}").fetchone()[0]
