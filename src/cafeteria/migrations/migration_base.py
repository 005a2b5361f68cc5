"""
Schema steps for the cafeteria store.

The store's schema is the sum of its migrations. v001 creates BEBIDA and
inserts the three seed drinks, v002 adds the favorita column. A store at
PRAGMA user_version N has had exactly the steps 1..N applied.

A new step is a module in cafeteria.migrations.versions that defines a
MigrationBase subclass; the registry picks it up by scanning that package.
"""

import sqlite3
from abc import ABC, abstractmethod


class MigrationBase(ABC):
    """
    One numbered step of the BEBIDA schema.

    Class attributes:
    - version: user_version the store has after up() (first step is 1)
    - description: Shown by `cafeteria history` and in log lines

    The runner calls validate(), then up(), for every step between the
    stored version and the target, all inside a single BEGIN IMMEDIATE
    transaction. Use conn.execute() only: executescript() commits first and
    would break that transaction.

    Example:
        class AddPrecoColumn(MigrationBase):
            version = 3
            description = "Add preco column to BEBIDA"

            def validate(self, conn):
                conn.execute("SELECT _id FROM BEBIDA LIMIT 1")

            def up(self, conn):
                conn.execute("ALTER TABLE BEBIDA ADD COLUMN preco REAL")

            def down(self, conn):
                conn.execute("ALTER TABLE BEBIDA DROP COLUMN preco")
    """

    version: int
    description: str

    def __init__(self):
        name = type(self).__name__
        if not isinstance(getattr(self, 'version', None), int):
            raise ValueError(f"{name} must define 'version' as an integer")
        if not isinstance(getattr(self, 'description', None), str):
            raise ValueError(f"{name} must define 'description' as a string")
        if self.version < 1:
            raise ValueError(f"Migration version must be >= 1, got {self.version}")

    @abstractmethod
    def up(self, conn: sqlite3.Connection) -> None:
        """
        Move a store at version - 1 to this version.

        Existing BEBIDA rows must survive. Raising aborts the whole run and
        leaves user_version where it was.
        """

    @abstractmethod
    def down(self, conn: sqlite3.Connection) -> None:
        """Return the store to version - 1, keeping the drinks it holds."""

    def validate(self, conn: sqlite3.Connection) -> None:
        """Check preconditions (e.g. that BEBIDA exists) before up()."""

    def __repr__(self) -> str:
        return f"<Migration v{self.version}: {self.description}>"

    # Steps are identified by version alone
    def __eq__(self, other) -> bool:
        return isinstance(other, MigrationBase) and self.version == other.version

    def __lt__(self, other) -> bool:
        if isinstance(other, MigrationBase):
            return self.version < other.version
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.version)
