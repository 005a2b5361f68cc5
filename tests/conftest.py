"""Pytest fixtures for cafeteria tests"""
import sqlite3
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def db_path(tmp_path):
    """Path to a not-yet-created store."""
    return tmp_path / "data" / "cafeteria.sqlite"


@pytest.fixture
def v1_store(db_path):
    """A store left at schema version 1 by an earlier build: BEBIDA without favorita."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE BEBIDA (
            _id INTEGER PRIMARY KEY AUTOINCREMENT,
            nome TEXT,
            descricao TEXT,
            imagem_resource_id INTEGER
        )
    """)
    conn.executemany(
        "INSERT INTO BEBIDA (nome, descricao, imagem_resource_id) VALUES (?, ?, ?)",
        [
            ("Latte", "Um cafe com leite", 1),
            ("Cappuccino", "Um Cappuccino", 2),
            ("Filtrado", "Um cafe filtrado", 3),
            ("Mocha", "Cafe com chocolate", 7),
        ],
    )
    conn.execute("PRAGMA user_version = 1")
    conn.commit()
    conn.close()
    return db_path


def column_names(db_path, table="BEBIDA"):
    conn = sqlite3.connect(db_path)
    try:
        return [row[1] for row in conn.execute(f"PRAGMA table_info({table})")]
    finally:
        conn.close()


def fetch_rows(db_path, columns="_id, nome, descricao, imagem_resource_id"):
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(f"SELECT {columns} FROM BEBIDA ORDER BY _id").fetchall()
    finally:
        conn.close()
