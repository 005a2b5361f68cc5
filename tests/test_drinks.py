"""Tests for drink records and queries."""
import sqlite3

import pytest

from cafeteria.drinks import (
    Drink,
    ImageResource,
    SEED_DRINKS,
    count_drinks,
    get_drink,
    insert_drink,
    list_drinks,
)
from cafeteria.helper import DatabaseHelper


@pytest.fixture
def conn(db_path):
    helper = DatabaseHelper(db_path)
    yield helper.open()
    helper.close()


class TestQueries:

    def test_list_returns_seed_in_id_order(self, conn):
        drinks = list_drinks(conn)
        assert [d.name for d in drinks] == ["Latte", "Cappuccino", "Filtrado"]
        assert [d.id for d in drinks] == [1, 2, 3]

    def test_get_drink(self, conn):
        drink = get_drink(conn, 3)
        assert drink == Drink(3, "Filtrado", "Um cafe filtrado", ImageResource.FILTRADO, None)

    def test_get_missing_drink(self, conn):
        assert get_drink(conn, 42) is None

    def test_insert_generates_new_id(self, conn):
        new_id = insert_drink(conn, "Espresso", "Curto e forte", 9)
        conn.commit()
        assert new_id == 4
        assert get_drink(conn, new_id).name == "Espresso"
        assert count_drinks(conn) == 4

    def test_favorites_only(self, conn):
        conn.execute("UPDATE BEBIDA SET favorita = 1 WHERE nome = 'Latte'")
        conn.execute("UPDATE BEBIDA SET favorita = 0 WHERE nome = 'Filtrado'")

        favorites = list_drinks(conn, favorites_only=True)
        assert [d.name for d in favorites] == ["Latte"]
        assert [d.favorite for d in list_drinks(conn)] == [True, None, False]

    def test_works_on_plain_connection(self, db_path, conn):
        plain = sqlite3.connect(db_path)
        try:
            assert [d.name for d in list_drinks(plain)] == ["Latte", "Cappuccino", "Filtrado"]
        finally:
            plain.close()


def test_v1_store_has_no_favorites(v1_store):
    conn = sqlite3.connect(v1_store)
    try:
        drinks = list_drinks(conn)
        assert len(drinks) == 4
        assert all(d.favorite is None for d in drinks)
        assert list_drinks(conn, favorites_only=True) == []
    finally:
        conn.close()


def test_seed_data_matches_menu():
    assert [name for name, _, _ in SEED_DRINKS] == ["Latte", "Cappuccino", "Filtrado"]
    assert [image for _, _, image in SEED_DRINKS] == list(ImageResource)


def test_to_dict():
    drink = Drink(1, "Latte", "Um cafe com leite", ImageResource.LATTE, True)
    assert drink.to_dict() == {
        "id": 1,
        "name": "Latte",
        "description": "Um cafe com leite",
        "image_resource_id": 1,
        "favorite": True,
    }
