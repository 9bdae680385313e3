"""Tests for the key-value stores."""
from unittest.mock import MagicMock

import psycopg2
import pytest

from book_finder.database import PostgresStore
from book_finder.errors import PersistenceError
from book_finder.favorites import PersistedFavorites
from book_finder.store import JsonFileStore, MemoryStore, build_store


def test_memory_store_scopes_keys():
    store = MemoryStore(scope="app")

    store.set("favorites", "[]")

    assert store.data == {"app:favorites": "[]"}
    assert store.get("favorites") == "[]"
    assert store.get("missing") is None


def test_json_file_store_survives_new_instance(tmp_path):
    path = tmp_path / "nested" / "store.json"
    JsonFileStore(path).set("favorites", '[{"id": "a"}]')

    assert JsonFileStore(path).get("favorites") == '[{"id": "a"}]'


def test_json_file_store_keeps_other_keys(tmp_path):
    path = tmp_path / "store.json"
    JsonFileStore(path, scope="one").set("favorites", "1")
    JsonFileStore(path, scope="two").set("favorites", "2")

    assert JsonFileStore(path, scope="one").get("favorites") == "1"
    assert JsonFileStore(path, scope="two").get("favorites") == "2"


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")

    assert JsonFileStore(path).get("favorites") is None


def test_json_file_store_ignores_invalid_utf8(tmp_path):
    """Undecodable bytes load as no favorites and are replaced on the next write."""
    path = tmp_path / "store.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    store = JsonFileStore(path)

    assert PersistedFavorites(store).load() == []

    store.set("favorites", "[]")
    assert JsonFileStore(path).get("favorites") == "[]"


def test_json_file_store_write_failure_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonFileStore(blocker / "store.json").set("favorites", "[]")


class StubConfig:
    STORE_BACKEND = "memory"
    STORE_PATH = "unused"
    STORE_SCOPE = "test"


def test_build_store_selects_backend(tmp_path):
    config = StubConfig()
    assert isinstance(build_store(config), MemoryStore)

    config.STORE_BACKEND = "file"
    config.STORE_PATH = str(tmp_path / "store.json")
    store = build_store(config)
    assert isinstance(store, JsonFileStore)
    assert store.scope == "test"

    config.STORE_BACKEND = "redis"
    with pytest.raises(ValueError):
        build_store(config)


def make_postgres_store():
    pool = MagicMock()
    conn = pool.getconn.return_value
    cursor = conn.cursor.return_value.__enter__.return_value
    return PostgresStore(scope="app", connection_pool=pool), pool, conn, cursor


def test_postgres_get_reads_scoped_key():
    store, pool, conn, cursor = make_postgres_store()
    cursor.fetchone.return_value = ("[]",)

    assert store.get("favorites") == "[]"
    assert cursor.execute.call_args[0][1] == ("app:favorites",)
    pool.putconn.assert_called_once_with(conn)


def test_postgres_get_missing_key():
    store, pool, conn, cursor = make_postgres_store()
    cursor.fetchone.return_value = None

    assert store.get("favorites") is None


def test_postgres_set_upserts_and_commits():
    store, pool, conn, cursor = make_postgres_store()

    store.set("favorites", "[]")

    sql, params = cursor.execute.call_args[0]
    assert "ON CONFLICT" in sql
    assert params == ("app:favorites", "[]")
    conn.commit.assert_called_once()
    pool.putconn.assert_called_once_with(conn)


def test_postgres_set_failure_rolls_back_and_raises():
    store, pool, conn, cursor = make_postgres_store()
    cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")

    with pytest.raises(PersistenceError):
        store.set("favorites", "[]")

    conn.rollback.assert_called_once()
    pool.putconn.assert_called_once_with(conn)
