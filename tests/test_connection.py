from unittest.mock import MagicMock

import psycopg2
import pytest

from db import connection
from utils.exceptions import PersistenceError


@pytest.fixture
def conn(monkeypatch):
    conn = MagicMock()
    released = []
    monkeypatch.setattr(connection, "get_connection", lambda: conn)
    monkeypatch.setattr(connection, "release_connection", released.append)
    conn.released = released
    return conn


def test_transaction_commits_and_releases(conn):
    with connection.transaction() as c:
        assert c is conn
    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()
    assert conn.released == [conn]


def test_transaction_wraps_driver_errors(conn):
    with pytest.raises(PersistenceError) as exc:
        with connection.transaction():
            raise psycopg2.OperationalError("server closed the connection")
    assert isinstance(exc.value.details, psycopg2.OperationalError)
    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()
    assert conn.released == [conn]


def test_transaction_propagates_domain_errors_unchanged(conn):
    with pytest.raises(KeyError):
        with connection.transaction():
            raise KeyError("boom")
    conn.rollback.assert_called_once()


def test_get_connection_requires_pool(monkeypatch):
    monkeypatch.setattr(connection, "_pool", None)
    with pytest.raises(RuntimeError):
        connection.get_connection()
