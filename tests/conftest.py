# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# This file contains shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - sqlite_factory  → ConnectionFactory over a temporary SQLite file.
#                     Rewrites %(name)s placeholders to :name so the
#                     generated MySQL-style statements run unchanged
#                     (SQLite accepts backtick identifiers).
# - helper          → SqlHelper on sqlite_factory with TestTable created
# - fake_factory    → scripted in-memory connections for fault injection
#
# NOTES:
# ------
# - No MySQL server is needed for the unit tests.
# - Use tmp_path for the database file.
# ==============================================

import re
import sqlite3
from datetime import datetime

import pytest

from sqlhelper.sql_helper import SqlHelper
from sqlhelper.storage.connection import ConnectionFactory

sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))

_PYFORMAT = re.compile(r"%\((\w+)\)s")

CREATE_TEST_TABLE = (
    "CREATE TABLE TestTable ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "PId INT NOT NULL UNIQUE, "
    "Name TEXT, "
    "CreatedAt TEXT)"
)


# ==============================================
# SQLite backed connections
# ==============================================

class PyformatCursor:
    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, sql, params=None):
        sql = _PYFORMAT.sub(r":\1", sql)
        if params is None:
            return self._cursor.execute(sql)
        return self._cursor.execute(sql, params)

    def __getattr__(self, name):
        return getattr(self._cursor, name)


class PyformatConnection:
    def __init__(self, conn):
        self._conn = conn

    def cursor(self):
        return PyformatCursor(self._conn.cursor())

    def __getattr__(self, name):
        return getattr(self._conn, name)


class SQLiteConnectionFactory(ConnectionFactory):
    statement_errors = (sqlite3.Error,)

    def __init__(self, path):
        self.path = str(path)
        self.opened = 0

    def __call__(self):
        self.opened += 1
        return PyformatConnection(sqlite3.connect(self.path))


# ==============================================
# Scripted fakes
# ==============================================

class FakeDriverError(Exception):
    pass


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.rowcount = -1
        self.description = None
        self._rows = []

    def execute(self, sql, params=None):
        self.connection.executed.append((sql, params))
        factory = self.connection.factory
        if factory.fail_on is not None and factory.fail_on in sql:
            raise factory.failure
        self.rowcount = 1
        if factory.result is not None and sql.lstrip().upper().startswith("SELECT"):
            columns, rows = factory.result
            self.description = [(c, None, None, None, None, None, None) for c in columns]
            self._rows = list(rows)

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, factory):
        self.factory = factory
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1
        if self.factory.rollback_error is not None:
            raise self.factory.rollback_error

    def close(self):
        self.closed = True


class FakeConnectionFactory(ConnectionFactory):
    statement_errors = (FakeDriverError,)

    def __init__(self):
        self.connections = []
        self.connect_error = None
        self.fail_on = None
        self.failure = FakeDriverError("statement rejected")
        self.rollback_error = None
        self.disconnect = False
        self.result = None

    def __call__(self):
        if self.connect_error is not None:
            raise self.connect_error
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    def is_disconnect(self, exc):
        return self.disconnect

    @property
    def executed(self):
        return [statement for conn in self.connections for statement in conn.executed]


# ==============================================
# Fixtures
# ==============================================

@pytest.fixture
def sqlite_factory(tmp_path):
    """ConnectionFactory over an empty SQLite database file."""
    return SQLiteConnectionFactory(tmp_path / "test.db")


@pytest.fixture
def helper(sqlite_factory):
    """SqlHelper with TestTable created."""
    sql_helper = SqlHelper(sqlite_factory)
    sql_helper.execute_non_query(CREATE_TEST_TABLE)
    return sql_helper


@pytest.fixture
def fake_factory():
    return FakeConnectionFactory()
