"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Provide an in-memory stand-in for a pooled pymysql connection
  - Mount the FastAPI app with the connection dependency overridden

Notes:
  - Each cursor.execute() consumes the next scripted result, in order:
      dict  -> a single row
      list  -> a result set
      int   -> rowcount of a write
      None  -> empty result
      Exception instance -> raised from execute()
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rfm_api.database import get_connection  # noqa: E402
from rfm_api.main import app  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "api: HTTP tests against the FastAPI app with a fake database"
    )


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.rowcount = 0
        self.lastrowid = None
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        normalized = " ".join(sql.split())
        self.connection.executed.append((normalized, tuple(params) if params is not None else ()))

        result = self.connection.results.pop(0) if self.connection.results else None
        if isinstance(result, Exception):
            raise result
        if isinstance(result, dict):
            self._rows, self.rowcount = [result], 1
        elif isinstance(result, list):
            self._rows, self.rowcount = list(result), len(result)
        elif isinstance(result, int):
            self._rows, self.rowcount = [], result
        else:
            self._rows, self.rowcount = [], 0
        self.lastrowid = self.connection.lastrowid

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class FakeConnection:
    def __init__(self):
        self.results = []
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.lastrowid = None

    def script(self, *results):
        self.results.extend(results)

    def cursor(self, *args, **kwargs):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def sql(self, index):
        return self.executed[index][0]

    def params(self, index):
        return self.executed[index][1]


@pytest.fixture
def fake_db():
    return FakeConnection()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_connection] = lambda: fake_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
