"""Shared fixtures: an in-memory record store and a Flask app on SQLite."""

import pytest

from app import create_app
from errors import StoreError
from models import db


class FakeStore:
    """Record store keeping rows in dicts and logging every call."""

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.fail = {}
        self._next_id = 1

    def _maybe_fail(self, op):
        if op in self.fail:
            raise StoreError(self.fail[op])

    def select(self, table, limit=50):
        self.calls.append(("select", table))
        self._maybe_fail("select")
        return [dict(r) for r in self.tables.get(table, [])[:limit]]

    def insert(self, table, records):
        self.calls.append(("insert", table, records))
        self._maybe_fail("insert")
        if isinstance(records, dict):
            records = [records]
        for r in records:
            row = {"id": self._next_id, **r}
            self._next_id += 1
            self.tables.setdefault(table, []).append(row)
        return len(records)

    def delete(self, table, key_field, key_value):
        self.calls.append(("delete", table, key_field, key_value))
        self._maybe_fail("delete")
        rows = self.tables.get(table, [])
        self.tables[table] = [r for r in rows if r.get(key_field) != key_value]
        return len(rows) - len(self.tables[table])

    def count(self, op):
        return sum(1 for c in self.calls if c[0] == op)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "ENV": "development",
        "ADMIN_INIT_EMAIL": "root@guidely.test",
        "LOG_LEVEL": "WARNING",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"X-User-Email": "root@guidely.test"}
