from collections.abc import AsyncGenerator
from datetime import datetime
from pathlib import Path

import pytest_asyncio

from searchbuilder.database import Database
from searchbuilder.query.model import Model, Searchable, SoftDeletes

SCHEMA = """
CREATE TABLE foo_models (
    id INTEGER PRIMARY KEY,
    foo TEXT,
    bar TEXT,
    name TEXT
);

CREATE TABLE soft_delete_models (
    id INTEGER PRIMARY KEY,
    foo TEXT,
    deleted_at TIMESTAMP
);
"""

FOO_ROWS = [
    (1, "bar", "baz", "alpha"),
    (2, "bar", "qux", "beta"),
    (3, "baz", "qux", "gamma"),
    (4, "nope", "nope", "delta"),
    (5, "nope", "nope", None),
]

SOFT_DELETE_ROWS = [
    (1, "bar", None),
    (2, "bar", datetime(2024, 1, 1).isoformat()),
    (3, "baz", None),
]


class FooModel(Searchable, Model):
    foo: str | None = None
    bar: str | None = None
    name: str | None = None


class SoftDeleteModel(Searchable, SoftDeletes):
    foo: str | None = None


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[Database]:
    db = Database(tmp_path / "test_search.db")
    await db.connect()
    await db.conn.executescript(SCHEMA)
    await db.conn.executemany("INSERT INTO foo_models (id, foo, bar, name) VALUES (?, ?, ?, ?)", FOO_ROWS)
    await db.conn.executemany("INSERT INTO soft_delete_models (id, foo, deleted_at) VALUES (?, ?, ?)", SOFT_DELETE_ROWS)
    await db.conn.commit()
    yield db
    await db.close()
