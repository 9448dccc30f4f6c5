"""Tests for the PostgreSQL record store, against a fake connection pool."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import asyncpg
import pytest

from ttl_shortener.database.postgres import PostgresRecordStore
from ttl_shortener.exceptions import StoreError

CREATED = datetime(2024, 5, 1, 10, tzinfo=timezone.utc)


def row(**overrides):
    data = {
        "id": "rec000000000001",
        "original_url": "https://example.com",
        "short_code": "abcdef",
        "created": CREATED,
        "expiry": "3600000",
    }
    data.update(overrides)
    return data


class FakeConnection:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.calls = []

    async def _call(self, kind, query, args):
        self.calls.append((kind, " ".join(query.split()), args))
        if self.error:
            raise self.error

    async def fetch(self, query, *args):
        await self._call("fetch", query, args)
        return self.rows

    async def fetchrow(self, query, *args):
        await self._call("fetchrow", query, args)
        return self.rows[0] if self.rows else None

    async def fetchval(self, query, *args):
        await self._call("fetchval", query, args)
        return 1

    async def execute(self, query, *args):
        await self._call("execute", query, args)


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        yield self.conn

    async def close(self):
        self.closed = True


def make_store(conn, **kwargs) -> PostgresRecordStore:
    store = PostgresRecordStore(db_config="postgresql://u:p@localhost/db", **kwargs)
    store._pool = FakePool(conn)
    return store


@pytest.mark.asyncio
class TestPostgresRecordStore:

    async def test_initialize_creates_tables(self):
        conn = FakeConnection()
        store = make_store(conn, create_tables=True)

        await store.initialize()

        assert conn.calls[0][0] == "execute"
        assert "CREATE TABLE IF NOT EXISTS url_records" in conn.calls[0][1]

    async def test_list_by_urls(self):
        conn = FakeConnection(rows=[row()])
        store = make_store(conn)

        [record] = await store.list_records(["https://example.com", "https://b.example"])

        kind, query, args = conn.calls[0]
        assert "WHERE original_url = ANY($1::text[]) ORDER BY created, id" in query
        assert args == (["https://example.com", "https://b.example"],)
        assert record.short_code == "abcdef"
        assert record.created == CREATED

    async def test_list_all(self):
        conn = FakeConnection(rows=[row(), row(id="rec000000000002")])
        store = make_store(conn)

        records = await store.list_records()

        assert len(records) == 2
        assert "WHERE" not in conn.calls[0][1]
        assert conn.calls[0][1].endswith("ORDER BY created, id")

    async def test_list_no_urls(self):
        conn = FakeConnection()
        store = make_store(conn)

        assert await store.list_records([]) == []
        assert conn.calls == []

    async def test_create_record(self):
        conn = FakeConnection(rows=[row(short_code="newOne")])
        store = make_store(conn)

        record = await store.create_record("https://example.com", "newOne", CREATED, "3600000")

        kind, query, args = conn.calls[0]
        assert query.startswith("INSERT INTO url_records")
        assert args[1:] == ("https://example.com", "newOne", CREATED, "3600000")
        assert len(args[0]) == 15
        assert record.short_code == "newOne"

    async def test_update_only_given_columns(self):
        conn = FakeConnection(rows=[row(short_code="rotate")])
        store = make_store(conn)

        await store.update_record("rec000000000001", short_code="rotate", expiry="600000")

        kind, query, args = conn.calls[0]
        assert "SET short_code = $2, expiry = $3 WHERE id = $1" in query
        assert args == ("rec000000000001", "rotate", "600000")

    async def test_update_missing_record(self):
        store = make_store(FakeConnection(rows=[]))

        with pytest.raises(StoreError, match="Record not found"):
            await store.update_record("nope", created=CREATED)

    async def test_driver_error_becomes_store_error(self):
        store = make_store(FakeConnection(error=asyncpg.InterfaceError("boom")))

        with pytest.raises(StoreError, match="PostgreSQL operation failed"):
            await store.list_records()
        assert not await store.health_check()

    async def test_close(self):
        store = make_store(FakeConnection())
        pool = store._pool

        await store.close()

        assert pool.closed
        assert store._pool is None
