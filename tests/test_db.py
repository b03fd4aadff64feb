import os
import asyncio
import sqlite3

import pytest

from db import models


DB_PATH = "test_db_unit.db"


def setup_module(module):
    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)
    asyncio.run(models.init_db(DB_PATH))


def teardown_module(module):
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(DB_PATH + suffix):
            os.remove(DB_PATH + suffix)


def test_schema_tables_exist():
    tables = models.get_required_tables()
    assert "approval_codes" in tables
    assert "user_daily_requests" in tables
    conn = models.get_connection(DB_PATH)
    cur = conn.cursor()
    for table in tables:
        assert models.verify_table_exists(cur, table)
    conn.close()


def test_init_db_is_idempotent():
    asyncio.run(_init_twice())


async def _init_twice():
    await models.upsert_room_limit(DB_PATH, "r1", "Room", 5, "chief", 1)
    await models.init_db(DB_PATH)
    row = await models.get_room_limit(DB_PATH, "r1")
    assert row["daily_limit"] == 5


def test_daily_counter_upsert():
    asyncio.run(_counter_flow())


async def _counter_flow():
    assert await models.get_daily_request_count(DB_PATH, "r9", "u1", "2024-01-01") == 0
    assert await models.increment_daily_request(DB_PATH, "r9", "u1", "2024-01-01", 10) == 1
    assert await models.increment_daily_request(DB_PATH, "r9", "u1", "2024-01-01", 11) == 2
    assert await models.increment_daily_request(DB_PATH, "r9", "u1", "2024-01-02", 12) == 1
    assert await models.get_daily_request_count(DB_PATH, "r9", "u1", "2024-01-01") == 2


def test_admin_user_rows():
    asyncio.run(_admin_flow())


async def _admin_flow():
    conn = models.get_connection(DB_PATH)
    cur = conn.cursor()
    models.insert_admin_user(cur, {"sender_hash": "h1", "sender_name": "A", "added_at": 5})
    conn.commit()
    conn.close()
    assert await models.is_admin_user(DB_PATH, "h1")
    rows = await models.list_admin_users(DB_PATH)
    assert rows[0]["sender_hash"] == "h1"
    assert await models.delete_admin_user(DB_PATH, "h1")
    assert not await models.is_admin_user(DB_PATH, "h1")


def test_statistics_and_simsim_tables_exist():
    tables = models.get_required_tables()
    for table in ("daily_chat_statistics", "monthly_chat_statistics", "room_ranking_settings", "simsim_responses"):
        assert table in tables


class BrokenConnection:
    """Stands in for a connection whose every statement fails."""

    def __init__(self):
        self.closed = False

    def cursor(self):
        return self

    def execute(self, *args):
        raise sqlite3.OperationalError("database disk image is malformed")

    executescript = execute

    def rollback(self):
        pass

    def close(self):
        self.closed = True


def test_connections_are_closed_when_a_statement_fails(monkeypatch):
    opened = []

    def _broken(db_path):
        opened.append(BrokenConnection())
        return opened[-1]

    monkeypatch.setattr(models, "get_connection", _broken)
    calls = [
        lambda: models.init_db(DB_PATH),
        lambda: models.count_approval_codes(DB_PATH),
        lambda: models.delete_expired_approval_codes(DB_PATH, 0),
        lambda: models.is_admin_user(DB_PATH, "h1"),
        lambda: models.increment_daily_request(DB_PATH, "r1", "u1", "2024-01-01", 1),
        lambda: models.record_chat_message(DB_PATH, "r1", "u1", "A", "hi", 1, 0, 0, 1),
        lambda: models.get_period_statistics(DB_PATH, "month", "r1"),
        lambda: models.set_message_content_enabled(DB_PATH, "r1", "Room", False, "chief", 1),
        lambda: models.insert_simsim_response(DB_PATH, "a", "b", "u1", 1),
        lambda: models.get_top_simsim_messages(DB_PATH),
    ]
    for call in calls:
        with pytest.raises(sqlite3.OperationalError):
            asyncio.run(call())
    assert len(opened) == len(calls)
    assert all(conn.closed for conn in opened)


def test_simsim_rows():
    asyncio.run(_simsim_flow())


async def _simsim_flow():
    assert await models.insert_simsim_response(DB_PATH, "hi", "hello", "u1", 1)
    assert not await models.insert_simsim_response(DB_PATH, "hi", "hello", "u2", 2)
    assert await models.insert_simsim_response(DB_PATH, "hi", "yo", "u1", 3)
    assert await models.insert_simsim_response(DB_PATH, "bye", "cya", "u1", 4)
    assert await models.get_simsim_responses(DB_PATH, "hi") == ["hello", "yo"]
    assert await models.get_top_simsim_messages(DB_PATH, 1) == [{"message": "hi", "count": 2}]
    assert await models.delete_simsim_response(DB_PATH, "hi", "hello")
    assert not await models.delete_simsim_response(DB_PATH, "hi", "hello")
    assert await models.delete_simsim_responses_for_message(DB_PATH, "hi") == 1
    assert await models.get_simsim_responses(DB_PATH, "hi") == []
