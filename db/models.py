"""SQLite models and helpers for the dogebot backend.

This module provides synchronous SQLite functions and wraps blocking calls
with asyncio.to_thread so callers on the event loop are never blocked.
Every mutation of shared state is a single statement or a single
``BEGIN IMMEDIATE`` transaction so concurrent message tasks cannot lose
updates.
"""
from __future__ import annotations

import sqlite3
import os
import json
from typing import Optional, List, Dict, Any, Callable, Tuple
import asyncio
import logging


logger = logging.getLogger(__name__)


DB_SCHEMA = """
CREATE TABLE IF NOT EXISTS approval_codes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT NOT NULL,
    purpose TEXT NOT NULL,
    payload TEXT NOT NULL DEFAULT '{}',
    requester TEXT NOT NULL,
    room_id TEXT,
    room_name TEXT,
    created_at INTEGER NOT NULL,
    expires_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS admin_users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sender_hash TEXT UNIQUE NOT NULL,
    sender_name TEXT,
    room_id TEXT,
    room_name TEXT,
    added_by TEXT,
    added_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS room_request_limits (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT UNIQUE NOT NULL,
    room_name TEXT,
    daily_limit INTEGER NOT NULL,
    set_by TEXT,
    set_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS user_daily_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT NOT NULL,
    sender_hash TEXT NOT NULL,
    date TEXT NOT NULL,
    request_count INTEGER DEFAULT 0,
    last_request_time INTEGER,
    UNIQUE(room_id, sender_hash, date)
);

CREATE TABLE IF NOT EXISTS chat_statistics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT NOT NULL,
    sender_hash TEXT NOT NULL,
    sender_name TEXT,
    message_count INTEGER DEFAULT 0,
    last_message_time INTEGER,
    UNIQUE(room_id, sender_hash)
);

CREATE TABLE IF NOT EXISTS message_contents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT NOT NULL,
    content TEXT NOT NULL,
    count INTEGER DEFAULT 0,
    last_time INTEGER,
    UNIQUE(room_id, content)
);

CREATE TABLE IF NOT EXISTS hourly_chat_statistics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT NOT NULL,
    sender_hash TEXT NOT NULL,
    hour INTEGER NOT NULL,
    message_count INTEGER DEFAULT 0,
    UNIQUE(room_id, sender_hash, hour)
);

CREATE TABLE IF NOT EXISTS daily_chat_statistics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT NOT NULL,
    sender_hash TEXT NOT NULL,
    day_of_week INTEGER NOT NULL,
    message_count INTEGER DEFAULT 0,
    UNIQUE(room_id, sender_hash, day_of_week)
);

CREATE TABLE IF NOT EXISTS monthly_chat_statistics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT NOT NULL,
    sender_hash TEXT NOT NULL,
    month INTEGER NOT NULL,
    message_count INTEGER DEFAULT 0,
    UNIQUE(room_id, sender_hash, month)
);

CREATE TABLE IF NOT EXISTS room_ranking_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT UNIQUE NOT NULL,
    room_name TEXT,
    is_message_content_enabled INTEGER NOT NULL DEFAULT 1,
    set_by TEXT,
    set_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS simsim_responses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    message TEXT NOT NULL,
    response TEXT NOT NULL,
    created_by TEXT,
    created_at INTEGER NOT NULL,
    UNIQUE(message, response)
);

CREATE INDEX IF NOT EXISTS idx_approval_codes_code ON approval_codes(code);
CREATE INDEX IF NOT EXISTS idx_approval_codes_expires ON approval_codes(expires_at);
"""

# period name -> (table, column); names never come from user input
PERIOD_TABLES = {
    "hour": ("hourly_chat_statistics", "hour"),
    "day_of_week": ("daily_chat_statistics", "day_of_week"),
    "month": ("monthly_chat_statistics", "month"),
}


# Hook run inside the approval transaction; returning a non-None value aborts it.
ClaimHook = Callable[[sqlite3.Cursor, Dict[str, Any]], Optional[Any]]


def get_connection(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, check_same_thread=False, timeout=30)
    conn.row_factory = sqlite3.Row
    return conn


def verify_table_exists(cur: sqlite3.Cursor, table_name: str) -> bool:
    """Check if a table exists in the database."""
    cur.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table_name,)
    )
    return bool(cur.fetchone())


def get_required_tables() -> List[str]:
    """Extract required table names from DB_SCHEMA."""
    tables = []
    for line in DB_SCHEMA.split("\n"):
        line = line.strip()
        if line.startswith("CREATE TABLE IF NOT EXISTS"):
            tables.append(line.split()[5].strip('('))
    return tables


async def init_db(db_path: str) -> None:
    """Initialize the database schema.

    Creates the parent directory and every table and index that is missing.
    Safe to call repeatedly; nothing existing is dropped or modified.
    """
    def _init():
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL")
            cur.executescript(DB_SCHEMA)
            conn.commit()
            for table_name in get_required_tables():
                if not verify_table_exists(cur, table_name):
                    logger.error("Critical table %s missing after schema init!", table_name)
        finally:
            conn.close()

    await asyncio.to_thread(_init)
    logger.info("Database initialized and verified at %s", db_path)


# ---------------------------------------------------------------------------
# approval codes
# ---------------------------------------------------------------------------

def _code_row(row: sqlite3.Row) -> Dict[str, Any]:
    data = dict(row)
    data["payload"] = json.loads(data.get("payload") or "{}")
    return data


async def insert_approval_code(db_path: str, record: Dict[str, Any]) -> int:
    """Persist a freshly issued approval code; return its row id."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO approval_codes (code, purpose, payload, requester, room_id, room_name, created_at, expires_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record["code"],
                    record["purpose"],
                    json.dumps(record.get("payload") or {}, ensure_ascii=False),
                    record["requester"],
                    record.get("room_id"),
                    record.get("room_name"),
                    int(record["created_at"]),
                    int(record["expires_at"]),
                ),
            )
            rid = cur.lastrowid
            conn.commit()
            return rid
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def claim_approval_code(
    db_path: str,
    code: str,
    purpose: str,
    now: int,
    on_claim: Optional[ClaimHook] = None,
) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Find and delete one live approval code in a single write transaction.

    Returns ``(record, None)`` when the code was consumed, otherwise
    ``(record_or_None, reason)`` where reason is ``"not_found"``,
    ``"expired"`` or whatever ``on_claim`` returned. The write lock is held
    from lookup to delete, so a concurrent claim of the same code sees no row.
    """
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("BEGIN IMMEDIATE")
            cur.execute(
                "SELECT * FROM approval_codes WHERE code = ? AND purpose = ? ORDER BY expires_at DESC",
                (code, purpose),
            )
            rows = cur.fetchall()
            if not rows:
                conn.rollback()
                return None, "not_found"
            live = [r for r in rows if r["expires_at"] > now]
            if not live:
                conn.rollback()
                return _code_row(rows[0]), "expired"
            record = _code_row(live[0])
            if on_claim is not None:
                reason = on_claim(cur, record)
                if reason is not None:
                    conn.rollback()
                    return record, reason
            cur.execute("DELETE FROM approval_codes WHERE id = ?", (record["id"],))
            conn.commit()
            return record, None
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def delete_expired_approval_codes(db_path: str, now: int) -> int:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM approval_codes WHERE expires_at <= ?", (now,))
            deleted = cur.rowcount
            conn.commit()
            return deleted
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def count_approval_codes(db_path: str, purpose: Optional[str] = None) -> int:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            if purpose:
                cur.execute("SELECT COUNT(*) FROM approval_codes WHERE purpose = ?", (purpose,))
            else:
                cur.execute("SELECT COUNT(*) FROM approval_codes")
            return int(cur.fetchone()[0])
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


# ---------------------------------------------------------------------------
# admin users
# ---------------------------------------------------------------------------

def insert_admin_user(cur: sqlite3.Cursor, row: Dict[str, Any]) -> None:
    """Insert an admin row on an open cursor; raises sqlite3.IntegrityError on duplicates."""
    cur.execute(
        "INSERT INTO admin_users (sender_hash, sender_name, room_id, room_name, added_by, added_at) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (
            row["sender_hash"],
            row.get("sender_name"),
            row.get("room_id"),
            row.get("room_name"),
            row.get("added_by"),
            int(row["added_at"]),
        ),
    )


async def is_admin_user(db_path: str, sender_hash: str) -> bool:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM admin_users WHERE sender_hash = ?", (sender_hash,))
            return cur.fetchone() is not None
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def delete_admin_user(db_path: str, sender_hash: str) -> bool:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM admin_users WHERE sender_hash = ?", (sender_hash,))
            deleted = cur.rowcount
            conn.commit()
            return deleted > 0
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def list_admin_users(db_path: str) -> List[Dict[str, Any]]:
    """Return admin rows ordered by room name then sender name."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT sender_hash, sender_name, room_id, room_name, added_by, added_at "
                "FROM admin_users ORDER BY room_name, sender_name"
            )
            return [dict(r) for r in cur.fetchall()]
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


# ---------------------------------------------------------------------------
# room request limits and daily usage
# ---------------------------------------------------------------------------

def upsert_room_limit_on(cur: sqlite3.Cursor, room_id: str, room_name: str, daily_limit: int, set_by: str, set_at: int) -> None:
    cur.execute(
        "INSERT INTO room_request_limits (room_id, room_name, daily_limit, set_by, set_at) VALUES (?, ?, ?, ?, ?) "
        "ON CONFLICT(room_id) DO UPDATE SET room_name = excluded.room_name, daily_limit = excluded.daily_limit, "
        "set_by = excluded.set_by, set_at = excluded.set_at",
        (room_id, room_name, int(daily_limit), set_by, int(set_at)),
    )


async def upsert_room_limit(db_path: str, room_id: str, room_name: str, daily_limit: int, set_by: str, set_at: int) -> bool:
    """Create or replace the single quota row of a room."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            upsert_room_limit_on(cur, room_id, room_name, daily_limit, set_by, set_at)
            conn.commit()
            return True
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_room_limit(db_path: str, room_id: str) -> Optional[Dict[str, Any]]:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT room_id, room_name, daily_limit, set_by, set_at FROM room_request_limits WHERE room_id = ?",
                (room_id,),
            )
            row = cur.fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def delete_room_limit(db_path: str, room_id: str) -> bool:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM room_request_limits WHERE room_id = ?", (room_id,))
            deleted = cur.rowcount
            conn.commit()
            return deleted > 0
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_daily_request_count(db_path: str, room_id: str, sender_hash: str, date: str) -> int:
    """Return today's request count for a sender in a room; 0 when no counter exists."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT request_count FROM user_daily_requests WHERE room_id = ? AND sender_hash = ? AND date = ?",
                (room_id, sender_hash, date),
            )
            row = cur.fetchone()
            return int(row["request_count"]) if row else 0
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def increment_daily_request(db_path: str, room_id: str, sender_hash: str, date: str, now: int) -> int:
    """Atomically add one request to the (room, sender, date) counter; return the new count."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO user_daily_requests (room_id, sender_hash, date, request_count, last_request_time) "
                "VALUES (?, ?, ?, 1, ?) "
                "ON CONFLICT(room_id, sender_hash, date) DO UPDATE SET "
                "request_count = request_count + 1, last_request_time = excluded.last_request_time",
                (room_id, sender_hash, date, int(now)),
            )
            cur.execute(
                "SELECT request_count FROM user_daily_requests WHERE room_id = ? AND sender_hash = ? AND date = ?",
                (room_id, sender_hash, date),
            )
            count = cur.fetchone()[0]
            conn.commit()
            return int(count)
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


# ---------------------------------------------------------------------------
# chat statistics
# ---------------------------------------------------------------------------

def _content_enabled_on(cur: sqlite3.Cursor, room_id: str) -> bool:
    cur.execute("SELECT is_message_content_enabled FROM room_ranking_settings WHERE room_id = ?", (room_id,))
    row = cur.fetchone()
    return row is None or bool(row[0])


async def record_chat_message(
    db_path: str,
    room_id: str,
    sender_hash: str,
    sender_name: str,
    content: str,
    time: int,
    hour: int,
    day_of_week: int,
    month: int,
) -> None:
    """Upsert every counter for one message in one transaction.

    The per-content counter is skipped for rooms that turned message
    content ranking off.
    """
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO chat_statistics (room_id, sender_hash, sender_name, message_count, last_message_time) "
                "VALUES (?, ?, ?, 1, ?) "
                "ON CONFLICT(room_id, sender_hash) DO UPDATE SET message_count = message_count + 1, "
                "last_message_time = excluded.last_message_time, sender_name = excluded.sender_name",
                (room_id, sender_hash, sender_name, int(time)),
            )
            if _content_enabled_on(cur, room_id):
                cur.execute(
                    "INSERT INTO message_contents (room_id, content, count, last_time) VALUES (?, ?, 1, ?) "
                    "ON CONFLICT(room_id, content) DO UPDATE SET count = count + 1, last_time = excluded.last_time",
                    (room_id, content, int(time)),
                )
            for table, column, value in (
                ("hourly_chat_statistics", "hour", hour),
                ("daily_chat_statistics", "day_of_week", day_of_week),
                ("monthly_chat_statistics", "month", month),
            ):
                cur.execute(
                    f"INSERT INTO {table} (room_id, sender_hash, {column}, message_count) VALUES (?, ?, ?, 1) "
                    f"ON CONFLICT(room_id, sender_hash, {column}) DO UPDATE SET message_count = message_count + 1",
                    (room_id, sender_hash, int(value)),
                )
            conn.commit()
        finally:
            conn.close()

    await asyncio.to_thread(_fn)


async def get_top_users(db_path: str, room_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT sender_hash, sender_name, message_count FROM chat_statistics "
                "WHERE room_id = ? ORDER BY message_count DESC, id ASC LIMIT ?",
                (room_id, int(limit)),
            )
            return [dict(r) for r in cur.fetchall()]
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_user_rank(db_path: str, room_id: str, sender_hash: str) -> Optional[Tuple[int, int]]:
    """Return (rank, message_count) of a sender in a room, or None when the sender has no messages."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT message_count FROM chat_statistics WHERE room_id = ? AND sender_hash = ?",
                (room_id, sender_hash),
            )
            row = cur.fetchone()
            if not row:
                return None
            count = int(row["message_count"])
            cur.execute(
                "SELECT COUNT(*) FROM chat_statistics WHERE room_id = ? AND message_count > ?",
                (room_id, count),
            )
            ahead = cur.fetchone()[0]
            return int(ahead) + 1, count
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_top_messages(db_path: str, room_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT content, count FROM message_contents WHERE room_id = ? ORDER BY count DESC, id ASC LIMIT ?",
                (room_id, int(limit)),
            )
            return [dict(r) for r in cur.fetchall()]
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_room_statistics(db_path: str, room_id: str) -> Tuple[int, int]:
    """Return (total_messages, unique_senders) for a room."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT COALESCE(SUM(message_count), 0), COUNT(*) FROM chat_statistics WHERE room_id = ?",
                (room_id,),
            )
            total, users = cur.fetchone()
            return int(total), int(users)
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_period_statistics(
    db_path: str, period: str, room_id: str, sender_hash: Optional[str] = None
) -> List[Tuple[int, int]]:
    """Return (bucket, message_count) pairs for buckets with traffic, ascending.

    ``period`` is one of PERIOD_TABLES: ``hour`` (0-23), ``day_of_week``
    (0=Sunday .. 6=Saturday) or ``month`` (1-12).
    """
    table, column = PERIOD_TABLES[period]

    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            if sender_hash:
                cur.execute(
                    f"SELECT {column} AS bucket, SUM(message_count) AS n FROM {table} "
                    f"WHERE room_id = ? AND sender_hash = ? GROUP BY {column} ORDER BY {column}",
                    (room_id, sender_hash),
                )
            else:
                cur.execute(
                    f"SELECT {column} AS bucket, SUM(message_count) AS n FROM {table} "
                    f"WHERE room_id = ? GROUP BY {column} ORDER BY {column}",
                    (room_id,),
                )
            return [(int(r["bucket"]), int(r["n"])) for r in cur.fetchall()]
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def delete_message_contents_where(db_path: str, predicate: Callable[[str], bool]) -> int:
    """Delete stored message contents for which predicate(content) is true; return count."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("SELECT id, content FROM message_contents")
            doomed = [(r["id"],) for r in cur.fetchall() if predicate(r["content"])]
            if doomed:
                cur.executemany("DELETE FROM message_contents WHERE id = ?", doomed)
            conn.commit()
            return len(doomed)
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


# ---------------------------------------------------------------------------
# room ranking settings
# ---------------------------------------------------------------------------

async def is_message_content_enabled(db_path: str, room_id: str) -> bool:
    """Rooms without a settings row record message contents."""
    def _fn():
        conn = get_connection(db_path)
        try:
            return _content_enabled_on(conn.cursor(), room_id)
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def set_message_content_enabled(
    db_path: str, room_id: str, room_name: str, enabled: bool, set_by: str, set_at: int
) -> int:
    """Upsert the room setting; disabling also drops the room's stored contents.

    Returns the number of content rows deleted.
    """
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("BEGIN IMMEDIATE")
            cur.execute(
                "INSERT INTO room_ranking_settings (room_id, room_name, is_message_content_enabled, set_by, set_at) "
                "VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(room_id) DO UPDATE SET room_name = excluded.room_name, "
                "is_message_content_enabled = excluded.is_message_content_enabled, "
                "set_by = excluded.set_by, set_at = excluded.set_at",
                (room_id, room_name, 1 if enabled else 0, set_by, int(set_at)),
            )
            deleted = 0
            if not enabled:
                cur.execute("DELETE FROM message_contents WHERE room_id = ?", (room_id,))
                deleted = cur.rowcount
            conn.commit()
            return deleted
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


# ---------------------------------------------------------------------------
# simsim learned replies
# ---------------------------------------------------------------------------

async def insert_simsim_response(db_path: str, message: str, response: str, created_by: str, created_at: int) -> bool:
    """Store a reply for a trigger message; False if the exact pair already exists."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT OR IGNORE INTO simsim_responses (message, response, created_by, created_at) VALUES (?, ?, ?, ?)",
                (message, response, created_by, int(created_at)),
            )
            inserted = cur.rowcount
            conn.commit()
            return inserted > 0
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def delete_simsim_response(db_path: str, message: str, response: str) -> bool:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM simsim_responses WHERE message = ? AND response = ?", (message, response))
            deleted = cur.rowcount
            conn.commit()
            return deleted > 0
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def delete_simsim_responses_for_message(db_path: str, message: str) -> int:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM simsim_responses WHERE message = ?", (message,))
            deleted = cur.rowcount
            conn.commit()
            return deleted
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_simsim_responses(db_path: str, message: str) -> List[str]:
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute("SELECT response FROM simsim_responses WHERE message = ? ORDER BY id", (message,))
            return [r["response"] for r in cur.fetchall()]
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)


async def get_top_simsim_messages(db_path: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Trigger messages with the most replies, as dicts with message and count."""
    def _fn():
        conn = get_connection(db_path)
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT message, COUNT(*) AS count FROM simsim_responses "
                "GROUP BY message ORDER BY count DESC, MIN(id) ASC LIMIT ?",
                (int(limit),),
            )
            return [dict(r) for r in cur.fetchall()]
        finally:
            conn.close()

    return await asyncio.to_thread(_fn)
