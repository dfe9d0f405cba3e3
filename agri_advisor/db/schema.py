"""
SQLite schema DDL: all CREATE TABLE and CREATE INDEX statements.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.

Tables:
  1. analysis_results     : stored analysis artifacts (JSON ``data`` column)
  2. chat_conversations   : conversation headers
  3. chat_messages        : messages, keyed by ``conversation_id``
  4. recommendation_sets  : one row per generation call
  5. recommendation_items : ranked items, keyed by ``set_id``

There are deliberately no FOREIGN KEY clauses: child rows are removed by the
repositories' cascade deletes, mirroring the document store this schema
replaces. Ids are UUID text; timestamps are ISO-8601 UTC text.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_ANALYSIS_RESULTS = """
CREATE TABLE IF NOT EXISTS analysis_results (
    id          TEXT    PRIMARY KEY,
    user_id     TEXT    NOT NULL,
    type        TEXT    NOT NULL,
    data        TEXT    NOT NULL DEFAULT '{}',
    created_at  TEXT,
    updated_at  TEXT
);
CREATE INDEX IF NOT EXISTS idx_analysis_user_updated
    ON analysis_results(user_id, updated_at);
"""

_DDL_CHAT_CONVERSATIONS = """
CREATE TABLE IF NOT EXISTS chat_conversations (
    id          TEXT    PRIMARY KEY,
    user_id     TEXT    NOT NULL,
    title       TEXT    NOT NULL,
    created_at  TEXT,
    updated_at  TEXT
);
CREATE INDEX IF NOT EXISTS idx_conversations_user
    ON chat_conversations(user_id);
"""

_DDL_CHAT_MESSAGES = """
CREATE TABLE IF NOT EXISTS chat_messages (
    id               TEXT    PRIMARY KEY,
    conversation_id  TEXT    NOT NULL,
    role             TEXT    NOT NULL,
    content          TEXT    NOT NULL,
    created_at       TEXT
);
CREATE INDEX IF NOT EXISTS idx_messages_conversation_time
    ON chat_messages(conversation_id, created_at);
"""

_DDL_RECOMMENDATION_SETS = """
CREATE TABLE IF NOT EXISTS recommendation_sets (
    id          TEXT    PRIMARY KEY,
    user_id     TEXT    NOT NULL,
    summary     TEXT    NOT NULL,
    created_at  TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_rec_sets_user_time
    ON recommendation_sets(user_id, created_at);
"""

_DDL_RECOMMENDATION_ITEMS = """
CREATE TABLE IF NOT EXISTS recommendation_items (
    id           TEXT    PRIMARY KEY,
    set_id       TEXT    NOT NULL,
    position     INTEGER NOT NULL DEFAULT 0,
    type         TEXT    NOT NULL,
    title        TEXT    NOT NULL,
    description  TEXT    NOT NULL,
    confidence   TEXT    NOT NULL,
    data         TEXT    NOT NULL DEFAULT '{}',
    source       TEXT    NOT NULL,
    created_at   TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_rec_items_set
    ON recommendation_items(set_id, position);
"""

# ── Ordered list of all DDL to apply ──────────────────────────────────────────

_ALL_DDL: list[str] = [
    _DDL_ANALYSIS_RESULTS,
    _DDL_CHAT_CONVERSATIONS,
    _DDL_CHAT_MESSAGES,
    _DDL_RECOMMENDATION_SETS,
    _DDL_RECOMMENDATION_ITEMS,
]

# Table names for introspection / tests
ALL_TABLE_NAMES = [
    "analysis_results",
    "chat_conversations",
    "chat_messages",
    "recommendation_sets",
    "recommendation_items",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``. Safe to call repeatedly."""
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return index names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
