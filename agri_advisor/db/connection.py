"""
SQLite connection management.

``get_connection()`` is the only place a connection is opened. The process
entry point (CLI command, test fixture) owns its lifetime and passes the
handle explicitly to repositories and services: there is no module-level
connection or session state.

The yielded connection:
  - uses ``sqlite3.Row`` so rows behave like dicts;
  - has WAL journal mode and a busy timeout applied;
  - commits on clean exit and rolls back on exception (transactional mode), or
  - commits every statement as it runs (``autocommit=True``), matching a
    document store where each insert is durable on its own.

Usage::

    from agri_advisor.db.connection import get_connection

    with get_connection("data/db/agri_advisor.db") as conn:
        RecommendationService(conn).generate_for_user("user-1", season="fall")
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from agri_advisor.config import DatabaseConfig

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    autocommit: bool = False,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``. Parent
            directories are created when missing.
        wal_mode: Enable WAL journal mode.
        busy_timeout_ms: Milliseconds to wait on a locked database before
            raising ``sqlite3.OperationalError``.
        autocommit: Commit each statement immediately instead of once at exit.

    Yields:
        An open, configured ``sqlite3.Connection``.

    Raises:
        sqlite3.Error: Propagated unchanged from SQLite; the transaction is
            rolled back first.
    """
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        db_path,
        timeout=busy_timeout_ms / 1000,
        isolation_level=None if autocommit else "DEFERRED",
    )
    conn.row_factory = sqlite3.Row

    try:
        conn.execute(f"PRAGMA busy_timeout = {busy_timeout_ms};")
        if wal_mode and db_path != ":memory:":
            conn.execute("PRAGMA journal_mode = WAL;")

        yield conn
        conn.commit()

    except Exception:
        logger.debug("Rolling back connection to %s", db_path)
        conn.rollback()
        raise

    finally:
        conn.close()


def connect_from_config(config: DatabaseConfig, autocommit: bool = False):
    """``get_connection()`` with settings taken from a ``DatabaseConfig``."""
    return get_connection(
        config.db_path,
        wal_mode=config.wal_mode,
        busy_timeout_ms=config.busy_timeout_ms,
        autocommit=autocommit,
    )
