"""
Sequential schema migrations tracked in a ``schema_versions`` table.

There are no down migrations. ``apply_schema()`` creates the current tables
first; entries in ``MIGRATIONS`` upgrade databases created by earlier
releases and must therefore be safe to run against an already-current schema.

Adding a migration:
  1. Write ``migration_NNNN_description(conn)`` below.
  2. Register it in ``MIGRATIONS`` under ``"NNNN_description"``.

Migrations run in registry insertion order, each at most once per database.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable

logger = logging.getLogger(__name__)

MigrationFn = Callable[[sqlite3.Connection], None]


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_versions (
            version_id  TEXT    NOT NULL PRIMARY KEY,
            applied_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
            description TEXT
        );
    """)
    conn.commit()


def get_applied_versions(conn: sqlite3.Connection) -> set[str]:
    """Return the ids of migrations already recorded in ``schema_versions``."""
    _ensure_version_table(conn)
    rows = conn.execute("SELECT version_id FROM schema_versions;").fetchall()
    return {row["version_id"] for row in rows}


# ── Migration functions ────────────────────────────────────────────────────────

def migration_0001_baseline(conn: sqlite3.Connection) -> None:
    """Baseline marker; the tables themselves come from ``apply_schema()``."""


def migration_0002_analysis_type_index(conn: sqlite3.Connection) -> None:
    """Index analysis results by (user, type) for type-filtered lookups."""
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_analysis_user_type "
        "ON analysis_results(user_id, type);"
    )
    conn.commit()


# ── Registry ──────────────────────────────────────────────────────────────────

MIGRATIONS: dict[str, tuple[MigrationFn, str]] = {
    "0001_baseline": (
        migration_0001_baseline,
        "Baseline: schema_versions table created",
    ),
    "0002_analysis_type_index": (
        migration_0002_analysis_type_index,
        "Index analysis_results on (user_id, type)",
    ),
}


def run_migrations(conn: sqlite3.Connection) -> int:
    """Apply all pending migrations.

    Args:
        conn: An open connection whose base schema has been applied.

    Returns:
        Number of migrations applied in this call.
    """
    applied = get_applied_versions(conn)

    count = 0
    for version_id, (fn, description) in MIGRATIONS.items():
        if version_id in applied:
            logger.debug("Migration %s already applied; skipping.", version_id)
            continue

        logger.info("Applying migration %s: %s", version_id, description)
        try:
            fn(conn)
            conn.execute(
                "INSERT INTO schema_versions(version_id, description) VALUES (?, ?);",
                (version_id, description),
            )
            conn.commit()
            count += 1
        except sqlite3.Error:
            conn.rollback()
            logger.exception("Migration %s failed.", version_id)
            raise

    if count:
        logger.info("Applied %d migration(s).", count)
    else:
        logger.debug("No pending migrations.")

    return count
