"""
Base repository with the SQL helpers shared by every repository.

Repositories receive an open ``sqlite3.Connection`` (see ``get_connection()``)
and never open or close one themselves. SQL is written out explicitly in each
repository method; rows come back as ``sqlite3.Row`` and are converted to
pydantic models before leaving the repository.

Every stored record gets a UUID4 text id, and ``data`` payloads are stored as
JSON text.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from typing import Any, Optional

logger = logging.getLogger(__name__)

Params = tuple[Any, ...] | dict[str, Any]


class BaseRepository:
    """Shared SQL execution helpers.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        logger.debug("SQL: %s | params: %s", " ".join(sql.split()), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    @staticmethod
    def new_id() -> str:
        """Fresh UUID4 text identifier."""
        return str(uuid.uuid4())

    @staticmethod
    def dump_json(value: dict[str, Any]) -> str:
        return json.dumps(value, sort_keys=True, default=str)

    @staticmethod
    def load_json(text: Optional[str]) -> dict[str, Any]:
        """Parse a stored JSON object; empty or non-object text gives ``{}``."""
        if not text:
            return {}
        value = json.loads(text)
        return value if isinstance(value, dict) else {}
