"""
Repository for stored analysis results.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from agri_advisor.db.repositories.base import BaseRepository
from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.utils.time_utils import from_iso, to_iso, utcnow

logger = logging.getLogger(__name__)


class AnalysisResultRepository(BaseRepository):
    """Read/write access to the ``analysis_results`` table."""

    def insert(self, result: AnalysisResult) -> AnalysisResult:
        """Persist ``result`` and return it with its stored id and timestamps.

        A missing id is replaced by a fresh UUID. Missing timestamps are set
        to the current time; supplied ones (e.g. from an import) are kept.
        """
        now = utcnow()
        created_at = result.created_at or now
        stored = result.model_copy(
            update={
                "id": result.id or self.new_id(),
                "created_at": created_at,
                "updated_at": result.updated_at or created_at,
            }
        )
        self.execute(
            """
            INSERT INTO analysis_results (id, user_id, type, data, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                stored.id,
                stored.user_id,
                stored.type,
                self.dump_json(stored.data),
                to_iso(stored.created_at),
                to_iso(stored.updated_at),
            ),
        )
        return stored

    def get_by_user(
        self,
        user_id: str,
        analysis_type: Optional[str] = None,
    ) -> list[AnalysisResult]:
        """All results owned by ``user_id``, most recently updated first.

        Args:
            user_id: Owning user.
            analysis_type: Restrict to one analysis type when given.
        """
        sql = "SELECT * FROM analysis_results WHERE user_id = ?"
        params: list[Any] = [user_id]
        if analysis_type is not None:
            sql += " AND type = ?"
            params.append(analysis_type)
        # Undated rows last, rowid keeps insertion order among equal timestamps.
        sql += " ORDER BY updated_at IS NULL, updated_at DESC, rowid DESC;"
        return [_row_to_result(r) for r in self.fetchall(sql, tuple(params))]

    def get_by_id(self, result_id: str) -> Optional[AnalysisResult]:
        row = self.fetchone("SELECT * FROM analysis_results WHERE id = ?;", (result_id,))
        return _row_to_result(row) if row else None

    def update_data(self, result_id: str, data: dict[str, Any]) -> AnalysisResult:
        """Replace the payload of one result and bump its ``updated_at``.

        Raises:
            LookupError: If no result has ``result_id``.
        """
        cursor = self.execute(
            "UPDATE analysis_results SET data = ?, updated_at = ? WHERE id = ?;",
            (self.dump_json(data), to_iso(utcnow()), result_id),
        )
        if cursor.rowcount == 0:
            raise LookupError(f"Analysis result {result_id!r} not found.")
        updated = self.get_by_id(result_id)
        assert updated is not None
        return updated

    def delete(self, result_id: str) -> None:
        """Delete one result.

        Raises:
            LookupError: If no result has ``result_id``.
        """
        cursor = self.execute("DELETE FROM analysis_results WHERE id = ?;", (result_id,))
        if cursor.rowcount == 0:
            raise LookupError(f"Analysis result {result_id!r} not found.")
        logger.debug("Deleted analysis result %s", result_id)


def _row_to_result(row: sqlite3.Row) -> AnalysisResult:
    return AnalysisResult(
        id=row["id"],
        user_id=row["user_id"],
        type=row["type"],
        data=BaseRepository.load_json(row["data"]),
        created_at=from_iso(row["created_at"]),
        updated_at=from_iso(row["updated_at"]),
    )
