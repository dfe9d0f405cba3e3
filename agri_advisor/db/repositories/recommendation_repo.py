"""
Repository for persisted recommendation sets and their items.

Confidence is written as exact decimal text (``0.8`` → ``"0.8"``) and read
back as ``Decimal``. Items reference their set only by ``set_id``; there is
no foreign key, so ``delete_set()`` removes the items itself.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from decimal import Decimal
from typing import Optional

from agri_advisor.db.repositories.base import BaseRepository
from agri_advisor.models.recommendation import (
    RecommendationCandidate,
    RecommendationItem,
    RecommendationSet,
)
from agri_advisor.taxonomy.recommendation_taxonomy import (
    RecommendationSource,
    RecommendationType,
)
from agri_advisor.utils.time_utils import from_iso, to_iso, utcnow

logger = logging.getLogger(__name__)


class RecommendationRepository(BaseRepository):
    """Read/write access to ``recommendation_sets`` and ``recommendation_items``."""

    def create_set(
        self,
        user_id: str,
        summary: str,
        created_at: Optional[datetime] = None,
    ) -> RecommendationSet:
        """Insert a set header and return it."""
        rec_set = RecommendationSet(
            id=self.new_id(),
            user_id=user_id,
            summary=summary,
            created_at=created_at or utcnow(),
        )
        self.execute(
            """
            INSERT INTO recommendation_sets (id, user_id, summary, created_at)
            VALUES (?, ?, ?, ?);
            """,
            (rec_set.id, rec_set.user_id, rec_set.summary, to_iso(rec_set.created_at)),
        )
        return rec_set

    def create_item(
        self,
        set_id: str,
        candidate: RecommendationCandidate,
        position: int = 0,
    ) -> RecommendationItem:
        """Insert one ranked candidate as an item of ``set_id``.

        Args:
            set_id: Owning set.
            candidate: Engine candidate to store.
            position: Rank within the set (0 = first).
        """
        item = RecommendationItem(
            id=self.new_id(),
            set_id=set_id,
            type=candidate.type,
            title=candidate.title,
            description=candidate.description,
            confidence=Decimal(str(candidate.confidence)),
            data=candidate.data,
            source=candidate.source,
            created_at=candidate.created_at,
        )
        self.execute(
            """
            INSERT INTO recommendation_items (
                id, set_id, position, type, title, description,
                confidence, data, source, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                item.id,
                item.set_id,
                position,
                item.type.value,
                item.title,
                item.description,
                str(item.confidence),
                self.dump_json(item.data),
                item.source.value,
                to_iso(item.created_at),
            ),
        )
        return item

    def get_sets(self, user_id: str) -> list[RecommendationSet]:
        """Sets owned by ``user_id``, newest first."""
        rows = self.fetchall(
            """
            SELECT * FROM recommendation_sets
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC;
            """,
            (user_id,),
        )
        return [_row_to_set(r) for r in rows]

    def get_set(self, set_id: str) -> Optional[RecommendationSet]:
        row = self.fetchone("SELECT * FROM recommendation_sets WHERE id = ?;", (set_id,))
        return _row_to_set(row) if row else None

    def get_items(self, set_id: str) -> list[RecommendationItem]:
        """Items of ``set_id`` in rank order; unknown set → ``[]``."""
        rows = self.fetchall(
            """
            SELECT * FROM recommendation_items
            WHERE set_id = ?
            ORDER BY position ASC, rowid ASC;
            """,
            (set_id,),
        )
        return [_row_to_item(r) for r in rows]

    def delete_set(self, set_id: str) -> int:
        """Delete a set, then all of its items.

        Returns:
            Number of item rows removed. Unknown ids are a no-op returning 0.
        """
        self.execute("DELETE FROM recommendation_sets WHERE id = ?;", (set_id,))
        cursor = self.execute("DELETE FROM recommendation_items WHERE set_id = ?;", (set_id,))
        logger.debug("Deleted recommendation set %s with %d item(s)", set_id, cursor.rowcount)
        return cursor.rowcount


def _row_to_set(row: sqlite3.Row) -> RecommendationSet:
    return RecommendationSet(
        id=row["id"],
        user_id=row["user_id"],
        summary=row["summary"],
        created_at=from_iso(row["created_at"]),
    )


def _row_to_item(row: sqlite3.Row) -> RecommendationItem:
    return RecommendationItem(
        id=row["id"],
        set_id=row["set_id"],
        type=RecommendationType(row["type"]),
        title=row["title"],
        description=row["description"],
        confidence=Decimal(row["confidence"]),
        data=BaseRepository.load_json(row["data"]),
        source=RecommendationSource(row["source"]),
        created_at=from_iso(row["created_at"]),
    )
