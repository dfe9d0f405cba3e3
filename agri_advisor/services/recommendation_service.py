"""
Recommendation service: the persistence adapter around the pure engine.

``generate_for_user()`` reads a user's analysis results and chat history from
the store, runs ``engine.generate()``, and writes the outcome as one
recommendation set followed by its items, one insert at a time. Nothing wraps
the set and its items in a single unit of work: if an item insert fails, the
set and any earlier items stay behind and the error reaches the caller.

Store errors are logged here and re-raised unchanged. Lookups of unknown set
ids return ``None`` (or an empty result) rather than raising.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from agri_advisor.config import EngineConfig
from agri_advisor.db.repositories.analysis_repo import AnalysisResultRepository
from agri_advisor.db.repositories.chat_repo import ChatRepository
from agri_advisor.db.repositories.recommendation_repo import RecommendationRepository
from agri_advisor.models.chat import ChatMessage
from agri_advisor.models.recommendation import RecommendationSetView
from agri_advisor.recommendations.engine import generate
from agri_advisor.taxonomy.recommendation_taxonomy import Season
from agri_advisor.utils.time_utils import Clock, utcnow

logger = logging.getLogger(__name__)

# Messages fetched per conversation page.
_MESSAGE_PAGE_SIZE = 50


class RecommendationService:
    """Generate, list, fetch, and delete stored recommendation sets.

    Args:
        conn: Open connection; the caller owns its lifetime.
        config: Engine settings; defaults to ``EngineConfig()``.
        clock: Timestamp source handed to the engine.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        config: Optional[EngineConfig] = None,
        clock: Clock = utcnow,
    ) -> None:
        self.config = config or EngineConfig()
        self.clock = clock
        self.analyses = AnalysisResultRepository(conn)
        self.chats = ChatRepository(conn)
        self.recommendations = RecommendationRepository(conn)

    def generate_for_user(
        self,
        user_id: str,
        season: Optional[Season | str] = None,
    ) -> RecommendationSetView:
        """Generate and store a new recommendation set for ``user_id``.

        Raises:
            ValueError: If ``season`` is not a valid season.
            sqlite3.Error: If any read or write against the store fails.
        """
        season = Season(season) if season is not None else None

        try:
            analysis_results = self.analyses.get_by_user(user_id)
            chat_history = self._load_chat_history(user_id)
        except sqlite3.Error:
            logger.exception("Failed to load inputs for user_id=%s", user_id)
            raise

        generated = generate(
            user_id,
            analysis_results,
            chat_history,
            season,
            config=self.config,
            clock=self.clock,
        )

        try:
            rec_set = self.recommendations.create_set(
                user_id, generated.summary, created_at=generated.created_at
            )
            items = [
                self.recommendations.create_item(rec_set.id, candidate, position=i)
                for i, candidate in enumerate(generated.recommendations)
            ]
        except sqlite3.Error:
            logger.exception("Failed to store recommendation set for user_id=%s", user_id)
            raise

        logger.info(
            "Stored recommendation set %s for user_id=%s with %d item(s) "
            "(from %d analyses, %d chat messages)",
            rec_set.id, user_id, len(items), len(analysis_results), len(chat_history),
            extra={"user_id": user_id, "set_id": rec_set.id},
        )
        return RecommendationSetView.from_rows(rec_set, items)

    def list_for_user(self, user_id: str) -> list[RecommendationSetView]:
        """All stored sets of ``user_id`` with their items, newest first."""
        try:
            return [
                RecommendationSetView.from_rows(s, self.recommendations.get_items(s.id))
                for s in self.recommendations.get_sets(user_id)
            ]
        except sqlite3.Error:
            logger.exception("Failed to list recommendation sets for user_id=%s", user_id)
            raise

    def get_set(self, set_id: str) -> Optional[RecommendationSetView]:
        """One stored set with its items, or ``None`` if it does not exist."""
        try:
            rec_set = self.recommendations.get_set(set_id)
            if rec_set is None:
                return None
            return RecommendationSetView.from_rows(
                rec_set, self.recommendations.get_items(set_id)
            )
        except sqlite3.Error:
            logger.exception("Failed to read recommendation set %s", set_id)
            raise

    def delete_set(self, set_id: str) -> None:
        """Delete a set and its items. Unknown ids are a no-op."""
        try:
            self.recommendations.delete_set(set_id)
        except sqlite3.Error:
            logger.exception("Failed to delete recommendation set %s", set_id)
            raise

    def _load_chat_history(self, user_id: str) -> list[ChatMessage]:
        """Every message of every conversation owned by ``user_id``.

        Conversations are read one after another; messages are paged until a
        short page signals the end.
        """
        messages: list[ChatMessage] = []
        for conversation in self.chats.get_conversations(user_id):
            assert conversation.id is not None
            skip = 0
            while True:
                page = self.chats.get_messages(
                    conversation.id, limit=_MESSAGE_PAGE_SIZE, skip=skip
                )
                messages.extend(page)
                if len(page) < _MESSAGE_PAGE_SIZE:
                    break
                skip += _MESSAGE_PAGE_SIZE
        return messages
